"""Protocol for query responders."""

from typing import Protocol

from ..models.responses import QueryRequest, VoiceResponse


class QueryResponder(Protocol):
    """Protocol for services that answer natural-language health queries."""

    async def answer(self, request: QueryRequest) -> VoiceResponse:
        """Answer a query.

        Raises:
            ResponderError: If no well-formed answer could be obtained
        """
        ...
