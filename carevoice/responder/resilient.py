"""Responder that prefers the remote service and falls back to canned answers."""

import logging
from typing import Optional

from ..models.responses import AnswerSource, FailureKind, QueryOutcome, QueryRequest
from .base import QueryResponder
from .errors import ResponderPayloadError, ResponderUnavailableError
from .fallback import FallbackResponder

logger = logging.getLogger(__name__)


class ResilientResponder:
    """Answers every query, using the fallback whenever the remote responder fails.

    The failure kind is logged and recorded on the QueryOutcome; callers never
    see an exception.
    """

    def __init__(self, remote: Optional[QueryResponder], fallback: Optional[FallbackResponder] = None):
        self.remote = remote
        self.fallback = fallback or FallbackResponder()

    async def answer(self, request: QueryRequest) -> QueryOutcome:
        if self.remote is None:
            return QueryOutcome(self.fallback.respond(request), AnswerSource.FALLBACK)

        try:
            response = await self.remote.answer(request)
            logger.info(f"Remote answer received ({len(response.actions)} actions)")
            return QueryOutcome(response, AnswerSource.REMOTE)
        except ResponderUnavailableError as e:
            logger.warning(f"Backend unavailable, using fallback answer: {e}")
            failure = FailureKind.UNAVAILABLE
        except ResponderPayloadError as e:
            logger.warning(f"Backend answer malformed, using fallback answer: {e}")
            failure = FailureKind.MALFORMED
        except Exception:
            logger.exception("Unexpected responder failure, using fallback answer")
            failure = FailureKind.UNEXPECTED

        return QueryOutcome(self.fallback.respond(request), AnswerSource.FALLBACK, failure)
