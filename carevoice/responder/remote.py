"""Remote query responder that posts voice queries to the assistant backend."""

import asyncio
import json
import logging
from typing import Dict, Optional

import aiohttp
from pydantic import ValidationError

from ..models.responses import QueryRequest, VoiceResponse
from .errors import ResponderPayloadError, ResponderUnavailableError

logger = logging.getLogger(__name__)


class RemoteQueryResponder:
    """Sends queries to the backend voice endpoint and validates its answers."""

    def __init__(self, url: str, timeout_seconds: float = 10.0, headers: Optional[Dict[str, str]] = None):
        """Initialize remote responder.

        Args:
            url: Voice query endpoint (e.g. http://localhost:8000/api/voice/query)
            timeout_seconds: Total time allowed for one request
            headers: Extra HTTP headers sent with every request
        """
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.headers = {"Content-Type": "application/json", **(headers or {})}

        logger.info(f"RemoteQueryResponder initialized with url: {url}")

    async def answer(self, request: QueryRequest) -> VoiceResponse:
        """Post the query and return the backend's answer.

        Raises:
            ResponderUnavailableError: On connection failure, timeout or non-2xx status
            ResponderPayloadError: If the body is not a valid VoiceResponse
        """
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.url, headers=self.headers, json=request.to_payload()) as response:
                    if not 200 <= response.status < 300:
                        error_text = await response.text()
                        raise ResponderUnavailableError(
                            f"Voice query API error: {response.status} - {error_text[:200]}")
                    try:
                        data = await response.json(content_type=None)
                    except (json.JSONDecodeError, UnicodeDecodeError) as e:
                        raise ResponderPayloadError(f"Voice query API returned invalid JSON: {e}") from e
        except aiohttp.ClientError as e:
            raise ResponderUnavailableError(f"Voice query API unreachable: {e}") from e
        except asyncio.TimeoutError as e:
            raise ResponderUnavailableError(
                f"Voice query API timed out after {self.timeout_seconds}s") from e

        try:
            return VoiceResponse.model_validate(data)
        except ValidationError as e:
            raise ResponderPayloadError(f"Voice query API returned malformed answer: {e}") from e
