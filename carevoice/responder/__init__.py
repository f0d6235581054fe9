"""Query responders for the voice assistant."""

from .base import QueryResponder
from .errors import ResponderError, ResponderUnavailableError, ResponderPayloadError
from .fallback import FallbackResponder
from .remote import RemoteQueryResponder
from .resilient import ResilientResponder

__all__ = [
    "QueryResponder",
    "ResponderError",
    "ResponderUnavailableError",
    "ResponderPayloadError",
    "FallbackResponder",
    "RemoteQueryResponder",
    "ResilientResponder",
]
