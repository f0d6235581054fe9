"""Event models consumed by the voice session's dispatch entry point."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .language import SupportedLanguage
from .responses import AnswerSource, VoiceResponse


class SessionEventType(Enum):
    """Every external stimulus the session reacts to."""
    # User controls
    MIC_ACTIVATE = "mic_activate"
    MIC_DEACTIVATE = "mic_deactivate"
    PERMISSION_RETRY = "permission_retry"
    LANGUAGE_SELECTED = "language_selected"
    TEXT_ENTRY_OPEN = "text_entry_open"
    TEXT_ENTRY_CLOSE = "text_entry_close"
    TEXT_SUBMITTED = "text_submitted"
    ACTION_SELECTED = "action_selected"
    REPLAY = "replay"
    NAVIGATE_BACK = "navigate_back"

    # Platform permission
    PERMISSION_GRANTED = "permission_granted"
    PERMISSION_DENIED = "permission_denied"

    # Speech capture
    CAPTURE_INTERIM = "capture_interim"
    CAPTURE_FINAL = "capture_final"
    CAPTURE_ERROR = "capture_error"
    CAPTURE_END = "capture_end"

    # Internal
    SILENCE_TIMEOUT = "silence_timeout"
    RESPONSE_READY = "response_ready"


class CaptureErrorReason(Enum):
    """Why speech capture failed."""
    PERMISSION_DENIED = "permission-denied"
    NO_SPEECH = "no-speech"
    OTHER = "other"


@dataclass(frozen=True)
class SessionEvent:
    """One event delivered to VoiceSession.dispatch."""
    type: SessionEventType
    text: str = ""
    reason: Optional[CaptureErrorReason] = None
    language: Optional[SupportedLanguage] = None
    action_id: Optional[str] = None
    response: Optional[VoiceResponse] = None
    source: Optional[AnswerSource] = None
    generation: Optional[int] = None  # capture handle or timer that produced the event
    token: Optional[int] = None  # query the response belongs to


def interim_result(text: str) -> SessionEvent:
    return SessionEvent(SessionEventType.CAPTURE_INTERIM, text=text)


def final_result(text: str) -> SessionEvent:
    return SessionEvent(SessionEventType.CAPTURE_FINAL, text=text)


def capture_error(reason: CaptureErrorReason) -> SessionEvent:
    return SessionEvent(SessionEventType.CAPTURE_ERROR, reason=reason)


def capture_end() -> SessionEvent:
    return SessionEvent(SessionEventType.CAPTURE_END)
