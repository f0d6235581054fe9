"""Data models for the CareVoice application."""

from .language import SupportedLanguage, localize
from .profile import UserProfile, HealthReport, HealthContext
from .responses import (
    ActionType,
    VoiceAction,
    VoiceResponse,
    QueryRequest,
    QueryOutcome,
    AnswerSource,
    FailureKind,
)
from .session import MicState, Notice, NoticeLevel
from .events import SessionEvent, SessionEventType, CaptureErrorReason

__all__ = [
    "SupportedLanguage",
    "localize",
    "UserProfile",
    "HealthReport",
    "HealthContext",
    # Query models
    "ActionType",
    "VoiceAction",
    "VoiceResponse",
    "QueryRequest",
    "QueryOutcome",
    "AnswerSource",
    "FailureKind",
    # Session models
    "MicState",
    "Notice",
    "NoticeLevel",
    "SessionEvent",
    "SessionEventType",
    "CaptureErrorReason",
]
