"""Session-related data models."""

from dataclasses import dataclass
from enum import Enum


class MicState(Enum):
    """Phase of the voice session; exactly one at any time."""
    IDLE = "idle"
    LISTENING = "listening"
    PROCESSING = "processing"


class NoticeLevel(Enum):
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """Human-readable message surfaced to the user."""
    title: str
    description: str
    level: NoticeLevel = NoticeLevel.INFO
