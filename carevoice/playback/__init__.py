"""Speech playback backends."""

from .base import AbstractSpeechPlayback
from .silent import SilentPlayback

__all__ = [
    "AbstractSpeechPlayback",
    "SilentPlayback",
]
