"""Voice session state machine and its publishing helpers."""

from .voice_session import VoiceSession, DEFAULT_SILENCE_TIMEOUT_SECONDS
from .publisher import (
    SessionPublisher,
    TOPIC_STATE,
    TOPIC_TRANSCRIPT,
    TOPIC_UTTERANCE,
    TOPIC_RESPONSE,
    TOPIC_NOTICE,
    TOPIC_LANGUAGE,
)
from .actions import acknowledge_action

__all__ = [
    "VoiceSession",
    "DEFAULT_SILENCE_TIMEOUT_SECONDS",
    "SessionPublisher",
    "TOPIC_STATE",
    "TOPIC_TRANSCRIPT",
    "TOPIC_UTTERANCE",
    "TOPIC_RESPONSE",
    "TOPIC_NOTICE",
    "TOPIC_LANGUAGE",
    "acknowledge_action",
]
