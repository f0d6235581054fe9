"""Playback backend used when speech output is disabled."""

import logging

from .base import AbstractSpeechPlayback

logger = logging.getLogger(__name__)


class SilentPlayback(AbstractSpeechPlayback):
    """Logs answers instead of speaking them."""

    def speak(self, text: str, language: str) -> None:
        logger.debug(f"Speech output disabled, not speaking ({language}): {text[:50]}...")

    def cancel(self) -> None:
        pass
