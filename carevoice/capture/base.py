"""Abstract base class for speech capture backends."""

from abc import ABC, abstractmethod
from typing import Callable
import logging

from ..models.events import SessionEvent

logger = logging.getLogger(__name__)

CaptureSink = Callable[[SessionEvent], None]


class CaptureError(Exception):
    """Capture could not be started."""


class AbstractSpeechCapture(ABC):
    """Continuous, language-tagged speech-to-text stream.

    Implementations deliver interim, final, error and end events to the sink
    given to start(). After stop() is requested exactly one end event follows,
    and start() may be called again before that end event arrives.
    The sink may be called from any thread.
    """

    @abstractmethod
    def is_supported(self) -> bool:
        """Return True if speech capture can work on this platform."""
        pass

    @abstractmethod
    async def request_permission(self) -> bool:
        """Ask the platform for microphone access.

        Returns:
            True if access was granted, False if refused
        """
        pass

    @abstractmethod
    def start(self, language: str, sink: CaptureSink) -> None:
        """Start recognizing speech in the given language.

        Raises:
            CaptureError: If capture could not be started
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Request capture to stop; returns without waiting for the end event."""
        pass
