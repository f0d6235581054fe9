"""Abstract base class for speech playback backends."""

from abc import ABC, abstractmethod


class AbstractSpeechPlayback(ABC):
    """Fire-and-forget text-to-speech.

    A new speak() call cancels any utterance that has not finished yet.
    """

    @abstractmethod
    def speak(self, text: str, language: str) -> None:
        """Start speaking text in the given language; returns immediately."""
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Stop the current utterance and drop queued ones."""
        pass

    def shutdown(self) -> None:
        """Release synthesizer resources."""
        self.cancel()
