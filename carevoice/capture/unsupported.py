"""Capture backend for platforms without speech recognition."""

from .base import AbstractSpeechCapture, CaptureError, CaptureSink


class UnsupportedCapture(AbstractSpeechCapture):
    """Reports speech capture as unavailable so the session runs text-only."""

    def is_supported(self) -> bool:
        return False

    async def request_permission(self) -> bool:
        return False

    def start(self, language: str, sink: CaptureSink) -> None:
        raise CaptureError("Speech recognition is not supported on this platform")

    def stop(self) -> None:
        pass
