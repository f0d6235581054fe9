"""Speech capture backends."""

from .base import AbstractSpeechCapture, CaptureError, CaptureSink
from .unsupported import UnsupportedCapture

__all__ = [
    "AbstractSpeechCapture",
    "CaptureError",
    "CaptureSink",
    "UnsupportedCapture",
]
