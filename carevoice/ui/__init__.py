"""Terminal user interface."""

from .voice_screen import VoiceScreen

__all__ = ["VoiceScreen"]
