"""Service layer for CareVoice."""

from .assistant_service import VoiceAssistantService

__all__ = ["VoiceAssistantService"]
