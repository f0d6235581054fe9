"""Wires configuration into capture, playback and responder backends."""

import asyncio
import logging
from typing import Callable, Optional

from ..capture.base import AbstractSpeechCapture
from ..capture.unsupported import UnsupportedCapture
from ..config import CareVoiceConfig
from ..models.language import SupportedLanguage
from ..playback.base import AbstractSpeechPlayback
from ..playback.silent import SilentPlayback
from ..responder.fallback import FallbackResponder
from ..responder.remote import RemoteQueryResponder
from ..responder.resilient import ResilientResponder
from ..session.voice_session import VoiceSession

logger = logging.getLogger(__name__)


class VoiceAssistantService:
    """Owns the long-lived backends and hands out voice sessions."""

    def __init__(self, config: CareVoiceConfig):
        """Initialize voice assistant service.

        Args:
            config: Application configuration
        """
        self.config = config

        logger.info("Initializing VoiceAssistantService...")
        self.context = config.get_health_context()
        self.capture = self._create_capture()
        self.playback = self._create_playback()
        self.responder = self._create_responder()
        logger.info("VoiceAssistantService ready")

    def _create_capture(self) -> AbstractSpeechCapture:
        backend = self.config.get('capture.backend', 'google')
        if backend == 'none':
            logger.info("Speech capture disabled by configuration")
            return UnsupportedCapture()
        if backend != 'google':
            raise ValueError(f"Unknown capture backend: {backend}")

        from ..capture.google_streaming import GoogleStreamingCapture
        return GoogleStreamingCapture(
            credentials_path=self.config.get('capture.credentials_path'),
            sample_rate=self.config.get('capture.sample_rate', 16000),
            chunk_size=self.config.get('capture.chunk_size', 1024),
            channels=self.config.get('capture.channels', 1),
        )

    def _create_playback(self) -> AbstractSpeechPlayback:
        backend = self.config.get('playback.backend', 'pyttsx3')
        if backend == 'none':
            logger.info("Speech playback disabled by configuration")
            return SilentPlayback()
        if backend != 'pyttsx3':
            raise ValueError(f"Unknown playback backend: {backend}")

        from ..playback.pyttsx3_playback import Pyttsx3Playback
        return Pyttsx3Playback(
            rate_scale=self.config.get('playback.rate_scale', 0.9),
            volume=self.config.get('playback.volume', 1.0),
        )

    def _create_responder(self) -> ResilientResponder:
        url = self.config.get_responder_url()
        if not url:
            logger.info("No responder URL configured, answering from local fallback only")
            return ResilientResponder(None, FallbackResponder())
        timeout = float(self.config.get('responder.timeout_seconds', 10))
        logger.info(f"Remote responder: {url} (timeout {timeout}s)")
        return ResilientResponder(RemoteQueryResponder(url, timeout_seconds=timeout), FallbackResponder())

    def attach_level_meter(self, callback: Callable[[float], None]) -> None:
        """Route microphone peak levels to callback, when the capture backend reports them."""
        if hasattr(self.capture, "level_callback"):
            self.capture.level_callback = callback

    def create_session(
        self,
        language: Optional[SupportedLanguage] = None,
        on_back: Optional[Callable[[], None]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> VoiceSession:
        """Create a voice session bound to the running loop."""
        return VoiceSession(
            capture=self.capture,
            playback=self.playback,
            responder=self.responder,
            context=self.context,
            language=language or self.config.get_language(),
            silence_timeout=self.config.get_silence_timeout(),
            loop=loop,
            on_back=on_back,
        )

    def shutdown(self) -> None:
        logger.info("Shutting down VoiceAssistantService")
        self.capture.stop()
        self.playback.shutdown()
