"""Offline text-to-speech playback with pyttsx3."""

import logging
import queue
import threading
from typing import Optional, Tuple

import pyttsx3

from .base import AbstractSpeechPlayback

logger = logging.getLogger(__name__)


class Pyttsx3Playback(AbstractSpeechPlayback):
    """Speaks answers on a dedicated thread that owns the pyttsx3 engine.

    Every speak() or cancel() bumps a generation counter; queued utterances
    from an older generation are skipped.
    """

    def __init__(self, rate_scale: float = 0.9, volume: float = 1.0):
        """Initialize playback.

        Args:
            rate_scale: Multiplier applied to the engine's default speaking rate
            volume: Output volume (0.0 to 1.0)
        """
        self.rate_scale = rate_scale
        self.volume = volume

        self._queue: "queue.Queue[Optional[Tuple[int, str, str]]]" = queue.Queue()
        self._generation = 0
        self._lock = threading.Lock()
        self._engine = None
        self._unavailable = False
        self._thread: Optional[threading.Thread] = None

    def speak(self, text: str, language: str) -> None:
        if self._unavailable:
            return
        with self._lock:
            self._generation += 1
            generation = self._generation
        self._stop_engine()
        self._ensure_thread()
        self._queue.put((generation, text, language))

    def cancel(self) -> None:
        with self._lock:
            self._generation += 1
        self._stop_engine()

    def shutdown(self) -> None:
        self.cancel()
        if self._thread and self._thread.is_alive():
            self._queue.put(None)
            self._thread.join(timeout=2.0)
            if self._thread.is_alive():
                logger.warning("Speech playback thread did not stop cleanly")
        self._thread = None

    def _ensure_thread(self) -> None:
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(target=self._speak_loop, daemon=True)
            self._thread.name = "SpeechPlaybackThread"
            self._thread.start()

    def _stop_engine(self) -> None:
        engine = self._engine
        if engine is not None:
            engine.stop()

    def _init_engine(self) -> bool:
        try:
            engine = pyttsx3.init()
        except (RuntimeError, OSError, ImportError) as e:
            logger.error(f"Speech synthesis unavailable: {e}")
            self._unavailable = True
            return False
        engine.setProperty('rate', int(engine.getProperty('rate') * self.rate_scale))
        engine.setProperty('volume', self.volume)
        self._engine = engine
        logger.info("pyttsx3 speech engine initialized")
        return True

    def _select_voice(self, language: str) -> None:
        """Pick the first installed voice advertising the language, if any."""
        wanted = language.lower()
        short = wanted.split('-')[0]
        for voice in self._engine.getProperty('voices'):
            tags = [
                tag.decode('utf-8', errors='ignore') if isinstance(tag, bytes) else str(tag)
                for tag in (getattr(voice, 'languages', None) or [])
            ]
            haystack = " ".join(tags + [voice.id]).lower().replace('_', '-')
            if wanted in haystack or f"{short}-" in haystack or haystack.endswith(short):
                self._engine.setProperty('voice', voice.id)
                return
        logger.debug(f"No installed voice for {language}, using engine default")

    def _speak_loop(self) -> None:
        """Internal method: synthesis loop in background thread."""
        if self._engine is None and not self._init_engine():
            return
        while True:
            item = self._queue.get()
            if item is None:
                break
            generation, text, language = item
            if generation != self._generation:
                continue
            self._select_voice(language)
            self._engine.say(text)
            self._engine.runAndWait()
