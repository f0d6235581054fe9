"""Microphone capture streamed to Google Speech-to-Text with interim results."""

import asyncio
import logging
import time
from pathlib import Path
from threading import Thread, Event
from typing import Callable, Iterator, Optional

import numpy as np
import pyaudio
from google.api_core import exceptions as gax_exceptions
from google.cloud import speech
from google.oauth2 import service_account

from ..models.events import (
    CaptureErrorReason,
    capture_end,
    capture_error,
    final_result,
    interim_result,
)
from .base import AbstractSpeechCapture, CaptureError, CaptureSink

logger = logging.getLogger(__name__)


class GoogleStreamingCapture(AbstractSpeechCapture):
    """Continuous microphone recognition in a background thread."""

    def __init__(
        self,
        credentials_path: Optional[str],
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
        level_callback: Optional[Callable[[float], None]] = None,
    ):
        """Initialize streaming capture.

        Args:
            credentials_path: Path to Google Cloud service account JSON file
            sample_rate: Audio sample rate (16kHz recommended for speech)
            chunk_size: Size of each audio chunk in samples
            channels: Number of audio channels (1 for mono)
            level_callback: Receives the peak input level (0..1) per chunk
        """
        self.credentials_path = credentials_path
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.level_callback = level_callback

        self.capture_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.total_chunks = 0

    @property
    def is_active(self) -> bool:
        return self.capture_thread is not None and self.capture_thread.is_alive()

    def is_supported(self) -> bool:
        if not self.credentials_path or not Path(self.credentials_path).exists():
            logger.info("Speech capture unsupported: Google credentials not found")
            return False
        pyaudio_instance = pyaudio.PyAudio()
        try:
            pyaudio_instance.get_default_input_device_info()
            return True
        except OSError as e:
            logger.info(f"Speech capture unsupported: no input device ({e})")
            return False
        finally:
            pyaudio_instance.terminate()

    async def request_permission(self) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._probe_input_device)

    def _probe_input_device(self) -> bool:
        """Open and close the input device; refusal means no permission."""
        pyaudio_instance = pyaudio.PyAudio()
        try:
            stream = pyaudio_instance.open(
                format=pyaudio.paInt16,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.chunk_size,
            )
            stream.close()
            return True
        except OSError as e:
            logger.warning(f"Microphone access refused: {e}")
            return False
        finally:
            pyaudio_instance.terminate()

    def start(self, language: str, sink: CaptureSink) -> None:
        if self.is_active:
            if not self.stop_event.is_set():
                raise CaptureError("Speech capture already in progress")
            # The previous stream is still draining; it finishes on its own event.
            logger.info("Superseding speech capture that is still stopping")

        logger.info(f"Starting speech capture: language={language}")
        self.stop_event = Event()
        self.total_chunks = 0
        self.capture_thread = Thread(
            target=self._recognize, args=(language, sink, self.stop_event), daemon=True)
        self.capture_thread.name = "SpeechCaptureThread"
        self.capture_thread.start()

    def stop(self) -> None:
        if not self.is_active:
            logger.debug("No speech capture in progress")
            return
        logger.info("Stopping speech capture")
        self.stop_event.set()

    def _audio_chunks(self, stream, stop_event: Optional[Event] = None) -> Iterator[bytes]:
        stop_event = stop_event or self.stop_event
        while not stop_event.is_set():
            chunk = stream.read(self.chunk_size, exception_on_overflow=False)
            self.total_chunks += 1
            if self.level_callback:
                samples = np.frombuffer(chunk, dtype=np.int16)
                peak = float(np.abs(samples.astype(np.int32)).max()) / 32768.0 if samples.size else 0.0
                self.level_callback(peak)
            yield chunk

    def _recognize(self, language: str, sink: CaptureSink, stop_event: Optional[Event] = None) -> None:
        """Internal method: streaming recognition loop in background thread."""
        stop_event = stop_event or self.stop_event
        pyaudio_instance = None
        stream = None
        start_time = time.time()
        try:
            try:
                pyaudio_instance = pyaudio.PyAudio()
                stream = pyaudio_instance.open(
                    format=pyaudio.paInt16,
                    channels=self.channels,
                    rate=self.sample_rate,
                    input=True,
                    frames_per_buffer=self.chunk_size,
                )
            except OSError as e:
                logger.error(f"Could not open microphone: {e}")
                sink(capture_error(CaptureErrorReason.PERMISSION_DENIED))
                return

            credentials = service_account.Credentials.from_service_account_file(self.credentials_path)
            client = speech.SpeechClient(credentials=credentials)
            streaming_config = speech.StreamingRecognitionConfig(
                config=speech.RecognitionConfig(
                    encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
                    sample_rate_hertz=self.sample_rate,
                    audio_channel_count=self.channels,
                    language_code=language,
                    enable_automatic_punctuation=True,
                ),
                interim_results=True,
            )
            requests = (
                speech.StreamingRecognizeRequest(audio_content=chunk)
                for chunk in self._audio_chunks(stream, stop_event)
            )

            heard_speech = False
            for response in client.streaming_recognize(config=streaming_config, requests=requests):
                for result in response.results:
                    if not result.alternatives:
                        continue
                    transcript = result.alternatives[0].transcript
                    heard_speech = True
                    if result.is_final:
                        logger.debug(f"Final transcript: '{transcript}'")
                        sink(final_result(transcript))
                    else:
                        sink(interim_result(transcript))

            if not heard_speech and not stop_event.is_set():
                sink(capture_error(CaptureErrorReason.NO_SPEECH))
        except gax_exceptions.GoogleAPICallError as e:
            logger.error(f"Speech API call error: {e}")
            sink(capture_error(CaptureErrorReason.OTHER))
        except (OSError, ValueError) as e:
            logger.error(f"Speech capture failed: {e}")
            sink(capture_error(CaptureErrorReason.OTHER))
        finally:
            if stream:
                stream.stop_stream()
                stream.close()
            if pyaudio_instance:
                pyaudio_instance.terminate()
            logger.info(f"Speech capture ended after {time.time() - start_time:.1f}s, "
                        f"{self.total_chunks} chunks")
            sink(capture_end())
