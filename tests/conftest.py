"""Pytest configuration and fixtures for CareVoice tests."""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import pytest
import yaml

from carevoice.capture.base import AbstractSpeechCapture, CaptureError, CaptureSink
from carevoice.models.events import (
    CaptureErrorReason,
    capture_end,
    capture_error,
    final_result,
    interim_result,
)
from carevoice.models.profile import HealthContext, HealthReport, UserProfile
from carevoice.playback.base import AbstractSpeechPlayback
from carevoice.responder.resilient import ResilientResponder
from carevoice.session.voice_session import VoiceSession


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without hardware or network")
    config.addinivalue_line("markers", "integration: tests that run a local HTTP server")


class FakeCapture(AbstractSpeechCapture):
    """In-memory capture backend; tests push recognizer events through emit_*()."""

    def __init__(self, supported: bool = True, grant: bool = True, end_on_stop: bool = True):
        self.supported = supported
        self.grant = grant
        self.end_on_stop = end_on_stop
        self.fail_start = False
        self.permission_requests = 0
        self.starts: List[Tuple[str, CaptureSink]] = []
        self.stop_calls = 0

    @property
    def sink(self) -> CaptureSink:
        return self.starts[-1][1]

    def is_supported(self) -> bool:
        return self.supported

    async def request_permission(self) -> bool:
        self.permission_requests += 1
        return self.grant

    def start(self, language: str, sink: CaptureSink) -> None:
        if self.fail_start:
            raise CaptureError("device busy")
        self.starts.append((language, sink))

    def stop(self) -> None:
        self.stop_calls += 1
        if self.end_on_stop and self.starts:
            self.sink(capture_end())

    def emit_interim(self, text: str) -> None:
        self.sink(interim_result(text))

    def emit_final(self, text: str) -> None:
        self.sink(final_result(text))

    def emit_error(self, reason: CaptureErrorReason) -> None:
        self.sink(capture_error(reason))

    def emit_end(self) -> None:
        self.sink(capture_end())


class FakePlayback(AbstractSpeechPlayback):
    """Records what would have been spoken."""

    def __init__(self):
        self.spoken: List[Tuple[str, str]] = []
        self.cancel_calls = 0

    def speak(self, text: str, language: str) -> None:
        self.spoken.append((text, language))

    def cancel(self) -> None:
        self.cancel_calls += 1


async def settle(rounds: int = 5) -> None:
    """Let posted events and spawned tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def health_context():
    """Profile and reports used throughout the tests."""
    return HealthContext(
        profile=UserProfile(
            name="John Doe",
            age=45,
            conditions=["diabetes", "hypertension"],
            medications=["Metformin", "Lisinopril"],
        ),
        reports=[
            HealthReport(type="Blood Sugar", value="145 mg/dL", date="2024-01-15", status="elevated"),
            HealthReport(type="Blood Pressure", value="138/88", date="2024-01-14", status="high"),
            HealthReport(type="HbA1c", value="7.2%", date="2024-01-10", status="needs_improvement"),
        ],
    )


@pytest.fixture
def fake_capture():
    return FakeCapture()


@pytest.fixture
def fake_playback():
    return FakePlayback()


@pytest.fixture
def make_session(fake_capture, fake_playback, health_context):
    """Factory for sessions; call it inside an async test so the running loop is picked up."""
    def _make(responder: Optional[ResilientResponder] = None, **kwargs) -> VoiceSession:
        kwargs.setdefault("silence_timeout", 0.05)
        return VoiceSession(
            capture=fake_capture,
            playback=fake_playback,
            responder=responder or ResilientResponder(None),
            context=health_context,
            **kwargs,
        )
    return _make


@pytest.fixture
def config_data():
    """Configuration mapping written by config_file."""
    return {
        "voice": {"default_language": "hi-IN", "silence_timeout_seconds": 2.5},
        "capture": {"backend": "none", "credentials_path": "creds/google.json"},
        "playback": {"backend": "none"},
        "responder": {"url": "", "timeout_seconds": 5},
        "profile": {
            "name": "John Doe",
            "age": 45,
            "conditions": ["diabetes"],
            "medications": ["Metformin"],
        },
        "reports": [
            {"type": "Blood Sugar", "value": "145 mg/dL", "date": "2024-01-15", "status": "elevated"},
        ],
        "logging": {"level": "DEBUG", "file_path": "logs/carevoice.log", "console_output": False},
    }


@pytest.fixture
def config_file(tmp_path, config_data):
    """Write config_data to a temporary YAML file and return its path."""
    path = Path(tmp_path) / "carevoice.yaml"
    path.write_text(yaml.safe_dump(config_data), encoding="utf-8")
    return str(path)


@pytest.fixture
def settle_loop():
    """Coroutine function that lets posted events and spawned tasks run."""
    return settle
