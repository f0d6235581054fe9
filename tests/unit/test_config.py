"""Unit tests for CareVoiceConfig and the service wiring built from it."""

from pathlib import Path

import pytest

from carevoice.capture.unsupported import UnsupportedCapture
from carevoice.config import CareVoiceConfig
from carevoice.models.language import SupportedLanguage
from carevoice.playback.silent import SilentPlayback
from carevoice.responder.remote import RemoteQueryResponder
from carevoice.services.assistant_service import VoiceAssistantService


@pytest.mark.unit
class TestCareVoiceConfig:

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CareVoiceConfig(str(Path(tmp_path) / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = Path(tmp_path) / "broken.yaml"
        path.write_text("voice: [unclosed", encoding="utf-8")
        with pytest.raises(ValueError):
            CareVoiceConfig(str(path))

    def test_empty_file(self, tmp_path):
        path = Path(tmp_path) / "empty.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ValueError, match="empty"):
            CareVoiceConfig(str(path))

    def test_dot_notation_get_and_set(self, config_file):
        config = CareVoiceConfig(config_file)

        assert config.get('responder.timeout_seconds') == 5
        assert config.get('responder.missing', 'fallback') == 'fallback'

        config.set('responder.url', 'http://example.test/query')
        config.set('new.nested.key', 3)

        assert config.get('responder.url') == 'http://example.test/query'
        assert config.get('new.nested.key') == 3

    def test_relative_paths_resolve_against_config_dir(self, config_file):
        config = CareVoiceConfig(config_file)
        config_dir = Path(config_file).parent

        assert config.get('capture.credentials_path') == str(config_dir / "creds/google.json")
        assert config.get('logging.file_path') == str(config_dir / "logs/carevoice.log")

    def test_typed_accessors(self, config_file):
        config = CareVoiceConfig(config_file)

        assert config.get_language() is SupportedLanguage.HI_IN
        assert config.get_silence_timeout() == 2.5
        assert config.get_responder_url() is None

    def test_language_from_app_language_code(self, config_file):
        config = CareVoiceConfig(config_file)
        config.set('voice.default_language', None)
        config.set('voice.app_language', 'kn')

        assert config.get_language() is SupportedLanguage.KN_IN

    def test_language_defaults_to_english(self, config_file):
        config = CareVoiceConfig(config_file)
        config.set('voice.default_language', '')

        assert config.get_language() is SupportedLanguage.EN_US

    def test_unsupported_language(self, config_file):
        config = CareVoiceConfig(config_file)
        config.set('voice.default_language', 'fr-FR')
        with pytest.raises(ValueError):
            config.get_language()

    def test_non_positive_silence_timeout(self, config_file):
        config = CareVoiceConfig(config_file)
        config.set('voice.silence_timeout_seconds', 0)
        with pytest.raises(ValueError):
            config.get_silence_timeout()

    def test_health_context(self, config_file):
        context = CareVoiceConfig(config_file).get_health_context()

        assert context.profile.name == "John Doe"
        assert context.profile.medications == ["Metformin"]
        assert context.latest_report("blood sugar").value == "145 mg/dL"
        assert context.latest_report("HbA1c") is None

    def test_report_missing_fields(self, config_file):
        config = CareVoiceConfig(config_file)
        config.set('reports', [{"type": "Blood Sugar"}])
        with pytest.raises(ValueError, match="missing fields"):
            config.get_health_context()


@pytest.mark.unit
class TestVoiceAssistantService:

    def test_text_only_backends(self, config_file):
        service = VoiceAssistantService(CareVoiceConfig(config_file))

        assert isinstance(service.capture, UnsupportedCapture)
        assert isinstance(service.playback, SilentPlayback)
        assert service.responder.remote is None

    def test_remote_responder_from_url(self, config_file):
        config = CareVoiceConfig(config_file)
        config.set('responder.url', 'http://localhost:8000/api/voice/query')

        service = VoiceAssistantService(config)

        assert isinstance(service.responder.remote, RemoteQueryResponder)
        assert service.responder.remote.timeout_seconds == 5.0

    def test_unknown_backend(self, config_file):
        config = CareVoiceConfig(config_file)
        config.set('playback.backend', 'espeak-ng')
        with pytest.raises(ValueError):
            VoiceAssistantService(config)

    @pytest.mark.asyncio
    async def test_create_session_uses_config(self, config_file):
        service = VoiceAssistantService(CareVoiceConfig(config_file))

        session = service.create_session()

        assert session.language is SupportedLanguage.HI_IN
        assert session.silence_timeout == 2.5
        assert session.context.profile.name == "John Doe"
        session.teardown()
