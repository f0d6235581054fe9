"""Simple YAML configuration loader for CareVoice."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from ..models.language import SupportedLanguage
from ..models.profile import UserProfile, HealthReport, HealthContext

logger = logging.getLogger(__name__)


class CareVoiceConfig:
    """CareVoice configuration loader."""

    def __init__(self, config_path: str):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file (e.g. config/carevoice.yaml)
        """
        self.config_file = Path(config_path)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}") from e

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        # Resolve relative paths
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        # Resolve Google credentials path
        capture = config.get('capture') or {}
        if 'credentials_path' in capture and capture['credentials_path']:
            creds_path = capture['credentials_path']
            if not os.path.isabs(creds_path):
                capture['credentials_path'] = str(config_dir / creds_path)

        # Resolve log file path
        if 'logging' in config and 'file_path' in config['logging']:
            log_path = config['logging']['file_path']
            if not os.path.isabs(log_path):
                config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'voice.default_language').

        Args:
            key_path: Dot-separated key path (e.g., 'responder.url')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'voice.default_language')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        # Set the final value
        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_language(self) -> SupportedLanguage:
        """Get the initial session language - raises ValueError if unsupported.

        voice.default_language wins; without it the short app language code
        (voice.app_language: en, hi or kn) picks the locale.
        """
        tag = self.get('voice.default_language')
        if tag:
            return SupportedLanguage.from_tag(tag)
        return SupportedLanguage.from_app_language(self.get('voice.app_language', 'en'))

    def get_silence_timeout(self) -> float:
        timeout = float(self.get('voice.silence_timeout_seconds', 3.0))
        if timeout <= 0:
            raise ValueError("voice.silence_timeout_seconds must be positive")
        return timeout

    def get_responder_url(self) -> Optional[str]:
        """Remote query endpoint, or None to answer from the local fallback only."""
        return self.get('responder.url') or None

    def get_health_context(self) -> HealthContext:
        """Build the profile and recent reports passed to the voice session."""
        profile = UserProfile.from_dict(self.get('profile', {}))
        reports = [HealthReport.from_dict(item) for item in self.get('reports', []) or []]
        return HealthContext(profile=profile, reports=reports)
