"""CareVoice - multilingual voice health assistant."""

__version__ = "0.1.0"
