"""Supported assistant languages and localization helpers."""

from enum import Enum


class SupportedLanguage(str, Enum):
    """Locale tags understood by speech capture, playback and the responders."""
    EN_US = "en-US"
    HI_IN = "hi-IN"
    KN_IN = "kn-IN"

    @property
    def label(self) -> str:
        return LANGUAGE_LABELS[self]

    @classmethod
    def from_tag(cls, tag: str) -> "SupportedLanguage":
        """Parse a locale tag such as 'hi-IN'.

        Raises:
            ValueError: If the tag is not one of the supported languages
        """
        for language in cls:
            if language.value.lower() == tag.strip().lower():
                return language
        supported = ", ".join(language.value for language in cls)
        raise ValueError(f"Unsupported language '{tag}'. Supported: {supported}")

    @classmethod
    def from_app_language(cls, code: str) -> "SupportedLanguage":
        """Map a short app language code ('en', 'hi', 'kn') to a locale tag."""
        code = (code or "").lower()
        if code.startswith("hi"):
            return cls.HI_IN
        if code.startswith("kn"):
            return cls.KN_IN
        return cls.EN_US


LANGUAGE_LABELS = {
    SupportedLanguage.EN_US: "English (US)",
    SupportedLanguage.HI_IN: "हिंदी (Hindi)",
    SupportedLanguage.KN_IN: "ಕನ್ನಡ (Kannada)",
}


def localize(language: SupportedLanguage, en: str, hi: str, kn: str) -> str:
    """Pick the variant of a text for the given language."""
    if language is SupportedLanguage.HI_IN:
        return hi
    if language is SupportedLanguage.KN_IN:
        return kn
    return en
