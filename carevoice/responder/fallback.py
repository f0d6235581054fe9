"""Deterministic keyword-matched responder used when the remote service is down."""

import logging
import re
from typing import List, Optional

from ..models.language import SupportedLanguage, localize
from ..models.profile import HealthContext, UserProfile, HealthReport
from ..models.responses import ActionType, QueryRequest, VoiceAction, VoiceResponse

logger = logging.getLogger(__name__)

GLUCOSE_KEYWORDS = ("blood sugar", "glucose", "diabetes")
BLOOD_PRESSURE_KEYWORDS = ("blood pressure", "hypertension")
MEDICATION_KEYWORDS = ("medication", "medicine")
GREETING_KEYWORDS = ("hello", "hi", "namaste")

DEFAULT_PROFILE = UserProfile(name="there")


def _matches(text: str, keywords) -> bool:
    return any(re.search(rf"\b{re.escape(keyword)}\b", text) for keyword in keywords)


class FallbackResponder:
    """Builds canned, localized answers from the health context.

    Never raises: every query, including an empty one, yields a well-formed
    VoiceResponse.
    """

    def respond(self, request: QueryRequest) -> VoiceResponse:
        text = request.query.lower()
        language = request.language
        context = request.context or HealthContext(profile=DEFAULT_PROFILE)

        if _matches(text, GLUCOSE_KEYWORDS):
            topic = "glucose"
            answer = self._glucose_answer(language, context.latest_report("Blood Sugar"))
            actions = [
                VoiceAction(id="reminder", label="Add Reminder", type=ActionType.REMINDER),
                VoiceAction(id="appointment", label="Schedule Appointment", type=ActionType.APPOINTMENT),
            ]
        elif _matches(text, BLOOD_PRESSURE_KEYWORDS):
            topic = "blood_pressure"
            answer = self._blood_pressure_answer(language, context.latest_report("Blood Pressure"))
            actions = [
                VoiceAction(id="groceries", label="Add to Grocery List", type=ActionType.GROCERY),
            ]
        elif _matches(text, MEDICATION_KEYWORDS):
            topic = "medication"
            answer = self._medication_answer(language, context.profile.medications)
            actions = [
                VoiceAction(id="reminder", label="Set Medication Reminder", type=ActionType.REMINDER),
            ]
        elif _matches(text, GREETING_KEYWORDS):
            topic = "greeting"
            answer = self._greeting_answer(language, context.profile.name)
            actions = []
        else:
            topic = "default"
            answer = self._default_answer(language, request.query)
            actions = []

        logger.debug(f"Fallback answer topic={topic} language={language.value}")
        return VoiceResponse(
            answer_text=answer,
            disclaimer=localize(
                language,
                "This is general guidance; consult your doctor.",
                "यह सामान्य मार्गदर्शन है; अपने डॉक्टर से सलाह लें।",
                "ಇದು ಸಾಮಾನ್ಯ ಮಾರ್ಗದರ್ಶನ; ನಿಮ್ಮ ವೈದ್ಯರನ್ನು ಸಂಪರ್ಕಿಸಿ।",
            ),
            actions=actions,
        )

    def _no_reading(self, language: SupportedLanguage, what_en: str, what_hi: str, what_kn: str) -> str:
        return localize(
            language,
            f"I don't have a recent {what_en} reading on file. Please add your latest report.",
            f"मेरे पास आपका हालिया {what_hi} रिकॉर्ड नहीं है। कृपया अपनी नवीनतम रिपोर्ट जोड़ें।",
            f"ನಿಮ್ಮ ಇತ್ತೀಚಿನ {what_kn} ದಾಖಲೆ ನನ್ನ ಬಳಿ ಇಲ್ಲ। ದಯವಿಟ್ಟು ನಿಮ್ಮ ಇತ್ತೀಚಿನ ವರದಿಯನ್ನು ಸೇರಿಸಿ।",
        )

    def _glucose_answer(self, language: SupportedLanguage, report: Optional[HealthReport]) -> str:
        if report is None:
            return self._no_reading(language, "blood sugar", "रक्त शर्करा", "ರಕ್ತದ ಸಕ್ಕರೆ")
        return localize(
            language,
            f"Your latest blood sugar was {report.value} on {report.date}. This is {report.status}. "
            f"Consider checking your medication timing and diet.",
            f"आपका नवीनतम रक्त शर्करा {report.value} था {report.date} को। यह {report.status} है। "
            f"अपनी दवा का समय और आहार की जांच करें।",
            f"ನಿಮ್ಮ ಇತ್ತೀಚಿನ ರಕ್ತದ ಸಕ್ಕರೆ {report.value} ಆಗಿತ್ತು {report.date} ನಲ್ಲಿ। ಇದು {report.status} ಆಗಿದೆ।",
        )

    def _blood_pressure_answer(self, language: SupportedLanguage, report: Optional[HealthReport]) -> str:
        if report is None:
            return self._no_reading(language, "blood pressure", "रक्तचाप", "ರಕ್ತದ ಒತ್ತಡ")
        return localize(
            language,
            f"Your recent blood pressure reading was {report.value}. This is {report.status}. "
            f"Consider reducing salt intake and monitoring regularly.",
            f"आपका हालिया रक्तचाप {report.value} था। यह {report.status} है। नमक कम करें और नियमित जांच करें।",
            f"ನಿಮ್ಮ ಇತ್ತೀಚಿನ ರಕ್ತದ ಒತ್ತಡ {report.value} ಆಗಿತ್ತು। ಇದು {report.status} ಆಗಿದೆ।",
        )

    def _medication_answer(self, language: SupportedLanguage, medications: List[str]) -> str:
        if not medications:
            return localize(
                language,
                "I don't have any medications on file for you. You can add them to your profile.",
                "आपकी कोई दवा मेरे रिकॉर्ड में नहीं है। आप उन्हें अपनी प्रोफ़ाइल में जोड़ सकते हैं।",
                "ನಿಮ್ಮ ಯಾವುದೇ ಔಷಧಗಳು ನನ್ನ ದಾಖಲೆಯಲ್ಲಿ ಇಲ್ಲ। ನೀವು ಅವುಗಳನ್ನು ನಿಮ್ಮ ಪ್ರೊಫೈಲ್‌ಗೆ ಸೇರಿಸಬಹುದು।",
            )
        return localize(
            language,
            f"You're currently taking {' and '.join(medications)}. Remember to take them as prescribed.",
            f"आप वर्तमान में {' और '.join(medications)} ले रहे हैं। इन्हें निर्धारित समय पर लेना याद रखें।",
            f"ನೀವು ಪ್ರಸ್ತುತ {' ಮತ್ತು '.join(medications)} ತೆಗೆದುಕೊಳ್ಳುತ್ತಿದ್ದೀರಿ।",
        )

    def _greeting_answer(self, language: SupportedLanguage, name: str) -> str:
        return localize(
            language,
            f"Hello {name}! I'm your health assistant. How can I help you today?",
            f"नमस्ते {name}! मैं आपका स्वास्थ्य सहायक हूं। आज मैं आपकी कैसे मदद कर सकता हूं?",
            f"ನಮಸ್ಕಾರ {name}! ನಾನು ನಿಮ್ಮ ಆರೋಗ್ಯ ಸಹಾಯಕ. ಇಂದು ನಾನು ನಿಮಗೆ ಹೇಗೆ ಸಹಾಯ ಮಾಡಬಹುದು?",
        )

    def _default_answer(self, language: SupportedLanguage, query: str) -> str:
        return localize(
            language,
            f"I understand you said: \"{query}\". As your health assistant, I can help with "
            f"medication management, health monitoring, and wellness guidance.",
            f"मैं समझ गया कि आपने कहा: \"{query}\"। आपके स्वास्थ्य सहायक के रूप में, "
            f"मैं दवा प्रबंधन और स्वास्थ्य निगरानी में मदद कर सकता हूं।",
            f"ನೀವು ಹೇಳಿದ್ದು ನನಗೆ ಅರ್ಥವಾಯಿತು: \"{query}\"। ನಿಮ್ಮ ಆರೋಗ್ಯ ಸಹಾಯಕನಾಗಿ, "
            f"ನಾನು ಔಷಧ ನಿರ್ವಹಣೆ ಮತ್ತು ಆರೋಗ್ಯ ಮೇಲ್ವಿಚಾರಣೆಯಲ್ಲಿ ಸಹಾಯ ಮಾಡಬಹುದು।",
        )
