"""Unit tests for language, profile and response models."""

import pytest
from pydantic import ValidationError

from carevoice.models.language import SupportedLanguage, localize
from carevoice.models.profile import HealthReport, UserProfile
from carevoice.models.responses import ActionType, QueryRequest, VoiceResponse
from carevoice.session.actions import acknowledge_action


@pytest.mark.unit
class TestSupportedLanguage:

    def test_from_tag_is_case_insensitive(self):
        assert SupportedLanguage.from_tag("HI-in") is SupportedLanguage.HI_IN
        assert SupportedLanguage.from_tag(" kn-IN ") is SupportedLanguage.KN_IN

    def test_from_tag_rejects_unknown(self):
        with pytest.raises(ValueError, match="Unsupported language"):
            SupportedLanguage.from_tag("ta-IN")

    def test_from_app_language(self):
        assert SupportedLanguage.from_app_language("hi") is SupportedLanguage.HI_IN
        assert SupportedLanguage.from_app_language("kn") is SupportedLanguage.KN_IN
        assert SupportedLanguage.from_app_language("fr") is SupportedLanguage.EN_US

    def test_localize(self):
        assert localize(SupportedLanguage.KN_IN, "a", "b", "c") == "c"
        assert SupportedLanguage.HI_IN.label == "हिंदी (Hindi)"


@pytest.mark.unit
class TestHealthModels:

    def test_profile_requires_name(self):
        with pytest.raises(ValueError):
            UserProfile.from_dict({"age": 45})

    def test_profile_from_dict(self):
        profile = UserProfile.from_dict({"name": "Asha", "age": "61", "medications": ["Amlodipine"]})

        assert profile.age == 61
        assert profile.conditions == []
        assert profile.medications == ["Amlodipine"]

    def test_latest_report_returns_first_match(self, health_context):
        health_context.reports.append(
            HealthReport(type="Blood Sugar", value="120 mg/dL", date="2023-12-01", status="normal"))

        assert health_context.latest_report("Blood Sugar").value == "145 mg/dL"

    def test_query_payload(self, health_context):
        payload = QueryRequest("hello", SupportedLanguage.KN_IN, health_context).to_payload()

        assert payload["query"] == "hello"
        assert payload["language"] == "kn-IN"
        assert payload["user_profile"]["conditions"] == ["diabetes", "hypertension"]
        assert len(payload["recent_reports"]) == 3

    def test_query_payload_without_context(self):
        payload = QueryRequest("hello", SupportedLanguage.EN_US).to_payload()

        assert payload == {"query": "hello", "language": "en-US"}


@pytest.mark.unit
class TestVoiceResponse:

    def test_parses_wire_format(self):
        response = VoiceResponse.model_validate({
            "answer_text": "Reduce salt.",
            "actions": [{"id": "groceries", "label": "Add to Grocery List", "type": "grocery"}],
        })

        assert response.disclaimer == ""
        assert response.find_action("groceries").type is ActionType.GROCERY
        assert response.find_action("missing") is None

    def test_rejects_empty_answer(self):
        with pytest.raises(ValidationError):
            VoiceResponse.model_validate({"answer_text": ""})

    def test_rejects_unknown_action_type(self):
        with pytest.raises(ValidationError):
            VoiceResponse.model_validate({
                "answer_text": "ok",
                "actions": [{"id": "x", "label": "X", "type": "teleport"}],
            })

    def test_every_action_type_has_acknowledgement(self):
        response = VoiceResponse.model_validate({
            "answer_text": "ok",
            "actions": [{"id": t.value, "label": t.value, "type": t.value} for t in ActionType],
        })

        titles = {acknowledge_action(action).title for action in response.actions}

        assert titles == {"Added to Grocery List", "Reminder Set", "Note Saved", "Appointment"}
