"""Query request/response models shared by the responders and the session."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Dict, Any

from pydantic import BaseModel, Field

from .language import SupportedLanguage
from .profile import HealthContext


class ActionType(str, Enum):
    """Follow-up operations an answer may offer."""
    GROCERY = "grocery"
    REMINDER = "reminder"
    NOTE = "note"
    APPOINTMENT = "appointment"


class VoiceAction(BaseModel):
    """Suggested action attached to an answer."""
    id: str
    label: str
    type: ActionType


class VoiceResponse(BaseModel):
    """Structured answer returned by a query responder."""
    answer_text: str = Field(min_length=1)
    disclaimer: str = ""
    actions: List[VoiceAction] = Field(default_factory=list)

    def find_action(self, action_id: str) -> Optional[VoiceAction]:
        for action in self.actions:
            if action.id == action_id:
                return action
        return None


@dataclass
class QueryRequest:
    """A natural-language health query and the context it is asked in."""
    query: str
    language: SupportedLanguage
    context: Optional[HealthContext] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "query": self.query,
            "language": self.language.value,
        }
        if self.context is not None:
            payload.update(self.context.to_payload())
        return payload


class AnswerSource(Enum):
    """Which responder produced an answer."""
    REMOTE = "remote"
    FALLBACK = "fallback"


class FailureKind(Enum):
    """Why the remote responder was bypassed."""
    UNAVAILABLE = "unavailable"
    MALFORMED = "malformed"
    UNEXPECTED = "unexpected"


@dataclass
class QueryOutcome:
    """Result of a resilient query: the answer plus where it came from."""
    response: VoiceResponse
    source: AnswerSource
    failure: Optional[FailureKind] = None
