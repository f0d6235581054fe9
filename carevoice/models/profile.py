"""User profile and health report context handed to the voice session."""

from dataclasses import dataclass, field, asdict
from typing import List, Optional, Dict, Any


@dataclass
class UserProfile:
    """Profile captured during onboarding."""
    name: str
    age: Optional[int] = None
    gender: Optional[str] = None
    conditions: List[str] = field(default_factory=list)
    medications: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        if not data or not data.get("name"):
            raise ValueError("Profile requires a name")
        age = data.get("age")
        return cls(
            name=str(data["name"]),
            age=int(age) if age is not None else None,
            gender=data.get("gender"),
            conditions=list(data.get("conditions") or []),
            medications=list(data.get("medications") or []),
        )


@dataclass
class HealthReport:
    """A single lab or vitals reading."""
    type: str  # "Blood Sugar", "Blood Pressure", "HbA1c", ...
    value: str
    date: str
    status: str  # "elevated", "high", "normal", ...

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HealthReport":
        missing = [key for key in ("type", "value", "date", "status") if key not in data]
        if missing:
            raise ValueError(f"Health report missing fields: {', '.join(missing)}")
        return cls(
            type=str(data["type"]),
            value=str(data["value"]),
            date=str(data["date"]),
            status=str(data["status"]),
        )


@dataclass
class HealthContext:
    """Profile plus recent reports; read-only input to the responders."""
    profile: UserProfile
    reports: List[HealthReport] = field(default_factory=list)

    def latest_report(self, report_type: str) -> Optional[HealthReport]:
        """Return the first report of the given type (reports are newest first)."""
        wanted = report_type.lower()
        for report in self.reports:
            if report.type.lower() == wanted:
                return report
        return None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "user_profile": asdict(self.profile),
            "recent_reports": [asdict(report) for report in self.reports],
        }
