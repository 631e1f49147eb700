"""Per-run escalation results."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class OutcomeStatus(str, Enum):
    """What happened to one overdue subject in a run."""

    ALERTED = "alerted"
    SKIPPED_NO_CONTACTS = "skipped_no_contacts"
    ERROR = "error"


@dataclass
class EscalationOutcome:
    """Result of escalating one overdue subject."""
    subject_id: str
    status: OutcomeStatus
    contacts_notified: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subjectId": self.subject_id,
            "status": self.status.value,
            "contactsNotified": self.contacts_notified,
        }


@dataclass
class RunResult:
    """Summary of one watchdog run."""
    success: bool
    timestamp: datetime
    users_overdue: int = 0
    results: List[EscalationOutcome] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable summary; failed runs carry ``error`` instead of ``results``."""
        if not self.success:
            return {
                "success": False,
                "timestamp": self.timestamp.isoformat(),
                "error": self.error or "Unknown error",
            }

        return {
            "success": True,
            "timestamp": self.timestamp.isoformat(),
            "usersOverdue": self.users_overdue,
            "results": [outcome.to_dict() for outcome in self.results],
        }
