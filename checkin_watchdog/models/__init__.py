"""Database models for the check-in watchdog."""

from .database import Base, get_db_session
from .watchdog_state import WatchdogState, WatchdogStatus
from .profile import Profile
from .contact import EmergencyContact
from .outcome import EscalationOutcome, OutcomeStatus, RunResult

__all__ = [
    "Base",
    "get_db_session",
    "WatchdogState",
    "WatchdogStatus",
    "Profile",
    "EmergencyContact",
    "EscalationOutcome",
    "OutcomeStatus",
    "RunResult",
]
