"""Overdue detection and escalation for the check-in watchdog."""

from .engine import EscalationEngine, render_alert_message
from .contacts import ContactDirectory
from .profiles import ProfileDirectory
from .states import WatchdogStateStore
from .runner import StateLoadError, WatchdogRunner
from .scheduler import WatchdogScheduler

__all__ = [
    "EscalationEngine",
    "render_alert_message",
    "ContactDirectory",
    "ProfileDirectory",
    "WatchdogStateStore",
    "StateLoadError",
    "WatchdogRunner",
    "WatchdogScheduler",
]
