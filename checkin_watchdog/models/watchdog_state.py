"""Per-subject watchdog state."""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Enum as SQLEnum, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class WatchdogStatus(str, Enum):
    """Watchdog status enumeration.

    A watchdog is ``armed`` until its subject becomes overdue and is
    escalated, then ``alerted`` until a fresh check-in re-arms it. The
    escalation engine only ever moves ``armed -> alerted``; the transition
    back is owned by whoever records check-ins.
    """

    ARMED = "armed"
    ALERTED = "alerted"


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class WatchdogState(Base):
    """Check-in settings and alert status for one subject."""

    __tablename__ = "user_settings"
    __table_args__ = (
        CheckConstraint("check_in_interval_hours > 0", name="ck_interval_positive"),
    )

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)

    check_in_interval_hours: Mapped[float] = mapped_column(Float, default=24.0)
    alert_message: Mapped[str] = mapped_column(
        Text,
        default="{user_name} has not checked in for {interval} hours. Please check on them."
    )

    last_check_in: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    status: Mapped[WatchdogStatus] = mapped_column(
        SQLEnum(WatchdogStatus),
        default=WatchdogStatus.ARMED,
        index=True
    )
    alerted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<WatchdogState(user_id={self.user_id}, status='{self.status}')>"

    @property
    def alert_sent(self) -> bool:
        """Whether the current overdue episode has already been escalated."""
        return self.status == WatchdogStatus.ALERTED

    @property
    def deadline(self) -> Optional[datetime]:
        """Latest instant a check-in may arrive before the subject is overdue."""
        if self.last_check_in is None:
            return None
        return as_utc(self.last_check_in) + timedelta(hours=self.check_in_interval_hours)

    def mark_alerted(self, at: datetime) -> None:
        """Record that the current episode has been escalated."""
        self.status = WatchdogStatus.ALERTED
        self.alerted_at = at

    def record_check_in(self, at: datetime) -> None:
        """Record a check-in and re-arm the watchdog for the next episode."""
        self.last_check_in = at
        self.status = WatchdogStatus.ARMED
        self.alerted_at = None
