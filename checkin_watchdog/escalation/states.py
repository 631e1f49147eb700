"""Watchdog state persistence."""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, update

from checkin_watchdog.escalation.contacts import SessionFactory
from checkin_watchdog.models.database import get_db_session
from checkin_watchdog.models.watchdog_state import WatchdogState, WatchdogStatus
from checkin_watchdog.utils.logging import get_logger

logger = get_logger(__name__)


class WatchdogStateStore:
    """Loads armed watchdogs and records escalations."""

    def __init__(self, session_factory: SessionFactory = get_db_session):
        self.session_factory = session_factory

    async def query_unalerted_with_check_in(self) -> List[WatchdogState]:
        """Get every armed watchdog whose subject has checked in at least once."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(WatchdogState)
                .where(
                    WatchdogState.status == WatchdogStatus.ARMED,
                    WatchdogState.last_check_in.is_not(None)
                )
                .order_by(WatchdogState.user_id)
            )
            return list(result.scalars().all())

    async def set_alerted(self, subject_id: str, at: Optional[datetime] = None) -> None:
        """Persist that the subject's current overdue episode has been escalated."""
        alerted_at = at or datetime.now(timezone.utc)

        async with self.session_factory() as session:
            await session.execute(
                update(WatchdogState)
                .where(WatchdogState.user_id == subject_id)
                .values(status=WatchdogStatus.ALERTED, alerted_at=alerted_at)
            )
            await session.commit()

        logger.debug("Watchdog marked alerted", subject_id=subject_id)
