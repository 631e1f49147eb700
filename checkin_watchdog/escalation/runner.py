"""Watchdog run orchestration."""

import asyncio
from datetime import datetime, timezone
from typing import List, Optional

from checkin_watchdog.config import settings
from checkin_watchdog.escalation.engine import EscalationEngine
from checkin_watchdog.models.outcome import EscalationOutcome, OutcomeStatus, RunResult
from checkin_watchdog.models.watchdog_state import WatchdogState
from checkin_watchdog.utils.logging import get_logger, run_context

logger = get_logger(__name__)


class StateLoadError(Exception):
    """The initial set of watchdog states could not be loaded."""


class WatchdogRunner:
    """Runs one overdue check across all armed watchdogs.

    Runs must not overlap; the caller (scheduler, cron, HTTP trigger) is
    responsible for that.
    """

    def __init__(
        self,
        engine: Optional[EscalationEngine] = None,
        max_concurrency: Optional[int] = None
    ):
        self.engine = engine or EscalationEngine()
        self.max_concurrency = max_concurrency or settings.MAX_CONCURRENT_ESCALATIONS

    async def run(self, now: Optional[datetime] = None) -> RunResult:
        """Escalate every overdue subject and report one outcome per subject."""
        now = now or datetime.now(timezone.utc)

        with run_context():
            logger.info("Starting overdue check", timestamp=now.isoformat())
            try:
                states = await self._load_states()
            except StateLoadError as e:
                logger.error("Overdue check failed", error=str(e), exc_info=True)
                return RunResult(success=False, timestamp=now, error=str(e))

            overdue = self.engine.evaluate_overdue(states, now)
            logger.info("Evaluated watchdogs", overdue=len(overdue), checked=len(states))

            semaphore = asyncio.Semaphore(self.max_concurrency)

            async def bounded(state: WatchdogState) -> EscalationOutcome:
                async with semaphore:
                    return await self.engine.handle_overdue_subject(state)

            outcomes = await asyncio.gather(*(bounded(state) for state in overdue))

            logger.info("Overdue check completed",
                        users_overdue=len(overdue),
                        alerted=sum(1 for o in outcomes if o.status == OutcomeStatus.ALERTED))

            return RunResult(
                success=True,
                timestamp=now,
                users_overdue=len(overdue),
                results=list(outcomes)
            )

    async def _load_states(self) -> List[WatchdogState]:
        try:
            return await self.engine.state_store.query_unalerted_with_check_in()
        except Exception as e:
            raise StateLoadError(f"Query failed: {e}") from e
