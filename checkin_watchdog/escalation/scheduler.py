"""In-process scheduler for periodic overdue checks."""

from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from checkin_watchdog.config import settings
from checkin_watchdog.escalation.runner import WatchdogRunner
from checkin_watchdog.models.outcome import RunResult
from checkin_watchdog.utils.logging import get_logger

logger = get_logger(__name__)


class WatchdogScheduler:
    """Runs the overdue check on a fixed interval."""

    def __init__(self, runner: Optional[WatchdogRunner] = None):
        self.scheduler = AsyncIOScheduler()
        self.runner = runner or WatchdogRunner()
        self.is_running = False

    async def start(self) -> None:
        """Start the watchdog scheduler."""
        if self.is_running:
            logger.warning("Watchdog scheduler already running")
            return

        # One instance at a time: overlapping runs could race on the alerted flag
        self.scheduler.add_job(
            self._run_check,
            trigger=IntervalTrigger(minutes=settings.CHECK_INTERVAL_MINUTES),
            id="check_overdue",
            name="Check Overdue Subjects",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=60
        )

        self.scheduler.start()
        self.is_running = True

        logger.info("Watchdog scheduler started",
                    interval_minutes=settings.CHECK_INTERVAL_MINUTES)

    async def stop(self) -> None:
        """Stop the watchdog scheduler."""
        if not self.is_running:
            return

        self.scheduler.shutdown(wait=False)
        self.is_running = False
        logger.info("Watchdog scheduler stopped")

    async def _run_check(self) -> None:
        result = await self.runner.run()
        if not result.success:
            logger.error("Scheduled overdue check failed", error=result.error)

    def get_job_status(self) -> dict:
        """Get status of scheduled jobs."""
        if not self.is_running:
            return {"status": "stopped", "jobs": []}

        jobs = []
        for job in self.scheduler.get_jobs():
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
                "trigger": str(job.trigger)
            })

        return {
            "status": "running",
            "jobs": jobs
        }

    async def trigger_run(self) -> RunResult:
        """Manually trigger an overdue check."""
        logger.info("Manual overdue check triggered")
        return await self.runner.run()
