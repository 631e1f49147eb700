"""FastAPI application for the check-in watchdog."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse
import uvicorn

from checkin_watchdog.config import settings
from checkin_watchdog.escalation.runner import WatchdogRunner
from checkin_watchdog.escalation.scheduler import WatchdogScheduler
from checkin_watchdog.models.database import check_database_connection, close_database, create_tables
from checkin_watchdog.utils.logging import setup_logging, get_logger

# Setup logging
setup_logging()
logger = get_logger(__name__)

# Global service instances
watchdog_runner: Optional[WatchdogRunner] = None
watchdog_scheduler: Optional[WatchdogScheduler] = None


def get_runner() -> WatchdogRunner:
    global watchdog_runner
    if watchdog_runner is None:
        watchdog_runner = WatchdogRunner()
    return watchdog_runner


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global watchdog_scheduler

    logger.info("Starting check-in watchdog", sms_dry_run=not settings.twilio_enabled)

    await create_tables()
    logger.info("Database tables created/verified")

    if settings.ENABLE_SCHEDULER:
        watchdog_scheduler = WatchdogScheduler(get_runner())
        await watchdog_scheduler.start()

    yield

    logger.info("Shutting down check-in watchdog")

    if watchdog_scheduler:
        await watchdog_scheduler.stop()
        watchdog_scheduler = None

    await close_database()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Dead-man's-switch check-in watchdog",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None
)


@app.get("/health")
async def health_check():
    """Health check endpoint; degraded when the database is unreachable."""
    database_ok = await check_database_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": "connected" if database_ok else "unreachable",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "sms_dry_run": not settings.twilio_enabled,
        "scheduler": watchdog_scheduler.get_job_status() if watchdog_scheduler else None
    }


@app.post("/check-overdue")
async def check_overdue():
    """Run one overdue check and return the per-subject summary."""
    result = await get_runner().run()

    if not result.success:
        return JSONResponse(status_code=500, content=result.to_dict())

    return result.to_dict()


if __name__ == "__main__":
    uvicorn.run(
        "checkin_watchdog.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
