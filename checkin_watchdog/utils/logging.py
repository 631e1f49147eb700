"""Structured logging for watchdog runs using structlog."""

import logging
import sys
import uuid
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog
from structlog.types import FilteringBoundLogger

from checkin_watchdog.config import settings
from checkin_watchdog.utils.validation import mask_phone_number


def setup_logging(level: Optional[str] = None) -> None:
    """Configure structlog: JSON lines in deployments, readable console output in debug."""
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    renderer = (
        structlog.dev.ConsoleRenderer() if settings.DEBUG
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(sys.stdout),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    # Library chatter stays out of run logs
    for noisy in ("twilio.http_client", "apscheduler", "sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> FilteringBoundLogger:
    return structlog.get_logger(name or __name__)


@contextmanager
def run_context(run_id: Optional[str] = None) -> Iterator[str]:
    """Tag every log line emitted during one watchdog run with its ``run_id``."""
    run_id = run_id or uuid.uuid4().hex
    with structlog.contextvars.bound_contextvars(run_id=run_id):
        yield run_id


def log_escalation_event(
    logger: FilteringBoundLogger,
    subject_id: str,
    status: str,
    contacts_notified: int,
    **kwargs: Any
) -> None:
    """Log the outcome of escalating one subject."""
    logger.info(
        f"Escalation {status}",
        subject_id=subject_id,
        escalation_status=status,
        contacts_notified=contacts_notified,
        **kwargs
    )


def log_sms_delivery(
    logger: FilteringBoundLogger,
    to_number: str,
    success: bool,
    duration_ms: float,
    **kwargs: Any
) -> None:
    """Log one SMS attempt; the destination number is always masked."""
    level = "info" if success else "error"
    getattr(logger, level)(
        "SMS delivered" if success else "SMS delivery failed",
        to_number=mask_phone_number(to_number),
        success=success,
        duration_ms=round(duration_ms, 1),
        **kwargs
    )
