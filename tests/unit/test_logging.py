"""Tests for run-scoped structured logging."""

import structlog
from structlog.testing import capture_logs

from checkin_watchdog.utils.logging import log_sms_delivery, run_context


def test_run_context_binds_run_id():
    with run_context("run-42") as run_id:
        assert run_id == "run-42"
        assert structlog.contextvars.get_contextvars()["run_id"] == "run-42"

    assert "run_id" not in structlog.contextvars.get_contextvars()


def test_run_context_generates_run_id():
    with run_context() as run_id:
        assert len(run_id) == 32


def test_sms_delivery_log_masks_number():
    with capture_logs() as logs:
        log_sms_delivery(structlog.get_logger(), "+15550000001", success=False,
                         duration_ms=12.34, error="timed out")

    assert logs == [{
        "event": "SMS delivery failed",
        "log_level": "error",
        "to_number": "+1********01",
        "success": False,
        "duration_ms": 12.3,
        "error": "timed out",
    }]
