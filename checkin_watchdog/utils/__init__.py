"""Utility modules for the check-in watchdog."""

from .logging import get_logger, setup_logging, run_context
from .validation import validate_phone, mask_phone_number

__all__ = [
    "get_logger",
    "setup_logging",
    "run_context",
    "validate_phone",
    "mask_phone_number",
]
