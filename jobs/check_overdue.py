"""Overdue check worker job.

Meant to be invoked by an external scheduler (cron, a platform job runner)
at a fixed cadence. Invocations must not overlap.
"""

import asyncio
import json
import sys

from checkin_watchdog.escalation.runner import WatchdogRunner
from checkin_watchdog.models.database import close_database
from checkin_watchdog.utils.logging import setup_logging, get_logger

# Setup logging
setup_logging()
logger = get_logger(__name__)


async def main() -> int:
    """Overdue check worker entry point."""
    logger.info("Starting overdue check job")

    try:
        result = await WatchdogRunner().run()
    finally:
        await close_database()

    logger.info("Overdue check job completed", summary=json.dumps(result.to_dict()))

    return 0 if result.success else 1


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
