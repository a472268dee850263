"""Nightly follow-up email job.

Run from cron or a scheduler container::

    launchpad-send-followups

Exits non-zero when any follow-up failed to send so the scheduler can alert.
"""

import asyncio
import sys

from backend.app.core.logging_config import get_logger, setup_logging
from backend.app.db.session import SessionLocal
from backend.app.services.email import get_mailer
from backend.app.services.follow_up_dispatch import send_scheduled_follow_ups

logger = get_logger(__name__)


def main() -> int:
    setup_logging()
    db = SessionLocal()
    try:
        result = asyncio.run(send_scheduled_follow_ups(db, get_mailer()))
    finally:
        db.close()

    for failure in result.failures:
        logger.error("Interaction %s: %s (%s)", failure.interaction_id, failure.error, failure.recipient)
    logger.info("Processed %d interaction(s), sent %d email(s)", result.processed, result.sent_count)
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
