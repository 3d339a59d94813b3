"""
Run one review sync pass outside the web server (for cron or a scheduler)
"""
import asyncio
import sys

from review_responder.core.database import SessionLocal, init_db
from review_responder.core.logging import setup_logging, get_logger
from review_responder.services.sync_service import ReviewSynchronizer

logger = get_logger("run_sync")


async def main() -> int:
    init_db()
    db = SessionLocal()
    try:
        report = await ReviewSynchronizer(db).run()
    finally:
        db.close()

    logger.info(f"Sync summary: {report.summary()}")
    return 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(main()))
