"""
hangout.worker.__main__ — Entry point for ``python -m hangout.worker``
=======================================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (infrastructure settings).
3. Create the SQLAlchemy engine and ensure tables exist.
4. Build the completion client and the delayed-job scheduler.
5. Start the periodic loops and block until interrupted.

Run with::

    python -m hangout.worker
"""

from __future__ import annotations

import asyncio
import logging
import os

from dotenv import load_dotenv

from hangout.config import load_config
from hangout.database.engine import create_db_engine, init_db
from hangout.services.completion_client import CompletionClient
from hangout.worker.scheduler import AsyncScheduler
from hangout.worker.tasks import PeriodicTasks

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("hangout")


async def run() -> None:
    load_dotenv()

    cfg = load_config()
    logger.info("Config loaded — %s", cfg.app_name)

    if not os.getenv("OPENAI_API_KEY"):
        logger.warning("OPENAI_API_KEY is not set; Senpai replies will be skipped.")

    engine = create_db_engine()
    init_db(engine)

    worker = PeriodicTasks(
        cfg=cfg,
        engine=engine,
        client=CompletionClient.from_config(cfg),
        scheduler=AsyncScheduler(),
    )
    worker.start()
    logger.info(
        "Worker started: archival daily at %02d:00 UTC, Senpai sweep every %dh",
        cfg.archive_hour_utc, cfg.senpai_interval_hours,
    )

    try:
        await asyncio.Event().wait()
    finally:
        await worker.stop()
        engine.dispose()


def main() -> None:
    """Bootstrap and run the Hangout background worker."""
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
