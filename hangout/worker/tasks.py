"""
hangout.worker.tasks — Periodic Background Jobs
================================================

Jobs that run on ``discord.ext.tasks`` loops:

- **Past-event archival** — daily at ``archive_hour_utc`` (06:00 UTC by
  default), archives event channels whose date has passed.
- **Random Senpai sweep** — every ``senpai_interval_hours`` (4 by
  default), samples Senpai-enabled groups and schedules a ``random``
  trigger for each pick after a random delay.

DB work runs through ``run_db()`` so the event loop stays free.  A failed
run is logged and the loop carries on to its next iteration.
"""

from __future__ import annotations

import datetime
import logging
import random
from typing import TYPE_CHECKING

from discord.ext import tasks

from hangout.database.engine import run_db
from hangout.services.channel_service import archive_past_events
from hangout.services.senpai_service import random_cron_trigger

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from hangout.config import HangoutConfig
    from hangout.services.completion_client import CompletionClient
    from hangout.worker.scheduler import AsyncScheduler

logger = logging.getLogger(__name__)


class PeriodicTasks:
    """Owns the worker's task loops and the state they share."""

    def __init__(
        self,
        cfg: HangoutConfig,
        engine: Engine,
        client: CompletionClient,
        scheduler: AsyncScheduler,
        rng: random.Random | None = None,
    ) -> None:
        self.cfg = cfg
        self.engine = engine
        self.client = client
        self.scheduler = scheduler
        self.rng = rng or random.Random()

        self.archive_loop.change_interval(
            time=datetime.time(hour=cfg.archive_hour_utc, tzinfo=datetime.UTC)
        )
        self.senpai_loop.change_interval(hours=cfg.senpai_interval_hours)

    def start(self) -> None:
        self.archive_loop.start()
        self.senpai_loop.start()

    async def stop(self) -> None:
        self.archive_loop.cancel()
        self.senpai_loop.cancel()
        await self.scheduler.cancel_all()
        await self.client.aclose()

    # -------------------------------------------------------------------
    # Past-event archival — daily
    # -------------------------------------------------------------------
    @tasks.loop(time=datetime.time(hour=6, tzinfo=datetime.UTC))
    async def archive_loop(self):
        """Archive event channels that have already happened."""
        await self.run_archive()

    async def run_archive(self) -> int:
        try:
            archived = await run_db(archive_past_events, self.engine)
        except Exception:
            logger.exception("Archival task failed", extra={"task": "archive"})
            return 0
        logger.info("Archival task complete: %d channel(s) archived", archived)
        return archived

    # -------------------------------------------------------------------
    # Random Senpai sweep — every N hours
    # -------------------------------------------------------------------
    @tasks.loop(hours=4)
    async def senpai_loop(self):
        """Let Senpai drop in on a random sample of groups."""
        await self.run_senpai_sweep()

    async def run_senpai_sweep(self) -> list[tuple[int, int]]:
        try:
            return await random_cron_trigger(
                self.engine,
                self.scheduler,
                self.client,
                self.rng,
                sample_rate=self.cfg.senpai_sample_rate,
                max_delay_ms=self.cfg.senpai_max_delay_ms,
            )
        except Exception:
            logger.exception("Senpai sweep failed", extra={"task": "senpai_random"})
            return []
