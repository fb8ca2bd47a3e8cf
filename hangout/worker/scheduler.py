"""
hangout.worker.scheduler — Run-After-Delay Helper
==================================================

Minimal "run this once, N milliseconds from now" scheduler on top of
asyncio tasks.  The random Senpai sweep uses it to spread replies over a
window instead of firing every group at the same instant.

Jobs live only in this process; a restart drops whatever was pending.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class AsyncScheduler:
    """Fire-and-forget delayed jobs, tracked so they can be cancelled."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def run_after(
        self, delay_ms: int, coro_factory: Callable[[], Awaitable[object]]
    ) -> asyncio.Task:
        """Run ``coro_factory()`` after *delay_ms* milliseconds.

        Must be called from inside a running event loop.
        """
        task = asyncio.create_task(self._run(max(delay_ms, 0), coro_factory))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(
        self, delay_ms: int, coro_factory: Callable[[], Awaitable[object]]
    ) -> None:
        if delay_ms:
            await asyncio.sleep(delay_ms / 1000)
        try:
            await coro_factory()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Scheduled job failed", extra={"task": "scheduler"})

    async def cancel_all(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
