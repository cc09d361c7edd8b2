"""
Background loop that runs the recurring-task sweep on an interval.
"""

from __future__ import annotations

import asyncio
from typing import Protocol
from uuid import uuid4

from kushl.recurrence.engine import RecurrenceSweepResult
from kushl.shared.logging import correlation_id_var, get_logger

logger = get_logger(__name__)


class SweepRunner(Protocol):
    def sweep(self) -> RecurrenceSweepResult:
        ...


class RecurringTaskSupervisor:
    """Runs ``engine.sweep`` at start and then every ``interval_seconds``.

    The sweep is synchronous, so each tick runs on a worker thread. A failed
    tick is logged and the loop carries on; cancellation stops the loop.
    """

    def __init__(self, engine: SweepRunner, interval_seconds: float = 60) -> None:
        if interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")
        self._engine = engine
        self._interval_seconds = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def interval_seconds(self) -> float:
        return self._interval_seconds

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> RecurrenceSweepResult:
        """Run a single sweep under a fresh correlation id."""
        token = correlation_id_var.set(f"sweep-{uuid4().hex[:12]}")
        try:
            return await asyncio.to_thread(self._engine.sweep)
        finally:
            correlation_id_var.reset(token)

    async def run_forever(self) -> None:
        logger.info(
            "Recurring task supervisor starting",
            extra={"interval_seconds": self._interval_seconds},
        )
        try:
            while True:
                try:
                    await self.run_once()
                except asyncio.CancelledError:
                    raise
                except Exception:
                    logger.exception("Recurring task sweep failed")

                await asyncio.sleep(self._interval_seconds)
        except asyncio.CancelledError:
            logger.info("Recurring task supervisor cancelled; stopping")
            raise

    def start(self) -> asyncio.Task[None]:
        """Schedule the loop on the running event loop."""
        if self.running:
            raise RuntimeError("Recurring task supervisor already running")
        self._task = asyncio.create_task(self.run_forever())
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Recurring task supervisor stopped")
