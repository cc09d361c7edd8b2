"""
Tests for the background sweep loop.
"""

import asyncio

import pytest

from kushl.recurrence import RecurrenceSweepResult, RecurringTaskSupervisor
from kushl.shared.logging import correlation_id_var


class FakeEngine:
    def __init__(self, failures: int = 0) -> None:
        self.calls = 0
        self.failures = failures
        self.correlation_ids = []
        self.swept = asyncio.Event()
        self._loop = asyncio.get_running_loop()

    def sweep(self) -> RecurrenceSweepResult:
        self.calls += 1
        self.correlation_ids.append(correlation_id_var.get())
        if self.calls == 3 and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self.swept.set)
        if self.calls <= self.failures:
            raise RuntimeError("storage unavailable")
        return RecurrenceSweepResult(checked=1)


class TestRecurringTaskSupervisor:
    @pytest.mark.asyncio
    async def test_run_once_sets_correlation_id(self) -> None:
        engine = FakeEngine()
        supervisor = RecurringTaskSupervisor(engine, interval_seconds=60)

        result = await supervisor.run_once()

        assert result.checked == 1
        assert engine.correlation_ids[0].startswith("sweep-")
        assert correlation_id_var.get() is None

    @pytest.mark.asyncio
    async def test_loop_survives_failing_ticks(self) -> None:
        engine = FakeEngine(failures=2)
        supervisor = RecurringTaskSupervisor(engine, interval_seconds=0)

        supervisor.start()
        await asyncio.wait_for(engine.swept.wait(), timeout=5)
        await supervisor.stop()

        assert engine.calls >= 3
        assert supervisor.running is False

    @pytest.mark.asyncio
    async def test_each_tick_gets_its_own_correlation_id(self) -> None:
        engine = FakeEngine()
        supervisor = RecurringTaskSupervisor(engine, interval_seconds=0)

        supervisor.start()
        await asyncio.wait_for(engine.swept.wait(), timeout=5)
        await supervisor.stop()

        assert len(set(engine.correlation_ids)) == len(engine.correlation_ids)

    @pytest.mark.asyncio
    async def test_start_twice_raises(self) -> None:
        supervisor = RecurringTaskSupervisor(FakeEngine(), interval_seconds=60)

        supervisor.start()
        try:
            with pytest.raises(RuntimeError):
                supervisor.start()
        finally:
            await supervisor.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start_is_noop(self) -> None:
        supervisor = RecurringTaskSupervisor(FakeEngine())

        await supervisor.stop()

        assert supervisor.running is False

    def test_rejects_negative_interval(self) -> None:
        with pytest.raises(ValueError):
            RecurringTaskSupervisor(object(), interval_seconds=-1)
