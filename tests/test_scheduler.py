from __future__ import annotations

import asyncio

import pytest

from pyshipsio.config import ExchangeConfig
from pyshipsio.exceptions import ShipsIOError
from pyshipsio.scheduler import Scheduler, SchedulerState, clamp_interval


class _CycleCounter:
    def __init__(self, *, duration: float = 0.0, fail: bool = False) -> None:
        self.calls = 0
        self._duration = duration
        self._fail = fail

    async def __call__(self) -> None:
        self.calls += 1
        if self._duration:
            await asyncio.sleep(self._duration)
        if self._fail:
            raise RuntimeError("boom")


def test_interval_below_floor_is_clamped() -> None:
    scheduler = Scheduler(ExchangeConfig(key="k", interval=50), _CycleCounter())
    assert scheduler.interval == 120


@pytest.mark.parametrize(("value", "expected"), [(None, 120), ("abc", 120), (119.9, 120), (600, 600), ("300", 300)])
def test_clamp_interval(value: object, expected: float) -> None:
    assert clamp_interval(value) == expected


@pytest.mark.asyncio
async def test_first_cycle_is_deferred() -> None:
    cycle = _CycleCounter()
    scheduler = Scheduler(ExchangeConfig(key="k"), cycle, first_delay=0.05)

    assert scheduler.start() is True
    await asyncio.sleep(0)
    await asyncio.sleep(0.01)
    assert cycle.calls == 0
    assert scheduler.state == SchedulerState.SCHEDULED

    await asyncio.sleep(0.1)
    assert cycle.calls == 1
    scheduler.stop()


@pytest.mark.asyncio
async def test_periodic_cycles_fire_until_stopped() -> None:
    cycle = _CycleCounter()
    scheduler = Scheduler(ExchangeConfig(key="k", interval=0.02), cycle, first_delay=10.0, min_interval=0.02)

    scheduler.start()
    await asyncio.sleep(0.11)
    scheduler.stop()
    await scheduler.wait_idle()
    fired = cycle.calls
    await asyncio.sleep(0.05)

    assert fired >= 3
    assert cycle.calls == fired
    assert scheduler.state == SchedulerState.STOPPED


@pytest.mark.asyncio
async def test_missing_key_schedules_nothing_and_reports_once() -> None:
    alarms: list[str] = []
    cycle = _CycleCounter()
    scheduler = Scheduler(ExchangeConfig(key="  "), cycle, on_alarm=alarms.append, first_delay=0.0)

    assert scheduler.start() is False
    await asyncio.sleep(0.01)

    assert cycle.calls == 0
    assert len(alarms) == 1
    assert scheduler.state == SchedulerState.STOPPED
    with pytest.raises(ShipsIOError):
        scheduler.start()
    assert len(alarms) == 1


@pytest.mark.asyncio
async def test_stop_does_not_interrupt_cycle_in_flight() -> None:
    cycle = _CycleCounter(duration=0.05)
    scheduler = Scheduler(ExchangeConfig(key="k"), cycle, first_delay=0.0)

    scheduler.start()
    await asyncio.sleep(0.01)
    assert scheduler.in_flight == 1

    scheduler.stop()
    await scheduler.wait_idle()

    assert cycle.calls == 1
    assert scheduler.in_flight == 0


@pytest.mark.asyncio
async def test_crashing_cycle_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    scheduler = Scheduler(ExchangeConfig(key="k"), _CycleCounter(fail=True), first_delay=0.0)

    scheduler.start()
    await asyncio.sleep(0.01)
    await scheduler.wait_idle()
    scheduler.stop()

    assert any(r.message == "Sync cycle crashed" and r.exc_info for r in caplog.records)
