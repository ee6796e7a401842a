"""Periodic cycle scheduling."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any

from pyshipsio._constants import FIRST_CYCLE_DELAY, MIN_INTERVAL
from pyshipsio.config import ExchangeConfig
from pyshipsio.exceptions import ShipsIOError
from pyshipsio.ingestion.normalize import safe_float

_logger = logging.getLogger(__name__)

MISSING_KEY_ALARM = "No AIS key configured. Get a free key at https://shipsio.com and paste it in the plugin settings."


class SchedulerState(StrEnum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    STOPPED = "stopped"


def clamp_interval(value: Any, *, floor: float = MIN_INTERVAL) -> float:
    """Raise *value* to *floor*; missing or non-numeric values become *floor*."""
    interval = safe_float(value)
    if interval is None or interval < floor:
        return floor
    return interval


class Scheduler:
    """Fires sync cycles on two independent timers.

    The first cycle runs ``first_delay`` seconds after :meth:`start`,
    giving the local Signal K server time to collect AIS targets; the
    periodic timer fires every (clamped) interval from :meth:`start` on.
    Each cycle runs as its own task so the timers never wait on network
    latency.

    A scheduler is single use: ``IDLE -> SCHEDULED -> STOPPED``.
    """

    def __init__(
        self,
        config: ExchangeConfig,
        cycle: Callable[[], Awaitable[Any]],
        *,
        on_alarm: Callable[[str], None] | None = None,
        first_delay: float = FIRST_CYCLE_DELAY,
        min_interval: float = MIN_INTERVAL,
    ) -> None:
        self._config = config
        self._cycle = cycle
        self._on_alarm = on_alarm
        self._first_delay = first_delay
        self._interval = clamp_interval(config.interval, floor=min_interval)
        self._state = SchedulerState.IDLE
        self._first_handle: asyncio.TimerHandle | None = None
        self._periodic_task: asyncio.Task[None] | None = None
        self._cycles: set[asyncio.Task[Any]] = set()

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def in_flight(self) -> int:
        return len(self._cycles)

    def start(self) -> bool:
        """Arm the timers.

        Returns ``False`` without scheduling anything when no key is
        configured; the problem is reported once and the scheduler stops
        for good.
        """
        if self._state != SchedulerState.IDLE:
            raise ShipsIOError(f"Scheduler cannot be started from state {self._state}")

        if not self._config.has_key:
            _logger.error("ShipsIO AIS key is not configured; nothing will be scheduled")
            self._state = SchedulerState.STOPPED
            if self._on_alarm is not None:
                self._on_alarm(MISSING_KEY_ALARM)
            return False

        loop = asyncio.get_running_loop()
        self._first_handle = loop.call_later(self._first_delay, self._trigger)
        self._periodic_task = loop.create_task(self._periodic())
        self._state = SchedulerState.SCHEDULED
        _logger.info(
            "Scheduled ShipsIO exchange: first cycle in %.0fs, then every %.0fs",
            self._first_delay,
            self._interval,
        )
        return True

    def stop(self) -> None:
        """Cancel the timers. Cycles already running are left to finish."""
        if self._first_handle is not None:
            self._first_handle.cancel()
            self._first_handle = None
        if self._periodic_task is not None:
            self._periodic_task.cancel()
            self._periodic_task = None
        if self._state != SchedulerState.STOPPED:
            _logger.info("Stopped ShipsIO exchange (%d cycle(s) still in flight)", len(self._cycles))
        self._state = SchedulerState.STOPPED

    async def wait_idle(self) -> None:
        """Wait for every in-flight cycle to finish."""
        if self._cycles:
            await asyncio.gather(*self._cycles, return_exceptions=True)

    async def _periodic(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self._trigger()

    def _trigger(self) -> None:
        if self._state != SchedulerState.SCHEDULED:
            return
        task = asyncio.get_running_loop().create_task(self._cycle())
        self._cycles.add(task)
        task.add_done_callback(self._on_cycle_done)

    def _on_cycle_done(self, task: asyncio.Task[Any]) -> None:
        self._cycles.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.error("Sync cycle crashed", exc_info=exc)
