"""Host-facing plugin: lifecycle, option schema and wiring."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

import aiohttp

from pyshipsio._constants import AGENT_DESCRIPTION, AGENT_ID, AGENT_NAME, DEFAULT_INTERVAL, MIN_INTERVAL
from pyshipsio._transport import BoundedTransport
from pyshipsio.config import ExchangeConfig
from pyshipsio.emitter import DeltaSink, OutputEmitter
from pyshipsio.engine import CycleReport, SyncEngine
from pyshipsio.exceptions import ShipsIOError
from pyshipsio.scheduler import Scheduler, SchedulerState
from pyshipsio.state.key_gate import KeyValidityGate

_logger = logging.getLogger(__name__)


class ExchangePlugin:
    """ShipsIO AIS exchange, packaged the way a Signal K host drives plugins.

    Usage::

        async with ExchangePlugin(sink=server.handle_message) as plugin:
            await plugin.start({"key": "...", "integrate": True})
            ...

    The dedup store and the key gate live as long as the plugin object,
    so a stop/start cycle with new options keeps what was already shared
    and does not re-raise a known key rejection.
    """

    id = AGENT_ID
    name = AGENT_NAME
    description = AGENT_DESCRIPTION

    def __init__(
        self,
        *,
        sink: DeltaSink,
        on_error: Callable[[str], None] | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._sink = sink
        self._on_error = on_error
        self._external_session = session is not None
        self._http_session = session
        self._config: ExchangeConfig | None = None
        self._gate = KeyValidityGate(on_alarm=self._report_error)
        self._engine: SyncEngine | None = None
        self._scheduler: Scheduler | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ExchangePlugin:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()
        if self._engine is not None:
            await self._engine.wait_idle()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Host API
    # ------------------------------------------------------------------

    @staticmethod
    def schema() -> dict[str, Any]:
        """JSON schema of the options the host collects for this plugin."""
        return {
            "title": "Exchange AIS messages with ShipsIO",
            "type": "object",
            "required": ["key"],
            "properties": {
                "interval": {
                    "type": "number",
                    "title": f"Interval between AIS reports in seconds ({MIN_INTERVAL:.0f} is the minimum)",
                    "default": DEFAULT_INTERVAL,
                    "minimum": MIN_INTERVAL,
                },
                "key": {
                    "type": "string",
                    "title": (
                        "AIS key. Get it from https://shipsio.com. The key is free, subscription is NOT "
                        "required. Go to Accounts page to copy the key and paste it here."
                    ),
                    "default": "",
                },
                "integrate": {
                    "type": "boolean",
                    "title": "Get ships around me and integrate them into my AIS SignalK feed",
                    "default": False,
                },
            },
        }

    @property
    def config(self) -> ExchangeConfig | None:
        return self._config

    @property
    def engine(self) -> SyncEngine | None:
        return self._engine

    @property
    def gate(self) -> KeyValidityGate:
        return self._gate

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.state == SchedulerState.SCHEDULED

    async def start(self, options: Mapping[str, Any] | ExchangeConfig) -> bool:
        """Configure the exchange and schedule its cycles.

        Returns ``False`` when nothing was scheduled (no key configured).
        """
        if self._scheduler is not None:
            await self.stop()

        config = options if isinstance(options, ExchangeConfig) else ExchangeConfig.from_options(options)
        self._config = config
        _logger.info("Starting ShipsIO exchange (interval=%s, integrate=%s)", config.interval, config.integrate)

        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()

        transport = BoundedTransport(config, self._http_session)
        if self._engine is None:
            self._engine = SyncEngine(
                config,
                transport,
                gate=self._gate,
                emitter=OutputEmitter(self._sink, source_label=self.id),
            )
        else:
            # Single engine: cycles stay single-flight across restarts.
            self._engine.reconfigure(config, transport)
        self._scheduler = Scheduler(config, self._engine.run_cycle, on_alarm=self._report_error)
        return self._scheduler.start()

    async def stop(self) -> None:
        """Stop scheduling. A cycle already talking to ShipsIO is not interrupted."""
        scheduler = self._scheduler
        self._scheduler = None
        if scheduler is not None:
            _logger.info("Stopping ShipsIO exchange")
            scheduler.stop()

    async def run_cycle(self) -> CycleReport | None:
        """Run one cycle now, outside the schedule."""
        if self._engine is None:
            raise ShipsIOError("Plugin not started. Call 'await plugin.start(options)' first")
        return await self._engine.run_cycle()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _report_error(self, message: str) -> None:
        if self._on_error is not None:
            self._on_error(message)
        else:
            _logger.error(message)
