"""Synchronization engine: one fetch, diff, post and merge cycle."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from pyshipsio._constants import SHIPSIO_POST_PATH, SIGNALK_VESSELS_PATH
from pyshipsio._transport import Transport
from pyshipsio.config import ExchangeConfig
from pyshipsio.emitter import OutputEmitter
from pyshipsio.exceptions import ShipsIOError
from pyshipsio.ingestion.vessels import normalize_snapshot
from pyshipsio.models.sync import SyncBatch, SyncResult
from pyshipsio.models.vessel import VesselRecord
from pyshipsio.state.key_gate import KeyValidityGate
from pyshipsio.state.store import DedupStore

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CycleReport:
    """What one cycle did; ``error`` is set when it was aborted."""

    vessels_seen: int = 0
    batch: SyncBatch | None = None
    posted: int = 0
    peers_received: int = 0
    peers_emitted: int = 0
    error: ShipsIOError | None = None

    @property
    def batch_size(self) -> int:
        return len(self.batch.vessels) if self.batch is not None else 0

    @property
    def ok(self) -> bool:
        return self.error is None


class SyncEngine:
    """Runs synchronization cycles against one Signal K server and ShipsIO.

    The engine owns the dedup store; it is the only state shared between
    cycles. At most one cycle runs at a time: a cycle started while
    another is still waiting on the network is skipped.
    """

    def __init__(
        self,
        config: ExchangeConfig,
        transport: Transport,
        *,
        store: DedupStore | None = None,
        gate: KeyValidityGate | None = None,
        emitter: OutputEmitter | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._store = store if store is not None else DedupStore(refresh_sent_state=config.refresh_sent_state)
        self._gate = gate if gate is not None else KeyValidityGate()
        self._emitter = emitter
        self._snapshot_url = ""
        self._post_url = ""
        self._set_endpoints(config)
        self._in_flight = False
        self._idle = asyncio.Event()
        self._idle.set()

    def _set_endpoints(self, config: ExchangeConfig) -> None:
        self._snapshot_url = f"{config.signalk_url.rstrip('/')}{SIGNALK_VESSELS_PATH}"
        self._post_url = f"{config.shipsio_url.rstrip('/')}{SHIPSIO_POST_PATH}"

    @property
    def store(self) -> DedupStore:
        return self._store

    @property
    def gate(self) -> KeyValidityGate:
        return self._gate

    @property
    def config(self) -> ExchangeConfig:
        return self._config

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def reconfigure(self, config: ExchangeConfig, transport: Transport | None = None) -> None:
        """Apply new options without losing the store or the key gate.

        A cycle already in flight is not interrupted; cycles started
        afterwards use *config*.
        """
        self._config = config
        if transport is not None:
            self._transport = transport
        self._set_endpoints(config)
        self._store.refresh_sent_state = config.refresh_sent_state

    async def wait_idle(self) -> None:
        """Wait until no cycle is in flight."""
        await self._idle.wait()

    def build_batch(self, records: Sequence[VesselRecord]) -> SyncBatch | None:
        """Diff *records* against the store and wrap them in a batch.

        The anchor position is taken from the first record as observed
        (not its diff), assuming the first vessel is the reporting one.
        """
        if not records:
            return None
        anchor = records[0]
        return SyncBatch(
            key=self._config.key,
            integrate=self._config.integrate,
            lat=anchor.latitude,
            lon=anchor.longitude,
            vessels=[self._store.diff(record) for record in records],
        )

    async def run_cycle(self) -> CycleReport | None:
        """Run one cycle.

        Returns ``None`` when skipped because another cycle is in flight.
        Transport, response and key errors abort the cycle and are
        reported on the returned :class:`CycleReport`; the store is left
        untouched in that case.
        """
        if self._in_flight:
            _logger.debug("Previous sync cycle still in flight; skipping")
            return None

        self._in_flight = True
        self._idle.clear()
        report = CycleReport()
        try:
            await self._run_cycle(report)
        except ShipsIOError as exc:
            _logger.warning("Sync cycle aborted: %s", exc)
            report.error = exc
        finally:
            self._in_flight = False
            self._idle.set()
        return report

    async def _run_cycle(self, report: CycleReport) -> None:
        snapshot = await self._transport.fetch_json(self._snapshot_url)
        records = normalize_snapshot(snapshot)
        report.vessels_seen = len(records)

        outbound = [
            record
            for record in records
            if not record.originated_from_network and not self._store.is_network_origin(record.mmsi)
        ]
        batch = self.build_batch(outbound)
        if batch is None:
            _logger.debug("No local vessels to share (%d seen)", len(records))
            return
        report.batch = batch

        payload = batch.to_payload()
        result = await self._gate.post(lambda: self._transport.post_json(self._post_url, payload))
        report.posted = result.posted
        _logger.info("Vessels posted to ShipsIO: %d", result.posted)

        for sent in batch.vessels:
            self._store.commit(sent)

        self._merge_peers(result, report)

    def _merge_peers(self, result: SyncResult, report: CycleReport) -> None:
        report.peers_received = len(result.vessels)
        new_peers = [peer.as_network_origin() for peer in result.vessels if peer.mmsi not in self._store]
        _logger.info(
            "Vessels returned from ShipsIO: %d, new net AIS vessels: %d",
            len(result.vessels),
            len(new_peers),
        )
        for peer in new_peers:
            if not self._store.remember_peer(peer):
                # Duplicate MMSI inside the same response.
                continue
            if self._emitter is not None and self._emitter.emit(peer):
                report.peers_emitted += 1
