"""Signal K delta output for vessels learned from ShipsIO."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pyshipsio._constants import AGENT_ID, MMSI_CONTEXT_PREFIX
from pyshipsio.models._base import format_timestamp
from pyshipsio.models.vessel import VesselRecord

_logger = logging.getLogger(__name__)

#: ``sink(source_id, delta)``; mirrors a Signal K server's ``handleMessage``.
DeltaSink = Callable[[str, dict[str, Any]], None]


def vessel_context(mmsi: int) -> str:
    return f"{MMSI_CONTEXT_PREFIX}{mmsi}"


def prepare_values(record: VesselRecord) -> list[dict[str, Any]]:
    """Translate *record* into ordered Signal K ``{path, value}`` pairs.

    ``communication.netAIS`` is always set: it tells downstream consumers,
    and this agent on its next cycle, that the vessel came from ShipsIO.
    """
    values: list[dict[str, Any]] = [{"path": "", "value": {"mmsi": str(record.mmsi)}}]

    if record.name is not None:
        values.append({"path": "", "value": {"name": record.name}})
    if record.imo is not None:
        values.append({"path": "registrations", "value": {"imo": record.imo}})
    if record.callsign_vhf is not None:
        values.append({"path": "communication.callsignVhf", "value": record.callsign_vhf})
    values.append({"path": "communication.netAIS", "value": True})

    if record.latitude is not None and record.longitude is not None:
        values.append(
            {
                "path": "navigation.position",
                "value": {"longitude": record.longitude, "latitude": record.latitude},
            }
        )
    if record.course_over_ground_true is not None:
        values.append({"path": "navigation.courseOverGroundTrue", "value": record.course_over_ground_true})
    if record.speed_over_ground is not None:
        values.append({"path": "navigation.speedOverGround", "value": record.speed_over_ground})
    if record.heading_true is not None:
        values.append({"path": "navigation.headingTrue", "value": record.heading_true})
    if record.last_modified is not None:
        values.append({"path": "navigation.datetime", "value": format_timestamp(record.last_modified)})

    if record.ais_ship_type_id is not None and record.ais_ship_type_name is not None:
        values.append(
            {
                "path": "design.aisShipType",
                "value": {"id": record.ais_ship_type_id, "name": record.ais_ship_type_name},
            }
        )
    if record.length_overall is not None:
        values.append({"path": "design.length", "value": {"overall": record.length_overall}})
    if record.beam is not None:
        values.append({"path": "design.beam", "value": record.beam})
    if record.draft is not None:
        values.append({"path": "design.draft", "value": {"current": record.draft, "maximum": record.draft}})

    return values


def build_delta(record: VesselRecord, *, source_label: str = AGENT_ID) -> dict[str, Any] | None:
    """Build the full Signal K delta for *record*.

    Returns ``None`` when the record has no modification time: without it
    the update cannot be timestamped.
    """
    if record.last_modified is None:
        return None
    return {
        "context": vessel_context(record.mmsi),
        "updates": [
            {
                "values": prepare_values(record),
                "source": {"label": source_label},
                "timestamp": format_timestamp(record.last_modified),
            }
        ],
    }


class OutputEmitter:
    """Forwards network vessels to the host as Signal K deltas."""

    def __init__(self, sink: DeltaSink, *, source_label: str = AGENT_ID) -> None:
        self._sink = sink
        self._source_label = source_label
        self._emitted = 0

    @property
    def emitted(self) -> int:
        return self._emitted

    def emit(self, record: VesselRecord) -> bool:
        """Send *record* to the sink; returns ``False`` if it was dropped."""
        delta = build_delta(record, source_label=self._source_label)
        if delta is None:
            _logger.debug("Not emitting vessel %s: no modification time", record.mmsi)
            return False
        _logger.debug("Emitting network vessel %s (%s)", record.mmsi, record.name)
        self._sink(self._source_label, delta)
        self._emitted += 1
        return True
