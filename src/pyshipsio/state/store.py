"""Per-vessel dedup store.

Remembers, per MMSI, the record ShipsIO last acknowledged, so each cycle
only transmits what changed. The store only grows: entries are never
evicted for the lifetime of the engine that owns it.
"""

from __future__ import annotations

import logging

from pyshipsio.models.vessel import VesselRecord

_logger = logging.getLogger(__name__)


class DedupStore:
    """In-memory map of MMSI to last acknowledged :class:`VesselRecord`.

    Parameters
    ----------
    refresh_sent_state : bool
        When ``False`` an entry is written once, on the first
        acknowledged sighting, and never refreshed afterwards. When
        ``True`` every acknowledged delta is merged into the entry, so
        later diffs compare against what was actually sent last.
    """

    def __init__(self, *, refresh_sent_state: bool = False) -> None:
        self._refresh_sent_state = refresh_sent_state
        self._records: dict[int, VesselRecord] = {}

    @property
    def refresh_sent_state(self) -> bool:
        return self._refresh_sent_state

    @refresh_sent_state.setter
    def refresh_sent_state(self, value: bool) -> None:
        self._refresh_sent_state = value

    def __contains__(self, mmsi: object) -> bool:
        return mmsi in self._records

    def __len__(self) -> int:
        return len(self._records)

    def get(self, mmsi: int) -> VesselRecord | None:
        return self._records.get(mmsi)

    def is_network_origin(self, mmsi: int) -> bool:
        """Whether *mmsi* was first learned from ShipsIO rather than locally."""
        record = self._records.get(mmsi)
        return record is not None and record.originated_from_network

    def diff(self, candidate: VesselRecord) -> VesselRecord:
        """Strip the attributes ShipsIO already has for this vessel.

        A vessel never acknowledged before is returned unchanged. Otherwise
        every attribute equal to the stored one is dropped; ``mmsi`` is
        always kept so the delta still says which vessel it is about.
        """
        prior = self._records.get(candidate.mmsi)
        if prior is None:
            return candidate

        changed = {
            name: value
            for name, value in candidate.present_fields().items()
            if name == "mmsi" or getattr(prior, name) != value
        }
        return VesselRecord.model_validate(changed)

    def commit(self, sent: VesselRecord) -> bool:
        """Record that ShipsIO acknowledged *sent*.

        Returns ``True`` when the vessel was not known before.
        """
        prior = self._records.get(sent.mmsi)
        if prior is None:
            self._records[sent.mmsi] = sent
            return True
        if self._refresh_sent_state:
            # Absent attributes in a delta mean "unchanged", never "cleared".
            self._records[sent.mmsi] = prior.model_copy(update=sent.present_fields())
        return False

    def remember_peer(self, peer: VesselRecord) -> bool:
        """Store a vessel learned from ShipsIO on first observation.

        Returns ``True`` when the vessel was not known before; known
        vessels are left untouched.
        """
        if peer.mmsi in self._records:
            return False
        self._records[peer.mmsi] = peer if peer.originated_from_network else peer.as_network_origin()
        _logger.debug("Learned network vessel %s (%d known)", peer.mmsi, len(self._records))
        return True
