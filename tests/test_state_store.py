from __future__ import annotations

from pyshipsio.models.vessel import VesselRecord
from pyshipsio.state.store import DedupStore


def _record(**overrides: object) -> VesselRecord:
    fields: dict[str, object] = {
        "mmsi": 123456789,
        "name": "SELF",
        "latitude": 37.0,
        "longitude": -122.0,
        "speed_over_ground": 2.5,
    }
    fields.update(overrides)
    return VesselRecord.model_validate(fields)


def test_diff_of_unknown_vessel_is_the_record_itself() -> None:
    store = DedupStore()
    record = _record()

    assert store.diff(record) is record


def test_diff_of_unchanged_vessel_keeps_only_mmsi() -> None:
    store = DedupStore()
    store.commit(_record())

    diffed = store.diff(_record())

    assert diffed.present_fields() == {"mmsi": 123456789}
    assert diffed.to_wire() == {"MMSI": 123456789}


def test_diff_keeps_changed_fields_only() -> None:
    store = DedupStore()
    store.commit(_record())

    diffed = store.diff(_record(latitude=37.5, heading_true=1.0))

    assert diffed.present_fields() == {"mmsi": 123456789, "latitude": 37.5, "heading_true": 1.0}


def test_commit_inserts_once_and_never_refreshes_by_default() -> None:
    store = DedupStore()

    assert store.commit(_record()) is True
    assert store.commit(VesselRecord(mmsi=123456789, latitude=40.0)) is False

    stored = store.get(123456789)
    assert stored is not None
    assert stored.latitude == 37.0
    # The vessel moved, but the store still compares against the first post.
    assert store.diff(_record(latitude=40.0)).latitude == 40.0


def test_commit_with_refresh_merges_without_truncating() -> None:
    store = DedupStore(refresh_sent_state=True)
    store.commit(_record())

    store.commit(VesselRecord(mmsi=123456789, latitude=40.0))

    stored = store.get(123456789)
    assert stored is not None
    assert stored.latitude == 40.0
    assert stored.name == "SELF"
    assert store.diff(_record(latitude=40.0)).present_fields() == {"mmsi": 123456789}


def test_remember_peer_marks_network_origin_once() -> None:
    store = DedupStore()
    peer = VesselRecord(mmsi=999999999, name="PEER")

    assert store.remember_peer(peer) is True
    assert store.remember_peer(peer) is False
    assert store.is_network_origin(999999999)
    assert not store.is_network_origin(123456789)
    assert 999999999 in store
    assert len(store) == 1


def test_remember_peer_leaves_local_vessels_alone() -> None:
    store = DedupStore()
    store.commit(_record())

    assert store.remember_peer(VesselRecord(mmsi=123456789)) is False
    assert not store.is_network_origin(123456789)
