from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from pyshipsio.exceptions import ShipsIOInvalidKeyError, ShipsIOResponseError
from pyshipsio.ingestion.response import is_invalid_key_body, parse_post_response
from pyshipsio.models import SyncBatch, SyncResult, VesselRecord, format_timestamp, parse_timestamp


def test_vessel_record_requires_mmsi() -> None:
    with pytest.raises(ValidationError):
        VesselRecord.model_validate({"Name": "NO ID"})


def test_vessel_record_accepts_canonical_and_wire_names() -> None:
    canonical = VesselRecord.model_validate({"MMSI": 1, "Latitude": 1.0, "SpeedOverGround": 2.0, "CallsignVHF": "X"})
    wire = VesselRecord.model_validate({"MMSI": 1, "Lat": 1.0, "Speed": 2.0, "Callsign": "X"})

    assert canonical == wire


def test_to_wire_uses_shipsio_names_and_drops_absent_fields() -> None:
    record = VesselRecord(
        mmsi=123456789,
        latitude=37.0,
        longitude=-122.0,
        draft=2.5,
        last_modified=datetime(2026, 1, 1, tzinfo=UTC),
        originated_from_network=True,
    )

    assert record.to_wire() == {
        "MMSI": 123456789,
        "Lat": 37.0,
        "Lon": -122.0,
        "Draft": 2.5,
        "Modified": "2026-01-01T00:00:00.000Z",
    }


def test_sync_batch_payload_shape() -> None:
    batch = SyncBatch(
        key="secret",
        integrate=True,
        lat=37.0,
        lon=-122.0,
        vessels=[VesselRecord(mmsi=123456789, name="SELF")],
    )

    assert batch.to_payload() == {
        "Key": "secret",
        "Integrate": True,
        "Lat": 37.0,
        "Lon": -122.0,
        "Vessels": [{"MMSI": 123456789, "Name": "SELF"}],
    }


def test_sync_result_drops_invalid_peers_only() -> None:
    result = SyncResult.model_validate(
        {
            "Posted": 2,
            "vessels": [
                {"MMSI": 999999999, "Name": "PEER", "Modified": "2026-10-19T08:00:00Z"},
                {"Name": "NO MMSI"},
            ],
        }
    )

    assert result.posted == 2
    assert [peer.mmsi for peer in result.vessels] == [999999999]


def test_parse_post_response_acknowledgement() -> None:
    result = parse_post_response('{"Posted":1}')
    assert result.posted == 1
    assert result.vessels == []


def test_parse_post_response_null_vessels() -> None:
    assert parse_post_response('{"Posted":0,"vessels":null}').vessels == []


@pytest.mark.parametrize("body", ["Invalid key", '"Invalid key"', ' "Invalid key"\n'])
def test_parse_post_response_invalid_key(body: str) -> None:
    assert is_invalid_key_body(body)
    with pytest.raises(ShipsIOInvalidKeyError):
        parse_post_response(body)


@pytest.mark.parametrize("body", ["", "<html>502</html>", '{"Error":"down"}', '{"Posted":'])
def test_parse_post_response_rejects_other_bodies(body: str) -> None:
    with pytest.raises(ShipsIOResponseError) as exc_info:
        parse_post_response(body)
    assert not isinstance(exc_info.value, ShipsIOInvalidKeyError)


def test_parse_timestamp_variants() -> None:
    expected = datetime(2026, 10, 19, 8, 0, tzinfo=UTC)

    assert parse_timestamp("2026-10-19T08:00:00Z") == expected
    assert parse_timestamp(expected.timestamp()) == expected
    assert parse_timestamp(expected.timestamp() * 1000) == expected
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp(None) is None


def test_format_timestamp_uses_signalk_style() -> None:
    assert format_timestamp(datetime(2026, 10, 19, 8, 0, 1, 500000, tzinfo=UTC)) == "2026-10-19T08:00:01.500Z"
