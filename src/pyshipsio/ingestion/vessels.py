"""Vessel document normalization.

A Signal K ``/vessels`` snapshot is an object of nested per-vessel
documents. Each document is reduced to a :class:`VesselRecord` in two
passes:

1. *structured*: the Signal K layout (``navigation.position.value``...),
   one extractor per attribute group so a malformed group never hides
   the others;
2. *flattened*: top-level keys in canonical or ShipsIO naming
   (``Lat``, ``SpeedOverGround``, ``Modified``...). Any value found here
   replaces what the structured pass produced.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import AliasChoices, ValidationError

from pyshipsio.ingestion.normalize import dig, parse_mmsi, safe_float, safe_int, safe_str, strip_imo_prefix
from pyshipsio.models.vessel import VesselRecord

_logger = logging.getLogger(__name__)

Patch = dict[str, Any]


def _leaf(value: Any) -> Any:
    """Unwrap a Signal K ``{"value": ...}`` leaf; plain values pass through."""
    if isinstance(value, Mapping) and "value" in value:
        return value.get("value")
    return value


# ------------------------------------------------------------------
# Structured pass
# ------------------------------------------------------------------


def _extract_name(doc: Mapping[str, Any]) -> Patch:
    return {"name": doc.get("name")}


def _extract_position(doc: Mapping[str, Any]) -> Patch:
    position = dig(doc, "navigation", "position", "value")
    if not isinstance(position, Mapping):
        return {}
    latitude = safe_float(position.get("latitude"))
    longitude = safe_float(position.get("longitude"))
    if latitude is None or longitude is None:
        return {}
    return {
        "latitude": latitude,
        "longitude": longitude,
        "speed_over_ground": dig(doc, "navigation", "speedOverGround", "value"),
        "course_over_ground_true": dig(doc, "navigation", "courseOverGroundTrue", "value"),
        "heading_true": dig(doc, "navigation", "headingTrue", "value"),
    }


def _extract_communication(doc: Mapping[str, Any]) -> Patch:
    communication = doc.get("communication")
    if not isinstance(communication, Mapping):
        return {}
    patch: Patch = {"callsign_vhf": _leaf(communication.get("callsignVhf"))}
    if _leaf(communication.get("netAIS")) is True:
        patch["originated_from_network"] = True
    return patch


def _extract_dimensions(doc: Mapping[str, Any]) -> Patch:
    return {
        "length_overall": dig(doc, "design", "length", "value", "overall"),
        "beam": dig(doc, "design", "beam", "value"),
    }


def _extract_draft(doc: Mapping[str, Any]) -> Patch:
    draft = dig(doc, "design", "draft", "value")
    if not isinstance(draft, Mapping):
        return {}
    for key in ("maximum", "current"):
        value = safe_float(draft.get(key))
        if value is not None:
            return {"draft": value}
    return {}


def _extract_ship_type(doc: Mapping[str, Any]) -> Patch:
    ship_type = dig(doc, "design", "aisShipType", "value")
    if not isinstance(ship_type, Mapping):
        return {}
    type_id = safe_int(ship_type.get("id"))
    type_name = safe_str(ship_type.get("name"))
    if type_id is None or type_name is None:
        return {}
    return {"ais_ship_type_id": type_id, "ais_ship_type_name": type_name}


def _extract_ais_class(doc: Mapping[str, Any]) -> Patch:
    return {"ais_class": dig(doc, "sensors", "ais", "class", "value")}


def _extract_registration(doc: Mapping[str, Any]) -> Patch:
    return {"imo": strip_imo_prefix(_leaf(dig(doc, "registrations", "imo")))}


_STRUCTURED_EXTRACTORS: tuple[Callable[[Mapping[str, Any]], Patch], ...] = (
    _extract_name,
    _extract_position,
    _extract_communication,
    _extract_dimensions,
    _extract_draft,
    _extract_ship_type,
    _extract_ais_class,
    _extract_registration,
)


def _structured_pass(doc: Mapping[str, Any]) -> Patch:
    patch: Patch = {}
    for extractor in _STRUCTURED_EXTRACTORS:
        try:
            patch.update(extractor(doc))
        except (AttributeError, KeyError, TypeError, ValueError):
            _logger.debug("Skipping %s for malformed vessel document", extractor.__name__, exc_info=True)
    return patch


# ------------------------------------------------------------------
# Flattened pass
# ------------------------------------------------------------------


def _flat_aliases() -> dict[str, tuple[str, ...]]:
    """Flattened input keys per field, taken from the model's aliases.

    The Python field names themselves are left out: ``mmsi`` and ``name``
    are also structured keys and must not count as flattened input.
    """
    aliases: dict[str, tuple[str, ...]] = {}
    for field_name, info in VesselRecord.model_fields.items():
        choices = info.validation_alias
        if not isinstance(choices, AliasChoices):
            continue
        keys = tuple(choice for choice in choices.choices if isinstance(choice, str) and choice != field_name)
        if keys:
            aliases[field_name] = keys
    return aliases


_FLAT_ALIASES = _flat_aliases()
_SHIP_TYPE_FIELDS = ("ais_ship_type_id", "ais_ship_type_name")


def _flattened_pass(doc: Mapping[str, Any]) -> Patch:
    patch: Patch = {}
    for field_name, keys in _FLAT_ALIASES.items():
        for key in keys:
            value = doc.get(key)
            if value is not None:
                patch[field_name] = value
                break
    # AIS type id and name only replace the structured pair together.
    if sum(name in patch for name in _SHIP_TYPE_FIELDS) == 1:
        for name in _SHIP_TYPE_FIELDS:
            patch.pop(name, None)
    return patch


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------


def _pair_ship_type(record: VesselRecord) -> VesselRecord:
    if (record.ais_ship_type_id is None) != (record.ais_ship_type_name is None):
        _logger.debug("Dropping incomplete AIS ship type of vessel %s", record.mmsi)
        return record.model_copy(update=dict.fromkeys(_SHIP_TYPE_FIELDS))
    return record


def _build_record(patch: Patch) -> VesselRecord | None:
    try:
        return _pair_ship_type(VesselRecord.model_validate(patch))
    except ValidationError as exc:
        bad_fields = {str(err["loc"][0]) for err in exc.errors() if err.get("loc")}
        if bad_fields.intersection(_SHIP_TYPE_FIELDS):
            bad_fields.update(_SHIP_TYPE_FIELDS)
        _logger.debug("Dropping malformed vessel attributes %s", sorted(bad_fields))
        retry = {key: value for key, value in patch.items() if key not in bad_fields or key == "mmsi"}
    try:
        return _pair_ship_type(VesselRecord.model_validate(retry))
    except ValidationError:
        _logger.debug("Vessel %s could not be normalized", patch.get("mmsi"), exc_info=True)
        return None


def normalize_vessel(raw: Any) -> VesselRecord | None:
    """Convert one raw vessel document into a :class:`VesselRecord`.

    Returns ``None`` when the document has no usable MMSI; that is a
    filter, not an error.
    """
    if not isinstance(raw, Mapping):
        return None

    patch = _structured_pass(raw)
    for field_name, value in _flattened_pass(raw).items():
        patch[field_name] = value

    mmsi = parse_mmsi(patch.pop("mmsi", None))
    if mmsi is None:
        mmsi = parse_mmsi(raw.get("mmsi"))
    if mmsi is None:
        return None
    patch["mmsi"] = mmsi

    return _build_record({key: value for key, value in patch.items() if value is not None})


def normalize_snapshot(snapshot: Any) -> list[VesselRecord]:
    """Normalize every vessel document of a Signal K ``/vessels`` snapshot.

    Order follows the snapshot's own key order. Documents without an MMSI
    are silently left out.
    """
    if not isinstance(snapshot, Mapping):
        _logger.warning("Vessel snapshot is not an object (%s); ignoring it", type(snapshot).__name__)
        return []

    records: list[VesselRecord] = []
    for key, document in snapshot.items():
        record = normalize_vessel(document)
        if record is None:
            _logger.debug("Skipping %s: no MMSI", key)
            continue
        records.append(record)
    return records
