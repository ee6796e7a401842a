"""Canonical vessel record."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, field_serializer, field_validator

from pyshipsio._constants import IMO_PREFIX
from pyshipsio.ingestion.normalize import parse_mmsi, safe_float, safe_int, safe_str
from pyshipsio.models._base import ShipsIOBaseModel, Timestamp, format_timestamp


class VesselRecord(ShipsIOBaseModel):
    """One vessel at one point in time, flattened.

    Every attribute except ``mmsi`` is optional; ``None`` means "not
    known" and is never put on the wire. Input is accepted under the
    Python field name, the canonical name (``SpeedOverGround``) or the
    short name ShipsIO uses (``Speed``). Output always uses the ShipsIO
    names.

    Parameters
    ----------
    mmsi : int
        Maritime Mobile Service Identity. Required.
    latitude, longitude : float or None
        Position in decimal degrees.
    speed_over_ground : float or None
        Speed in m/s, as Signal K reports it.
    course_over_ground_true, heading_true : float or None
        Radians, as Signal K reports them.
    imo : str or None
        IMO number digits, without the ``IMO`` prefix.
    draft : float or None
        Single resolved draft (maximum if known, else current).
    last_modified : datetime or None
        When ShipsIO last saw the vessel. Required for emitting.
    originated_from_network : bool
        The record came from ShipsIO rather than the local AIS receiver.
        Such records are never posted back. Not serialized.
    """

    mmsi: int = Field(validation_alias=AliasChoices("mmsi", "MMSI"), serialization_alias="MMSI")
    name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("name", "Name"),
        serialization_alias="Name",
    )
    latitude: float | None = Field(
        default=None,
        validation_alias=AliasChoices("latitude", "Latitude", "Lat"),
        serialization_alias="Lat",
    )
    longitude: float | None = Field(
        default=None,
        validation_alias=AliasChoices("longitude", "Longitude", "Lon"),
        serialization_alias="Lon",
    )
    speed_over_ground: float | None = Field(
        default=None,
        validation_alias=AliasChoices("speed_over_ground", "SpeedOverGround", "Speed"),
        serialization_alias="Speed",
    )
    course_over_ground_true: float | None = Field(
        default=None,
        validation_alias=AliasChoices("course_over_ground_true", "CourseOverGroundTrue", "Course"),
        serialization_alias="Course",
    )
    heading_true: float | None = Field(
        default=None,
        validation_alias=AliasChoices("heading_true", "HeadingTrue", "Heading"),
        serialization_alias="Heading",
    )
    callsign_vhf: str | None = Field(
        default=None,
        validation_alias=AliasChoices("callsign_vhf", "CallsignVHF", "Callsign", "callsign"),
        serialization_alias="Callsign",
    )
    imo: str | None = Field(
        default=None,
        validation_alias=AliasChoices("imo", "IMO"),
        serialization_alias="IMO",
    )
    length_overall: float | None = Field(
        default=None,
        validation_alias=AliasChoices("length_overall", "LengthOverall", "Length"),
        serialization_alias="Length",
    )
    beam: float | None = Field(
        default=None,
        validation_alias=AliasChoices("beam", "Beam"),
        serialization_alias="Beam",
    )
    draft: float | None = Field(
        default=None,
        validation_alias=AliasChoices("draft", "Draft"),
        serialization_alias="Draft",
    )
    ais_ship_type_id: int | None = Field(
        default=None,
        validation_alias=AliasChoices("ais_ship_type_id", "AISShipTypeId", "AISType"),
        serialization_alias="AISType",
    )
    ais_ship_type_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ais_ship_type_name", "AISShipTypeName", "AISTypeDescription"),
        serialization_alias="AISTypeDescription",
    )
    ais_class: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ais_class", "AISClass"),
        serialization_alias="AISClass",
    )
    last_modified: Timestamp = Field(
        default=None,
        validation_alias=AliasChoices("last_modified", "LastModified", "Modified"),
        serialization_alias="Modified",
    )
    originated_from_network: bool = Field(
        default=False,
        validation_alias=AliasChoices("originated_from_network", "OriginatedFromNetwork"),
        exclude=True,
    )

    @field_validator("mmsi", mode="before")
    @classmethod
    def _coerce_mmsi(cls, value: Any) -> int:
        parsed = parse_mmsi(value)
        if parsed is None:
            raise ValueError(f"mmsi must be a positive integer, got {value!r}")
        return parsed

    @field_validator(
        "latitude",
        "longitude",
        "speed_over_ground",
        "course_over_ground_true",
        "heading_true",
        "length_overall",
        "beam",
        "draft",
        mode="before",
    )
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("name", "callsign_vhf", "ais_ship_type_name", "ais_class", mode="before")
    @classmethod
    def _coerce_strings(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("ais_ship_type_id", mode="before")
    @classmethod
    def _coerce_type_id(cls, value: Any) -> int | None:
        return safe_int(value)

    @field_validator("imo", mode="before")
    @classmethod
    def _coerce_imo(cls, value: Any) -> str | None:
        text = safe_str(value)
        if text is not None and text.startswith(IMO_PREFIX):
            text = safe_str(text[len(IMO_PREFIX):])
        return text

    @field_validator("originated_from_network", mode="before")
    @classmethod
    def _coerce_origin(cls, value: Any) -> bool:
        return value is True

    @field_serializer("last_modified", when_used="json-unless-none")
    def _serialize_modified(self, value: datetime) -> str:
        return format_timestamp(value)

    def present_fields(self) -> dict[str, Any]:
        """Known attributes by Python field name (``None`` values dropped)."""
        return self.model_dump(exclude_none=True)

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict in ShipsIO field naming."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def as_network_origin(self) -> VesselRecord:
        return self.model_copy(update={"originated_from_network": True})
