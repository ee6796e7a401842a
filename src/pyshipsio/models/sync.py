"""ShipsIO request/response models."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import AliasChoices, Field, ValidationError, field_validator

from pyshipsio.models._base import ShipsIOBaseModel
from pyshipsio.models.vessel import VesselRecord

_logger = logging.getLogger(__name__)


class SyncBatch(ShipsIOBaseModel):
    """Outbound payload for one cycle.

    ``lat``/``lon`` anchor the request: ShipsIO returns peers near this
    position. They are copied from the first vessel of the snapshot,
    which on a typical Signal K server is the reporting vessel itself.
    """

    key: str = Field(serialization_alias="Key")
    integrate: bool = Field(default=False, serialization_alias="Integrate")
    lat: float | None = Field(default=None, serialization_alias="Lat")
    lon: float | None = Field(default=None, serialization_alias="Lon")
    vessels: list[VesselRecord] = Field(default_factory=list, serialization_alias="Vessels")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SyncResult(ShipsIOBaseModel):
    """Acknowledgement of a posted batch.

    Peers that fail validation (typically a missing MMSI) are dropped
    one by one; they never invalidate the acknowledgement itself.
    """

    posted: int = Field(default=0, validation_alias=AliasChoices("posted", "Posted"))
    vessels: list[VesselRecord] = Field(default_factory=list, validation_alias=AliasChoices("vessels", "Vessels"))

    @field_validator("posted", mode="before")
    @classmethod
    def _coerce_posted(cls, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0
        return int(value)

    @field_validator("vessels", mode="before")
    @classmethod
    def _keep_valid_peers(cls, value: Any) -> list[VesselRecord]:
        if not isinstance(value, list):
            return []
        peers: list[VesselRecord] = []
        for item in value:
            try:
                peers.append(VesselRecord.model_validate(item))
            except ValidationError as exc:
                _logger.debug("Skipping peer vessel %r: %s", item, exc.errors(include_url=False))
        return peers
