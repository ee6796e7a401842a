"""Data models for vessel records and ShipsIO exchanges."""

from pyshipsio.models._base import ShipsIOBaseModel, Timestamp, format_timestamp, parse_timestamp
from pyshipsio.models.sync import SyncBatch, SyncResult
from pyshipsio.models.vessel import VesselRecord

__all__ = [
    "ShipsIOBaseModel",
    "SyncBatch",
    "SyncResult",
    "Timestamp",
    "VesselRecord",
    "format_timestamp",
    "parse_timestamp",
]
