"""pyshipsio - Async AIS exchange between a Signal K server and the ShipsIO network."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyshipsio")
except PackageNotFoundError:
    __version__ = "0+local"
from pyshipsio.config import ExchangeConfig
from pyshipsio.emitter import OutputEmitter, build_delta, prepare_values
from pyshipsio.engine import CycleReport, SyncEngine
from pyshipsio.exceptions import (
    ShipsIOBodyTooLargeError,
    ShipsIOConfigError,
    ShipsIOError,
    ShipsIOInvalidKeyError,
    ShipsIOResponseError,
    ShipsIOTransportError,
)
from pyshipsio.ingestion.vessels import normalize_snapshot, normalize_vessel
from pyshipsio.models import SyncBatch, SyncResult, VesselRecord
from pyshipsio.plugin import ExchangePlugin
from pyshipsio.scheduler import Scheduler, SchedulerState, clamp_interval
from pyshipsio.state.key_gate import KeyState, KeyValidityGate
from pyshipsio.state.store import DedupStore

__all__ = [
    "__version__",
    "CycleReport",
    "DedupStore",
    "ExchangeConfig",
    "ExchangePlugin",
    "KeyState",
    "KeyValidityGate",
    "OutputEmitter",
    "Scheduler",
    "SchedulerState",
    "ShipsIOBodyTooLargeError",
    "ShipsIOConfigError",
    "ShipsIOError",
    "ShipsIOInvalidKeyError",
    "ShipsIOResponseError",
    "ShipsIOTransportError",
    "SyncBatch",
    "SyncEngine",
    "SyncResult",
    "VesselRecord",
    "build_delta",
    "clamp_interval",
    "normalize_snapshot",
    "normalize_vessel",
    "prepare_values",
]
