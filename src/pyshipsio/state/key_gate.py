"""One-shot reporting of a rejected ShipsIO key.

ShipsIO answers every post made with a bad key with ``Invalid key``. With
a two minute polling floor that would raise the same alarm forever, so the
gate surfaces the first rejection to the user and only logs the rest.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from pyshipsio.exceptions import ShipsIOInvalidKeyError
from pyshipsio.ingestion.response import parse_post_response
from pyshipsio.models.sync import SyncResult

_logger = logging.getLogger(__name__)

INVALID_KEY_ALARM = "ShipsIO rejected the AIS key. Copy a valid key from the Accounts page at https://shipsio.com."


def _utcnow() -> datetime:
    return datetime.now(UTC)


class KeyState(StrEnum):
    UNKNOWN = "unknown"
    VALID = "valid"
    INVALID = "invalid"


@dataclass(frozen=True, slots=True)
class KeyTransition:
    previous: KeyState
    current: KeyState
    at: datetime


class KeyValidityGate:
    """Key validity state machine: ``UNKNOWN -> VALID -> INVALID``.

    ``UNKNOWN`` counts as valid. ``INVALID`` is terminal; only a new gate
    (i.e. a restart) clears it.
    """

    def __init__(
        self,
        *,
        on_alarm: Callable[[str], None] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._on_alarm = on_alarm
        self._clock = clock
        self._state = KeyState.UNKNOWN
        self._transitions: list[KeyTransition] = []
        self._rejections = 0

    @property
    def state(self) -> KeyState:
        return self._state

    @property
    def is_valid(self) -> bool:
        return self._state != KeyState.INVALID

    @property
    def rejections(self) -> int:
        return self._rejections

    @property
    def transitions(self) -> list[KeyTransition]:
        return list(self._transitions)

    def _move(self, state: KeyState) -> None:
        self._transitions.append(KeyTransition(previous=self._state, current=state, at=self._clock()))
        self._state = state

    def record_accepted(self) -> None:
        if self._state == KeyState.UNKNOWN:
            self._move(KeyState.VALID)

    def record_rejected(self) -> bool:
        """Register a rejection; returns ``True`` if it raised the alarm."""
        self._rejections += 1
        if self._state == KeyState.INVALID:
            _logger.warning("ShipsIO rejected the AIS key again (%d rejections)", self._rejections)
            return False

        _logger.warning("ShipsIO rejected the AIS key; reporting it once")
        self._move(KeyState.INVALID)
        if self._on_alarm is not None:
            self._on_alarm(INVALID_KEY_ALARM)
        return True

    async def post(self, send: Callable[[], Awaitable[str]]) -> SyncResult:
        """Run *send* and parse its body, tracking key rejections.

        Re-raises :class:`ShipsIOInvalidKeyError` after recording it so
        the caller still aborts the cycle.
        """
        text = await send()
        try:
            result = parse_post_response(text)
        except ShipsIOInvalidKeyError:
            self.record_rejected()
            raise
        self.record_accepted()
        return result
