"""ShipsIO post response parsing."""

from __future__ import annotations

import json

from pydantic import ValidationError

from pyshipsio._constants import INVALID_KEY_BODY, POSTED_PREFIX
from pyshipsio.exceptions import ShipsIOInvalidKeyError, ShipsIOResponseError
from pyshipsio.models.sync import SyncResult


def is_invalid_key_body(text: str) -> bool:
    """``Invalid key``, bare or JSON-quoted, is ShipsIO's credential rejection."""
    return text.strip().strip('"') == INVALID_KEY_BODY


def parse_post_response(text: str) -> SyncResult:
    """Parse the body returned by ``POST /public/ais/signalk``.

    Raises
    ------
    ShipsIOInvalidKeyError
        The body is the credential rejection marker.
    ShipsIOResponseError
        The body is anything other than a ``{"Posted": ...}`` object.
    """
    if is_invalid_key_body(text):
        raise ShipsIOInvalidKeyError("ShipsIO rejected the AIS key", body=text)

    stripped = text.strip()
    if not stripped.startswith(POSTED_PREFIX):
        raise ShipsIOResponseError(f"Failed to post to ShipsIO: {stripped[:200]}", body=text)

    try:
        decoded = json.loads(stripped)
    except json.JSONDecodeError as exc:
        raise ShipsIOResponseError(f"ShipsIO acknowledgement is not JSON: {stripped[:200]}", body=text) from exc

    try:
        return SyncResult.model_validate(decoded)
    except ValidationError as exc:
        raise ShipsIOResponseError(f"Unexpected ShipsIO acknowledgement: {stripped[:200]}", body=text) from exc
