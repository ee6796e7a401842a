"""Custom exception hierarchy for pyshipsio."""

from __future__ import annotations


class ShipsIOError(Exception):
    """Base exception for all pyshipsio errors."""


class ShipsIOConfigError(ShipsIOError):
    """Invalid or missing configuration."""


class ShipsIOTransportError(ShipsIOError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class ShipsIOBodyTooLargeError(ShipsIOTransportError):
    """Response body exceeded the configured size ceiling.

    The connection is dropped as soon as the limit is crossed, so the
    partial body is never parsed.
    """

    def __init__(self, message: str, *, limit: int, url: str = "") -> None:
        self.limit = limit
        super().__init__(message, url=url)


class ShipsIOResponseError(ShipsIOError):
    """ShipsIO answered with a body that is not a post acknowledgement."""

    def __init__(self, message: str, *, body: str = "") -> None:
        self.body = body
        super().__init__(message)


class ShipsIOInvalidKeyError(ShipsIOResponseError):
    """ShipsIO rejected the configured AIS key (body ``Invalid key``).

    Raised on every rejection; only the first one is surfaced to the user
    (see :class:`pyshipsio.state.key_gate.KeyValidityGate`).
    """
