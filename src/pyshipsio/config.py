"""Exchange configuration for pyshipsio."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from pyshipsio._constants import DEFAULT_INTERVAL, MAX_BODY_BYTES, SHIPSIO_URL, SIGNALK_URL
from pyshipsio.exceptions import ShipsIOConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _option_float(value: Any, default: float | None) -> float | None:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _option_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return _env_bool(value, default)
    if isinstance(value, (int, float)):
        return bool(value)
    return default


@dataclasses.dataclass(frozen=True)
class ExchangeConfig:
    """Exchange configuration.

    Parameters
    ----------
    key : str
        ShipsIO AIS key (free, from the shipsio.com accounts page).
        Nothing is scheduled while it is empty.
    interval : float or None
        Seconds between synchronization cycles. The scheduler raises
        values below its floor (120 s) to the floor; ``None`` means
        "use the floor".
    integrate : bool
        Ask ShipsIO to return nearby ships so they are merged into the
        local Signal K feed.
    signalk_url : str
        Base URL of the local Signal K server.
    shipsio_url : str
        Base URL of the ShipsIO aggregation service.
    max_body_bytes : int
        Size ceiling for any response body.
    request_timeout : float
        Total timeout in seconds for a single HTTP exchange.
    refresh_sent_state : bool
        Merge every acknowledged delta into the remembered per-vessel
        state. When ``False`` (default) a vessel's remembered state is
        the first record ever acknowledged for it.
    """

    key: str = ""
    interval: float | None = DEFAULT_INTERVAL
    integrate: bool = False
    signalk_url: str = SIGNALK_URL
    shipsio_url: str = SHIPSIO_URL
    max_body_bytes: int = MAX_BODY_BYTES
    request_timeout: float = 30.0
    refresh_sent_state: bool = False

    def __post_init__(self) -> None:
        for name in ("signalk_url", "shipsio_url"):
            url = getattr(self, name)
            if not url.startswith(("http://", "https://")):
                raise ShipsIOConfigError(f"{name} must be an http(s) URL, got {url!r}")
        if self.max_body_bytes <= 0:
            raise ShipsIOConfigError(f"max_body_bytes must be positive, got {self.max_body_bytes}")
        if self.request_timeout <= 0:
            raise ShipsIOConfigError(f"request_timeout must be positive, got {self.request_timeout}")

    @property
    def has_key(self) -> bool:
        return bool(self.key and self.key.strip())

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None, **overrides: Any) -> ExchangeConfig:
        """Create configuration from a host plugin options mapping.

        Recognizes ``interval``, ``key`` and ``integrate``. Missing or
        garbled values fall back to the defaults instead of raising, since
        the host UI stores whatever the user typed.
        """
        opts = dict(options or {})
        config_kwargs: dict[str, Any] = {
            "key": str(opts.get("key") or "").strip(),
            "interval": _option_float(opts.get("interval"), DEFAULT_INTERVAL),
            "integrate": _option_bool(opts.get("integrate"), False),
        }
        config_kwargs.update(overrides)
        return cls(**config_kwargs)

    @classmethod
    def from_env(cls, **overrides: Any) -> ExchangeConfig:
        """Create configuration from environment variables.

        Reads ``SHIPSIO_KEY`` and the optional ``SHIPSIO_*`` variables
        below. Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        ExchangeConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "SHIPSIO_KEY": "key",
            "SHIPSIO_SIGNALK_URL": "signalk_url",
            "SHIPSIO_URL": "shipsio_url",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        interval_env = env.get("SHIPSIO_INTERVAL")
        if interval_env is not None and "interval" not in overrides:
            config_kwargs["interval"] = float(interval_env)

        max_body_env = env.get("SHIPSIO_MAX_BODY_BYTES")
        if max_body_env is not None and "max_body_bytes" not in overrides:
            config_kwargs["max_body_bytes"] = int(max_body_env)

        timeout_env = env.get("SHIPSIO_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = float(timeout_env)

        if "integrate" not in overrides:
            config_kwargs["integrate"] = _env_bool(env.get("SHIPSIO_INTEGRATE"), False)

        if "refresh_sent_state" not in overrides:
            config_kwargs["refresh_sent_state"] = _env_bool(env.get("SHIPSIO_REFRESH_SENT_STATE"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
