from __future__ import annotations

import pytest

from pyshipsio.config import ExchangeConfig
from pyshipsio.exceptions import ShipsIOConfigError


def test_defaults() -> None:
    config = ExchangeConfig()

    assert config.interval == 600
    assert config.integrate is False
    assert config.has_key is False
    assert config.signalk_url == "http://localhost:3000"
    assert config.shipsio_url == "https://shipsio.com"
    assert config.max_body_bytes == 1024 * 1024


def test_from_options_tolerates_garbled_values() -> None:
    config = ExchangeConfig.from_options({"key": " abc ", "interval": "soon", "integrate": "yes"})

    assert config.key == "abc"
    assert config.interval == 600
    assert config.integrate is True


def test_from_options_empty() -> None:
    config = ExchangeConfig.from_options(None)
    assert config.has_key is False


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHIPSIO_KEY", "env-key")
    monkeypatch.setenv("SHIPSIO_INTERVAL", "300")
    monkeypatch.setenv("SHIPSIO_INTEGRATE", "true")
    monkeypatch.setenv("SHIPSIO_REFRESH_SENT_STATE", "1")

    config = ExchangeConfig.from_env(integrate=False)

    assert config.key == "env-key"
    assert config.interval == 300.0
    assert config.integrate is False
    assert config.refresh_sent_state is True


@pytest.mark.parametrize(
    "kwargs",
    [
        {"signalk_url": "localhost:3000"},
        {"shipsio_url": "ftp://shipsio.com"},
        {"max_body_bytes": 0},
        {"request_timeout": -1},
    ],
)
def test_invalid_values_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(ShipsIOConfigError):
        ExchangeConfig(**kwargs)  # type: ignore[arg-type]
