"""Bounded streaming HTTP transport for JSON endpoints."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import aiohttp

from pyshipsio._redact import redact_for_log
from pyshipsio.config import ExchangeConfig
from pyshipsio.exceptions import ShipsIOBodyTooLargeError, ShipsIOTransportError
from pyshipsio.ingestion.response import is_invalid_key_body

_logger = logging.getLogger(__name__)

_CHUNK_SIZE = 16 * 1024


class Transport(Protocol):
    """Structural transport interface used by the sync engine.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`BoundedTransport`) concrete.
    """

    async def fetch_json(self, url: str) -> Any:
        ...

    async def post_json(self, url: str, payload: Any) -> str:
        ...


class BoundedTransport:
    """HTTP transport that streams response bodies under a size ceiling.

    Bodies are read chunk by chunk; once more than ``max_body_bytes`` have
    arrived the response is released and the connection dropped, so an
    oversized or runaway body never ends up fully buffered.
    """

    def __init__(self, config: ExchangeConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    @property
    def max_body_bytes(self) -> int:
        return self._config.max_body_bytes

    async def _read_bounded(self, resp: aiohttp.ClientResponse, url: str) -> bytes:
        limit = self._config.max_body_bytes
        chunks: list[bytes] = []
        total = 0
        async for chunk in resp.content.iter_chunked(_CHUNK_SIZE):
            total += len(chunk)
            if total > limit:
                resp.close()
                raise ShipsIOBodyTooLargeError(
                    f"Response from {url} exceeded the limit of {limit} bytes",
                    limit=limit,
                    url=url,
                )
            chunks.append(chunk)
        return b"".join(chunks)

    async def _request(self, method: str, url: str, **kwargs: Any) -> tuple[int, str]:
        if self._http.closed:
            raise ShipsIOTransportError(f"{method} {url} failed: HTTP session is closed", url=url)
        try:
            async with self._http.request(method, url, timeout=self._timeout, **kwargs) as resp:
                body = await self._read_bounded(resp, url)
                text = body.decode(resp.charset or "utf-8", errors="replace")
                status = resp.status
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise ShipsIOTransportError(f"{method} {url} failed: {exc!r}", url=url) from exc
        except RuntimeError as exc:
            # aiohttp reports a session closed under a running request this way.
            if not self._http.closed:
                raise
            raise ShipsIOTransportError(f"{method} {url} failed: HTTP session is closed", url=url) from exc

        _logger.debug("%s %s -> HTTP %d, %d bytes", method, url, status, len(body))
        return status, text

    @staticmethod
    def _raise_for_status(status: int, text: str, url: str) -> None:
        if status != 200:
            raise ShipsIOTransportError(f"HTTP {status} from {url}: {text[:200]}", status_code=status, url=url)

    async def fetch_json(self, url: str) -> Any:
        """GET *url* and decode the JSON body."""
        status, text = await self._request("GET", url, headers={"Accept": "application/json"})
        self._raise_for_status(status, text, url)
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ShipsIOTransportError(f"Invalid JSON from {url}: {text[:200]}", url=url) from exc

    async def post_json(self, url: str, payload: Any) -> str:
        """POST *payload* as JSON and return the raw response text.

        The body is returned undecoded because ShipsIO answers some
        requests with plain text rather than JSON. A key rejection is
        returned as text whatever the status code, so the caller can
        classify it; any other non-200 reply raises.
        """
        data = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        _logger.debug("POST %s (%d bytes): %s", url, len(data), redact_for_log(payload))
        status, text = await self._request(
            "POST",
            url,
            data=data,
            headers={"Content-Type": "application/json"},
        )
        if not is_invalid_key_body(text):
            self._raise_for_status(status, text, url)
        return text
