"""
HTTP transport boundary for the ANX adapter.

The adapter only ever talks to a ``Transport``; ``HttpxTransport`` is the
production implementation backed by ``httpx.Client``.
"""

from __future__ import annotations

from typing import Literal, Mapping, Optional, Protocol

import httpx

from exchanges.anx.errors import TransportError

HttpMethod = Literal["GET", "POST"]


class Transport(Protocol):
    def send(
        self,
        method: HttpMethod,
        path: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[bytes] = None,
    ) -> bytes:
        """Perform the request and return the raw response body."""

    def close(self) -> None:
        """Release pooled connections."""


class HttpxTransport:
    """``Transport`` over a pooled ``httpx.Client``."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def send(
        self,
        method: HttpMethod,
        path: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[bytes] = None,
    ) -> bytes:
        try:
            response = self._client.request(
                method,
                path,
                content=body,
                headers=dict(headers) if headers else None,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"ANX HTTP {exc.response.status_code} for {method} {path}",
                payload={"status_code": exc.response.status_code, "body": exc.response.text},
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"ANX request {method} {path} failed: {exc}") from exc
        return response.content

    def close(self) -> None:
        self._client.close()
