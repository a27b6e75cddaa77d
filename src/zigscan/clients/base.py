"""Shared async HTTP plumbing for the upstream tier clients.

`UpstreamClient.get_json` maps httpx failures onto the upstream error
hierarchy so every tier reports failures the same way:
- httpx.TimeoutException → UpstreamTimeout
- other httpx.HTTPError  → UpstreamConnectionError
- HTTP 404               → UpstreamNotFound
- other non-2xx          → UpstreamStatusError
- undecodable JSON       → UpstreamPayloadError
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, ClassVar, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from zigscan.core.errors import (
    UpstreamConnectionError,
    UpstreamNotFound,
    UpstreamPayloadError,
    UpstreamStatusError,
    UpstreamTimeout,
)
from zigscan.core.models import RetrievalTier

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def build_http_client(
    base_url: str,
    *,
    timeout_s: float = 15.0,
    max_connections: int = 32,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """AsyncClient with per-operation timeouts and a bounded connection pool."""
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=httpx.Timeout(
            connect=timeout_s,
            read=timeout_s,
            write=timeout_s,
            pool=max(30.0, timeout_s * 3),
        ),
        limits=httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max(1, max_connections // 2),
        ),
        headers={"Accept": "application/json"},
        http2=transport is None,
        transport=transport,
    )


class UpstreamClient:
    """Base class for one upstream tier.

    Parameters
    ----------
    base_url : str
        Upstream base URL; request paths are appended to it.
    timeout_s : float
        Per-operation timeout in seconds (connect/read/write).
    max_connections : int
        Maximum concurrent connections to keep in the pool.
    client : httpx.AsyncClient | None
        Pre-built client (tests inject one backed by `httpx.MockTransport`).
    """

    tier: ClassVar[RetrievalTier]

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = 15.0,
        max_connections: int = 32,
        prefix: str = "zig",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.prefix = prefix
        self.client = client or build_http_client(
            self.base_url, timeout_s=timeout_s, max_connections=max_connections
        )

    def _endpoint(self, path: str) -> str:
        return f"{self.tier.value} {path}"

    async def get_json(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        """GET `path` and return the decoded JSON body."""
        endpoint = self._endpoint(path)
        try:
            r = await self.client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise UpstreamTimeout(endpoint, f"timed out: {e}", tier=self.tier) from e
        except httpx.HTTPError as e:
            raise UpstreamConnectionError(endpoint, str(e) or type(e).__name__, tier=self.tier) from e

        if r.status_code == 404:
            raise UpstreamNotFound(endpoint, tier=self.tier)
        if not r.is_success:
            raise UpstreamStatusError(endpoint, r.status_code, tier=self.tier)
        try:
            return r.json()
        except ValueError as e:
            raise UpstreamPayloadError(endpoint, "invalid JSON body", tier=self.tier) from e

    def parse(self, model: type[ModelT], payload: Any, path: str) -> ModelT:
        """Validate a payload with a pydantic model, mapping failures to UpstreamPayloadError."""
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise UpstreamPayloadError(
                self._endpoint(path), f"unexpected payload: {e.error_count()} validation errors", tier=self.tier
            ) from e

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
