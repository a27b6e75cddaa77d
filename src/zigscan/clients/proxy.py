"""Same-origin forwarder for node RPC calls.

Browsers cannot call the node RPC directly (no CORS), so the explorer exposes
`GET /api/rpc?path=<endpoint>&<params>` and forwards it. This module holds
the framework-independent part: path allow-listing, hash normalization and
error mapping. Wire it into any web framework by passing the query mapping
to `RpcProxy.forward` and returning the `ProxyResponse`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx

from zigscan.clients.base import build_http_client
from zigscan.decoding.hashing import strip_hex_prefix

logger = logging.getLogger(__name__)

ALLOWED_PATHS = frozenset({"/status", "/block", "/blockchain", "/tx"})


@dataclass(frozen=True, slots=True)
class ProxyResponse:
    status_code: int
    body: bytes
    headers: Mapping[str, str] = field(default_factory=lambda: {"Content-Type": "application/json"})

    def json(self) -> object:
        return json.loads(self.body)


def _error(status_code: int, error: str, detail: str) -> ProxyResponse:
    return ProxyResponse(status_code=status_code, body=json.dumps({"error": error, "detail": detail}).encode())


def forwarded_params(query: Mapping[str, str]) -> dict[str, str]:
    """Query parameters to send upstream: everything but `path`, with `hash` as 0x<bare>."""
    params = {k: v for k, v in query.items() if k != "path"}
    if params.get("hash"):
        params["hash"] = "0x" + strip_hex_prefix(params["hash"])
    return params


class RpcProxy:
    """Forward allow-listed GET calls to the node RPC.

    Parameters
    ----------
    rpc_url : str
        Upstream node RPC base URL.
    timeout_s : float
        Per-operation timeout for the forwarded call.
    """

    def __init__(self, rpc_url: str, *, timeout_s: float = 15.0, client: httpx.AsyncClient | None = None) -> None:
        self.rpc_url = rpc_url.rstrip("/")
        self.client = client or build_http_client(self.rpc_url, timeout_s=timeout_s)

    async def forward(self, query: Mapping[str, str]) -> ProxyResponse:
        path = (query.get("path") or "").strip()
        if not path.startswith("/"):
            path = "/" + path
        if path not in ALLOWED_PATHS:
            return _error(400, "Unsupported path", path)

        try:
            r = await self.client.get(path, params=forwarded_params(query))
        except httpx.HTTPError as e:
            logger.warning("proxy %s failed: %s", path, e)
            return _error(502, "Proxy error", str(e) or type(e).__name__)
        return ProxyResponse(status_code=r.status_code, body=r.content)

    async def aclose(self) -> None:
        await self.client.aclose()
