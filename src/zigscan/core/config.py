"""Explorer configuration.

Environment variables (all optional):
- ZIGSCAN_INDEXED_API_URL: primary indexed API base URL
- ZIGSCAN_CHAIN_REST_URL: chain REST (LCD) base URL
- ZIGSCAN_RPC_URL: node RPC base URL (usually the same-origin proxy)
- ZIGSCAN_TIMEOUT_S / ZIGSCAN_SCAN_TIMEOUT_S: per-call and block-scan budgets
- ZIGSCAN_MAX_BLOCKS: node RPC scan depth
- ZIGSCAN_FACET_LIMIT: max rows fetched per address-history facet
- ZIGSCAN_MAX_CONNECTIONS: httpx pool size per upstream
- ZIGSCAN_ADDRESS_PREFIX: bech32 account prefix used by the heuristics
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_INDEXED_API_URL = "https://zigscan.net/api"
DEFAULT_CHAIN_REST_URL = "https://testnet-api.zigchain.com"
DEFAULT_RPC_URL = "https://testnet-rpc.zigchain.com"


def _env_str(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip()
    return raw or default


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


@dataclass(frozen=True)
class ExplorerConfig:
    """Upstream endpoints and retrieval budgets."""

    indexed_api_url: str = DEFAULT_INDEXED_API_URL
    chain_rest_url: str = DEFAULT_CHAIN_REST_URL
    rpc_proxy_url: str = DEFAULT_RPC_URL
    timeout_s: float = 15.0
    scan_timeout_s: float = 60.0
    max_blocks_to_scan: int = 50
    facet_fetch_limit: int = 100
    max_connections: int = 32
    address_prefix: str = "zig"

    def __post_init__(self) -> None:
        if self.timeout_s <= 0 or self.scan_timeout_s <= 0:
            raise ValueError("timeouts must be positive")
        if self.max_blocks_to_scan < 1:
            raise ValueError("max_blocks_to_scan must be >= 1")
        if self.facet_fetch_limit < 1:
            raise ValueError("facet_fetch_limit must be >= 1")
        if self.max_connections < 1:
            raise ValueError("max_connections must be >= 1")
        if not self.address_prefix:
            raise ValueError("address_prefix must not be empty")

    @classmethod
    def from_env(cls) -> ExplorerConfig:
        """Build a config from ZIGSCAN_* environment variables, falling back to defaults."""
        return cls(
            indexed_api_url=_env_str("ZIGSCAN_INDEXED_API_URL", DEFAULT_INDEXED_API_URL),
            chain_rest_url=_env_str("ZIGSCAN_CHAIN_REST_URL", DEFAULT_CHAIN_REST_URL),
            rpc_proxy_url=_env_str("ZIGSCAN_RPC_URL", DEFAULT_RPC_URL),
            timeout_s=_env_float("ZIGSCAN_TIMEOUT_S", 15.0),
            scan_timeout_s=_env_float("ZIGSCAN_SCAN_TIMEOUT_S", 60.0),
            max_blocks_to_scan=_env_int("ZIGSCAN_MAX_BLOCKS", 50),
            facet_fetch_limit=_env_int("ZIGSCAN_FACET_LIMIT", 100),
            max_connections=_env_int("ZIGSCAN_MAX_CONNECTIONS", 32),
            address_prefix=_env_str("ZIGSCAN_ADDRESS_PREFIX", "zig"),
        )
