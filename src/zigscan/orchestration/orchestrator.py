"""Tiered retrieval orchestrator.

Responsibilities:
- Try the upstream tiers in preference order for every call, falling through
  on timeout or non-2xx.
- Fan out the sent / received / message facet queries on the chain REST tier,
  then merge, dedup, sort and paginate.
- Scan recent blocks on the node RPC tier as a last resort.
- Keep an advisory tier preference (startup probe + per-call outcomes).

Failure semantics:
- list endpoints degrade to an empty page on total exhaustion;
- point lookups raise `TransactionNotFound` or `UpstreamUnreachable`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

from zigscan.clients.base import build_http_client
from zigscan.clients.chain_rest import ChainRestClient
from zigscan.clients.indexed_api import IndexedApiClient
from zigscan.clients.node_rpc import NodeRpcClient
from zigscan.core.config import ExplorerConfig
from zigscan.core.errors import (
    TransactionNotFound,
    UpstreamError,
    UpstreamNotFound,
    UpstreamTimeout,
    UpstreamUnreachable,
)
from zigscan.core.interfaces import ITransactionSource
from zigscan.core.models import Facet, FacetResult, RecordPage, RetrievalTier, TransactionRecord
from zigscan.decoding.hashing import normalize_hash
from zigscan.orchestration.preference import TierPreference
from zigscan.orchestration.scan import scan_transactions
from zigscan.orchestration.utils import estimate_total, make_window, merge_facets, paginate

logger = logging.getLogger(__name__)

T = TypeVar("T")

FACETS: tuple[Facet, ...] = (Facet.SENT, Facet.RECEIVED, Facet.MESSAGE)


class RetrievalOrchestrator:
    """Fetch transaction records across the three upstream tiers.

    Parameters
    ----------
    indexed : IndexedApiClient
        Tier 1, server-side paginated indexed API.
    chain_rest : ChainRestClient
        Tier 2, chain REST API searched per facet.
    node_rpc : NodeRpcClient
        Tier 3, node RPC via the same-origin proxy.
    config : ExplorerConfig
        Timeouts, scan depth and facet fetch cap.
    preference : TierPreference | None
        Shared preference; a fresh one (indexed API first) by default.
    """

    def __init__(
        self,
        *,
        indexed: IndexedApiClient,
        chain_rest: ChainRestClient,
        node_rpc: NodeRpcClient,
        config: ExplorerConfig | None = None,
        preference: TierPreference | None = None,
    ) -> None:
        self.indexed = indexed
        self.chain_rest = chain_rest
        self.node_rpc = node_rpc
        self.config = config or ExplorerConfig()
        self.preference = preference or TierPreference()

    @classmethod
    def from_config(
        cls,
        config: ExplorerConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> RetrievalOrchestrator:
        """Build the three tier clients from a config (optionally over a shared transport)."""

        def http(url: str) -> httpx.AsyncClient | None:
            if transport is None:
                return None
            return build_http_client(
                url, timeout_s=config.timeout_s, max_connections=config.max_connections, transport=transport
            )

        common = {
            "timeout_s": config.timeout_s,
            "max_connections": config.max_connections,
            "prefix": config.address_prefix,
        }
        return cls(
            indexed=IndexedApiClient(config.indexed_api_url, client=http(config.indexed_api_url), **common),
            chain_rest=ChainRestClient(config.chain_rest_url, client=http(config.chain_rest_url), **common),
            node_rpc=NodeRpcClient(
                config.rpc_proxy_url,
                max_blocks=config.max_blocks_to_scan,
                client=http(config.rpc_proxy_url),
                **common,
            ),
            config=config,
        )

    async def __aenter__(self) -> RetrievalOrchestrator:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close every tier client."""
        await asyncio.gather(self.indexed.aclose(), self.chain_rest.aclose(), self.node_rpc.aclose())

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def source(self, tier: RetrievalTier) -> ITransactionSource:
        match tier:
            case RetrievalTier.PRIMARY_INDEXED_API:
                return self.indexed
            case RetrievalTier.CHAIN_REST_API:
                return self.chain_rest
            case RetrievalTier.NODE_RPC_PROXY:
                return self.node_rpc
        raise RuntimeError(f"Unsupported tier: {tier!r}")

    def _timeout_for(self, tier: RetrievalTier, *, scanning: bool = False) -> float:
        if scanning and tier is RetrievalTier.NODE_RPC_PROXY:
            return self.config.scan_timeout_s
        return self.config.timeout_s

    async def _attempt(self, tier: RetrievalTier, call: Callable[[], Awaitable[T]], *, timeout: float) -> T:
        """Run one tier call under its own budget and update the preference."""
        try:
            result = await asyncio.wait_for(call(), timeout=timeout)
        except asyncio.TimeoutError as e:
            self.preference.record_failure(tier)
            raise UpstreamTimeout(tier.value, f"no answer within {timeout:g}s", tier=tier) from e
        except UpstreamNotFound:
            # the tier answered; absence is not a health problem
            raise
        except UpstreamError:
            self.preference.record_failure(tier)
            raise
        self.preference.record_success(tier)
        return result

    # ------------------------------------------------------------------
    # Startup probe
    # ------------------------------------------------------------------

    async def probe(self) -> RetrievalTier:
        """Ping the tiers in canonical order and prefer the first healthy one."""
        for tier in RetrievalTier.canonical():
            try:
                await self._attempt(tier, self.source(tier).ping, timeout=self.config.timeout_s)
            except UpstreamError as e:
                logger.warning("probe: %s unavailable (%s)", tier.value, e)
                continue
            self.preference.set(tier)
            logger.info("probe: using %s", tier.value)
            return tier
        return self.preference.preferred

    # ------------------------------------------------------------------
    # Point lookup
    # ------------------------------------------------------------------

    async def get_transaction(self, tx_hash: str) -> TransactionRecord:
        """Look up one transaction by hash (with or without 0x, any case).

        Raises
        ------
        InvalidTransactionHash
            The input is not a 64-hex hash.
        TransactionNotFound
            Every tier answered and none has the hash.
        UpstreamUnreachable
            At least one tier failed, so absence cannot be confirmed.
        """
        bare = normalize_hash(tx_hash)
        errors: list[UpstreamError] = []
        for tier in self.preference.ordered():
            src = self.source(tier)
            try:
                return await self._attempt(tier, lambda: src.get_transaction(bare), timeout=self._timeout_for(tier))
            except UpstreamError as e:
                logger.debug("lookup %s via %s failed: %s", bare, tier.value, e)
                errors.append(e)

        if errors and all(isinstance(e, UpstreamNotFound) for e in errors):
            raise TransactionNotFound(bare)
        raise UpstreamUnreachable(bare, errors)

    # ------------------------------------------------------------------
    # Address history
    # ------------------------------------------------------------------

    async def _run_facet(self, facet: Facet, address: str, limit: int) -> FacetResult:
        try:
            return await asyncio.wait_for(
                self.chain_rest.search_facet(facet, address, limit=limit, offset=0),
                timeout=self.config.timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning("facet %s timed out after %gs", facet.value, self.config.timeout_s)
            return FacetResult(facet=facet, failed=True, error="timeout")
        except UpstreamError as e:
            logger.warning("facet %s failed: %s", facet.value, e)
            return FacetResult(facet=facet, failed=True, error=str(e))

    async def _history_from_facets(self, address: str, page: int, page_size: int) -> RecordPage:
        tier = RetrievalTier.CHAIN_REST_API
        limit = min(page * page_size, self.config.facet_fetch_limit)
        results = await asyncio.gather(*(self._run_facet(f, address, limit) for f in FACETS))
        ok = [r for r in results if not r.failed]
        if not ok:
            self.preference.record_failure(tier)
            raise UpstreamError(tier.value, "every facet query failed", tier=tier)
        self.preference.record_success(tier)

        merged = merge_facets(ok)
        total = estimate_total(len(merged), ok)
        # deeper pages reuse the same capped fetch, so nothing past `merged` is reachable
        reachable = len(merged) if limit == self.config.facet_fetch_limit else None
        if reachable is not None and (page - 1) * page_size >= reachable:
            logger.warning(
                "history for %s: page %d is past the %d-row facet fetch cap",
                address,
                page,
                self.config.facet_fetch_limit,
            )
        return RecordPage(
            records=tuple(paginate(merged, page, page_size)),
            pagination=make_window(page, page_size, total, reachable=reachable),
            source=tier,
        )

    async def _history_from_scan(self, address: str, page: int, page_size: int) -> RecordPage:
        tier = RetrievalTier.NODE_RPC_PROXY
        records = await self._attempt(
            tier,
            lambda: scan_transactions(
                self.node_rpc,
                max_blocks=self.config.max_blocks_to_scan,
                limit=page * page_size,
                predicate=lambda r: r.involves(address),
            ),
            timeout=self._timeout_for(tier, scanning=True),
        )
        return RecordPage(
            records=tuple(paginate(records, page, page_size)),
            pagination=make_window(page, page_size, len(records)),
            source=tier,
        )

    async def _history_from(self, tier: RetrievalTier, address: str, page: int, page_size: int) -> RecordPage:
        match tier:
            case RetrievalTier.PRIMARY_INDEXED_API:
                return await self._attempt(
                    tier,
                    lambda: self.indexed.get_account_transactions(address, page=page, limit=page_size),
                    timeout=self._timeout_for(tier),
                )
            case RetrievalTier.CHAIN_REST_API:
                return await self._history_from_facets(address, page, page_size)
            case RetrievalTier.NODE_RPC_PROXY:
                return await self._history_from_scan(address, page, page_size)
        raise RuntimeError(f"Unsupported tier: {tier!r}")

    async def get_address_transactions(self, address: str, *, page: int = 1, page_size: int = 10) -> RecordPage:
        """One page of an address's history; never raises on upstream failure."""
        if page < 1 or page_size < 1:
            return RecordPage.empty(page=page, page_size=page_size)
        for tier in self.preference.ordered():
            try:
                return await self._history_from(tier, address.strip(), page, page_size)
            except UpstreamError as e:
                logger.warning("history for %s via %s failed: %s", address, tier.value, e)
        logger.warning("history for %s: every tier failed, returning an empty page", address)
        return RecordPage.empty(page=page, page_size=page_size)

    # ------------------------------------------------------------------
    # Latest transactions
    # ------------------------------------------------------------------

    async def get_latest_transactions(self, limit: int = 10) -> list[TransactionRecord]:
        """Most recent transactions, newest first; empty when every tier fails."""
        if limit < 1:
            return []
        for tier in self.preference.ordered():
            src = self.source(tier)
            try:
                return await self._attempt(
                    tier, lambda: src.latest_transactions(limit), timeout=self._timeout_for(tier, scanning=True)
                )
            except UpstreamError as e:
                logger.warning("latest transactions via %s failed: %s", tier.value, e)
        return []

    # ------------------------------------------------------------------
    # Block contents
    # ------------------------------------------------------------------

    async def get_block_transactions(self, height: int) -> list[TransactionRecord]:
        """Every transaction of the block at `height`, in block order; empty when every tier fails."""
        if height < 1:
            return []
        for tier in self.preference.ordered():
            src = self.source(tier)
            try:
                return await self._attempt(
                    tier, lambda: src.block_transactions(height), timeout=self._timeout_for(tier, scanning=True)
                )
            except UpstreamError as e:
                logger.warning("block %d via %s failed: %s", height, tier.value, e)
        return []
