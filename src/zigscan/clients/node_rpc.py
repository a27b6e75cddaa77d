"""Node RPC client (tier 3), reached through the same-origin proxy.

Endpoints (Tendermint/CometBFT JSON-RPC over GET):
- GET /status                         latest height
- GET /block?height=                  block header + raw txs
- GET /blockchain?minHeight=&maxHeight= block metas (used to skip empty blocks)
- GET /tx?hash=0x<HASH>               execution result for one tx

The node only accepts the hash with a 0x prefix, so callers pass bare hex and
this client adds it.
"""

from __future__ import annotations

import logging
from typing import Any

from zigscan.clients.base import UpstreamClient
from zigscan.clients.schemas import (
    Block,
    BlockchainResult,
    BlockMeta,
    BlockResult,
    RpcTx,
    StatusResult,
    events_as_dicts,
)
from zigscan.core.errors import UpstreamError, UpstreamNotFound, UpstreamPayloadError
from zigscan.core.models import ExecutionResult, RawTransaction, RetrievalTier, TransactionRecord
from zigscan.core.use_cases.assemble import assemble_record
from zigscan.decoding.hashing import strip_hex_prefix

logger = logging.getLogger(__name__)


class NodeRpcClient(UpstreamClient):
    """Async client for a CometBFT RPC endpoint."""

    tier = RetrievalTier.NODE_RPC_PROXY

    def __init__(self, base_url: str, *, max_blocks: int = 50, **kwargs: Any) -> None:
        super().__init__(base_url, **kwargs)
        self.max_blocks = max_blocks

    async def call(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET a JSON-RPC endpoint and unwrap `result`."""
        data = await self.get_json(path, params=params)
        if not isinstance(data, dict):
            raise UpstreamPayloadError(self._endpoint(path), "expected a JSON-RPC object", tier=self.tier)
        if "error" in data:
            e = data["error"]
            msg = f"{e.get('message', '')} {e.get('data', '')}".strip() if isinstance(e, dict) else str(e)
            if "not found" in msg.lower():
                raise UpstreamNotFound(self._endpoint(path), msg, tier=self.tier)
            raise UpstreamPayloadError(self._endpoint(path), f"RPC error: {msg}", tier=self.tier)
        if "result" not in data:
            raise UpstreamPayloadError(self._endpoint(path), "missing result", tier=self.tier)
        return data["result"]

    async def ping(self) -> None:
        await self.call("/status")

    async def latest_height(self) -> int:
        """Return the latest block height."""
        return self.parse(StatusResult, await self.call("/status"), "/status").sync_info.latest_block_height

    async def get_block(self, height: int) -> Block:
        return self.parse(BlockResult, await self.call("/block", {"height": height}), "/block").block

    async def get_block_metas(self, *, min_height: int, max_height: int) -> list[BlockMeta]:
        """Block metas in [min_height, max_height]; the node caps the window at 20 blocks."""
        result = await self.call("/blockchain", {"minHeight": min_height, "maxHeight": max_height})
        return self.parse(BlockchainResult, result, "/blockchain").block_metas

    async def get_tx(self, tx_hash: str) -> RpcTx:
        result = await self.call("/tx", {"hash": "0x" + strip_hex_prefix(tx_hash).upper()})
        return self.parse(RpcTx, result, "/tx")

    def to_record(self, tx: RpcTx, *, time: str = "") -> TransactionRecord:
        return assemble_record(
            raw=RawTransaction(payload=tx.tx, height=tx.height) if tx.tx else None,
            tx_hash=tx.hash,
            height=tx.height,
            time=time,
            execution=ExecutionResult(
                code=tx.tx_result.code,
                gas_used=tx.tx_result.gas_used,
                gas_wanted=tx.tx_result.gas_wanted,
                log=tx.tx_result.log,
                events=events_as_dicts(tx.tx_result.events),
            ),
            prefix=self.prefix,
            source=self.tier,
        )

    async def get_transaction(self, tx_hash: str) -> TransactionRecord:
        tx = await self.get_tx(tx_hash)
        time = ""
        try:
            time = (await self.get_block(tx.height)).header.time
        except UpstreamError as e:
            logger.debug("block %s time unavailable: %s", tx.height, e)
        return self.to_record(tx, time=time)

    async def latest_transactions(self, limit: int) -> list[TransactionRecord]:
        # deferred: the orchestration package imports this module
        from zigscan.orchestration.scan import scan_transactions

        return await scan_transactions(self, max_blocks=self.max_blocks, limit=limit)

    async def block_transactions(self, height: int) -> list[TransactionRecord]:
        from zigscan.orchestration.scan import block_transactions

        return await block_transactions(self, height)
