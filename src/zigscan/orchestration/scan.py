"""Node RPC block scanning (tier-3 fallback).

The scan is inherently sequential: the latest height must be known before
enumerating blocks, and a block's tx list before fetching each tx. It is
modelled as a lazy async generator (`iter_blocks`) bounded by `max_blocks`;
consumers stop early by closing it.
"""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import AsyncIterator, Callable, Iterator
from contextlib import aclosing
from dataclasses import dataclass
from typing import TYPE_CHECKING

from zigscan.core.errors import UpstreamError, UpstreamStatusError
from zigscan.core.models import RawTransaction, RetrievalTier, TransactionRecord
from zigscan.core.use_cases.assemble import assemble_record
from zigscan.decoding.hashing import compute_tx_hash

if TYPE_CHECKING:
    from zigscan.clients.node_rpc import NodeRpcClient

logger = logging.getLogger(__name__)

BLOCKCHAIN_WINDOW = 20  # max heights per /blockchain call


@dataclass(frozen=True, slots=True)
class ScannedBlock:
    height: int
    time: str
    txs: tuple[str, ...]  # base64 raw transactions


def iter_windows(top: int, bottom: int, size: int = BLOCKCHAIN_WINDOW) -> Iterator[tuple[int, int]]:
    """Yield inclusive (low, high) windows from `top` down to `bottom`."""
    high = top
    while high >= bottom:
        low = max(bottom, high - size + 1)
        yield low, high
        high = low - 1


async def _heights_with_txs(rpc: NodeRpcClient, low: int, high: int) -> list[int]:
    try:
        metas = await rpc.get_block_metas(min_height=low, max_height=high)
    except UpstreamStatusError as e:
        logger.debug("/blockchain unavailable for %s-%s (%s); probing every height", low, high, e)
        return list(range(high, low - 1, -1))
    return sorted((m.header.height for m in metas if m.num_txs > 0), reverse=True)


async def iter_blocks(rpc: NodeRpcClient, *, max_blocks: int, latest: int | None = None) -> AsyncIterator[ScannedBlock]:
    """Yield non-empty blocks, newest first, among the `max_blocks` most recent heights."""
    if latest is None:
        latest = await rpc.latest_height()
    bottom = max(1, latest - max_blocks + 1)
    for low, high in iter_windows(latest, bottom):
        for height in await _heights_with_txs(rpc, low, high):
            block = await rpc.get_block(height)
            txs = tuple(block.data.txs or ())
            if txs:
                yield ScannedBlock(height=block.header.height, time=block.header.time, txs=txs)


def _fallback_record(raw: RawTransaction, prefix: str) -> TransactionRecord:
    """Record built from the raw bytes alone, used when /tx fails."""
    return assemble_record(raw=raw, prefix=prefix, source=RetrievalTier.NODE_RPC_PROXY)


async def _record_for(rpc: NodeRpcClient, tx_b64: str, *, height: int, time: str) -> TransactionRecord | None:
    """Assemble one block transaction; None when the payload is not base64."""
    raw = RawTransaction(payload=tx_b64, height=height, time=time)
    try:
        tx_hash = compute_tx_hash(base64.b64decode(tx_b64, validate=True))
    except (binascii.Error, ValueError):
        logger.debug("skipping undecodable tx in block %s", height)
        return None
    try:
        return rpc.to_record(await rpc.get_tx(tx_hash), time=time)
    except UpstreamError as e:
        logger.debug("tx %s detail unavailable (%s); using raw bytes", tx_hash, e)
        return _fallback_record(raw, rpc.prefix)


async def block_transactions(rpc: NodeRpcClient, height: int) -> list[TransactionRecord]:
    """Every transaction of one block, in block order."""
    block = await rpc.get_block(height)
    out: list[TransactionRecord] = []
    for tx_b64 in block.data.txs or ():
        record = await _record_for(rpc, tx_b64, height=block.header.height, time=block.header.time)
        if record is not None:
            out.append(record)
    return out


async def scan_transactions(
    rpc: NodeRpcClient,
    *,
    max_blocks: int,
    limit: int,
    predicate: Callable[[TransactionRecord], bool] | None = None,
) -> list[TransactionRecord]:
    """Walk recent blocks and return up to `limit` records accepted by `predicate`.

    Parameters
    ----------
    rpc : NodeRpcClient
        Client for the node RPC proxy.
    max_blocks : int
        Scan depth, in heights below the latest block.
    limit : int
        Stop once this many records have been collected.
    predicate : callable | None
        Filter applied to each assembled record (address history uses `involves`).

    Returns
    -------
    list[TransactionRecord]
        Newest first.
    """
    out: list[TransactionRecord] = []
    if limit <= 0:
        return out

    async with aclosing(iter_blocks(rpc, max_blocks=max_blocks)) as blocks:
        async for block in blocks:
            for tx_b64 in block.txs:
                record = await _record_for(rpc, tx_b64, height=block.height, time=block.time)
                if record is None:
                    continue
                if predicate is None or predicate(record):
                    out.append(record)
                    if len(out) >= limit:
                        return out
    return out
