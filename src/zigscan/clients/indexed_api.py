"""Primary indexed API client (tier 1).

Endpoints:
- GET /chain/info                                  startup probe
- GET /transactions/{hash}                         point lookup
- GET /accounts/{address}/transactions?page=&limit= server-side paginated history
- GET /transactions/latest?limit=                  latest transactions
- GET /blocks/{height}                              one block with its transactions
"""

from __future__ import annotations

import math
from typing import Any

from zigscan.clients.base import UpstreamClient
from zigscan.clients.schemas import IndexedTransaction, IndexedTransactionList
from zigscan.core.errors import UpstreamPayloadError
from zigscan.core.models import (
    ExecutionResult,
    PaginationWindow,
    RawTransaction,
    RecordPage,
    RetrievalTier,
    TransactionRecord,
    TransferSummary,
)
from zigscan.core.use_cases.assemble import assemble_record


class IndexedApiClient(UpstreamClient):
    """Async client for the explorer's own indexing API."""

    tier = RetrievalTier.PRIMARY_INDEXED_API

    def to_record(self, tx: IndexedTransaction) -> TransactionRecord:
        execution = None
        if tx.gas_used is not None or tx.gas_wanted is not None:
            execution = ExecutionResult(gas_used=tx.gas_used, gas_wanted=tx.gas_wanted)
        return assemble_record(
            raw=RawTransaction(payload=tx.tx) if tx.tx else None,
            tx_hash=tx.hash,
            height=tx.height,
            time=tx.time,
            execution=execution,
            status=tx.status,
            legacy_code=tx.code,
            fee=tx.fee,
            memo=tx.memo,
            placeholders=TransferSummary(sender=tx.sender, recipient=tx.recipient, amount=tx.amount),
            type_hint=tx.type,
            prefix=self.prefix,
            source=self.tier,
        )

    def _parse_list(self, payload: Any, path: str) -> IndexedTransactionList:
        if isinstance(payload, list):
            payload = {"transactions": payload}
        if not isinstance(payload, dict):
            raise UpstreamPayloadError(self._endpoint(path), "expected a list or an object", tier=self.tier)
        return self.parse(IndexedTransactionList, payload, path)

    async def ping(self) -> None:
        await self.get_json("/chain/info")

    async def get_transaction(self, tx_hash: str) -> TransactionRecord:
        path = f"/transactions/{tx_hash}"
        payload = await self.get_json(path)
        return self.to_record(self.parse(IndexedTransaction, payload, path))

    async def get_account_transactions(self, address: str, *, page: int, limit: int) -> RecordPage:
        path = f"/accounts/{address}/transactions"
        payload = await self.get_json(path, params={"page": page, "limit": limit})
        data = self._parse_list(payload, path)
        # some deployments ignore `limit`
        records = tuple(self.to_record(tx) for tx in data.transactions[:limit])

        total = data.total
        if data.pagination and data.pagination.total is not None:
            total = data.pagination.total
        if total is None:
            # no total reported: assume one more page whenever this one is full
            total = (page - 1) * limit + len(records) + (1 if len(records) >= limit else 0)
        pages = max(1, math.ceil(total / limit)) if limit > 0 else 1
        return RecordPage(
            records=records,
            pagination=PaginationWindow(
                page=page, page_size=limit, total=total, pages=pages, has_more=page * limit < total
            ),
            source=self.tier,
        )

    async def latest_transactions(self, limit: int) -> list[TransactionRecord]:
        path = "/transactions/latest"
        payload = await self.get_json(path, params={"limit": limit})
        return [self.to_record(tx) for tx in self._parse_list(payload, path).transactions][:limit]

    async def block_transactions(self, height: int) -> list[TransactionRecord]:
        path = f"/blocks/{height}"
        payload = await self.get_json(path)
        txs = self._parse_list(payload, path).transactions
        return [self.to_record(tx if tx.height is not None else tx.model_copy(update={"height": height})) for tx in txs]
