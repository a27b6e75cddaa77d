"""Chain REST (LCD) client (tier 2).

Endpoints:
- GET /cosmos/base/tendermint/v1beta1/node_info
- GET /cosmos/tx/v1beta1/txs/{hash}
- GET /cosmos/tx/v1beta1/txs?query=<event>='<addr>'&pagination.limit=&pagination.offset=&order_by=

The search endpoint returns oldest first unless `order_by` says otherwise, so
every search asks for newest first; a block listing asks for ascending order.
"""

from __future__ import annotations

import json

from zigscan.clients.base import UpstreamClient
from zigscan.clients.schemas import GetTxResponse, SearchTxsResponse, TxResponse, events_as_dicts
from zigscan.core.models import (
    Encoding,
    ExecutionResult,
    Facet,
    FacetResult,
    RawTransaction,
    RetrievalTier,
    TransactionRecord,
)
from zigscan.core.use_cases.assemble import assemble_record

TXS_PATH = "/cosmos/tx/v1beta1/txs"
ORDER_DESC = "ORDER_BY_DESC"
ORDER_ASC = "ORDER_BY_ASC"
BLOCK_TX_LIMIT = 100


class ChainRestClient(UpstreamClient):
    """Async client for the Cosmos SDK REST gateway."""

    tier = RetrievalTier.CHAIN_REST_API

    def to_record(self, resp: TxResponse) -> TransactionRecord:
        # messages arrive as JSON; the decode pipeline routes them via the type table
        first = resp.first_message()
        raw = (
            RawTransaction(payload=json.dumps(first, separators=(",", ":")), encoding=Encoding.TEXT)
            if first
            else None
        )
        return assemble_record(
            raw=raw,
            tx_hash=resp.txhash,
            height=resp.height,
            time=resp.timestamp,
            execution=ExecutionResult(
                code=resp.code,
                gas_used=resp.gas_used,
                gas_wanted=resp.gas_wanted,
                log=resp.raw_log,
                events=events_as_dicts(resp.events),
            ),
            fee=resp.fee_text(),
            memo=resp.memo(),
            prefix=self.prefix,
            source=self.tier,
        )

    async def ping(self) -> None:
        await self.get_json("/cosmos/base/tendermint/v1beta1/node_info")

    async def get_transaction(self, tx_hash: str) -> TransactionRecord:
        path = f"{TXS_PATH}/{tx_hash}"
        data = self.parse(GetTxResponse, await self.get_json(path), path)
        return self.to_record(data.tx_response)

    async def search(
        self, query: str, *, limit: int, offset: int = 0, order_by: str = ORDER_DESC
    ) -> SearchTxsResponse:
        params = {
            "query": query,
            "pagination.limit": limit,
            "pagination.offset": offset,
            "order_by": order_by,
        }
        return self.parse(SearchTxsResponse, await self.get_json(TXS_PATH, params=params), TXS_PATH)

    async def search_facet(self, facet: Facet, address: str, *, limit: int, offset: int = 0) -> FacetResult:
        data = await self.search(facet.query(address), limit=limit, offset=offset)
        return FacetResult(
            facet=facet,
            records=tuple(self.to_record(r) for r in data.tx_responses),
            total=data.reported_total(),
        )

    async def latest_transactions(self, limit: int) -> list[TransactionRecord]:
        data = await self.search("tx.height>0", limit=limit)
        records = sorted((self.to_record(r) for r in data.tx_responses), key=lambda r: -r.height)
        return records[:limit]

    async def block_transactions(self, height: int) -> list[TransactionRecord]:
        data = await self.search(f"tx.height={height}", limit=BLOCK_TX_LIMIT, order_by=ORDER_ASC)
        return [self.to_record(r) for r in data.tx_responses]
