"""Pydantic models for upstream payloads.

Only the fields the explorer reads are declared; everything else is ignored.
Numbers that upstreams serialize as strings ("height": "123") are coerced.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)


# ---------------------------------------------------------------------------
# Shared event shape (chain REST + node RPC)
# ---------------------------------------------------------------------------


class EventAttribute(_Payload):
    key: str = ""
    value: str | None = None


class TxEvent(_Payload):
    type: str = ""
    attributes: list[EventAttribute] = Field(default_factory=list)


def events_as_dicts(events: list[TxEvent]) -> tuple[dict[str, Any], ...]:
    return tuple(e.model_dump() for e in events)


# ---------------------------------------------------------------------------
# Primary indexed API
# ---------------------------------------------------------------------------


class IndexedTransaction(_Payload):
    hash: str = Field(validation_alias=AliasChoices("hash", "tx_hash", "txhash"))
    height: int | None = Field(default=None, validation_alias=AliasChoices("height", "block_id", "block_height"))
    time: str | None = Field(default=None, validation_alias=AliasChoices("time", "timestamp", "created_at"))
    status: str | None = None
    code: int | None = None
    fee: str | None = None
    sender: str | None = Field(default=None, validation_alias=AliasChoices("from_address", "sender", "from"))
    recipient: str | None = Field(default=None, validation_alias=AliasChoices("to_address", "recipient", "to"))
    amount: str | None = None
    memo: str | None = None
    gas_used: int | None = None
    gas_wanted: int | None = None
    type: str | None = Field(default=None, validation_alias=AliasChoices("type", "message_type"))
    tx: str | None = Field(default=None, validation_alias=AliasChoices("tx", "raw", "tx_raw"))


class IndexedPagination(_Payload):
    total: int | None = None
    page: int | None = None
    limit: int | None = None
    pages: int | None = Field(default=None, validation_alias=AliasChoices("pages", "total_pages"))


class IndexedTransactionList(_Payload):
    transactions: list[IndexedTransaction] = Field(
        default_factory=list, validation_alias=AliasChoices("transactions", "data", "items")
    )
    pagination: IndexedPagination | None = None
    total: int | None = None


# ---------------------------------------------------------------------------
# Chain REST API (cosmos/tx/v1beta1)
# ---------------------------------------------------------------------------


class RestCoin(_Payload):
    denom: str = ""
    amount: str = ""


class RestFee(_Payload):
    amount: list[RestCoin] = Field(default_factory=list)
    gas_limit: str | None = None


class RestAuthInfo(_Payload):
    fee: RestFee | None = None


class RestTxBody(_Payload):
    messages: list[dict[str, Any]] = Field(default_factory=list)
    memo: str = ""


class RestTx(_Payload):
    body: RestTxBody | None = None
    auth_info: RestAuthInfo | None = None


class TxResponse(_Payload):
    txhash: str
    height: int = 0
    code: int = 0
    gas_used: int | None = None
    gas_wanted: int | None = None
    raw_log: str = ""
    timestamp: str = ""
    tx: RestTx | None = None
    events: list[TxEvent] = Field(default_factory=list)

    def first_message(self) -> dict[str, Any] | None:
        if self.tx and self.tx.body and self.tx.body.messages:
            return self.tx.body.messages[0]
        return None

    def fee_text(self) -> str | None:
        if self.tx and self.tx.auth_info and self.tx.auth_info.fee and self.tx.auth_info.fee.amount:
            coin = self.tx.auth_info.fee.amount[0]
            return f"{coin.amount}{coin.denom}"
        return None

    def memo(self) -> str:
        return self.tx.body.memo if self.tx and self.tx.body else ""


class GetTxResponse(_Payload):
    tx_response: TxResponse


class RestPagination(_Payload):
    next_key: str | None = None
    total: int | None = None


class SearchTxsResponse(_Payload):
    tx_responses: list[TxResponse] = Field(default_factory=list)
    pagination: RestPagination | None = None
    total: int | None = None

    def reported_total(self) -> int | None:
        if self.total is not None:
            return self.total
        return self.pagination.total if self.pagination else None


# ---------------------------------------------------------------------------
# Node RPC (Tendermint / CometBFT JSON-RPC over GET)
# ---------------------------------------------------------------------------


class SyncInfo(_Payload):
    latest_block_height: int


class StatusResult(_Payload):
    sync_info: SyncInfo


class BlockHeader(_Payload):
    height: int
    time: str = ""


class BlockData(_Payload):
    txs: list[str] | None = None


class Block(_Payload):
    header: BlockHeader
    data: BlockData = Field(default_factory=BlockData)


class BlockResult(_Payload):
    block: Block


class BlockMeta(_Payload):
    header: BlockHeader
    num_txs: int = 0


class BlockchainResult(_Payload):
    last_height: int | None = None
    block_metas: list[BlockMeta] = Field(default_factory=list)


class RpcTxResult(_Payload):
    code: int = 0
    gas_used: int | None = None
    gas_wanted: int | None = None
    log: str = ""
    events: list[TxEvent] = Field(default_factory=list)


class RpcTx(_Payload):
    hash: str
    height: int
    tx_result: RpcTxResult = Field(default_factory=RpcTxResult)
    tx: str = ""
