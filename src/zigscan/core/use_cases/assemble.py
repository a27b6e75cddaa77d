"""Use case: assemble a normalized TransactionRecord.

Combines, for one transaction:
- the hash (caller-supplied, else computed from the raw bytes)
- block height / time
- the execution result (code, gas, log, events)
- the decode pipeline output (wire decoder with heuristic fallback)
- transfer summary from events and caller-supplied placeholders

Resolution orders:
- status: explicit status string → execution code == 0 → legacy `code` == 0
- fee: explicit fee → "<gas_used> gas" → "Unknown"
- sender/recipient/amount: decoded message → transfer event → placeholder → ""
"""

from __future__ import annotations

import logging

from zigscan.core.errors import InvalidTransactionHash
from zigscan.core.models import (
    DecodedMessage,
    DecodedTransaction,
    Encoding,
    ExecutionResult,
    RawTransaction,
    RetrievalTier,
    Status,
    TransactionRecord,
    TransferSummary,
)
from zigscan.decoding.decoder import decode_transaction
from zigscan.decoding.events import extract_transfer
from zigscan.decoding.hashing import compute_tx_hash, hash_matches, normalize_hash

logger = logging.getLogger(__name__)

_SUCCESS_WORDS = {"success", "succeeded", "ok"}
_FAILED_WORDS = {"failed", "failure", "fail", "error"}


def resolve_status(status: str | None, execution_code: int | None, legacy_code: int | None) -> Status:
    """Explicit status string, then the execution code, then the legacy code.

    With no signal at all the transaction is reported as successful: nodes
    omit a zero `code` from their JSON.
    """
    if status:
        s = status.strip().lower()
        if s in _SUCCESS_WORDS:
            return "success"
        if s in _FAILED_WORDS:
            return "failed"
    if execution_code is not None:
        return "success" if execution_code == 0 else "failed"
    if legacy_code is not None:
        return "success" if legacy_code == 0 else "failed"
    return "success"


def resolve_fee(fee: str | None, gas_used: int | None) -> str:
    if fee:
        return fee
    if gas_used is not None:
        return f"{gas_used} gas"
    return "Unknown"


def _first(*values: str | None) -> str:
    for v in values:
        if v:
            return v
    return ""


def _resolve_hash(tx_hash: str | None, raw: RawTransaction) -> str:
    raw_bytes = raw.to_bytes() if raw.payload else None
    if tx_hash:
        try:
            bare = normalize_hash(tx_hash)
        except InvalidTransactionHash:
            logger.warning("upstream supplied a malformed hash %r; recomputing from raw bytes", tx_hash)
        else:
            if raw_bytes is not None and raw.encoding is not Encoding.TEXT and not hash_matches(raw_bytes, bare):
                logger.warning("hash mismatch: %s supplied, raw bytes hash to %s", bare, compute_tx_hash(raw_bytes))
            return bare
    return compute_tx_hash(raw_bytes if raw_bytes is not None else raw.payload.encode("utf-8"))


def _to_int(value: int | str | None) -> int:
    try:
        return int(value) if value not in (None, "") else 0
    except (TypeError, ValueError):
        return 0


def assemble_record(
    *,
    raw: RawTransaction | None = None,
    tx_hash: str | None = None,
    height: int | str | None = None,
    time: str | None = None,
    execution: ExecutionResult | None = None,
    status: str | None = None,
    legacy_code: int | None = None,
    fee: str | None = None,
    memo: str | None = None,
    placeholders: TransferSummary | None = None,
    decoded: DecodedTransaction | None = None,
    type_hint: str | None = None,
    prefix: str = "zig",
    source: RetrievalTier | None = None,
) -> TransactionRecord:
    """Build a TransactionRecord from whatever an upstream provided.

    Parameters
    ----------
    raw : RawTransaction | None
        Encoded transaction (or first message) to decode; its height/time
        hints are used when `height` / `time` are not given.
    tx_hash : str | None
        Upstream hash; normalized to bare uppercase hex. Computed from the raw
        bytes when absent.
    decoded : DecodedTransaction | None
        Pre-decoded output; skips running the decode pipeline.
    type_hint : str | None
        Label to use when there is nothing to decode (indexed API rows).
    placeholders : TransferSummary | None
        Caller-supplied sender/recipient/amount, lowest priority before "".

    Returns
    -------
    TransactionRecord
    """
    raw = raw or RawTransaction(payload="")
    execution = execution or ExecutionResult()
    placeholders = placeholders or TransferSummary()

    if decoded is None:
        if raw.payload:
            decoded = decode_transaction(raw.encoded(), prefix=prefix)
        else:
            decoded = DecodedTransaction(message=DecodedMessage.unknown(type_hint or "Unknown Transaction"))
    message = decoded.message
    transfer = extract_transfer(execution.events)

    return TransactionRecord(
        hash=_resolve_hash(tx_hash, raw),
        height=_to_int(height if height not in (None, "") else raw.height),
        time=time or raw.time or "",
        status=resolve_status(status, execution.code, legacy_code),
        gas_used=execution.gas_used,
        gas_wanted=execution.gas_wanted,
        fee=resolve_fee(fee or decoded.fee, execution.gas_used),
        messages=(message,),
        sender_summary=_first(message.sender, transfer.sender, placeholders.sender),
        recipient_summary=_first(message.counterparty, transfer.recipient, placeholders.recipient),
        amount_summary=_first(message.amount_text, transfer.amount, placeholders.amount),
        memo=memo if memo is not None else (decoded.memo or ""),
        raw_encoded=raw.payload,
        source=source,
    )
