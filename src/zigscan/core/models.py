"""Core domain models for decoded and retrieved transactions.

This module defines:
- `RawTransaction`: encoded transaction bytes plus an encoding hint.
- `MessageKind` / `DecodedMessage`: closed tagged variant of decoded messages.
- `ExecutionResult` / `TransferSummary`: execution metadata and event summary.
- `TransactionRecord`: the normalized, immutable record handed to callers.
- `PaginationWindow` / `RecordPage`: list endpoint result shape.
- `RetrievalTier` / `Facet`: upstream tiers and address-history query facets.

Design notes
------------
- Every entity is frozen and created per call; nothing here is cached.
- Addresses and amounts are kept as strings (uint256-sized amounts, bech32).
- `to_dict()` helpers drop empty fields so JSON output stays compact.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

Status = Literal["success", "failed"]


# === Raw input ===


class Encoding(str, Enum):
    BASE64 = "base64"
    HEX = "hex"
    TEXT = "text"


@dataclass(frozen=True, slots=True)
class RawTransaction:
    """Encoded transaction as fetched from an upstream, before decoding."""

    payload: str
    encoding: Encoding = Encoding.BASE64
    height: int | None = None
    time: str | None = None

    def encoded(self) -> str:
        """Return the text fed to the decoder (hex is re-encoded as base64)."""
        if self.encoding is Encoding.HEX:
            text = self.payload.strip()
            if text[:2] in ("0x", "0X"):
                text = text[2:]
            try:
                return base64.b64encode(bytes.fromhex(text)).decode("ascii")
            except ValueError:
                return self.payload
        return self.payload

    def to_bytes(self) -> bytes | None:
        """Best-effort raw bytes; None when the payload is not valid for its encoding."""
        if self.encoding is Encoding.TEXT:
            return self.payload.encode("utf-8")
        try:
            return base64.b64decode(self.encoded(), validate=True)
        except (binascii.Error, ValueError):
            return None


# === Decoded messages ===


class MessageKind(str, Enum):
    SEND = "send"
    DELEGATE = "delegate"
    UNDELEGATE = "undelegate"
    REDELEGATE = "redelegate"
    VOTE = "vote"
    WITHDRAW_REWARD = "withdraw_reward"
    PUBKEY = "pubkey"
    UNKNOWN = "unknown"


STAKING_KINDS = frozenset({MessageKind.DELEGATE, MessageKind.UNDELEGATE, MessageKind.REDELEGATE})


@dataclass(frozen=True, slots=True, kw_only=True)
class DecodedMessage:
    """One decoded transaction message.

    `kind` selects the variant, `type` is the human label shown to users
    ("Send", "Claim Rewards", "Validator Operation", ...).
    """

    kind: MessageKind
    type: str
    sender: str | None = None  # from_address / delegator / voter
    recipient: str | None = None
    amount: str | None = None
    denom: str | None = None
    validators: tuple[str, ...] = ()
    public_key: str | None = None  # lowercase hex
    type_url: str | None = None
    raw_data: str | None = None

    @classmethod
    def unknown(cls, label: str, *, type_url: str | None = None, raw_data: str | None = None) -> DecodedMessage:
        return cls(kind=MessageKind.UNKNOWN, type=label, type_url=type_url, raw_data=raw_data)

    @property
    def has_fields(self) -> bool:
        """True when anything beyond the label was extracted."""
        return bool(self.sender or self.recipient or self.amount or self.validators or self.public_key)

    @property
    def counterparty(self) -> str | None:
        """Recipient, or the (destination) validator for staking messages."""
        if self.recipient:
            return self.recipient
        if self.kind in STAKING_KINDS and self.validators:
            return self.validators[-1]
        return None

    @property
    def amount_text(self) -> str | None:
        if not self.amount:
            return None
        return f"{self.amount}{self.denom or ''}"

    def with_raw_data(self, raw_data: str) -> DecodedMessage:
        return DecodedMessage(
            kind=self.kind,
            type=self.type,
            sender=self.sender,
            recipient=self.recipient,
            amount=self.amount,
            denom=self.denom,
            validators=self.validators,
            public_key=self.public_key,
            type_url=self.type_url,
            raw_data=raw_data,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type}
        for key in ("sender", "recipient", "amount", "denom", "public_key", "type_url", "raw_data"):
            value = getattr(self, key)
            if value:
                out[key] = value
        if self.validators:
            out["validators"] = list(self.validators)
        return out


# === Execution metadata ===


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """Execution outcome reported by the chain for one transaction."""

    code: int | None = None
    gas_used: int | None = None
    gas_wanted: int | None = None
    log: str = ""
    events: tuple[Mapping[str, Any], ...] = ()


@dataclass(frozen=True, slots=True)
class TransferSummary:
    """Sender / recipient / amount triple; any part may be unknown."""

    sender: str | None = None
    recipient: str | None = None
    amount: str | None = None


@dataclass(frozen=True, slots=True)
class DecodedTransaction:
    """Decode pipeline output: first message plus tx-level memo and fee when known."""

    message: DecodedMessage
    memo: str | None = None
    fee: str | None = None


# === Retrieval ===


class RetrievalTier(str, Enum):
    """Upstream data sources, declared in preference order."""

    PRIMARY_INDEXED_API = "indexed_api"
    CHAIN_REST_API = "chain_rest"
    NODE_RPC_PROXY = "node_rpc"

    @classmethod
    def canonical(cls) -> tuple[RetrievalTier, ...]:
        return tuple(cls)


class Facet(str, Enum):
    """Address-history query dimensions on the chain REST API."""

    SENT = "transfer.sender"
    RECEIVED = "transfer.recipient"
    MESSAGE = "message.sender"

    def query(self, address: str) -> str:
        return f"{self.value}='{address}'"


@dataclass(frozen=True, slots=True, kw_only=True)
class TransactionRecord:
    """Normalized transaction record (immutable value object)."""

    hash: str  # 64 uppercase hex chars, no 0x
    height: int
    time: str
    status: Status
    gas_used: int | None
    gas_wanted: int | None
    fee: str
    messages: tuple[DecodedMessage, ...]
    sender_summary: str
    recipient_summary: str
    amount_summary: str
    memo: str
    raw_encoded: str
    source: RetrievalTier | None = None

    @property
    def message(self) -> DecodedMessage | None:
        return self.messages[0] if self.messages else None

    @property
    def type(self) -> str:
        return self.messages[0].type if self.messages else "Unknown Transaction"

    def involves(self, address: str) -> bool:
        """True when `address` appears in the summaries or the decoded messages."""
        if address in (self.sender_summary, self.recipient_summary):
            return True
        for msg in self.messages:
            if address in (msg.sender, msg.recipient) or address in msg.validators:
                return True
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "hash": self.hash,
            "height": self.height,
            "time": self.time,
            "status": self.status,
            "gas_used": self.gas_used,
            "gas_wanted": self.gas_wanted,
            "fee": self.fee,
            "type": self.type,
            "messages": [m.to_dict() for m in self.messages],
            "sender": self.sender_summary,
            "recipient": self.recipient_summary,
            "amount": self.amount_summary,
            "memo": self.memo,
            "raw_encoded": self.raw_encoded,
            "source": self.source.value if self.source else None,
        }


@dataclass(frozen=True, slots=True)
class PaginationWindow:
    page: int
    page_size: int
    total: int
    pages: int
    has_more: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "page_size": self.page_size,
            "total": self.total,
            "pages": self.pages,
            "has_more": self.has_more,
        }


@dataclass(frozen=True, slots=True)
class RecordPage:
    """List endpoint result: one page of records plus its window."""

    records: tuple[TransactionRecord, ...]
    pagination: PaginationWindow
    source: RetrievalTier | None = None

    @classmethod
    def empty(cls, *, page: int, page_size: int) -> RecordPage:
        return cls(
            records=(),
            pagination=PaginationWindow(page=page, page_size=page_size, total=0, pages=1, has_more=False),
        )


@dataclass(frozen=True, slots=True)
class FacetResult:
    """Records returned by one facet query plus the upstream's reported total."""

    facet: Facet
    records: tuple[TransactionRecord, ...] = ()
    total: int | None = None
    failed: bool = False
    error: str | None = field(default=None, compare=False)
