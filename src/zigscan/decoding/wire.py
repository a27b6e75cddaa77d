"""Structured decoding of Any-wrapped protobuf messages.

This module provides:
- `decode_base64`: strict base64 → bytes (raises `DecodeFailure(stage="base64")`)
- `parse_envelope`: bytes → `WireEnvelope` (a bare Any, or the first message of a TxRaw)
- `decode_envelope`: type-URL dispatch against the message table
- `decode_wire`: the three steps chained

Design notes
------------
- A parsed Any is only trusted when its type-URL is a printable identifier;
  protobuf is permissive enough that random bytes often "parse".
- Unknown type-URLs are a legitimate outcome (`Unknown{label}`), not an error.
- Extraction errors for a known type-URL degrade to `Unknown{label, type_url}`.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass

import betterproto

from zigscan.core.errors import DecodeFailure
from zigscan.core.models import DecodedMessage
from zigscan.decoding import proto
from zigscan.decoding.fields import extract_message, first_coin
from zigscan.decoding.registry import DEFAULT_TABLE, lookup
from zigscan.decoding.specs import MessageTable, is_type_url, label_from_type_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WireEnvelope:
    """A type-URL plus payload, with tx-level context when unwrapped from a TxRaw."""

    type_url: str
    value: bytes
    memo: str | None = None
    fee: str | None = None


@dataclass(frozen=True, slots=True)
class WireResult:
    message: DecodedMessage
    memo: str | None = None
    fee: str | None = None


# ---- Stage 1: base64 ----


def decode_base64(text: str) -> bytes:
    """Strict base64 decode tolerant of whitespace and missing padding."""
    compact = "".join(text.split())
    if not compact:
        raise DecodeFailure("base64", text, "empty input")
    compact += "=" * (-len(compact) % 4)
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeFailure("base64", text, str(e)) from e


# ---- Stage 2: envelope ----


def _parse_any(raw: bytes) -> WireEnvelope | None:
    try:
        env = proto.Any().parse(raw)
    except Exception:  # betterproto raises a mix of ValueError/IndexError/UnicodeDecodeError
        return None
    if not env.type_url or not is_type_url(env.type_url):
        return None
    return WireEnvelope(type_url=env.type_url, value=bytes(env.value))


def _format_fee(fee: proto.Fee) -> str | None:
    amount, denom = first_coin([c.to_dict(casing=betterproto.Casing.SNAKE) for c in fee.amount])
    if not amount:
        return None
    return f"{amount}{denom or ''}"


def _parse_tx_raw(raw: bytes) -> WireEnvelope | None:
    try:
        tx = proto.TxRaw().parse(raw)
        if not tx.body_bytes:
            return None
        body = proto.TxBody().parse(tx.body_bytes)
    except Exception:
        return None
    if not body.messages or not is_type_url(body.messages[0].type_url):
        return None

    fee: str | None = None
    if tx.auth_info_bytes:
        try:
            fee = _format_fee(proto.AuthInfo().parse(tx.auth_info_bytes).fee)
        except Exception:
            logger.debug("auth_info present but not decodable; fee left unresolved")

    first = body.messages[0]
    return WireEnvelope(type_url=first.type_url, value=bytes(first.value), memo=body.memo or None, fee=fee)


def parse_envelope(raw: bytes) -> WireEnvelope:
    """Parse `raw` as an Any, then as a full TxRaw; raise `DecodeFailure(stage="envelope")` otherwise."""
    if not raw:
        raise DecodeFailure("envelope", raw, "no bytes")
    env = _parse_any(raw) or _parse_tx_raw(raw)
    if env is None:
        raise DecodeFailure("envelope", raw, "not an Any envelope or TxRaw")
    return env


# ---- Stage 3: dispatch ----


def decode_envelope(env: WireEnvelope, *, table: MessageTable = DEFAULT_TABLE) -> DecodedMessage:
    """Dispatch on the type-URL; never raises."""
    spec = lookup(table, env.type_url)
    if spec is None:
        return DecodedMessage.unknown(label_from_type_url(env.type_url))
    try:
        payload = spec.proto().parse(env.value)
        return extract_message(spec, payload.to_dict(casing=betterproto.Casing.SNAKE))
    except Exception as e:
        logger.debug("failed to extract %s fields: %s", env.type_url, e)
        return DecodedMessage.unknown(spec.label, type_url=env.type_url)


def decode_wire(text: str, *, table: MessageTable = DEFAULT_TABLE) -> WireResult:
    """base64 → envelope → dispatch.

    Raises
    ------
    DecodeFailure
        stage="base64" or stage="envelope"; the heuristic decoder takes over.
    """
    raw = decode_base64(text)
    env = parse_envelope(raw)
    return WireResult(message=decode_envelope(env, table=table), memo=env.memo, fee=env.fee)
