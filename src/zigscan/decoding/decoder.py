"""Decode pipeline: wire decoder first, heuristic probes as fallback.

Exposes:
- `decode_transaction(text)` → DecodedTransaction (first message, memo, fee)
- `decode_message(text)` → DecodedMessage
- `decode_raw(raw)` → DecodedTransaction, honouring the RawTransaction encoding hint

None of these raise for any string input.
"""

from __future__ import annotations

import logging

from zigscan.core.errors import DecodeFailure
from zigscan.core.models import DecodedMessage, DecodedTransaction, MessageKind, RawTransaction
from zigscan.decoding.heuristics import PROBES, ProbeInput, looks_textual, run_probes
from zigscan.decoding.registry import DEFAULT_TABLE
from zigscan.decoding.specs import MessageTable
from zigscan.decoding.wire import decode_base64, decode_wire

logger = logging.getLogger(__name__)

# everything except the terminal fallback
_SNIFF_PROBES = tuple(p for p in PROBES if p[0] != "terminal")


def decode_transaction(
    text: str,
    *,
    prefix: str = "zig",
    table: MessageTable = DEFAULT_TABLE,
) -> DecodedTransaction:
    """Decode one encoded transaction (or bare Any) into its first message."""
    if not isinstance(text, str):
        text = str(text)
    try:
        result = decode_wire(text, table=table)
    except DecodeFailure as e:
        logger.debug("wire decode failed (%s); running heuristics on %r", e, e.snippet)
        raw = _bytes_or_none(text) if e.stage != "base64" else None
        message = run_probes(ProbeInput(text=text, raw=raw, prefix=prefix, table=table))
        return DecodedTransaction(message=message)

    message = result.message
    if message.kind is MessageKind.UNKNOWN and not message.has_fields:
        raw = _bytes_or_none(text)
        if raw is not None and looks_textual(raw):
            hit = run_probes(ProbeInput(text=text, raw=raw, prefix=prefix, table=table), _SNIFF_PROBES)
            if hit.has_fields:
                message = hit
    return DecodedTransaction(message=message, memo=result.memo, fee=result.fee)


def decode_message(text: str, *, prefix: str = "zig", table: MessageTable = DEFAULT_TABLE) -> DecodedMessage:
    return decode_transaction(text, prefix=prefix, table=table).message


def decode_raw(raw: RawTransaction, *, prefix: str = "zig", table: MessageTable = DEFAULT_TABLE) -> DecodedTransaction:
    return decode_transaction(raw.encoded(), prefix=prefix, table=table)


def _bytes_or_none(text: str) -> bytes | None:
    try:
        return decode_base64(text)
    except DecodeFailure:
        return None
