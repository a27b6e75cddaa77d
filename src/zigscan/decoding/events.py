"""Transfer summary extraction from execution events.

Only the first `transfer` event is read. Multi-transfer transactions are
therefore summarized by their first transfer.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Iterable, Mapping
from typing import Any

from zigscan.core.models import TransferSummary

TRANSFER_KEYS = ("sender", "recipient", "amount")


def _b64_text(value: Any) -> str | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        return None


def _attributes(event: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    attrs = event.get("attributes") or []
    return [a for a in attrs if isinstance(a, Mapping)]


def _read_plain(attrs: list[Mapping[str, Any]]) -> dict[str, str | None]:
    out: dict[str, str | None] = {}
    for a in attrs:
        key = a.get("key")
        if key in TRANSFER_KEYS and key not in out:
            value = a.get("value")
            out[key] = str(value) if value not in (None, "") else None
    return out


def _read_base64(attrs: list[Mapping[str, Any]]) -> dict[str, str | None]:
    # older Tendermint nodes base64-encode event attribute keys and values
    out: dict[str, str | None] = {}
    for a in attrs:
        key = _b64_text(a.get("key"))
        if key in TRANSFER_KEYS and key not in out:
            out[key] = _b64_text(a.get("value"))
    return out


def extract_transfer(events: Iterable[Mapping[str, Any]] | None) -> TransferSummary:
    """Sender/recipient/amount from the first `transfer` event; missing values are None."""
    for event in events or ():
        if not isinstance(event, Mapping) or event.get("type") != "transfer":
            continue
        attrs = _attributes(event)
        values = _read_plain(attrs) or _read_base64(attrs)
        return TransferSummary(
            sender=values.get("sender"),
            recipient=values.get("recipient"),
            amount=values.get("amount"),
        )
    return TransferSummary()
