"""Ordered fallback probes for input the wire decoder cannot handle.

Each probe is a pure function `ProbeInput -> DecodedMessage | None`; the
first probe returning a message wins. `PROBES` fixes the order:

1. json_sniff          JSON object with a type-URL or from_address keys
2. address_sniff_bytes bech32 addresses in the decoded bytes
3. hex_keyword_sniff   module keywords in the decoded bytes (label only)
4. address_sniff_text  bech32 addresses in the original text
5. terminal            "Decode Error" / "Unknown Transaction"

`run_probes` never raises.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from zigscan.core.models import DecodedMessage, MessageKind
from zigscan.decoding.fields import extract_message, snake_keys
from zigscan.decoding.registry import DEFAULT_TABLE, lookup
from zigscan.decoding.specs import MessageTable, label_from_type_url

logger = logging.getLogger(__name__)

SNIFF_WINDOW = 1000  # bytes of decoded input rendered as text
AMOUNT_WINDOW = 96  # characters after the last address searched for "<digits><denom>"
PRINTABLE_RATIO = 0.85

_AMOUNT_RE = re.compile(r"(\d+)([a-zA-Z][a-zA-Z0-9/]*)")

# ASCII keyword → category label, checked in order on the lowercase hex rendering
HEX_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("bank", "Bank Transaction"),
    ("staking", "Staking Transaction"),
    ("governance", "Governance Transaction"),
    ("factory", "Token Factory Transaction"),
    ("distributi", "Distribution Transaction"),
)


@dataclass(frozen=True, slots=True)
class ProbeInput:
    """What every probe sees: the original text and, when base64 decoding worked, the bytes."""

    text: str
    raw: bytes | None
    prefix: str = "zig"
    table: MessageTable | None = None

    @property
    def base64_failed(self) -> bool:
        return self.raw is None


Probe = Callable[[ProbeInput], DecodedMessage | None]


@lru_cache(maxsize=8)
def address_pattern(prefix: str) -> re.Pattern[str]:
    """Bech32-style account address: prefix, separator "1", then 38-44 alphanumerics."""
    return re.compile(re.escape(prefix) + r"1[0-9a-zA-Z]{38,44}")


def looks_textual(raw: bytes) -> bool:
    """True when most bytes are printable ASCII (i.e. the input is probably not protobuf)."""
    if not raw:
        return False
    printable = sum(1 for b in raw if 32 <= b < 127 or b in (9, 10, 13))
    return printable / len(raw) >= PRINTABLE_RATIO


# ---------------------------------------------------------------------------
# Probes
# ---------------------------------------------------------------------------


def _message_from_json(obj: Mapping[str, Any], table: MessageTable) -> DecodedMessage | None:
    type_name = obj.get("type") or obj.get("@type")
    if isinstance(type_name, str) and "/" in type_name:
        spec = lookup(table, type_name)
        if spec is None:
            return DecodedMessage.unknown(label_from_type_url(type_name))
        # amino JSON nests fields under "value"; REST JSON keeps them inline
        body: Any = obj.get("value", obj)
        if isinstance(body, str):
            body = {"key": body}
        if not isinstance(body, Mapping):
            return DecodedMessage.unknown(spec.label, type_url=type_name)
        try:
            return extract_message(spec, body)
        except Exception:
            return DecodedMessage.unknown(spec.label, type_url=type_name)

    fields = snake_keys(obj)
    if "from_address" in fields:
        spec = lookup(table, "bank.MsgSend")
        if spec is not None:
            try:
                return extract_message(spec, fields)
            except Exception:
                return None
    return None


def json_sniff(inp: ProbeInput) -> DecodedMessage | None:
    text = inp.text
    if "{" not in text or "}" not in text:
        return None
    try:
        obj = json.loads(text[text.index("{") : text.rindex("}") + 1])
    except ValueError:
        return None
    if not isinstance(obj, Mapping):
        return None
    return _message_from_json(obj, inp.table or DEFAULT_TABLE)


def _sniff_addresses(text: str, prefix: str) -> DecodedMessage | None:
    matches = list(address_pattern(prefix).finditer(text))
    if len(matches) >= 2:
        tail = text[matches[1].end() : matches[1].end() + AMOUNT_WINDOW]
        amount = _AMOUNT_RE.search(tail)
        return DecodedMessage(
            kind=MessageKind.SEND,
            type="Send",
            sender=matches[0].group(0),
            recipient=matches[1].group(0),
            amount=amount.group(1) if amount else None,
            denom=amount.group(2) if amount else None,
        )
    if len(matches) == 1:
        return DecodedMessage(kind=MessageKind.UNKNOWN, type="Validator Operation", sender=matches[0].group(0))
    return None


def address_sniff_bytes(inp: ProbeInput) -> DecodedMessage | None:
    if not inp.raw:
        return None
    return _sniff_addresses(inp.raw[:SNIFF_WINDOW].decode("latin-1"), inp.prefix)


def hex_keyword_sniff(inp: ProbeInput) -> DecodedMessage | None:
    if not inp.raw:
        return None
    hexed = inp.raw.hex()
    for keyword, label in HEX_KEYWORDS:
        if keyword.encode("ascii").hex() in hexed:
            return DecodedMessage.unknown(label)
    return None


def address_sniff_text(inp: ProbeInput) -> DecodedMessage | None:
    return _sniff_addresses(inp.text, inp.prefix)


def terminal(inp: ProbeInput) -> DecodedMessage:
    return DecodedMessage.unknown("Decode Error" if inp.base64_failed else "Unknown Transaction")


PROBES: tuple[tuple[str, Probe], ...] = (
    ("json_sniff", json_sniff),
    ("address_sniff_bytes", address_sniff_bytes),
    ("hex_keyword_sniff", hex_keyword_sniff),
    ("address_sniff_text", address_sniff_text),
    ("terminal", terminal),
)


def run_probes(inp: ProbeInput, probes: tuple[tuple[str, Probe], ...] = PROBES) -> DecodedMessage:
    """Evaluate `probes` in order; the first hit wins. The result always carries `raw_data`."""
    for name, probe in probes:
        try:
            hit = probe(inp)
        except Exception:
            logger.debug("heuristic probe %s raised; skipping", name, exc_info=True)
            continue
        if hit is not None:
            logger.debug("heuristic probe %s matched: %s", name, hit.type)
            return hit.with_raw_data(inp.text)
    return terminal(inp).with_raw_data(inp.text)
