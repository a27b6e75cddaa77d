"""Field extraction shared by the protobuf and JSON decode paths.

Both paths hand `extract_message` a snake_case mapping: protobuf messages via
`betterproto.Message.to_dict(casing=Casing.SNAKE)`, JSON messages as served by
the chain REST API (camelCase keys are normalized first).
"""

from __future__ import annotations

import base64
import re
from collections.abc import Mapping
from typing import Any

from zigscan.core.models import DecodedMessage, MessageKind
from zigscan.decoding.specs import MessageSpec

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def snake_keys(values: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy with camelCase keys converted to snake_case (one level deep)."""
    return {_CAMEL_BOUNDARY.sub(r"_\1", k).lower(): v for k, v in values.items()}


def first_coin(value: Any) -> tuple[str | None, str | None]:
    """Return (amount, denom) of a Coin or the first Coin of a list."""
    if isinstance(value, list):
        value = value[0] if value else None
    if not isinstance(value, Mapping):
        return None, None
    amount = value.get("amount")
    denom = value.get("denom")
    return (str(amount) if amount not in (None, "") else None, str(denom) if denom else None)


def _text(values: Mapping[str, Any], key: str) -> str | None:
    v = values.get(key)
    if v is None or v == "":
        return None
    if not isinstance(v, str):
        raise TypeError(f"{key} is not a string: {type(v).__name__}")
    return v


def pubkey_hex(value: Any) -> str | None:
    """Hex of a base64 key as rendered by `to_dict` / the REST API."""
    if not value:
        return None
    if not isinstance(value, str):
        raise TypeError("key is not a base64 string")
    return base64.b64decode(value, validate=True).hex()


def extract_message(spec: MessageSpec, values: Mapping[str, Any]) -> DecodedMessage:
    """Map a known message's fields onto a `DecodedMessage`.

    Raises
    ------
    TypeError / ValueError / binascii.Error
        When the payload does not have the expected field shapes; callers
        turn this into `Unknown{type_url}`.
    """
    values = snake_keys(values)
    kind = spec.kind
    match kind:
        case MessageKind.SEND:
            amount, denom = first_coin(values.get("amount"))
            return DecodedMessage(
                kind=kind,
                type=spec.label,
                sender=_text(values, "from_address"),
                recipient=_text(values, "to_address"),
                amount=amount,
                denom=denom,
            )
        case MessageKind.DELEGATE | MessageKind.UNDELEGATE:
            amount, denom = first_coin(values.get("amount"))
            validator = _text(values, "validator_address")
            return DecodedMessage(
                kind=kind,
                type=spec.label,
                sender=_text(values, "delegator_address"),
                validators=(validator,) if validator else (),
                amount=amount,
                denom=denom,
            )
        case MessageKind.REDELEGATE:
            amount, denom = first_coin(values.get("amount"))
            src = _text(values, "validator_src_address")
            dst = _text(values, "validator_dst_address")
            return DecodedMessage(
                kind=kind,
                type=spec.label,
                sender=_text(values, "delegator_address"),
                validators=tuple(v for v in (src, dst) if v),
                amount=amount,
                denom=denom,
            )
        case MessageKind.VOTE:
            return DecodedMessage(kind=kind, type=spec.label, sender=_text(values, "voter"))
        case MessageKind.WITHDRAW_REWARD:
            validator = _text(values, "validator_address")
            return DecodedMessage(
                kind=kind,
                type=spec.label,
                sender=_text(values, "delegator_address"),
                validators=(validator,) if validator else (),
            )
        case MessageKind.PUBKEY:
            return DecodedMessage(kind=kind, type=spec.label, public_key=pubkey_hex(values.get("key")))
        case MessageKind.UNKNOWN:
            return DecodedMessage.unknown(spec.label)
    raise RuntimeError(f"Unsupported message kind: {kind!r}")
