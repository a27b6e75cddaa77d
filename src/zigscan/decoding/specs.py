"""Message specification primitives and the type-URL table.

Defines:
- `MessageSpec`: one known message type (kind, label, protobuf class, amino name)
- `MessageTable`: mapping from normalized type-URL suffix → MessageSpec
- `type_url_suffix()` / `label_from_type_url()`: type-URL normalization helpers
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import betterproto

from zigscan.core.models import MessageKind

# "/cosmos.bank.v1beta1.MsgSend" → ("bank", "MsgSend")
_VERSION_SEGMENT = re.compile(r"^v\d+((alpha|beta)\d+)?$")
_ROOT_PACKAGES = ("cosmos",)

# Printable "[host]/package.Name" identifier accepted as an Any type-URL
TYPE_URL_RE = re.compile(r"^[A-Za-z0-9.\-]*/[A-Za-z_][A-Za-z0-9_.]*$")


@dataclass(frozen=True)
class MessageSpec:
    """Describe one decodable message type."""

    suffix: str  # e.g., "bank.MsgSend"
    kind: MessageKind
    label: str  # e.g., "Send"
    proto: type[betterproto.Message]
    amino_name: str | None = None  # e.g., "cosmos-sdk/MsgSend"


# The closed table keyed by normalized suffix (see `type_url_suffix`).
MessageTable = dict[str, MessageSpec]


def type_url_suffix(type_url: str) -> str:
    """Strip host, the root package and version segments from a type-URL.

    "/cosmos.bank.v1beta1.MsgSend"            → "bank.MsgSend"
    "type.googleapis.com/cosmos.gov.v1.MsgVote" → "gov.MsgVote"
    "/cosmos.crypto.secp256k1.PubKey"         → "crypto.secp256k1.PubKey"
    """
    path = type_url.rsplit("/", 1)[-1]
    parts = [p for p in path.split(".") if p and not _VERSION_SEGMENT.match(p)]
    if parts and parts[0] in _ROOT_PACKAGES:
        parts = parts[1:]
    return ".".join(parts)


def label_from_type_url(type_url: str) -> str:
    """Human label from the last path segment, without a literal "Msg" prefix."""
    name = type_url.rsplit("/", 1)[-1].rsplit(".", 1)[-1]
    if name.startswith("Msg") and len(name) > 3:
        name = name[3:]
    return name or "Unknown"


def is_type_url(value: str) -> bool:
    return bool(TYPE_URL_RE.match(value))
