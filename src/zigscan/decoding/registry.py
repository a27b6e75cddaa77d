"""Default message table for the Cosmos SDK modules ZigChain exposes.

This module exposes:
- `make_table()` → MessageTable prefilled with the known message specs
- `add_message_spec(table, spec)` → register one more spec
- `lookup(table, type_url)` → resolve a protobuf type-URL or an amino name

Extending decoding to a new message type only requires a `MessageSpec` here
plus an arm in `fields.extract_message` for a new `MessageKind`.
"""

from __future__ import annotations

from collections.abc import Iterable

from zigscan.core.models import MessageKind
from zigscan.decoding import proto
from zigscan.decoding.specs import MessageSpec, MessageTable, type_url_suffix

DEFAULT_SPECS: tuple[MessageSpec, ...] = (
    MessageSpec("bank.MsgSend", MessageKind.SEND, "Send", proto.MsgSend, "cosmos-sdk/MsgSend"),
    MessageSpec("staking.MsgDelegate", MessageKind.DELEGATE, "Delegate", proto.MsgDelegate, "cosmos-sdk/MsgDelegate"),
    MessageSpec(
        "staking.MsgUndelegate", MessageKind.UNDELEGATE, "Undelegate", proto.MsgUndelegate, "cosmos-sdk/MsgUndelegate"
    ),
    MessageSpec(
        "staking.MsgBeginRedelegate",
        MessageKind.REDELEGATE,
        "Redelegate",
        proto.MsgBeginRedelegate,
        "cosmos-sdk/MsgBeginRedelegate",
    ),
    MessageSpec("gov.MsgVote", MessageKind.VOTE, "Vote", proto.MsgVote, "cosmos-sdk/MsgVote"),
    MessageSpec(
        "distribution.MsgWithdrawDelegatorReward",
        MessageKind.WITHDRAW_REWARD,
        "Claim Rewards",
        proto.MsgWithdrawDelegatorReward,
        "cosmos-sdk/MsgWithdrawDelegationReward",
    ),
    MessageSpec(
        "crypto.secp256k1.PubKey", MessageKind.PUBKEY, "Public Key", proto.PubKey, "tendermint/PubKeySecp256k1"
    ),
)


def make_table() -> MessageTable:
    """Build the default table with the core bank/staking/gov/distribution specs."""
    table: MessageTable = {}
    add_many(table, DEFAULT_SPECS)
    return table


def add_message_spec(table: MessageTable, spec: MessageSpec) -> None:
    """Insert one spec keyed by its suffix (and its amino name when it has one)."""
    table[spec.suffix] = spec
    if spec.amino_name:
        table[spec.amino_name] = spec


def add_many(table: MessageTable, specs: Iterable[MessageSpec]) -> None:
    for s in specs:
        add_message_spec(table, s)


def lookup(table: MessageTable, type_url: str) -> MessageSpec | None:
    """Resolve a type-URL ("/cosmos.bank.v1beta1.MsgSend") or amino name ("cosmos-sdk/MsgSend")."""
    return table.get(type_url) or table.get(type_url_suffix(type_url))


DEFAULT_TABLE: MessageTable = make_table()
