"""Protobuf message definitions for the Cosmos SDK types the explorer decodes.

Declared with betterproto, mirroring the field numbers of:
- google/protobuf/any.proto
- cosmos/base/v1beta1/coin.proto
- cosmos/bank/v1beta1/tx.proto
- cosmos/staking/v1beta1/tx.proto
- cosmos/gov/v1beta1/tx.proto
- cosmos/distribution/v1beta1/tx.proto
- cosmos/crypto/secp256k1/keys.proto
- cosmos/tx/v1beta1/tx.proto (TxRaw / TxBody / AuthInfo / Fee)
"""

from dataclasses import dataclass
from typing import List

import betterproto


@dataclass(eq=False, repr=False)
class Any(betterproto.Message):
    type_url: str = betterproto.string_field(1)
    value: bytes = betterproto.bytes_field(2)


@dataclass(eq=False, repr=False)
class Coin(betterproto.Message):
    denom: str = betterproto.string_field(1)
    amount: str = betterproto.string_field(2)


# ---- bank ----


@dataclass(eq=False, repr=False)
class MsgSend(betterproto.Message):
    from_address: str = betterproto.string_field(1)
    to_address: str = betterproto.string_field(2)
    amount: List[Coin] = betterproto.message_field(3)


# ---- staking ----


@dataclass(eq=False, repr=False)
class MsgDelegate(betterproto.Message):
    delegator_address: str = betterproto.string_field(1)
    validator_address: str = betterproto.string_field(2)
    amount: Coin = betterproto.message_field(3)


@dataclass(eq=False, repr=False)
class MsgUndelegate(betterproto.Message):
    delegator_address: str = betterproto.string_field(1)
    validator_address: str = betterproto.string_field(2)
    amount: Coin = betterproto.message_field(3)


@dataclass(eq=False, repr=False)
class MsgBeginRedelegate(betterproto.Message):
    delegator_address: str = betterproto.string_field(1)
    validator_src_address: str = betterproto.string_field(2)
    validator_dst_address: str = betterproto.string_field(3)
    amount: Coin = betterproto.message_field(4)


# ---- gov / distribution ----


@dataclass(eq=False, repr=False)
class MsgVote(betterproto.Message):
    proposal_id: int = betterproto.uint64_field(1)
    voter: str = betterproto.string_field(2)
    option: int = betterproto.int32_field(3)


@dataclass(eq=False, repr=False)
class MsgWithdrawDelegatorReward(betterproto.Message):
    delegator_address: str = betterproto.string_field(1)
    validator_address: str = betterproto.string_field(2)


# ---- crypto ----


@dataclass(eq=False, repr=False)
class PubKey(betterproto.Message):
    key: bytes = betterproto.bytes_field(1)


# ---- tx envelope ----


@dataclass(eq=False, repr=False)
class TxRaw(betterproto.Message):
    body_bytes: bytes = betterproto.bytes_field(1)
    auth_info_bytes: bytes = betterproto.bytes_field(2)
    signatures: List[bytes] = betterproto.bytes_field(3)


@dataclass(eq=False, repr=False)
class TxBody(betterproto.Message):
    messages: List[Any] = betterproto.message_field(1)
    memo: str = betterproto.string_field(2)
    timeout_height: int = betterproto.uint64_field(3)


@dataclass(eq=False, repr=False)
class Fee(betterproto.Message):
    amount: List[Coin] = betterproto.message_field(1)
    gas_limit: int = betterproto.uint64_field(2)
    payer: str = betterproto.string_field(3)
    granter: str = betterproto.string_field(4)


@dataclass(eq=False, repr=False)
class AuthInfo(betterproto.Message):
    fee: Fee = betterproto.message_field(2)
