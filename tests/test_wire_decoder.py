import base64
from collections.abc import Callable

import pytest

from zigscan.core.errors import DecodeFailure
from zigscan.core.models import MessageKind
from zigscan.decoding import proto
from zigscan.decoding.wire import WireEnvelope, decode_base64, decode_envelope, decode_wire, parse_envelope


def test_known_send_vector(send_any: str, addresses: dict[str, str]) -> None:
    result = decode_wire(send_any)

    assert result.message.to_dict() == {
        "type": "Send",
        "sender": addresses["sender"],
        "recipient": addresses["recipient"],
        "amount": "1000",
        "denom": "uzig",
    }
    assert result.memo is None
    assert result.fee is None


def test_delegate(make_any: Callable[..., str], addresses: dict[str, str]) -> None:
    msg = proto.MsgDelegate(
        delegator_address=addresses["sender"],
        validator_address=addresses["validator"],
        amount=proto.Coin(denom="uzig", amount="250"),
    )
    decoded = decode_wire(make_any("/cosmos.staking.v1beta1.MsgDelegate", msg)).message

    assert decoded.kind is MessageKind.DELEGATE
    assert decoded.type == "Delegate"
    assert decoded.sender == addresses["sender"]
    assert decoded.validators == (addresses["validator"],)
    assert decoded.counterparty == addresses["validator"]
    assert decoded.amount_text == "250uzig"


def test_undelegate(make_any: Callable[..., str], addresses: dict[str, str]) -> None:
    msg = proto.MsgUndelegate(
        delegator_address=addresses["sender"],
        validator_address=addresses["validator"],
        amount=proto.Coin(denom="uzig", amount="7"),
    )
    decoded = decode_wire(make_any("/cosmos.staking.v1beta1.MsgUndelegate", msg)).message
    assert decoded.kind is MessageKind.UNDELEGATE
    assert decoded.type == "Undelegate"
    assert decoded.amount == "7"


def test_redelegate_keeps_source_and_destination(make_any: Callable[..., str], addresses: dict[str, str]) -> None:
    dst = "zigvaloper126kn23lxurns83w2n59a7e0v2wprjdrrfv4xw8"
    msg = proto.MsgBeginRedelegate(
        delegator_address=addresses["sender"],
        validator_src_address=addresses["validator"],
        validator_dst_address=dst,
        amount=proto.Coin(denom="uzig", amount="99"),
    )
    decoded = decode_wire(make_any("/cosmos.staking.v1beta1.MsgBeginRedelegate", msg)).message

    assert decoded.kind is MessageKind.REDELEGATE
    assert decoded.validators == (addresses["validator"], dst)
    assert decoded.counterparty == dst


def test_vote(make_any: Callable[..., str], addresses: dict[str, str]) -> None:
    msg = proto.MsgVote(proposal_id=7, voter=addresses["sender"], option=1)
    decoded = decode_wire(make_any("/cosmos.gov.v1beta1.MsgVote", msg)).message
    assert decoded.to_dict() == {"type": "Vote", "sender": addresses["sender"]}


def test_withdraw_reward(make_any: Callable[..., str], addresses: dict[str, str]) -> None:
    msg = proto.MsgWithdrawDelegatorReward(
        delegator_address=addresses["sender"], validator_address=addresses["validator"]
    )
    decoded = decode_wire(make_any("/cosmos.distribution.v1beta1.MsgWithdrawDelegatorReward", msg)).message
    assert decoded.type == "Claim Rewards"
    assert decoded.sender == addresses["sender"]
    assert decoded.validators == (addresses["validator"],)


def test_pubkey_is_rendered_as_hex(make_any: Callable[..., str]) -> None:
    key = b"\x02" + b"\x11" * 32
    decoded = decode_wire(make_any("/cosmos.crypto.secp256k1.PubKey", proto.PubKey(key=key))).message
    assert decoded.kind is MessageKind.PUBKEY
    assert decoded.type == "Public Key"
    assert decoded.public_key == key.hex()


def test_unknown_type_url_keeps_only_the_label() -> None:
    env = WireEnvelope(type_url="/zigchain.factory.MsgCreateDenom", value=b"\x0a\x03abc")
    decoded = decode_envelope(env)
    assert decoded.kind is MessageKind.UNKNOWN
    assert decoded.to_dict() == {"type": "CreateDenom"}


def test_known_type_url_with_broken_payload_keeps_type_url() -> None:
    # field 1 (from_address) holds invalid UTF-8
    env = WireEnvelope(type_url="/cosmos.bank.v1beta1.MsgSend", value=b"\x0a\x02\xff\xfe")
    decoded = decode_envelope(env)
    assert decoded.kind is MessageKind.UNKNOWN
    assert decoded.type == "Send"
    assert decoded.type_url == "/cosmos.bank.v1beta1.MsgSend"
    assert not decoded.has_fields


def test_tx_raw_unwraps_first_message_memo_and_fee(send_tx_raw: str, addresses: dict[str, str]) -> None:
    result = decode_wire(send_tx_raw)
    assert result.message.type == "Send"
    assert result.message.sender == addresses["sender"]
    assert result.memo == "rent"
    assert result.fee == "500uzig"


def test_parse_envelope_prefers_bare_any(send_any: str) -> None:
    env = parse_envelope(base64.b64decode(send_any))
    assert env.type_url == "/cosmos.bank.v1beta1.MsgSend"
    assert env.memo is None


@pytest.mark.parametrize("text", ["", "   ", "not base64!!", "@@@@"])
def test_base64_stage_failure(text: str) -> None:
    with pytest.raises(DecodeFailure) as exc:
        decode_wire(text)
    assert exc.value.stage == "base64"


def test_base64_tolerates_whitespace_and_missing_padding() -> None:
    assert decode_base64("aGVs\nbG8") == b"hello"


@pytest.mark.parametrize("raw", [b"\x00\x01garbage", b"plain text, not protobuf"])
def test_envelope_stage_failure(raw: bytes) -> None:
    with pytest.raises(DecodeFailure) as exc:
        decode_wire(base64.b64encode(raw).decode())
    assert exc.value.stage == "envelope"


def test_decode_failure_carries_a_snippet() -> None:
    with pytest.raises(DecodeFailure) as exc:
        decode_base64("!" * 500)
    assert exc.value.snippet.endswith("...")
    assert len(exc.value.snippet) < 100
