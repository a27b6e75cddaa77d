import base64
from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from zigscan.core.config import ExplorerConfig
from zigscan.core.models import RetrievalTier
from zigscan.decoding import proto

SENDER = "zig126kn23lxurns83w2n59a7e0v2wprjdrrfv4xw8"
RECIPIENT = "zig1sa5rgkrq3c9vxy8m9lh8eh5hnudjmkglnhazjq"
VALIDATOR = "zigvaloper1sa5rgkrq3c9vxy8m9lh8eh5hnudjmkglnhazjq"


def any_b64(type_url: str, msg: proto.betterproto.Message | bytes) -> str:
    value = msg if isinstance(msg, bytes) else bytes(msg)
    return base64.b64encode(bytes(proto.Any(type_url=type_url, value=value))).decode()


@pytest.fixture
def addresses() -> dict[str, str]:
    return {"sender": SENDER, "recipient": RECIPIENT, "validator": VALIDATOR}


@pytest.fixture
def make_any() -> Callable[[str, proto.betterproto.Message | bytes], str]:
    return any_b64


@pytest.fixture
def send_any() -> str:
    msg = proto.MsgSend(from_address=SENDER, to_address=RECIPIENT, amount=[proto.Coin(denom="uzig", amount="1000")])
    return any_b64("/cosmos.bank.v1beta1.MsgSend", msg)


@pytest.fixture
def send_tx_raw() -> str:
    send = proto.MsgSend(from_address=SENDER, to_address=RECIPIENT, amount=[proto.Coin(denom="uzig", amount="1000")])
    body = proto.TxBody(
        messages=[proto.Any(type_url="/cosmos.bank.v1beta1.MsgSend", value=bytes(send))],
        memo="rent",
    )
    auth = proto.AuthInfo(fee=proto.Fee(amount=[proto.Coin(denom="uzig", amount="500")], gas_limit=200_000))
    tx = proto.TxRaw(body_bytes=bytes(body), auth_info_bytes=bytes(auth), signatures=[b"\x01" * 64])
    return base64.b64encode(bytes(tx)).decode()


@pytest.fixture
def config() -> ExplorerConfig:
    return ExplorerConfig(
        indexed_api_url="https://indexed.test/api",
        chain_rest_url="https://rest.test",
        rpc_proxy_url="https://rpc.test",
        timeout_s=1.0,
        scan_timeout_s=2.0,
        max_blocks_to_scan=5,
        facet_fetch_limit=100,
    )


@pytest.fixture
def mock_indexed():
    client = AsyncMock()
    client.tier = RetrievalTier.PRIMARY_INDEXED_API
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def mock_chain_rest():
    client = AsyncMock()
    client.tier = RetrievalTier.CHAIN_REST_API
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def mock_node_rpc():
    client = AsyncMock()
    client.tier = RetrievalTier.NODE_RPC_PROXY
    client.prefix = "zig"
    client.aclose = AsyncMock()
    return client
