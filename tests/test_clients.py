from collections.abc import Callable
from typing import Any

import httpx
import pytest

from zigscan.clients.base import UpstreamClient, build_http_client
from zigscan.clients.chain_rest import ChainRestClient
from zigscan.clients.indexed_api import IndexedApiClient
from zigscan.clients.node_rpc import NodeRpcClient
from zigscan.clients.proxy import RpcProxy, forwarded_params
from zigscan.core.errors import (
    UpstreamConnectionError,
    UpstreamNotFound,
    UpstreamPayloadError,
    UpstreamStatusError,
    UpstreamTimeout,
)
from zigscan.core.interfaces import IAccountHistorySource, IFacetSearchSource, ITransactionSource
from zigscan.core.models import Facet, RetrievalTier

HASH = "AB" * 32

Handler = Callable[[httpx.Request], httpx.Response]


def make_client(cls: type[UpstreamClient], url: str, handler: Handler, **kwargs: Any) -> Any:
    http = build_http_client(url, transport=httpx.MockTransport(handler))
    return cls(url, client=http, **kwargs)


def make_proxy(handler: Handler) -> RpcProxy:
    http = build_http_client("https://rpc.test", transport=httpx.MockTransport(handler))
    return RpcProxy("https://rpc.test", client=http)


def rest_tx(addresses: dict[str, str], *, txhash: str = HASH, height: str = "10") -> dict[str, Any]:
    return {
        "txhash": txhash,
        "height": height,
        "code": 0,
        "gas_used": "61000",
        "gas_wanted": "200000",
        "timestamp": "2025-03-01T10:00:00Z",
        "tx": {
            "body": {
                "messages": [
                    {
                        "@type": "/cosmos.bank.v1beta1.MsgSend",
                        "from_address": addresses["sender"],
                        "to_address": addresses["recipient"],
                        "amount": [{"denom": "uzig", "amount": "1000"}],
                    }
                ],
                "memo": "hi",
            },
            "auth_info": {"fee": {"amount": [{"denom": "uzig", "amount": "500"}], "gas_limit": "200000"}},
        },
        "events": [],
    }


# ---- error mapping ----


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("handler", "error"),
    [
        (lambda r: httpx.Response(503), UpstreamStatusError),
        (lambda r: httpx.Response(404), UpstreamNotFound),
        (lambda r: httpx.Response(200, content=b"<html>"), UpstreamPayloadError),
    ],
)
async def test_get_json_error_mapping(handler: Handler, error: type[Exception]) -> None:
    client = make_client(IndexedApiClient, "https://indexed.test/api", handler)
    with pytest.raises(error) as exc:
        await client.get_json("/chain/info")
    assert exc.value.tier is RetrievalTier.PRIMARY_INDEXED_API
    await client.aclose()


@pytest.mark.asyncio
async def test_transport_errors_are_mapped() -> None:
    def timeout(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    def refused(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(UpstreamTimeout):
        await make_client(ChainRestClient, "https://rest.test", timeout).ping()
    with pytest.raises(UpstreamConnectionError):
        await make_client(ChainRestClient, "https://rest.test", refused).ping()


@pytest.mark.asyncio
async def test_unexpected_payload_shape_is_a_payload_error() -> None:
    client = make_client(ChainRestClient, "https://rest.test", lambda r: httpx.Response(200, json={"oops": 1}))
    with pytest.raises(UpstreamPayloadError):
        await client.get_transaction(HASH)


# ---- indexed API ----


@pytest.mark.asyncio
async def test_indexed_get_transaction(addresses: dict[str, str]) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "tx_hash": "0x" + HASH.lower(),
                "block_id": "55",
                "created_at": "2025-03-01T10:00:00Z",
                "from_address": addresses["sender"],
                "to_address": addresses["recipient"],
                "amount": "10uzig",
                "type": "Send",
                "status": "success",
                "fee": "1uzig",
            },
        )

    client = make_client(IndexedApiClient, "https://indexed.test/api", handler)
    record = await client.get_transaction(HASH)

    assert seen[0].url.path == f"/api/transactions/{HASH}"
    assert record.hash == HASH
    assert record.height == 55
    assert record.type == "Send"
    assert (record.sender_summary, record.recipient_summary, record.amount_summary) == (
        addresses["sender"],
        addresses["recipient"],
        "10uzig",
    )
    assert record.fee == "1uzig"
    assert record.source is RetrievalTier.PRIMARY_INDEXED_API


@pytest.mark.asyncio
async def test_indexed_account_history_estimates_missing_total(addresses: dict[str, str]) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        rows = [{"hash": f"{i:064X}", "height": 10 - i, "type": "Send"} for i in range(2)]
        return httpx.Response(200, json=rows)

    client = make_client(IndexedApiClient, "https://indexed.test/api", handler)
    page = await client.get_account_transactions(addresses["sender"], page=1, limit=2)

    assert seen[0].url.path == f"/api/accounts/{addresses['sender']}/transactions"
    assert seen[0].url.params["page"] == "1"
    assert seen[0].url.params["limit"] == "2"
    assert len(page.records) == 2
    assert page.pagination.total == 3
    assert page.pagination.has_more


@pytest.mark.asyncio
async def test_indexed_account_history_uses_reported_total(addresses: dict[str, str]) -> None:
    payload = {"data": [{"hash": HASH, "height": 1}], "pagination": {"total": 21}}
    client = make_client(IndexedApiClient, "https://indexed.test/api", lambda r: httpx.Response(200, json=payload))
    page = await client.get_account_transactions(addresses["sender"], page=2, limit=10)
    assert (page.pagination.total, page.pagination.pages, page.pagination.has_more) == (21, 3, True)


@pytest.mark.asyncio
async def test_indexed_account_history_truncates_oversized_pages(addresses: dict[str, str]) -> None:
    rows = [{"hash": f"{i:064X}", "height": 100 - i} for i in range(25)]
    client = make_client(IndexedApiClient, "https://indexed.test/api", lambda r: httpx.Response(200, json=rows))

    page = await client.get_account_transactions(addresses["sender"], page=1, limit=10)

    assert [r.height for r in page.records] == list(range(100, 90, -1))
    assert page.pagination.page_size == 10
    assert page.pagination.has_more


@pytest.mark.asyncio
async def test_indexed_block_transactions_fill_missing_height() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        txs = [{"hash": HASH, "type": "Send"}, {"hash": "EE" * 32, "height": 42}]
        return httpx.Response(200, json={"height": 42, "transactions": txs})

    records = await make_client(IndexedApiClient, "https://indexed.test/api", handler).block_transactions(42)

    assert seen[0].url.path == "/api/blocks/42"
    assert [r.hash for r in records] == [HASH, "EE" * 32]
    assert [r.height for r in records] == [42, 42]


# ---- chain REST ----


@pytest.mark.asyncio
async def test_chain_rest_facet_query(addresses: dict[str, str]) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"tx_responses": [rest_tx(addresses)], "pagination": {"total": "1"}})

    client = make_client(ChainRestClient, "https://rest.test", handler)
    result = await client.search_facet(Facet.SENT, addresses["sender"], limit=20)

    params = seen[0].url.params
    assert seen[0].url.path == "/cosmos/tx/v1beta1/txs"
    assert params["query"] == f"transfer.sender='{addresses['sender']}'"
    assert params["pagination.limit"] == "20"
    assert params["pagination.offset"] == "0"
    assert params["order_by"] == "ORDER_BY_DESC"
    assert result.total == 1
    record = result.records[0]
    assert record.type == "Send"
    assert record.fee == "500uzig"
    assert record.memo == "hi"
    assert record.gas_used == 61000
    assert record.amount_summary == "1000uzig"
    assert record.source is RetrievalTier.CHAIN_REST_API


@pytest.mark.asyncio
async def test_chain_rest_get_transaction(addresses: dict[str, str]) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == f"/cosmos/tx/v1beta1/txs/{HASH}"
        return httpx.Response(200, json={"tx_response": rest_tx(addresses)})

    record = await make_client(ChainRestClient, "https://rest.test", handler).get_transaction(HASH)
    assert record.hash == HASH
    assert record.status == "success"
    assert record.height == 10


@pytest.mark.asyncio
async def test_chain_rest_latest_is_sorted_newest_first(addresses: dict[str, str]) -> None:
    rows = [rest_tx(addresses, txhash=f"{i:064X}", height=str(h)) for i, h in enumerate((5, 9, 7))]
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"tx_responses": rows})

    records = await make_client(ChainRestClient, "https://rest.test", handler).latest_transactions(2)

    assert [r.height for r in records] == [9, 7]
    assert seen[0].url.params["query"] == "tx.height>0"
    assert seen[0].url.params["order_by"] == "ORDER_BY_DESC"


@pytest.mark.asyncio
async def test_chain_rest_block_transactions(addresses: dict[str, str]) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        rows = [rest_tx(addresses, txhash=f"{i:064X}", height="42") for i in range(2)]
        return httpx.Response(200, json={"tx_responses": rows})

    records = await make_client(ChainRestClient, "https://rest.test", handler).block_transactions(42)

    params = seen[0].url.params
    assert params["query"] == "tx.height=42"
    assert params["order_by"] == "ORDER_BY_ASC"
    assert params["pagination.limit"] == "100"
    assert [r.hash for r in records] == [f"{i:064X}" for i in range(2)]
    assert {r.height for r in records} == {42}


# ---- node RPC ----


@pytest.mark.asyncio
async def test_node_rpc_get_transaction_adds_0x(send_any: str) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/tx":
            result = {
                "hash": HASH,
                "height": "9",
                "tx_result": {"code": 0, "gas_used": "10", "gas_wanted": "20", "events": []},
                "tx": send_any,
            }
        else:
            result = {"block": {"header": {"height": "9", "time": "2025-03-01T10:00:00Z"}, "data": {"txs": []}}}
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": -1, "result": result})

    client = make_client(NodeRpcClient, "https://rpc.test", handler)
    record = await client.get_transaction(HASH.lower())

    assert seen[0].url.params["hash"] == "0x" + HASH
    assert record.hash == HASH
    assert record.time == "2025-03-01T10:00:00Z"
    assert record.type == "Send"
    assert record.gas_used == 10


@pytest.mark.asyncio
async def test_node_rpc_not_found_error() -> None:
    body = {"jsonrpc": "2.0", "id": -1, "error": {"code": -32603, "message": "Internal error", "data": "tx not found"}}
    client = make_client(NodeRpcClient, "https://rpc.test", lambda r: httpx.Response(200, json=body))
    with pytest.raises(UpstreamNotFound):
        await client.get_tx(HASH)


@pytest.mark.asyncio
async def test_node_rpc_other_errors_are_payload_errors() -> None:
    body = {"jsonrpc": "2.0", "id": -1, "error": {"code": -32600, "message": "Invalid request"}}
    client = make_client(NodeRpcClient, "https://rpc.test", lambda r: httpx.Response(200, json=body))
    with pytest.raises(UpstreamPayloadError):
        await client.latest_height()


# ---- proxy ----


def test_forwarded_params() -> None:
    assert forwarded_params({"path": "/tx", "hash": HASH.lower()}) == {"hash": "0x" + HASH.lower()}
    assert forwarded_params({"path": "/tx", "hash": "0x" + HASH}) == {"hash": "0x" + HASH}
    assert forwarded_params({"path": "/block", "height": "5"}) == {"height": "5"}


@pytest.mark.asyncio
async def test_proxy_forwards_allowed_paths() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"result": {"ok": True}})

    proxy = make_proxy(handler)
    resp = await proxy.forward({"path": "tx", "hash": HASH})

    assert resp.status_code == 200
    assert resp.json() == {"result": {"ok": True}}
    assert seen[0].url.path == "/tx"
    assert seen[0].url.params["hash"] == "0x" + HASH
    assert "path" not in seen[0].url.params
    await proxy.aclose()


@pytest.mark.asyncio
async def test_proxy_rejects_other_paths() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("must not be called")

    proxy = make_proxy(handler)
    resp = await proxy.forward({"path": "/broadcast_tx_sync"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Unsupported path"


@pytest.mark.asyncio
async def test_proxy_maps_transport_errors_to_502() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    proxy = make_proxy(handler)
    resp = await proxy.forward({"path": "/status"})
    assert resp.status_code == 502
    assert resp.json() == {"error": "Proxy error", "detail": "connection refused"}


@pytest.mark.asyncio
async def test_proxy_passes_upstream_status_through() -> None:
    proxy = make_proxy(lambda r: httpx.Response(500, content=b"{}"))
    resp = await proxy.forward({"path": "/block", "height": "1"})
    assert resp.status_code == 500


# ---- protocols ----


def test_clients_satisfy_the_source_protocols() -> None:
    indexed = IndexedApiClient("https://indexed.test/api")
    rest = ChainRestClient("https://rest.test")
    rpc = NodeRpcClient("https://rpc.test")

    for client in (indexed, rest, rpc):
        assert isinstance(client, ITransactionSource)
    assert isinstance(indexed, IAccountHistorySource)
    assert isinstance(rest, IFacetSearchSource)
    assert not isinstance(rpc, IFacetSearchSource)
