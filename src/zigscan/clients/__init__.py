"""Async httpx clients for the three upstream tiers and the RPC proxy."""

from zigscan.clients.chain_rest import ChainRestClient
from zigscan.clients.indexed_api import IndexedApiClient
from zigscan.clients.node_rpc import NodeRpcClient
from zigscan.clients.proxy import RpcProxy

__all__ = [
    "ChainRestClient",
    "IndexedApiClient",
    "NodeRpcClient",
    "RpcProxy",
]
