"""Chain access — JSON-RPC transport, ABI decoding, reserve source."""

from pool_twap.chain.rpc import JsonRpcClient
from pool_twap.chain.source import ReserveSource, RpcReserveSource, fetch_pool_identity

__all__ = ["JsonRpcClient", "ReserveSource", "RpcReserveSource", "fetch_pool_identity"]
