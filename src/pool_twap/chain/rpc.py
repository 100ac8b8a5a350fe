"""Async Ethereum JSON-RPC client over httpx."""

from __future__ import annotations

import itertools
from typing import Any

import httpx

from pool_twap.errors import ContractReadError, TransportError
from pool_twap.logging import get_logger

log = get_logger(__name__)

BlockTag = int | str

_REVERT_MARKERS = ("revert", "execution reverted", "invalid opcode")

# Non-archive nodes answer historical reads with these once the state is pruned
_PRUNED_MARKERS = ("missing trie node", "state is not available", "header not found", "pruned")


def block_param(block: BlockTag) -> str:
    """Encode a height as a hex quantity; pass tags like ``latest`` through."""
    if isinstance(block, int):
        if block < 0:
            raise ValueError(f"negative block height: {block}")
        return hex(block)
    return block


class JsonRpcClient:
    """Minimal async JSON-RPC 2.0 client for an EVM node."""

    def __init__(
        self,
        url: str = "https://mainnet.base.org",
        timeout_s: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout_s = timeout_s
        self._transport = transport
        self._http: httpx.AsyncClient | None = None
        self._ids = itertools.count(1)

    async def _get_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport)
        return self._http

    async def close(self) -> None:
        if self._http and not self._http.is_closed:
            await self._http.aclose()

    async def __aenter__(self) -> JsonRpcClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def call(self, method: str, params: list[Any]) -> Any:
        """POST one request and return its ``result``.

        Transport problems, HTTP 429/5xx and node-side JSON-RPC errors raise
        ``TransportError``.  Execution reverts and pruned historical state
        raise ``ContractReadError``, which is never retried.
        """
        http = await self._get_http()
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            resp = await http.post(self.url, json=payload)
        except httpx.TimeoutException as exc:
            raise TransportError(f"{method} timed out after {self.timeout_s}s") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} failed: {exc}") from exc

        if resp.status_code >= 400:
            raise TransportError(f"{method} returned HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise TransportError(f"{method} returned a non-JSON body") from exc

        error = body.get("error") if isinstance(body, dict) else None
        if error:
            message = str(error.get("message", error)) if isinstance(error, dict) else str(error)
            log.debug("rpc_error", method=method, error=message)
            if any(marker in message.lower() for marker in _REVERT_MARKERS):
                raise ContractReadError(f"{method} reverted: {message}")
            if any(marker in message.lower() for marker in _PRUNED_MARKERS):
                raise ContractReadError(f"{method} state unavailable (archive node required): {message}")
            raise TransportError(f"{method} error: {message}")

        if not isinstance(body, dict) or "result" not in body:
            raise TransportError(f"{method} response has no result")
        return body["result"]

    async def eth_call(self, to: str, data: str, block: BlockTag = "latest") -> str:
        try:
            result = await self.call("eth_call", [{"to": to, "data": data}, block_param(block)])
        except ContractReadError as exc:
            raise ContractReadError(str(exc), address=to) from exc
        if not isinstance(result, str):
            raise ContractReadError("eth_call returned a non-hex result", address=to)
        return result

    async def get_block(self, block: BlockTag = "latest") -> dict:
        """Fetch a block header (without transactions)."""
        result = await self.call("eth_getBlockByNumber", [block_param(block), False])
        if result is None:
            raise ContractReadError(f"block {block} not found")
        return result
