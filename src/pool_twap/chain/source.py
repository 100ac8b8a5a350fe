"""ReserveSource — the read-only view of chain state a TWAP run needs."""

from __future__ import annotations

from typing import Protocol

from pool_twap.chain import abi
from pool_twap.chain.rpc import BlockTag, JsonRpcClient
from pool_twap.errors import ContractReadError, ReserveUnavailable
from pool_twap.logging import get_logger
from pool_twap.models import BlockRef, PoolIdentity

log = get_logger(__name__)

UNKNOWN_SYMBOL = "UNKNOWN"


class ReserveSource(Protocol):
    """Reads pool metadata, reserves and block headers."""

    async def get_pool_tokens(self, pool: str) -> tuple[str, str]: ...

    async def get_decimals(self, token: str) -> int: ...

    async def get_symbol(self, token: str) -> str: ...

    async def get_reserves(self, pool: str, height: int) -> tuple[int, int]: ...

    async def get_block(self, block: BlockTag = "latest") -> BlockRef: ...


async def fetch_pool_identity(source: ReserveSource, pool: str) -> PoolIdentity:
    """Read token addresses, decimals and symbols for *pool*.

    Symbols are cosmetic: a token whose ``symbol()`` reverts is reported as
    ``UNKNOWN``.  Every other failure propagates.
    """
    token0, token1 = await source.get_pool_tokens(pool)
    decimals0 = await source.get_decimals(token0)
    decimals1 = await source.get_decimals(token1)

    symbols = []
    for token in (token0, token1):
        try:
            symbols.append(await source.get_symbol(token))
        except ContractReadError:
            log.warning("symbol_unavailable", token=token)
            symbols.append(UNKNOWN_SYMBOL)

    return PoolIdentity(
        pool=pool,
        token0=token0,
        token1=token1,
        decimals0=decimals0,
        decimals1=decimals1,
        symbol0=symbols[0] or UNKNOWN_SYMBOL,
        symbol1=symbols[1] or UNKNOWN_SYMBOL,
    )


class RpcReserveSource:
    """ReserveSource backed by ``eth_call`` / ``eth_getBlockByNumber``."""

    def __init__(self, client: JsonRpcClient):
        self.client = client

    async def _call(self, to: str, selector: str, block: BlockTag = "latest") -> str:
        data = await self.client.eth_call(to, selector, block)
        if data in ("0x", ""):
            # No code at the address (or not yet deployed at that block)
            raise ContractReadError("empty return data, is this a contract?", address=to)
        return data

    async def get_pool_tokens(self, pool: str) -> tuple[str, str]:
        token0 = abi.decode_address(await self._call(pool, abi.TOKEN0_SELECTOR), address=pool)
        token1 = abi.decode_address(await self._call(pool, abi.TOKEN1_SELECTOR), address=pool)
        return token0, token1

    async def get_decimals(self, token: str) -> int:
        value = abi.decode_uint(await self._call(token, abi.DECIMALS_SELECTOR), address=token)
        if value > 255:
            raise ContractReadError(f"decimals() returned {value}", address=token)
        return value

    async def get_symbol(self, token: str) -> str:
        return abi.decode_string(await self._call(token, abi.SYMBOL_SELECTOR), address=token)

    async def get_reserves(self, pool: str, height: int) -> tuple[int, int]:
        try:
            data = await self._call(pool, abi.GET_RESERVES_SELECTOR, height)
            return abi.decode_reserves(data, address=pool)
        except ContractReadError as exc:
            raise ReserveUnavailable(height, address=pool, reason=exc.detail) from exc

    async def get_block(self, block: BlockTag = "latest") -> BlockRef:
        header = await self.client.get_block(block)
        try:
            return BlockRef(
                height=int(header["number"], 16),
                timestamp=int(header["timestamp"], 16),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ContractReadError(f"malformed header for block {block}") from exc
