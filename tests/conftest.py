"""Shared test fixtures — an in-memory chain standing in for the RPC node."""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Callable

import pytest
from eth_utils import to_checksum_address

from pool_twap.config import AppConfig
from pool_twap.errors import ContractReadError, ReserveUnavailable, TransportError
from pool_twap.models import BlockRef, PoolIdentity

POOL = to_checksum_address("0x" + "ab" * 20)
TOKEN0 = "0x" + "01" * 20
TOKEN1 = "0x" + "02" * 20

# 2000 WETH against 4,000,000 USDC -> 2000 USDC per WETH
DEFAULT_RESERVES = (2000 * 10**18, 4_000_000 * 10**6)


class FakeChain:
    """ReserveSource over a list of block timestamps.

    *reserves* maps a height to ``(reserve0, reserve1)``; heights below
    *deployed_at* have no pool.  ``fail(...)`` queues transient errors.
    Reserve reads cancelled while sleeping in *delays* land in ``cancelled``.
    """

    def __init__(
        self,
        timestamps: list[int],
        reserves: Callable[[int], tuple[int, int]] | None = None,
        decimals: tuple[int, int] = (18, 6),
        symbols: tuple[str | None, str | None] = ("WETH", "USDC"),
        deployed_at: int = 0,
        delays: dict[int, float] | None = None,
    ) -> None:
        self.timestamps = timestamps
        self.reserves = reserves or (lambda height: DEFAULT_RESERVES)
        self.decimals = {TOKEN0: decimals[0], TOKEN1: decimals[1]}
        self.symbols = {TOKEN0: symbols[0], TOKEN1: symbols[1]}
        self.deployed_at = deployed_at
        self.delays = delays or {}
        self.calls: Counter = Counter()
        self.block_lookups: list[int] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.cancelled: list[int] = []
        self._failures: dict[tuple[str, int | str], list[Exception]] = {}

    @property
    def head(self) -> BlockRef:
        return BlockRef(height=len(self.timestamps) - 1, timestamp=self.timestamps[-1])

    def fail(self, method: str, key: int | str, times: int = 1, exc: Exception | None = None) -> None:
        err = exc or TransportError(f"simulated {method} failure")
        self._failures.setdefault((method, key), []).extend([err] * times)

    def _maybe_fail(self, method: str, key: int | str) -> None:
        queue = self._failures.get((method, key))
        if queue:
            raise queue.pop(0)

    async def get_pool_tokens(self, pool: str) -> tuple[str, str]:
        self.calls["get_pool_tokens"] += 1
        self._maybe_fail("get_pool_tokens", pool)
        if pool != POOL:
            raise ContractReadError("empty return data, is this a contract?", address=pool)
        return TOKEN0, TOKEN1

    async def get_decimals(self, token: str) -> int:
        self.calls["get_decimals"] += 1
        return self.decimals[token]

    async def get_symbol(self, token: str) -> str:
        self.calls["get_symbol"] += 1
        symbol = self.symbols[token]
        if symbol is None:
            raise ContractReadError("symbol() reverted", address=token)
        return symbol

    async def get_reserves(self, pool: str, height: int) -> tuple[int, int]:
        self.calls["get_reserves"] += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            try:
                await asyncio.sleep(self.delays.get(height, 0))
            except asyncio.CancelledError:
                self.cancelled.append(height)
                raise
            self._maybe_fail("get_reserves", height)
            if height < self.deployed_at:
                raise ReserveUnavailable(height, address=pool, reason="execution reverted")
            return self.reserves(height)
        finally:
            self.in_flight -= 1

    async def get_block(self, block: int | str = "latest") -> BlockRef:
        self.calls["get_block"] += 1
        height = len(self.timestamps) - 1 if block == "latest" else block
        self._maybe_fail("get_block", block)
        if not 0 <= height < len(self.timestamps):
            raise ContractReadError(f"block {block} not found")
        self.block_lookups.append(height)
        return BlockRef(height=height, timestamp=self.timestamps[height])


@pytest.fixture
def make_chain():
    return FakeChain


@pytest.fixture
def pool_identity() -> PoolIdentity:
    return PoolIdentity(
        pool=POOL,
        token0=TOKEN0,
        token1=TOKEN1,
        decimals0=18,
        decimals1=6,
        symbol0="WETH",
        symbol1="USDC",
    )


@pytest.fixture
def fast_config() -> AppConfig:
    """Defaults with zero retry backoff and a 1-second block time."""
    return AppConfig.model_validate({
        "chain": {"block_time_s": 1.0},
        "retry": {"attempts": 3, "backoff_s": 0.0},
        "sampling": {"days": 1, "samples": 5, "concurrency": 2},
    })
