"""PriceSampler — read reserves at a height and turn them into a spot price."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from decimal import Decimal, localcontext

from pool_twap.chain.source import ReserveSource
from pool_twap.errors import InvariantViolation, ZeroReserve
from pool_twap.logging import get_logger
from pool_twap.models import PoolIdentity, PriceSample, ReservePair
from pool_twap.twap.retry import RetryPolicy

log = get_logger(__name__)

# uint256 has 78 decimal digits
PRICE_PRECISION = 80

PROGRESS_EVERY = 10


def spot_price(reserve0: int, reserve1: int, decimals0: int, decimals1: int) -> Decimal:
    """token1 per token0: ``(reserve1 / 10**decimals1) / (reserve0 / 10**decimals0)``."""
    if reserve0 == 0:
        raise ZeroReserve()
    with localcontext() as ctx:
        ctx.prec = PRICE_PRECISION
        amount0 = Decimal(reserve0).scaleb(-decimals0)
        amount1 = Decimal(reserve1).scaleb(-decimals1)
        return +(amount1 / amount0)


class PriceSampler:
    """Fetch one ``PriceSample`` per height, optionally many at once.

    Each network read goes through the retry policy; a failure that survives
    it aborts the whole batch.
    """

    def __init__(
        self,
        source: ReserveSource,
        retry: RetryPolicy | None = None,
        concurrency: int = 4,
    ):
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.source = source
        self.retry = retry or RetryPolicy()
        self.concurrency = concurrency

    async def read_reserves(self, height: int, pool: PoolIdentity) -> ReservePair:
        block = await self.retry.run(
            lambda: self.source.get_block(height), what="block header", height=height,
        )
        reserve0, reserve1 = await self.retry.run(
            lambda: self.source.get_reserves(pool.pool, height), what="reserves", height=height,
        )
        return ReservePair(reserve0=reserve0, reserve1=reserve1, block=block)

    async def sample(self, height: int, pool: PoolIdentity) -> PriceSample:
        reserves = await self.read_reserves(height, pool)
        try:
            price = spot_price(reserves.reserve0, reserves.reserve1, pool.decimals0, pool.decimals1)
        except ZeroReserve:
            raise ZeroReserve(height) from None
        return PriceSample(price=price, block=reserves.block)

    async def sample_all(self, heights: Sequence[int], pool: PoolIdentity) -> list[PriceSample]:
        """Sample every height with at most ``concurrency`` fetches in flight.

        Results come back in the order of *heights*, whatever order the
        fetches complete in.  The first error cancels the rest.
        """
        results: list[PriceSample | None] = [None] * len(heights)
        semaphore = asyncio.Semaphore(self.concurrency)
        done = 0

        async def fetch(index: int, height: int) -> None:
            nonlocal done
            async with semaphore:
                results[index] = await self.sample(height, pool)
            done += 1
            if done % PROGRESS_EVERY == 0 or done == len(heights):
                log.info("samples_collected", done=done, total=len(heights))

        tasks = [asyncio.create_task(fetch(i, h)) for i, h in enumerate(heights)]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        ordered: list[PriceSample] = []
        for height, sample in zip(heights, results):
            if sample is None:
                raise InvariantViolation(f"no sample recorded for block {height}")
            ordered.append(sample)
        return ordered
