"""TWAP pipeline — pool identity, end block, schedule, samples, aggregate."""

from __future__ import annotations

import asyncio
from datetime import date, datetime, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from pool_twap.chain.source import ReserveSource, fetch_pool_identity
from pool_twap.config.schema import AppConfig
from pool_twap.logging import get_logger
from pool_twap.models import BlockRef, TwapReport
from pool_twap.twap.aggregator import aggregate
from pool_twap.twap.resolver import BlockTimeResolver
from pool_twap.twap.retry import RetryPolicy
from pool_twap.twap.sampler import PriceSampler
from pool_twap.twap.schedule import schedule, span_in_blocks

log = get_logger(__name__)


def end_date_to_timestamp(date_str: str, tz_name: str = "America/Chicago") -> int:
    """Epoch seconds of local midnight on *date_str* (``YYYY-MM-DD``) in *tz_name*."""
    try:
        day = date.fromisoformat(date_str)
    except ValueError:
        raise ValueError(f"invalid date {date_str!r}, expected YYYY-MM-DD") from None
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"unknown timezone {tz_name!r}") from None
    return int(datetime.combine(day, time(0, 0), tzinfo=tz).timestamp())


def retry_policy(config: AppConfig) -> RetryPolicy:
    return RetryPolicy(
        attempts=config.retry.attempts,
        backoff_s=config.retry.backoff_s,
        max_backoff_s=config.retry.max_backoff_s,
    )


async def resolve_end_block(
    source: ReserveSource,
    head: BlockRef,
    end_timestamp: int | None,
    retry: RetryPolicy,
) -> BlockRef:
    """The chain head, or the last block at or before *end_timestamp*."""
    if end_timestamp is None:
        return head

    async def fetch_timestamp(height: int) -> int:
        return (await source.get_block(height)).timestamp

    resolver = BlockTimeResolver(fetch_timestamp, retry=retry)
    return await resolver.resolve(end_timestamp, head)


async def compute_twap(
    source: ReserveSource,
    pool: str,
    config: AppConfig,
    *,
    end_timestamp: int | None = None,
) -> TwapReport:
    """Run the full pipeline for one pool.

    Window length, sample count and concurrency come from
    ``config.sampling``.  Nothing is returned unless every sample succeeded.
    """
    retry = retry_policy(config)
    days = config.sampling.days
    structlog.contextvars.bind_contextvars(pool=pool)
    try:
        identity = await retry.run(lambda: fetch_pool_identity(source, pool), what="pool identity")
        log.info(
            "pool_identity",
            token0=identity.token0,
            token1=identity.token1,
            symbol0=identity.symbol0,
            symbol1=identity.symbol1,
        )

        head = await retry.run(lambda: source.get_block("latest"), what="chain head")
        end = await resolve_end_block(source, head, end_timestamp, retry)

        span = span_in_blocks(days, config.chain.block_time_s)
        heights = schedule(end.height, span, config.sampling.samples)
        log.info(
            "sampling_scheduled",
            start=heights[0],
            end=heights[-1],
            samples=len(heights),
            concurrency=config.sampling.concurrency,
        )

        sampler = PriceSampler(source, retry=retry, concurrency=config.sampling.concurrency)
        samples = await sampler.sample_all(heights, identity)
        result = aggregate(samples)
        log.info("twap_computed", twap=str(result.twap), samples=result.sample_count)
        return TwapReport(identity=identity, result=result, days=days)
    finally:
        structlog.contextvars.unbind_contextvars("pool")


async def run_with_timeout(
    source: ReserveSource,
    pool: str,
    config: AppConfig,
    *,
    end_timestamp: int | None = None,
) -> TwapReport:
    """``compute_twap`` bounded by ``config.run.timeout_s`` when set."""
    coro = compute_twap(source, pool, config, end_timestamp=end_timestamp)
    if config.run.timeout_s is None:
        return await coro
    return await asyncio.wait_for(coro, timeout=config.run.timeout_s)
