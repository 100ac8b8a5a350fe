"""BlockTimeResolver — map a wall-clock instant to a block height."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from pool_twap.errors import OutOfRange
from pool_twap.logging import get_logger
from pool_twap.models import BlockRef
from pool_twap.twap.retry import RetryPolicy

log = get_logger(__name__)

FetchTimestamp = Callable[[int], Awaitable[int]]


async def lower_bound(
    low: int,
    high: int,
    predicate: Callable[[int], Awaitable[bool]],
) -> int:
    """First index in ``[low, high]`` where *predicate* holds.

    *predicate* must be monotone over the interval (false ... false, true ...
    true).  If it never holds before *high*, *high* is returned.  Evaluates
    the predicate once per halving, ``ceil(log2(high - low + 1))`` times.
    """
    if low > high:
        raise ValueError(f"empty interval [{low}, {high}]")
    while low < high:
        mid = low + (high - low) // 2
        if await predicate(mid):
            high = mid
        else:
            low = mid + 1
    return low


class BlockTimeResolver:
    """Find the closest block at or before a target timestamp.

    Timestamps come from an opaque ``fetch_timestamp(height)`` coroutine so
    the search runs equally well against a node or an in-memory chain.
    Ties resolve to the first block carrying the target timestamp.
    """

    def __init__(self, fetch_timestamp: FetchTimestamp, retry: RetryPolicy | None = None):
        self._fetch_timestamp = fetch_timestamp
        self._retry = retry or RetryPolicy()

    async def resolve(self, target_timestamp: int, head: BlockRef) -> BlockRef:
        if target_timestamp > head.timestamp:
            raise OutOfRange(
                f"timestamp {target_timestamp} is after the chain head "
                f"(block {head.height} at {head.timestamp})"
            )

        seen: dict[int, int] = {head.height: head.timestamp}

        async def timestamp_at(height: int) -> int:
            if height not in seen:
                seen[height] = await self._retry.run(
                    lambda: self._fetch_timestamp(height),
                    what="block timestamp",
                    height=height,
                )
            return seen[height]

        async def at_or_after(height: int) -> bool:
            return await timestamp_at(height) >= target_timestamp

        height = await lower_bound(0, head.height, at_or_after)
        if await timestamp_at(height) > target_timestamp:
            if height == 0:
                raise OutOfRange(
                    f"timestamp {target_timestamp} is before block 0 (at {seen[0]})"
                )
            height -= 1

        block = BlockRef(height=height, timestamp=await timestamp_at(height))
        log.info(
            "block_resolved",
            target=target_timestamp,
            height=block.height,
            timestamp=block.timestamp,
            lookups=len(seen) - 1,
        )
        return block
