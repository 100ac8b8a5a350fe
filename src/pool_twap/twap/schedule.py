"""Sampling schedule — evenly spaced block heights across a window."""

from __future__ import annotations

import math

SECONDS_PER_DAY = 86400


def span_in_blocks(days: int | float, block_time_s: float) -> int:
    """Approximate number of blocks produced in *days* at *block_time_s* per block."""
    if days < 0:
        raise ValueError(f"days must be >= 0, got {days}")
    if block_time_s <= 0:
        raise ValueError(f"block_time_s must be > 0, got {block_time_s}")
    return math.floor(days * SECONDS_PER_DAY / block_time_s)


def schedule(end_block: int, span_blocks: int, sample_count: int) -> list[int]:
    """Return *sample_count* non-decreasing heights from ``end_block - span_blocks`` to *end_block*.

    The start is clamped at genesis.  Heights are rounded half-up with
    integer arithmetic; duplicates (span shorter than the sample count) are
    kept.
    """
    if sample_count < 1:
        raise ValueError(f"sample_count must be >= 1, got {sample_count}")
    if end_block < 0:
        raise ValueError(f"end_block must be >= 0, got {end_block}")
    if span_blocks < 0:
        raise ValueError(f"span_blocks must be >= 0, got {span_blocks}")

    if sample_count == 1:
        return [end_block]

    start = max(0, end_block - span_blocks)
    width = end_block - start
    steps = sample_count - 1
    # round(i * width / steps), half-up: floor((2*i*width + steps) / (2*steps))
    return [start + (2 * i * width + steps) // (2 * steps) for i in range(sample_count)]
