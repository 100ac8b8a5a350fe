"""TwapAggregator — time-weighted average and dispersion over ordered samples."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal, localcontext

from pool_twap.errors import InsufficientData, InvalidResult, InvariantViolation
from pool_twap.models import PriceSample, TwapResult
from pool_twap.twap.sampler import PRICE_PRECISION

HUNDRED = Decimal(100)


def time_weights(samples: Sequence[PriceSample]) -> list[int]:
    """Seconds each sample's price was in effect; the last sample gets 0."""
    weights = []
    for prev, nxt in zip(samples, samples[1:]):
        delta = nxt.timestamp - prev.timestamp
        if delta < 0 or nxt.height < prev.height:
            raise InvariantViolation(
                f"samples out of order: block {prev.height} at {prev.timestamp} "
                f"followed by block {nxt.height} at {nxt.timestamp}"
            )
        weights.append(delta)
    weights.append(0)
    return weights


def aggregate(samples: Sequence[PriceSample]) -> TwapResult:
    """Reduce ascending samples to a ``TwapResult``.

    Each price is weighted by the time until the next sample.  With a single
    sample, or when no time elapsed at all, the TWAP is the latest price.
    """
    if not samples:
        raise InsufficientData("no price samples to aggregate")

    weights = time_weights(samples)
    prices = [s.price for s in samples]
    current = prices[-1]
    total_weight = sum(weights)

    with localcontext() as ctx:
        ctx.prec = PRICE_PRECISION
        if total_weight > 0:
            twap = sum((p * w for p, w in zip(prices, weights)), Decimal(0)) / total_weight
        else:
            twap = current

        if twap == 0:
            raise InvalidResult("TWAP is zero; percentages are undefined")

        lo, hi = min(prices), max(prices)
        range_pct = (hi - lo) / twap * HUNDRED
        deviation_pct = (current - twap) / twap * HUNDRED

    return TwapResult(
        twap=twap,
        current=current,
        min_price=lo,
        max_price=hi,
        start=samples[0].block,
        end=samples[-1].block,
        sample_count=len(samples),
        range_pct=range_pct,
        deviation_pct=deviation_pct,
    )
