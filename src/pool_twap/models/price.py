"""Price observations and the aggregated TWAP result."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from pool_twap.models.chain import BlockRef, PoolIdentity


class PriceSample(BaseModel):
    """Spot price (token1 per token0) observed at a block."""

    model_config = ConfigDict(frozen=True)

    price: Decimal
    block: BlockRef

    @property
    def height(self) -> int:
        return self.block.height

    @property
    def timestamp(self) -> int:
        return self.block.timestamp


class TwapResult(BaseModel):
    """Time-weighted average plus dispersion statistics over a sample set."""

    model_config = ConfigDict(frozen=True)

    twap: Decimal
    current: Decimal
    min_price: Decimal
    max_price: Decimal
    start: BlockRef
    end: BlockRef
    sample_count: int
    range_pct: Decimal
    deviation_pct: Decimal

    @property
    def span_seconds(self) -> int:
        return self.end.timestamp - self.start.timestamp


class TwapReport(BaseModel):
    """Everything the console report needs: the pool, the window and the result."""

    model_config = ConfigDict(frozen=True)

    identity: PoolIdentity
    result: TwapResult
    days: int
