"""Pydantic domain models."""

from pool_twap.models.chain import BlockRef, PoolIdentity, ReservePair
from pool_twap.models.price import PriceSample, TwapReport, TwapResult

__all__ = [
    "BlockRef",
    "PoolIdentity",
    "PriceSample",
    "ReservePair",
    "TwapReport",
    "TwapResult",
]
