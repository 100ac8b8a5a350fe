"""TWAP engine — block resolution, scheduling, sampling, aggregation."""

from pool_twap.twap.aggregator import aggregate, time_weights
from pool_twap.twap.resolver import BlockTimeResolver, lower_bound
from pool_twap.twap.retry import RetryPolicy
from pool_twap.twap.sampler import PriceSampler, spot_price
from pool_twap.twap.schedule import schedule, span_in_blocks

__all__ = [
    "BlockTimeResolver",
    "PriceSampler",
    "RetryPolicy",
    "aggregate",
    "lower_bound",
    "schedule",
    "span_in_blocks",
    "spot_price",
    "time_weights",
]
