"""Time-weighted average price for an on-chain liquidity pool."""

__version__ = "0.1.0"
