"""Chain state models — pool identity, block references, raw reserves."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PoolIdentity(BaseModel):
    """Token pair behind a pool.  Fetched once per run."""

    model_config = ConfigDict(frozen=True)

    pool: str
    token0: str
    token1: str
    decimals0: int = Field(ge=0, le=255)
    decimals1: int = Field(ge=0, le=255)
    symbol0: str = "UNKNOWN"
    symbol1: str = "UNKNOWN"

    @property
    def pair(self) -> str:
        """Quote label, e.g. ``USDC per WETH``."""
        return f"{self.symbol1} per {self.symbol0}"


class BlockRef(BaseModel):
    """A block height and its timestamp (seconds since epoch)."""

    model_config = ConfigDict(frozen=True)

    height: int = Field(ge=0)
    timestamp: int = Field(ge=0)


class ReservePair(BaseModel):
    """Raw reserve quantities as returned by ``getReserves()``."""

    model_config = ConfigDict(frozen=True)

    reserve0: int = Field(ge=0)
    reserve1: int = Field(ge=0)
    block: BlockRef
