"""Configuration schema — Pydantic models for config.yaml."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class RpcConfig(BaseModel):
    url: str = "https://mainnet.base.org"
    timeout_s: float = Field(default=15.0, gt=0)


class ChainConfig(BaseModel):
    # Base produces a block roughly every 2 seconds
    block_time_s: float = Field(default=2.0, gt=0)


class SamplingConfig(BaseModel):
    days: int = Field(default=7, ge=1)
    samples: int = Field(default=168, ge=1)
    concurrency: int = Field(default=4, ge=1, le=16)
    timezone: str = "America/Chicago"


class RetryConfig(BaseModel):
    attempts: int = Field(default=3, ge=1)
    backoff_s: float = Field(default=0.5, ge=0)
    max_backoff_s: float = Field(default=8.0, ge=0)


class RunConfig(BaseModel):
    timeout_s: float | None = Field(default=None, gt=0)


class LoggingConfig(BaseModel):
    level: str = "WARNING"
    format: Literal["console", "json"] = "console"


class AppConfig(BaseModel):
    rpc: RpcConfig = Field(default_factory=RpcConfig)
    chain: ChainConfig = Field(default_factory=ChainConfig)
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    run: RunConfig = Field(default_factory=RunConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
