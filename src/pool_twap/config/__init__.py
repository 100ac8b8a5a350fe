"""Configuration system."""

from pool_twap.config.loader import ENV_OVERRIDES, load_config
from pool_twap.config.schema import AppConfig

__all__ = ["AppConfig", "ENV_OVERRIDES", "load_config"]
