"""Structured logging."""

from pool_twap.logging.setup import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
