"""Error taxonomy for a TWAP run.

Every fatal condition is a ``TwapError``.  Only ``TransportError`` is ever
retried; everything else aborts the run and is reported by the CLI.
"""

from __future__ import annotations


class TwapError(Exception):
    """Base class for all errors raised while computing a TWAP."""


class TransportError(TwapError):
    """Network failure, timeout, rate limit or node-side hiccup (retryable)."""

    def __init__(self, message: str, *, height: int | None = None) -> None:
        self.height = height
        if height is not None:
            message = f"{message} (block {height})"
        super().__init__(message)


class ContractReadError(TwapError):
    """A contract call reverted or returned nothing usable."""

    def __init__(self, message: str, *, address: str | None = None) -> None:
        self.address = address
        self.detail = message
        if address is not None:
            message = f"{message} [{address}]"
        super().__init__(message)


class ReserveUnavailable(ContractReadError):
    """Reserves could not be read at a height (pool not deployed yet, pruned state)."""

    def __init__(self, height: int, *, address: str | None = None, reason: str = "") -> None:
        self.height = height
        message = f"reserves unavailable at block {height}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, address=address)


class OutOfRange(TwapError):
    """Requested timestamp falls outside the available chain history."""


class InvariantViolation(TwapError):
    """Upstream data is inconsistent (e.g. timestamps going backwards)."""


class ZeroReserve(TwapError):
    """reserve0 is zero, so no price can be derived."""

    def __init__(self, height: int | None = None) -> None:
        self.height = height
        where = f" at block {height}" if height is not None else ""
        super().__init__(f"reserve0 is zero{where}; pool has no liquidity")


class InsufficientData(TwapError):
    """No samples were collected."""


class InvalidResult(TwapError):
    """The aggregate is unusable (TWAP of zero)."""
