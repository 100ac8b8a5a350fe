"""Bounded retries for transport failures."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pool_twap.errors import TransportError
from pool_twap.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry ``TransportError`` up to *attempts* times with exponential backoff.

    Any other exception propagates on the first occurrence.
    """

    attempts: int = 3
    backoff_s: float = 0.5
    max_backoff_s: float = 8.0

    async def run(
        self,
        fn: Callable[[], Awaitable[T]],
        *,
        what: str,
        height: int | None = None,
    ) -> T:
        """Await ``fn()`` under the policy.

        When the budget is exhausted the last ``TransportError`` is re-raised
        with *height* attached so the failing sample can be identified.
        """

        def _log_retry(state: RetryCallState) -> None:
            exc = state.outcome.exception() if state.outcome else None
            log.warning(
                "transport_retry",
                what=what,
                height=height,
                attempt=state.attempt_number,
                max_attempts=self.attempts,
                error=str(exc),
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait_exponential(multiplier=self.backoff_s, max=self.max_backoff_s),
            retry=retry_if_exception_type(TransportError),
            before_sleep=_log_retry,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await fn()
        except TransportError as exc:
            if height is not None and exc.height is None:
                raise TransportError(
                    f"{what} failed after {self.attempts} attempt(s): {exc}", height=height,
                ) from exc
            raise
