"""Tests for the transport retry policy."""

from __future__ import annotations

import asyncio

import pytest

from pool_twap.errors import ContractReadError, TransportError
from pool_twap.twap.retry import RetryPolicy


def _flaky(failures: int, exc_type=TransportError):
    state = {"calls": 0}

    async def fn():
        state["calls"] += 1
        if state["calls"] <= failures:
            raise exc_type("boom")
        return "ok"

    return fn, state


class TestRetryPolicy:
    def test_success_first_try(self):
        fn, state = _flaky(0)
        assert asyncio.run(RetryPolicy(backoff_s=0).run(fn, what="test")) == "ok"
        assert state["calls"] == 1

    def test_recovers_within_budget(self):
        fn, state = _flaky(2)
        assert asyncio.run(RetryPolicy(attempts=3, backoff_s=0).run(fn, what="test")) == "ok"
        assert state["calls"] == 3

    def test_gives_up_after_budget(self):
        fn, state = _flaky(5)
        with pytest.raises(TransportError):
            asyncio.run(RetryPolicy(attempts=3, backoff_s=0).run(fn, what="test"))
        assert state["calls"] == 3

    def test_attaches_height_on_give_up(self):
        fn, _ = _flaky(5)
        with pytest.raises(TransportError) as info:
            asyncio.run(RetryPolicy(attempts=2, backoff_s=0).run(fn, what="reserves", height=77))
        assert info.value.height == 77
        assert "reserves failed after 2 attempt(s)" in str(info.value)

    def test_contract_errors_not_retried(self):
        fn, state = _flaky(1, exc_type=ContractReadError)
        with pytest.raises(ContractReadError):
            asyncio.run(RetryPolicy(attempts=3, backoff_s=0).run(fn, what="test"))
        assert state["calls"] == 1

    def test_single_attempt_policy(self):
        fn, state = _flaky(1)
        with pytest.raises(TransportError):
            asyncio.run(RetryPolicy(attempts=1, backoff_s=0).run(fn, what="test"))
        assert state["calls"] == 1

    def test_lambda_wrapping_a_coroutine_is_awaited(self):
        fn, state = _flaky(1)
        result = asyncio.run(RetryPolicy(attempts=3, backoff_s=0).run(lambda: fn(), what="test"))
        assert result == "ok"
        assert state["calls"] == 2
