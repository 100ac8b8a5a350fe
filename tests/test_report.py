"""Tests for model invariants and the console report."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from pool_twap.models import BlockRef, PoolIdentity, PriceSample, TwapReport
from pool_twap.report import render_report
from pool_twap.twap.aggregator import aggregate


class TestModels:
    def test_block_height_non_negative(self):
        with pytest.raises(ValidationError):
            BlockRef(height=-1, timestamp=0)

    def test_models_are_frozen(self):
        block = BlockRef(height=1, timestamp=2)
        with pytest.raises(ValidationError):
            block.height = 5

    def test_decimals_range(self):
        with pytest.raises(ValidationError):
            PoolIdentity(pool="0x1", token0="0x2", token1="0x3", decimals0=256, decimals1=6)

    def test_sample_shortcuts(self):
        sample = PriceSample(price=Decimal("1.5"), block=BlockRef(height=9, timestamp=99))
        assert sample.height == 9
        assert sample.timestamp == 99


class TestRenderReport:
    def test_contains_results(self, pool_identity):
        samples = [
            PriceSample(price=Decimal(p), block=BlockRef(height=h, timestamp=t))
            for p, h, t in [(10, 0, 1_700_000_000), (20, 50, 1_700_000_100), (30, 100, 1_700_000_200)]
        ]
        text = render_report(TwapReport(identity=pool_identity, result=aggregate(samples), days=7))
        assert "7-Day TWAP:       15.00000000 USDC per WETH" in text
        assert "Current Price:        30.00000000 USDC per WETH" in text
        assert "Min Price:            10.00000000" in text
        assert "Max Price:            30.00000000" in text
        assert "Price Range:          133.33%" in text
        assert "Deviation from TWAP:  100.00%" in text
        assert "block 0 (2023-11-14 22:13:20 UTC)" in text
        assert "Covered:  0d 0h 3m" in text
        assert "WETH (0x0101" in text
