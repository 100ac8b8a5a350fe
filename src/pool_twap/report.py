"""Console report for a finished TWAP run."""

from __future__ import annotations

from datetime import datetime, timezone

from pool_twap.models import BlockRef, TwapReport

RULE = "=" * 48


def _block_line(block: BlockRef) -> str:
    when = datetime.fromtimestamp(block.timestamp, tz=timezone.utc)
    return f"block {block.height} ({when:%Y-%m-%d %H:%M:%S} UTC)"


def _duration(seconds: int) -> str:
    days, rem = divmod(seconds, 86400)
    hours, rem = divmod(rem, 3600)
    minutes = rem // 60
    return f"{days}d {hours}h {minutes}m"


def render_report(report: TwapReport) -> str:
    """Plain-text summary, one field per line."""
    ident = report.identity
    res = report.result
    pair = ident.pair
    lines = [
        f"Pool:     {ident.pool}",
        f"Token0:   {ident.symbol0} ({ident.token0}, {ident.decimals0} decimals)",
        f"Token1:   {ident.symbol1} ({ident.token1}, {ident.decimals1} decimals)",
        f"Window:   {report.days} days, {res.sample_count} samples",
        f"From:     {_block_line(res.start)}",
        f"To:       {_block_line(res.end)}",
        f"Covered:  {_duration(res.span_seconds)}",
        "",
        "RESULTS",
        RULE,
        f"{report.days}-Day TWAP:       {res.twap:.8f} {pair}",
        f"Current Price:        {res.current:.8f} {pair}",
        f"Min Price:            {res.min_price:.8f}",
        f"Max Price:            {res.max_price:.8f}",
        f"Price Range:          {res.range_pct:.2f}%",
        f"Deviation from TWAP:  {res.deviation_pct:.2f}%",
        RULE,
    ]
    return "\n".join(lines)
