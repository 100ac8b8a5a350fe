"""Command line: python -m pool_twap --pool 0x... [--days 7] [--samples 168] [--end-date YYYY-MM-DD]."""

from __future__ import annotations

import argparse
import asyncio
import sys

from pydantic import ValidationError

from pool_twap.chain import JsonRpcClient, RpcReserveSource
from pool_twap.chain.abi import normalize_address
from pool_twap.config import AppConfig, load_config
from pool_twap.errors import InvariantViolation, TwapError
from pool_twap.logging import get_logger, setup_logging
from pool_twap.models import TwapReport
from pool_twap.report import render_report
from pool_twap.twap.runner import end_date_to_timestamp, run_with_timeout

log = get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pool-twap",
        description="Time-weighted average price of a liquidity pool from historical reserves",
    )
    parser.add_argument("-p", "--pool", required=True, help="Pool contract address")
    parser.add_argument("-r", "--rpc", default=None, help="JSON-RPC endpoint URL")
    parser.add_argument("-d", "--days", type=int, default=None, help="TWAP window in days (default 7)")
    parser.add_argument("-s", "--samples", type=int, default=None, help="Number of sample points (default 168)")
    parser.add_argument(
        "-e", "--end-date", default=None,
        help="End of the window, YYYY-MM-DD at local midnight in --timezone (default: now)",
    )
    parser.add_argument("--timezone", default=None, help="IANA timezone for --end-date (default America/Chicago)")
    parser.add_argument("--concurrency", type=int, default=None, help="Max in-flight sample fetches")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    return parser


def apply_args(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Overlay CLI flags on the loaded config, re-validating the result."""
    data = config.model_dump()
    if args.rpc is not None:
        data["rpc"]["url"] = args.rpc
    if args.days is not None:
        data["sampling"]["days"] = args.days
    if args.samples is not None:
        data["sampling"]["samples"] = args.samples
    if args.timezone is not None:
        data["sampling"]["timezone"] = args.timezone
    if args.concurrency is not None:
        data["sampling"]["concurrency"] = args.concurrency
    return AppConfig.model_validate(data)


async def run(pool: str, config: AppConfig, end_timestamp: int | None) -> TwapReport:
    async with JsonRpcClient(config.rpc.url, timeout_s=config.rpc.timeout_s) as client:
        source = RpcReserveSource(client)
        return await run_with_timeout(source, pool, config, end_timestamp=end_timestamp)


def _fail(message: str) -> int:
    print(f"error: {message}", file=sys.stderr)
    return EXIT_ERROR


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = apply_args(load_config(args.config), args)
    except ValidationError as exc:
        return _fail(f"invalid configuration: {exc}")

    setup_logging(level=config.logging.level, log_format=config.logging.format)

    try:
        pool = normalize_address(args.pool)
        end_timestamp = (
            end_date_to_timestamp(args.end_date, config.sampling.timezone)
            if args.end_date
            else None
        )
    except ValueError as exc:
        return _fail(str(exc))

    log.info("twap_run_started", pool=pool, rpc=config.rpc.url, days=config.sampling.days,
             samples=config.sampling.samples, end_timestamp=end_timestamp)

    try:
        report = asyncio.run(run(pool, config, end_timestamp))
    except KeyboardInterrupt:
        print("interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED
    except TimeoutError:
        return _fail(f"run exceeded {config.run.timeout_s}s timeout")
    except InvariantViolation as exc:
        return _fail(f"data inconsistency (possible chain anomaly or bug): {exc}")
    except TwapError as exc:
        return _fail(str(exc))

    print(render_report(report))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
