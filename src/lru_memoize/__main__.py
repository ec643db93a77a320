"""Command-line entrypoint for lru_memoize."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

from lru_memoize.bench import run_fib_benchmark


def _non_negative_int(value: str) -> int:
    """Parse a non-negative integer argument."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer: {value}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {value}")
    return parsed


def _positive_int(value: str) -> int:
    """Parse a positive integer argument."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer: {value}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    """Create and return the top-level CLI parser."""
    parser = argparse.ArgumentParser(
        prog="lru_memoize",
        description="Bounded LRU memoization helpers.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
    )

    subparsers = parser.add_subparsers(dest="command")
    bench = subparsers.add_parser(
        "bench-fib",
        help="Compare plain and memoized recursive Fibonacci timings.",
    )
    bench.add_argument("--n", type=_non_negative_int, default=27)
    bench.add_argument("--max-size", type=_positive_int, default=10_000)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI application."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    if args.command == "bench-fib":
        result = run_fib_benchmark(args.n, args.max_size)
        print(f"Benchmarking fib({result.n})")
        print(f"plain  fib: {result.plain_seconds * 1000:.3f} ms")
        print(f"cached fib: {result.cached_seconds * 1000:.3f} ms")
        print(f"results match: {result.results_match} value={result.cached_result}")
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
