"""Cached vs uncached recursive Fibonacci benchmark."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from lru_memoize.memoize import lru


def fib(n: int) -> int:
    """Plain exponential-time recursive Fibonacci."""
    if n <= 1:
        return n
    return fib(n - 1) + fib(n - 2)


def make_cached_fib(max_size: int = 10_000) -> Callable[[int], int]:
    """Build a recursive Fibonacci whose recursive calls go through its own cache."""

    def fib_cached(n: int) -> int:
        if n <= 1:
            return n
        return cached(n - 1) + cached(n - 2)

    cached = lru(fib_cached, max_size)
    return cached


@dataclass(frozen=True)
class FibBenchmark:
    """Timings for one benchmark run."""

    n: int
    plain_result: int
    cached_result: int
    plain_seconds: float
    cached_seconds: float

    @property
    def results_match(self) -> bool:
        return self.plain_result == self.cached_result


def _timed(fn: Callable[[int], int], n: int) -> tuple[int, float]:
    start = time.perf_counter()
    result = fn(n)
    return result, time.perf_counter() - start


def run_fib_benchmark(n: int = 27, max_size: int = 10_000) -> FibBenchmark:
    """Time fib(n) with and without memoization."""
    if n < 0:
        raise ValueError("n must be non-negative")
    plain_result, plain_seconds = _timed(fib, n)
    cached_result, cached_seconds = _timed(make_cached_fib(max_size), n)
    return FibBenchmark(
        n=n,
        plain_result=plain_result,
        cached_result=cached_result,
        plain_seconds=plain_seconds,
        cached_seconds=cached_seconds,
    )
