"""Environment-driven defaults for the memoizing wrappers."""

from __future__ import annotations

import os
from dataclasses import dataclass

from lru_memoize.cache import DEFAULT_CAPACITY
from lru_memoize.errors import InvalidCapacityError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class MemoizeConfig:
    """Defaults applied when a wrapper is created without explicit options."""

    default_max_size: int = DEFAULT_CAPACITY
    dedupe_inflight: bool = False


def _parse_max_size(raw: str) -> int:
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise InvalidCapacityError(
            f"LRU_MEMOIZE_DEFAULT_MAX_SIZE must be a positive integer, got {raw!r}"
        ) from exc
    if value < 1:
        raise InvalidCapacityError(
            f"LRU_MEMOIZE_DEFAULT_MAX_SIZE must be a positive integer, got {value}"
        )
    return value


def _parse_flag(name: str, raw: str) -> bool:
    resolved = raw.strip().lower()
    if resolved in _TRUE_VALUES:
        return True
    if resolved in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be one of: 0, 1, true, false, yes, no, on, off")


def load_default_max_size() -> int:
    """Read `LRU_MEMOIZE_DEFAULT_MAX_SIZE`, defaulting to the cache default."""
    return _parse_max_size(os.getenv("LRU_MEMOIZE_DEFAULT_MAX_SIZE", str(DEFAULT_CAPACITY)))


def load_dedupe_inflight() -> bool:
    """Read `LRU_MEMOIZE_DEDUPE_INFLIGHT`, defaulting to off."""
    return _parse_flag(
        "LRU_MEMOIZE_DEDUPE_INFLIGHT", os.getenv("LRU_MEMOIZE_DEDUPE_INFLIGHT", "0")
    )


def load_config() -> MemoizeConfig:
    """Read `LRU_MEMOIZE_*` environment variables into a MemoizeConfig."""
    return MemoizeConfig(
        default_max_size=load_default_max_size(),
        dedupe_inflight=load_dedupe_inflight(),
    )
