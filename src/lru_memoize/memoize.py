"""Memoizing wrappers for synchronous and coroutine functions."""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from lru_memoize.cache import LRUCache, validate_capacity
from lru_memoize.config import load_dedupe_inflight, load_default_max_size
from lru_memoize.keys import encode_key

KeyFunc = Callable[[Sequence[Any], Mapping[str, Any]], str]

logger = logging.getLogger(__name__)


def _resolve_capacity(max_size: int | None) -> int:
    if max_size is None:
        return load_default_max_size()
    return validate_capacity(max_size)


def _attach(wrapper: Callable[..., Any], cache: LRUCache[str, Any]) -> None:
    wrapper.cache = cache  # type: ignore[attr-defined]
    wrapper.cache_info = cache.info  # type: ignore[attr-defined]


def _check_callable(fn: object, name: str) -> None:
    if not callable(fn):
        raise TypeError(
            f"{name}() expects a callable; use {name}(max_size=...) as a decorator factory"
        )


def lru(
    fn: Callable[..., Any] | None = None,
    max_size: int | None = None,
    *,
    key_func: KeyFunc = encode_key,
) -> Any:
    """Wrap a synchronous function with a bounded LRU result cache.

    Usable as ``lru(fn, 3)``, ``@lru`` or ``@lru(max_size=3)``. When
    `max_size` is omitted the configured default applies (1000 unless
    ``LRU_MEMOIZE_DEFAULT_MAX_SIZE`` says otherwise).

    Exceptions from `fn` propagate unchanged and are never cached, so the
    next call with the same arguments runs `fn` again.

    Example:
        >>> square = lru(lambda x: x * x, 3)
        >>> square(2)
        4
    """
    if fn is None:
        return functools.partial(lru, max_size=_resolve_capacity(max_size), key_func=key_func)
    _check_callable(fn, "lru")
    if inspect.iscoroutinefunction(fn):
        raise TypeError("lru() cannot wrap a coroutine function; use async_lru()")

    cache: LRUCache[str, Any] = LRUCache(_resolve_capacity(max_size))

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        key = key_func(args, kwargs)
        return cache.get_or_compute(key, lambda: fn(*args, **kwargs))

    _attach(wrapper, cache)
    return wrapper


def async_lru(
    fn: Callable[..., Any] | None = None,
    max_size: int | None = None,
    *,
    key_func: KeyFunc = encode_key,
    dedupe_inflight: bool | None = None,
) -> Any:
    """Wrap an awaitable-returning function with a bounded LRU result cache.

    `fn` is usually a coroutine function, but any callable works: on a miss
    its return value is awaited when it is awaitable and used as-is
    otherwise. Hits return without calling `fn`. The result is stored only
    after it is available, so failures and cancellations leave no entry.

    By default two overlapping calls for the same uncached arguments both
    run `fn`. With ``dedupe_inflight=True`` (or
    ``LRU_MEMOIZE_DEDUPE_INFLIGHT=1``) later callers await the computation
    already in flight; its result or exception is shared by every waiter,
    and cancelling one waiter leaves the shared computation running.

    Example:
        >>> @async_lru(max_size=50)
        ... async def fetch(url):
        ...     ...
    """
    if fn is None:
        return functools.partial(
            async_lru,
            max_size=_resolve_capacity(max_size),
            key_func=key_func,
            dedupe_inflight=dedupe_inflight,
        )
    _check_callable(fn, "async_lru")

    cache: LRUCache[str, Any] = LRUCache(_resolve_capacity(max_size))
    dedupe = load_dedupe_inflight() if dedupe_inflight is None else dedupe_inflight

    async def _call(args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        result = fn(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    if not dedupe:

        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            key = key_func(args, kwargs)
            return await cache.get_or_compute_async(key, lambda: _call(args, kwargs))

        _attach(wrapper, cache)
        return wrapper

    inflight: dict[str, asyncio.Task[Any]] = {}

    async def _compute(key: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        value = await _call(args, kwargs)
        cache.put(key, value)
        return value

    def _settle(key: str, task: asyncio.Task[Any]) -> None:
        if inflight.get(key) is task:
            del inflight[key]
        if not task.cancelled():
            # waiters may all be gone; mark the exception as retrieved
            task.exception()

    @functools.wraps(fn)
    async def deduped(*args: Any, **kwargs: Any) -> Any:
        key = key_func(args, kwargs)
        found, value = cache.try_get(key)
        if found:
            return value

        task = inflight.get(key)
        if task is None:
            task = asyncio.get_running_loop().create_task(_compute(key, args, kwargs))
            inflight[key] = task
            task.add_done_callback(functools.partial(_settle, key))
        else:
            logger.debug(
                "joining in-flight computation for %s key %s", getattr(fn, "__qualname__", fn), key
            )
        return await asyncio.shield(task)

    deduped.inflight_count = lambda: len(inflight)  # type: ignore[attr-defined]
    _attach(deduped, cache)
    return deduped
