"""
Ordered concurrent mapping.

``ordered_map`` starts one call per key without waiting for the others,
awaits them collectively, then assembles the result by walking the input
keys. Iteration order of the result is therefore input order, never
completion order.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar, Union

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")

MaybeAwaitable = Union[V, Awaitable[V]]


async def _call(fn: Callable[[K], MaybeAwaitable[V | None]], key: K) -> V | None:
    result = fn(key)
    if inspect.isawaitable(result):
        return await result
    return result


async def ordered_map(
    keys: Iterable[K],
    fn: Callable[[K], MaybeAwaitable[V | None]],
) -> dict[K, V]:
    """Map every key through ``fn`` concurrently, keeping input order.

    Keys whose ``fn`` returns ``None`` or raises are left out of the
    result. Raised exceptions are only debug-logged; callers that need
    them must capture them inside ``fn``.

    Duplicate keys collapse to a single entry holding the last present
    value, at the position of the first occurrence.

    Args:
        keys: Keys to map.
        fn: Sync or async callable producing a value or None.

    Returns:
        Dict of key → value in input order.
    """
    key_list = list(keys)
    outcomes = await asyncio.gather(
        *(_call(fn, key) for key in key_list),
        return_exceptions=True,
    )

    unordered: dict[K, V] = {}
    for key, outcome in zip(key_list, outcomes):
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, BaseException):
            logger.debug("mapping %r failed: %r", key, outcome)
            continue
        if outcome is None:
            continue
        unordered[key] = outcome

    ordered: dict[K, V] = {}
    for key in key_list:
        if key in unordered and key not in ordered:
            ordered[key] = unordered[key]
    return ordered


def dedupe(items: Iterable[K]) -> list[K]:
    """Unique items, first occurrence order."""
    return list(dict.fromkeys(items))
