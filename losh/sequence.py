from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any, TypeVar

T = TypeVar("T")

Step = Callable[[Any, Any], Awaitable[T]]


async def _call_item(item: Callable[[], Awaitable[T]], index: Any) -> T:
    return await item()


async def run_sequence(
    items: Iterable[Any] | Mapping[Any, Any],
    step: Step[T] | None = None,
) -> T | None:
    """Await ``step(item, index)`` for each item, strictly one after another.

    A step starts only after the previous one finished; the first exception
    propagates and the remaining items are never started. Mappings are
    walked as ``step(value, key)``. Without ``step`` each item is awaited as
    a zero-argument coroutine function. Returns the last step's result, or
    ``None`` for an empty sequence.
    """
    call = step or _call_item
    pairs = items.items() if isinstance(items, Mapping) else enumerate(items)
    result: T | None = None
    for index, item in pairs:
        result = await call(item, index)
    return result
