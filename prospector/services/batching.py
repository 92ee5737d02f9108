import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def run_in_batches(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    limit: int,
) -> list[R | BaseException]:
    """Run ``worker`` over ``items`` in sequential rounds of at most ``limit``.

    Each round settles completely (success or exception) before the next one
    starts. Results keep input order; exceptions are returned in place of the
    failed item's result instead of being raised.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")

    results: list[R | BaseException] = []
    for start in range(0, len(items), limit):
        batch = items[start:start + limit]
        results.extend(await asyncio.gather(*(worker(item) for item in batch), return_exceptions=True))
    return results
