from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


def block_on(factory: Callable[[], Awaitable[T]]) -> T:
    """
    Run ``factory()`` to completion on a private event loop and return its result.

    The loop lives in a dedicated worker thread that is joined before
    returning, so this is safe to call from plain synchronous code and from
    inside an already running event loop alike. Exceptions raised by the
    coroutine propagate unchanged.
    """

    async def run() -> T:
        return await factory()

    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="ephemeral-db") as executor:
        return executor.submit(asyncio.run, run()).result()


__all__ = ["block_on"]
