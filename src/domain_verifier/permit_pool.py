"""
Permit pool for scarce outbound connections.

A bounded counting semaphore with a cancellation-aware acquire and a
release that runs on every exit path. The WHOIS client uses one
process-wide pool to cap concurrent port-43 connections regardless of how
many domains are checked in parallel.
"""

import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator

from .context import CheckContext


class PermitPool:
    """
    Fixed-size pool of permits.

    asyncio primitives bind to the loop that first waits on them, so the
    pool keeps one semaphore per running event loop. Within a loop every
    caller shares the same permits.
    """

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError(f"Permit pool size must be positive, got {size}")
        self._size = size
        self._semaphores: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Semaphore]" = (
            weakref.WeakKeyDictionary()
        )

    @property
    def size(self) -> int:
        return self._size

    def _semaphore(self) -> asyncio.Semaphore:
        loop = asyncio.get_running_loop()
        semaphore = self._semaphores.get(loop)
        if semaphore is None:
            semaphore = asyncio.Semaphore(self._size)
            self._semaphores[loop] = semaphore
        return semaphore

    @asynccontextmanager
    async def acquire(self, ctx: CheckContext) -> AsyncIterator[None]:
        """
        Hold one permit for the duration of the block.

        Usage:
            async with pool.acquire(ctx):
                await talk_to_server()

        Raises:
            CheckCancelledError: If the context is cancelled or expires
                before a permit becomes free. No permit is held then.
        """
        semaphore = self._semaphore()
        await ctx.guard(semaphore.acquire())
        try:
            yield
        finally:
            semaphore.release()
