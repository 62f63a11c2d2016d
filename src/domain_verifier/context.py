"""
Shared deadline and cancellation token for verification runs.

A single CheckContext governs a whole bulk operation. Every network call
made on behalf of the operation runs through CheckContext.guard, so a
cancelled or expired context unwinds in-flight DNS lookups, permit waits
and WHOIS connections promptly.
"""

import asyncio
import time
from typing import Any, Awaitable, Optional, TypeVar

from .exceptions import CheckCancelledError, DeadlineExceededError

T = TypeVar("T")


class CheckContext:
    """
    Deadline plus cancellation flag shared by cooperating tasks.

    Deadlines are absolute values on the time.monotonic() clock, which is
    the clock the default asyncio event loop uses.
    """

    def __init__(
        self,
        deadline: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> None:
        """
        Initialize the context.

        Args:
            deadline: Absolute monotonic deadline, or None for no deadline
            cancel_event: Event shared with a parent context
        """
        self._deadline = deadline
        self._cancel_event = cancel_event or asyncio.Event()

    @classmethod
    def with_timeout(cls, seconds: Optional[float]) -> "CheckContext":
        """Create a context whose deadline is `seconds` from now."""
        if seconds is None:
            return cls()
        return cls(deadline=time.monotonic() + seconds)

    def child(self, fallback_timeout: float) -> "CheckContext":
        """
        Derive a context that always carries a deadline.

        The child keeps the parent's deadline when there is one, otherwise
        it expires `fallback_timeout` seconds from now. Cancellation is
        shared with the parent.
        """
        deadline = self._deadline
        if deadline is None:
            deadline = time.monotonic() + fallback_timeout
        return CheckContext(deadline=deadline, cancel_event=self._cancel_event)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def cancel(self) -> None:
        """Cancel this context and every context sharing its flag."""
        self._cancel_event.set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def error(self) -> Optional[CheckCancelledError]:
        """Return the cancellation-kind error for a finished context."""
        if self.cancelled:
            return CheckCancelledError()
        if self.expired:
            return DeadlineExceededError()
        return None

    def raise_if_done(self) -> None:
        error = self.error()
        if error is not None:
            raise error

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """
        Await `awaitable` under this context.

        Returns the awaitable's result, re-raising its exception. If the
        deadline passes or the context is cancelled first, the inner task
        is cancelled and allowed to unwind, then the cancellation-kind
        error is raised.
        """
        if self.done:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            elif asyncio.isfuture(awaitable):
                awaitable.cancel()
            self.raise_if_done()

        task: "asyncio.Future[Any]" = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()

        if task in done:
            return task.result()

        # Give the inner task a chance to run its cleanup handlers.
        await asyncio.wait({task})
        error = self.error()
        if error is None:
            error = DeadlineExceededError()
        raise error
