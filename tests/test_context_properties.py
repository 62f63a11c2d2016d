"""
Tests for the shared check context.

Covers deadline arithmetic, shared cancellation between parent and child
contexts, and how guard() unwinds the awaitable it protects.
"""

import asyncio
import time

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_verifier.context import CheckContext
from domain_verifier.exceptions import CheckCancelledError, DeadlineExceededError


class TestDeadlineProperty:
    """Child contexts never outlive their parent's deadline."""

    @given(
        parent_timeout=st.floats(min_value=1.0, max_value=1000.0),
        fallback=st.floats(min_value=1.0, max_value=1000.0),
    )
    @settings(max_examples=100)
    def test_child_keeps_parent_deadline(self, parent_timeout: float, fallback: float) -> None:
        parent = CheckContext.with_timeout(parent_timeout)
        child = parent.child(fallback)
        assert child.deadline == parent.deadline

    @given(fallback=st.floats(min_value=1.0, max_value=1000.0))
    @settings(max_examples=50)
    def test_child_without_parent_deadline_uses_fallback(self, fallback: float) -> None:
        before = time.monotonic()
        child = CheckContext().child(fallback)
        after = time.monotonic()
        assert before + fallback <= child.deadline <= after + fallback

    def test_no_deadline_never_expires(self) -> None:
        ctx = CheckContext.with_timeout(None)
        assert ctx.deadline is None
        assert ctx.remaining() is None
        assert not ctx.done
        assert ctx.error() is None

    def test_past_deadline_is_expired(self) -> None:
        ctx = CheckContext(deadline=time.monotonic() - 1)
        assert ctx.expired
        assert ctx.remaining() == 0.0
        assert isinstance(ctx.error(), DeadlineExceededError)
        with pytest.raises(DeadlineExceededError):
            ctx.raise_if_done()


class TestCancellation:
    """Cancellation is shared and takes precedence over expiry."""

    def test_cancel_propagates_to_child(self) -> None:
        parent = CheckContext.with_timeout(60)
        child = parent.child(5)
        parent.cancel()
        assert child.cancelled
        assert child.done

    def test_cancel_from_child_reaches_parent(self) -> None:
        parent = CheckContext()
        parent.child(5).cancel()
        assert parent.cancelled

    def test_cancelled_error_is_not_deadline(self) -> None:
        ctx = CheckContext(deadline=time.monotonic() - 1)
        ctx.cancel()
        error = ctx.error()
        assert isinstance(error, CheckCancelledError)
        assert not isinstance(error, DeadlineExceededError)
        assert error.code == "cancelled"

    def test_deadline_error_is_a_cancellation_kind(self) -> None:
        assert issubclass(DeadlineExceededError, CheckCancelledError)
        assert DeadlineExceededError().code == "deadline_exceeded"


class TestGuard:
    """guard() returns results, propagates errors and unwinds on expiry."""

    def test_returns_result(self) -> None:
        async def work():
            await asyncio.sleep(0)
            return 42

        assert asyncio.run(CheckContext.with_timeout(5).guard(work())) == 42

    def test_propagates_inner_exception(self) -> None:
        async def work():
            raise OSError("boom")

        with pytest.raises(OSError, match="boom"):
            asyncio.run(CheckContext.with_timeout(5).guard(work()))

    def test_deadline_cancels_inner_task_and_runs_cleanup(self) -> None:
        cleaned = []

        async def work():
            try:
                await asyncio.sleep(10)
            finally:
                cleaned.append(True)

        started = time.monotonic()
        with pytest.raises(DeadlineExceededError):
            asyncio.run(CheckContext.with_timeout(0.05).guard(work()))

        assert cleaned == [True]
        assert time.monotonic() - started < 5

    def test_cancel_wakes_guarded_call(self) -> None:
        async def scenario():
            ctx = CheckContext()

            async def cancel_soon():
                await asyncio.sleep(0.02)
                ctx.cancel()

            canceller = asyncio.ensure_future(cancel_soon())
            try:
                await ctx.guard(asyncio.sleep(10))
            finally:
                await canceller

        with pytest.raises(CheckCancelledError) as exc_info:
            asyncio.run(scenario())
        assert not isinstance(exc_info.value, DeadlineExceededError)

    def test_done_context_does_not_start_work(self) -> None:
        started = []

        async def work():
            started.append(True)

        ctx = CheckContext()
        ctx.cancel()
        with pytest.raises(CheckCancelledError):
            asyncio.run(ctx.guard(work()))
        assert started == []
