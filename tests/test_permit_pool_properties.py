"""
Property-based tests for the permit pool.
"""

import asyncio

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_verifier.context import CheckContext
from domain_verifier.exceptions import CheckCancelledError, DeadlineExceededError
from domain_verifier.permit_pool import PermitPool


class TestPermitBoundProperty:
    """Holders never exceed the pool size."""

    @given(
        size=st.integers(min_value=1, max_value=6),
        workers=st.integers(min_value=1, max_value=20),
    )
    @settings(max_examples=30, deadline=None)
    def test_concurrent_holders_bounded(self, size: int, workers: int) -> None:
        pool = PermitPool(size)
        state = {"active": 0, "max_active": 0}

        async def worker():
            async with pool.acquire(CheckContext.with_timeout(10)):
                state["active"] += 1
                state["max_active"] = max(state["max_active"], state["active"])
                await asyncio.sleep(0.01)
                state["active"] -= 1

        async def run_all():
            await asyncio.gather(*(worker() for _ in range(workers)))

        asyncio.run(run_all())

        assert state["max_active"] <= size
        assert state["max_active"] == min(size, workers)
        assert state["active"] == 0


class TestPermitRelease:
    """Permits come back on every exit path."""

    def test_released_after_exception(self) -> None:
        pool = PermitPool(1)

        async def scenario():
            ctx = CheckContext.with_timeout(1)
            with pytest.raises(RuntimeError):
                async with pool.acquire(ctx):
                    raise RuntimeError("failed while holding")
            async with pool.acquire(ctx):
                return "reacquired"

        assert asyncio.run(scenario()) == "reacquired"

    def test_timed_out_waiter_holds_nothing(self) -> None:
        pool = PermitPool(1)

        async def scenario():
            release = asyncio.Event()

            async def holder():
                async with pool.acquire(CheckContext.with_timeout(5)):
                    await release.wait()

            task = asyncio.ensure_future(holder())
            await asyncio.sleep(0.01)

            with pytest.raises(DeadlineExceededError):
                async with pool.acquire(CheckContext.with_timeout(0.02)):
                    pass

            release.set()
            await task
            async with pool.acquire(CheckContext.with_timeout(1)):
                return "free"

        assert asyncio.run(scenario()) == "free"

    def test_cancelled_context_never_acquires(self) -> None:
        pool = PermitPool(1)
        ctx = CheckContext()
        ctx.cancel()

        async def scenario():
            async with pool.acquire(ctx):
                return "acquired"

        with pytest.raises(CheckCancelledError):
            asyncio.run(scenario())

    def test_pool_usable_across_event_loops(self) -> None:
        pool = PermitPool(2)

        async def scenario():
            async with pool.acquire(CheckContext.with_timeout(1)):
                return True

        assert asyncio.run(scenario())
        assert asyncio.run(scenario())

    @pytest.mark.parametrize("size", [0, -1])
    def test_rejects_non_positive_size(self, size: int) -> None:
        with pytest.raises(ValueError):
            PermitPool(size)
