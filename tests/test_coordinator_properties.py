"""
Property-based tests for the bulk check coordinator.

A scripted verifier stands in for DNS and WHOIS so ordering, isolation
and deadline handling can be checked without the network.
"""

import asyncio
import random

from hypothesis import given, settings
from hypothesis import strategies as st

from domain_verifier.context import CheckContext
from domain_verifier.coordinator import BulkCheckCoordinator, select_top, sort_candidates
from domain_verifier.enums import EntryStatus
from domain_verifier.event_logger import EventLogger
from domain_verifier.exceptions import CheckCancelledError, DeadlineExceededError
from domain_verifier.models import Candidate, VerificationRecord
from domain_verifier.verifier import DomainVerifier


class ScriptedVerifier:
    """Returns an unregistered record after a per-domain delay."""

    def __init__(self, delays=None, failures=None, default_delay: float = 0.0) -> None:
        self.delays = delays or {}
        self.failures = failures or {}
        self.default_delay = default_delay
        self.calls: list[str] = []

    async def verify(self, ctx: CheckContext, domain: str) -> VerificationRecord:
        ctx.raise_if_done()
        self.calls.append(domain)
        await asyncio.sleep(self.delays.get(domain, self.default_delay))
        if domain in self.failures:
            raise self.failures[domain]
        return VerificationRecord(domain=domain)


class EmptyResolver:
    """Resolver that finds no delegation for any name."""

    def __init__(self) -> None:
        self.calls = []

    async def lookup_ns(self, ctx, domain):
        self.calls.append(("NS", domain))
        return []

    async def lookup_a(self, ctx, domain):
        self.calls.append(("A", domain))
        return []

    async def lookup_mx(self, ctx, domain):
        self.calls.append(("MX", domain))
        return []


class UnusedWhois:
    def __init__(self) -> None:
        self.calls = []

    async def resolve_owner(self, ctx, domain):
        self.calls.append(domain)
        return ""


def domain_names(min_size: int = 0, max_size: int = 12):
    return st.lists(
        st.integers(min_value=0, max_value=10_000).map(lambda n: f"variant{n}.com"),
        min_size=min_size,
        max_size=max_size,
        unique=True,
    )


def run_batch(coordinator, candidates, limit=None, timeout=5.0):
    return asyncio.run(
        coordinator.check_top(CheckContext.with_timeout(timeout), candidates, limit)
    )


class TestOrderPreservationProperty:
    """Results line up with the input regardless of completion order."""

    @given(names=domain_names(min_size=1), seed=st.integers(min_value=0, max_value=2**16))
    @settings(max_examples=30, deadline=None)
    def test_output_order_matches_input(self, names, seed) -> None:
        rng = random.Random(seed)
        verifier = ScriptedVerifier(delays={n: rng.uniform(0, 0.01) for n in names})
        coordinator = BulkCheckCoordinator(verifier=verifier)

        entries = run_batch(coordinator, names)

        assert [entry.candidate.name for entry in entries] == names
        assert [entry.record.domain for entry in entries] == names
        assert all(entry.status == EntryStatus.OK for entry in entries)

    @given(names=domain_names(), limit=st.integers(min_value=-2, max_value=15))
    @settings(max_examples=50, deadline=None)
    def test_limit_is_respected(self, names, limit) -> None:
        verifier = ScriptedVerifier()
        coordinator = BulkCheckCoordinator(verifier=verifier)

        entries = run_batch(coordinator, names, limit=limit)

        expected = names if limit <= 0 else names[:limit]
        assert [entry.candidate.name for entry in entries] == expected
        assert sorted(verifier.calls) == sorted(expected)


class TestCandidateSelection:
    def test_sort_is_descending_and_stable(self) -> None:
        candidates = [
            Candidate("b.com", 0.5),
            Candidate("a.com", 0.9),
            Candidate("c.com", 0.5),
            Candidate("d.com", 0.1),
        ]
        assert [c.name for c in sort_candidates(candidates)] == ["a.com", "b.com", "c.com", "d.com"]

    def test_select_top_accepts_plain_names(self) -> None:
        selected = select_top(["one.com", Candidate("two.com", 0.3), "three.com"], 2)
        assert selected == [Candidate("one.com"), Candidate("two.com", 0.3)]

    def test_select_top_without_limit_takes_all(self) -> None:
        assert len(select_top(["a.com", "b.com"], None)) == 2


class TestFailureIsolation:
    """One failing candidate never affects its siblings."""

    def test_unexpected_exception_becomes_error_entry(self) -> None:
        verifier = ScriptedVerifier(failures={"bad.com": RuntimeError("resolver crashed")})
        logger_stream = _NullStream()
        logger = EventLogger(output_format="json", output_stream=logger_stream)
        coordinator = BulkCheckCoordinator(verifier=verifier, logger=logger)

        entries = run_batch(coordinator, ["good.com", "bad.com", "fine.com"])

        assert [entry.ok for entry in entries] == [True, False, True]
        assert entries[1].error.code == "unexpected_error"
        assert "RuntimeError" in entries[1].error.message
        assert entries[1].to_dict()["status"] == "error"
        assert any(entry.component == "BulkCheckCoordinator" for entry in logger.entries)

    def test_deadline_mid_batch_marks_only_slow_candidates(self) -> None:
        verifier = ScriptedVerifier(
            delays={"fast1.com": 0.0, "slow.com": 5.0, "fast2.com": 0.01}
        )
        coordinator = BulkCheckCoordinator(verifier=verifier)

        entries = run_batch(coordinator, ["fast1.com", "slow.com", "fast2.com"], timeout=0.2)

        assert entries[0].ok and entries[2].ok
        assert not entries[1].ok
        assert isinstance(entries[1].error, DeadlineExceededError)

    def test_cancelled_context_makes_no_calls(self) -> None:
        verifier = ScriptedVerifier()
        coordinator = BulkCheckCoordinator(verifier=verifier)
        ctx = CheckContext()
        ctx.cancel()

        entries = asyncio.run(coordinator.check_top(ctx, ["a.com", "b.com"]))

        assert len(entries) == 2
        assert all(isinstance(entry.error, CheckCancelledError) for entry in entries)
        assert all(entry.record is None for entry in entries)
        assert verifier.calls == []

    def test_cancel_during_batch(self) -> None:
        verifier = ScriptedVerifier(default_delay=5.0)
        coordinator = BulkCheckCoordinator(verifier=verifier)

        async def scenario():
            ctx = CheckContext.with_timeout(10)
            batch = asyncio.ensure_future(coordinator.check_top(ctx, ["a.com", "b.com"]))
            await asyncio.sleep(0.02)
            ctx.cancel()
            return await batch

        entries = asyncio.run(scenario())

        assert all(isinstance(entry.error, CheckCancelledError) for entry in entries)
        assert not any(isinstance(entry.error, DeadlineExceededError) for entry in entries)


class TestLookalikeBatch:
    """Typo variants with no delegation come back as clean unregistered rows."""

    def test_unregistered_variants(self) -> None:
        resolver = EmptyResolver()
        whois = UnusedWhois()
        verifier = DomainVerifier(resolver=resolver, whois_client=whois)
        coordinator = BulkCheckCoordinator(verifier=verifier)

        entries = run_batch(
            coordinator, [Candidate("g00gle.com", 0.9), Candidate("go0gle.com", 0.8)]
        )

        assert [entry.candidate.name for entry in entries] == ["g00gle.com", "go0gle.com"]
        for entry in entries:
            record = entry.record
            assert entry.ok
            assert record.is_registered is False
            assert record.is_parked is False
            assert record.owner is None
            assert record.a_records == []
            assert record.mx_records == []
        assert whois.calls == []
        assert sorted(resolver.calls) == [("NS", "g00gle.com"), ("NS", "go0gle.com")]


class _NullStream:
    def write(self, text: str) -> int:
        return len(text)

    def flush(self) -> None:
        pass
