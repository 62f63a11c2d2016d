"""
Bulk Check Coordinator.

Verifies the top N ranked candidates concurrently under one shared
deadline. There is one task per candidate and no worker pool; the only
throttle is the WHOIS client's global permit pool. Results come back in
input order because each task writes to its own pre-allocated slot.
"""

import asyncio
import time
from typing import Iterable, Optional, Sequence, Union

from .config import VerifierConfig
from .context import CheckContext
from .event_logger import EventLogger
from .exceptions import DomainVerifierError
from .models import BulkCheckEntry, Candidate
from .verifier import DomainVerifier

CandidateLike = Union[Candidate, str]


def _as_candidate(item: CandidateLike) -> Candidate:
    if isinstance(item, Candidate):
        return item
    return Candidate(name=item)


def sort_candidates(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Sort candidates by descending score, keeping input order on ties."""
    return sorted(candidates, key=lambda candidate: candidate.score, reverse=True)


def select_top(candidates: Sequence[CandidateLike], limit: Optional[int]) -> list[Candidate]:
    """Take the first `limit` candidates; None or a non-positive limit takes all."""
    selected = candidates if limit is None or limit <= 0 else candidates[:limit]
    return [_as_candidate(item) for item in selected]


class BulkCheckCoordinator:
    """
    Runs the domain verifier over a ranked candidate batch.

    A failure of one candidate (including the shared deadline elapsing
    while it was in flight) becomes an error entry for that candidate
    only; its siblings carry on.
    """

    def __init__(
        self,
        verifier: Optional[DomainVerifier] = None,
        config: Optional[VerifierConfig] = None,
        logger: Optional[EventLogger] = None,
    ) -> None:
        self._config = config or VerifierConfig()
        self._logger = logger
        self._verifier = verifier or DomainVerifier(config=self._config, logger=logger)

    @property
    def verifier(self) -> DomainVerifier:
        return self._verifier

    async def check_top(
        self,
        ctx: CheckContext,
        candidates: Sequence[CandidateLike],
        limit: Optional[int] = None,
    ) -> list[BulkCheckEntry]:
        """
        Verify the first `limit` candidates concurrently.

        Args:
            ctx: Shared check context for the whole batch
            candidates: Candidates already sorted by the caller
            limit: Number of candidates to check (None for all)

        Returns:
            One BulkCheckEntry per selected candidate, in input order
        """
        selected = select_top(candidates, limit)

        if ctx.done:
            # Nothing is dialed or resolved for an already finished context
            return [BulkCheckEntry(candidate=candidate, error=ctx.error()) for candidate in selected]

        start_time = time.perf_counter()
        results: list[Optional[BulkCheckEntry]] = [None] * len(selected)

        async def run_one(index: int, candidate: Candidate) -> None:
            try:
                record = await ctx.guard(self._verifier.verify(ctx, candidate.name))
            except DomainVerifierError as e:
                results[index] = BulkCheckEntry(candidate=candidate, error=e)
            except Exception as e:
                if self._logger:
                    self._logger.log_error(
                        "BulkCheckCoordinator",
                        f"Unexpected failure checking {candidate.name}",
                        error=e,
                    )
                results[index] = BulkCheckEntry(
                    candidate=candidate,
                    error=DomainVerifierError(
                        code="unexpected_error",
                        message=f"{type(e).__name__}: {e}",
                        details={"domain": candidate.name},
                    ),
                )
            else:
                results[index] = BulkCheckEntry(candidate=candidate, record=record)

        await asyncio.gather(*(run_one(i, c) for i, c in enumerate(selected)))

        entries = [entry for entry in results if entry is not None]
        if self._logger:
            self._logger.info(
                "BulkCheckCoordinator",
                f"Checked {len(entries)} candidate(s)",
                {
                    "checked": len(entries),
                    "errors": sum(1 for entry in entries if not entry.ok),
                    "registered": sum(
                        1 for entry in entries if entry.record and entry.record.is_registered
                    ),
                    "duration_ms": (time.perf_counter() - start_time) * 1000,
                },
            )
        return entries


async def check_top(
    candidates: Sequence[CandidateLike],
    limit: Optional[int] = None,
    timeout: Optional[float] = None,
    config: Optional[VerifierConfig] = None,
    logger: Optional[EventLogger] = None,
) -> list[BulkCheckEntry]:
    """
    Verify the top candidates with a fresh context.

    `timeout` defaults to the configured bulk timeout.
    """
    config = config or VerifierConfig()
    if timeout is None:
        timeout = config.bulk.timeout
    coordinator = BulkCheckCoordinator(config=config, logger=logger)
    return await coordinator.check_top(CheckContext.with_timeout(timeout), candidates, limit)
