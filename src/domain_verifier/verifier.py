"""
Domain Verifier for the domain verification engine.

This module coordinates the per-domain check. It integrates:
- the DNS resolver adapter (NS, A and MX lookups)
- the WHOIS client (registrant resolution with referral chasing)
- the parking classifier (via the derived VerificationRecord.is_parked)

Registration is decided by NS delegation alone. A domain without NS
records gets no further lookups, so its record carries no addresses,
mail exchangers or owner.
"""

import asyncio
import time
from typing import Optional

from .config import VerifierConfig
from .context import CheckContext
from .domain_validator import normalize_domain
from .event_logger import EventLogger
from .models import VerificationRecord
from .parking import parking_provider
from .resolver import DNSResolver
from .whois_client import WHOISClient


class DomainVerifier:
    """
    Verifies a single canonical domain.

    Every network call runs under the caller's CheckContext, so a check
    never outlives the shared deadline. DNS and WHOIS failures degrade to
    absent data; only a finished context makes `verify` raise.
    """

    def __init__(
        self,
        config: Optional[VerifierConfig] = None,
        resolver: Optional[DNSResolver] = None,
        whois_client: Optional[WHOISClient] = None,
        logger: Optional[EventLogger] = None,
    ) -> None:
        """
        Initialize the verifier.

        Args:
            config: Verifier configuration
            resolver: Optional resolver adapter (built from config if omitted)
            whois_client: Optional WHOIS client (built from config if omitted)
            logger: Optional event logger
        """
        self._config = config or VerifierConfig()
        self._logger = logger
        self._resolver = resolver or DNSResolver(self._config.dns, logger=logger)
        self._whois_client = whois_client or WHOISClient(self._config.whois, logger=logger)

    @property
    def resolver(self) -> DNSResolver:
        return self._resolver

    @property
    def whois_client(self) -> WHOISClient:
        return self._whois_client

    async def verify(self, ctx: CheckContext, domain: str) -> VerificationRecord:
        """
        Verify a canonical domain.

        Args:
            ctx: Shared check context
            domain: Canonical FQDN (already normalized upstream)

        Returns:
            VerificationRecord for the domain

        Raises:
            CheckCancelledError: If the context was done before the check
                started, or its deadline passed while the check ran
        """
        ctx.raise_if_done()
        start_time = time.perf_counter()
        self._log_debug("Starting check", {"domain": domain})

        record = VerificationRecord(domain=domain)
        record.ns_hosts = await self._resolver.lookup_ns(ctx, domain)
        record.is_registered = len(record.ns_hosts) > 0

        if record.is_registered:
            a_records, mx_records, owner = await asyncio.gather(
                self._resolver.lookup_a(ctx, domain),
                self._resolver.lookup_mx(ctx, domain),
                self._whois_client.resolve_owner(ctx, domain),
            )
            record.a_records = a_records
            record.mx_records = mx_records
            record.owner = owner or None

        # Lookups that hit the deadline came back empty; don't report them
        ctx.raise_if_done()

        self._log_info(
            f"Check completed for {domain}",
            {
                "domain": domain,
                "registered": record.is_registered,
                "parked": record.is_parked,
                "parking_provider": parking_provider(record.ns_hosts, record.a_records),
                "a_records": len(record.a_records),
                "mx_records": len(record.mx_records),
                "owner_found": record.owner is not None,
                "duration_ms": (time.perf_counter() - start_time) * 1000,
            },
        )
        return record

    def _log_info(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.info("DomainVerifier", message, data)

    def _log_debug(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.debug("DomainVerifier", message, data)


async def verify_domain(
    domain: str,
    timeout: Optional[float] = None,
    config: Optional[VerifierConfig] = None,
    logger: Optional[EventLogger] = None,
) -> VerificationRecord:
    """
    Normalize and verify a raw domain or URL in one call.

    `timeout` defaults to the configured bulk timeout.

    Raises:
        ValidationError: If the input is not a valid domain name
        CheckCancelledError: If the timeout elapses during the check
    """
    canonical = normalize_domain(domain)
    config = config or VerifierConfig()
    if timeout is None:
        timeout = config.bulk.timeout
    verifier = DomainVerifier(config=config, logger=logger)
    return await verifier.verify(CheckContext.with_timeout(timeout), canonical)
