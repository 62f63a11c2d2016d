"""
DNS Resolver adapter.

Thin asynchronous wrapper over aiodns for the three lookups a domain
check needs: NS, A and MX. Each lookup is independent and never raises;
NXDOMAIN, timeouts, network errors and context cancellation all come back
as "no records".
"""

import asyncio
import ipaddress
from typing import Any, Callable, Optional

import aiodns

from .config import DNSConfig
from .context import CheckContext
from .event_logger import EventLogger
from .exceptions import CheckCancelledError
from .models import MXRecord

# Errors that mean "no records" for a single lookup
LOOKUP_ERRORS = (aiodns.error.DNSError, CheckCancelledError, OSError, ValueError)


def _strip_dot(host: str) -> str:
    return host[:-1] if host.endswith(".") else host


def _is_ipv4(value: str) -> bool:
    try:
        return ipaddress.ip_address(value).version == 4
    except ValueError:
        return False


class DNSResolver:
    """
    Resolver adapter for NS, A and MX lookups.

    The underlying aiodns resolver is created lazily inside the running
    event loop and recreated if the adapter is used from another loop.
    """

    def __init__(
        self,
        config: Optional[DNSConfig] = None,
        resolver_factory: Optional[Callable[[], Any]] = None,
        logger: Optional[EventLogger] = None,
    ) -> None:
        """
        Initialize the adapter.

        Args:
            config: DNS configuration (nameservers, timeout, tries)
            resolver_factory: Optional factory for an aiodns-compatible
                resolver exposing `query(name, qtype)`
            logger: Optional event logger
        """
        self._config = config or DNSConfig()
        self._resolver_factory = resolver_factory or self._create_aiodns_resolver
        self._logger = logger
        self._resolver: Any = None
        self._resolver_loop: Optional[asyncio.AbstractEventLoop] = None

    def _create_aiodns_resolver(self) -> aiodns.DNSResolver:
        kwargs: dict[str, Any] = {
            "timeout": self._config.timeout,
            "tries": self._config.tries,
        }
        if self._config.nameservers:
            kwargs["nameservers"] = list(self._config.nameservers)
        return aiodns.DNSResolver(**kwargs)

    def _get_resolver(self) -> Any:
        loop = asyncio.get_running_loop()
        if self._resolver is None or self._resolver_loop is not loop:
            self._resolver = self._resolver_factory()
            self._resolver_loop = loop
        return self._resolver

    async def _query(self, ctx: CheckContext, domain: str, qtype: str) -> list[Any]:
        resolver = self._get_resolver()
        try:
            result = await ctx.guard(resolver.query(domain, qtype))
        except LOOKUP_ERRORS as e:
            if self._logger:
                self._logger.debug(
                    "DNSResolver",
                    f"{qtype} lookup failed for {domain}",
                    {"domain": domain, "qtype": qtype, "error": str(e)},
                )
            return []
        return list(result or [])

    async def lookup_ns(self, ctx: CheckContext, domain: str) -> list[str]:
        """Return the domain's nameserver hosts without trailing dots."""
        records = await self._query(ctx, domain, "NS")
        return [_strip_dot(record.host) for record in records if record.host]

    async def lookup_a(self, ctx: CheckContext, domain: str) -> list[str]:
        """Return the domain's IPv4 addresses; anything else is dropped."""
        records = await self._query(ctx, domain, "A")
        return [record.host for record in records if _is_ipv4(record.host)]

    async def lookup_mx(self, ctx: CheckContext, domain: str) -> list[MXRecord]:
        """
        Return the domain's mail exchangers sorted by preference.

        Each exchanger's IPv4 addresses are resolved concurrently. Ties in
        preference keep the order the resolver returned them in.
        """
        records = await self._query(ctx, domain, "MX")
        mx_records = [
            MXRecord(host=_strip_dot(record.host), preference=int(record.priority))
            for record in records
            if record.host
        ]
        mx_records.sort(key=lambda mx: mx.preference)

        resolved = await asyncio.gather(
            *(self.lookup_a(ctx, mx.host) for mx in mx_records)
        )
        for mx, ips in zip(mx_records, resolved):
            mx.resolved_ips = ips
        return mx_records
