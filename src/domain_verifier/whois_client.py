"""
WHOIS Client module for owner lookups.

This module provides a raw TCP (port 43) WHOIS client. Every connection
holds a permit from a process-wide pool, so no more than five WHOIS
connections are open at once no matter how many domains are being checked.
Registry responses that refer to a registrar WHOIS server are followed
once, and the registrant is extracted from the richest answer.

Network failures never escape the client: `query` reports them in the
response, and `resolve_owner` degrades them to an empty owner.
"""

import asyncio
import contextlib
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Optional

from .config import DEFAULT_OWNER_FIELDS, DEFAULT_REFERRAL_FIELDS, WHOISConfig
from .context import CheckContext
from .enums import WHOISErrorCode
from .event_logger import EventLogger
from .exceptions import CheckCancelledError, DeadlineExceededError
from .permit_pool import PermitPool
from .tld_registry import whois_server_for

Connector = Callable[
    [str, int], Awaitable[tuple[asyncio.StreamReader, asyncio.StreamWriter]]
]

# Hard cap on concurrent WHOIS connections across the process
MAX_CONCURRENT_CONNECTIONS = 5
WHOIS_PERMITS = PermitPool(MAX_CONCURRENT_CONNECTIONS)

REDACTION_MARKER = "REDACTED"

_REFERRAL_SCHEMES = ("whois://", "rwhois://", "http://", "https://")
_HOST_TERMINATORS = re.compile(r"[:/\s]")


@dataclass
class WHOISError:
    """Error information from a WHOIS query."""

    code: WHOISErrorCode
    message: str


@dataclass
class WHOISResponse:
    """
    Response from a WHOIS query.

    `raw_response` holds whatever text arrived, including a partial
    answer when the connection failed mid-read.
    """

    server: str
    raw_response: str
    error: Optional[WHOISError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def extract_referral_server(
    response: str, fields: Iterable[str] = DEFAULT_REFERRAL_FIELDS
) -> str:
    """
    Find a referral to another WHOIS server in a response.

    Header names match case-insensitively at the start of a line. Scheme
    prefixes and any trailing port or path are stripped.

    Returns:
        Lowercase referral hostname, or an empty string
    """
    fields = list(fields)
    for line in response.splitlines():
        trimmed = line.strip()
        lower = trimmed.lower()
        for name in fields:
            if not lower.startswith(name.lower()):
                continue
            value = trimmed[len(name):].strip()
            for scheme in _REFERRAL_SCHEMES:
                if value.lower().startswith(scheme):
                    value = value[len(scheme):]
                    break
            value = _HOST_TERMINATORS.split(value, maxsplit=1)[0]
            if value:
                return value.lower()
    return ""


def extract_owner(
    response: str, fields: Iterable[str] = DEFAULT_OWNER_FIELDS
) -> str:
    """
    Extract the registrant from a WHOIS response.

    Fields are tried in priority order; for each field the first line
    with a non-empty, non-redacted value wins.

    Returns:
        Owner string, or an empty string
    """
    lines = [line.strip() for line in response.splitlines()]
    for name in fields:
        prefix = name.lower()
        for line in lines:
            if not line.lower().startswith(prefix):
                continue
            value = line[len(name):].strip()
            if value and not value.upper().startswith(REDACTION_MARKER):
                return value
    return ""


class WHOISClient:
    """
    WHOIS client with a global connection cap and referral chasing.

    Per query:
    - waits for a permit (cancellation-aware, never dials without one)
    - dials server:43 under the context deadline, or the configured
      fallback timeout when the context has none
    - sends one query line and reads until the server closes
    """

    def __init__(
        self,
        config: Optional[WHOISConfig] = None,
        connector: Optional[Connector] = None,
        permit_pool: Optional[PermitPool] = None,
        logger: Optional[EventLogger] = None,
    ) -> None:
        """
        Initialize the WHOIS client.

        Args:
            config: WHOIS configuration (timeout, port, field catalogs)
            connector: Coroutine opening a TCP stream pair; defaults to
                asyncio.open_connection
            permit_pool: Pool bounding concurrent connections; defaults to
                the process-wide WHOIS_PERMITS
            logger: Optional event logger
        """
        self._config = config or WHOISConfig()
        self._connector = connector or asyncio.open_connection
        self._permits = permit_pool or WHOIS_PERMITS
        self._logger = logger

    def server_for(self, domain: str) -> str:
        """Return the WHOIS server for the domain's TLD."""
        return whois_server_for(domain, self._config.custom_servers)

    async def query(self, ctx: CheckContext, server: str, domain: str) -> WHOISResponse:
        """
        Send a single WHOIS query.

        Args:
            ctx: Shared check context
            server: WHOIS server hostname
            domain: Domain to query

        Returns:
            WHOISResponse with the text received and any error
        """
        query_ctx = ctx.child(self._config.timeout)
        parts: list[str] = []

        try:
            async with self._permits.acquire(query_ctx):
                await query_ctx.guard(self._exchange(server, domain, parts))
        except DeadlineExceededError:
            return self._failed(
                server, parts, WHOISErrorCode.TIMEOUT, f"WHOIS query to {server} timed out"
            )
        except CheckCancelledError:
            return self._failed(
                server, parts, WHOISErrorCode.CANCELLED, f"WHOIS query to {server} cancelled"
            )
        except (OSError, ValueError) as e:
            return self._failed(
                server, parts, WHOISErrorCode.NETWORK_ERROR, f"WHOIS error from {server}: {e}"
            )

        return WHOISResponse(server=server, raw_response="".join(parts))

    async def _exchange(self, server: str, domain: str, parts: list[str]) -> None:
        """Dial, send the query line and collect response lines into `parts`."""
        reader, writer = await self._connector(server, self._config.port)
        try:
            writer.write(f"{domain}\r\n".encode("utf-8"))
            await writer.drain()

            while True:
                line = await reader.readline()
                if not line:
                    break
                parts.append(line.decode("utf-8", errors="replace").rstrip("\r\n") + "\n")
        finally:
            writer.close()
            # Teardown finishes before the permit is released
            with contextlib.suppress(OSError):
                await writer.wait_closed()

    def _failed(
        self, server: str, parts: list[str], code: WHOISErrorCode, message: str
    ) -> WHOISResponse:
        if self._logger:
            self._logger.debug(
                "WHOISClient",
                message,
                {"server": server, "code": code.value, "bytes_received": sum(map(len, parts))},
            )
        return WHOISResponse(
            server=server,
            raw_response="".join(parts),
            error=WHOISError(code=code, message=message),
        )

    async def resolve_owner(self, ctx: CheckContext, domain: str) -> str:
        """
        Resolve the registrant of a domain, following one referral.

        The referral server's answer is preferred when it names an owner,
        since registrar data is usually richer than registry data.

        Returns:
            Owner string, or an empty string when unknown or unreachable
        """
        server = self.server_for(domain)
        first = await self.query(ctx, server, domain)
        if not first.ok or not first.raw_response:
            return ""

        referral = extract_referral_server(first.raw_response, self._config.referral_fields)
        if referral and referral != server.lower():
            second = await self.query(ctx, referral, domain)
            if second.ok and second.raw_response:
                owner = extract_owner(second.raw_response, self._config.owner_fields)
                if owner:
                    return owner

        return extract_owner(first.raw_response, self._config.owner_fields)
