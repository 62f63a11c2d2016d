"""
Domain validation and normalization module.

Turns raw user input (a domain, possibly mixed-case, internationalized or
wrapped in a URL) into the canonical FQDN the verification core expects.
The core itself never re-validates; this is used at the CLI boundary.
"""

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

import idna

from .enums import DomainValidationErrorCode
from .exceptions import ValidationError

MAX_DOMAIN_LENGTH = 253

# Dot-separated hostname labels followed by an alphabetic or IDNA TLD
FQDN_PATTERN = re.compile(
    r"^([a-z0-9]([a-z0-9\-]{0,61}[a-z0-9])?\.)+"
    r"([a-z]{2,63}|xn--[a-z0-9\-]{1,59})$"
)


@dataclass
class DomainValidationError:
    """Structured error information for domain validation failures."""

    code: DomainValidationErrorCode
    message: str
    details: dict


@dataclass
class DomainValidationResult:
    """Result of domain validation operation."""

    valid: bool
    canonical_domain: Optional[str]
    error: Optional[DomainValidationError]


class DomainValidator:
    """
    Validates and normalizes domain names.

    Handles:
    - Extraction of the hostname from URLs
    - Conversion to lowercase canonical form
    - IDNA encoding for international characters
    - Length and hostname label rules
    """

    def validate(self, raw_domain: str) -> DomainValidationResult:
        """
        Validate and normalize a domain string.

        Args:
            raw_domain: The raw domain string or URL to validate

        Returns:
            DomainValidationResult with validation status and canonical form or error
        """
        try:
            canonical = self.normalize_to_canonical(raw_domain)
        except ValidationError as e:
            return DomainValidationResult(
                valid=False,
                canonical_domain=None,
                error=DomainValidationError(
                    code=DomainValidationErrorCode(e.code),
                    message=e.message,
                    details=e.details,
                ),
            )
        return DomainValidationResult(valid=True, canonical_domain=canonical, error=None)

    def normalize_to_canonical(self, raw_domain: str) -> str:
        """
        Convert input to a canonical FQDN.

        Raises:
            ValidationError: If the input cannot be normalized
        """
        if not raw_domain or not raw_domain.strip():
            raise self._error(
                DomainValidationErrorCode.EMPTY_INPUT, "Domain input is empty", raw_domain
            )

        domain = raw_domain.strip()

        if "://" in domain:
            try:
                hostname = urlsplit(domain).hostname
            except ValueError:
                hostname = None
            if not hostname:
                raise self._error(
                    DomainValidationErrorCode.MALFORMED_URL,
                    "Malformed URL for domain name",
                    raw_domain,
                )
            domain = hostname

        domain = domain.lower()
        if domain.endswith("."):
            domain = domain[:-1]

        if any(ord(c) > 127 for c in domain):
            try:
                domain = idna.encode(domain, uts46=True).decode("ascii")
            except idna.IDNAError as e:
                raise self._error(
                    DomainValidationErrorCode.IDNA_ERROR,
                    f"IDNA encoding failed: {e}",
                    raw_domain,
                )

        if len(domain) > MAX_DOMAIN_LENGTH:
            raise self._error(
                DomainValidationErrorCode.TOO_LONG,
                f"Domain name is longer than {MAX_DOMAIN_LENGTH} characters",
                raw_domain,
            )

        if not FQDN_PATTERN.fullmatch(domain):
            raise self._error(
                DomainValidationErrorCode.INVALID_NAME, "Invalid domain name", raw_domain
            )

        return domain

    @staticmethod
    def _error(code: DomainValidationErrorCode, message: str, raw: str) -> ValidationError:
        return ValidationError(code=code.value, message=message, details={"raw_input": raw})


def normalize_domain(raw_domain: str) -> str:
    """Normalize raw input to a canonical FQDN, raising ValidationError."""
    return DomainValidator().normalize_to_canonical(raw_domain)
