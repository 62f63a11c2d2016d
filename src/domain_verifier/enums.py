"""
Enumeration types for the domain verifier.

These enums provide type-safe constants for status codes, error codes,
and configuration options throughout the system.
"""

from enum import Enum


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures."""

    EMPTY_INPUT = "empty_input"
    MALFORMED_URL = "malformed_url"
    TOO_LONG = "too_long"
    INVALID_NAME = "invalid_name"
    IDNA_ERROR = "idna_error"


class WHOISErrorCode(Enum):
    """Error codes for WHOIS client operations."""

    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


class EntryStatus(Enum):
    """Per-row status of a bulk check."""

    OK = "ok"
    ERROR = "error"
