"""
Exception classes for the domain verifier.

All exceptions inherit from DomainVerifierError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class DomainVerifierError(Exception):
    """Base exception for all domain verifier errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainVerifierError):
    """Raised when a raw domain cannot be normalized."""

    pass


class ConfigError(DomainVerifierError):
    """Raised when a configuration file is malformed."""

    pass


class CheckCancelledError(DomainVerifierError):
    """Raised when the shared check context is cancelled."""

    def __init__(
        self,
        message: str = "check cancelled",
        details: Optional[dict] = None,
        code: str = "cancelled",
    ) -> None:
        super().__init__(code, message, details)


class DeadlineExceededError(CheckCancelledError):
    """Raised when the shared check deadline elapses."""

    def __init__(
        self,
        message: str = "deadline exceeded",
        details: Optional[dict] = None,
    ) -> None:
        super().__init__(message, details, code="deadline_exceeded")
