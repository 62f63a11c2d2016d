"""
Data models for the domain verifier.

This module defines the verification record produced for each domain,
the ranked candidates consumed from the variation generator, and the
per-row entries returned by bulk checks.
"""

from dataclasses import dataclass, field
from typing import Optional

from .enums import EntryStatus
from .exceptions import DomainVerifierError
from .parking import classify_parked


@dataclass
class MXRecord:
    """A mail exchanger for a domain."""

    host: str  # No trailing dot
    preference: int
    resolved_ips: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data: dict = {"host": self.host, "preference": self.preference}
        if self.resolved_ips:
            data["resolved_ips"] = list(self.resolved_ips)
        return data


@dataclass
class VerificationRecord:
    """
    Result of verifying a single domain.

    Registration is taken strictly from NS delegation. The A/MX presence
    flags and the parking verdict are derived from the stored records and
    cannot be set independently.
    """

    domain: str  # Canonical FQDN
    is_registered: bool = False
    owner: Optional[str] = None
    a_records: list[str] = field(default_factory=list)
    mx_records: list[MXRecord] = field(default_factory=list)
    ns_hosts: list[str] = field(default_factory=list)

    @property
    def has_a_records(self) -> bool:
        return len(self.a_records) > 0

    @property
    def has_mx_records(self) -> bool:
        return len(self.mx_records) > 0

    @property
    def is_parked(self) -> bool:
        return classify_parked(self.ns_hosts, self.a_records)

    def to_dict(self) -> dict:
        """
        Serialize the record.

        Empty optional fields are omitted; the boolean flags are always
        present.
        """
        data: dict = {
            "domain": self.domain,
            "is_registered": self.is_registered,
        }
        if self.owner:
            data["owner"] = self.owner
        data["has_a_records"] = self.has_a_records
        if self.a_records:
            data["a_records"] = list(self.a_records)
        data["has_mx_records"] = self.has_mx_records
        if self.mx_records:
            data["mx_records"] = [mx.to_dict() for mx in self.mx_records]
        data["is_parked"] = self.is_parked
        return data


@dataclass(frozen=True)
class Candidate:
    """A ranked domain variation produced by the generator."""

    name: str
    score: float = 0.0


@dataclass
class BulkCheckEntry:
    """One row of a bulk check: a record or the error that replaced it."""

    candidate: Candidate
    record: Optional[VerificationRecord] = None
    error: Optional[DomainVerifierError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.record is not None

    @property
    def status(self) -> EntryStatus:
        return EntryStatus.OK if self.ok else EntryStatus.ERROR

    def to_dict(self) -> dict:
        data: dict = {
            "candidate": self.candidate.name,
            "score": self.candidate.score,
            "status": self.status.value,
        }
        if self.record is not None:
            data["record"] = self.record.to_dict()
        if self.error is not None:
            data["error"] = self.error.to_dict()
        return data
