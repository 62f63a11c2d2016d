"""
Domain Verifier - concurrent registration, ownership and parking checks.

This package verifies candidate domain names: NS delegation decides
registration, WHOIS (with referral chasing, under a global connection cap)
names the owner, A/MX lookups reveal web and mail presence, and known
parking nameservers and IPs flag placeholder domains. Batches of ranked
candidates are checked concurrently under one shared deadline.
"""

__version__ = "0.1.0"
__author__ = "Domain Verifier Team"

from domain_verifier.exceptions import (
    DomainVerifierError,
    ValidationError,
    ConfigError,
    CheckCancelledError,
    DeadlineExceededError,
)
from domain_verifier.enums import (
    LogLevel,
    DomainValidationErrorCode,
    WHOISErrorCode,
    EntryStatus,
)
from domain_verifier.config import (
    WHOISConfig,
    DNSConfig,
    BulkConfig,
    LoggingConfig,
    VerifierConfig,
    create_default_config,
    load_config_from_file,
    save_config_to_file,
    apply_env_overrides,
)
from domain_verifier.context import CheckContext
from domain_verifier.parking import (
    PARKING_NAMESERVER_SUFFIXES,
    PARKING_IP_PREFIXES,
    classify_parked,
    is_parking_nameserver,
    is_parking_ip,
    parking_provider,
)
from domain_verifier.models import (
    MXRecord,
    VerificationRecord,
    Candidate,
    BulkCheckEntry,
)
from domain_verifier.domain_validator import (
    DomainValidator,
    DomainValidationResult,
    DomainValidationError,
    normalize_domain,
)
from domain_verifier.event_logger import (
    EventLogger,
    LogEntry,
)
from domain_verifier.permit_pool import PermitPool
from domain_verifier.tld_registry import (
    WHOIS_SERVERS,
    whois_server_for,
)
from domain_verifier.resolver import DNSResolver
from domain_verifier.whois_client import (
    WHOISClient,
    WHOISResponse,
    WHOISError,
    WHOIS_PERMITS,
    MAX_CONCURRENT_CONNECTIONS,
    extract_owner,
    extract_referral_server,
)
from domain_verifier.verifier import (
    DomainVerifier,
    verify_domain,
)
from domain_verifier.coordinator import (
    BulkCheckCoordinator,
    check_top,
    sort_candidates,
)
from domain_verifier.cli import main as cli_main

__all__ = [
    # Exceptions
    "DomainVerifierError",
    "ValidationError",
    "ConfigError",
    "CheckCancelledError",
    "DeadlineExceededError",
    # Enums
    "LogLevel",
    "DomainValidationErrorCode",
    "WHOISErrorCode",
    "EntryStatus",
    # Configuration
    "WHOISConfig",
    "DNSConfig",
    "BulkConfig",
    "LoggingConfig",
    "VerifierConfig",
    "create_default_config",
    "load_config_from_file",
    "save_config_to_file",
    "apply_env_overrides",
    # Context
    "CheckContext",
    # Parking
    "PARKING_NAMESERVER_SUFFIXES",
    "PARKING_IP_PREFIXES",
    "classify_parked",
    "is_parking_nameserver",
    "is_parking_ip",
    "parking_provider",
    # Models
    "MXRecord",
    "VerificationRecord",
    "Candidate",
    "BulkCheckEntry",
    # Domain Validator
    "DomainValidator",
    "DomainValidationResult",
    "DomainValidationError",
    "normalize_domain",
    # Event Logger
    "EventLogger",
    "LogEntry",
    # Permit Pool
    "PermitPool",
    # TLD Registry
    "WHOIS_SERVERS",
    "whois_server_for",
    # Resolver
    "DNSResolver",
    # WHOIS Client
    "WHOISClient",
    "WHOISResponse",
    "WHOISError",
    "WHOIS_PERMITS",
    "MAX_CONCURRENT_CONNECTIONS",
    "extract_owner",
    "extract_referral_server",
    # Verifier
    "DomainVerifier",
    "verify_domain",
    # Coordinator
    "BulkCheckCoordinator",
    "check_top",
    "sort_candidates",
    # CLI
    "cli_main",
]
