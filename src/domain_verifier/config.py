"""
Configuration dataclasses for the domain verifier.

This module defines the configuration structures used throughout the
system (WHOIS client, DNS resolver, bulk checks and logging) together with
helpers to load and save them as JSON and to apply environment overrides.
"""

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .event_logger import parse_level
from .exceptions import ConfigError

# Referral header variants, matched case-insensitively at line start
DEFAULT_REFERRAL_FIELDS: tuple[str, ...] = (
    "Registrar WHOIS Server:",
    "ReferralServer:",
    "Whois Server:",
    "refer:",
)

# Owner fields in priority order, matched case-insensitively at line start
DEFAULT_OWNER_FIELDS: tuple[str, ...] = (
    "Registrant Organization:",
    "Registrant Name:",
    "registrant:",
    "org-name:",
    "Organisation:",
    "Organization:",
    "Registrant:",
    "holder:",
)

ENV_PREFIX = "DOMAIN_VERIFIER_"


@dataclass
class WHOISConfig:
    """WHOIS client configuration."""

    timeout: float = 10.0
    port: int = 43
    custom_servers: dict[str, str] = field(default_factory=dict)
    referral_fields: list[str] = field(
        default_factory=lambda: list(DEFAULT_REFERRAL_FIELDS)
    )
    owner_fields: list[str] = field(
        default_factory=lambda: list(DEFAULT_OWNER_FIELDS)
    )


@dataclass
class DNSConfig:
    """DNS resolver configuration."""

    nameservers: list[str] = field(default_factory=list)  # Empty: system resolvers
    timeout: float = 5.0
    tries: int = 2


@dataclass
class BulkConfig:
    """Bulk check configuration."""

    timeout: float = 120.0
    default_limit: int = 100


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class VerifierConfig:
    """Main configuration combining all sub-configurations."""

    whois: WHOISConfig = field(default_factory=WHOISConfig)
    dns: DNSConfig = field(default_factory=DNSConfig)
    bulk: BulkConfig = field(default_factory=BulkConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def create_default_config() -> VerifierConfig:
    """Create a configuration with default settings."""
    return VerifierConfig()


OUTPUT_FORMATS = ("json", "text", "both")


def _str_list(value, name: str) -> list[str]:
    """Return a copy of a list of non-empty strings, rejecting anything else."""
    if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
        raise TypeError(f"{name} must be a list of non-empty strings")
    return list(value)


def _log_level(value) -> str:
    if not isinstance(value, str):
        raise TypeError("logging.level must be a string")
    return parse_level(value).value


def _output_format(value) -> str:
    if value not in OUTPUT_FORMATS:
        raise ValueError(f"logging.output_format must be one of {', '.join(OUTPUT_FORMATS)}")
    return value


def config_from_dict(data: dict) -> VerifierConfig:
    """
    Build a configuration from a parsed JSON document.

    Missing sections and keys fall back to their defaults.

    Raises:
        ConfigError: If a section or value has the wrong shape
    """
    try:
        whois_data = data.get("whois", {})
        dns_data = data.get("dns", {})
        bulk_data = data.get("bulk", {})
        logging_data = data.get("logging", {})

        custom_servers = whois_data.get("custom_servers", {})
        if not isinstance(custom_servers, dict) or not all(
            isinstance(server, str) and server for server in custom_servers.values()
        ):
            raise TypeError("whois.custom_servers must map TLDs to server hostnames")

        whois = WHOISConfig(
            timeout=float(whois_data.get("timeout", 10.0)),
            port=int(whois_data.get("port", 43)),
            custom_servers={
                str(tld).lower(): server for tld, server in custom_servers.items()
            },
            referral_fields=_str_list(
                whois_data.get("referral_fields", list(DEFAULT_REFERRAL_FIELDS)),
                "whois.referral_fields",
            ),
            owner_fields=_str_list(
                whois_data.get("owner_fields", list(DEFAULT_OWNER_FIELDS)),
                "whois.owner_fields",
            ),
        )
        dns = DNSConfig(
            nameservers=_str_list(dns_data.get("nameservers", []), "dns.nameservers"),
            timeout=float(dns_data.get("timeout", 5.0)),
            tries=int(dns_data.get("tries", 2)),
        )
        bulk = BulkConfig(
            timeout=float(bulk_data.get("timeout", 120.0)),
            default_limit=int(bulk_data.get("default_limit", 100)),
        )
        logging_config = LoggingConfig(
            level=_log_level(logging_data.get("level", "info")),
            output_format=_output_format(logging_data.get("output_format", "text")),
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigError(
            code="invalid_config",
            message=f"Invalid configuration: {e}",
            details={"error": str(e)},
        )

    return VerifierConfig(whois=whois, dns=dns, bulk=bulk, logging=logging_config)


def load_config_from_file(config_path: Path) -> Optional[VerifierConfig]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        VerifierConfig, or None if the file does not exist

    Raises:
        ConfigError: If the file is not valid JSON or has the wrong shape
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return None
    except json.JSONDecodeError as e:
        raise ConfigError(
            code="invalid_json",
            message=f"Could not parse {config_path}: {e}",
            details={"path": str(config_path)},
        )

    if not isinstance(data, dict):
        raise ConfigError(
            code="invalid_config",
            message="Configuration root must be an object",
            details={"path": str(config_path)},
        )
    return config_from_dict(data)


def save_config_to_file(config: VerifierConfig, config_path: Path) -> None:
    """Save configuration to a JSON file, creating parent directories."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(asdict(config), f, indent=2, ensure_ascii=False)


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(ENV_PREFIX + name, str(default)))
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(ENV_PREFIX + name, str(default)))
    except ValueError:
        return default


def _level_env(name: str, default: str) -> str:
    try:
        return parse_level(os.getenv(ENV_PREFIX + name, default)).value
    except ValueError:
        return default


def apply_env_overrides(
    config: VerifierConfig, dotenv_path: Optional[Path] = None
) -> VerifierConfig:
    """
    Apply DOMAIN_VERIFIER_* environment variables to a configuration.

    A .env file is loaded first without overriding variables that are
    already set. Values that fail to parse keep the configured value.
    """
    load_dotenv(dotenv_path=dotenv_path, override=False)

    config.whois.timeout = _float_env("WHOIS_TIMEOUT", config.whois.timeout)
    config.whois.port = _int_env("WHOIS_PORT", config.whois.port)
    config.dns.timeout = _float_env("DNS_TIMEOUT", config.dns.timeout)
    config.dns.tries = _int_env("DNS_TRIES", config.dns.tries)
    config.bulk.timeout = _float_env("BULK_TIMEOUT", config.bulk.timeout)
    config.bulk.default_limit = _int_env("LIMIT", config.bulk.default_limit)

    nameservers = os.getenv(ENV_PREFIX + "NAMESERVERS", "").strip()
    if nameservers:
        config.dns.nameservers = [
            ns.strip() for ns in nameservers.replace(";", ",").split(",") if ns.strip()
        ]

    config.logging.level = _level_env("LOG_LEVEL", config.logging.level)
    log_format = os.getenv(ENV_PREFIX + "LOG_FORMAT", "").strip().lower()
    if log_format in OUTPUT_FORMATS:
        config.logging.output_format = log_format

    return config
