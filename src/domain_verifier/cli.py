"""
Command-line interface for the domain verifier.

This module provides the main CLI entry point with commands for:
- check: Verify a single domain
- check-top: Verify the top N ranked candidates from a file
- config: Configuration management
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional, TextIO

from . import __version__
from .config import (
    VerifierConfig,
    apply_env_overrides,
    create_default_config,
    load_config_from_file,
    save_config_to_file,
)
from .context import CheckContext
from .coordinator import BulkCheckCoordinator, sort_candidates
from .domain_validator import DomainValidator, normalize_domain
from .event_logger import EventLogger, parse_level
from .exceptions import CheckCancelledError, ConfigError, ValidationError
from .models import BulkCheckEntry, Candidate
from .verifier import DomainVerifier

DEFAULT_CONFIG_PATH = Path.home() / ".domain_verifier" / "config.json"

TABLE_HEADER = ("#", "VARIANT", "REGISTERED", "OWNER", "A", "MX", "PARKED")


def load_candidates(path: Path) -> list[Candidate]:
    """
    Read ranked candidates from a file.

    Each non-empty line holds a domain and an optional score separated by
    whitespace or a comma. Lines starting with '#' are ignored. Names are
    normalized to canonical FQDNs.

    Raises:
        ValueError: If a name is not a valid domain or a score is not a number
    """
    candidates = []
    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            fields = stripped.replace(",", " ").split()
            score = 0.0
            if len(fields) > 1:
                try:
                    score = float(fields[1])
                except ValueError:
                    raise ValueError(f"line {line_number}: invalid score {fields[1]!r}")
            try:
                name = normalize_domain(fields[0])
            except ValidationError as e:
                raise ValueError(f"line {line_number}: {e.message}: {fields[0]!r}")
            candidates.append(Candidate(name=name, score=score))
    return candidates


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"


def format_table(entries: list[BulkCheckEntry]) -> str:
    """Render bulk results as an aligned text table in input order."""
    rows = [TABLE_HEADER, tuple("-" * len(title) for title in TABLE_HEADER)]
    for index, entry in enumerate(entries, start=1):
        record = entry.record
        if record is None:
            rows.append((str(index), entry.candidate.name, "error", "-", "no", "no", "no"))
            continue
        rows.append((
            str(index),
            entry.candidate.name,
            _yes_no(record.is_registered),
            record.owner or "-",
            _yes_no(record.has_a_records),
            _yes_no(record.has_mx_records),
            _yes_no(record.is_parked),
        ))

    widths = [max(len(row[i]) for row in rows) for i in range(len(TABLE_HEADER))]
    lines = [
        "  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip()
        for row in rows
    ]
    return "\n".join(lines)


def resolve_config(config_path: Optional[str]) -> VerifierConfig:
    """
    Load the configuration used by a command.

    An explicit path must exist; otherwise the default location is tried
    and defaults are used when it is absent. Environment overrides apply
    last.
    """
    config = None
    if config_path:
        config = load_config_from_file(Path(config_path))
        if config is None:
            raise ConfigError(
                code="config_not_found",
                message=f"Could not load config from {config_path}",
                details={"path": config_path},
            )
    else:
        config = load_config_from_file(DEFAULT_CONFIG_PATH)

    return apply_env_overrides(config or create_default_config())


def create_logger(config: VerifierConfig, verbose: bool) -> Optional[EventLogger]:
    if not verbose:
        return None
    return EventLogger(
        output_format=config.logging.output_format,
        level=parse_level(config.logging.level),
    )


async def check_single_domain(
    domain: str,
    config: VerifierConfig,
    timeout: float,
    as_json: bool = False,
    logger: Optional[EventLogger] = None,
    out: TextIO = sys.stdout,
) -> int:
    """
    Verify a single domain and print the record.

    Returns:
        Exit code (0 on success, 1 on validation failure or timeout)
    """
    validation = DomainValidator().validate(domain)
    if not validation.valid:
        print(f"Error: {validation.error.message}: {domain}", file=sys.stderr)
        return 1

    verifier = DomainVerifier(config=config, logger=logger)
    try:
        record = await verifier.verify(
            CheckContext.with_timeout(timeout), validation.canonical_domain
        )
    except CheckCancelledError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    if as_json:
        print(json.dumps(record.to_dict(), indent=2, ensure_ascii=False), file=out)
        return 0

    print(f"Domain:     {record.domain}", file=out)
    print(f"Registered: {_yes_no(record.is_registered)}", file=out)
    print(f"Owner:      {record.owner or '-'}", file=out)
    print(f"A records:  {', '.join(record.a_records) or '-'}", file=out)
    if record.mx_records:
        print("MX records:", file=out)
        for mx in record.mx_records:
            ips = ", ".join(mx.resolved_ips) or "-"
            print(f"  {mx.preference:>5}  {mx.host}  ({ips})", file=out)
    else:
        print("MX records: -", file=out)
    print(f"Parked:     {_yes_no(record.is_parked)}", file=out)
    return 0


async def check_candidate_file(
    candidates_file: Path,
    config: VerifierConfig,
    limit: int,
    timeout: float,
    as_json: bool = False,
    output_file: Optional[Path] = None,
    logger: Optional[EventLogger] = None,
    out: TextIO = sys.stdout,
) -> int:
    """
    Verify the top `limit` candidates from a file.

    Returns:
        Exit code (0 when the batch ran, 1 on input errors)
    """
    try:
        candidates = load_candidates(candidates_file)
    except FileNotFoundError:
        print(f"Error: File not found: {candidates_file}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Error reading candidates: {e}", file=sys.stderr)
        return 1

    if not candidates:
        print("Error: No candidates found in file", file=sys.stderr)
        return 1

    top = sort_candidates(candidates)[:limit]
    print(f"Checking {len(top)} candidate(s)...", file=sys.stderr)

    coordinator = BulkCheckCoordinator(config=config, logger=logger)
    entries = await coordinator.check_top(CheckContext.with_timeout(timeout), top)

    results = [entry.to_dict() for entry in entries]
    if as_json:
        print(json.dumps(results, indent=2, ensure_ascii=False), file=out)
    else:
        print(format_table(entries), file=out)

    errors = sum(1 for entry in entries if not entry.ok)
    print(f"\nChecked: {len(entries)}/{len(candidates)} candidate(s), {errors} error(s)", file=sys.stderr)

    if output_file:
        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            with open(output_file, "w", encoding="utf-8") as f:
                json.dump(results, f, indent=2, ensure_ascii=False)
            print(f"Results written to: {output_file}", file=sys.stderr)
        except OSError as e:
            print(f"Error writing results: {e}", file=sys.stderr)
            return 1

    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Handle the 'check' command."""
    try:
        config = resolve_config(args.config)
    except ConfigError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    try:
        logger = create_logger(config, args.verbose)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    timeout = args.timeout if args.timeout is not None else config.bulk.timeout
    return asyncio.run(check_single_domain(
        domain=args.domain,
        config=config,
        timeout=timeout,
        as_json=args.json,
        logger=logger,
    ))


def cmd_check_top(args: argparse.Namespace) -> int:
    """Handle the 'check-top' command."""
    try:
        config = resolve_config(args.config)
    except ConfigError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    limit = args.count if args.count is not None else config.bulk.default_limit
    if limit < 1:
        print("Error: -n requires a positive integer", file=sys.stderr)
        return 1

    try:
        logger = create_logger(config, args.verbose)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    timeout = args.timeout if args.timeout is not None else config.bulk.timeout
    return asyncio.run(check_candidate_file(
        candidates_file=Path(args.file),
        config=config,
        limit=limit,
        timeout=timeout,
        as_json=args.json,
        output_file=Path(args.output) if args.output else None,
        logger=logger,
    ))


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH

    if args.action == "show":
        try:
            config = load_config_from_file(config_path)
        except ConfigError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1
        if config is None:
            print(f"No configuration found at: {config_path}")
            print("Use 'config init' to create a default configuration.")
            return 1

        print(f"Configuration from: {config_path}")
        print(f"  WHOIS timeout: {config.whois.timeout}s (port {config.whois.port})")
        print(f"  Custom WHOIS servers: {len(config.whois.custom_servers)}")
        print(f"  DNS nameservers: {', '.join(config.dns.nameservers) or 'system'}")
        print(f"  Bulk timeout: {config.bulk.timeout}s, default limit {config.bulk.default_limit}")
        print(f"  Log level: {config.logging.level} ({config.logging.output_format})")
        return 0

    if args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return 1
        try:
            save_config_to_file(create_default_config(), config_path)
        except OSError as e:
            print(f"Error writing configuration: {e}", file=sys.stderr)
            return 1
        print(f"Configuration created at: {config_path}")
        return 0

    return 1


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--timeout", "-t",
        type=float,
        help="Overall deadline in seconds (default: configured bulk timeout)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )
    parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable event logging to stderr",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="domain-verifier",
        description="Concurrent domain registration, ownership and parking checks",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    check_parser = subparsers.add_parser(
        "check",
        help="Verify a single domain",
    )
    check_parser.add_argument(
        "domain",
        help="Domain or URL to check (e.g., example.com)",
    )
    _add_common_arguments(check_parser)
    check_parser.set_defaults(func=cmd_check)

    check_top_parser = subparsers.add_parser(
        "check-top",
        help="Verify the top N ranked candidates from a file",
    )
    check_top_parser.add_argument(
        "file",
        help="File with one 'domain score' pair per line",
    )
    check_top_parser.add_argument(
        "-n", "--count",
        type=int,
        help="Number of top candidates to check (default: configured limit)",
    )
    check_top_parser.add_argument(
        "--output", "-o",
        help="Path to write results as JSON",
    )
    _add_common_arguments(check_top_parser)
    check_top_parser.set_defaults(func=cmd_check_top)

    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
    )
    config_parser.add_argument(
        "action",
        choices=["show", "init"],
        help="Configuration action",
    )
    config_parser.add_argument(
        "--path", "-p",
        help="Path to configuration file",
    )
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
