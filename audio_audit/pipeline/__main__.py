#!/usr/bin/env python3
"""
CLI interface for the audio storage audit.

Checks that every audio file referenced by the content database exists in the
storage bucket and writes one CSV per category listing the missing words:
    reports/vocab[-<course>].csv
    reports/activities[-<course>].csv

Usage:
    uv run -m audio_audit.pipeline
    uv run -m audio_audit.pipeline --categories vocab --course jp-101
    uv run -m audio_audit.pipeline --max-rate 20 --concurrency 10 --limit 2000
    uv run -m audio_audit.pipeline --local-dir ./bucket-mirror --verbose
    uv run -m audio_audit.pipeline --dry-run
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import Optional, Sequence

from sqlalchemy.engine import Engine

from audio_audit.db import check_database_connection, create_db_engine
from audio_audit.errors import ConfigurationError
from audio_audit.logger import setup_logging
from .config import CATEGORIES, AuditConfig
from .orchestrator import CategoryOutcome, build_categories, build_storage, run_audit

logger = logging.getLogger("audit.cli")


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Audio storage audit - lists database words whose audio file is missing from storage",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration is read from the environment (or a .env file) and can be
overridden by the options below:
  DATABASE_URL              Content database URL (required)
  BUCKET_NAME               Bucket holding the audio files
  BUCKET_ENDPOINT           S3-compatible endpoint URL (optional)
  BUCKET_KEY_ID             Access key id
  BUCKET_ACCESS_KEY         Secret access key
  BUCKET_REGION             Bucket region (optional)
  LOCAL_STORAGE_DIR         Probe a local mirror instead of the bucket
  AUDIT_COURSE              Course tag filter
  AUDIT_MAX_RATE            Max storage requests per second (default: 50)
  AUDIT_CONCURRENCY         Max checks in flight (default: 20)
  AUDIT_VOCAB_LIMIT         Max vocab records to check
  AUDIT_ACTIVITIES_LIMIT    Max activity records to check
  AUDIO_PREFIXES            Comma separated directories probed in order
  AUDIT_CHECK_TIMEOUT       Per-request timeout in seconds (default: 30)
  AUDIT_OUTPUT_DIR          Report directory (default: reports)

Examples:
  uv run -m audio_audit.pipeline --categories vocab activities
  uv run -m audio_audit.pipeline --course jp-101 --limit 500
  uv run -m audio_audit.pipeline --max-rate 0        # no rate limit

Notes:
  - A category whose database query fails produces no CSV; other categories still run
  - Checks that fail (network, permissions) are logged and listed in
    <category>-inconclusive.csv, never reported as missing
  - Logs written to logs/audit.log
        """,
    )

    scope_group = parser.add_argument_group("scope")
    scope_group.add_argument(
        "--categories",
        nargs="+",
        choices=CATEGORIES,
        metavar="NAME",
        help=f"Categories to audit (default: {' '.join(CATEGORIES)})",
    )
    scope_group.add_argument(
        "--course",
        type=str,
        metavar="TAG",
        help="Only audit records of this course",
    )
    scope_group.add_argument(
        "--limit",
        type=int,
        metavar="N",
        help="Check at most N records per category",
    )

    throughput_group = parser.add_argument_group("throughput")
    throughput_group.add_argument(
        "--max-rate",
        type=float,
        metavar="R",
        help="Max storage requests per second, 0 for unlimited",
    )
    throughput_group.add_argument(
        "--concurrency",
        type=int,
        metavar="K",
        help="Max checks in flight",
    )
    throughput_group.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="Overall time budget; once spent, no new checks are issued and partial reports are written",
    )

    options_group = parser.add_argument_group("options")
    options_group.add_argument(
        "--output-dir",
        type=str,
        metavar="DIR",
        help="Directory receiving the CSV reports",
    )
    options_group.add_argument(
        "--local-dir",
        type=str,
        metavar="DIR",
        help="Probe a local mirror of the bucket instead of cloud storage",
    )
    options_group.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate configuration and show what would be audited",
    )
    options_group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging output",
    )

    return parser.parse_args(argv)


def apply_overrides(config: AuditConfig, args: argparse.Namespace) -> AuditConfig:
    """Apply command-line options on top of the environment configuration."""
    if args.categories:
        config.categories = list(args.categories)
    if args.course:
        config.course = args.course
    if args.limit is not None:
        config.vocab_limit = args.limit
        config.activities_limit = args.limit
    if args.max_rate is not None:
        config.max_rate = args.max_rate if args.max_rate > 0 else None
    if args.concurrency is not None:
        config.concurrency = args.concurrency
    if args.output_dir:
        config.output_dir = args.output_dir
    if args.local_dir:
        config.local_storage_dir = args.local_dir
    return config


def print_dry_run_summary(config: AuditConfig) -> None:
    print("=" * 80)
    print("DRY RUN - No storage request will be made")
    print("=" * 80)
    print(f"Categories:  {', '.join(config.categories)}")
    print(f"Course:      {config.course or 'all'}")
    for name in config.categories:
        print(f"  {name} limit: {config.limit_for(name) or 'none'}")
    storage = (
        f"local mirror {config.local_storage_dir}"
        if config.use_local_storage
        else f"bucket {config.bucket_name}"
    )
    print(f"Storage:     {storage}")
    print(f"Prefixes:    {', '.join(config.audio_prefixes)}")
    print(f"Max rate:    {config.max_rate or 'unlimited'} req/s")
    print(f"Concurrency: {config.concurrency}")
    print(f"Reports in:  {config.output_dir}")
    print("=" * 80)


def print_audit_summary(outcomes: list[CategoryOutcome]) -> None:
    print(f"\n{'=' * 60}")
    print("AUDIT SUMMARY")
    print(f"{'=' * 60}")
    for outcome in outcomes:
        if not outcome.succeeded:
            print(f"✗ {outcome.name}: FAILED - {outcome.error}")
            continue
        summary = outcome.summary
        partial = " (partial)" if summary.cancelled else ""
        print(
            f"✓ {outcome.name}{partial}: {summary.total} checked, "
            f"{summary.missing_count} missing, {summary.inconclusive_count} inconclusive"
        )
        print(f"    report: {outcome.csv_path}")
        if outcome.inconclusive_csv_path:
            print(f"    inconclusive: {outcome.inconclusive_csv_path}")
    print(f"{'=' * 60}\n")


def _install_stop_handler(loop: asyncio.AbstractEventLoop, stop_event: asyncio.Event) -> bool:
    """
    Make the first Ctrl-C stop issuing checks (partial reports are still written).

    The handler removes itself once fired, so a second Ctrl-C interrupts the run
    even while in-flight checks are waiting on their timeout.

    Returns:
        True if the handler was installed
    """

    def _on_interrupt() -> None:
        logger.warning(
            "Interrupt received: no new checks will be issued. Press Ctrl-C again to abort."
        )
        stop_event.set()
        loop.remove_signal_handler(signal.SIGINT)

    try:
        loop.add_signal_handler(signal.SIGINT, _on_interrupt)
    except (NotImplementedError, RuntimeError):
        return False  # Signal handlers unavailable (Windows, non-main thread)
    return True


async def _run(
    config: AuditConfig, engine: Engine, timeout: Optional[float]
) -> list[CategoryOutcome]:
    stop_event = asyncio.Event()
    _install_stop_handler(asyncio.get_running_loop(), stop_event)

    categories = build_categories(config, engine)
    storage = build_storage(config)
    return await run_audit(
        config, categories, storage, stop_event=stop_event, timeout=timeout
    )


def _configuration_failed(error: ConfigurationError) -> int:
    logger.error(f"Configuration error: {error}")
    print("✗ Configuration error:", file=sys.stderr)
    for message in error.errors:
        print(f"  - {message}", file=sys.stderr)
    return 2


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the audit CLI."""
    args = parse_arguments(argv)

    setup_logging(
        logger_name="audit",
        log_file="logs/audit.log",
        verbose=args.verbose,
    )

    try:
        config = apply_overrides(AuditConfig.from_env(), args).require_valid()
        engine = create_db_engine(config.database_url)
    except ConfigurationError as e:
        return _configuration_failed(e)

    try:
        if args.dry_run:
            if not check_database_connection(engine):
                return _configuration_failed(
                    ConfigurationError(["DATABASE_URL: database is not reachable"])
                )
            print_dry_run_summary(config)
            return 0

        outcomes = asyncio.run(_run(config, engine, args.timeout))
    except ConfigurationError as e:
        return _configuration_failed(e)
    except KeyboardInterrupt:
        logger.error("Audit aborted by user, no report written for the current category")
        print("\n✗ Aborted", file=sys.stderr)
        return 130
    finally:
        engine.dispose()

    print_audit_summary(outcomes)
    return 0 if all(outcome.succeeded for outcome in outcomes) else 1


if __name__ == "__main__":
    sys.exit(main())
