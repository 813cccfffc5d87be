import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Callable, Optional, Sequence

from sqlalchemy.engine import Engine

from audio_audit.audit import (
    ExistenceChecker,
    RateLimiter,
    Record,
    RunSummary,
    aggregate,
    map_all,
    report_name,
)
from audio_audit.db import aiter_in_thread, iter_activity_records, iter_vocab_records
from audio_audit.errors import RecordSourceError
from audio_audit.logger import log_function
from audio_audit.report import (
    remove_inconclusive_csv,
    write_inconclusive_csv,
    write_missing_csv,
)
from audio_audit.storage import BaseStorage, CloudStorage, LocalStorage
from .config import AuditConfig

logger = logging.getLogger("audit.pipeline")


@dataclass(frozen=True)
class CategorySpec:
    """
    One category to audit.

    Attributes:
        name: Category name, also the report file base name
        open_records: Factory returning a fresh async iterator over the records
        prefixes: Storage directory prefixes probed for this category, in order
        course: Course filter applied by the source, if any
    """

    name: str
    open_records: Callable[[], AsyncIterator[Record]]
    prefixes: tuple[str, ...]
    course: Optional[str] = None

    @property
    def report_name(self) -> str:
        return report_name(self.name, self.course)


@dataclass(frozen=True)
class CategoryOutcome:
    """What happened to one category: a summary and report, or an error."""

    name: str
    summary: Optional[RunSummary] = None
    csv_path: Optional[Path] = None
    inconclusive_csv_path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def build_storage(config: AuditConfig) -> BaseStorage:
    """Instantiate the storage backend selected by the configuration."""
    if config.use_local_storage:
        return LocalStorage(config.local_storage_dir)
    return CloudStorage(
        bucket_name=config.bucket_name,
        key_id=config.bucket_key_id,
        access_key=config.bucket_access_key,
        endpoint=config.bucket_endpoint,
        region=config.bucket_region,
        max_pool_connections=config.concurrency,
    )


def build_categories(
    config: AuditConfig, engine: Engine, names: Optional[Sequence[str]] = None
) -> list[CategorySpec]:
    """
    Build the database-backed categories to audit.

    Args:
        config: Resolved configuration (course filter, limits, prefixes)
        engine: Content database engine
        names: Category names to include, defaults to config.categories

    Returns:
        CategorySpec list in processing order
    """
    sources = {
        "vocab": iter_vocab_records,
        "activities": iter_activity_records,
    }
    categories = []
    for name in names or config.categories:
        source = sources[name]
        limit = config.limit_for(name)

        def open_records(source=source, limit=limit) -> AsyncIterator[Record]:
            return aiter_in_thread(source(engine, course=config.course, limit=limit))

        categories.append(
            CategorySpec(
                name=name,
                open_records=open_records,
                prefixes=tuple(config.audio_prefixes),
                course=config.course,
            )
        )
    return categories


@log_function(logger_name="audit.pipeline", log_execution_time=True)
async def audit_category(
    category: CategorySpec,
    storage: BaseStorage,
    limiter: Optional[RateLimiter] = None,
    concurrency: int = 20,
    check_timeout: Optional[float] = None,
    stop_event: Optional[asyncio.Event] = None,
    deadline: Optional[float] = None,
) -> RunSummary:
    """
    Check every record of one category against storage.

    Raises:
        RecordSourceError: If the record source fails. No summary is produced.
    """
    logger.info(f"Processing '{category.report_name}' collection...")
    limiter = limiter or RateLimiter()
    limiter.reset()

    checker = ExistenceChecker(storage, category.prefixes, timeout=check_timeout)
    try:
        records = category.open_records()
    except Exception as e:
        raise RecordSourceError(category.name, e) from e

    outcome = await map_all(
        records,
        checker.check,
        concurrency=concurrency,
        limiter=limiter,
        stop_event=stop_event,
        deadline=deadline,
        category=category.name,
    )
    summary = aggregate(
        category.name,
        outcome.results,
        course=category.course,
        cancelled=outcome.cancelled,
    )
    logger.info(
        f"'{category.report_name}': {summary.total} checked, {summary.found_count} found, "
        f"{summary.missing_count} missing, {summary.inconclusive_count} inconclusive"
        + (" (partial run)" if summary.cancelled else "")
    )
    return summary


async def run_audit(
    config: AuditConfig,
    categories: Sequence[CategorySpec],
    storage: BaseStorage,
    stop_event: Optional[asyncio.Event] = None,
    timeout: Optional[float] = None,
) -> list[CategoryOutcome]:
    """
    Audit categories one after another and write their reports.

    A category whose record source fails produces no report and is recorded as
    failed; the following categories still run and earlier reports are kept.

    Args:
        config: Resolved configuration (rate, concurrency, timeouts, output dir)
        categories: Categories to audit, in order
        storage: Storage backend to probe
        stop_event: When set, stop issuing checks and report partial results
        timeout: Overall run budget in seconds; once spent no new checks are issued

    Returns:
        One CategoryOutcome per category
    """
    limiter = RateLimiter(config.max_rate)
    deadline = None
    if timeout is not None:
        deadline = asyncio.get_running_loop().time() + timeout

    logger.info(
        f"=== AUDIT STARTED === storage={storage.describe()} "
        f"max_rate={config.max_rate} concurrency={config.concurrency}"
    )
    outcomes = []
    for category in categories:
        try:
            summary = await audit_category(
                category,
                storage,
                limiter=limiter,
                concurrency=config.concurrency,
                check_timeout=config.check_timeout,
                stop_event=stop_event,
                deadline=deadline,
            )
        except RecordSourceError as e:
            logger.error(f"Category '{category.report_name}' aborted: {e}")
            outcomes.append(CategoryOutcome(name=category.report_name, error=str(e)))
            continue

        try:
            csv_path = write_missing_csv(summary, config.output_dir)
            inconclusive_path = None
            if summary.inconclusive:
                inconclusive_path = write_inconclusive_csv(summary, config.output_dir)
            else:
                remove_inconclusive_csv(summary, config.output_dir)
        except OSError as e:
            logger.error(f"Could not write report for '{category.report_name}': {e}")
            outcomes.append(
                CategoryOutcome(
                    name=category.report_name,
                    summary=summary,
                    error=f"report not written: {e}",
                )
            )
            continue

        outcomes.append(
            CategoryOutcome(
                name=category.report_name,
                summary=summary,
                csv_path=csv_path,
                inconclusive_csv_path=inconclusive_path,
            )
        )

    failed = sum(1 for outcome in outcomes if not outcome.succeeded)
    logger.info(
        f"=== AUDIT COMPLETED === {len(outcomes) - failed} succeeded, {failed} failed"
    )
    return outcomes
