"""CSV reports of audit results."""

import csv
import logging
from pathlib import Path
from typing import Union

from audio_audit.audit.models import RunSummary
from audio_audit.logger import log_function

logger = logging.getLogger("audit.report")

MISSING_FIELDS = ["word"]
INCONCLUSIVE_FIELDS = ["word", "error"]


def report_path(summary: RunSummary, output_dir: Union[str, Path], suffix: str = "") -> Path:
    """Build <output_dir>/<category>[-<course>]<suffix>.csv"""
    return Path(output_dir) / f"{summary.report_name}{suffix}.csv"


@log_function(logger_name="audit.report", log_execution_time=True)
def write_missing_csv(summary: RunSummary, output_dir: Union[str, Path]) -> Path:
    """
    Write the missing records of a category to CSV.

    The file is written even when nothing is missing, so an empty report is
    distinguishable from a failed category (which produces no file).

    Args:
        summary: Finalized summary of the category
        output_dir: Directory receiving the report

    Returns:
        Path: The written file
    """
    csv_path = report_path(summary, output_dir)
    csv_path.parent.mkdir(parents=True, exist_ok=True)

    with open(csv_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(MISSING_FIELDS)
        writer.writerows([record.identifier] for record in summary.missing)

    logger.info(
        f"{summary.missing_count} missing record(s) of '{summary.report_name}' saved to {csv_path}"
    )
    return csv_path


@log_function(logger_name="audit.report", log_execution_time=True)
def write_inconclusive_csv(summary: RunSummary, output_dir: Union[str, Path]) -> Path:
    """Write the records whose check failed, with the failure, for operator review."""
    csv_path = report_path(summary, output_dir, suffix="-inconclusive")
    csv_path.parent.mkdir(parents=True, exist_ok=True)

    with open(csv_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(INCONCLUSIVE_FIELDS)
        writer.writerows(
            [result.record.identifier, result.error] for result in summary.inconclusive
        )

    logger.info(
        f"{summary.inconclusive_count} inconclusive check(s) of '{summary.report_name}' saved to {csv_path}"
    )
    return csv_path


def remove_inconclusive_csv(summary: RunSummary, output_dir: Union[str, Path]) -> bool:
    """Delete an inconclusive report left by an earlier run. Returns True if one was removed."""
    csv_path = report_path(summary, output_dir, suffix="-inconclusive")
    if not csv_path.exists():
        return False
    csv_path.unlink()
    logger.info(f"Removed stale inconclusive report {csv_path}")
    return True
