"""
Data model for the storage audit.

Functions:
    report_name: Report base name of a category, <category>[-<course>]

Records:
    Record: One identifier read from a content category (word or audio reference)
    CheckResult: Outcome of probing storage for one record
    RunSummary: Aggregate of the check results of one category

Enums:
    CheckStatus: found / missing / inconclusive
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class CheckStatus(str, Enum):
    """
    Tri-state outcome of an existence check.

        FOUND: At least one candidate path exists in storage
        MISSING: Every candidate path was confirmed absent
        INCONCLUSIVE: A probe failed, so presence could not be decided
    """

    FOUND = "found"
    MISSING = "missing"
    INCONCLUSIVE = "inconclusive"


def report_name(category: str, course: Optional[str] = None) -> str:
    """Base name of the report files: <category>[-<course>]."""
    return f"{category}-{course}" if course else category


@dataclass(frozen=True)
class Record:
    """An identifier expected to have an audio file in storage."""

    identifier: str
    category: str
    course: Optional[str] = None


@dataclass(frozen=True)
class CheckResult:
    """
    Result of checking one record against storage.

    Attributes:
        record: The record that was checked
        found: True when any candidate path exists. Always False when error is set.
        error: Description of the probe failure, if any
        checked_paths: Candidate paths probed, in probe order
    """

    record: Record
    found: bool = False
    error: Optional[str] = None
    checked_paths: tuple[str, ...] = ()

    @property
    def status(self) -> CheckStatus:
        if self.error is not None:
            return CheckStatus.INCONCLUSIVE
        return CheckStatus.FOUND if self.found else CheckStatus.MISSING


@dataclass(frozen=True)
class RunSummary:
    """
    Aggregated outcome of one category run.

    Attributes:
        category: Category name (e.g. "vocab")
        course: Course filter applied to the category, if any
        total: Number of check results aggregated
        found_count: Number of records confirmed present
        missing: Records confirmed absent, sorted by identifier
        inconclusive: Results whose check failed, sorted by identifier
        cancelled: True when the run stopped early and the summary is partial
    """

    category: str
    course: Optional[str] = None
    total: int = 0
    found_count: int = 0
    missing: tuple[Record, ...] = field(default_factory=tuple)
    inconclusive: tuple[CheckResult, ...] = field(default_factory=tuple)
    cancelled: bool = False

    @property
    def missing_count(self) -> int:
        return len(self.missing)

    @property
    def inconclusive_count(self) -> int:
        return len(self.inconclusive)

    @property
    def report_name(self) -> str:
        return report_name(self.category, self.course)
