"""
Core of the storage audit.

Structure:
- models.py: Record, CheckResult, RunSummary and CheckStatus
- paths.py: identifier sanitization and candidate storage keys
- rate_limiter.py: staggered request schedule
- checker.py: per-record existence probe over candidate keys
- mapper.py: bounded-concurrency fan-out over a lazy record stream
- aggregator.py: partition of results into missing / found / inconclusive
"""

from .aggregator import aggregate, flatten_results
from .checker import ExistenceChecker
from .mapper import MapOutcome, map_all
from .models import CheckResult, CheckStatus, Record, RunSummary, report_name
from .paths import build_candidate_paths, build_filename, sanitize_identifier
from .rate_limiter import RateLimiter

__all__ = [
    "aggregate",
    "flatten_results",
    "ExistenceChecker",
    "MapOutcome",
    "map_all",
    "CheckResult",
    "CheckStatus",
    "Record",
    "RunSummary",
    "report_name",
    "build_candidate_paths",
    "build_filename",
    "sanitize_identifier",
    "RateLimiter",
]
