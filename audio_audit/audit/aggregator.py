import logging
from typing import Any, Iterable, Iterator, Optional

from .models import CheckResult, CheckStatus, RunSummary

logger = logging.getLogger("audit.aggregator")


def flatten_results(results: Iterable[Any]) -> Iterator[CheckResult]:
    """Yield CheckResults from a collection that may nest lists of results.

    Activity documents carry several audio references, so their checks come
    back grouped per document.
    """
    for item in results:
        if isinstance(item, CheckResult):
            yield item
        elif isinstance(item, (list, tuple)):
            yield from flatten_results(item)
        elif item is None:
            continue
        else:
            raise TypeError(f"Unexpected result type: {type(item).__name__}")


def _sort_key(result: CheckResult) -> tuple[str, str]:
    return (result.record.identifier, result.record.course or "")


def aggregate(
    category: str,
    results: Iterable[Any],
    course: Optional[str] = None,
    cancelled: bool = False,
) -> RunSummary:
    """
    Partition check results into missing, found and inconclusive.

    Only results confirmed absent end up in ``missing``. Inconclusive results
    are logged and kept apart so a transient failure never reports a record as
    missing. Output is sorted by identifier, so any ordering of the same
    results gives the same summary.

    Args:
        category: Category name
        results: CheckResults, possibly nested in lists
        course: Course filter of the run, if any
        cancelled: Whether the run stopped before the source was exhausted

    Returns:
        RunSummary for the category
    """
    flat = list(flatten_results(results))

    found_count = 0
    missing = []
    inconclusive = []
    for result in flat:
        status = result.status
        if status is CheckStatus.FOUND:
            found_count += 1
        elif status is CheckStatus.MISSING:
            missing.append(result)
        else:
            inconclusive.append(result)

    missing.sort(key=_sort_key)
    inconclusive.sort(key=_sort_key)

    for result in inconclusive:
        logger.warning(
            f"[{category}] inconclusive check for '{result.record.identifier}': {result.error}"
        )

    return RunSummary(
        category=category,
        course=course,
        total=len(flat),
        found_count=found_count,
        missing=tuple(result.record for result in missing),
        inconclusive=tuple(inconclusive),
        cancelled=cancelled,
    )
