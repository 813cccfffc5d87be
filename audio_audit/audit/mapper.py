import asyncio
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable, Optional

from audio_audit.errors import RecordSourceError
from .models import CheckResult, Record
from .rate_limiter import RateLimiter

logger = logging.getLogger("audit.mapper")

DEFAULT_CONCURRENCY = 20

CheckFn = Callable[[Record], Awaitable[CheckResult]]


@dataclass
class MapOutcome:
    """Results collected by :func:`map_all`.

    ``submitted`` counts the records pulled from the source; it always equals
    ``len(results)`` once ``map_all`` returns.
    """

    results: list[CheckResult] = field(default_factory=list)
    submitted: int = 0
    cancelled: bool = False


async def _run_check(
    record: Record, index: int, check_fn: CheckFn, limiter: RateLimiter
) -> CheckResult:
    try:
        await limiter.acquire(index)
        return await check_fn(record)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.warning(f"Check failed for '{record.identifier}': {type(e).__name__}: {e}")
        return CheckResult(record, error=f"{type(e).__name__}: {e}")


def _should_stop(
    stop_event: Optional[asyncio.Event], deadline: Optional[float]
) -> bool:
    if stop_event is not None and stop_event.is_set():
        return True
    if deadline is not None and asyncio.get_running_loop().time() >= deadline:
        return True
    return False


async def map_all(
    records: AsyncIterator[Record],
    check_fn: CheckFn,
    concurrency: int = DEFAULT_CONCURRENCY,
    limiter: Optional[RateLimiter] = None,
    stop_event: Optional[asyncio.Event] = None,
    deadline: Optional[float] = None,
    category: str = "records",
) -> MapOutcome:
    """
    Apply ``check_fn`` to every record of an async stream with bounded concurrency.

    Records are pulled lazily: the next one is requested only when fewer than
    ``concurrency`` checks are in flight. Each record gets a sequence index at
    submission and waits for its slot in ``limiter`` before being checked.

    Args:
        records: Async iterator over the category's records
        check_fn: Coroutine function returning one CheckResult per record
        concurrency: Maximum number of checks in flight
        limiter: Rate limiter shared by all checks (no limit if None)
        stop_event: When set, stop pulling records and drain in-flight checks
        deadline: Event loop time after which no new record is pulled
        category: Category name used in errors and logs

    Returns:
        MapOutcome with exactly one result per record pulled from the source

    Raises:
        RecordSourceError: If the record source raises. In-flight checks are cancelled.
    """
    concurrency = max(1, concurrency)
    limiter = limiter or RateLimiter()
    outcome = MapOutcome()
    pending: set[asyncio.Task] = set()
    exhausted = False

    def collect(done: set[asyncio.Task]) -> None:
        for task in done:
            outcome.results.append(task.result())

    try:
        while not exhausted:
            while len(pending) < concurrency:
                if _should_stop(stop_event, deadline):
                    outcome.cancelled = True
                    exhausted = True
                    logger.warning(
                        f"Stopping '{category}' after {outcome.submitted} record(s): cancellation requested"
                    )
                    break
                try:
                    record = await records.__anext__()
                except StopAsyncIteration:
                    exhausted = True
                    break
                except Exception as e:
                    raise RecordSourceError(category, e) from e

                index = limiter.next_index()
                outcome.submitted += 1
                pending.add(
                    asyncio.create_task(_run_check(record, index, check_fn, limiter))
                )

            if pending and not exhausted:
                done, pending = await asyncio.wait(
                    pending, return_when=asyncio.FIRST_COMPLETED
                )
                collect(done)

        if pending:
            done, pending = await asyncio.wait(pending)
            collect(done)
    finally:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        aclose = getattr(records, "aclose", None)
        if aclose is not None:
            await aclose()

    logger.info(
        f"Checked {len(outcome.results)}/{outcome.submitted} record(s) for '{category}'"
    )
    return outcome
