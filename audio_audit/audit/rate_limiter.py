import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

logger = logging.getLogger("audit.rate_limiter")

DEFAULT_SAFETY_MARGIN = 0.005


class RateLimiter:
    """
    Staggered release schedule for outbound storage requests.

    Every acquisition carries a sequence index. The caller with index ``k`` is
    released at ``base + k / max_rate + safety_margin``, where ``base`` is the
    time of the first acquisition. Releases therefore happen in index order and
    never exceed ``max_rate`` per second on average. With no rate configured,
    ``acquire`` returns immediately.

    Args:
        max_rate: Maximum sustained requests per second, None or <= 0 to disable
        safety_margin: Extra delay in seconds added to every release time
        clock: Monotonic clock returning seconds
        sleep: Coroutine function used to wait
    """

    def __init__(
        self,
        max_rate: Optional[float] = None,
        safety_margin: float = DEFAULT_SAFETY_MARGIN,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.max_rate = max_rate if max_rate and max_rate > 0 else None
        self.interval = 1.0 / self.max_rate if self.max_rate else 0.0
        self.safety_margin = safety_margin
        self._clock = clock
        self._sleep = sleep
        self._base_time: Optional[float] = None
        self._next_index = 0

    @property
    def enabled(self) -> bool:
        return self.max_rate is not None

    def next_index(self) -> int:
        """Hand out the next sequence index. Called at submission time."""
        index = self._next_index
        self._next_index += 1
        return index

    def reset(self) -> None:
        """Start a new schedule: indices restart at 0 and the base time is taken at the next acquisition."""
        self._base_time = None
        self._next_index = 0

    def release_time(self, sequence_index: int) -> float:
        if self._base_time is None:
            self._base_time = self._clock()
        return self._base_time + sequence_index * self.interval + self.safety_margin

    async def acquire(self, sequence_index: Optional[int] = None) -> int:
        """
        Wait until the caller's slot in the schedule is reached.

        Args:
            sequence_index: Index assigned at submission; a fresh one is taken if None

        Returns:
            The sequence index the caller was released for
        """
        if sequence_index is None:
            sequence_index = self.next_index()
        if not self.enabled:
            return sequence_index

        target = self.release_time(sequence_index)
        delay = target - self._clock()
        if delay > 0:
            logger.debug(f"Request #{sequence_index} waiting {delay:.3f}s")
            await self._sleep(delay)
        return sequence_index
