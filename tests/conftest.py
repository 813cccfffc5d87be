import asyncio
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import AsyncIterator, Iterable, Optional

import pytest

from audio_audit.audit.models import Record
from audio_audit.errors import StorageError
from audio_audit.storage import BaseStorage


class FakeStorage(BaseStorage):
    """In-memory storage: a set of existing keys and a set of keys whose probe fails."""

    def __init__(self, keys: Iterable[str] = (), failing: Iterable[str] = ()):
        self.keys = set(keys)
        self.failing = set(failing)
        self.probed: list[str] = []

    def _get_absolute_filename(self, path: str) -> str:
        return f"fake://{path}"

    def file_exist(self, path: str) -> bool:
        self.probed.append(path)
        if path in self.failing:
            raise StorageError(path, ConnectionError("connection reset by peer"))
        return path in self.keys


class FakeClock:
    """Manual clock whose sleep advances time instantly."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


async def records_from(
    identifiers: Iterable[str],
    category: str = "vocab",
    course: Optional[str] = None,
    fail_after: Optional[int] = None,
) -> AsyncIterator[Record]:
    """Async record source; raises RuntimeError once ``fail_after`` records were yielded."""
    identifiers = list(identifiers)
    for count, identifier in enumerate(identifiers):
        if fail_after is not None and count >= fail_after:
            raise RuntimeError("cursor lost connection")
        await asyncio.sleep(0)
        yield Record(identifier=identifier, category=category, course=course)
    if fail_after is not None and fail_after >= len(identifiers):
        raise RuntimeError("cursor lost connection")


def touch(root: Path, key: str) -> None:
    path = root / key
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"ID3")


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def reset_audit_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("audit")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
