"""
Record sources for the audit.

Each source is a plain generator that streams records out of the database with
``yield_per`` so large categories are never materialized. ``aiter_in_thread``
turns such a generator into an async iterator that advances the cursor in a
worker thread, one chunk at a time, only when the consumer asks for more.
"""

import asyncio
import logging
from itertools import islice
from typing import AsyncIterator, Iterable, Iterator, Optional, TypeVar

from sqlalchemy.engine import Engine

from audio_audit.audit.models import Record
from .database import get_db_session
from .models import EXAMPLE_SENTENCE, Activity, ActivityContent, VocabEntry

logger = logging.getLogger("audit.database")

DEFAULT_BATCH_SIZE = 500

T = TypeVar("T")


def iter_vocab_records(
    engine: Engine,
    course: Optional[str] = None,
    limit: Optional[int] = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> Iterator[Record]:
    """
    Stream vocabulary words that should have an audio file.

    Args:
        engine: Content database engine
        course: Only words of this course, if given
        limit: Maximum number of records, None for all
        batch_size: Rows fetched per round trip

    Yields:
        Record: one per vocabulary row with a non-empty word
    """
    with get_db_session(engine) as session:
        query = session.query(VocabEntry.word, VocabEntry.course).filter(
            VocabEntry.word.isnot(None), VocabEntry.word != ""
        )
        if course:
            query = query.filter(VocabEntry.course == course)
        query = query.order_by(VocabEntry.id)
        if limit:
            query = query.limit(limit)

        logger.info(f"Streaming vocab records (course={course}, limit={limit})")
        for word, word_course in query.yield_per(batch_size):
            yield Record(identifier=word, category="vocab", course=word_course)


def iter_activity_records(
    engine: Engine,
    course: Optional[str] = None,
    limit: Optional[int] = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> Iterator[Record]:
    """
    Stream audio references of example-sentence blocks in activities.

    Args:
        engine: Content database engine
        course: Only activities of this course, if given
        limit: Maximum number of records, None for all
        batch_size: Rows fetched per round trip

    Yields:
        Record: one per example-sentence block with an audio reference
    """
    with get_db_session(engine) as session:
        query = (
            session.query(ActivityContent.audio, Activity.course)
            .join(Activity, ActivityContent.activity_id == Activity.id)
            .filter(
                ActivityContent.type == EXAMPLE_SENTENCE,
                ActivityContent.audio.isnot(None),
                ActivityContent.audio != "",
            )
        )
        if course:
            query = query.filter(Activity.course == course)
        query = query.order_by(Activity.id, ActivityContent.id)
        if limit:
            query = query.limit(limit)

        logger.info(f"Streaming activity records (course={course}, limit={limit})")
        for audio, activity_course in query.yield_per(batch_size):
            yield Record(identifier=audio, category="activities", course=activity_course)


async def aiter_in_thread(
    iterable: Iterable[T], chunk_size: int = 100
) -> AsyncIterator[T]:
    """
    Expose a blocking iterable as an async iterator.

    The underlying iterator is advanced in a worker thread ``chunk_size`` items
    at a time, and only when the previous chunk has been consumed. Errors raised
    by the iterable propagate to the consumer.
    """
    iterator = iter(iterable)
    try:
        while True:
            chunk = await asyncio.to_thread(lambda: list(islice(iterator, chunk_size)))
            if not chunk:
                return
            for item in chunk:
                yield item
    finally:
        close = getattr(iterator, "close", None)
        if close is not None:
            await asyncio.to_thread(close)
