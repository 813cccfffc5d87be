"""
Database package for the content database.

Structure:
- models.py: SQLAlchemy ORM models (VocabEntry, Activity, ActivityContent)
- database.py: Engine factory and session context manager
- sources.py: Streaming record sources and the async adapter used by the audit
"""

from .database import check_database_connection, create_db_engine, get_db_session
from .models import Activity, ActivityContent, Base, VocabEntry
from .sources import aiter_in_thread, iter_activity_records, iter_vocab_records

__all__ = [
    "Base",
    "VocabEntry",
    "Activity",
    "ActivityContent",
    "create_db_engine",
    "get_db_session",
    "check_database_connection",
    "iter_vocab_records",
    "iter_activity_records",
    "aiter_in_thread",
]
