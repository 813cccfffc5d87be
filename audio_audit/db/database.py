"""
Database engine and session management for the content database.

This module provides:
- Engine creation from an explicit database URL (no environment lookups)
- SQLite optimization settings when the URL points to a SQLite file
- Session-per-operation pattern through get_db_session()
"""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError, NoSuchModuleError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool

from audio_audit.errors import ConfigurationError
from audio_audit.logger import log_function

db_logger = logging.getLogger("audit.database")


def optimize_sqlite_connection(dbapi_connection, connection_record):
    """Apply SQLite-specific optimizations when connection is created."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=30000")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@log_function(logger_name="audit.database", log_execution_time=True)
def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for the content database.

    SQLite engines use NullPool and allow cross-thread use, since record
    cursors are advanced from worker threads.

    Args:
        database_url: SQLAlchemy database URL
        echo: Log emitted SQL

    Returns:
        Engine: Configured engine

    Raises:
        ConfigurationError: If the URL cannot be parsed or its driver is not installed
    """
    try:
        if database_url.startswith("sqlite"):
            engine = create_engine(
                database_url,
                poolclass=NullPool,
                echo=echo,
                connect_args={"check_same_thread": False, "timeout": 30},
            )
            event.listen(engine, "connect", optimize_sqlite_connection)
        else:
            engine = create_engine(database_url, echo=echo, pool_pre_ping=True)
    except (ArgumentError, NoSuchModuleError, ImportError) as e:
        raise ConfigurationError([f"DATABASE_URL cannot be used: {e}"]) from e

    db_logger.info(f"Database engine created for {engine.url.render_as_string()}")
    return engine


@contextmanager
def get_db_session(engine: Engine) -> Generator[Session, None, None]:
    """
    Context manager for database sessions bound to ``engine``.

    Usage:
        with get_db_session(engine) as session:
            words = session.query(VocabEntry.word).all()
    """
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        db_logger.debug("Database session created")
        yield session
    except SQLAlchemyError as e:
        db_logger.error(f"Database error: {e}")
        session.rollback()
        raise
    finally:
        session.close()
        db_logger.debug("Database session closed")


@log_function(logger_name="audit.database", log_execution_time=True)
def check_database_connection(engine: Engine) -> bool:
    """
    Check if database connection is working.

    Returns:
        bool: True if connection is successful, False otherwise
    """
    try:
        with get_db_session(engine) as session:
            session.execute(text("SELECT 1"))
            db_logger.info("Database connection test successful")
            return True
    except SQLAlchemyError as e:
        db_logger.error(f"Database connection test failed: {e}")
        return False
