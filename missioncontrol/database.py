"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for job storage. A single engine is shared
process-wide and created lazily on first access.
"""

import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import (
    BigInteger,
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .env import get_db_path

Base = declarative_base()


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


class Job(Base):
    """Job record model."""

    __tablename__ = "jobs"

    id = Column(String, primary_key=True)  # uuid4
    type = Column(String, nullable=False, default="task")
    title = Column(String, nullable=False, default="")
    description = Column(Text, nullable=True)
    # pending, running, review, revising, done, failed, success
    status = Column(String, nullable=False, default="pending")
    priority = Column(Integer, nullable=False, default=0)
    agent_id = Column(String, nullable=True)
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=True)
    started_at = Column(BigInteger, nullable=True)
    finished_at = Column(BigInteger, nullable=True)
    result_summary = Column(Text, nullable=True)
    error_message = Column(Text, nullable=True)
    tags = Column(String, nullable=True)

    # Written by other collaborators; carried through untouched.
    session_key = Column(String, nullable=True)
    fail_count = Column(Integer, nullable=False, default=0)
    verifier_last_confidence = Column(Float, nullable=True)
    pr_number = Column(Integer, nullable=True)
    pr_url = Column(String, nullable=True)
    revision_count = Column(Integer, nullable=False, default=0)


class JobConfidenceHistory(Base):
    """Per-job verifier confidence samples."""

    __tablename__ = "job_confidence_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(String, ForeignKey("jobs.id"), nullable=False, index=True)
    confidence = Column(Float, nullable=True)
    recorded_at = Column(BigInteger, nullable=False)


def job_to_dict(job: Job) -> Dict[str, Any]:
    """Render a job row with every column, absent values as None."""
    return {column.name: getattr(job, column.name) for column in Job.__table__.columns}


def _enable_wal(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def init_database(db_path: Path) -> Engine:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy engine bound to the database
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    event.listen(engine, "connect", _enable_wal)
    try:
        Base.metadata.create_all(engine)
    except Exception:
        engine.dispose()
        raise
    return engine


# Process-wide engine, created on first use
_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None
_engine_lock = threading.Lock()


def get_engine() -> Engine:
    """Return the shared engine, creating it from configuration on first access."""
    global _engine, _session_factory

    if _engine is None:
        with _engine_lock:
            if _engine is None:
                engine = init_database(get_db_path())
                _session_factory = sessionmaker(bind=engine)
                _engine = engine
    return _engine


def reset_engine() -> None:
    """Dispose the shared engine so the next access reopens the store."""
    global _engine, _session_factory

    with _engine_lock:
        if _engine is not None:
            _engine.dispose()
        _engine = None
        _session_factory = None


def get_session() -> Session:
    """
    Get database session bound to the shared engine.

    Returns:
        SQLAlchemy session
    """
    get_engine()
    return _session_factory()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Run a unit of work in one transaction: commit on success, roll back on error."""
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
