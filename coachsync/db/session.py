from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from coachsync.db.models import Base


def create_db_engine(database_url: str) -> Engine:
    """Create an engine with connection args suited to the backend.

    SQLite connections are shared across worker threads, and in-memory SQLite
    databases are pinned to a single connection so every session sees the same
    data.
    """
    logger.info(f"Initializing database engine: {database_url}")

    connect_args = {}
    engine_kwargs = {}
    if "sqlite" in database_url.lower():
        connect_args = {"check_same_thread": False}
        if database_url in {"sqlite://", "sqlite:///:memory:"}:
            engine_kwargs["poolclass"] = StaticPool
        logger.warning("Using SQLite database (local development only)")
    else:
        engine_kwargs["pool_pre_ping"] = True  # Verify connections before using (important for cloud DBs)
        engine_kwargs["pool_recycle"] = 3600

    engine = create_engine(database_url, connect_args=connect_args, echo=False, **engine_kwargs)
    Base.metadata.create_all(engine)
    logger.info("Database engine initialized")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """Session context manager: commits on success, rolls back and re-raises on error."""
    session = session_factory()
    try:
        yield session
        if session.dirty or session.new or session.deleted:
            session.commit()
    except Exception as e:
        logger.error(f"Database session error, rolling back: {e}")
        session.rollback()
        raise
    finally:
        session.close()
