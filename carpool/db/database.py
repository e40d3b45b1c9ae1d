"""
Database configuration and connection handling.

Supports PostgreSQL and SQLite. Set USE_DATABASE=false to run the service
on the in-memory schedule repository instead.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from carpool.config import settings

from .models import Base

logger = logging.getLogger(__name__)


def init_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """Create an engine for ``database_url`` (defaults to DATABASE_URL) and verify it connects."""
    url = database_url or settings.DATABASE_URL
    engine_kwargs = {
        "echo": settings.SQLALCHEMY_ECHO if echo is None else echo,
        "pool_pre_ping": True,
    }

    if url.startswith("sqlite"):
        # SQLite: sessions are used from worker threads
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            from sqlalchemy.pool import StaticPool
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10
        engine_kwargs["pool_recycle"] = 3600

    engine = create_engine(url, **engine_kwargs)

    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))

    logger.info(f"[DB] Connected: {url.split('@')[-1]}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def is_database_available(engine: Optional[Engine]) -> bool:
    """Check if the database answers a trivial query."""
    if engine is None:
        return False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """Yield a session and always close it."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def create_tables(engine: Engine) -> None:
    """Create all tables (for initial setup)."""
    Base.metadata.create_all(bind=engine)
    logger.info("[DB] Tables created")


def drop_tables(engine: Engine) -> None:
    """Drop all tables (use with caution!)."""
    Base.metadata.drop_all(bind=engine)
    logger.info("[DB] Tables dropped")
