# backend/agenda/db.py
"""Database engine, session and base model setup."""

from __future__ import annotations

from typing import Generator, Optional
from os import getenv

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .errors import ConfigurationError


def normalize_db_url(url: str) -> str:
    """Normalize common Postgres URLs to the psycopg2 driver form."""
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg2://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg2://", 1)
    return url


def database_url() -> str:
    raw = (getenv("DATABASE_URL") or "").strip()
    if not raw:
        raise ConfigurationError("DATABASE_URL is not configured")
    return normalize_db_url(raw)


def build_engine(url: str) -> Engine:
    is_sqlite = url.startswith("sqlite")
    return create_engine(
        url,
        echo=False,
        future=True,
        pool_pre_ping=True,
        connect_args=({} if not is_sqlite else {"check_same_thread": False}),
    )


# Built on first use so a missing DATABASE_URL surfaces per request,
# not as an import error.
_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_engine() -> Engine:
    global _engine, _session_factory
    if _engine is None:
        _engine = build_engine(database_url())
        _session_factory = sessionmaker(bind=_engine, autoflush=False, autocommit=False, future=True)
    return _engine


def reset_engine() -> None:
    """Dispose the cached engine so the next request re-reads DATABASE_URL."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""
    pass


def ensure_table(db: Session, model: type[Base]) -> None:
    """Idempotently create the model's table on the session's connection."""
    model.__table__.create(bind=db.get_bind(), checkfirst=True)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a session per request
    and guarantees it is closed afterwards.
    """
    get_engine()
    db = _session_factory()
    try:
        yield db
    finally:
        db.close()
