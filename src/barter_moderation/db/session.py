"""Database session configuration."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from barter_moderation.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import barter_moderation.models  # noqa: E402,F401


def _connect_args(url: str) -> dict[str, Any]:
    """Return driver arguments that bound how long a single statement may block."""
    timeout_ms = max(0, settings.db_statement_timeout_ms)
    if url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": timeout_ms / 1000}
    if url.startswith("postgresql"):
        return {"options": f"-c statement_timeout={timeout_ms}"}
    return {}


engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    echo=settings.sql_debug,
    connect_args=_connect_args(settings.database_url),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def drop_tables() -> None:
    """Drop all database tables."""
    Base.metadata.drop_all(bind=engine)
