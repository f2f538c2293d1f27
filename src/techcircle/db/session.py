"""Database session configuration."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from techcircle.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


def connect_args_for(url: str, timeout_seconds: float) -> dict[str, Any]:
    """Return driver connect arguments that bound every store round-trip."""
    if url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": timeout_seconds}
    if url.startswith("postgresql"):
        timeout_ms = int(timeout_seconds * 1000)
        return {
            "connect_timeout": max(1, int(timeout_seconds)),
            "options": f"-c statement_timeout={timeout_ms}",
        }
    return {}


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Turn on FK enforcement so ON DELETE CASCADE applies under SQLite."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, _record) -> None:  # pragma: no cover - driver hook
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Ensure model modules are imported so that metadata is populated when create_all runs.
import techcircle.models  # noqa: E402,F401

engine = create_engine(
    settings.effective_database_url,
    pool_pre_ping=True,
    echo=settings.sql_debug,
    connect_args=connect_args_for(
        settings.effective_database_url,
        settings.request_timeout_seconds,
    ),
)
enable_sqlite_foreign_keys(engine)

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
