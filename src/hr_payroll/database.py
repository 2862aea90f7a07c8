"""Database connection and session management."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from hr_payroll.config import get_settings

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def _unicode_lower(value: str | None) -> str | None:
    return value.lower() if isinstance(value, str) else value


def get_engine(database_url: str | None = None) -> Engine:
    """Create database engine.

    SQLite connections get foreign key enforcement switched on and a
    Unicode-aware lower(), so that references and case-insensitive name
    matching behave as they do on PostgreSQL.
    """
    settings = get_settings()
    url = database_url or settings.database_url

    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            echo=settings.debug,
            connect_args={"check_same_thread": False},
        )

        @event.listens_for(engine, "connect")
        def _configure_sqlite_connection(dbapi_connection, connection_record):  # type: ignore[no-untyped-def]
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
            # SQLite's built-in lower() only folds ASCII letters.
            dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)

        return engine

    return create_engine(
        url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Build a session factory bound to an engine."""
    return sessionmaker(
        engine,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )


# Global engine and session factory
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def init_db() -> tuple[Engine, sessionmaker[Session]]:
    """Initialize database engine and session factory."""
    global _engine, _session_factory
    if _engine is None:
        _engine = get_engine()
        _session_factory = create_session_factory(_engine)
    return _engine, _session_factory  # type: ignore[return-value]


def create_schema(engine: Engine) -> None:
    """Create all tables known to the ORM metadata."""
    from hr_payroll.models import Base

    Base.metadata.create_all(engine)


@contextmanager
def session_scope(
    session_factory: sessionmaker[Session] | None = None,
) -> Iterator[Session]:
    """Run a unit of work in one transaction.

    Commits on normal exit; rolls back and re-raises on any exception.
    """
    if session_factory is None:
        _, session_factory = init_db()
    with session_factory() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


def ping(session: Session) -> bool:
    """Return True if the database answers a trivial query."""
    return session.execute(text("SELECT 1")).scalar() == 1


def unique_violation_field(exc: IntegrityError, candidates: Iterable[str]) -> str | None:
    """Name the column behind a unique-constraint violation, if any.

    Works on both SQLite ("UNIQUE constraint failed: users.email") and
    PostgreSQL ("duplicate key value violates unique constraint ...") messages.
    """
    message = str(exc.orig).lower()
    if "unique" not in message and "duplicate" not in message:
        return None
    for name in candidates:
        if name.lower() in message:
            return name
    return None
