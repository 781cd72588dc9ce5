"""Database configuration and session management."""

from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, Engine, create_engine, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from varstore.core.config import settings

# PostgreSQL SQLSTATE for unique_violation (psycopg `sqlstate`, psycopg2 `pgcode`)
UNIQUE_VIOLATION_SQLSTATE = "23505"
# sqlite3 extended result codes (Python 3.11+ `sqlite_errorname`)
SQLITE_UNIQUE_ERRORS = frozenset({"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"})

# Lazy initialized engine and session factory
_engine: Engine | None = None
_session_maker: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Get or create the database engine.

    Lazily creates the engine on first use to avoid import errors
    when psycopg is not installed (e.g., in test environments).
    """
    global _engine
    if _engine is None:
        _engine = create_engine(
            settings.database_url,
            echo=settings.debug,
            future=True,
        )
    return _engine


def get_session_maker() -> sessionmaker[Session]:
    """Get or create the session factory bound to the engine."""
    global _session_maker
    if _session_maker is None:
        _session_maker = sessionmaker(
            bind=get_engine(),
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )
    return _session_maker


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models.

    Provides common columns and configuration for all models:
    - id: UUID primary key (auto-generated)
    - created_at: Timestamp when record was created
    """

    # Common columns for all models
    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


def is_unique_violation(error: IntegrityError) -> bool:
    """Classify an integrity error from the driver's structured error code.

    Args:
        error: IntegrityError raised by SQLAlchemy

    Returns:
        True if the error is a unique/primary key constraint violation
    """
    orig = error.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE
    return getattr(orig, "sqlite_errorname", None) in SQLITE_UNIQUE_ERRORS


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Provide a transactional scope around a series of operations.

    Usage:
        with session_scope() as session:
            store = VariableStore(session, codec)
            store.insert_variable(app_id, variable)
    """
    session = get_session_maker()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> None:
    """Initialize database tables.

    For development only - use Alembic migrations in production.
    """
    # Register models on the metadata before create_all
    import varstore.models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def close_db() -> None:
    """Close database connections."""
    global _engine, _session_maker
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_maker = None
