"""Pytest configuration and fixtures for backend tests."""

from collections.abc import Generator

import pytest
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from varstore.core.database import Base
from varstore.models import Application
from varstore.services.secret_codec import SecretCodec, generate_key
from varstore.services.variable_audit import VariableAuditService
from varstore.services.variable_store import VariableStore


@pytest.fixture
def db_engine() -> Generator[Engine, None, None]:
    """Create an in-memory SQLite engine with all tables.

    pysqlite's own transaction handling is disabled so that SAVEPOINTs
    behave like they do on PostgreSQL, and foreign keys are enforced.
    """
    engine = create_engine("sqlite://", echo=False, future=True)

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db_session(db_engine: Engine) -> Generator[Session, None, None]:
    """Create a database session on the test engine."""
    session = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def secret_key() -> str:
    """Create a fresh Fernet key."""
    return generate_key()


@pytest.fixture
def codec(secret_key: str) -> SecretCodec:
    """Create a secret codec with a fixture key."""
    return SecretCodec([secret_key])


@pytest.fixture
def application(db_session: Session) -> Application:
    """Create the owning application."""
    app = Application(name="api", project_key="PROJ")
    db_session.add(app)
    db_session.flush()
    return app


@pytest.fixture
def store(db_session: Session, codec: SecretCodec) -> VariableStore:
    """Create a VariableStore."""
    return VariableStore(db_session, codec)


@pytest.fixture
def audit_service(db_session: Session, codec: SecretCodec) -> VariableAuditService:
    """Create a VariableAuditService."""
    return VariableAuditService(db_session, codec)
