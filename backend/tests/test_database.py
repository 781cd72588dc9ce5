"""Tests for database configuration and base model."""

from unittest.mock import patch

import pytest
from pydantic import SecretStr
from sqlalchemy import String, inspect, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Mapped, mapped_column, sessionmaker

from varstore.core import database
from varstore.core.config import Settings, settings
from varstore.core.database import Base, is_unique_violation, session_scope
from varstore.models import Application


class SampleModel(Base):
    """Sample model for testing base class functionality."""

    __tablename__ = "sample_models"

    name: Mapped[str] = mapped_column(String(100), nullable=False)


class TestSettings:
    """Test application settings."""

    def test_database_url_configured(self) -> None:
        """Test that database URL is configured."""
        assert settings.database_url is not None

    def test_default_database_url_is_sync(self) -> None:
        """Test the default URL uses a synchronous driver."""
        assert "+asyncpg" not in Settings().database_url

    def test_secret_keys_primary_first(self) -> None:
        """Test the primary key is listed before previous keys."""
        config = Settings(secret_key=SecretStr("new"), previous_secret_keys=[SecretStr("old")])
        assert [k.get_secret_value() for k in config.secret_keys] == ["new", "old"]

    def test_secret_keys_empty_without_primary(self) -> None:
        """Test no keys are used when the primary key is missing."""
        config = Settings(secret_key=None, previous_secret_keys=[SecretStr("old")])
        assert config.secret_keys == []


class TestBaseModel:
    """Test Base model class."""

    def test_base_has_id_column(self) -> None:
        """Test that Base provides id column."""
        assert "id" in SampleModel.__table__.c

    def test_base_has_created_at_column(self) -> None:
        """Test that Base provides created_at column."""
        assert "created_at" in SampleModel.__table__.c

    def test_id_is_uuid_type(self) -> None:
        """Test that id column is UUID type."""
        id_col = SampleModel.__table__.c.id
        assert "UUID" in str(id_col.type) or "uuid" in str(id_col.type).lower()

    def test_variable_columns_keep_storage_names(self) -> None:
        """Test variable attributes map to their storage column names."""
        from varstore.models import ApplicationVariable

        columns = ApplicationVariable.__table__.c
        assert {"var_name", "var_value", "cipher_value", "var_type", "application_id"} <= set(columns.keys())


class FakeDriverError(Exception):
    """Driver exception carrying structured error attributes."""

    def __init__(self, **attrs) -> None:
        super().__init__("driver error")
        for key, value in attrs.items():
            setattr(self, key, value)


def integrity_error(**attrs) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, FakeDriverError(**attrs))


class TestUniqueViolation:
    """Test structured classification of integrity errors."""

    def test_psycopg_sqlstate(self) -> None:
        """Test psycopg unique violations are detected."""
        assert is_unique_violation(integrity_error(sqlstate="23505"))

    def test_psycopg2_pgcode(self) -> None:
        """Test psycopg2 unique violations are detected."""
        assert is_unique_violation(integrity_error(pgcode="23505"))

    def test_postgres_foreign_key_violation(self) -> None:
        """Test other PostgreSQL integrity errors are not unique violations."""
        assert not is_unique_violation(integrity_error(sqlstate="23503"))

    def test_sqlite_unique(self) -> None:
        """Test sqlite3 unique violations are detected."""
        assert is_unique_violation(integrity_error(sqlite_errorname="SQLITE_CONSTRAINT_UNIQUE"))

    def test_sqlite_not_null(self) -> None:
        """Test other sqlite3 constraint errors are not unique violations."""
        assert not is_unique_violation(integrity_error(sqlite_errorname="SQLITE_CONSTRAINT_NOTNULL"))

    def test_message_is_not_inspected(self) -> None:
        """Test an error without codes is never classified from its text."""
        error = IntegrityError("INSERT ...", {}, Exception("duplicate key value violates unique constraint"))
        assert not is_unique_violation(error)


class TestSessionScope:
    """Test the transactional session scope."""

    @pytest.fixture
    def bound_maker(self, db_engine: Engine):
        maker = sessionmaker(bind=db_engine, expire_on_commit=False)
        with patch.object(database, "get_session_maker", return_value=maker):
            yield maker

    def test_commits_on_success(self, bound_maker) -> None:
        """Test work inside the scope is committed."""
        with session_scope() as session:
            session.add(Application(name="api", project_key="PROJ"))

        with bound_maker() as session:
            assert session.execute(select(Application.name)).scalars().all() == ["api"]

    def test_rolls_back_on_error(self, bound_maker) -> None:
        """Test work inside the scope is rolled back on error."""
        with pytest.raises(RuntimeError):
            with session_scope() as session:
                session.add(Application(name="api", project_key="PROJ"))
                session.flush()
                raise RuntimeError("boom")

        with bound_maker() as session:
            assert session.execute(select(Application.name)).scalars().all() == []


class TestInitDb:
    """Test development table creation and engine teardown."""

    @pytest.fixture
    def sqlite_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(database.settings, "database_url", "sqlite://")
        monkeypatch.setattr(database, "_engine", None)
        monkeypatch.setattr(database, "_session_maker", None)

    def test_init_db_creates_tables(self, sqlite_settings) -> None:
        """Test every model table is created on the configured engine."""
        database.init_db()
        try:
            tables = set(inspect(database.get_engine()).get_table_names())
            assert {"applications", "application_variables", "application_variable_audits"} <= tables
        finally:
            database.close_db()

    def test_close_db_resets_engine(self, sqlite_settings) -> None:
        """Test closing drops the cached engine and session factory."""
        database.get_session_maker()
        assert database._engine is not None

        database.close_db()
        assert database._engine is None
        assert database._session_maker is None

    def test_close_db_without_engine(self, sqlite_settings) -> None:
        """Test closing before any use is a no-op."""
        database.close_db()
        assert database._engine is None
