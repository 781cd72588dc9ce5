"""Database-backed application variable store.

CRUD over the variable collection of one application. Values are
encrypted through the secret codec on write and presented through the
placeholder protocol on read.

Every successful mutation also bumps the owning application's
`last_modified`. The row change and the bump run inside one SAVEPOINT,
so a failure in either leaves neither behind. Committing the enclosing
transaction is up to the caller (see `session_scope`).
"""

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from varstore.core.audit import AuditAction, log_secret_access, log_variable_change
from varstore.core.database import is_unique_violation
from varstore.core.exceptions import (
    ApplicationNotFoundError,
    StorageError,
    VariableExistsError,
    VariableNotFoundError,
)
from varstore.models import Application, ApplicationVariable
from varstore.schemas.base import SECRET_TYPES, ReadMode, VariableType
from varstore.schemas.variable import Variable
from varstore.services.placeholder import is_placeholder_write, needs_placeholder, present_value
from varstore.services.secret_codec import SecretCodec

logger = logging.getLogger(__name__)


class VariableStore:
    """Variable store scoped to applications.

    Usage:
        store = VariableStore(session, codec)
        store.insert_variable(app_id, Variable(name="DB_PASS", type=VariableType.PASSWORD, value="s3cr3t"))
        variables = store.list_variables(app_id)  # DB_PASS -> "**********"
    """

    def __init__(self, session: Session, codec: SecretCodec) -> None:
        """Initialize the variable store.

        Args:
            session: SQLAlchemy database session.
            codec: Secret codec used to encrypt and decrypt values.
        """
        self._session = session
        self._codec = codec

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_application_id(self, project_key: str, app_name: str) -> str:
        """Resolve an application from its name and parent scope key.

        Raises:
            ApplicationNotFoundError: If no application matches
        """
        stmt = (
            select(Application.id)
            .where(Application.project_key == project_key)
            .where(Application.name == app_name)
        )
        try:
            application_id = self._session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load application {project_key}/{app_name}: {e}") from e

        if application_id is None:
            raise ApplicationNotFoundError(f"Application {project_key}/{app_name} not found")
        return application_id

    def list_variables(
        self,
        application_id: str,
        mode: ReadMode = ReadMode.REDACTED,
    ) -> list[Variable]:
        """Get all variables of an application, ordered by name.

        Args:
            application_id: Owning application
            mode: How secret values are presented

        Returns:
            Variables, empty if the application has none
        """
        stmt = (
            select(ApplicationVariable)
            .where(ApplicationVariable.application_id == application_id)
            .order_by(ApplicationVariable.name)
        )
        return self._read_variables(stmt, mode, application_id)

    def list_variables_by_name(
        self,
        project_key: str,
        app_name: str,
        mode: ReadMode = ReadMode.REDACTED,
    ) -> list[Variable]:
        """Get all variables of an application identified by name.

        Args:
            project_key: Parent scope key of the application
            app_name: Application name
            mode: How secret values are presented

        Returns:
            Variables, empty if the application has none or does not exist
        """
        stmt = (
            select(ApplicationVariable)
            .join(Application, Application.id == ApplicationVariable.application_id)
            .where(Application.project_key == project_key)
            .where(Application.name == app_name)
            .order_by(ApplicationVariable.name)
        )
        return self._read_variables(stmt, mode, f"{project_key}/{app_name}")

    def load_variable(self, application_id: str, name: str) -> Variable:
        """Load a single variable by name, always redacted.

        Raises:
            VariableNotFoundError: If the variable does not exist
        """
        stmt = (
            select(ApplicationVariable)
            .where(ApplicationVariable.application_id == application_id)
            .where(ApplicationVariable.name == name)
        )
        try:
            row = self._session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load variable '{name}': {e}") from e

        if row is None:
            raise VariableNotFoundError(application_id, name)
        return self._to_variable(row, ReadMode.REDACTED)

    def _read_variables(self, stmt, mode: ReadMode, scope: str) -> list[Variable]:
        """Execute a variable query and present each row per mode."""
        mode = ReadMode(mode)
        try:
            rows = self._session.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list variables for {scope}: {e}") from e

        variables = [self._to_variable(row, mode) for row in rows]

        if mode is ReadMode.PLAINTEXT:
            secret_count = sum(1 for v in variables if needs_placeholder(v.type))
            if secret_count:
                log_secret_access(
                    application_id=rows[0].application_id,
                    resource_type="variable",
                    secret_count=secret_count,
                )
        return variables

    def _to_variable(self, row: ApplicationVariable, mode: ReadMode) -> Variable:
        """Convert a stored row to a Variable schema."""
        variable_type = VariableType.from_string(row.type)
        value = present_value(
            self._codec,
            variable_type,
            row.clear_value,
            row.cipher_value,
            mode,
        )
        return Variable(
            id=UUID(row.id),
            name=row.name,
            type=variable_type,
            value=value,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def insert_variable(self, application_id: str, variable: Variable) -> Variable:
        """Insert a new variable in the application.

        Uniqueness is enforced by the storage constraint, not by a
        pre-check, so concurrent inserts cannot both succeed.

        Returns:
            The created variable, redacted

        Raises:
            VariableExistsError: If the name is already taken
            CodecError: If the value cannot be encrypted
        """
        clear, cipher = self._codec.encrypt(variable.type, variable.value)
        row = ApplicationVariable(
            application_id=application_id,
            name=variable.name,
            clear_value=clear,
            cipher_value=cipher,
            type=variable.type.value,
        )

        try:
            with self._session.begin_nested():
                self._session.add(row)
                self._session.flush()
                self._touch_application(application_id)
        except IntegrityError as e:
            if is_unique_violation(e):
                raise VariableExistsError(application_id, variable.name) from e
            raise StorageError(f"Failed to insert variable '{variable.name}': {e}") from e
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to insert variable '{variable.name}': {e}") from e

        log_variable_change(AuditAction.CREATE, application_id, variable.name, variable.type.value)
        return self._to_variable(row, ReadMode.REDACTED)

    def update_variable(self, application_id: str, variable: Variable) -> bool:
        """Update a variable of the application by name.

        A secret variable whose incoming value is the redaction sentinel
        is left untouched, including `last_modified`.

        Returns:
            True if the variable was rewritten, False for a sentinel no-op

        Raises:
            VariableNotFoundError: If the variable does not exist
            CodecError: If the value cannot be encrypted
        """
        if is_placeholder_write(variable.type, variable.value):
            logger.debug(f"Skipping update of secret variable '{variable.name}': value is the placeholder")
            return False

        clear, cipher = self._codec.encrypt(variable.type, variable.value)
        stmt = (
            update(ApplicationVariable)
            .where(ApplicationVariable.application_id == application_id)
            .where(ApplicationVariable.name == variable.name)
            .values(
                {
                    ApplicationVariable.clear_value: clear,
                    ApplicationVariable.cipher_value: cipher,
                    ApplicationVariable.type: variable.type.value,
                }
            )
        )

        try:
            with self._session.begin_nested():
                result = self._session.execute(stmt)
                if result.rowcount == 0:
                    raise VariableNotFoundError(application_id, variable.name)
                self._touch_application(application_id)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to update variable '{variable.name}': {e}") from e

        log_variable_change(AuditAction.UPDATE, application_id, variable.name, variable.type.value)
        return True

    def delete_variable(self, application_id: str, name: str) -> None:
        """Delete a variable of the application by name.

        Raises:
            VariableNotFoundError: If the variable does not exist
        """
        stmt = (
            delete(ApplicationVariable)
            .where(ApplicationVariable.application_id == application_id)
            .where(ApplicationVariable.name == name)
        )

        try:
            with self._session.begin_nested():
                result = self._session.execute(stmt)
                if result.rowcount == 0:
                    raise VariableNotFoundError(application_id, name)
                self._touch_application(application_id)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to delete variable '{name}': {e}") from e

        log_variable_change(AuditAction.DELETE, application_id, name)

    def delete_all_variables(self, application_id: str) -> int:
        """Delete every variable of the application.

        Succeeds on an empty collection and always bumps `last_modified`.

        Returns:
            Number of variables deleted
        """
        stmt = delete(ApplicationVariable).where(ApplicationVariable.application_id == application_id)

        try:
            with self._session.begin_nested():
                result = self._session.execute(stmt)
                self._touch_application(application_id)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to delete variables of application {application_id}: {e}") from e

        log_variable_change(AuditAction.DELETE_ALL, application_id)
        return result.rowcount

    def rotate_secrets(self, application_id: str) -> int:
        """Re-encrypt every secret variable under the codec's primary key.

        Logical values are unchanged, so `last_modified` is not bumped.

        Returns:
            Number of secret variables re-encrypted

        Raises:
            CodecError: If a stored token cannot be decrypted with any key
        """
        stmt = (
            select(ApplicationVariable)
            .where(ApplicationVariable.application_id == application_id)
            .where(ApplicationVariable.type.in_([t.value for t in SECRET_TYPES]))
        )

        try:
            with self._session.begin_nested():
                rows = self._session.execute(stmt).scalars().all()
                for row in rows:
                    row.cipher_value = self._codec.rotate(row.cipher_value)
                self._session.flush()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to rotate secrets of application {application_id}: {e}") from e

        logger.info(f"Rotated {len(rows)} secret variable(s) of application {application_id}")
        return len(rows)

    def _touch_application(self, application_id: str) -> None:
        """Bump the owning application's last_modified timestamp."""
        stmt = (
            update(Application)
            .where(Application.id == application_id)
            .values({Application.last_modified: datetime.now(UTC)})
        )
        self._session.execute(stmt)
