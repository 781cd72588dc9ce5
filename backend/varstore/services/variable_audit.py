"""Variable audit trail.

Records explicit, immutable snapshots of an application's whole variable
collection. Snapshots are built from the encrypted read path: secret
values are stored as base64 encoded cipher tokens and never pass through
plaintext while recording.

Two read paths with different privileges:
- get_snapshot decodes and decrypts every secret (privileged)
- list_snapshots replaces every secret with the placeholder and never
  decodes the token (unprivileged)
"""

import base64
import binascii
import logging
from datetime import UTC, datetime
from uuid import UUID

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from varstore.core.audit import log_secret_access, log_snapshot
from varstore.core.exceptions import AuditNotFoundError, CodecError, SerializationError, StorageError
from varstore.models import ApplicationVariableAudit
from varstore.schemas.base import PASSWORD_PLACEHOLDER, ReadMode
from varstore.schemas.variable import Variable, VariableAudit
from varstore.services.placeholder import needs_placeholder
from varstore.services.secret_codec import SecretCodec
from varstore.services.variable_store import VariableStore

logger = logging.getLogger(__name__)

_snapshot_adapter = TypeAdapter(list[Variable])


def encode_snapshot_token(token: str) -> str:
    """Encode a cipher token so it survives JSON serialization."""
    return base64.b64encode(token.encode("utf-8")).decode("ascii")


def decode_snapshot_token(value: str) -> bytes:
    """Decode a stored snapshot token back into the cipher blob.

    Raises:
        CodecError: If the token is not valid base64
    """
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CodecError("Malformed secret token in audit snapshot") from e


def as_utc(value: datetime) -> datetime:
    """Return a timezone-aware UTC datetime.

    Backends without timezone support hand back naive values that were
    written as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def serialize_snapshot(variables: list[Variable]) -> str:
    """Serialize a variable collection into a snapshot block.

    Raises:
        SerializationError: If the collection cannot be encoded
    """
    try:
        return _snapshot_adapter.dump_json(variables).decode("utf-8")
    except (ValueError, TypeError) as e:
        raise SerializationError(f"Failed to serialize variable snapshot: {e}") from e


def deserialize_snapshot(data: str) -> list[Variable]:
    """Parse a snapshot block back into variables.

    Raises:
        SerializationError: If the block is not a valid variable list
    """
    try:
        return _snapshot_adapter.validate_json(data)
    except ValidationError as e:
        raise SerializationError(f"Failed to deserialize variable snapshot: {e}") from e


class VariableAuditService:
    """Audit trail of application variable snapshots.

    Usage:
        audits = VariableAuditService(session, codec)
        audit = audits.record_snapshot(app_id, author="alice")
        variables = audits.get_snapshot(app_id, audit.id)
    """

    def __init__(self, session: Session, codec: SecretCodec) -> None:
        """Initialize the audit service.

        Args:
            session: SQLAlchemy database session.
            codec: Secret codec used to decrypt snapshot secrets.
        """
        self._session = session
        self._codec = codec
        self._store = VariableStore(session, codec)

    def record_snapshot(self, application_id: str, author: str) -> VariableAudit:
        """Snapshot the current variables of an application.

        Args:
            application_id: Application to snapshot
            author: Identity requesting the snapshot

        Returns:
            The recorded audit, with secret values redacted
        """
        variables = self._store.list_variables(application_id, ReadMode.ENCRYPTED)
        stored = [
            v.model_copy(update={"value": encode_snapshot_token(v.value)}) if needs_placeholder(v.type) else v
            for v in variables
        ]

        audit = ApplicationVariableAudit(
            application_id=application_id,
            versioned=datetime.now(UTC),
            data=serialize_snapshot(stored),
            author=author,
        )
        try:
            self._session.add(audit)
            self._session.flush()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to record variable audit for application {application_id}: {e}") from e

        log_snapshot(application_id, audit.id, author, len(variables))
        return VariableAudit(
            id=UUID(audit.id),
            versioned=as_utc(audit.versioned),
            author=author,
            variables=[self._redact(v) for v in stored],
        )

    def get_snapshot(self, application_id: str, audit_id: UUID | str) -> list[Variable]:
        """Retrieve one snapshot with every secret decrypted.

        Raises:
            AuditNotFoundError: If no snapshot matches the id and application
            CodecError: If a stored secret token is malformed
            SerializationError: If the stored block cannot be parsed
        """
        # A malformed id can match no row; never hand it to the UUID column
        try:
            audit_uuid = UUID(str(audit_id))
        except ValueError as e:
            raise AuditNotFoundError(f"Variable audit {audit_id} not found for application {application_id}") from e

        stmt = (
            select(ApplicationVariableAudit.data)
            .where(ApplicationVariableAudit.id == str(audit_uuid))
            .where(ApplicationVariableAudit.application_id == application_id)
        )
        try:
            data = self._session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load variable audit {audit_id}: {e}") from e

        if data is None:
            raise AuditNotFoundError(f"Variable audit {audit_id} not found for application {application_id}")

        variables = deserialize_snapshot(data)
        secret_count = 0
        for i, variable in enumerate(variables):
            if not needs_placeholder(variable.type):
                continue
            cipher = decode_snapshot_token(variable.value)
            plaintext = self._codec.decrypt(variable.type, None, cipher, want_plaintext=True)
            variables[i] = variable.model_copy(update={"value": plaintext})
            secret_count += 1

        if secret_count:
            log_secret_access(
                application_id=application_id,
                resource_type="variable_audit",
                secret_count=secret_count,
                resource_id=str(audit_id),
            )
        return variables

    def list_snapshots(self, application_id: str) -> list[VariableAudit]:
        """List every snapshot of an application, newest first, redacted."""
        stmt = (
            select(ApplicationVariableAudit)
            .where(ApplicationVariableAudit.application_id == application_id)
            .order_by(ApplicationVariableAudit.versioned.desc())
        )
        try:
            rows = self._session.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list variable audits for application {application_id}: {e}") from e

        audits = []
        for row in rows:
            variables = deserialize_snapshot(row.data)
            audits.append(
                VariableAudit(
                    id=UUID(row.id),
                    versioned=as_utc(row.versioned),
                    author=row.author,
                    variables=[self._redact(v) for v in variables],
                )
            )

        logger.debug(f"Listed {len(audits)} variable audit(s) for application {application_id}")
        return audits

    @staticmethod
    def _redact(variable: Variable) -> Variable:
        """Replace a secret value with the placeholder."""
        if needs_placeholder(variable.type):
            return variable.model_copy(update={"value": PASSWORD_PLACEHOLDER})
        return variable
