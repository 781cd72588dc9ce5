"""Core configuration and utilities."""

from varstore.core.audit import AuditAction, AuditEvent, log_audit, log_secret_access, log_variable_change
from varstore.core.config import settings
from varstore.core.database import Base, session_scope
from varstore.core.exceptions import (
    ApplicationNotFoundError,
    AuditNotFoundError,
    CodecError,
    NotFoundError,
    SerializationError,
    StorageError,
    VariableExistsError,
    VariableNotFoundError,
    VariableStoreError,
)

__all__ = [
    # Config
    "settings",
    # Database
    "Base",
    "session_scope",
    # Audit
    "AuditAction",
    "AuditEvent",
    "log_audit",
    "log_secret_access",
    "log_variable_change",
    # Errors
    "VariableStoreError",
    "NotFoundError",
    "ApplicationNotFoundError",
    "VariableNotFoundError",
    "AuditNotFoundError",
    "VariableExistsError",
    "CodecError",
    "StorageError",
    "SerializationError",
]
