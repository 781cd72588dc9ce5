"""Audit logging for variable access and mutations.

Provides logging for:
- Variable mutations (create, update, delete)
- Privileged reads that return secret plaintext
- Snapshot recording and retrieval

Only names, kinds, counts and identifiers are logged. Secret values,
cipher tokens and key material never reach the audit log.
"""

import logging
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

# Separate audit logger for security-critical events
audit_logger = logging.getLogger("audit")


class AuditAction(str, Enum):
    """Types of auditable actions."""

    # Variable access
    READ_PLAINTEXT = "read_plaintext"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    DELETE_ALL = "delete_all"

    # Snapshots
    SNAPSHOT = "snapshot"
    SNAPSHOT_READ = "snapshot_read"


class AuditEvent(BaseModel):
    """Audit event record.

    Contains all relevant context for an auditable action.
    """

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    action: AuditAction = Field(..., description="Type of action performed")
    resource_type: str = Field(..., description="Type of resource accessed")
    resource_id: str | None = Field(None, description="ID or name of specific resource")
    application_id: str | None = Field(None, description="Owning application")
    user_id: str | None = Field(None, description="User who performed action")
    details: dict | None = Field(None, description="Additional context")


def log_audit(
    action: AuditAction,
    resource_type: str,
    resource_id: str | None = None,
    application_id: str | None = None,
    user_id: str | None = None,
    details: dict | None = None,
) -> AuditEvent:
    """Log an audit event.

    Args:
        action: Type of action being audited
        resource_type: The type of resource being accessed
        resource_id: Specific resource identifier
        application_id: Application owning the resource
        user_id: User performing the action
        details: Additional context

    Returns:
        The created AuditEvent
    """
    event = AuditEvent(
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        application_id=application_id,
        user_id=user_id,
        details=details,
    )

    audit_logger.info(
        f"AUDIT: {action.value} {resource_type}"
        f"{f'/{resource_id}' if resource_id else ''}"
        f"{f' application={application_id}' if application_id else ''}",
        extra={"audit_event": event.model_dump()},
    )

    return event


def log_variable_change(
    action: AuditAction,
    application_id: str,
    variable_name: str | None = None,
    variable_type: str | None = None,
) -> AuditEvent:
    """Log a variable mutation.

    Args:
        action: CREATE, UPDATE, DELETE or DELETE_ALL
        application_id: Application owning the variable
        variable_name: Name of the variable (None for DELETE_ALL)
        variable_type: Declared kind of the variable

    Returns:
        The created AuditEvent
    """
    details = {"variable_type": variable_type} if variable_type else None
    return log_audit(
        action=action,
        resource_type="variable",
        resource_id=variable_name,
        application_id=application_id,
        details=details,
    )


def log_secret_access(
    application_id: str,
    resource_type: str,
    secret_count: int,
    resource_id: str | None = None,
) -> AuditEvent:
    """Log a privileged read that returned secret plaintext.

    Args:
        application_id: Application whose secrets were read
        resource_type: "variable" or "variable_audit"
        secret_count: Number of secret values revealed
        resource_id: Snapshot ID when reading an audit

    Returns:
        The created AuditEvent
    """
    action = AuditAction.SNAPSHOT_READ if resource_type == "variable_audit" else AuditAction.READ_PLAINTEXT
    return log_audit(
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        application_id=application_id,
        details={"secret_count": secret_count},
    )


def log_snapshot(
    application_id: str,
    audit_id: str,
    author: str,
    variable_count: int,
) -> AuditEvent:
    """Log the recording of a variable snapshot.

    Args:
        application_id: Application that was snapshotted
        audit_id: ID of the stored snapshot
        author: Identity that requested the snapshot
        variable_count: Number of variables in the snapshot

    Returns:
        The created AuditEvent
    """
    return log_audit(
        action=AuditAction.SNAPSHOT,
        resource_type="variable_audit",
        resource_id=audit_id,
        application_id=application_id,
        user_id=author,
        details={"variable_count": variable_count},
    )
