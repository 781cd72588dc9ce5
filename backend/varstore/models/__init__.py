"""SQLAlchemy ORM models for the application variable store.

All models inherit from Base which provides:
- id: UUID primary key
- created_at: Timestamp

Models:
- Application
- ApplicationVariable, ApplicationVariableAudit
"""

from varstore.core.database import Base
from varstore.models.application import Application
from varstore.models.variable import ApplicationVariable, ApplicationVariableAudit

__all__ = [
    "Base",
    "Application",
    "ApplicationVariable",
    "ApplicationVariableAudit",
]
