"""Pydantic schemas for the application variable store."""

from varstore.schemas.base import PASSWORD_PLACEHOLDER, SECRET_TYPES, ReadMode, VariableType
from varstore.schemas.variable import Variable, VariableAudit

__all__ = [
    # Base enums and constants
    "PASSWORD_PLACEHOLDER",
    "SECRET_TYPES",
    "ReadMode",
    "VariableType",
    # Variable schemas
    "Variable",
    "VariableAudit",
]
