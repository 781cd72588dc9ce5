"""Variable and VariableAudit schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from varstore.schemas.base import VariableType


class Variable(BaseModel):
    """Schema for an application variable.

    `value` holds plaintext, a cipher token or the redaction sentinel
    depending on the read mode that produced it.
    """

    id: UUID | None = Field(None, description="Unique variable identifier, assigned on creation")
    name: str = Field(..., min_length=1, description="Variable name, unique per application")
    type: VariableType = Field(..., description="Declared kind of the variable")
    value: str = Field("", description="Variable value")


class VariableAudit(BaseModel):
    """Schema for a point-in-time snapshot of an application's variables."""

    id: UUID = Field(..., description="Unique snapshot identifier")
    versioned: datetime = Field(..., description="When the snapshot was recorded")
    author: str = Field(..., description="Identity that requested the snapshot")
    variables: list[Variable] = Field(default_factory=list, description="Variables at record time")
