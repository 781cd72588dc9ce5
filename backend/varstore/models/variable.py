"""SQLAlchemy models for ApplicationVariable and ApplicationVariableAudit."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, LargeBinary, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from varstore.core.database import Base


class ApplicationVariable(Base):
    """Variable stored in its split representation.

    Non-secret kinds keep the value in `var_value` and leave
    `cipher_value` NULL. Secret kinds keep `var_value` NULL and store
    the encrypted token in `cipher_value`.
    """

    __tablename__ = "application_variables"
    __table_args__ = (
        UniqueConstraint(
            "application_id",
            "var_name",
            name="uq_application_variables_application_id_var_name",
        ),
    )

    application_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        "var_name",  # Column name in database
        String(255),
        nullable=False,
    )
    clear_value: Mapped[str | None] = mapped_column(
        "var_value",
        Text,
        nullable=True,
    )
    cipher_value: Mapped[bytes | None] = mapped_column(
        LargeBinary,
        nullable=True,
    )
    type: Mapped[str] = mapped_column(
        "var_type",
        String(50),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<ApplicationVariable(id={self.id}, application_id={self.application_id}, name={self.name}, type={self.type})>"


class ApplicationVariableAudit(Base):
    """Immutable snapshot of an application's variables.

    `data` is a JSON array of variables in which secret values are
    kept as base64 encoded cipher tokens, never plaintext.
    """

    __tablename__ = "application_variable_audits"

    application_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    versioned: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    data: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    author: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<ApplicationVariableAudit(id={self.id}, application_id={self.application_id}, versioned={self.versioned}, author={self.author})>"
