"""SQLAlchemy model for Application."""

from datetime import datetime

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from varstore.core.database import Base


class Application(Base):
    """Application owning a collection of variables.

    Managed by the surrounding service. The variable store only scopes
    reads by it and bumps `last_modified` after each mutation.
    """

    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("project_key", "name", name="uq_applications_project_key_name"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    project_key: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    last_modified: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Application(id={self.id}, project_key={self.project_key}, name={self.name})>"
