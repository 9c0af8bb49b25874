from __future__ import annotations
import uuid
from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import String, Text, DateTime, ForeignKey, UniqueConstraint, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from core.database import Base

if TYPE_CHECKING:
    from organization.models import Organization


def new_location_id() -> str:
    return str(uuid.uuid4())


class Location(Base):
    __tablename__ = "locations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_location_id)
    org_id: Mapped[int] = mapped_column(ForeignKey("organizations.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    parent_id: Mapped[str | None] = mapped_column(
        ForeignKey("locations.id", ondelete="RESTRICT"), index=True, nullable=True
    )
    # materialized path, written only by location.service
    path: Mapped[str] = mapped_column(Text(), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # relationships (no children collection: subtrees are read through path prefixes)
    org: Mapped["Organization"] = relationship("Organization", back_populates="locations")
    parent: Mapped["Location | None"] = relationship("Location", remote_side=[id])

    __table_args__ = (
        UniqueConstraint("org_id", "parent_id", "name", name="uq_location_org_parent_name"),
        # NULL parent_ids never collide in a unique constraint, so roots get their own index
        Index(
            "uq_location_org_root_name",
            "org_id",
            "name",
            unique=True,
            postgresql_where=text("parent_id IS NULL"),
            sqlite_where=text("parent_id IS NULL"),
        ),
        Index("ix_locations_path", "path", postgresql_ops={"path": "text_pattern_ops"}),
    )

    def __repr__(self) -> str:
        return f"<Location(id={self.id}, name='{self.name}', path='{self.path}')>"
