from __future__ import annotations
from typing import TYPE_CHECKING
from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from core.database import Base

if TYPE_CHECKING:
    from organization.models import Organization
    from location.models import Location

class Asset(Base):
    """Minimal asset row; only its location reference matters to the location store."""
    __tablename__ = "assets"

    id: Mapped[int] = mapped_column(primary_key=True)
    org_id: Mapped[int] = mapped_column(ForeignKey("organizations.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # RESTRICT: a location with assets is never removed underneath them
    location_id: Mapped[str | None] = mapped_column(
        ForeignKey("locations.id", ondelete="RESTRICT"), index=True, nullable=True
    )

    # relationships
    org: Mapped["Organization"] = relationship("Organization", back_populates="assets")
    location: Mapped["Location | None"] = relationship("Location")
