"""Module: vaccine_product."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vaxcat.core.timeutil import utcnow
from vaxcat.db.base import Base

PRESENTATIONS = ("vial", "prefilled-syringe", "nasal-spray", "oral")
VACCINE_STATUSES = ("active", "discontinued", "pending", "archived")


# A single published version of a vaccine product. Rows are never rewritten
# once a newer version exists; material changes insert a new row under the
# same lineage instead.
class VaccineProduct(Base):
    __tablename__ = "vaccine_products"

    vaccine_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    lineage_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vaccine_lineages.lineage_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Product definition
    name: Mapped[str] = mapped_column(String, nullable=False)
    generic_name: Mapped[str] = mapped_column(String, nullable=False)
    manufacturer: Mapped[str] = mapped_column(String, nullable=False)
    cvx_code: Mapped[str] = mapped_column(String, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    presentation: Mapped[str] = mapped_column(String, nullable=False)
    volume: Mapped[dict] = mapped_column(JSON, nullable=False)
    storage_requirements: Mapped[dict] = mapped_column(JSON, nullable=True)
    total_doses: Mapped[int] = mapped_column(Integer, nullable=False)
    approved_regions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    contraindications: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # Versioning
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    valid_from: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    valid_until: Mapped[datetime] = mapped_column(DateTime, nullable=True)
    update_reason: Mapped[str] = mapped_column(String, nullable=False, default="Initial creation")
    discontinued_reason: Mapped[str] = mapped_column(String, nullable=True)

    # Audit
    created_by: Mapped[str] = mapped_column(String, nullable=False, default="system")
    last_modified_by: Mapped[str] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    doses: Mapped[list["DoseRequirement"]] = relationship(
        back_populates="vaccine",
        order_by="DoseRequirement.dose_number",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_vaccine_products_status_name", "status", "name"),
        # At most one open-ended (current) row per logical vaccine.
        Index(
            "uq_vaccine_products_current",
            "lineage_id",
            unique=True,
            postgresql_where=text("valid_until IS NULL"),
            sqlite_where=text("valid_until IS NULL"),
        ),
    )
