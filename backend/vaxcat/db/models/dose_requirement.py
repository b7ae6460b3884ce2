"""Module: dose_requirement."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vaxcat.core.timeutil import utcnow
from vaxcat.db.base import Base

AGE_UNITS = ("days", "weeks", "months", "years")
DOSE_PRIORITIES = ("routine", "catchup", "special")
DOSE_STATUSES = ("active", "superseded", "pending")


# Age and spacing rules for one dose of a vaccine. ``min_age``, ``max_age``
# and ``interval_from_previous`` are stored in their wire form, e.g.
# {"value": 6, "unit": "months"} and {"minDays": 0, "maxDays": None, "exactDays": 28}.
class DoseRequirement(Base):
    __tablename__ = "dose_requirements"

    dose_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    vaccine_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vaccine_products.vaccine_id", ondelete="CASCADE"),
        nullable=False,
    )
    dose_number: Mapped[int] = mapped_column(Integer, nullable=False)
    dose_name: Mapped[str] = mapped_column(String, nullable=True)

    # Schedule rules
    min_age: Mapped[dict] = mapped_column(JSON, nullable=False)
    max_age: Mapped[dict] = mapped_column(JSON, nullable=True)
    interval_from_previous: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    allowable_delay: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    priority: Mapped[str] = mapped_column(String, nullable=False, default="routine")
    guidelines: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    notes: Mapped[str] = mapped_column(Text, nullable=True)

    # Versioning
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    valid_from: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    valid_until: Mapped[datetime] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    vaccine: Mapped["VaccineProduct"] = relationship(back_populates="doses")

    __table_args__ = (
        Index("ix_dose_requirements_vaccine_status", "vaccine_id", "status"),
        Index(
            "uq_dose_requirements_active_number",
            "vaccine_id",
            "dose_number",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )
