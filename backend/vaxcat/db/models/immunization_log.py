"""Module: immunization_log."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vaxcat.core.timeutil import utcnow
from vaxcat.db.base import Base


# A dose given to a patient. Points at the exact vaccine version administered.
class ImmunizationLog(Base):
    __tablename__ = "immunization_logs"

    log_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    patient_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    vaccine_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vaccine_products.vaccine_id", ondelete="CASCADE"),
        nullable=False,
    )

    dose_number: Mapped[int] = mapped_column(Integer, nullable=False)
    date_administered: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    next_due_date: Mapped[datetime] = mapped_column(DateTime, nullable=True)
    clinic: Mapped[str] = mapped_column(String, nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=True)
    digital_certificate: Mapped[str] = mapped_column(Text, nullable=True)

    recorded_by: Mapped[str] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    vaccine: Mapped["VaccineProduct"] = relationship()
