"""Module: audit_log."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from vaxcat.core.timeutil import utcnow
from vaxcat.db.base import Base

# Stores immutable audit trail entries for catalog mutations.
class AuditLog(Base):
    __tablename__ = "audit_log"

    audit_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4
    )

    actor: Mapped[str] = mapped_column(String, nullable=False, default="system")
    action: Mapped[str] = mapped_column(String, nullable=False)
    target_type: Mapped[str] = mapped_column(String, nullable=False)
    target_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    meta: Mapped[dict] = mapped_column(JSON)

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow
    )
