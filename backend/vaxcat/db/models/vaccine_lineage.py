"""Module: vaccine_lineage."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from vaxcat.core.timeutil import utcnow
from vaxcat.db.base import Base


# One row per logical vaccine. Holds the identity that must stay unique across
# versions and an explicit pointer to the version currently in effect.
# ``revision`` is the optimistic-concurrency counter: every pointer swap is an
# UPDATE ... WHERE revision = <loaded value>.
class VaccineLineage(Base):
    __tablename__ = "vaccine_lineages"

    lineage_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    cvx_code: Mapped[str] = mapped_column(String, nullable=False, unique=True)

    current_vaccine_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=True, unique=True)
    revision: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    __mapper_args__ = {"version_id_col": revision}
