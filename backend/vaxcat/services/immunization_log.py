"""Immunization log entries: doses actually given to patients."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from vaxcat.core.errors import NotFound
from vaxcat.core.security import Actor
from vaxcat.core.timeutil import as_naive_utc
from vaxcat.db.models.immunization_log import ImmunizationLog
from vaxcat.db.models.vaccine_lineage import VaccineLineage
from vaxcat.db.models.vaccine_product import VaccineProduct
from vaxcat.schemas.catalog import ImmunizationLogCreate, ImmunizationLogUpdate, column_values
from vaxcat.services.audit import record_audit
from vaxcat.services.dose_schedule import find_active_dose
from vaxcat.services.due_date import interval_days
from vaxcat.services.transaction import unit_of_work

logger = logging.getLogger(__name__)

DATETIME_FIELDS = ("date_administered", "next_due_date")
NULLABLE_FIELDS = {"next_due_date", "notes", "digital_certificate"}


def _load(db: Session, log_id: uuid.UUID) -> ImmunizationLog:
    log = db.get(ImmunizationLog, log_id, options=[selectinload(ImmunizationLog.vaccine)])
    if not log:
        raise NotFound("Immunization log not found")
    return log


def _normalize(values: dict) -> dict:
    for field in DATETIME_FIELDS:
        if field in values:
            values[field] = as_naive_utc(values[field])
    return values


def _next_due_date(db: Session, vaccine: VaccineProduct, log: ImmunizationLog) -> datetime | None:
    # The schedule lives on the lineage's current version row.
    lineage = db.get(VaccineLineage, vaccine.lineage_id)
    schedule_vaccine_id = lineage.current_vaccine_id if lineage else vaccine.vaccine_id
    next_dose = find_active_dose(db, schedule_vaccine_id, log.dose_number + 1)
    if next_dose is None:
        return None

    days = interval_days(next_dose.interval_from_previous)
    if days is None:
        return None
    return log.date_administered + timedelta(days=days)


def create_log(db: Session, payload: ImmunizationLogCreate, actor_id: str | None = None) -> ImmunizationLog:
    """
    Record an administered dose. When the caller leaves ``nextDueDate`` empty
    and the vaccine schedules a following dose, it is filled from that dose's
    interval counted from ``dateAdministered``.
    """
    values = _normalize(column_values(payload))

    with unit_of_work(db, "immunization log creation"):
        vaccine = db.get(VaccineProduct, payload.vaccine_id)
        if not vaccine:
            raise NotFound("Vaccine not found")

        log = ImmunizationLog(**values, recorded_by=actor_id)
        if log.next_due_date is None:
            log.next_due_date = _next_due_date(db, vaccine, log)

        db.add(log)
        db.flush()
        record_audit(
            db, actor_id, "immunization.recorded", "immunization_log", log.log_id,
            vaccine_id=str(vaccine.vaccine_id), dose_number=log.dose_number,
        )

    logger.info("Recorded dose %s of vaccine %s", log.dose_number, log.vaccine_id)
    return _load(db, log.log_id)


def list_logs(db: Session, actor: Actor) -> list[ImmunizationLog]:
    # Staff see every entry; patients only their own.
    with unit_of_work(db, "immunization log listing", commit=False):
        stmt = select(ImmunizationLog).options(selectinload(ImmunizationLog.vaccine))
        if not actor.is_staff:
            stmt = stmt.where(ImmunizationLog.patient_id == actor.actor_id)
        stmt = stmt.order_by(ImmunizationLog.date_administered.desc())
        return list(db.execute(stmt).scalars().all())


def get_log(db: Session, log_id: uuid.UUID, actor: Actor) -> ImmunizationLog:
    with unit_of_work(db, "immunization log lookup", commit=False):
        log = _load(db, log_id)
    if not actor.is_staff and log.patient_id != actor.actor_id:
        # Other patients' records are reported as absent.
        raise NotFound("Immunization log not found")
    return log


def update_log(
    db: Session,
    log_id: uuid.UUID,
    patch: ImmunizationLogUpdate,
    actor_id: str | None = None,
) -> ImmunizationLog:
    changes = _normalize(column_values(patch, exclude_unset=True))
    changes = {k: v for k, v in changes.items() if v is not None or k in NULLABLE_FIELDS}

    with unit_of_work(db, "immunization log update"):
        log = _load(db, log_id)
        for field, value in changes.items():
            setattr(log, field, value)
        record_audit(
            db, actor_id, "immunization.updated", "immunization_log", log.log_id,
            fields=sorted(changes),
        )

    db.refresh(log)
    return log


def delete_log(db: Session, log_id: uuid.UUID, actor_id: str | None = None) -> None:
    with unit_of_work(db, "immunization log deletion"):
        log = _load(db, log_id)
        db.delete(log)
        record_audit(db, actor_id, "immunization.deleted", "immunization_log", log_id)
