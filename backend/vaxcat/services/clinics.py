"""Clinic directory: where vaccinations are given and when each site is open."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from vaxcat.core.errors import NotFound, ValidationError
from vaxcat.db.models.clinic import Clinic
from vaxcat.schemas.booking import ClinicCreate, ClinicUpdate
from vaxcat.schemas.catalog import column_values
from vaxcat.services.audit import record_audit
from vaxcat.services.transaction import unit_of_work

logger = logging.getLogger(__name__)


def _load(db: Session, clinic_id: uuid.UUID) -> Clinic:
    clinic = db.get(Clinic, clinic_id)
    if not clinic:
        raise NotFound("Clinic not found")
    return clinic


def _check_hours(clinic: Clinic) -> None:
    # Zero-padded "HH:MM" strings compare in clock order.
    if clinic.close_time <= clinic.open_time:
        raise ValidationError("Closing time must be after opening time")


def create_clinic(db: Session, payload: ClinicCreate, actor_id: str | None = None) -> Clinic:
    with unit_of_work(db, "clinic creation"):
        clinic = Clinic(**column_values(payload))
        _check_hours(clinic)
        db.add(clinic)
        db.flush()
        record_audit(db, actor_id, "clinic.created", "clinic", clinic.clinic_id, city=clinic.city)

    logger.info("Created clinic %s in %s", clinic.clinic_name, clinic.city)
    return clinic


def list_clinics(db: Session) -> list[Clinic]:
    with unit_of_work(db, "clinic listing", commit=False):
        clinics = list(
            db.execute(select(Clinic).order_by(Clinic.clinic_name.asc())).scalars().all()
        )

    if not clinics:
        raise NotFound("No clinics found", data=[])
    return clinics


def get_clinic(db: Session, clinic_id: uuid.UUID) -> Clinic:
    with unit_of_work(db, "clinic lookup", commit=False):
        return _load(db, clinic_id)


def update_clinic(
    db: Session,
    clinic_id: uuid.UUID,
    patch: ClinicUpdate,
    actor_id: str | None = None,
) -> Clinic:
    changes = {
        k: v for k, v in column_values(patch, exclude_unset=True).items() if v is not None
    }

    with unit_of_work(db, "clinic update"):
        clinic = _load(db, clinic_id)
        for field, value in changes.items():
            setattr(clinic, field, value)
        _check_hours(clinic)
        record_audit(db, actor_id, "clinic.updated", "clinic", clinic.clinic_id, fields=sorted(changes))

    db.refresh(clinic)
    return clinic


def delete_clinic(db: Session, clinic_id: uuid.UUID, actor_id: str | None = None) -> None:
    with unit_of_work(db, "clinic deletion"):
        clinic = _load(db, clinic_id)
        db.delete(clinic)
        record_audit(db, actor_id, "clinic.deleted", "clinic", clinic_id)
