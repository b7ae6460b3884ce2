"""
Dose schedule: per-vaccine dose requirements with copy-on-write versioning.

At most one active requirement exists per (vaccine, dose number); the
database enforces it with a partial unique index. Changing ``min_age`` or
``interval_from_previous`` supersedes the active row and inserts
``version + 1`` in the same transaction; any other change is applied in place.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from vaxcat.core.errors import Conflict, NotFound
from vaxcat.core.timeutil import as_naive_utc, utcnow
from vaxcat.db.models.dose_requirement import DoseRequirement
from vaxcat.db.models.vaccine_lineage import VaccineLineage
from vaxcat.db.models.vaccine_product import VaccineProduct
from vaxcat.schemas.catalog import DoseCreate, DoseUpdate, column_values
from vaxcat.services.audit import record_audit
from vaxcat.services.due_date import compute_due_date
from vaxcat.services.transaction import unit_of_work

logger = logging.getLogger(__name__)

VERSIONED_FIELDS = ("min_age", "interval_from_previous")

CARRIED_FIELDS = (
    "vaccine_id",
    "dose_number",
    "dose_name",
    "min_age",
    "max_age",
    "interval_from_previous",
    "allowable_delay",
    "priority",
    "guidelines",
    "notes",
)

NULLABLE_FIELDS = {"max_age", "notes", "dose_name"}


@dataclass
class DueDateResult:
    due_date: datetime
    status: str
    dose_number: int
    min_age_required: dict
    interval: dict


def _load(db: Session, dose_id: uuid.UUID, with_vaccine: bool = False) -> DoseRequirement:
    options = [selectinload(DoseRequirement.vaccine)] if with_vaccine else []
    dose = db.get(DoseRequirement, dose_id, options=options)
    if not dose:
        raise NotFound("Dose requirement not found")
    return dose


def _require_vaccine(db: Session, vaccine_id: uuid.UUID, current: bool = False) -> VaccineProduct:
    vaccine = db.get(VaccineProduct, vaccine_id)
    if not vaccine:
        raise NotFound("Vaccine not found")
    if current:
        lineage = db.get(VaccineLineage, vaccine.lineage_id)
        if lineage.current_vaccine_id != vaccine.vaccine_id:
            raise Conflict(
                f"Vaccine version {vaccine.version} is no longer current",
                data={"currentVaccineId": str(lineage.current_vaccine_id)},
            )
    return vaccine


def find_active_dose(db: Session, vaccine_id: uuid.UUID, dose_number: int) -> DoseRequirement | None:
    return db.execute(
        select(DoseRequirement).where(
            DoseRequirement.vaccine_id == vaccine_id,
            DoseRequirement.dose_number == dose_number,
            DoseRequirement.status == "active",
        )
    ).scalars().first()


# -------------------------
# Operations
# -------------------------
def create_dose(
    db: Session,
    vaccine_id: uuid.UUID,
    payload: DoseCreate,
    actor_id: str | None = None,
) -> DoseRequirement:
    values = column_values(payload)

    with unit_of_work(db, "dose creation"):
        _require_vaccine(db, vaccine_id, current=True)

        if find_active_dose(db, vaccine_id, payload.dose_number):
            raise Conflict(f"Dose {payload.dose_number} already exists for this vaccine")

        dose = DoseRequirement(**values, vaccine_id=vaccine_id, version=1, status="active")
        dose.dose_name = values.get("dose_name") or f"Dose {payload.dose_number}"
        db.add(dose)
        db.flush()
        record_audit(
            db, actor_id, "dose.created", "dose", dose.dose_id,
            vaccine_id=str(vaccine_id), dose_number=dose.dose_number,
        )

    return dose


def list_doses_for_vaccine(db: Session, vaccine_id: uuid.UUID) -> list[DoseRequirement]:
    with unit_of_work(db, "dose listing", commit=False):
        _require_vaccine(db, vaccine_id)
        doses = db.execute(
            select(DoseRequirement)
            .where(
                DoseRequirement.vaccine_id == vaccine_id,
                DoseRequirement.status != "superseded",
            )
            .order_by(DoseRequirement.dose_number.asc())
        ).scalars().all()

    if not doses:
        raise NotFound("No dose requirements found for this vaccine", data=[])
    return list(doses)


def get_dose(db: Session, dose_id: uuid.UUID) -> DoseRequirement:
    with unit_of_work(db, "dose lookup", commit=False):
        return _load(db, dose_id, with_vaccine=True)


def update_dose(
    db: Session,
    dose_id: uuid.UUID,
    patch: DoseUpdate,
    actor_id: str | None = None,
) -> DoseRequirement:
    changes = {
        k: v for k, v in column_values(patch, exclude_unset=True).items()
        if v is not None or k in NULLABLE_FIELDS
    }

    with unit_of_work(db, "dose update"):
        dose = _load(db, dose_id)
        if dose.status == "superseded" and changes.get("status") != "active":
            raise Conflict(
                f"Dose requirement version {dose.version} is superseded",
                data={"doseNumber": dose.dose_number},
            )
        significant = any(
            field in changes and changes[field] != getattr(dose, field)
            for field in VERSIONED_FIELDS
        )

        if significant:
            result = _supersede(db, dose, changes, actor_id)
        else:
            new_number = changes.get("dose_number")
            becomes_active = changes.get("status", dose.status) == "active"
            if becomes_active and (
                (new_number is not None and new_number != dose.dose_number)
                or dose.status != "active"
            ):
                clash = find_active_dose(db, dose.vaccine_id, new_number or dose.dose_number)
                if clash is not None and clash.dose_id != dose.dose_id:
                    raise Conflict(
                        f"Dose {new_number or dose.dose_number} already exists for this vaccine"
                    )
            for field, value in changes.items():
                setattr(dose, field, value)
            record_audit(
                db, actor_id, "dose.updated", "dose", dose.dose_id, fields=sorted(changes),
            )
            result = dose

    db.refresh(result)
    return result


def _supersede(
    db: Session,
    current: DoseRequirement,
    changes: dict[str, Any],
    actor_id: str | None,
) -> DoseRequirement:
    now = utcnow()
    carried = {field: getattr(current, field) for field in CARRIED_FIELDS}
    old_id, old_version = current.dose_id, current.version

    superseded = db.execute(
        update(DoseRequirement)
        .where(
            DoseRequirement.dose_id == old_id,
            DoseRequirement.version == old_version,
            DoseRequirement.status != "superseded",
        )
        .values(status="superseded", valid_until=now, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if superseded.rowcount != 1:
        raise Conflict("Dose requirement was modified concurrently; reload and retry")
    db.expire(current)

    values = {**carried, **changes}
    values.update(version=old_version + 1, valid_from=now, valid_until=None, status="active")
    successor = DoseRequirement(**values)
    db.add(successor)
    db.flush()

    record_audit(
        db, actor_id, "dose.versioned", "dose", successor.dose_id,
        previous_dose_id=str(old_id),
        previous_version=old_version,
        version=successor.version,
        fields=sorted(changes),
    )
    logger.info(
        "Dose %s of vaccine %s moved from v%s to v%s",
        successor.dose_number, successor.vaccine_id, old_version, successor.version,
    )
    return successor


def delete_dose(db: Session, dose_id: uuid.UUID, actor_id: str | None = None) -> None:
    with unit_of_work(db, "dose deletion"):
        dose = _load(db, dose_id)
        dose.status = "superseded"
        dose.valid_until = utcnow()
        record_audit(db, actor_id, "dose.deleted", "dose", dose.dose_id)


def calculate_due_date(
    db: Session,
    vaccine_id: uuid.UUID,
    patient_age_months: float,
    last_dose_date: datetime | None = None,
    dose_number: int = 1,
    now: datetime | None = None,
) -> DueDateResult:
    with unit_of_work(db, "due date calculation", commit=False):
        dose = find_active_dose(db, vaccine_id, dose_number)
        if not dose:
            raise NotFound("Dose requirements not found")

    due = compute_due_date(
        min_age=dose.min_age,
        interval=dose.interval_from_previous,
        patient_age_months=patient_age_months,
        last_dose_date=as_naive_utc(last_dose_date),
        dose_number=dose_number,
        now=now or utcnow(),
    )
    return DueDateResult(
        due_date=due.due_date,
        status=due.status,
        dose_number=dose.dose_number,
        min_age_required=dose.min_age,
        interval=dose.interval_from_previous,
    )
