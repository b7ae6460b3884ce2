"""
Vaccine catalog: published vaccine products with copy-on-write versioning.

A logical vaccine (``VaccineLineage``) owns one or more version rows
(``VaccineProduct``). Editing descriptive fields rewrites the current row in
place; changing ``status`` or ``total_doses`` archives the current row and
inserts ``version + 1``. The archive, the insert and the lineage pointer swap
happen in one transaction, guarded by a compare-and-set on the old row and by
the lineage ``revision`` counter.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import Session, selectinload

from vaxcat.core.errors import Conflict, NotFound
from vaxcat.core.timeutil import utcnow
from vaxcat.db.models.dose_requirement import DoseRequirement
from vaxcat.db.models.immunization_log import ImmunizationLog
from vaxcat.db.models.vaccine_lineage import VaccineLineage
from vaxcat.db.models.vaccine_product import VaccineProduct
from vaxcat.schemas.catalog import VaccineCreate, VaccineUpdate, column_values
from vaxcat.services.audit import record_audit
from vaxcat.services.transaction import unit_of_work

logger = logging.getLogger(__name__)

# Fields whose change produces a new version instead of an in-place edit.
VERSIONED_FIELDS = ("status", "total_doses")

# Product fields carried from one version row to the next.
CARRIED_FIELDS = (
    "name",
    "generic_name",
    "manufacturer",
    "cvx_code",
    "description",
    "presentation",
    "volume",
    "storage_requirements",
    "total_doses",
    "approved_regions",
    "contraindications",
    "created_by",
)

# Columns a patch may explicitly clear with null.
NULLABLE_FIELDS = {"storage_requirements"}

HISTORY_FIELDS = ("name", "version", "status", "valid_from", "valid_until", "update_reason")


def _clean_patch(changes: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in changes.items() if v is not None or k in NULLABLE_FIELDS}


def _load(db: Session, vaccine_id: uuid.UUID, with_doses: bool = False) -> VaccineProduct:
    options = [selectinload(VaccineProduct.doses)] if with_doses else []
    vaccine = db.get(VaccineProduct, vaccine_id, options=options)
    if not vaccine:
        raise NotFound("Vaccine not found")
    return vaccine


def _ensure_identity_free(
    db: Session,
    name: str | None,
    cvx_code: str | None,
    exclude_lineage: uuid.UUID | None = None,
) -> None:
    if cvx_code is not None:
        stmt = select(VaccineLineage.lineage_id).where(VaccineLineage.cvx_code == cvx_code)
        if exclude_lineage is not None:
            stmt = stmt.where(VaccineLineage.lineage_id != exclude_lineage)
        if db.execute(stmt).first():
            raise Conflict("Vaccine with this CVX code already exists")

    if name is not None:
        stmt = select(VaccineLineage.lineage_id).where(func.lower(VaccineLineage.name) == name.lower())
        if exclude_lineage is not None:
            stmt = stmt.where(VaccineLineage.lineage_id != exclude_lineage)
        if db.execute(stmt).first():
            raise Conflict("Vaccine with this name already exists")


def _sync_lineage_identity(db: Session, lineage: VaccineLineage, changes: dict[str, Any]) -> None:
    name = changes.get("name")
    cvx_code = changes.get("cvx_code")
    name = name if name is not None and name != lineage.name else None
    cvx_code = cvx_code if cvx_code is not None and cvx_code != lineage.cvx_code else None
    if name is None and cvx_code is None:
        return

    _ensure_identity_free(db, name, cvx_code, exclude_lineage=lineage.lineage_id)
    if name is not None:
        lineage.name = name
    if cvx_code is not None:
        lineage.cvx_code = cvx_code


def _requires_new_version(vaccine: VaccineProduct, changes: dict[str, Any]) -> bool:
    return any(
        field in changes and changes[field] != getattr(vaccine, field)
        for field in VERSIONED_FIELDS
    )


# -------------------------
# Operations
# -------------------------
def create_vaccine(db: Session, payload: VaccineCreate, actor_id: str | None = None) -> VaccineProduct:
    values = column_values(payload)
    actor = actor_id or "system"

    with unit_of_work(db, "vaccine creation"):
        # A code used by any earlier version row counts as taken, not just live lineages.
        taken = db.execute(
            select(VaccineProduct.vaccine_id).where(VaccineProduct.cvx_code == values["cvx_code"])
        ).first()
        if taken:
            raise Conflict("Vaccine with this CVX code already exists")
        _ensure_identity_free(db, values["name"], values["cvx_code"])

        lineage = VaccineLineage(name=values["name"], cvx_code=values["cvx_code"])
        db.add(lineage)
        db.flush()

        vaccine = VaccineProduct(
            **values,
            lineage_id=lineage.lineage_id,
            version=1,
            created_by=actor,
            last_modified_by=actor,
        )
        vaccine.status = values.get("status") or "active"
        vaccine.update_reason = values.get("update_reason") or "Initial creation"
        db.add(vaccine)
        db.flush()

        lineage.current_vaccine_id = vaccine.vaccine_id
        record_audit(db, actor, "vaccine.created", "vaccine", vaccine.vaccine_id, version=1)

    logger.info("Created vaccine %s (cvx %s)", vaccine.vaccine_id, vaccine.cvx_code)
    return vaccine


def list_vaccines(
    db: Session,
    status: str | None = None,
    manufacturer: str | None = None,
    search: str | None = None,
    region: str | None = None,
) -> list[VaccineProduct]:
    with unit_of_work(db, "vaccine listing", commit=False):
        stmt = select(VaccineProduct).options(selectinload(VaccineProduct.doses))

        if status:
            stmt = stmt.where(VaccineProduct.status == status)
        if manufacturer:
            stmt = stmt.where(VaccineProduct.manufacturer == manufacturer)
        if search:
            stmt = stmt.where(
                or_(
                    VaccineProduct.name.icontains(search, autoescape=True),
                    VaccineProduct.generic_name.icontains(search, autoescape=True),
                )
            )

        stmt = stmt.order_by(VaccineProduct.name.asc(), VaccineProduct.version.desc())
        vaccines = list(db.execute(stmt).scalars().all())

    # JSON containment differs per backend; the region match runs in Python.
    if region:
        vaccines = [
            v for v in vaccines
            if any((entry or {}).get("country") == region for entry in (v.approved_regions or []))
        ]

    if not vaccines:
        raise NotFound("No vaccines found", data=[])
    return vaccines


def get_vaccine(db: Session, vaccine_id: uuid.UUID) -> VaccineProduct:
    with unit_of_work(db, "vaccine lookup", commit=False):
        return _load(db, vaccine_id, with_doses=True)


def update_vaccine(
    db: Session,
    vaccine_id: uuid.UUID,
    patch: VaccineUpdate,
    actor_id: str | None = None,
) -> tuple[VaccineProduct, int | None]:
    """
    Apply a patch; returns the resulting current row and, when a new version
    was cut, the version number it replaced.
    """
    changes = _clean_patch(column_values(patch, exclude_unset=True))
    actor = actor_id or "system"

    with unit_of_work(db, "vaccine update"):
        vaccine = _load(db, vaccine_id)
        lineage = db.get(VaccineLineage, vaccine.lineage_id)
        if lineage.current_vaccine_id != vaccine.vaccine_id:
            raise Conflict(
                f"Vaccine version {vaccine.version} is no longer current",
                data={"currentVaccineId": str(lineage.current_vaccine_id)},
            )

        _sync_lineage_identity(db, lineage, changes)

        if not _requires_new_version(vaccine, changes):
            for field, value in changes.items():
                setattr(vaccine, field, value)
            vaccine.last_modified_by = actor
            record_audit(
                db, actor, "vaccine.updated", "vaccine", vaccine.vaccine_id,
                fields=sorted(changes),
            )
            result, previous_version = vaccine, None
        else:
            previous_version = vaccine.version
            result = _cut_new_version(db, lineage, vaccine, changes, actor)

    if previous_version is not None:
        logger.info(
            "Vaccine lineage %s moved from v%s to v%s",
            result.lineage_id, previous_version, result.version,
        )
    db.refresh(result)
    return result, previous_version


def _cut_new_version(
    db: Session,
    lineage: VaccineLineage,
    current: VaccineProduct,
    changes: dict[str, Any],
    actor: str,
) -> VaccineProduct:
    now = utcnow()
    carried = {field: getattr(current, field) for field in CARRIED_FIELDS}
    old_id, old_version = current.vaccine_id, current.version

    # Compare-and-set: only archive the row if nobody archived it first.
    archived = db.execute(
        update(VaccineProduct)
        .where(
            VaccineProduct.vaccine_id == old_id,
            VaccineProduct.version == old_version,
            VaccineProduct.status != "archived",
        )
        .values(status="archived", valid_until=now, last_modified_by=actor, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if archived.rowcount != 1:
        raise Conflict("Vaccine was modified concurrently; reload and retry")
    db.expire(current)

    values = {**carried, **changes}
    values.update(
        lineage_id=lineage.lineage_id,
        version=old_version + 1,
        valid_from=now,
        valid_until=None,
        status=changes.get("status") or "active",
        update_reason=changes.get("update_reason") or "Manual update",
        last_modified_by=actor,
    )
    successor = VaccineProduct(**values)
    db.add(successor)
    db.flush()

    # The live dose schedule follows the logical vaccine to its new version.
    db.execute(
        update(DoseRequirement)
        .where(DoseRequirement.vaccine_id == old_id, DoseRequirement.status != "superseded")
        .values(vaccine_id=successor.vaccine_id)
        .execution_options(synchronize_session=False)
    )

    # Pointer swap; stale ``revision`` raises StaleDataError on flush.
    lineage.current_vaccine_id = successor.vaccine_id
    db.flush()

    record_audit(
        db, actor, "vaccine.versioned", "vaccine", successor.vaccine_id,
        previous_vaccine_id=str(old_id),
        previous_version=old_version,
        version=successor.version,
        fields=sorted(changes),
    )
    return successor


def delete_vaccine(
    db: Session,
    vaccine_id: uuid.UUID,
    reason: str | None = None,
    hard: bool = False,
    actor_id: str | None = None,
) -> None:
    """
    Discontinue a vaccine, or with ``hard`` remove the whole logical vaccine
    (every version row, its doses and immunization logs). Both are refused
    while any dose of the vaccine is still active.
    """
    actor = actor_id or "system"

    with unit_of_work(db, "vaccine deletion"):
        vaccine = _load(db, vaccine_id)
        lineage = db.get(VaccineLineage, vaccine.lineage_id)
        if lineage.current_vaccine_id != vaccine.vaccine_id:
            raise Conflict(
                f"Vaccine version {vaccine.version} is no longer current",
                data={"currentVaccineId": str(lineage.current_vaccine_id)},
            )
        version_ids = select(VaccineProduct.vaccine_id).where(
            VaccineProduct.lineage_id == vaccine.lineage_id
        )
        active_doses = db.execute(
            select(func.count(DoseRequirement.dose_id)).where(
                DoseRequirement.vaccine_id.in_(version_ids),
                DoseRequirement.status == "active",
            )
        ).scalar_one()
        if active_doses:
            raise Conflict(
                "Cannot delete vaccine with active dose requirements. Archive doses first.",
                data={"activeDoses": active_doses},
            )

        if hard:
            _purge_lineage(db, vaccine.lineage_id)
            record_audit(
                db, actor, "vaccine.purged", "vaccine", vaccine.vaccine_id,
                lineage_id=str(vaccine.lineage_id), name=vaccine.name,
            )
        else:
            vaccine.status = "discontinued"
            vaccine.valid_until = utcnow()
            vaccine.discontinued_reason = reason or "Manual discontinuation"
            vaccine.last_modified_by = actor
            record_audit(
                db, actor, "vaccine.discontinued", "vaccine", vaccine.vaccine_id,
                reason=vaccine.discontinued_reason,
            )

    logger.info("%s vaccine %s", "Purged" if hard else "Discontinued", vaccine_id)


def _purge_lineage(db: Session, lineage_id: uuid.UUID) -> None:
    version_ids = select(VaccineProduct.vaccine_id).where(VaccineProduct.lineage_id == lineage_id)
    db.execute(
        delete(ImmunizationLog)
        .where(ImmunizationLog.vaccine_id.in_(version_ids))
        .execution_options(synchronize_session=False)
    )
    db.execute(
        delete(DoseRequirement)
        .where(DoseRequirement.vaccine_id.in_(version_ids))
        .execution_options(synchronize_session=False)
    )
    db.execute(
        delete(VaccineProduct)
        .where(VaccineProduct.lineage_id == lineage_id)
        .execution_options(synchronize_session=False)
    )
    db.execute(
        delete(VaccineLineage)
        .where(VaccineLineage.lineage_id == lineage_id)
        .execution_options(synchronize_session=False)
    )
    db.expunge_all()


def get_vaccine_history(db: Session, vaccine_id: uuid.UUID) -> tuple[VaccineProduct, list[dict[str, Any]]]:
    with unit_of_work(db, "vaccine history lookup", commit=False):
        vaccine = _load(db, vaccine_id)
        rows = db.execute(
            select(VaccineProduct)
            .where(
                or_(
                    VaccineProduct.lineage_id == vaccine.lineage_id,
                    VaccineProduct.name == vaccine.name,
                    VaccineProduct.cvx_code == vaccine.cvx_code,
                )
            )
            .order_by(VaccineProduct.version.desc())
        ).scalars().all()

    history = [{field: getattr(row, field) for field in HISTORY_FIELDS} for row in rows]
    return vaccine, history
