"""Module: doses."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vaxcat.api.v1.routes.deps import get_db, parse_uuid, require_roles
from vaxcat.api.v1.routes.serializers import dose_out, due_date_out
from vaxcat.core.security import ROLE_ADMIN, ROLE_DOCTOR, ROLE_PATIENT, Actor
from vaxcat.schemas.catalog import DoseCreate, DoseUpdate, DueDateRequest
from vaxcat.services import dose_schedule

router = APIRouter()

staff_only = require_roles(ROLE_DOCTOR, ROLE_ADMIN)
any_member = require_roles(ROLE_PATIENT, ROLE_DOCTOR, ROLE_ADMIN)


@router.post("/calculate", summary="Calculate next dose due date")
def calculate_due_date(
    payload: DueDateRequest,
    actor: Actor = Depends(staff_only),
    db: Session = Depends(get_db),
):
    result = dose_schedule.calculate_due_date(
        db,
        vaccine_id=payload.vaccine_id,
        patient_age_months=payload.patient_age_months,
        last_dose_date=payload.last_dose_date,
        dose_number=payload.dose_number,
    )
    return {"success": True, "data": due_date_out(result)}


@router.post("/vaccine/{vaccine_id}", status_code=201, summary="Create dose requirement")
def create_dose(
    vaccine_id: str,
    payload: DoseCreate,
    actor: Actor = Depends(staff_only),
    db: Session = Depends(get_db),
):
    vid = parse_uuid(vaccine_id, "vaccine_id")
    dose = dose_schedule.create_dose(db, vid, payload, actor.actor_id)
    return {
        "success": True,
        "message": "Dose requirement created successfully",
        "data": dose_out(dose),
    }


@router.get("/vaccine/{vaccine_id}", summary="List dose requirements for a vaccine")
def list_vaccine_doses(
    vaccine_id: str,
    actor: Actor = Depends(any_member),
    db: Session = Depends(get_db),
):
    vid = parse_uuid(vaccine_id, "vaccine_id")
    doses = dose_schedule.list_doses_for_vaccine(db, vid)
    return {"success": True, "count": len(doses), "data": [dose_out(d) for d in doses]}


@router.get("/{dose_id}", summary="Get dose requirement")
def get_dose(
    dose_id: str,
    actor: Actor = Depends(any_member),
    db: Session = Depends(get_db),
):
    did = parse_uuid(dose_id, "dose_id")
    dose = dose_schedule.get_dose(db, did)
    return {"success": True, "data": dose_out(dose, include_vaccine=True)}


@router.put("/{dose_id}", summary="Update dose requirement (may create a new version)")
def update_dose(
    dose_id: str,
    payload: DoseUpdate,
    actor: Actor = Depends(staff_only),
    db: Session = Depends(get_db),
):
    did = parse_uuid(dose_id, "dose_id")
    dose = dose_schedule.update_dose(db, did, payload, actor.actor_id)
    message = (
        "Dose requirement updated with new version"
        if dose.dose_id != did
        else "Dose requirement updated successfully"
    )
    return {"success": True, "message": message, "data": dose_out(dose)}


@router.delete("/{dose_id}", summary="Soft delete dose requirement")
def delete_dose(
    dose_id: str,
    actor: Actor = Depends(staff_only),
    db: Session = Depends(get_db),
):
    did = parse_uuid(dose_id, "dose_id")
    dose_schedule.delete_dose(db, did, actor.actor_id)
    return {"success": True, "message": "Dose requirement deleted (soft delete)", "data": {}}
