"""Module: appointments."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vaxcat.api.v1.routes.deps import get_db, parse_uuid, require_roles
from vaxcat.api.v1.routes.serializers import appointment_out
from vaxcat.core.security import ROLE_ADMIN, ROLE_DOCTOR, ROLE_PATIENT, Actor
from vaxcat.schemas.booking import AppointmentCreate, AppointmentUpdate
from vaxcat.services import appointments

router = APIRouter()

patient_only = require_roles(ROLE_PATIENT)
any_member = require_roles(ROLE_PATIENT, ROLE_DOCTOR, ROLE_ADMIN)
owner_or_admin = require_roles(ROLE_PATIENT, ROLE_ADMIN)
admin_only = require_roles(ROLE_ADMIN)


@router.post("", status_code=201, summary="Book appointment")
def create_appointment(
    payload: AppointmentCreate,
    actor: Actor = Depends(patient_only),
    db: Session = Depends(get_db),
):
    appointment = appointments.create_appointment(db, payload, actor)
    return {
        "success": True,
        "message": "Appointment created successfully",
        "data": appointment_out(appointment),
    }


@router.get("", summary="List all appointments")
def list_appointments(
    actor: Actor = Depends(admin_only),
    db: Session = Depends(get_db),
):
    rows = appointments.list_appointments(db)
    return {"success": True, "count": len(rows), "data": [appointment_out(a) for a in rows]}


@router.get("/{appointment_id}", summary="Get appointment")
def get_appointment(
    appointment_id: str,
    actor: Actor = Depends(any_member),
    db: Session = Depends(get_db),
):
    aid = parse_uuid(appointment_id, "appointment_id")
    return {"success": True, "data": appointment_out(appointments.get_appointment(db, aid, actor))}


@router.put("/{appointment_id}", summary="Update appointment")
def update_appointment(
    appointment_id: str,
    payload: AppointmentUpdate,
    actor: Actor = Depends(owner_or_admin),
    db: Session = Depends(get_db),
):
    aid = parse_uuid(appointment_id, "appointment_id")
    appointment = appointments.update_appointment(db, aid, payload, actor)
    return {
        "success": True,
        "message": "Appointment updated successfully",
        "data": appointment_out(appointment),
    }


@router.delete("/{appointment_id}", summary="Cancel appointment")
def delete_appointment(
    appointment_id: str,
    actor: Actor = Depends(owner_or_admin),
    db: Session = Depends(get_db),
):
    aid = parse_uuid(appointment_id, "appointment_id")
    appointments.delete_appointment(db, aid, actor)
    return {"success": True, "message": "Appointment deleted successfully", "data": {}}
