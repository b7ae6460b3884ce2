"""Module: clinics."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vaxcat.api.v1.routes.deps import get_db, parse_uuid, require_roles
from vaxcat.api.v1.routes.serializers import clinic_out
from vaxcat.core.security import ROLE_ADMIN, ROLE_DOCTOR, ROLE_PATIENT, Actor
from vaxcat.schemas.booking import ClinicCreate, ClinicUpdate
from vaxcat.services import clinics

router = APIRouter()

any_member = require_roles(ROLE_PATIENT, ROLE_DOCTOR, ROLE_ADMIN)
admin_only = require_roles(ROLE_ADMIN)


@router.post("", status_code=201, summary="Create clinic")
def create_clinic(
    payload: ClinicCreate,
    actor: Actor = Depends(admin_only),
    db: Session = Depends(get_db),
):
    clinic = clinics.create_clinic(db, payload, actor.actor_id)
    return {"success": True, "message": "Clinic created successfully", "data": clinic_out(clinic)}


@router.get("", summary="List clinics")
def list_clinics(
    actor: Actor = Depends(any_member),
    db: Session = Depends(get_db),
):
    rows = clinics.list_clinics(db)
    return {"success": True, "count": len(rows), "data": [clinic_out(c) for c in rows]}


@router.get("/{clinic_id}", summary="Get clinic")
def get_clinic(
    clinic_id: str,
    actor: Actor = Depends(any_member),
    db: Session = Depends(get_db),
):
    cid = parse_uuid(clinic_id, "clinic_id")
    return {"success": True, "data": clinic_out(clinics.get_clinic(db, cid))}


@router.put("/{clinic_id}", summary="Update clinic")
def update_clinic(
    clinic_id: str,
    payload: ClinicUpdate,
    actor: Actor = Depends(admin_only),
    db: Session = Depends(get_db),
):
    cid = parse_uuid(clinic_id, "clinic_id")
    clinic = clinics.update_clinic(db, cid, payload, actor.actor_id)
    return {"success": True, "message": "Clinic updated successfully", "data": clinic_out(clinic)}


@router.delete("/{clinic_id}", summary="Delete clinic")
def delete_clinic(
    clinic_id: str,
    actor: Actor = Depends(admin_only),
    db: Session = Depends(get_db),
):
    cid = parse_uuid(clinic_id, "clinic_id")
    clinics.delete_clinic(db, cid, actor.actor_id)
    return {"success": True, "message": "Clinic deleted successfully", "data": {}}
