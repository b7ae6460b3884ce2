"""Module: immunization_logs."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vaxcat.api.v1.routes.deps import get_db, parse_uuid, require_roles
from vaxcat.api.v1.routes.serializers import immunization_log_out
from vaxcat.core.security import ROLE_ADMIN, ROLE_DOCTOR, ROLE_PATIENT, Actor
from vaxcat.schemas.catalog import ImmunizationLogCreate, ImmunizationLogUpdate
from vaxcat.services import immunization_log

router = APIRouter()

staff_only = require_roles(ROLE_DOCTOR, ROLE_ADMIN)
any_member = require_roles(ROLE_PATIENT, ROLE_DOCTOR, ROLE_ADMIN)
admin_only = require_roles(ROLE_ADMIN)


@router.post("", status_code=201, summary="Record administered dose")
def create_log(
    payload: ImmunizationLogCreate,
    actor: Actor = Depends(staff_only),
    db: Session = Depends(get_db),
):
    log = immunization_log.create_log(db, payload, actor.actor_id)
    return {"success": True, "message": "Immunization log created", "data": immunization_log_out(log)}


@router.get("", summary="List immunization logs visible to the caller")
def list_logs(
    actor: Actor = Depends(any_member),
    db: Session = Depends(get_db),
):
    logs = immunization_log.list_logs(db, actor)
    return {"success": True, "count": len(logs), "data": [immunization_log_out(entry) for entry in logs]}


@router.get("/{log_id}", summary="Get immunization log")
def get_log(
    log_id: str,
    actor: Actor = Depends(any_member),
    db: Session = Depends(get_db),
):
    lid = parse_uuid(log_id, "log_id")
    log = immunization_log.get_log(db, lid, actor)
    return {"success": True, "data": immunization_log_out(log)}


@router.put("/{log_id}", summary="Update immunization log")
def update_log(
    log_id: str,
    payload: ImmunizationLogUpdate,
    actor: Actor = Depends(staff_only),
    db: Session = Depends(get_db),
):
    lid = parse_uuid(log_id, "log_id")
    log = immunization_log.update_log(db, lid, payload, actor.actor_id)
    return {"success": True, "message": "Immunization log updated", "data": immunization_log_out(log)}


@router.delete("/{log_id}", summary="Delete immunization log")
def delete_log(
    log_id: str,
    actor: Actor = Depends(admin_only),
    db: Session = Depends(get_db),
):
    lid = parse_uuid(log_id, "log_id")
    immunization_log.delete_log(db, lid, actor.actor_id)
    return {"success": True, "message": "Immunization log deleted", "data": {}}
