"""Module: vaccines."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from vaxcat.api.v1.routes.deps import get_db, parse_uuid, require_roles
from vaxcat.api.v1.routes.serializers import history_entry_out, vaccine_out
from vaxcat.core.security import ROLE_ADMIN, ROLE_DOCTOR, ROLE_PATIENT, Actor
from vaxcat.schemas.catalog import VaccineCreate, VaccineDelete, VaccineUpdate
from vaxcat.services import vaccine_catalog

router = APIRouter()

staff_only = require_roles(ROLE_DOCTOR, ROLE_ADMIN)
any_member = require_roles(ROLE_PATIENT, ROLE_DOCTOR, ROLE_ADMIN)


@router.post("", status_code=201, summary="Create vaccine")
def create_vaccine(
    payload: VaccineCreate,
    actor: Actor = Depends(staff_only),
    db: Session = Depends(get_db),
):
    vaccine = vaccine_catalog.create_vaccine(db, payload, actor.actor_id)
    return {
        "success": True,
        "message": "Vaccine created successfully",
        "data": vaccine_out(vaccine),
    }


@router.get("", summary="List vaccines")
def list_vaccines(
    status: str | None = Query(default=None),
    manufacturer: str | None = Query(default=None),
    search: str | None = Query(default=None),
    region: str | None = Query(default=None),
    actor: Actor = Depends(any_member),
    db: Session = Depends(get_db),
):
    vaccines = vaccine_catalog.list_vaccines(
        db,
        status=status,
        manufacturer=manufacturer,
        search=search,
        region=region,
    )
    return {
        "success": True,
        "count": len(vaccines),
        "data": [vaccine_out(v, doses="active") for v in vaccines],
    }


@router.get("/{vaccine_id}/history", summary="Vaccine version history")
def get_vaccine_history(
    vaccine_id: str,
    actor: Actor = Depends(any_member),
    db: Session = Depends(get_db),
):
    vid = parse_uuid(vaccine_id, "vaccine_id")
    vaccine, history = vaccine_catalog.get_vaccine_history(db, vid)
    return {
        "success": True,
        "currentVersion": vaccine.version,
        "data": [history_entry_out(entry) for entry in history],
    }


@router.get("/{vaccine_id}", summary="Get vaccine detail")
def get_vaccine(
    vaccine_id: str,
    actor: Actor = Depends(any_member),
    db: Session = Depends(get_db),
):
    vid = parse_uuid(vaccine_id, "vaccine_id")
    vaccine = vaccine_catalog.get_vaccine(db, vid)
    return {"success": True, "data": vaccine_out(vaccine, doses="all")}


@router.put("/{vaccine_id}", summary="Update vaccine (may create a new version)")
def update_vaccine(
    vaccine_id: str,
    payload: VaccineUpdate,
    actor: Actor = Depends(staff_only),
    db: Session = Depends(get_db),
):
    vid = parse_uuid(vaccine_id, "vaccine_id")
    vaccine, previous_version = vaccine_catalog.update_vaccine(db, vid, payload, actor.actor_id)

    if previous_version is not None:
        return {
            "success": True,
            "message": "Vaccine updated with new version",
            "data": vaccine_out(vaccine),
            "previousVersion": previous_version,
        }
    return {
        "success": True,
        "message": "Vaccine updated successfully",
        "data": vaccine_out(vaccine),
    }


@router.delete("/{vaccine_id}", summary="Discontinue (or purge) vaccine")
def delete_vaccine(
    vaccine_id: str,
    hard: bool = Query(default=False),
    payload: VaccineDelete | None = Body(default=None),
    actor: Actor = Depends(staff_only),
    db: Session = Depends(get_db),
):
    vid = parse_uuid(vaccine_id, "vaccine_id")
    reason = payload.reason if payload else None
    vaccine_catalog.delete_vaccine(db, vid, reason=reason, hard=hard, actor_id=actor.actor_id)

    message = (
        "Vaccine and associated doses deleted successfully"
        if hard
        else "Vaccine discontinued successfully"
    )
    return {"success": True, "message": message, "data": {}}
