"""
Vaccination appointments booked by patients.

Each booking is owned by the patient who made it. Patients only ever see or
change their own bookings; another patient's appointment is reported as
missing. Staff can read and manage every booking.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from vaxcat.core.errors import NotFound
from vaxcat.core.security import Actor
from vaxcat.db.models.appointment import Appointment
from vaxcat.schemas.booking import AppointmentCreate, AppointmentUpdate
from vaxcat.schemas.catalog import column_values
from vaxcat.services.audit import record_audit
from vaxcat.services.transaction import unit_of_work

logger = logging.getLogger(__name__)


def _load(db: Session, appointment_id: uuid.UUID, actor: Actor) -> Appointment:
    appointment = db.get(Appointment, appointment_id)
    if not appointment or (not actor.is_staff and appointment.patient_id != actor.actor_id):
        raise NotFound("Appointment not found")
    return appointment


def create_appointment(db: Session, payload: AppointmentCreate, actor: Actor) -> Appointment:
    with unit_of_work(db, "appointment creation"):
        appointment = Appointment(**column_values(payload), patient_id=actor.actor_id)
        db.add(appointment)
        db.flush()
        record_audit(
            db, actor.actor_id, "appointment.created", "appointment", appointment.appointment_id,
            appointment_date=appointment.appointment_date.isoformat(),
        )

    logger.info("Booked appointment %s for %s", appointment.appointment_id, appointment.appointment_date)
    return appointment


def list_appointments(db: Session) -> list[Appointment]:
    with unit_of_work(db, "appointment listing", commit=False):
        appointments = list(
            db.execute(
                select(Appointment).order_by(
                    Appointment.appointment_date.asc(), Appointment.appointment_time.asc()
                )
            ).scalars().all()
        )

    if not appointments:
        raise NotFound("No appointments found", data=[])
    return appointments


def get_appointment(db: Session, appointment_id: uuid.UUID, actor: Actor) -> Appointment:
    with unit_of_work(db, "appointment lookup", commit=False):
        return _load(db, appointment_id, actor)


def update_appointment(
    db: Session,
    appointment_id: uuid.UUID,
    patch: AppointmentUpdate,
    actor: Actor,
) -> Appointment:
    changes = {
        k: v for k, v in column_values(patch, exclude_unset=True).items() if v is not None
    }

    with unit_of_work(db, "appointment update"):
        appointment = _load(db, appointment_id, actor)
        for field, value in changes.items():
            setattr(appointment, field, value)
        record_audit(
            db, actor.actor_id, "appointment.updated", "appointment", appointment.appointment_id,
            fields=sorted(changes),
        )

    db.refresh(appointment)
    return appointment


def delete_appointment(db: Session, appointment_id: uuid.UUID, actor: Actor) -> None:
    with unit_of_work(db, "appointment deletion"):
        appointment = _load(db, appointment_id, actor)
        db.delete(appointment)
        record_audit(db, actor.actor_id, "appointment.cancelled", "appointment", appointment_id)
