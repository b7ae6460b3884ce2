"""Module: serializers."""

from vaxcat.db.models.appointment import Appointment
from vaxcat.db.models.clinic import Clinic
from vaxcat.db.models.dose_requirement import DoseRequirement
from vaxcat.db.models.immunization_log import ImmunizationLog
from vaxcat.db.models.vaccine_product import VaccineProduct
from vaxcat.services.dose_schedule import DueDateResult


def _str_or_none(value) -> str | None:
    return str(value) if value is not None else None


def dose_summary(dose: DoseRequirement) -> dict:
    return {
        "id": str(dose.dose_id),
        "doseNumber": dose.dose_number,
        "minAge": dose.min_age,
        "intervalFromPrevious": dose.interval_from_previous,
    }


def dose_out(dose: DoseRequirement, include_vaccine: bool = False) -> dict:
    out = {
        "id": str(dose.dose_id),
        "vaccineId": str(dose.vaccine_id),
        "doseNumber": dose.dose_number,
        "doseName": dose.dose_name,
        "minAge": dose.min_age,
        "maxAge": dose.max_age,
        "intervalFromPrevious": dose.interval_from_previous,
        "allowableDelay": dose.allowable_delay,
        "priority": dose.priority,
        "guidelines": dose.guidelines or [],
        "notes": dose.notes,
        "status": dose.status,
        "version": dose.version,
        "validFrom": dose.valid_from,
        "validUntil": dose.valid_until,
        "createdAt": dose.created_at,
        "updatedAt": dose.updated_at,
    }
    if include_vaccine and dose.vaccine is not None:
        out["vaccine"] = {
            "id": str(dose.vaccine.vaccine_id),
            "name": dose.vaccine.name,
            "manufacturer": dose.vaccine.manufacturer,
        }
    return out


# ``doses``: "active" embeds the active schedule summary (listings),
# "all" embeds every dose row (detail view), None embeds nothing.
def vaccine_out(vaccine: VaccineProduct, doses: str | None = None) -> dict:
    out = {
        "id": str(vaccine.vaccine_id),
        "lineageId": str(vaccine.lineage_id),
        "name": vaccine.name,
        "genericName": vaccine.generic_name,
        "manufacturer": vaccine.manufacturer,
        "cvxCode": vaccine.cvx_code,
        "description": vaccine.description,
        "presentation": vaccine.presentation,
        "volume": vaccine.volume,
        "storageRequirements": vaccine.storage_requirements,
        "totalDoses": vaccine.total_doses,
        "approvedRegions": vaccine.approved_regions or [],
        "contraindications": vaccine.contraindications or [],
        "status": vaccine.status,
        "version": vaccine.version,
        "validFrom": vaccine.valid_from,
        "validUntil": vaccine.valid_until,
        "updateReason": vaccine.update_reason,
        "discontinuedReason": vaccine.discontinued_reason,
        "createdBy": vaccine.created_by,
        "lastModifiedBy": vaccine.last_modified_by,
        "createdAt": vaccine.created_at,
        "updatedAt": vaccine.updated_at,
    }
    if doses == "active":
        out["doseRequirements"] = [dose_summary(d) for d in vaccine.doses if d.status == "active"]
    elif doses == "all":
        out["doseRequirements"] = [dose_out(d) for d in vaccine.doses]
    return out


def history_entry_out(entry: dict) -> dict:
    return {
        "name": entry["name"],
        "version": entry["version"],
        "status": entry["status"],
        "validFrom": entry["valid_from"],
        "validUntil": entry["valid_until"],
        "updateReason": entry["update_reason"],
    }


def due_date_out(result: DueDateResult) -> dict:
    return {
        "dueDate": result.due_date,
        "status": result.status,
        "doseNumber": result.dose_number,
        "minAgeRequired": result.min_age_required,
        "interval": result.interval,
    }


def immunization_log_out(log: ImmunizationLog) -> dict:
    out = {
        "id": str(log.log_id),
        "patientId": log.patient_id,
        "vaccineId": str(log.vaccine_id),
        "doseNumber": log.dose_number,
        "dateAdministered": log.date_administered,
        "nextDueDate": log.next_due_date,
        "clinic": log.clinic,
        "notes": log.notes,
        "digitalCertificate": log.digital_certificate,
        "recordedBy": _str_or_none(log.recorded_by),
        "createdAt": log.created_at,
    }
    if log.vaccine is not None:
        out["vaccine"] = {
            "id": str(log.vaccine.vaccine_id),
            "name": log.vaccine.name,
            "version": log.vaccine.version,
        }
    return out


def clinic_out(clinic: Clinic) -> dict:
    return {
        "id": str(clinic.clinic_id),
        "clinicName": clinic.clinic_name,
        "address": clinic.address,
        "city": clinic.city,
        "district": clinic.district,
        "phone": clinic.phone,
        "email": clinic.email,
        "clinicType": clinic.clinic_type,
        "description": clinic.description,
        "openDays": list(clinic.open_days or []),
        "openTime": clinic.open_time,
        "closeTime": clinic.close_time,
        "createdAt": clinic.created_at,
        "updatedAt": clinic.updated_at,
    }


def appointment_out(appointment: Appointment) -> dict:
    return {
        "id": str(appointment.appointment_id),
        "patientId": appointment.patient_id,
        "fullName": appointment.full_name,
        "email": appointment.email,
        "phone": appointment.phone,
        "vaccineType": appointment.vaccine_type,
        "doseNumber": appointment.dose_number,
        "ageGroup": appointment.age_group,
        "appointmentDate": appointment.appointment_date.isoformat(),
        "appointmentTime": appointment.appointment_time,
        "createdAt": appointment.created_at,
        "updatedAt": appointment.updated_at,
    }
