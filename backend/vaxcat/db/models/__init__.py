# backend/vaxcat/db/models/__init__.py

from vaxcat.db.models.vaccine_lineage import VaccineLineage
from vaxcat.db.models.vaccine_product import VaccineProduct
from vaxcat.db.models.dose_requirement import DoseRequirement
from vaxcat.db.models.immunization_log import ImmunizationLog
from vaxcat.db.models.audit_log import AuditLog
from vaxcat.db.models.clinic import Clinic
from vaxcat.db.models.appointment import Appointment
