"""
Request schemas for the vaccine catalog, dose schedule and immunization log.

Payloads use camelCase on the wire (``cvxCode``, ``minAge``) and snake_case in
Python. Update schemas are patches: only fields the client actually sent are
applied, see ``column_values(..., exclude_unset=True)``.
"""

import uuid
from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Presentation = Literal["vial", "prefilled-syringe", "nasal-spray", "oral"]
VaccineStatus = Literal["active", "discontinued", "pending", "archived"]
DoseStatus = Literal["active", "superseded", "pending"]
AgeUnit = Literal["days", "weeks", "months", "years"]
Priority = Literal["routine", "catchup", "special"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -------------------------
# Nested value objects
# -------------------------
class Volume(CamelModel):
    value: float = Field(..., gt=0)
    unit: str = "mL"


class StorageRequirements(CamelModel):
    min_temp: float | None = None
    max_temp: float | None = None
    requires_refrigeration: bool | None = None


class ApprovedRegion(CamelModel):
    country: str
    approval_date: date | None = None
    regulatory_body: str | None = None


class Contraindication(CamelModel):
    condition: str
    severity: Literal["absolute", "caution", "none"] | None = None
    description: str | None = None


class AgeSpec(CamelModel):
    value: float = Field(..., ge=0)
    unit: AgeUnit = "months"


class IntervalSpec(CamelModel):
    min_days: int | None = Field(default=0, ge=0)
    max_days: int | None = Field(default=None, ge=0)
    exact_days: int | None = Field(default=None, ge=0)


class Guideline(CamelModel):
    authority: str | None = None
    reference: str | None = None
    url: str | None = None


# -------------------------
# Vaccine
# -------------------------
class VaccineCreate(CamelModel):
    name: str
    generic_name: str = Field(..., min_length=1)
    manufacturer: str = Field(..., min_length=1)
    cvx_code: str = Field(..., pattern=r"^\d+$")
    description: str = ""
    presentation: Presentation
    volume: Volume
    storage_requirements: StorageRequirements | None = None
    total_doses: int = Field(..., ge=1)
    status: VaccineStatus = "active"
    approved_regions: list[ApprovedRegion] = []
    contraindications: list[Contraindication] = []
    update_reason: str | None = None

    @field_validator("name")
    @classmethod
    def _name_length(cls, value: str) -> str:
        cleaned = value.strip()
        if len(cleaned) < 2:
            raise ValueError("Vaccine name must be at least 2 characters")
        return cleaned


class VaccineUpdate(CamelModel):
    name: str | None = None
    generic_name: str | None = Field(default=None, min_length=1)
    manufacturer: str | None = Field(default=None, min_length=1)
    cvx_code: str | None = Field(default=None, pattern=r"^\d+$")
    description: str | None = None
    presentation: Presentation | None = None
    volume: Volume | None = None
    storage_requirements: StorageRequirements | None = None
    total_doses: int | None = Field(default=None, ge=1)
    status: VaccineStatus | None = None
    approved_regions: list[ApprovedRegion] | None = None
    contraindications: list[Contraindication] | None = None
    update_reason: str | None = None

    @field_validator("name")
    @classmethod
    def _name_length(cls, value: str | None) -> str | None:
        if value is None:
            return value
        cleaned = value.strip()
        if len(cleaned) < 2:
            raise ValueError("Vaccine name must be at least 2 characters")
        return cleaned


class VaccineDelete(CamelModel):
    reason: str | None = None


# -------------------------
# Dose requirement
# -------------------------
class DoseCreate(CamelModel):
    dose_number: int = Field(..., ge=1)
    dose_name: str | None = None
    min_age: AgeSpec
    max_age: AgeSpec | None = None
    interval_from_previous: IntervalSpec = IntervalSpec()
    allowable_delay: int = Field(default=0, ge=0)
    priority: Priority = "routine"
    guidelines: list[Guideline] = []
    notes: str | None = None


class DoseUpdate(CamelModel):
    dose_number: int | None = Field(default=None, ge=1)
    dose_name: str | None = None
    min_age: AgeSpec | None = None
    max_age: AgeSpec | None = None
    interval_from_previous: IntervalSpec | None = None
    allowable_delay: int | None = Field(default=None, ge=0)
    priority: Priority | None = None
    status: DoseStatus | None = None
    guidelines: list[Guideline] | None = None
    notes: str | None = None


class DueDateRequest(CamelModel):
    vaccine_id: uuid.UUID
    patient_age_months: float = Field(..., ge=0)
    last_dose_date: datetime | None = None
    dose_number: int = Field(default=1, ge=1)


# -------------------------
# Immunization log
# -------------------------
class ImmunizationLogCreate(CamelModel):
    patient_id: str = Field(..., min_length=1)
    vaccine_id: uuid.UUID
    date_administered: datetime
    dose_number: int = Field(..., ge=1)
    next_due_date: datetime | None = None
    clinic: str = Field(..., min_length=1)
    notes: str | None = None
    digital_certificate: str | None = None


class ImmunizationLogUpdate(CamelModel):
    date_administered: datetime | None = None
    dose_number: int | None = Field(default=None, ge=1)
    next_due_date: datetime | None = None
    clinic: str | None = Field(default=None, min_length=1)
    notes: str | None = None
    digital_certificate: str | None = None


def _column_value(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [_column_value(item) for item in value]
    return value


def column_values(payload: BaseModel, *, exclude_unset: bool = False) -> dict[str, Any]:
    """
    Flatten a payload into ORM column values.

    Top-level keys stay snake_case (they are attribute names); nested objects
    are stored in their camelCase wire form inside JSON columns. With
    ``exclude_unset`` only fields the client sent are returned, which is what
    makes the update schemas behave as patches.
    """
    names = payload.model_fields_set if exclude_unset else type(payload).model_fields.keys()
    return {name: _column_value(getattr(payload, name)) for name in names}
