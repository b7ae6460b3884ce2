"""
Request schemas for clinics and vaccination appointments.

Same wire conventions as ``vaxcat.schemas.catalog``: camelCase aliases, and
update schemas act as patches. Text fields are trimmed and emails lowercased
before they reach the services.
"""

from datetime import date
from typing import Literal

from pydantic import ConfigDict, Field, field_validator

from vaxcat.schemas.catalog import CamelModel

Weekday = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class BookingModel(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("email", check_fields=False)
    @classmethod
    def _lowercase_email(cls, value: str | None) -> str | None:
        return value.lower() if value is not None else value


# -------------------------
# Clinics
# -------------------------
class ClinicCreate(BookingModel):
    clinic_name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    district: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    clinic_type: str = Field(..., min_length=1)
    description: str = ""
    open_days: list[Weekday] = Field(..., min_length=1)
    open_time: str = Field(..., pattern=TIME_PATTERN)
    close_time: str = Field(..., pattern=TIME_PATTERN)


class ClinicUpdate(BookingModel):
    clinic_name: str | None = Field(default=None, min_length=1)
    address: str | None = Field(default=None, min_length=1)
    city: str | None = Field(default=None, min_length=1)
    district: str | None = Field(default=None, min_length=1)
    phone: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    clinic_type: str | None = Field(default=None, min_length=1)
    description: str | None = None
    open_days: list[Weekday] | None = Field(default=None, min_length=1)
    open_time: str | None = Field(default=None, pattern=TIME_PATTERN)
    close_time: str | None = Field(default=None, pattern=TIME_PATTERN)


# -------------------------
# Appointments
# -------------------------
class AppointmentCreate(BookingModel):
    full_name: str = Field(..., min_length=1)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    phone: str = Field(..., min_length=1)
    vaccine_type: str = Field(..., min_length=1)
    dose_number: int = Field(..., ge=1)
    age_group: str = Field(..., min_length=1)
    appointment_date: date
    appointment_time: str = Field(..., pattern=TIME_PATTERN)


class AppointmentUpdate(BookingModel):
    full_name: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    phone: str | None = Field(default=None, min_length=1)
    vaccine_type: str | None = Field(default=None, min_length=1)
    dose_number: int | None = Field(default=None, ge=1)
    age_group: str | None = Field(default=None, min_length=1)
    appointment_date: date | None = None
    appointment_time: str | None = Field(default=None, pattern=TIME_PATTERN)
