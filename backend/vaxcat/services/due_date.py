"""
Next-dose due date calculation.

Pure functions over a dose requirement's ``minAge`` / ``intervalFromPrevious``
(wire form, as stored on ``DoseRequirement``) and the patient's situation.
``now`` is injected so results are reproducible.

First dose, or no previous dose on record:
    eligible today once the patient is at least ``minAge`` old, otherwise
    ``future`` with the date the patient reaches ``minAge``. The birth date is
    approximated as ``now - patient_age_months``.

Later doses:
    due on ``last_dose_date + exactDays`` (or ``+ minDays`` when no exact
    spacing is set); ``overdue`` once that date has passed, else ``eligible``.

``maxAge``, ``maxDays`` and ``allowableDelay`` are carried in the result's
``interval``/``minAgeRequired`` payloads but do not affect the status.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from dateutil.relativedelta import relativedelta

STATUS_ELIGIBLE = "eligible"
STATUS_FUTURE = "future"
STATUS_OVERDUE = "overdue"

AVERAGE_DAYS_PER_MONTH = 30.4375


@dataclass
class DueDate:
    due_date: datetime
    status: str


def age_in_months(age: dict[str, Any]) -> float:
    value = float(age.get("value") or 0)
    unit = age.get("unit") or "months"
    if unit == "years":
        return value * 12
    if unit == "weeks":
        return value * 7 / AVERAGE_DAYS_PER_MONTH
    if unit == "days":
        return value / AVERAGE_DAYS_PER_MONTH
    return value


def _months_offset(months: float) -> relativedelta:
    # relativedelta only takes whole months; the remainder is spread as days.
    whole = int(months)
    remainder = months - whole
    return relativedelta(months=whole, days=remainder * AVERAGE_DAYS_PER_MONTH)


def age_offset(age: dict[str, Any]) -> relativedelta:
    value = float(age.get("value") or 0)
    unit = age.get("unit") or "months"
    if unit == "days":
        return relativedelta(days=value)
    if unit == "weeks":
        return relativedelta(days=value * 7)
    if unit == "years":
        return _months_offset(value * 12)
    return _months_offset(value)


def interval_days(interval: dict[str, Any] | None) -> int | None:
    interval = interval or {}
    # exactDays wins over minDays; zero means "not set" for both.
    for key in ("exactDays", "minDays"):
        days = interval.get(key)
        if days:
            return int(days)
    return None


def compute_due_date(
    min_age: dict[str, Any],
    interval: dict[str, Any] | None,
    patient_age_months: float,
    last_dose_date: datetime | None,
    dose_number: int,
    now: datetime,
) -> DueDate:
    if dose_number == 1 or last_dose_date is None:
        if patient_age_months >= age_in_months(min_age):
            return DueDate(due_date=now, status=STATUS_ELIGIBLE)

        approximate_birth = now - _months_offset(patient_age_months)
        return DueDate(due_date=approximate_birth + age_offset(min_age), status=STATUS_FUTURE)

    due = last_dose_date
    days = interval_days(interval)
    if days is not None:
        due = last_dose_date + timedelta(days=days)

    status = STATUS_OVERDUE if now > due else STATUS_ELIGIBLE
    return DueDate(due_date=due, status=status)
