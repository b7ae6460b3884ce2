"""Module: timeutil."""

from datetime import UTC, datetime


# Columns are naive UTC (DateTime without timezone), so every timestamp the
# services compare or persist goes through these helpers.
def utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def as_naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)
