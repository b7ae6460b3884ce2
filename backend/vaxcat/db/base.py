"""Module: base."""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Deterministic constraint names so create_all and the alembic revisions agree,
# and SQLite batch migrations can find constraints by name.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


# Shared declarative base for the catalog models (lineages, versions, doses,
# immunization logs, audit entries).
class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
