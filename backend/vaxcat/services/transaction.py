"""Module: transaction."""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from vaxcat.core.errors import CatalogError, Conflict, InternalError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session, action: str, *, commit: bool = True) -> Iterator[Session]:
    """
    Run one catalog operation as a single transaction.

    Everything inside the block commits together or not at all. Typed catalog
    errors propagate unchanged; a lost optimistic-concurrency check or a
    violated unique index becomes ``Conflict``; any other persistence failure
    becomes ``InternalError`` with the driver message kept in ``detail``.
    Read-only operations pass ``commit=False``.
    """
    try:
        yield db
        if commit:
            db.commit()
    except CatalogError:
        db.rollback()
        raise
    except (StaleDataError, IntegrityError) as exc:
        db.rollback()
        logger.warning("Concurrent or duplicate write during %s: %s", action, exc)
        raise Conflict(
            f"Conflicting change during {action}; reload and retry",
            detail=str(exc),
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Persistence failure during %s", action)
        raise InternalError(f"Server error during {action}", detail=str(exc)) from exc
