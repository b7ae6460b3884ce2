"""Module: health."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from vaxcat.api.v1.routes.deps import get_db

router = APIRouter()

# Endpoint: lightweight liveness check.
@router.get("/health")
def health():
    return {"status": "ok"}


# Endpoint: readiness check that also pings the database.
@router.get("/ready")
def ready(db: Session = Depends(get_db)):
    db.execute(text("SELECT 1"))
    return {"status": "ok", "database": "ok"}
