"""Module: api."""

# backend/vaxcat/api/v1/api.py
from fastapi import APIRouter

# Core operational routes.
from vaxcat.api.v1.routes.health import router as health_router

# Catalog routes consumed by clinic staff and patient apps.
from vaxcat.api.v1.routes.vaccines import router as vaccines_router
from vaxcat.api.v1.routes.doses import router as doses_router
from vaxcat.api.v1.routes.immunization_logs import router as immunization_logs_router

# Booking routes.
from vaxcat.api.v1.routes.clinics import router as clinics_router
from vaxcat.api.v1.routes.appointments import router as appointments_router


api_router = APIRouter()

# Register operational endpoints first for service-level concerns.
api_router.include_router(health_router, prefix="/health", tags=["health"])

# Register business/domain endpoints.
api_router.include_router(vaccines_router, prefix="/vaccines", tags=["vaccines"])
api_router.include_router(doses_router, prefix="/doses", tags=["doses"])
api_router.include_router(immunization_logs_router, prefix="/immunization-logs", tags=["immunization-logs"])

# Booking endpoints: clinic directory and patient appointments.
api_router.include_router(clinics_router, prefix="/clinics", tags=["clinics"])
api_router.include_router(appointments_router, prefix="/appointments", tags=["appointments"])
