"""Shared pytest fixtures."""

import os

# Settings are read at import time; point them at a throwaway database first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from vaxcat.api.v1.routes.deps import get_db
from vaxcat.core.config import settings
from vaxcat.db.base import Base
from vaxcat.db.session import build_engine
from vaxcat.main import app
import vaxcat.db.models  # noqa: F401

engine = build_engine("sqlite://")
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def make_token(role: str = "Doctor", actor_id: str = "doctor-1") -> str:
    return jwt.encode({"id": actor_id, "role": role}, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def auth(role: str = "Doctor", actor_id: str | None = None) -> dict:
    actor_id = actor_id or f"{role.lower()}-1"
    return {"Authorization": f"Bearer {make_token(role, actor_id)}"}


def vaccine_payload(**overrides) -> dict:
    payload = {
        "name": "Engerix-B",
        "genericName": "Hepatitis B vaccine",
        "manufacturer": "GlaxoSmithKline",
        "cvxCode": "08",
        "presentation": "prefilled-syringe",
        "volume": {"value": 0.5, "unit": "mL"},
        "storageRequirements": {"minTemp": 2, "maxTemp": 8, "requiresRefrigeration": True},
        "totalDoses": 3,
        "approvedRegions": [{"country": "US", "regulatoryBody": "FDA"}],
    }
    payload.update(overrides)
    return payload


def dose_payload(**overrides) -> dict:
    payload = {
        "doseNumber": 1,
        "minAge": {"value": 0, "unit": "days"},
    }
    payload.update(overrides)
    return payload


def clinic_payload(**overrides) -> dict:
    payload = {
        "clinicName": "Northside Immunization Centre",
        "address": "12 Harbour Road",
        "city": "Colombo",
        "district": "Colombo",
        "phone": "0112345678",
        "email": "Northside@Clinic.example",
        "clinicType": "Public",
        "openDays": ["Monday", "Wednesday", "Friday"],
        "openTime": "08:30",
        "closeTime": "16:00",
    }
    payload.update(overrides)
    return payload


def appointment_payload(**overrides) -> dict:
    payload = {
        "fullName": "Nimal Perera",
        "email": "Nimal.Perera@mail.example",
        "phone": "0771234567",
        "vaccineType": "Hepatitis B",
        "doseNumber": 1,
        "ageGroup": "Adult",
        "appointmentDate": "2026-11-02",
        "appointmentTime": "09:15",
    }
    payload.update(overrides)
    return payload


@pytest.fixture(autouse=True)
def reset_database():
    """Give every test an empty schema."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db_session():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def create_vaccine(client):
    """POST a vaccine as a doctor and return its JSON representation."""

    def _create(**overrides) -> dict:
        response = client.post("/api/v1/vaccines", json=vaccine_payload(**overrides), headers=auth())
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create


@pytest.fixture
def create_dose(client):
    """POST a dose requirement for ``vaccine_id`` and return its JSON representation."""

    def _create(vaccine_id: str, **overrides) -> dict:
        response = client.post(
            f"/api/v1/doses/vaccine/{vaccine_id}",
            json=dose_payload(**overrides),
            headers=auth(),
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create
