"""Tests for bearer-token handling and the operational endpoints."""

from datetime import datetime, timedelta, timezone

import jwt

from conftest import auth
from vaxcat.core.config import settings


class TestBearerTokens:
    """Tests for token verification on catalog routes."""

    def test_missing_token(self, client):
        response = client.get("/api/v1/vaccines")
        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "No token"}

    def test_malformed_header(self, client):
        response = client.get("/api/v1/vaccines", headers={"Authorization": "Token abc"})
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid Authorization header"

    def test_wrong_signature(self, client):
        token = jwt.encode({"id": "doctor-1", "role": "Doctor"}, "other-secret", algorithm="HS256")
        response = client.get("/api/v1/vaccines", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid token"

    def test_expired_token(self, client):
        token = jwt.encode(
            {
                "id": "doctor-1",
                "role": "Doctor",
                "exp": datetime.now(timezone.utc) - timedelta(minutes=5),
            },
            settings.jwt_secret,
            algorithm="HS256",
        )
        response = client.get("/api/v1/vaccines", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["error"] == "Token expired"

    def test_unknown_role(self, client):
        token = jwt.encode({"id": "x-1", "role": "Nurse"}, settings.jwt_secret, algorithm="HS256")
        response = client.get("/api/v1/vaccines", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_role_claim_is_case_insensitive(self, client):
        token = jwt.encode({"sub": "admin-1", "role": "admin"}, settings.jwt_secret, algorithm="HS256")
        response = client.get("/api/v1/vaccines", headers={"Authorization": f"Bearer {token}"})
        # Authenticated: the empty catalog answers 404, not 401/403.
        assert response.status_code == 404

    def test_valid_token_reaches_route(self, client):
        response = client.get("/api/v1/vaccines", headers=auth("Patient", "patient-1"))
        assert response.status_code == 404
        assert response.json()["error"] == "No vaccines found"


class TestHealth:
    """Tests for the health probes."""

    def test_health(self, client):
        response = client.get("/api/v1/health/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_ready(self, client):
        response = client.get("/api/v1/health/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "database": "ok"}
