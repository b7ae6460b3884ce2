"""Tests for dose requirements and the due-date endpoint."""

import uuid
from datetime import datetime, timedelta

import pytest

from conftest import TestingSessionLocal, auth
from vaxcat.core.errors import NotFound
from vaxcat.core.timeutil import utcnow
from vaxcat.services.dose_schedule import calculate_due_date


@pytest.fixture
def vaccine(create_vaccine):
    return create_vaccine()


class TestCreateDose:
    """Tests for POST /doses/vaccine/{vaccineId}."""

    def test_create_defaults(self, client, vaccine):
        response = client.post(
            f"/api/v1/doses/vaccine/{vaccine['id']}",
            json={"doseNumber": 1, "minAge": {"value": 2, "unit": "months"}},
            headers=auth(),
        )
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Dose requirement created successfully"
        data = body["data"]
        assert data["vaccineId"] == vaccine["id"]
        assert data["doseName"] == "Dose 1"
        assert data["version"] == 1
        assert data["status"] == "active"
        assert data["priority"] == "routine"
        assert data["allowableDelay"] == 0
        assert data["minAge"] == {"value": 2, "unit": "months"}
        assert data["intervalFromPrevious"] == {"minDays": 0, "maxDays": None, "exactDays": None}

    def test_unknown_vaccine(self, client):
        response = client.post(
            f"/api/v1/doses/vaccine/{uuid.uuid4()}",
            json={"doseNumber": 1, "minAge": {"value": 0, "unit": "days"}},
            headers=auth(),
        )
        assert response.status_code == 404
        assert response.json()["error"] == "Vaccine not found"

    def test_archived_vaccine_version_is_refused(self, client, vaccine):
        v2 = client.put(
            f"/api/v1/vaccines/{vaccine['id']}", json={"totalDoses": 4}, headers=auth()
        ).json()["data"]

        response = client.post(
            f"/api/v1/doses/vaccine/{vaccine['id']}",
            json={"doseNumber": 1, "minAge": {"value": 0, "unit": "days"}},
            headers=auth(),
        )
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Vaccine version 1 is no longer current",
            "data": {"currentVaccineId": v2["id"]},
        }

        response = client.post(
            f"/api/v1/doses/vaccine/{v2['id']}",
            json={"doseNumber": 1, "minAge": {"value": 0, "unit": "days"}},
            headers=auth(),
        )
        assert response.status_code == 201
        assert response.json()["data"]["vaccineId"] == v2["id"]

    def test_duplicate_active_dose_number_conflicts(self, client, vaccine, create_dose):
        create_dose(vaccine["id"], doseNumber=1)
        response = client.post(
            f"/api/v1/doses/vaccine/{vaccine['id']}",
            json={"doseNumber": 1, "minAge": {"value": 1, "unit": "months"}},
            headers=auth(),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Dose 1 already exists for this vaccine"

    def test_number_is_reusable_after_soft_delete(self, client, vaccine, create_dose):
        first = create_dose(vaccine["id"], doseNumber=1)
        client.delete(f"/api/v1/doses/{first['id']}", headers=auth())

        second = create_dose(vaccine["id"], doseNumber=1)
        assert second["id"] != first["id"]

    def test_invalid_age_unit_is_rejected(self, client, vaccine):
        response = client.post(
            f"/api/v1/doses/vaccine/{vaccine['id']}",
            json={"doseNumber": 1, "minAge": {"value": 2, "unit": "decades"}},
            headers=auth(),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"


class TestListAndGetDoses:
    """Tests for dose listing and detail."""

    def test_list_sorted_and_skips_superseded(self, client, vaccine, create_dose):
        create_dose(vaccine["id"], doseNumber=3, intervalFromPrevious={"minDays": 56})
        create_dose(vaccine["id"], doseNumber=1)
        two = create_dose(vaccine["id"], doseNumber=2, intervalFromPrevious={"minDays": 28})
        client.delete(f"/api/v1/doses/{two['id']}", headers=auth())

        response = client.get(f"/api/v1/doses/vaccine/{vaccine['id']}", headers=auth("Patient", "p-1"))
        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert [d["doseNumber"] for d in body["data"]] == [1, 3]

    def test_empty_list_is_not_found(self, client, vaccine):
        response = client.get(f"/api/v1/doses/vaccine/{vaccine['id']}", headers=auth())
        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": "No dose requirements found for this vaccine",
            "data": [],
        }

    def test_list_for_unknown_vaccine(self, client):
        response = client.get(f"/api/v1/doses/vaccine/{uuid.uuid4()}", headers=auth())
        assert response.status_code == 404
        assert response.json()["error"] == "Vaccine not found"

    def test_get_includes_vaccine_summary(self, client, vaccine, create_dose):
        dose = create_dose(vaccine["id"], doseNumber=1)

        response = client.get(f"/api/v1/doses/{dose['id']}", headers=auth())
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["vaccine"] == {
            "id": vaccine["id"],
            "name": "Engerix-B",
            "manufacturer": "GlaxoSmithKline",
        }

    def test_get_unknown_dose(self, client):
        response = client.get(f"/api/v1/doses/{uuid.uuid4()}", headers=auth())
        assert response.status_code == 404
        assert response.json()["error"] == "Dose requirement not found"


class TestUpdateDose:
    """Tests for copy-on-write updates via PUT /doses/{id}."""

    def test_min_age_change_creates_new_version(self, client, vaccine, create_dose):
        dose = create_dose(vaccine["id"], doseNumber=1, notes="Birth dose")

        response = client.put(
            f"/api/v1/doses/{dose['id']}",
            json={"minAge": {"value": 2, "unit": "months"}},
            headers=auth(),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Dose requirement updated with new version"
        data = body["data"]
        assert data["id"] != dose["id"]
        assert data["version"] == 2
        assert data["status"] == "active"
        assert data["minAge"] == {"value": 2, "unit": "months"}
        assert data["notes"] == "Birth dose"

        old = client.get(f"/api/v1/doses/{dose['id']}", headers=auth()).json()["data"]
        assert old["status"] == "superseded"
        assert old["validUntil"] is not None

        listed = client.get(f"/api/v1/doses/vaccine/{vaccine['id']}", headers=auth()).json()["data"]
        assert [d["id"] for d in listed] == [data["id"]]

    def test_interval_change_creates_new_version(self, client, vaccine, create_dose):
        dose = create_dose(vaccine["id"], doseNumber=2, intervalFromPrevious={"minDays": 28})

        data = client.put(
            f"/api/v1/doses/{dose['id']}",
            json={"intervalFromPrevious": {"minDays": 28, "exactDays": 30}},
            headers=auth(),
        ).json()["data"]
        assert data["version"] == 2
        assert data["intervalFromPrevious"]["exactDays"] == 30

    def test_same_min_age_updates_in_place(self, client, vaccine, create_dose):
        dose = create_dose(vaccine["id"], doseNumber=1, minAge={"value": 6, "unit": "weeks"})

        body = client.put(
            f"/api/v1/doses/{dose['id']}",
            json={"minAge": {"value": 6, "unit": "weeks"}, "notes": "Give with DTaP"},
            headers=auth(),
        ).json()
        assert body["message"] == "Dose requirement updated successfully"
        assert body["data"]["id"] == dose["id"]
        assert body["data"]["version"] == 1
        assert body["data"]["notes"] == "Give with DTaP"

    def test_renumbering_onto_active_dose_conflicts(self, client, vaccine, create_dose):
        create_dose(vaccine["id"], doseNumber=1)
        two = create_dose(vaccine["id"], doseNumber=2, intervalFromPrevious={"minDays": 28})

        response = client.put(f"/api/v1/doses/{two['id']}", json={"doseNumber": 1}, headers=auth())
        assert response.status_code == 400
        assert response.json()["error"] == "Dose 1 already exists for this vaccine"

    def test_superseded_version_cannot_be_versioned_again(self, client, vaccine, create_dose):
        dose = create_dose(vaccine["id"], doseNumber=1)
        client.put(
            f"/api/v1/doses/{dose['id']}",
            json={"minAge": {"value": 1, "unit": "months"}},
            headers=auth(),
        )

        response = client.put(
            f"/api/v1/doses/{dose['id']}",
            json={"minAge": {"value": 2, "unit": "months"}},
            headers=auth(),
        )
        assert response.status_code == 400

    def test_superseded_version_refuses_in_place_edits(self, client, vaccine, create_dose):
        dose = create_dose(vaccine["id"], doseNumber=1, notes="Birth dose")
        client.delete(f"/api/v1/doses/{dose['id']}", headers=auth())

        response = client.put(
            f"/api/v1/doses/{dose['id']}",
            json={"notes": "Edited after retirement", "priority": "catchup"},
            headers=auth(),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Dose requirement version 1 is superseded"

        data = client.get(f"/api/v1/doses/{dose['id']}", headers=auth()).json()["data"]
        assert data["notes"] == "Birth dose"
        assert data["priority"] == "routine"

    def test_superseded_version_can_be_reactivated(self, client, vaccine, create_dose):
        dose = create_dose(vaccine["id"], doseNumber=1)
        client.delete(f"/api/v1/doses/{dose['id']}", headers=auth())

        data = client.put(
            f"/api/v1/doses/{dose['id']}", json={"status": "active"}, headers=auth()
        ).json()["data"]
        assert data["id"] == dose["id"]
        assert data["status"] == "active"

    def test_reactivation_clashes_with_successor(self, client, vaccine, create_dose):
        dose = create_dose(vaccine["id"], doseNumber=1)
        client.put(
            f"/api/v1/doses/{dose['id']}",
            json={"minAge": {"value": 1, "unit": "months"}},
            headers=auth(),
        )

        response = client.put(
            f"/api/v1/doses/{dose['id']}", json={"status": "active"}, headers=auth()
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Dose 1 already exists for this vaccine"

    def test_patients_cannot_update(self, client, vaccine, create_dose):
        dose = create_dose(vaccine["id"], doseNumber=1)
        response = client.put(
            f"/api/v1/doses/{dose['id']}",
            json={"notes": "x"},
            headers=auth("Patient", "p-1"),
        )
        assert response.status_code == 403


class TestDeleteDose:
    """Tests for DELETE /doses/{id}."""

    def test_soft_delete(self, client, vaccine, create_dose):
        dose = create_dose(vaccine["id"], doseNumber=1)

        response = client.delete(f"/api/v1/doses/{dose['id']}", headers=auth())
        assert response.status_code == 200
        assert response.json()["message"] == "Dose requirement deleted (soft delete)"

        data = client.get(f"/api/v1/doses/{dose['id']}", headers=auth()).json()["data"]
        assert data["status"] == "superseded"
        assert data["validUntil"] is not None


class TestCalculateDueDate:
    """Tests for POST /doses/calculate."""

    def _calculate(self, client, **payload):
        return client.post("/api/v1/doses/calculate", json=payload, headers=auth())

    def test_old_enough_is_eligible_now(self, client, vaccine, create_dose):
        create_dose(vaccine["id"], doseNumber=1, minAge={"value": 6, "unit": "months"})

        before = utcnow()
        response = self._calculate(client, vaccineId=vaccine["id"], patientAgeMonths=12, doseNumber=1)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "eligible"
        assert data["doseNumber"] == 1
        assert data["minAgeRequired"] == {"value": 6, "unit": "months"}
        due = datetime.fromisoformat(data["dueDate"])
        assert before - timedelta(seconds=1) <= due <= utcnow() + timedelta(seconds=1)

    def test_too_young_is_future(self, client, vaccine, create_dose):
        create_dose(vaccine["id"], doseNumber=1, minAge={"value": 6, "unit": "months"})

        data = self._calculate(client, vaccineId=vaccine["id"], patientAgeMonths=2).json()["data"]
        assert data["status"] == "future"
        due = datetime.fromisoformat(data["dueDate"])
        # Four calendar months from now.
        assert timedelta(days=118) <= due - utcnow() <= timedelta(days=124)

    def test_second_dose_past_interval_is_overdue(self, client, vaccine, create_dose):
        create_dose(vaccine["id"], doseNumber=1)
        create_dose(
            vaccine["id"],
            doseNumber=2,
            minAge={"value": 1, "unit": "months"},
            intervalFromPrevious={"exactDays": 28},
        )
        last_dose = (utcnow() - timedelta(days=40)).replace(microsecond=0)

        data = self._calculate(
            client,
            vaccineId=vaccine["id"],
            patientAgeMonths=6,
            doseNumber=2,
            lastDoseDate=last_dose.isoformat(),
        ).json()["data"]
        assert data["status"] == "overdue"
        assert datetime.fromisoformat(data["dueDate"]) == last_dose + timedelta(days=28)
        assert data["interval"]["exactDays"] == 28

    def test_fractional_age_in_months(self, client, vaccine, create_dose):
        create_dose(vaccine["id"], doseNumber=1, minAge={"value": 2, "unit": "months"})

        response = self._calculate(client, vaccineId=vaccine["id"], patientAgeMonths=1.5)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "future"
        due = datetime.fromisoformat(data["dueDate"])
        # Roughly half a month until the two month mark.
        assert timedelta(days=12) <= due - utcnow() <= timedelta(days=19)

    def test_fractional_age_past_minimum_is_eligible(self, client, vaccine, create_dose):
        # Six weeks is just under 1.4 months.
        create_dose(vaccine["id"], doseNumber=1, minAge={"value": 6, "unit": "weeks"})

        data = self._calculate(client, vaccineId=vaccine["id"], patientAgeMonths=1.5).json()["data"]
        assert data["status"] == "eligible"

    def test_missing_dose_requirement(self, client, vaccine):
        response = self._calculate(client, vaccineId=vaccine["id"], patientAgeMonths=12)
        assert response.status_code == 404
        assert response.json()["error"] == "Dose requirements not found"

    def test_negative_age_is_rejected(self, client, vaccine):
        response = self._calculate(client, vaccineId=vaccine["id"], patientAgeMonths=-1)
        assert response.status_code == 400

    def test_patients_cannot_calculate(self, client, vaccine):
        response = client.post(
            "/api/v1/doses/calculate",
            json={"vaccineId": vaccine["id"], "patientAgeMonths": 12},
            headers=auth("Patient", "p-1"),
        )
        assert response.status_code == 403

    def test_second_dose_within_interval_is_eligible(self, vaccine, create_dose):
        """Service call with a fixed clock."""
        create_dose(vaccine["id"], doseNumber=1)
        create_dose(vaccine["id"], doseNumber=2, intervalFromPrevious={"minDays": 28})

        db = TestingSessionLocal()
        try:
            result = calculate_due_date(
                db,
                uuid.UUID(vaccine["id"]),
                patient_age_months=3,
                last_dose_date=datetime(2026, 3, 1),
                dose_number=2,
                now=datetime(2026, 3, 10),
            )
            assert result.status == "eligible"
            assert result.due_date == datetime(2026, 3, 29)

            with pytest.raises(NotFound):
                calculate_due_date(db, uuid.UUID(vaccine["id"]), patient_age_months=3, dose_number=3)
        finally:
            db.close()
