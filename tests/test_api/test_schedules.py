"""
Tests for Schedules API
========================

Tests schedule creation, validation errors, conflicts and updates.
"""

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from models import Schedule


# ==================== FIXTURES ====================

@pytest.fixture
def daily_payload(test_user, test_medication):
    """Payload for a daily schedule"""
    return {
        "user_id": test_user.id,
        "medication_id": test_medication.id,
        "recurrence_type": "daily",
        "times": ["08:00"],
    }


# ==================== CREATE TESTS ====================

class TestCreateSchedule:
    """Tests for schedule creation endpoint"""

    @pytest.mark.api
    def test_create_daily(self, client: TestClient, daily_payload):
        response = client.post("/api/v1/schedules/", json=daily_payload)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["recurrence_type"] == "daily"
        assert data["times"] == ["08:00"]
        assert data["weekdays"] is None

    @pytest.mark.api
    def test_validation_errors_by_field(self, client: TestClient, test_user, test_medication):
        response = client.post("/api/v1/schedules/", json={
            "user_id": test_user.id,
            "medication_id": test_medication.id,
            "recurrence_type": "interval",
            "times": ["08:00"],
        })

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["detail"]["errors"] == {
            "times": "Times are not allowed for interval schedules.",
            "interval_hours": "Interval hours is required.",
        }

    @pytest.mark.api
    def test_overlapping_schedule(self, client: TestClient, daily_payload):
        client.post("/api/v1/schedules/", json=daily_payload)

        response = client.post("/api/v1/schedules/", json=daily_payload)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["detail"]["errors"] == {
            "times": "Overlapping schedules with identical times are not allowed."
        }

    @pytest.mark.api
    def test_inactive_duplicate_allowed(self, client: TestClient, daily_payload):
        client.post("/api/v1/schedules/", json=daily_payload)

        response = client.post("/api/v1/schedules/", json={**daily_payload, "is_active": False})

        assert response.status_code == status.HTTP_201_CREATED

    @pytest.mark.api
    def test_foreign_medication(self, client: TestClient, other_user, test_medication):
        response = client.post("/api/v1/schedules/", json={
            "user_id": other_user.id,
            "medication_id": test_medication.id,
            "recurrence_type": "daily",
            "times": ["08:00"],
        })

        assert response.status_code == status.HTTP_404_NOT_FOUND


# ==================== READ / UPDATE / DELETE TESTS ====================

class TestScheduleLifecycle:
    """Tests for get, update and deactivate endpoints"""

    @pytest.mark.api
    def test_get(self, client: TestClient, test_user, daily_schedule: Schedule):
        response = client.get(f"/api/v1/schedules/{daily_schedule.id}", params={"user_id": test_user.id})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["times"] == ["08:00", "20:00"]

    @pytest.mark.api
    def test_get_unknown_user(self, client: TestClient, daily_schedule: Schedule):
        response = client.get(f"/api/v1/schedules/{daily_schedule.id}", params={"user_id": 999})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.api
    def test_switch_to_interval(self, client: TestClient, test_user, daily_schedule: Schedule):
        response = client.put(
            f"/api/v1/schedules/{daily_schedule.id}",
            params={"user_id": test_user.id},
            json={"recurrence_type": "interval", "interval_hours": 8}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["interval_hours"] == 8
        assert data["times"] is None

    @pytest.mark.api
    def test_update_with_bad_time(self, client: TestClient, test_user, daily_schedule: Schedule):
        response = client.put(
            f"/api/v1/schedules/{daily_schedule.id}",
            params={"user_id": test_user.id},
            json={"times": ["8am"]}
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["detail"]["errors"] == {"times": "Each time must be in HH:mm format."}

    @pytest.mark.api
    def test_delete_deactivates(self, client: TestClient, test_user, test_medication,
                                daily_schedule: Schedule):
        response = client.delete(
            f"/api/v1/schedules/{daily_schedule.id}", params={"user_id": test_user.id}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_active"] is False

        listing = client.get(
            f"/api/v1/medications/{test_medication.id}/schedules",
            params={"user_id": test_user.id, "include_inactive": True}
        )
        assert len(listing.json()) == 1
