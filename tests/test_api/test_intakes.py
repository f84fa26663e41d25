"""
Tests for Intakes API
======================
"""

import pytest
from fastapi import status
from fastapi.testclient import TestClient


class TestIntakes:
    """Tests for logging, listing and deleting intakes"""

    @pytest.mark.api
    def test_log_intake(self, client: TestClient, test_user, daily_schedule):
        response = client.post("/api/v1/intakes/", json={
            "user_id": test_user.id,
            "schedule_id": daily_schedule.id,
            "status": "taken",
            "taken_at": "2025-12-26T08:05:00+01:00",
        })

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["status"] == "taken"
        assert data["taken_at"] == "2025-12-26T07:05:00Z"
        assert data["medication_id"] == daily_schedule.medication_id

    @pytest.mark.api
    def test_invalid_status(self, client: TestClient, test_user, daily_schedule):
        response = client.post("/api/v1/intakes/", json={
            "user_id": test_user.id,
            "schedule_id": daily_schedule.id,
            "status": "missed",
        })

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.api
    def test_inactive_schedule(self, client: TestClient, db_session, test_user, daily_schedule):
        daily_schedule.is_active = False
        db_session.commit()

        response = client.post("/api/v1/intakes/", json={
            "user_id": test_user.id,
            "schedule_id": daily_schedule.id,
            "status": "taken",
        })

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.api
    def test_list_and_delete(self, client: TestClient, test_user, daily_schedule):
        created = client.post("/api/v1/intakes/", json={
            "user_id": test_user.id,
            "schedule_id": daily_schedule.id,
            "status": "skipped",
        }).json()

        listing = client.get("/api/v1/intakes/", params={"user_id": test_user.id})
        assert [i["id"] for i in listing.json()] == [created["id"]]

        response = client.delete(f"/api/v1/intakes/{created['id']}", params={"user_id": test_user.id})
        assert response.status_code == status.HTTP_204_NO_CONTENT

        listing = client.get("/api/v1/intakes/", params={"user_id": test_user.id})
        assert listing.json() == []
