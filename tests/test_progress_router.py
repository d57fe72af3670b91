"""Tests for the reading progress endpoints."""
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.auth import create_access_token, get_identity_dependency
from app.config import get_settings
from app.main import app
from app.models.domain import Identity
from app.models.schemas import UserProgress
from app.repositories.local_progress import LocalProgressStore
from app.repositories.remote_progress import RemoteProgressStore
from app.routers import progress as progress_router
from app.services.progress_service import ProgressService

settings = get_settings()

GUEST_HEADERS = {"X-Guest-Id": "guest_00aa11bb22cc"}


@pytest.fixture
def remote_mock():
    return MagicMock(spec=RemoteProgressStore)


@pytest.fixture
def client(remote_mock):
    service = ProgressService(LocalProgressStore(None, prefix="test"), remote_mock, fetch_timeout=0.05)
    app.dependency_overrides[progress_router.get_progress_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestIdentity:

    def test_first_visit_issues_guest_cookie(self, client, remote_mock):
        response = client.get("/api/progress")

        assert response.status_code == 200
        assert response.cookies.get(settings.guest_cookie_name, "").startswith("guest_")
        assert response.json()["selected_plan_id"] == "whole_bible"
        remote_mock.fetch_snapshot.assert_not_called()

    def test_known_guest_gets_no_new_cookie(self, client):
        response = client.get("/api/progress", headers=GUEST_HEADERS)

        assert response.status_code == 200
        assert settings.guest_cookie_name not in response.cookies

    def test_bearer_token_loads_remote_snapshot(self, client, remote_mock):
        remote_mock.fetch_snapshot.return_value = UserProgress(all_progress={"whole_bible": [1, 2]}, streak=2)
        token = create_access_token({"sub": "reader-1"})

        response = client.get("/api/progress", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["completed_ids"] == [1, 2]
        remote_mock.fetch_snapshot.assert_called_once_with("reader-1")

    def test_invalid_token_is_rejected(self, client, remote_mock):
        response = client.get("/api/progress", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        remote_mock.fetch_snapshot.assert_not_called()

    def test_logout_clears_cookies(self, client):
        response = client.post("/api/progress/logout")

        assert response.status_code == 204
        set_cookie = ", ".join(response.headers.get_list("set-cookie"))
        assert settings.auth_cookie_name in set_cookie
        assert settings.guest_cookie_name in set_cookie


class TestDayMutations:

    def test_toggle_completes_then_uncompletes(self, client):
        first = client.post("/api/progress/days/3/toggle", headers=GUEST_HEADERS)
        second = client.post("/api/progress/days/3/toggle", headers=GUEST_HEADERS)

        assert first.json()["completed_ids"] == [3]
        assert first.json()["all_progress"] == {"whole_bible": [3]}
        assert second.json()["completed_ids"] == []

    def test_progress_survives_between_requests(self, client, remote_mock):
        client.post("/api/progress/days/1/toggle", headers=GUEST_HEADERS)
        client.post("/api/progress/days/2/toggle", headers=GUEST_HEADERS)

        data = client.get("/api/progress", headers=GUEST_HEADERS).json()

        assert data["completed_ids"] == [1, 2]
        assert data["streak"] == 2
        remote_mock.write_completion.assert_not_called()

    def test_reader_mutations_start_from_local_cache(self, client, remote_mock):
        remote_mock.fetch_snapshot.return_value = UserProgress()
        headers = {"Authorization": f"Bearer {create_access_token({'sub': 'reader-1'})}"}

        client.get("/api/progress", headers=headers)
        first = client.post("/api/progress/days/3/toggle", headers=headers)
        second = client.post("/api/progress/days/3/toggle", headers=headers)

        assert first.json()["completed_ids"] == [3]
        assert second.json()["completed_ids"] == []
        remote_mock.fetch_snapshot.assert_called_once_with("reader-1")

    def test_day_zero_is_rejected(self, client):
        response = client.post("/api/progress/days/0/toggle", headers=GUEST_HEADERS)

        assert response.status_code == 422

    def test_save_and_delete_note(self, client):
        saved = client.put("/api/progress/days/5/note", json={"note": "Salmo 23"}, headers=GUEST_HEADERS)
        assert saved.status_code == 200
        assert saved.json()["notes"] == {"5": "Salmo 23"}
        assert saved.json()["completed_ids"] == []

        deleted = client.delete("/api/progress/days/5/note", headers=GUEST_HEADERS)
        assert deleted.json()["notes"] == {}

    def test_empty_note_is_rejected(self, client):
        response = client.put("/api/progress/days/5/note", json={"note": ""}, headers=GUEST_HEADERS)

        assert response.status_code == 422


class TestPlanSettings:

    def test_switch_to_known_plan(self, client):
        client.post("/api/progress/days/1/toggle", headers=GUEST_HEADERS)

        response = client.put("/api/progress/plan", json={"plan_id": "gospels"}, headers=GUEST_HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert data["selected_plan_id"] == "gospels"
        assert data["completed_ids"] == []
        assert data["all_progress"]["whole_bible"] == [1]

    def test_unknown_plan_is_rejected(self, client):
        response = client.put("/api/progress/plan", json={"plan_id": "apocrypha"}, headers=GUEST_HEADERS)

        assert response.status_code == 400
        assert "apocrypha" in response.json()["detail"]

    def test_custom_plan_accepts_camel_case(self, client):
        response = client.put(
            "/api/progress/custom-plan", json={"bookName": "Ester", "days": 10}, headers=GUEST_HEADERS
        )

        assert response.status_code == 200
        data = response.json()
        assert data["selected_plan_id"] == "custom"
        assert data["custom_plan_config"] == {"book_name": "Ester", "days": 10}

    def test_custom_plan_unknown_book_is_rejected(self, client):
        response = client.put(
            "/api/progress/custom-plan", json={"book_name": "Enoque", "days": 10}, headers=GUEST_HEADERS
        )

        assert response.status_code == 400

    def test_update_start_date(self, client):
        response = client.put(
            "/api/progress/start-date", json={"plan_start_date": "2026-02-01"}, headers=GUEST_HEADERS
        )

        assert response.json()["plan_start_date"] == "2026-02-01"


class TestDerivedViews:

    def test_summary_for_custom_plan(self, client):
        client.put("/api/progress/custom-plan", json={"book_name": "Rute", "days": 4}, headers=GUEST_HEADERS)
        client.post("/api/progress/days/1/toggle", headers=GUEST_HEADERS)
        client.post("/api/progress/days/2/toggle", headers=GUEST_HEADERS)

        data = client.get("/api/progress/summary", headers=GUEST_HEADERS).json()

        assert data["context_key"] == "custom_Rute"
        assert data["total_days"] == 4
        assert data["completed_count"] == 2
        assert data["percent_complete"] == 50

    def test_today_reading_for_custom_plan(self, client):
        client.put("/api/progress/custom-plan", json={"book_name": "Rute", "days": 4}, headers=GUEST_HEADERS)

        data = client.get("/api/progress/today", headers=GUEST_HEADERS).json()

        assert data["book_name"] == "Rute"
        assert 1 <= data["day_number"] <= 4

    def test_identity_override(self, client):
        app.dependency_overrides[get_identity_dependency] = lambda: Identity(user_id="guest_ffffffffffff")

        client.post("/api/progress/days/7/toggle")

        assert client.get("/api/progress").json()["completed_ids"] == [7]
