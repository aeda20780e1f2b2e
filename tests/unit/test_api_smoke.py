"""
API Smoke Tests

Tests for the FastAPI endpoints:
1. GET /health returns ok
2. GET /criteria and /device-types describe the rubric and catalogue
3. Full lifecycle over HTTP ends APPROVED
4. Engine failures map to 402 / 403 / 404 / 409 / 422 with a structured body
5. Missing actor headers -> 401
"""

import pytest
from fastapi.testclient import TestClient

from api.app import app
from api.deps import get_service
from engine.service import ApplicationService, InMemoryApplicationStore

from fixtures import make_context, scores_totalling


def _headers(role: str, user_id: str = "user-1") -> dict[str, str]:
    return {"X-User-Id": user_id, "X-User-Role": role}


APPLICANT = _headers("APPLICANT", "oem-1")
OFFICER = _headers("OFFICER", "officer-1")
EVALUATOR = _headers("EVALUATOR", "evaluator-1")


@pytest.fixture
def client():
    """TestClient over a fresh in-memory service."""
    service = ApplicationService(store=InMemoryApplicationStore(), context=make_context())
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create(client, application_id: str = "app_http") -> dict:
    response = client.post("/applications", json={"application_id": application_id, "applicant_id": "oem-1"})
    assert response.status_code == 201
    return response.json()["application"]


def _event(client, application_id: str, payload: dict, headers: dict):
    return client.post(f"/applications/{application_id}/events", json=payload, headers=headers)


class TestHealth:
    """Tests for liveness endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["ok"] is True

    def test_root(self, client):
        assert client.get("/").json()["service"] == "apcd-empanelment-api"


class TestCatalogue:
    """Tests for rubric and catalogue discovery."""

    def test_criteria(self, client):
        data = client.get("/criteria").json()
        assert len(data["criteria"]) == 8
        assert data["max_possible_score"] == 80
        assert data["max_mandatory_score"] == 70

    def test_device_types(self, client):
        data = client.get("/device-types").json()
        ids = [d["id"] for d in data["device_types"]]
        assert "ESP" in ids
        assert len(ids) == 7


class TestLifecycleOverHttp:
    """Tests for driving an application through the API."""

    def test_full_lifecycle_approved(self, client):
        _create(client)

        r = _event(client, "app_http", {"kind": "select_device_types", "device_types": ["ESP"]}, APPLICANT)
        assert r.status_code == 200
        assert r.json()["application"]["selected_device_types"] == ["ESP"]

        r = _event(
            client, "app_http",
            {"kind": "record_payment", "device_type_id": "ESP", "amount": 76700, "reference": "UTR1"},
            OFFICER,
        )
        assert r.status_code == 200

        assert _event(client, "app_http", {"kind": "submit"}, APPLICANT).status_code == 200
        assert _event(client, "app_http", {"kind": "route_for_evaluation"}, OFFICER).status_code == 200

        r = _event(client, "app_http", {"kind": "record_scores", "scores": scores_totalling(48)}, EVALUATOR)
        assert r.status_code == 200
        assert "finalize" in r.json()["allowed_events"]

        preview = client.get("/applications/app_http/evaluation").json()
        assert preview["outcome"]["recommendation"] == "APPROVE"

        r = _event(client, "app_http", {"kind": "finalize"}, EVALUATOR)
        body = r.json()
        assert body["application"]["status"] == "APPROVED"
        assert body["application"]["recommendation"] == "APPROVE"
        assert len(body["application"]["history"]) == 6

    def test_get_lists_allowed_events_for_role(self, client):
        _create(client)
        data = client.get("/applications/app_http", headers=APPLICANT).json()
        assert set(data["allowed_events"]) == {"select_device_types", "submit"}
        assert client.get("/applications/app_http").json()["allowed_events"] is None

    def test_fee_quote(self, client):
        _create(client)
        _event(client, "app_http", {"kind": "select_device_types", "device_types": ["ESP", "CYCLONE"]}, APPLICANT)
        data = client.get("/applications/app_http/fees", params={"discount_eligible": "true"}).json()
        assert data["device_type_count"] == 2
        assert data["quote"]["discount_eligible"] is True

    def test_revision_marker(self, client):
        _create(client)
        data = client.post("/applications/app_http/revisions").json()
        assert data["application"]["revision"] == 1


class TestErrorMapping:
    """Tests for engine error -> HTTP status mapping."""

    def test_unpaid_submit_is_402(self, client):
        _create(client)
        _event(client, "app_http", {"kind": "select_device_types", "device_types": ["ESP"]}, APPLICANT)
        r = _event(client, "app_http", {"kind": "submit"}, APPLICANT)

        assert r.status_code == 402
        body = r.json()
        assert body["ok"] is False
        assert body["error"]["code"] == "PAYMENT_INCOMPLETE"
        assert body["error"]["details"]["outstanding"] == ["ESP"]

    def test_wrong_role_is_403(self, client):
        _create(client)
        r = _event(client, "app_http", {"kind": "finalize"}, APPLICANT)
        assert r.status_code == 403
        assert r.json()["error"]["code"] == "FORBIDDEN"

    def test_illegal_transition_is_409(self, client):
        _create(client)
        r = _event(client, "app_http", {"kind": "finalize"}, EVALUATOR)
        assert r.status_code == 409
        assert r.json()["error"]["code"] == "ILLEGAL_TRANSITION"

    def test_unknown_application_is_404(self, client):
        r = _event(client, "missing", {"kind": "submit"}, APPLICANT)
        assert r.status_code == 404

    def test_duplicate_create_is_409(self, client):
        _create(client)
        r = client.post("/applications", json={"application_id": "app_http"})
        assert r.status_code == 409
        assert r.json()["error"]["code"] == "APPLICATION_EXISTS"

    def test_incomplete_evaluation_is_409(self, client):
        _create(client)
        r = client.get("/applications/app_http/evaluation")
        assert r.status_code == 409
        assert r.json()["error"]["code"] == "INCOMPLETE_SCORING"

    def test_unknown_device_type_is_422(self, client):
        _create(client)
        r = _event(client, "app_http", {"kind": "select_device_types", "device_types": ["NOPE"]}, APPLICANT)
        assert r.status_code == 422
        assert r.json()["error"]["code"] == "UNKNOWN_DEVICE_TYPE"

    def test_malformed_event_is_422(self, client):
        _create(client)
        r = _event(client, "app_http", {"kind": "launch_rocket"}, APPLICANT)
        assert r.status_code == 422
        assert r.json()["error"]["code"] == "INVALID_REQUEST"

    def test_nan_score_is_422(self, client):
        _create(client)
        r = client.post(
            "/applications/app_http/events",
            content='{"kind": "record_scores", "scores": {"EXPERIENCE_SCOPE": NaN}}',
            headers={**EVALUATOR, "Content-Type": "application/json"},
        )
        assert r.status_code == 422
        assert r.json()["error"]["code"] == "INVALID_REQUEST"

    def test_missing_actor_is_401(self, client):
        _create(client)
        r = client.post("/applications/app_http/events", json={"kind": "submit"})
        assert r.status_code == 401
        assert r.json()["error"]["code"] == "UNAUTHENTICATED"

    def test_unknown_role_is_422(self, client):
        _create(client)
        r = _event(client, "app_http", {"kind": "submit"}, _headers("JANITOR"))
        assert r.status_code == 422

    def test_failed_event_does_not_change_snapshot(self, client):
        before = _create(client)
        _event(client, "app_http", {"kind": "finalize"}, EVALUATOR)
        after = client.get("/applications/app_http").json()["application"]
        assert after == before
