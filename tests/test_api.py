import pytest
from fastapi.testclient import TestClient

from campus_reservations.api import deps
from campus_reservations.config.settings import settings
from campus_reservations.db.session import get_db
from campus_reservations.main import create_app

from conftest import AUDITORIUM, LAB, NEXT_WEEK, TOMORROW, slot


@pytest.fixture
def client(session_factory, seed, clock, notifier):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_clock] = lambda: clock
    app.dependency_overrides[deps.get_notifier] = lambda: notifier
    # Not used as a context manager: the lifespan would touch the default database
    return TestClient(app)


def _create(client, **overrides):
    body = {
        "resource_id": AUDITORIUM,
        "requester_id": "STU-001",
        "purpose": "Org meeting",
        "slots": [slot(TOMORROW, "10:00", "12:00")],
    }
    body.update(overrides)
    return client.post("/api/v1/reservations", json=body)


def _steps(client, reservation_id):
    detail = client.get(f"/api/v1/reservations/{reservation_id}").json()
    return {step["step_order"]: step["id"] for step in detail["approvals"]}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


class TestReservationEndpoints:

    def test_create_returns_201(self, client, notifier):
        response = _create(client)

        assert response.status_code == 201
        body = response.json()
        assert body["workflow_steps"] == 2
        assert body["daily_slots_count"] == 1
        assert notifier.recipients() == ["ADM-001"]

    def test_conflict_returns_409_with_details(self, client):
        _create(client)

        response = _create(client, requester_id="STU-002", slots=[slot(TOMORROW, "11:00", "13:00")])

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "SLOT_CONFLICT"
        assert error["details"]["conflicts"][0]["conflicts"][0]["reserved_by"] == "Ana Lim"

    def test_no_workflow_returns_400(self, client):
        response = _create(client, resource_id=LAB)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "NO_WORKFLOW"

    def test_malformed_body_is_rejected(self, client):
        response = client.post("/api/v1/reservations", json={"purpose": "x"})
        assert response.status_code == 422

    def test_check_availability(self, client):
        _create(client)

        busy = client.post(
            "/api/v1/reservations/check-availability",
            json={"resource_id": AUDITORIUM, "slots": [slot(TOMORROW, "09:00", "10:30")]},
        )
        free = client.post(
            "/api/v1/reservations/check-availability",
            json={"resource_id": AUDITORIUM, "slots": [slot(NEXT_WEEK, "09:00", "10:30")]},
        )

        assert busy.status_code == 200
        assert busy.json()["available"] is False
        assert free.json()["available"] is True

    def test_cancel(self, client):
        reservation_id = _create(client).json()["reservation_id"]

        wrong_user = client.patch(
            f"/api/v1/reservations/{reservation_id}/cancel", json={"requester_id": "STU-002"}
        )
        response = client.patch(
            f"/api/v1/reservations/{reservation_id}/cancel",
            json={"requester_id": "STU-001", "comment": "Plans changed"},
        )

        assert wrong_user.status_code == 403
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    def test_requester_list_and_history(self, client):
        reservation_id = _create(client).json()["reservation_id"]

        listing = client.get("/api/v1/reservations/requester/STU-001")
        history = client.get(f"/api/v1/reservations/{reservation_id}/history")
        slots = client.get(f"/api/v1/reservations/{reservation_id}/daily-slots")

        assert [r["id"] for r in listing.json()] == [reservation_id]
        assert [a["action_type"] for a in history.json()["activities"]] == ["created"]
        assert history.json()["activities"][0]["action_by_name"] == "Ana Lim"
        assert len(slots.json()) == 1

    def test_unknown_reservation_returns_404(self, client):
        response = client.get("/api/v1/reservations/999")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


class TestApprovalEndpoints:

    def test_approve_step(self, client):
        reservation_id = _create(client).json()["reservation_id"]
        steps = _steps(client, reservation_id)

        response = client.post(
            f"/api/v1/approvals/{steps[1]}/action",
            json={"approver_id": "ADM-001", "action": "approved"},
        )

        assert response.status_code == 200
        assert response.json() == {"reservation_id": reservation_id, "step_order": 1, "fully_approved": False}

    def test_out_of_order_returns_403(self, client):
        steps = _steps(client, _create(client).json()["reservation_id"])

        response = client.post(
            f"/api/v1/approvals/{steps[2]}/action",
            json={"approver_id": "ADM-002", "action": "approved"},
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "PRIOR_STEPS_INCOMPLETE"

    def test_expired_returns_400_and_cancels(self, client, clock):
        reservation_id = _create(client).json()["reservation_id"]
        steps = _steps(client, reservation_id)
        clock.advance(days=2)

        response = client.post(
            f"/api/v1/approvals/{steps[1]}/action",
            json={"approver_id": "ADM-001", "action": "rejected"},
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "RESERVATION_EXPIRED"
        assert error["details"]["auto_cancelled"] is True
        assert client.get(f"/api/v1/reservations/{reservation_id}").json()["status"] == "cancelled"

    def test_pending_queue_and_logs(self, client):
        reservation_id = _create(client).json()["reservation_id"]

        pending = client.get("/api/v1/approvals/pending/ADM-002").json()
        assert [(p["reservation_id"], p["can_act"]) for p in pending] == [(reservation_id, False)]

        client.post(
            f"/api/v1/approvals/{_steps(client, reservation_id)[1]}/action",
            json={"approver_id": "ADM-001", "action": "approved"},
        )

        assert client.get("/api/v1/approvals/pending/ADM-002").json()[0]["can_act"] is True
        assert client.get("/api/v1/approvals/logs/ADM-001").status_code == 200
        assert client.get("/api/v1/approvals/stats/ADM-001").status_code == 200


class TestCalendarEndpoint:

    def test_lists_active_reservations_in_month(self, client):
        reservation_id = _create(client).json()["reservation_id"]

        response = client.get("/api/v1/calendar", params={"month": "2026-03"})

        assert response.status_code == 200
        assert [entry["reservation_id"] for entry in response.json()] == [reservation_id]
        assert client.get("/api/v1/calendar", params={"month": "2026-04"}).json() == []

    def test_invalid_month_returns_400(self, client):
        response = client.get("/api/v1/calendar", params={"month": "March"})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestWorkflowEndpoints:

    def test_put_then_get(self, client):
        put = client.put(
            f"/api/v1/workflows/{LAB}",
            json={"steps": [{"approver_id": "ADM-003", "step_order": 1}]},
        )
        get = client.get(f"/api/v1/workflows/{LAB}")

        assert put.status_code == 200
        assert [(s["step_order"], s["approver_id"]) for s in get.json()] == [(1, "ADM-003")]

    def test_delete(self, client):
        response = client.delete(f"/api/v1/workflows/{AUDITORIUM}")
        assert response.json() == {"resource_id": AUDITORIUM, "deleted_steps": 2}


class TestMaintenanceEndpoint:

    def test_requires_token(self, client, monkeypatch):
        monkeypatch.setattr(settings, "MAINTENANCE_TOKEN", "s3cret")

        assert client.post("/api/v1/maintenance/sweep").status_code == 401
        assert client.post(
            "/api/v1/maintenance/sweep", headers={"X-Maintenance-Token": "wrong"}
        ).status_code == 401

    def test_sweeps_with_token(self, client, clock, monkeypatch):
        monkeypatch.setattr(settings, "MAINTENANCE_TOKEN", "s3cret")
        _create(client)
        clock.advance(days=2)

        response = client.post("/api/v1/maintenance/sweep", headers={"X-Maintenance-Token": "s3cret"})

        assert response.status_code == 200
        assert response.json()["cancelled_count"] == 1


def test_monthly_report_endpoint(client):
    _create(client)

    response = client.get("/api/v1/reports/monthly", params={"year": 2026, "month": 3})

    assert response.status_code == 200
    assert response.json()["summary"]["total_reservations"] == 1


def test_websocket_greets_connected_user(client):
    with client.websocket_connect("/api/v1/ws/notifications?user_id=ADM-001") as websocket:
        assert websocket.receive_json() == {"type": "CONNECTED", "user_id": "ADM-001"}
