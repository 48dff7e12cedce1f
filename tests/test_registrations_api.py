from __future__ import annotations

from fastapi.testclient import TestClient

from workshop_hub.models.workshop import WorkshopStatus


def _register(client: TestClient, workshop_id: int, user_id: str):
    return client.post(
        f"/api/v1/workshops/{workshop_id}/register",
        json={"user_id": user_id, "user_email": f"{user_id}@example.com", "user_name": user_id.title()},
    )


def test_register_and_cancel_roundtrip(client: TestClient, make_workshop) -> None:
    workshop_id = make_workshop(total=2)

    register_resp = _register(client, workshop_id, "alice")
    register_resp.raise_for_status()
    body = register_resp.json()
    assert body["registration"]["user_id"] == "alice"
    assert body["registration"]["status"] == "confirmed"
    assert body["workshop"]["capacity"] == {"total": 2, "filled": 1, "available": 1}

    cancel_resp = client.delete(f"/api/v1/workshops/{workshop_id}/register", params={"user_id": "alice"})
    cancel_resp.raise_for_status()
    cancelled = cancel_resp.json()
    assert cancelled["status"] == "cancelled"
    assert cancelled["workshop"]["capacity"]["filled"] == 0


def test_registration_errors_map_to_status_codes(client: TestClient, make_workshop) -> None:
    open_id = make_workshop(total=1)
    completed_id = make_workshop(status=WorkshopStatus.COMPLETED)

    _register(client, open_id, "alice").raise_for_status()

    duplicate = _register(client, open_id, "alice")
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "duplicate"

    full = _register(client, open_id, "bob")
    assert full.status_code == 409
    assert full.json()["code"] == "full"

    completed = _register(client, completed_id, "alice")
    assert completed.status_code == 409
    assert completed.json()["code"] == "invalid_state"

    missing = _register(client, 9999, "alice")
    assert missing.status_code == 404
    assert missing.json()["code"] == "not_found"


def test_register_requires_user_id(client: TestClient, make_workshop) -> None:
    workshop_id = make_workshop()

    response = client.post(f"/api/v1/workshops/{workshop_id}/register", json={})

    assert response.status_code == 400


def test_cancel_without_registration_returns_404(client: TestClient, make_workshop) -> None:
    workshop_id = make_workshop(total=3, filled=2)

    response = client.delete(f"/api/v1/workshops/{workshop_id}/register", params={"user_id": "ghost"})

    assert response.status_code == 404
    assert client.get(f"/api/v1/workshops/{workshop_id}").json()["capacity"]["filled"] == 2


def test_user_workshops_and_notifications(client: TestClient, make_workshop) -> None:
    first = make_workshop(title="Docker Deep Dive")
    second = make_workshop(title="Kubernetes 101")
    _register(client, first, "carol").raise_for_status()
    _register(client, second, "carol").raise_for_status()
    client.delete(f"/api/v1/workshops/{second}/register", params={"user_id": "carol"}).raise_for_status()

    workshops = client.get("/api/v1/users/carol/workshops").json()
    assert [item["title"] for item in workshops] == ["Docker Deep Dive"]
    assert workshops[0]["registration_status"] == "confirmed"

    notifications = client.get("/api/v1/users/carol/notifications").json()
    assert len(notifications) == 3
    assert {item["type"] for item in notifications} == {"registration", "cancellation"}

    target = notifications[0]["id"]
    read_resp = client.patch(f"/api/v1/notifications/{target}/read")
    read_resp.raise_for_status()
    assert read_resp.json()["read"] is True

    unread = client.get("/api/v1/users/carol/notifications", params={"unread_only": True}).json()
    assert len(unread) == 2
    assert target not in {item["id"] for item in unread}


def test_mark_unknown_notification_returns_404(client: TestClient) -> None:
    response = client.patch("/api/v1/notifications/4242/read")
    assert response.status_code == 404


def test_event_log_records_registrations(client: TestClient, make_workshop) -> None:
    workshop_id = make_workshop()
    _register(client, workshop_id, "dave").raise_for_status()

    events = client.get("/api/v1/events", params={"workshop_id": workshop_id}).json()
    assert [event["event_type"] for event in events] == ["workshop.registered"]
    assert events[0]["delivery_state"] == "succeeded"
    assert events[0]["payload"]["user_id"] == "dave"

    single = client.get(f"/api/v1/events/{events[0]['event_id']}")
    single.raise_for_status()
    assert single.json()["workshop_id"] == workshop_id

    assert client.get("/api/v1/events/does-not-exist").status_code == 404


def test_reviews(client: TestClient, make_workshop) -> None:
    workshop_id = make_workshop()

    created = client.post(
        f"/api/v1/workshops/{workshop_id}/reviews",
        json={"user_id": "erin", "user_name": "Erin", "rating": 5, "comment": "Great pacing"},
    )
    assert created.status_code == 201

    reviews = client.get(f"/api/v1/workshops/{workshop_id}/reviews").json()
    assert [(review["user_id"], review["rating"]) for review in reviews] == [("erin", 5)]

    invalid = client.post(f"/api/v1/workshops/{workshop_id}/reviews", json={"user_id": "erin", "rating": 6})
    assert invalid.status_code == 400

    missing = client.post("/api/v1/workshops/777/reviews", json={"user_id": "erin", "rating": 4})
    assert missing.status_code == 404
