from __future__ import annotations

from datetime import datetime, timedelta, timezone

import httpx
from fastapi.testclient import TestClient

from workshop_hub.models.workshop import WorkshopStatus
from workshop_hub.services.analytics import RedisAnalyticsCounter, set_analytics_counter


def _payload(**overrides) -> dict:
    payload = {
        "title": "Intro to FastAPI",
        "subtitle": "Build APIs quickly",
        "description": "Routers, dependencies and testing.",
        "category": "Backend",
        "level": "Beginner",
        "mode": "Online",
        "scheduled_start": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
        "duration_minutes": 90,
        "capacity_total": 20,
        "trainer": {"name": "Ada", "bio": "API engineer", "rating": 4.5},
        "tags": ["Python", "API"],
        "agenda": ["Routing", "Dependencies"],
    }
    payload.update(overrides)
    return payload


def test_create_and_fetch_workshop(client: TestClient) -> None:
    create_resp = client.post("/api/v1/workshops", json=_payload())
    assert create_resp.status_code == 201
    created = create_resp.json()
    assert created["status"] == "upcoming"
    assert created["capacity"] == {"total": 20, "filled": 0, "available": 20}
    assert created["trainer"]["name"] == "Ada"

    fetch_resp = client.get(f"/api/v1/workshops/{created['id']}")
    fetch_resp.raise_for_status()
    fetched = fetch_resp.json()
    assert fetched["title"] == "Intro to FastAPI"
    assert fetched["duration_minutes"] == 90


def test_create_derives_status_from_clock(client: TestClient) -> None:
    started = (datetime.now(timezone.utc) - timedelta(minutes=10)).isoformat()
    finished = (datetime.now(timezone.utc) - timedelta(days=2)).isoformat()

    live = client.post("/api/v1/workshops", json=_payload(scheduled_start=started)).json()
    completed = client.post("/api/v1/workshops", json=_payload(scheduled_start=finished)).json()

    assert live["status"] == "live"
    assert completed["status"] == "completed"


def test_create_rejects_invalid_payload(client: TestClient) -> None:
    missing_title = _payload()
    missing_title.pop("title")
    response = client.post("/api/v1/workshops", json=missing_title)
    assert response.status_code == 400
    assert any(error["loc"][-1] == "title" for error in response.json()["detail"])

    overfilled = client.post("/api/v1/workshops", json=_payload(capacity_total=2, capacity_filled=3))
    assert overfilled.status_code == 400

    status_supplied = client.post("/api/v1/workshops", json=_payload(status="live"))
    assert status_supplied.status_code == 400


def test_get_missing_workshop_returns_404(client: TestClient) -> None:
    response = client.get("/api/v1/workshops/999")
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_list_filters_and_pagination(client: TestClient, make_workshop) -> None:
    base = datetime.now(timezone.utc) + timedelta(days=1)
    for index in range(5):
        make_workshop(
            title=f"Python {index}",
            start=base + timedelta(hours=index),
            category="Programming",
            tags=["Python"],
        )
    make_workshop(title="Figma Basics", category="Design", tags=["Design"], start=base)
    make_workshop(title="Live Now", status=WorkshopStatus.LIVE, start=base)

    first_page = client.get("/api/v1/workshops", params={"category": "Programming", "limit": 2}).json()
    assert first_page["pagination"] == {"page": 1, "limit": 2, "total": 5, "pages": 3}
    assert [item["title"] for item in first_page["data"]] == ["Python 0", "Python 1"]

    last_page = client.get("/api/v1/workshops", params={"category": "Programming", "limit": 2, "page": 3}).json()
    assert [item["title"] for item in last_page["data"]] == ["Python 4"]

    live = client.get("/api/v1/workshops", params={"status": "live"}).json()
    assert [item["title"] for item in live["data"]] == ["Live Now"]

    search = client.get("/api/v1/workshops", params={"search": "figma"}).json()
    assert [item["title"] for item in search["data"]] == ["Figma Basics"]

    tagged = client.get("/api/v1/workshops", params={"tags": "Python"}).json()
    assert tagged["pagination"]["total"] == 5


def test_list_rejects_unknown_status(client: TestClient) -> None:
    response = client.get("/api/v1/workshops", params={"status": "cancelled"})
    assert response.status_code == 400


def test_categories_tags_and_stats(client: TestClient, make_workshop) -> None:
    make_workshop(category="Backend", tags=["Python", "API"], total=10, filled=4, trainer_rating=4.0)
    make_workshop(category="Design", tags=["UX"], total=5, filled=5, status=WorkshopStatus.LIVE, trainer_rating=5.0)

    assert client.get("/api/v1/workshops/categories").json() == ["Backend", "Design"]
    assert client.get("/api/v1/workshops/tags").json() == ["API", "Python", "UX"]

    client.get("/api/v1/workshops")
    stats = client.get("/api/v1/workshops/stats").json()
    assert stats["total"] == 2
    assert stats["upcoming"] == 1
    assert stats["live"] == 1
    assert stats["total_capacity"] == 15
    assert stats["total_enrolled"] == 9
    assert stats["average_rating"] == 4.5
    assert stats["categories"] == {"Backend": 1, "Design": 1}
    assert stats["analytics"]["total_views"] == 1


def test_workshop_views_are_tracked(client: TestClient, make_workshop, analytics) -> None:
    workshop_id = make_workshop()

    client.get(f"/api/v1/workshops/{workshop_id}")
    client.get(f"/api/v1/workshops/{workshop_id}")

    assert analytics.snapshot()["popular_workshops"] == {str(workshop_id): 2}


def test_stream_for_missing_workshop_returns_404(client: TestClient) -> None:
    response = client.get("/api/v1/workshops/12345/stream")
    assert response.status_code == 404


def test_health_endpoints(client: TestClient) -> None:
    assert client.get("/healthz").json() == {"status": "ok"}
    assert client.get("/readyz").json() == {"status": "ready"}


def test_reads_survive_analytics_outage(client: TestClient, make_workshop) -> None:
    workshop_id = make_workshop(title="Still Readable")
    outage = RedisAnalyticsCounter(url="https://redis.example.com", token="secret", prefix="test")
    outage._client = httpx.Client(
        base_url="https://redis.example.com",
        transport=httpx.MockTransport(lambda request: httpx.Response(503, json={"error": "unavailable"})),
    )
    set_analytics_counter(outage)

    listing = client.get("/api/v1/workshops")
    assert listing.status_code == 200
    assert [item["title"] for item in listing.json()["data"]] == ["Still Readable"]

    single = client.get(f"/api/v1/workshops/{workshop_id}")
    assert single.status_code == 200

    stats = client.get("/api/v1/workshops/stats")
    assert stats.status_code == 200
    assert stats.json()["analytics"]["total_views"] == 0
