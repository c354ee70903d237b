from __future__ import annotations

from typing import Dict

import pytest


# ────────────────────────────────────────────────────────
# Health
# ────────────────────────────────────────────────────────
def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    data: Dict[str, str] = res.get_json()
    assert data == {"status": "healthy", "redis": "connected", "database": "connected", "service": "vitabot"}


def test_health_without_database(client_without_store):
    assert client_without_store.get("/health").get_json()["database"] == "not_configured"


def test_health_fails_when_redis_is_down(app, client, monkeypatch):
    def boom():
        raise ConnectionError("redis down")

    monkeypatch.setattr(app.extensions["ctx_mgr"], "ping", boom)
    res = client.get("/health")
    assert res.status_code == 500
    assert res.get_json()["redis"] == "disconnected"


def test_unknown_route_is_json(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert res.get_json()["error"] == "Endpoint not found"


# ────────────────────────────────────────────────────────
# Public catalog
# ────────────────────────────────────────────────────────
def test_catalog_listing(client):
    body = client.get("/api/products?limit=10&page=x").get_json()
    assert body["pagination"] == {"page": 1, "limit": 10, "total": 58, "pages": 6}
    assert len(body["products"]) == 10

    body = client.get("/api/products?category=minerals").get_json()
    assert body["pagination"]["total"] == 7


def test_catalog_item(client):
    first = client.get("/api/products?limit=1").get_json()["products"][0]
    res = client.get(f"/api/products/{first['_id']}")
    assert res.status_code == 200
    assert res.get_json()["product"]["name"] == first["name"]

    assert client.get("/api/products/not-an-id").status_code == 404
    assert client.get("/api/products/" + "0" * 24).status_code == 404


# ────────────────────────────────────────────────────────
# Analytics
# ────────────────────────────────────────────────────────
@pytest.fixture
def chatted(client):
    client.post("/api/chat/message", json={"session_id": "s1", "message": "Track my order"})
    client.post("/api/chat/message", json={"session_id": "s1", "message": "What's the price of vitamin d?"})
    client.post("/api/chat/message", json={"session_id": "s2", "message": "Where is my delivery"})
    client.post("/api/chat/feedback", json={"session_id": "s1", "message_id": "m1", "rating": 5, "comment": "fast"})
    client.post("/api/chat/feedback", json={"session_id": "s2", "message_id": "m2", "rating": 2})
    return client


def test_overview(chatted):
    body = chatted.get("/api/analytics/overview").get_json()["overview"]
    assert body["total_conversations"] == 2
    assert body["active_conversations"] == 2
    assert body["unique_users"] == 2
    assert body["total_messages"] == 6
    assert body["average_messages_per_session"] == 3
    assert body["period"]["days"] == 7


def test_intents(chatted):
    body = chatted.get("/api/analytics/intents?days=1").get_json()["intent_analytics"]
    assert body["total_intents"] == 3
    assert body["intents"][0] == {"intent": "order_tracking", "count": 2, "percentage": 66.7}


def test_satisfaction(chatted):
    body = chatted.get("/api/analytics/satisfaction").get_json()["satisfaction"]
    assert body["average_rating"] == 3.5
    assert body["total_feedback"] == 2
    assert body["rating_distribution"] == [{"rating": 5, "count": 1}, {"rating": 2, "count": 1}]
    assert [f["comment"] for f in body["recent_feedback"]] == ["fast"]


def test_popular_products(chatted):
    products = chatted.get("/api/analytics/popular-products").get_json()["popular_products"]["products"]
    assert len(products) == 10
    assert [p["rank"] for p in products] == list(range(1, 11))
    ratings = [p["rating"] for p in products]
    assert ratings == sorted(ratings, reverse=True)


def test_daily_trends_and_flow(chatted):
    trends = chatted.get("/api/analytics/daily-trends").get_json()["daily_trends"]["trends"]
    assert sum(t["conversations"] for t in trends) == 2

    flow = chatted.get("/api/analytics/conversation-flow").get_json()["conversation_flow"]
    assert flow["total_sessions"] == 2
    assert flow["avg_message_count"] == 3
    assert sorted(flow["all_intent_sequences"]) == [["order_tracking"], ["order_tracking", "pricing"]]


def test_analytics_need_database(client_without_store):
    for path in ("overview", "intents", "satisfaction", "popular-products", "daily-trends", "conversation-flow"):
        assert client_without_store.get(f"/api/analytics/{path}").status_code == 503
