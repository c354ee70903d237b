from __future__ import annotations

from conftest import ADMIN_HEADERS

NEW_PRODUCT = {
    "name": "Vitamin K2 100mcg",
    "category": "vitamins",
    "description": "Supports calcium routing to bones.",
    "pricing": {"base_price": 19.99},
    "tags": ["vitamin-k", "bone-health"],
}


def _get(client, path):
    return client.get(f"/api/admin{path}", headers=ADMIN_HEADERS)


def test_requires_admin_key(client):
    assert client.get("/api/admin/dashboard").status_code == 401
    res = client.get("/api/admin/dashboard", headers={"X-Admin-Key": "wrong"})
    assert res.status_code == 401
    assert res.get_json() == {"error": "Unauthorized"}
    assert client.post("/api/admin/system/broadcast", json={"message": "hi"}).status_code == 401


def test_dashboard(client):
    client.post("/api/chat/message", json={"session_id": "s1", "message": "Track my order"})
    client.post("/api/chat/feedback", json={"session_id": "s1", "message_id": "m1", "rating": 4})

    res = _get(client, "/dashboard")
    assert res.status_code == 200
    dashboard = res.get_json()["dashboard"]
    assert dashboard["overview"] == {
        "total_conversations": 1,
        "active_conversations": 1,
        "total_customers": 0,
        "total_products": 58,
    }
    assert dashboard["recent_conversations"][0]["session_id"] == "s1"
    assert dashboard["intent_stats"] == [{"intent": "order_tracking", "count": 1}]
    assert dashboard["satisfaction"] == {"average_rating": 4.0, "total_feedback": 1}


def test_conversations(client):
    for sid in ("s1", "s2"):
        client.post("/api/chat/message", json={"session_id": sid, "message": "Track my order"})

    body = _get(client, "/conversations?limit=1&page=2").get_json()
    assert body["pagination"] == {"page": 2, "limit": 1, "total": 2, "pages": 2}
    assert len(body["conversations"]) == 1

    body = _get(client, "/conversations?search=s2").get_json()
    assert [c["session_id"] for c in body["conversations"]] == ["s2"]

    assert _get(client, "/conversations/s1").get_json()["conversation"]["messages"]
    assert _get(client, "/conversations/zzz").status_code == 404

    assert _get(client, "/conversations?status=active").get_json()["pagination"]["total"] == 2
    assert _get(client, "/conversations?status=escalated").get_json()["pagination"]["total"] == 0
    assert _get(client, "/conversations?status=closed").status_code == 400


def test_product_lifecycle(client):
    res = client.post("/api/admin/products", json=NEW_PRODUCT, headers=ADMIN_HEADERS)
    assert res.status_code == 201
    product = res.get_json()["product"]
    pid = product["_id"]
    assert product["pricing"]["currency"] == "USD"

    res = client.put(f"/api/admin/products/{pid}", json={"pricing": {"sale_price": 15.0}}, headers=ADMIN_HEADERS)
    assert res.status_code == 200
    assert res.get_json()["product"]["pricing"] == {"base_price": 19.99, "currency": "USD", "sale_price": 15.0}

    res = client.delete(f"/api/admin/products/{pid}", headers=ADMIN_HEADERS)
    assert res.get_json()["message"] == "Product deactivated successfully"
    assert client.get(f"/api/products/{pid}").status_code == 404

    # admin listing still sees inactive products
    body = _get(client, "/products?search=K2").get_json()
    assert body["products"][0]["is_active"] is False


def test_product_validation_and_missing(client):
    res = client.post("/api/admin/products", json={"name": "No category"}, headers=ADMIN_HEADERS)
    assert res.status_code == 400
    res = client.put("/api/admin/products/" + "0" * 24, json={"name": "x"}, headers=ADMIN_HEADERS)
    assert res.status_code == 404
    res = client.put("/api/admin/products/" + "0" * 24, json={"category": "candy"}, headers=ADMIN_HEADERS)
    assert res.status_code == 400
    assert client.delete("/api/admin/products/bogus", headers=ADMIN_HEADERS).status_code == 404


def test_product_filters(client):
    body = _get(client, "/products?category=prebiotics&limit=50").get_json()
    assert body["pagination"]["total"] == 5
    assert {p["category"] for p in body["products"]} == {"prebiotics"}

    body = _get(client, "/products?status=out-of-stock").get_json()
    assert body["pagination"]["total"] == 0


def test_customers(client):
    client.post("/api/chat/customer/profile", json={"email": "kim@example.com", "profile": {"first_name": "Kim"}})
    body = _get(client, "/customers?search=kim").get_json()
    assert body["pagination"]["total"] == 1
    assert body["customers"][0]["email"] == "kim@example.com"


def test_knowledge_base(client):
    body = _get(client, "/knowledge-base").get_json()
    assert body["pagination"]["total"] == 3
    vitamin_d = next(e for e in body["entries"] if e["title"].startswith("Vitamin D"))
    assert vitamin_d["related_products"]
    assert set(vitamin_d["related_products"][0]) == {"_id", "name", "category"}

    res = client.post("/api/admin/knowledge-base", headers=ADMIN_HEADERS, json={
        "category": "vitamin", "title": "Vitamin K", "content": "Needed for clotting.", "keywords": ["vitamin-k"],
    })
    assert res.status_code == 201
    entry_id = res.get_json()["entry"]["_id"]

    res = client.put(f"/api/admin/knowledge-base/{entry_id}", json={"title": "Vitamin K basics"}, headers=ADMIN_HEADERS)
    assert res.status_code == 200
    assert res.get_json()["entry"]["last_verified"] is not None

    res = client.post("/api/admin/knowledge-base", json={"category": "vitamin"}, headers=ADMIN_HEADERS)
    assert res.status_code == 400


def test_analytics_summary(client):
    client.post("/api/chat/message", json={"session_id": "s1", "message": "Track my order"})
    body = _get(client, "/analytics/summary?days=7").get_json()["analytics"]
    assert body["total_metrics"] == {"total_sessions": 1, "total_messages": 2}
    assert body["intent_distribution"] == [{"intent": "order_tracking", "count": 1}]
    assert body["satisfaction_data"] == []
    assert body["daily_stats"] == []
    assert body["period"]["days"] == 7


def test_broadcast_and_connections(app, client):
    socket = app.extensions["socketio"].test_client(app)
    socket.get_received()

    res = client.post("/api/admin/system/broadcast", json={}, headers=ADMIN_HEADERS)
    assert res.status_code == 400
    assert res.get_json()["error"] == "Message is required"

    res = client.post("/api/admin/system/broadcast", json={"message": "Sale today!"}, headers=ADMIN_HEADERS)
    assert res.status_code == 200
    received = socket.get_received()
    assert [(r["name"], r["args"][0]["message"]) for r in received] == [("broadcast_message", "Sale today!")]

    body = _get(client, "/system/connections").get_json()
    assert body["stats"]["connected_users"] == 1
    assert body["connected_users"][0]["session_id"] is None
    socket.disconnect()


def test_admin_data_routes_need_database(client_without_store):
    for path in ("/dashboard", "/conversations", "/products", "/customers", "/knowledge-base", "/analytics/summary"):
        res = client_without_store.get(f"/api/admin{path}", headers=ADMIN_HEADERS)
        assert res.status_code == 503, path
    res = client_without_store.get("/api/admin/system/connections", headers=ADMIN_HEADERS)
    assert res.status_code == 200
