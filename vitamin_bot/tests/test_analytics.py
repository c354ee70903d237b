from __future__ import annotations

from datetime import datetime, timedelta

from vitamin_bot import analytics

T0 = datetime(2024, 3, 1, 9, 0, 0)


def _conv(session_id, intents=(), ratings=(), created=T0, status="active", minutes=5, user_texts=()):
    messages = []
    for text in user_texts:
        messages.append({"role": "user", "content": text})
    for intent in intents:
        messages.append({"role": "user", "content": "q"})
        messages.append({"role": "assistant", "content": "a", "intent": intent})
    return {
        "session_id": session_id,
        "status": status,
        "messages": messages,
        "metadata": {
            "total_messages": len(messages),
            "start_time": created,
            "end_time": created + timedelta(minutes=minutes),
        },
        "feedback": [
            {"rating": r, "comment": f"comment {i}" if i % 2 == 0 else "", "timestamp": created + timedelta(seconds=i)}
            for i, r in enumerate(ratings)
        ],
        "created_at": created,
        "updated_at": created + timedelta(minutes=minutes),
    }


CONVERSATIONS = [
    _conv("a", intents=["pricing", "pricing", "order_tracking"], ratings=[5, 4]),
    _conv("b", intents=["pricing"], ratings=[3], created=T0 + timedelta(days=1), status="completed", minutes=1),
    _conv("c", created=T0 + timedelta(days=1)),
]


def test_intent_counts_and_distribution():
    assert analytics.intent_counts(CONVERSATIONS) == [
        {"intent": "pricing", "count": 3},
        {"intent": "order_tracking", "count": 1},
    ]
    dist = analytics.intent_distribution(CONVERSATIONS)
    assert dist["total_intents"] == 4
    assert dist["intents"][0] == {"intent": "pricing", "count": 3, "percentage": 75.0}


def test_satisfaction():
    assert analytics.satisfaction_summary(CONVERSATIONS) == {"average_rating": 4.0, "total_feedback": 3}
    assert analytics.satisfaction_summary([]) == {"average_rating": 0, "total_feedback": 0}

    report = analytics.satisfaction_report(CONVERSATIONS)
    assert report["rating_distribution"] == [
        {"rating": 5, "count": 1},
        {"rating": 4, "count": 1},
        {"rating": 3, "count": 1},
    ]
    # empty comments are left out, newest first
    assert [f["comment"] for f in report["recent_feedback"]] == ["comment 0", "comment 0"]
    assert report["recent_feedback"][0]["session_id"] == "b"


def test_overview_and_totals():
    assert analytics.total_metrics(CONVERSATIONS) == {"total_sessions": 3, "total_messages": 8}
    overview = analytics.overview(CONVERSATIONS)
    assert overview["total_conversations"] == 3
    assert overview["active_conversations"] == 2
    assert overview["unique_users"] == 3
    assert overview["average_messages_per_session"] == round(8 / 3, 2)
    assert analytics.overview([])["average_messages_per_session"] == 0


def test_daily_trends():
    assert analytics.daily_trends(CONVERSATIONS) == [
        {"date": "2024-03-01", "conversations": 1, "total_messages": 6, "unique_users": 1},
        {"date": "2024-03-02", "conversations": 2, "total_messages": 2, "unique_users": 2},
    ]


def test_conversation_flow():
    flow = analytics.conversation_flow(CONVERSATIONS)
    assert flow["total_sessions"] == 2
    assert flow["avg_message_count"] == 4
    assert flow["avg_duration"] == (5 * 60_000 + 1 * 60_000) / 2
    assert flow["all_intent_sequences"] == [["pricing", "pricing", "order_tracking"], ["pricing"]]
    assert analytics.conversation_flow([])["total_sessions"] == 0


def test_product_mentions():
    products = [
        {"_id": 1, "name": "Vitamin D3 2000 IU", "category": "vitamins", "tags": ["vitamin-d"], "ratings": {"average": 4.7}},
        {"_id": 2, "name": "Zinc", "category": "minerals", "tags": [], "ratings": {}},
        {"_id": 3, "name": "", "tags": []},
    ]
    conversations = [
        _conv("x", user_texts=["do you have vitamin d?", "zinc please", "VITAMIN D3 2000 IU"]),
        _conv("y", user_texts=["zincite is a rock"]),
    ]
    ranked = analytics.product_mentions(products, conversations)
    assert [(r["product_id"], r["mentions"], r["rank"]) for r in ranked] == [(1, 2, 1), (2, 1, 2), (3, 0, 3)]
    assert ranked[1]["rating"] == 0


def test_product_mentions_match_names_ending_in_punctuation():
    products = [{"_id": 1, "name": "Vitamin D3 (Cholecalciferol)", "tags": []}]
    conversations = [_conv("x", user_texts=[
        "is Vitamin D3 (Cholecalciferol) in stock?",
        "vitamin d3 (cholecalciferol)",
        "vitamin d3 (cholecalciferol)x",
    ])]
    assert analytics.product_mentions(products, conversations)[0]["mentions"] == 2
