from __future__ import annotations

import json
from datetime import timedelta

import pytest

from vitamin_bot.redis_manager import FEEDBACK_KEY, HANDOFF_KEY


@pytest.fixture
def socket_client(app):
    sc = app.extensions["socketio"].test_client(app)
    yield sc
    if sc.is_connected():
        sc.disconnect()


def _events(sc, name=None):
    received = sc.get_received()
    if name is None:
        return received
    return [r["args"][0] if r["args"] else None for r in received if r["name"] == name]


def test_connect_sends_welcome(app, socket_client):
    welcome = _events(socket_client, "bot_message")
    assert len(welcome) == 1
    assert welcome[0]["intent"] == "welcome"
    assert len(welcome[0]["quick_actions"]) == 3
    assert app.extensions["socket_handler"].get_active_stats()["connected_users"] == 1


def test_user_message_round_trip(app, socket_client, seeded_store):
    socket_client.get_received()
    socket_client.emit("user_message", {"session_id": "s1", "message": "Track my order"})

    received = socket_client.get_received()
    names = [r["name"] for r in received]
    assert names == ["typing_start", "typing_stop", "bot_message"]
    reply = received[-1]["args"][0]
    assert reply["intent"] == "order_tracking"
    assert reply["session_id"] == "s1"

    handler = app.extensions["socket_handler"]
    assert "s1" in handler.active_conversations
    assert handler.get_connected_users()[0]["session_id"] == "s1"
    assert seeded_store.get_conversation("s1")["metadata"]["total_messages"] == 2


def test_invalid_message(socket_client):
    socket_client.get_received()
    socket_client.emit("user_message", {"message": "no session"})
    assert _events(socket_client, "error") == [{"message": "Invalid message format"}]


def test_processing_failure_emits_error_reply(app, socket_client, monkeypatch):
    async def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(app.extensions["chat_service"], "handle_message", broken)
    socket_client.get_received()
    socket_client.emit("user_message", {"session_id": "s1", "message": "hi"})

    received = socket_client.get_received()
    assert [r["name"] for r in received] == ["typing_start", "typing_stop", "bot_message"]
    assert received[-1]["args"][0]["intent"] == "error"


def test_history_context_and_clear(socket_client):
    socket_client.emit("user_message", {"session_id": "s1", "message": "I'm 25 years old, what's the price?"})
    socket_client.get_received()

    socket_client.emit("get_conversation_history", {"session_id": "s1"})
    history = _events(socket_client, "conversation_history")[0]["history"]
    assert [m["role"] for m in history] == ["user", "assistant"]

    socket_client.emit("get_conversation_context", {"session_id": "s1"})
    context = _events(socket_client, "conversation_context")[0]["context"]
    assert context == {"intent": "pricing", "extracted_info": {"age": 25}}

    socket_client.emit("clear_conversation", {"session_id": "s1"})
    assert _events(socket_client, "conversation_cleared")[0]["session_id"] == "s1"

    socket_client.emit("get_conversation_history", {"session_id": "s1"})
    assert _events(socket_client, "conversation_history")[0]["history"] == []


def test_feedback_events(socket_client):
    socket_client.emit("user_message", {"session_id": "s1", "message": "Track my order"})
    socket_client.get_received()

    socket_client.emit("feedback", {"session_id": "s1", "message_id": "m1", "rating": 5})
    assert _events(socket_client, "feedback_received")[0]["message_id"] == "m1"

    socket_client.emit("feedback", {"session_id": "s1", "message_id": "m1", "rating": 0})
    assert _events(socket_client, "error") == [{"message": "Rating must be between 1 and 5"}]


def test_feedback_for_unknown_session(socket_client, redis_client):
    socket_client.get_received()
    socket_client.emit("feedback", {"session_id": "never-chatted", "message_id": "m1", "rating": 4})

    received = socket_client.get_received()
    assert [r["name"] for r in received] == ["error"]
    assert received[0]["args"][0] == {"message": "Conversation not found"}
    assert json.loads(redis_client.lindex(FEEDBACK_KEY, 0))["session_id"] == "never-chatted"


def test_request_human_agent(socket_client, redis_client, seeded_store):
    socket_client.emit("user_message", {"session_id": "s1", "message": "Track my order"})
    socket_client.get_received()

    socket_client.emit("request_human_agent", {"session_id": "s1", "reason": "refund"})
    payload = _events(socket_client, "human_agent_requested")[0]
    assert payload["estimated_wait_time"] == "2-5 minutes"
    assert redis_client.llen(HANDOFF_KEY) == 1
    assert seeded_store.get_conversation("s1")["status"] == "escalated"


def test_typing_is_relayed_to_other_clients(app, socket_client):
    other = app.extensions["socketio"].test_client(app)
    socket_client.get_received()
    other.get_received()

    socket_client.emit("user_typing_start", {"session_id": "s1"})
    assert _events(other, "user_typing_start") == [{"session_id": "s1"}]
    assert _events(socket_client, "user_typing_start") == []
    other.disconnect()


def test_session_rooms_receive_targeted_broadcasts(app, socket_client):
    other = app.extensions["socketio"].test_client(app)
    socket_client.emit("join_session", {"session_id": "room-1"})
    socket_client.get_received()
    other.get_received()

    app.extensions["socket_handler"].broadcast_message("Your order shipped", "room-1")
    assert _events(socket_client, "broadcast_message")[0]["message"] == "Your order shipped"
    assert _events(other, "broadcast_message") == []

    socket_client.emit("leave_session", {"session_id": "room-1"})
    app.extensions["socket_handler"].broadcast_message("again", "room-1")
    assert _events(socket_client, "broadcast_message") == []
    other.disconnect()


def test_disconnect_and_cleanup(app, socket_client):
    handler = app.extensions["socket_handler"]
    socket_client.emit("user_message", {"session_id": "s1", "message": "Track my order"})
    socket_client.disconnect()
    assert handler.get_active_stats()["connected_users"] == 0
    assert "s1" not in handler.active_conversations

    idle = app.extensions["socketio"].test_client(app)
    for info in handler.connected_users.values():
        info.last_activity -= timedelta(seconds=handler.cfg.INACTIVE_CONNECTION_SECONDS + 1)
    assert handler.cleanup_inactive_connections() == 1
    assert handler.get_connected_users() == []
    idle.disconnect()
