from __future__ import annotations

import json

import redis

from vitamin_bot.models import SessionState
from vitamin_bot.redis_manager import (FEEDBACK_KEY, HANDOFF_KEY,
                                       RedisContextManager, session_key)


def test_missing_session_is_empty(ctx_mgr, redis_client):
    state = ctx_mgr.get_session("nobody")
    assert state.session_id == "nobody"
    assert state.history == []
    assert state.intent is None
    assert state.extracted_info == {}
    assert redis_client.exists(session_key("nobody")) == 0


def test_save_and_load(ctx_mgr, redis_client, cfg):
    state = SessionState("s1")
    state.add_message("user", "hi")
    state.intent = "general_support"
    state.merge_entities({"age": 30})

    assert ctx_mgr.save_session(state) is True
    assert redis_client.exists(session_key("s1")) == 1
    assert 0 < redis_client.ttl(session_key("s1")) <= cfg.REDIS_TTL_SECONDS

    loaded = ctx_mgr.get_session("s1")
    assert loaded.history == [{"role": "user", "content": "hi"}]
    assert loaded.intent == "general_support"
    assert loaded.extracted_info == {"age": 30}


def test_corrupted_session_is_reset(ctx_mgr, redis_client):
    redis_client.set(session_key("s1"), "{not json")
    assert ctx_mgr.get_session("s1").history == []
    assert redis_client.exists(session_key("s1")) == 0


def test_delete_session(ctx_mgr):
    ctx_mgr.save_session(SessionState("s1"))
    assert ctx_mgr.delete_session("s1") is True
    assert ctx_mgr.delete_session("s1") is False


def test_event_lists(ctx_mgr, redis_client):
    ctx_mgr.push_feedback({"session_id": "s1", "rating": 5})
    ctx_mgr.push_handoff({"session_id": "s1", "reason": "refund"})
    assert json.loads(redis_client.lindex(FEEDBACK_KEY, 0)) == {"session_id": "s1", "rating": 5}
    assert json.loads(redis_client.lindex(HANDOFF_KEY, 0))["reason"] == "refund"


def test_health_check(ctx_mgr):
    health = ctx_mgr.health_check()
    assert health == {"connection_healthy": True, "ping_success": True, "error": None}


class _DownRedis:
    def ping(self):
        raise redis.exceptions.ConnectionError("connection refused")

    def get(self, key):
        raise redis.exceptions.ConnectionError("connection refused")

    def setex(self, key, ttl, value):
        raise redis.exceptions.ConnectionError("connection refused")


def test_unreachable_redis_degrades(cfg, monkeypatch):
    monkeypatch.setattr("vitamin_bot.redis_manager.time.sleep", lambda s: None)
    mgr = RedisContextManager(client=_DownRedis(), cfg=cfg)

    assert mgr.get_session("s1").history == []
    assert mgr.save_session(SessionState("s1")) is False
    health = mgr.health_check()
    assert health["ping_success"] is False
    assert "connection refused" in health["error"]
