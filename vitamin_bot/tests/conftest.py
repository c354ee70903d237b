# tests/conftest.py
"""
Shared fixtures: in-memory Redis (fakeredis), in-memory MongoDB (mongomock)
and a Flask app wired with the testing config.

Run:  pytest -q
"""

from __future__ import annotations

from typing import Any, Dict, List

import fakeredis
import mongomock
import pytest

from vitamin_bot import create_app
from vitamin_bot.bot_core import ChatbotCore
from vitamin_bot.chat_service import ChatService
from vitamin_bot.config import get_config
from vitamin_bot.redis_manager import RedisContextManager
from vitamin_bot.seed import seed_database
from vitamin_bot.store import MongoStore

ADMIN_HEADERS = {"X-Admin-Key": "test-admin-key"}


class FakeLLM:
    """Stands in for LLMService; records every call."""

    def __init__(self, reply: str = "Vitamins are micronutrients your body needs.", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, system_prompt: str, history: List[Dict[str, str]]) -> str:
        self.calls.append({"system_prompt": system_prompt, "history": list(history)})
        if self.error is not None:
            raise self.error
        return self.reply


class FixedClassifier:
    def __init__(self, intent: str):
        self.intent = intent

    def classify(self, message: str) -> str:
        return self.intent


@pytest.fixture
def cfg():
    return get_config("testing")


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def ctx_mgr(redis_client, cfg):
    return RedisContextManager(client=redis_client, cfg=cfg)


@pytest.fixture
def store(cfg):
    s = MongoStore(client=mongomock.MongoClient(), cfg=cfg, db_name="vitabot_test")
    s.ensure_indexes()
    return s


@pytest.fixture
def seeded_store(store):
    seed_database(store)
    return store


@pytest.fixture
def bot_core(ctx_mgr, cfg):
    return ChatbotCore(ctx_mgr, cfg=cfg)


@pytest.fixture
def chat_service(bot_core, ctx_mgr, store):
    return ChatService(bot_core, ctx_mgr, store)


@pytest.fixture
def app(ctx_mgr, seeded_store):
    return create_app("testing", ctx_mgr=ctx_mgr, store=seeded_store, llm_service=None)


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def app_without_store(ctx_mgr):
    return create_app("testing", ctx_mgr=ctx_mgr, store=None, llm_service=None)


@pytest.fixture
def client_without_store(app_without_store):
    with app_without_store.test_client() as c:
        yield c
