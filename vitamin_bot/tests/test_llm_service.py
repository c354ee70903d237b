from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace

import anthropic
import httpx
import pytest

from conftest import FixedClassifier

from vitamin_bot.bot_core import ChatbotCore
from vitamin_bot.config import TestingConfig
from vitamin_bot.errors import LLMUnavailableError
from vitamin_bot.llm_service import LLMService, build_messages, is_llm_configured


def test_build_messages_drops_leading_assistant_and_merges():
    history = [
        {"role": "assistant", "content": "Welcome!"},
        {"role": "user", "content": "hi"},
        {"role": "user", "content": "anyone there?"},
        {"role": "assistant", "content": "Yes!"},
        {"role": "system", "content": "ignored"},
        {"role": "user", "content": "   "},
        {"role": "user", "content": "great"},
    ]
    assert build_messages(history) == [
        {"role": "user", "content": "hi\n\nanyone there?"},
        {"role": "assistant", "content": "Yes!"},
        {"role": "user", "content": "great"},
    ]


def test_requires_api_key_without_client(cfg):
    with pytest.raises(LLMUnavailableError):
        LLMService(cfg)


@pytest.mark.parametrize("key, expected", [
    ("", False),
    ("sk-ant-REDACTED", False),
    ("sk-ant-real", True),
])
def test_is_llm_configured(key, expected):
    class _Cfg(TestingConfig):
        ANTHROPIC_API_KEY = key

    assert is_llm_configured(_Cfg()) is expected


class _Messages:
    def __init__(self, content):
        self.content = content
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        return SimpleNamespace(content=self.content)


def _client(content):
    return SimpleNamespace(messages=_Messages(content))


def test_complete_returns_first_text_block(cfg):
    client = _client([
        SimpleNamespace(type="tool_use", name="x"),
        SimpleNamespace(type="text", text="  Vitamin D helps bones.  "),
    ])
    service = LLMService(cfg, client=client)

    text = asyncio.run(service.complete("be nice", [{"role": "user", "content": "vitamin d?"}]))

    assert text == "Vitamin D helps bones."
    kwargs = client.messages.kwargs
    assert kwargs["system"] == "be nice"
    assert kwargs["model"] == cfg.LLM_MODEL
    assert kwargs["max_tokens"] == cfg.LLM_MAX_TOKENS
    assert kwargs["messages"] == [{"role": "user", "content": "vitamin d?"}]


def test_complete_without_text_block(cfg):
    service = LLMService(cfg, client=_client([]))
    assert asyncio.run(service.complete("sys", [{"role": "user", "content": "hi"}])) == ""


def test_complete_needs_a_user_turn(cfg):
    service = LLMService(cfg, client=_client([]))
    with pytest.raises(ValueError):
        asyncio.run(service.complete("sys", [{"role": "assistant", "content": "hello"}]))


# ────────────────────────────────────────────────────────
# Real SDK client over a mocked HTTP transport
# ────────────────────────────────────────────────────────
def _sdk_client(replies, requests):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(json.loads(request.content))
        return httpx.Response(200, json={
            "id": "msg_test",
            "type": "message",
            "role": "assistant",
            "model": "claude-test",
            "content": [{"type": "text", "text": replies.pop(0)}],
            "stop_reason": "end_turn",
            "stop_sequence": None,
            "usage": {"input_tokens": 5, "output_tokens": 7},
        })

    return anthropic.AsyncAnthropic(
        api_key="sk-ant-unit",
        base_url="http://llm.test",
        max_retries=0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def test_complete_through_sdk(cfg):
    requests = []
    service = LLMService(cfg, client=_sdk_client([" Magnesium helps sleep. "], requests))

    text = asyncio.run(service.complete("be nice", [{"role": "user", "content": "sleep tips?"}]))

    assert text == "Magnesium helps sleep."
    body = requests[0]
    assert body["model"] == cfg.LLM_MODEL
    assert body["max_tokens"] == cfg.LLM_MAX_TOKENS
    assert body["system"] == "be nice"
    assert body["messages"] == [{"role": "user", "content": "sleep tips?"}]


def test_open_ended_turn_returns_sdk_text(ctx_mgr, cfg):
    requests = []
    service = LLMService(cfg, client=_sdk_client(["Happy to chat about wellness!"], requests))
    core = ChatbotCore(ctx_mgr, llm_service=service, cfg=cfg, classifier=FixedClassifier("general_support"))

    response = asyncio.run(core.process_message("s1", "tell me something nice"))

    assert response.message == "Happy to chat about wellness!"
    assert response.intent == "general_conversation"
    assert len(requests) == 1
