# vitamin_bot/llm_service.py
"""
LLM service for open-ended chat turns
─────────────────────────────────────
Thin wrapper over anthropic.AsyncAnthropic. Only used when an API key is
configured; otherwise the chatbot answers open-ended turns with a canned reply.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import anthropic

from .config import BaseConfig, get_config
from .errors import LLMUnavailableError

log = logging.getLogger(__name__)


def is_llm_configured(cfg: Optional[BaseConfig] = None) -> bool:
    return (cfg or get_config()).llm_configured


def build_messages(history: List[Dict[str, str]]) -> List[Dict[str, str]]:
    """Shape stored history into an alternating user/assistant list.

    Leading assistant turns are dropped and consecutive turns from the same
    role are merged, since the API requires the list to open with a user turn.
    """
    messages: List[Dict[str, str]] = []
    for item in history:
        role = item.get("role")
        content = (item.get("content") or "").strip()
        if role not in ("user", "assistant") or not content:
            continue
        if not messages and role == "assistant":
            continue
        if messages and messages[-1]["role"] == role:
            messages[-1]["content"] += "\n\n" + content
        else:
            messages.append({"role": role, "content": content})
    return messages


class LLMService:
    """Service class for completion calls."""

    def __init__(self, cfg: Optional[BaseConfig] = None, client: Any = None) -> None:
        self.cfg = cfg or get_config()
        if client is None:
            if not self.cfg.llm_configured:
                raise LLMUnavailableError("Missing ANTHROPIC_API_KEY. Set it in environment or .env file.")
            client = anthropic.AsyncAnthropic(api_key=self.cfg.ANTHROPIC_API_KEY)
        self.anthropic = client

    async def complete(self, system_prompt: str, history: List[Dict[str, str]]) -> str:
        messages = build_messages(history)
        if not messages:
            raise ValueError("No user message to answer")

        resp = await self.anthropic.messages.create(
            model=self.cfg.LLM_MODEL,
            system=system_prompt,
            messages=messages,
            max_tokens=self.cfg.LLM_MAX_TOKENS,
        )

        for block in (resp.content or []):
            if getattr(block, "type", None) == "text":
                return (getattr(block, "text", "") or "").strip()
        return ""
