"""
Brain of the vitamin store assistant.

Every turn runs the same pipeline:
  1. load session state from Redis
  2. classify intent and extract entities (merged into the session)
  3. dispatch to a templated handler, or to the LLM for open-ended turns
  4. append the reply to history, trim and save

Failures never reach the caller; they become the canned error reply.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from .config import BaseConfig, get_config
from .entity_extractor import extract_entities
from .enums import Intent, Role
from .intent_classifier import IntentClassifier, get_intent_classifier
from .intent_config import (AVAILABILITY_QUICK_ACTIONS,
                            CONVERSATION_QUICK_ACTIONS, ERROR_QUICK_ACTIONS,
                            GOAL_QUICK_ACTIONS, HEALTH_TOPIC_QUICK_ACTIONS,
                            LLM_ERROR_QUICK_ACTIONS, ORDER_QUICK_ACTIONS,
                            PRICING_QUICK_ACTIONS, PRODUCT_INFO_QUICK_ACTIONS,
                            RECOMMENDATION_QUICK_ACTIONS, SYSTEM_PROMPT,
                            TEMPLATES)
from .knowledge import MINERALS, VITAMINS, goal_recommendation
from .models import BotResponse, QuickAction, SessionState
from .redis_manager import RedisContextManager
from .utils.helpers import trim_history
from .utils.smart_logger import get_smart_logger

log = logging.getLogger(__name__)


def error_response() -> BotResponse:
    return BotResponse(
        message=TEMPLATES["error"],
        intent=Intent.ERROR.value,
        quick_actions=list(ERROR_QUICK_ACTIONS),
    )


def _nutrient_card(info: Dict[str, Any], verb: str) -> str:
    return (
        f"**{info['name']}** is {verb} for:\n\n"
        f"🎯 **Benefits:** {', '.join(info['benefits'])}\n"
        f"📊 **Daily Value:** {info['daily_value']}\n"
        f"🥬 **Natural Sources:** {', '.join(info['sources'])}\n\n"
        f"⚠️ **Deficiency symptoms may include:** {', '.join(info['deficiency_symptoms'])}"
    )


class ChatbotCore:
    def __init__(
        self,
        ctx_mgr: RedisContextManager,
        llm_service: Any = None,
        cfg: Optional[BaseConfig] = None,
        classifier: Optional[IntentClassifier] = None,
    ) -> None:
        self.ctx_mgr = ctx_mgr
        self.llm_service = llm_service
        self.cfg = cfg or get_config()
        self.classifier = classifier or get_intent_classifier()
        self.smart_log = get_smart_logger("bot_core")

        self._handlers = {
            Intent.PRODUCT_RECOMMENDATION.value: self._handle_product_recommendation,
            Intent.HEALTH_INFORMATION.value: self._handle_health_information,
            Intent.ORDER_TRACKING.value: self._handle_order_tracking,
            Intent.PRODUCT_INFO.value: self._handle_product_info,
            Intent.PRICING.value: self._handle_pricing,
            Intent.AVAILABILITY.value: self._handle_availability,
        }

    # ────────────────────────────────────────────────────────
    # Public entry point
    # ────────────────────────────────────────────────────────
    async def process_message(self, session_id: str, message: str) -> BotResponse:
        try:
            state = self.ctx_mgr.get_session(session_id)
            self.smart_log.query_start(session_id, message, bool(state.history))

            state.add_message(Role.USER.value, message)

            intent = self.classifier.classify(message)
            state.intent = intent
            self.smart_log.intent_classified(session_id, intent, "classifier+rules")

            entities = extract_entities(message)
            state.merge_entities(entities)
            self.smart_log.entities_extracted(session_id, entities)

            handler = self._handlers.get(intent)
            if handler is not None:
                self.smart_log.flow_decision(session_id, f"HANDLER_{intent.upper()}")
                response = handler(state)
            else:
                self.smart_log.flow_decision(session_id, "OPEN_ENDED", reason=intent)
                response = await self._handle_general_conversation(state)
            response.entities = entities

            state.add_message(Role.ASSISTANT.value, response.message)
            trim_history(state.history, self.cfg.HISTORY_MAX_MESSAGES)
            self.ctx_mgr.save_session(state)

            self.smart_log.response_generated(session_id, response.intent, len(response.quick_actions))
            return response

        except Exception as exc:
            self.smart_log.error_occurred(session_id, type(exc).__name__, "process_message", str(exc))
            log.error(f"PROCESS_MESSAGE_ERROR | session={session_id} | error={exc}", exc_info=True)
            return error_response()

    # ────────────────────────────────────────────────────────
    # Conversation state accessors
    # ────────────────────────────────────────────────────────
    def clear_conversation(self, session_id: str) -> bool:
        self.smart_log.context_change(session_id, "CLEARED")
        return self.ctx_mgr.delete_session(session_id)

    def get_conversation_history(self, session_id: str) -> List[Dict[str, str]]:
        return self.ctx_mgr.get_session(session_id).history

    def get_conversation_context(self, session_id: str) -> Dict[str, Any]:
        return self.ctx_mgr.get_session(session_id).context

    # ────────────────────────────────────────────────────────
    # Templated handlers
    # ────────────────────────────────────────────────────────
    def _handle_product_recommendation(self, state: SessionState) -> BotResponse:
        info = state.extracted_info
        message = TEMPLATES["recommendation_intro"]
        quick_actions: List[QuickAction] = []

        vitamin = VITAMINS.get(info.get("requested_vitamin") or "")
        if info.get("health_goal"):
            message += goal_recommendation(info["health_goal"])
        elif vitamin:
            message += (
                f"{vitamin['name']} is great for: {', '.join(vitamin['benefits'])}. "
                f"The recommended daily value is {vitamin['daily_value']}."
            )
        else:
            message += TEMPLATES["recommendation_questions"]
            quick_actions = list(GOAL_QUICK_ACTIONS)

        return BotResponse(
            message=message,
            intent=Intent.PRODUCT_RECOMMENDATION.value,
            quick_actions=quick_actions or list(RECOMMENDATION_QUICK_ACTIONS),
        )

    def _handle_health_information(self, state: SessionState) -> BotResponse:
        info = state.extracted_info

        vitamin = VITAMINS.get(info.get("requested_vitamin") or "")
        if vitamin:
            name = vitamin["name"]
            return BotResponse(
                message=_nutrient_card(vitamin, "essential"),
                intent=Intent.HEALTH_INFORMATION.value,
                quick_actions=[
                    QuickAction(f"🛒 Shop {name}", f"I want to buy {name}"),
                    QuickAction("📋 More Info", f"Tell me more about {name}"),
                    QuickAction("🔍 Other Vitamins", "What other vitamins do you recommend?"),
                ],
            )

        mineral = MINERALS.get(info.get("requested_mineral") or "")
        if mineral:
            name = mineral["name"]
            return BotResponse(
                message=_nutrient_card(mineral, "important"),
                intent=Intent.HEALTH_INFORMATION.value,
                quick_actions=[
                    QuickAction(f"🛒 Shop {name}", f"I want to buy {name}"),
                    QuickAction("📋 More Info", f"Tell me more about {name}"),
                ],
            )

        return BotResponse(
            message=TEMPLATES["health_prompt"],
            intent=Intent.HEALTH_INFORMATION.value,
            quick_actions=list(HEALTH_TOPIC_QUICK_ACTIONS),
        )

    def _handle_order_tracking(self, state: SessionState) -> BotResponse:
        return BotResponse(TEMPLATES["order_tracking"], Intent.ORDER_TRACKING.value, list(ORDER_QUICK_ACTIONS))

    def _handle_product_info(self, state: SessionState) -> BotResponse:
        return BotResponse(TEMPLATES["product_info"], Intent.PRODUCT_INFO.value, list(PRODUCT_INFO_QUICK_ACTIONS))

    def _handle_pricing(self, state: SessionState) -> BotResponse:
        return BotResponse(TEMPLATES["pricing"], Intent.PRICING.value, list(PRICING_QUICK_ACTIONS))

    def _handle_availability(self, state: SessionState) -> BotResponse:
        return BotResponse(TEMPLATES["availability"], Intent.AVAILABILITY.value, list(AVAILABILITY_QUICK_ACTIONS))

    # ────────────────────────────────────────────────────────
    # Open-ended turns
    # ────────────────────────────────────────────────────────
    async def _handle_general_conversation(self, state: SessionState) -> BotResponse:
        if self.llm_service is None:
            return BotResponse(
                message=TEMPLATES["conversation_fallback"],
                intent=Intent.GENERAL_CONVERSATION.value,
                quick_actions=list(CONVERSATION_QUICK_ACTIONS),
            )

        system_prompt = SYSTEM_PROMPT.format(context=json.dumps(state.extracted_info))
        window = state.history[-self.cfg.LLM_HISTORY_WINDOW:]
        try:
            self.smart_log.api_call(state.session_id, "anthropic", "complete")
            text = await self.llm_service.complete(system_prompt, window)
            self.smart_log.api_call(state.session_id, "anthropic", "complete", status="ok")
        except Exception as exc:
            self.smart_log.warning(state.session_id, "LLM_CALL_FAILED", str(exc))
            return BotResponse(
                message=TEMPLATES["llm_error"],
                intent=Intent.GENERAL_CONVERSATION.value,
                quick_actions=list(LLM_ERROR_QUICK_ACTIONS),
            )

        return BotResponse(
            message=text or TEMPLATES["conversation_fallback"],
            intent=Intent.GENERAL_CONVERSATION.value,
            quick_actions=list(CONVERSATION_QUICK_ACTIONS),
        )
