"""
Chat operations shared by the REST routes and the realtime channel:
run the chatbot engine, then record what happened.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pymongo.errors import PyMongoError

from .bot_core import ChatbotCore
from .enums import ConversationStatus
from .errors import VitaBotError
from .models import BotResponse
from .redis_manager import RedisContextManager
from .schemas import build_feedback
from .store import MongoStore
from .utils.helpers import iso_now

log = logging.getLogger(__name__)


class ChatService:
    def __init__(self, bot_core: ChatbotCore, ctx_mgr: RedisContextManager,
                 store: Optional[MongoStore] = None) -> None:
        self.bot_core = bot_core
        self.ctx_mgr = ctx_mgr
        self.store = store

    async def handle_message(self, session_id: str, message: str,
                             metadata: Optional[Dict[str, Any]] = None) -> BotResponse:
        response = await self.bot_core.process_message(session_id, message)

        if self.store is not None:
            try:
                self.store.append_exchange(
                    session_id,
                    message,
                    response,
                    self.bot_core.get_conversation_context(session_id),
                    metadata,
                )
            except (PyMongoError, VitaBotError) as e:
                log.error(f"CONVERSATION_SAVE_ERROR | session={session_id} | error={e}", exc_info=True)

        return response

    def record_feedback(self, session_id: str, message_id: Any, rating: Any,
                        comment: Optional[str] = None) -> bool:
        """Store a rating in the Redis feedback list, then on the conversation.

        Returns False when a database is configured but holds no such
        conversation; the Redis entry is kept either way. Raises
        ValidationError for a missing message id or a rating outside 1-5.
        """
        feedback = build_feedback(message_id, rating, comment or "")

        self.ctx_mgr.push_feedback({
            "session_id": session_id,
            "message_id": feedback["message_id"],
            "rating": feedback["rating"],
            "comment": feedback["comment"],
            "timestamp": iso_now(),
        })

        if self.store is not None and not self.store.add_feedback(session_id, feedback):
            log.info(f"FEEDBACK_NO_CONVERSATION | session={session_id}")
            return False

        log.info(f"FEEDBACK_RECORDED | session={session_id} | rating={feedback['rating']}")
        return True

    def clear(self, session_id: str) -> None:
        if self.store is not None:
            self.store.complete_conversation(session_id)
        self.bot_core.clear_conversation(session_id)

    def request_human_agent(self, session_id: str, reason: Optional[str] = None) -> None:
        self.ctx_mgr.push_handoff({
            "session_id": session_id,
            "reason": reason or "",
            "timestamp": iso_now(),
        })
        if self.store is not None:
            self.store.set_conversation_status(session_id, ConversationStatus.ESCALATED.value)
        log.info(f"HUMAN_AGENT_REQUESTED | session={session_id} | reason={reason}")
