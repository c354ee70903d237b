"""
Realtime chat channel over Flask-SocketIO.

Each connected client gets a welcome message, typing indicators around
every bot reply and access to its session's history/context. Connection
bookkeeping is kept in memory, keyed by socket id.
"""

from __future__ import annotations

import asyncio
import logging
import random
import threading
from datetime import timedelta
from typing import Any, Dict, List, Optional, Set

from flask import request
from flask_socketio import SocketIO, emit, join_room, leave_room

from .chat_service import ChatService
from .config import BaseConfig, get_config
from .enums import Intent
from .errors import ValidationError
from .intent_config import SOCKET_ERROR_QUICK_ACTIONS, TEMPLATES, WELCOME_QUICK_ACTIONS
from .models import ClientInfo
from .utils.helpers import iso_now, utcnow

log = logging.getLogger(__name__)


def _payload(data: Any) -> Dict[str, Any]:
    return data if isinstance(data, dict) else {}


class SocketHandler:
    def __init__(self, socketio: SocketIO, chat_service: ChatService,
                 cfg: Optional[BaseConfig] = None) -> None:
        self.socketio = socketio
        self.chat_service = chat_service
        self.cfg = cfg or get_config()
        self.connected_users: Dict[str, ClientInfo] = {}
        self.active_conversations: Set[str] = set()
        self._lock = threading.Lock()
        self._cleanup_started = False

    def register(self) -> None:
        events = {
            "connect": self.on_connect,
            "disconnect": self.on_disconnect,
            "user_message": self.on_user_message,
            "user_typing_start": self.on_user_typing_start,
            "user_typing_stop": self.on_user_typing_stop,
            "join_session": self.on_join_session,
            "leave_session": self.on_leave_session,
            "get_conversation_history": self.on_get_conversation_history,
            "get_conversation_context": self.on_get_conversation_context,
            "clear_conversation": self.on_clear_conversation,
            "feedback": self.on_feedback,
            "request_human_agent": self.on_request_human_agent,
        }
        for name, handler in events.items():
            self.socketio.on_event(name, handler)
        log.info(f"SOCKET_EVENTS_REGISTERED | events={len(events)}")

    # ────────────────────────────────────────────────────────
    # Connection lifecycle
    # ────────────────────────────────────────────────────────
    def on_connect(self, auth: Any = None) -> None:
        sid = request.sid
        now = utcnow()
        with self._lock:
            self.connected_users[sid] = ClientInfo(session_id=None, connected_at=now, last_activity=now)
        log.info(f"🔗 SOCKET_CONNECT | sid={sid}")

        self._start_cleanup_task()

        delay = self.cfg.WELCOME_DELAY_SECONDS
        if delay > 0:
            self.socketio.start_background_task(self._send_welcome_later, sid, delay)
        else:
            emit("bot_message", self._welcome_payload())

    def on_disconnect(self, reason: Any = None) -> None:
        sid = request.sid
        with self._lock:
            info = self.connected_users.pop(sid, None)
            if info and info.session_id:
                self.active_conversations.discard(info.session_id)
        log.info(f"❌ SOCKET_DISCONNECT | sid={sid} | session={info.session_id if info else None}")

    def _welcome_payload(self) -> Dict[str, Any]:
        return {
            "message": TEMPLATES["welcome"],
            "intent": Intent.WELCOME.value,
            "quick_actions": [qa.to_dict() for qa in WELCOME_QUICK_ACTIONS],
            "timestamp": iso_now(),
        }

    def _send_welcome_later(self, sid: str, delay: float) -> None:
        self.socketio.sleep(delay)
        if sid in self.connected_users:
            self.socketio.emit("bot_message", self._welcome_payload(), to=sid)

    def _touch(self, session_id: Optional[str] = None) -> None:
        with self._lock:
            info = self.connected_users.get(request.sid)
            if info is None:
                return
            if session_id:
                info.session_id = session_id
            info.last_activity = utcnow()

    # ────────────────────────────────────────────────────────
    # Chat
    # ────────────────────────────────────────────────────────
    def on_user_message(self, data: Any) -> None:
        data = _payload(data)
        message = data.get("message")
        session_id = data.get("session_id")
        if not message or not session_id:
            emit("error", {"message": "Invalid message format"})
            return

        self._touch(session_id)
        with self._lock:
            self.active_conversations.add(session_id)
        log.info(f"📨 SOCKET_MESSAGE | session={session_id} | preview={str(message)[:50]}")

        emit("typing_start")
        try:
            metadata = {"user_agent": request.headers.get("User-Agent"), "ip_address": request.remote_addr}
            response = asyncio.run(self.chat_service.handle_message(session_id, message, metadata))

            delay_max = self.cfg.TYPING_DELAY_MAX
            if delay_max > 0:
                self.socketio.sleep(random.uniform(self.cfg.TYPING_DELAY_MIN, delay_max))

            emit("typing_stop")
            emit("bot_message", {
                "message": response.message,
                "intent": response.intent,
                "quick_actions": [qa.to_dict() for qa in response.quick_actions],
                "timestamp": iso_now(),
                "session_id": session_id,
            })
        except Exception as exc:
            log.error(f"SOCKET_MESSAGE_ERROR | session={session_id} | error={exc}", exc_info=True)
            emit("typing_stop")
            emit("bot_message", {
                "message": TEMPLATES["socket_error"],
                "intent": Intent.ERROR.value,
                "quick_actions": [qa.to_dict() for qa in SOCKET_ERROR_QUICK_ACTIONS],
                "timestamp": iso_now(),
            })

    def on_user_typing_start(self, data: Any) -> None:
        emit("user_typing_start", {"session_id": _payload(data).get("session_id")},
             broadcast=True, include_self=False)

    def on_user_typing_stop(self, data: Any) -> None:
        emit("user_typing_stop", {"session_id": _payload(data).get("session_id")},
             broadcast=True, include_self=False)

    # ────────────────────────────────────────────────────────
    # Sessions
    # ────────────────────────────────────────────────────────
    def on_join_session(self, data: Any) -> None:
        session_id = _payload(data).get("session_id")
        if not session_id:
            return
        join_room(session_id)
        self._touch(session_id)
        log.info(f"👤 SOCKET_JOIN | sid={request.sid} | session={session_id}")

    def on_leave_session(self, data: Any) -> None:
        session_id = _payload(data).get("session_id")
        if not session_id:
            return
        leave_room(session_id)
        log.info(f"👤 SOCKET_LEAVE | sid={request.sid} | session={session_id}")

    def on_get_conversation_history(self, data: Any) -> None:
        session_id = _payload(data).get("session_id")
        emit("conversation_history", {
            "session_id": session_id,
            "history": self.chat_service.bot_core.get_conversation_history(session_id) if session_id else [],
            "timestamp": iso_now(),
        })

    def on_get_conversation_context(self, data: Any) -> None:
        session_id = _payload(data).get("session_id")
        context = (
            self.chat_service.bot_core.get_conversation_context(session_id)
            if session_id else {"intent": None, "extracted_info": {}}
        )
        emit("conversation_context", {"session_id": session_id, "context": context, "timestamp": iso_now()})

    def on_clear_conversation(self, data: Any) -> None:
        session_id = _payload(data).get("session_id")
        if session_id:
            self.chat_service.clear(session_id)
            log.info(f"🧹 SOCKET_CLEAR | session={session_id}")
        emit("conversation_cleared", {"session_id": session_id, "timestamp": iso_now()})

    def on_feedback(self, data: Any) -> None:
        data = _payload(data)
        session_id = data.get("session_id")
        message_id = data.get("message_id")
        try:
            stored = self.chat_service.record_feedback(session_id, message_id, data.get("rating"), data.get("comment"))
        except ValidationError as e:
            emit("error", {"message": str(e)})
            return
        if not stored:
            emit("error", {"message": "Conversation not found"})
            return
        emit("feedback_received", {"session_id": session_id, "message_id": message_id, "timestamp": iso_now()})

    def on_request_human_agent(self, data: Any) -> None:
        data = _payload(data)
        session_id = data.get("session_id")
        self.chat_service.request_human_agent(session_id, data.get("reason"))
        emit("human_agent_requested", {
            "session_id": session_id,
            "message": TEMPLATES["human_agent"],
            "estimated_wait_time": "2-5 minutes",
            "timestamp": iso_now(),
        })

    # ────────────────────────────────────────────────────────
    # Housekeeping
    # ────────────────────────────────────────────────────────
    def _start_cleanup_task(self) -> None:
        if self._cleanup_started or not self.cfg.ENABLE_CONNECTION_CLEANUP:
            return
        self._cleanup_started = True
        self.socketio.start_background_task(self._cleanup_loop)

    def _cleanup_loop(self) -> None:
        while True:
            self.socketio.sleep(self.cfg.CLEANUP_INTERVAL_SECONDS)
            self.cleanup_inactive_connections()

    def cleanup_inactive_connections(self) -> int:
        cutoff = utcnow() - timedelta(seconds=self.cfg.INACTIVE_CONNECTION_SECONDS)
        removed = 0
        with self._lock:
            for sid, info in list(self.connected_users.items()):
                if info.last_activity < cutoff:
                    del self.connected_users[sid]
                    if info.session_id:
                        self.active_conversations.discard(info.session_id)
                    removed += 1
        if removed:
            log.info(f"🧹 SOCKET_CLEANUP | removed={removed}")
        return removed

    # ────────────────────────────────────────────────────────
    # Admin helpers
    # ────────────────────────────────────────────────────────
    def get_active_stats(self) -> Dict[str, Any]:
        return {
            "connected_users": len(self.connected_users),
            "active_conversations": len(self.active_conversations),
            "timestamp": iso_now(),
        }

    def get_connected_users(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [{"socket_id": sid, **info.to_dict()} for sid, info in self.connected_users.items()]

    def broadcast_message(self, message: str, session_id: Optional[str] = None) -> None:
        payload = {"message": message, "timestamp": iso_now()}
        if session_id:
            self.socketio.emit("broadcast_message", payload, to=session_id)
        else:
            self.socketio.emit("broadcast_message", payload)
