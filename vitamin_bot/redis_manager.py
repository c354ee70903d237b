"""
Redis-backed conversation state.

One JSON document per session at `session:{session_id}` (history, last
intent, accumulated entities), refreshed with a TTL on every save.
Feedback events and human hand-off requests are appended to Redis lists.
"""
from __future__ import annotations

import json
import logging
import time
from datetime import timedelta
from typing import Any, Dict, Optional

import redis
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from .config import BaseConfig, get_config
from .models import SessionState

log = logging.getLogger(__name__)

FEEDBACK_KEY = "feedback:items"
HANDOFF_KEY = "handoff:requests"


def session_key(session_id: str) -> str:
    return f"session:{session_id}"


class RedisContextManager:
    """
    Session state store with retrying reads/writes.
    Errors never propagate: reads fall back to an empty state and writes return False.
    """

    def __init__(self, client: redis.Redis | None = None, cfg: Optional[BaseConfig] = None):
        cfg = cfg or get_config()
        self.redis: redis.Redis = client or redis.Redis(
            host=cfg.REDIS_HOST,
            port=cfg.REDIS_PORT,
            db=cfg.REDIS_DB,
            decode_responses=cfg.REDIS_DECODE_RESPONSES,
            socket_timeout=10,
            socket_connect_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        self.ttl = timedelta(seconds=cfg.REDIS_TTL_SECONDS)

    # ────────────────────────────────────────────────────────
    # Session state
    # ────────────────────────────────────────────────────────

    def get_session(self, session_id: str) -> SessionState:
        data = self._get_json_with_retry(session_key(session_id), default=None)
        if not isinstance(data, dict):
            return SessionState(session_id=session_id)
        return SessionState.from_dict(session_id, data)

    def save_session(self, state: SessionState) -> bool:
        payload = {
            "history": state.history,
            "intent": state.intent,
            "extracted_info": state.extracted_info,
        }
        ok = self._set_json_with_retry(session_key(state.session_id), payload, ttl=self.ttl)
        if ok:
            log.debug(f"SESSION_SAVED | session={state.session_id} | messages={len(state.history)}")
        return ok

    def delete_session(self, session_id: str) -> bool:
        try:
            deleted = self.redis.delete(session_key(session_id))
            log.info(f"SESSION_DELETE_COMPLETE | session={session_id} | deleted_keys={deleted}")
            return deleted > 0
        except RedisError as e:
            log.error(f"SESSION_DELETE_ERROR | session={session_id} | error={e}", exc_info=True)
            return False

    # ────────────────────────────────────────────────────────
    # Event lists
    # ────────────────────────────────────────────────────────

    def push_feedback(self, item: Dict[str, Any]) -> bool:
        return self._push_json(FEEDBACK_KEY, item)

    def push_handoff(self, item: Dict[str, Any]) -> bool:
        return self._push_json(HANDOFF_KEY, item)

    def _push_json(self, key: str, item: Dict[str, Any]) -> bool:
        try:
            self.redis.lpush(key, json.dumps(item, default=str))
            return True
        except RedisError as e:
            log.error(f"REDIS_LPUSH_ERROR | key={key} | error={e}")
            return False

    # ────────────────────────────────────────────────────────
    # Internal helpers with retry logic
    # ────────────────────────────────────────────────────────

    def _get_json_with_retry(self, key: str, *, default: Any = None, max_retries: int = 3) -> Any:
        for attempt in range(max_retries):
            try:
                raw = self.redis.get(key)
                if raw is None:
                    return default
                try:
                    return json.loads(raw)
                except json.JSONDecodeError as je:
                    log.warning(f"REDIS_GET_JSON_ERROR | key={key} | error={je}")
                    # Reset corrupted key
                    self.redis.delete(key)
                    return default

            except (ConnectionError, TimeoutError) as ce:
                log.warning(f"REDIS_GET_CONNECTION_ERROR | key={key} | attempt={attempt + 1} | error={ce}")
                if attempt == max_retries - 1:
                    return default
                time.sleep(0.1 * (attempt + 1))

            except RedisError as re:
                log.error(f"REDIS_GET_ERROR | key={key} | error={re}")
                return default

        return default

    def _set_json_with_retry(self, key: str, value: Any, *, ttl: timedelta | None, max_retries: int = 3) -> bool:
        for attempt in range(max_retries):
            try:
                json_data = json.dumps(value, default=str)
                if ttl is None:
                    result = self.redis.set(key, json_data)
                else:
                    result = self.redis.setex(key, int(ttl.total_seconds()), json_data)
                if result:
                    return True
                log.warning(f"REDIS_SET_FAILED | key={key} | attempt={attempt + 1}")

            except (ConnectionError, TimeoutError) as ce:
                log.warning(f"REDIS_SET_CONNECTION_ERROR | key={key} | attempt={attempt + 1} | error={ce}")
                if attempt == max_retries - 1:
                    return False
                time.sleep(0.1 * (attempt + 1))

            except (RedisError, TypeError, ValueError) as e:
                log.error(f"REDIS_SET_ERROR | key={key} | error={e}")
                return False

        return False

    # ────────────────────────────────────────────────────────
    # Monitoring
    # ────────────────────────────────────────────────────────

    def ping(self) -> bool:
        return bool(self.redis.ping())

    def health_check(self) -> Dict[str, Any]:
        """Ping plus a set/get/delete round trip."""
        health_data = {
            "connection_healthy": False,
            "ping_success": False,
            "error": None,
        }
        try:
            health_data["ping_success"] = bool(self.redis.ping())

            test_key = f"health_check:{int(time.time())}"
            self.redis.setex(test_key, 10, "test")
            test_value = self.redis.get(test_key)
            self.redis.delete(test_key)
            if isinstance(test_value, bytes):
                test_value = test_value.decode()
            health_data["connection_healthy"] = test_value == "test"
        except RedisError as e:
            health_data["error"] = str(e)

        return health_data
