# vitamin_bot/utils/smart_logger.py
"""
Conversation-aware logging for the chatbot engine.
Provides compact, contextual log lines with configurable verbosity levels.
"""

import logging
import os
import sys
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class LogLevel(Enum):
    MINIMAL = 1      # Only critical flow events
    STANDARD = 2     # Intents, handlers and state changes
    DETAILED = 3     # Include entities and history sizes
    DEBUG = 4        # Everything including LLM calls


class SmartLogger:
    def __init__(self, name: str, level: LogLevel = LogLevel.STANDARD):
        self.logger = logging.getLogger(name)
        self.level = level
        self._request_contexts: Dict[str, str] = {}

    def set_level(self, level: LogLevel):
        """Change logging verbosity at runtime"""
        self.level = level

    def _should_log(self, required_level: LogLevel) -> bool:
        return self.level.value >= required_level.value

    def _format_request_id(self, session_id: str) -> str:
        timestamp = datetime.now().strftime('%H%M%S')
        return f"{session_id[-6:]}_{timestamp}"

    def _req(self, session_id: str) -> str:
        return self._request_contexts.get(session_id, "unknown")

    def _clean_log(self, level: str, emoji: str, category: str, message: str, **kwargs):
        details = " | ".join([f"{k}={v}" for k, v in kwargs.items() if v is not None])
        if details:
            full_message = f"{emoji} {category} | {message} | {details}"
        else:
            full_message = f"{emoji} {category} | {message}"

        getattr(self.logger, level.lower())(full_message)

    # ═══════════════════════════════════════════════════════════
    # FLOW EVENTS
    # ═══════════════════════════════════════════════════════════

    def query_start(self, session_id: str, query: str, has_history: bool):
        """Log start of message processing"""
        if not self._should_log(LogLevel.MINIMAL):
            return

        req_id = self._format_request_id(session_id)
        self._request_contexts[session_id] = req_id

        query_preview = query[:50] + "..." if len(query) > 50 else query
        self._clean_log("info", "🚀", "QUERY_START", f"'{query_preview}'",
                        req=req_id, history=has_history)

    def intent_classified(self, session_id: str, intent: str, source: str):
        """Log intent classification result and whether a keyword rule or the model decided it"""
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("info", "🧠", "INTENT", intent, req=self._req(session_id), source=source)

    def entities_extracted(self, session_id: str, entities: Dict[str, Any]):
        if not self._should_log(LogLevel.DETAILED) or not entities:
            return
        self._clean_log("info", "🏷️", "ENTITIES", ",".join(sorted(entities)),
                        req=self._req(session_id), **entities)

    def flow_decision(self, session_id: str, decision: str, reason: Optional[str] = None):
        """Log handler dispatch"""
        if not self._should_log(LogLevel.MINIMAL):
            return
        self._clean_log("info", "🎯", "FLOW", decision, req=self._req(session_id), reason=reason)

    def response_generated(self, session_id: str, intent: str, quick_actions: int = 0):
        if not self._should_log(LogLevel.MINIMAL):
            return
        self._clean_log("info", "✅", "RESPONSE", intent,
                        req=self._req(session_id), quick_actions=quick_actions)
        self._request_contexts.pop(session_id, None)

    def context_change(self, session_id: str, change_type: str, details: Optional[Dict[str, Any]] = None):
        if not self._should_log(LogLevel.DETAILED):
            return
        self._clean_log("debug", "🔄", "CONTEXT", change_type, req=self._req(session_id), **(details or {}))

    def api_call(self, session_id: str, service: str, operation: str, status: str = "started"):
        if not self._should_log(LogLevel.DEBUG):
            return
        emoji = "📡" if status == "started" else "✅" if status == "success" else "❌"
        self._clean_log("debug", emoji, "API", f"{service}.{operation}",
                        req=self._req(session_id), status=status)

    def error_occurred(self, session_id: str, error_type: str, operation: str, error_msg: Optional[str] = None):
        """Errors are logged regardless of level"""
        self._clean_log("error", "❌", "ERROR", f"{error_type} in {operation}",
                        req=self._req(session_id), msg=error_msg)
        self._request_contexts.pop(session_id, None)

    def warning(self, session_id: str, warning_type: str, details: Optional[str] = None):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("warning", "⚠️", "WARNING", warning_type, req=self._req(session_id), details=details)


# ═══════════════════════════════════════════════════════════════════════════════
# GLOBAL LOGGER INSTANCES AND CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

_loggers: Dict[str, SmartLogger] = {}


def get_smart_logger(module_name: str, level: Optional[LogLevel] = None) -> SmartLogger:
    """Get or create a smart logger for a module"""
    if module_name not in _loggers:
        default_level = getattr(LogLevel, os.getenv('BOT_LOG_LEVEL', 'STANDARD').upper(), LogLevel.STANDARD)
        _loggers[module_name] = SmartLogger(module_name, level or default_level)

    if level:
        _loggers[module_name].set_level(level)

    return _loggers[module_name]


def configure_logging(level: LogLevel = LogLevel.STANDARD,
                      format_string: Optional[str] = None,
                      silence_external: bool = True):
    """Configure the root logger and every smart logger created so far"""
    if not format_string:
        format_string = '%(asctime)s | %(message)s'

    logging.basicConfig(
        level=logging.DEBUG if level == LogLevel.DEBUG else logging.INFO,
        format=format_string,
        datefmt='%H:%M:%S',
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    if silence_external:
        for noisy in ('httpcore', 'httpx', 'anthropic', 'werkzeug', 'urllib3',
                      'pymongo', 'engineio.server', 'socketio.server'):
            logging.getLogger(noisy).setLevel(logging.WARNING)

    for smart_logger in _loggers.values():
        smart_logger.set_level(level)
