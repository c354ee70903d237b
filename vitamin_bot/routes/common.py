"""
Shared plumbing for the route modules: service accessors, auth and
database guards, request parsing and JSON-safe responses.
"""

from __future__ import annotations

import functools
import hmac
from typing import Any, Callable, Dict, Optional

from flask import current_app, jsonify, request

from ..errors import StoreUnavailableError
from ..utils.helpers import parse_positive_int, to_json_safe


def extension(name: str) -> Any:
    return current_app.extensions.get(name)


def get_store():
    return extension("store")


def get_chat_service():
    return extension("chat_service")


def get_bot_core():
    return extension("bot_core")


def get_socket_handler():
    return extension("socket_handler")


def app_config():
    return current_app.extensions["vitabot_config"]


def json_body() -> Dict[str, Any]:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def days_param(default: int) -> int:
    return parse_positive_int(request.args.get("days"), default)


def ok(payload: Dict[str, Any], status: int = 200):
    return jsonify(to_json_safe(payload)), status


def error(message: str, status: int, **extra: Any):
    return jsonify({"error": message, **extra}), status


def require_store(view: Callable) -> Callable:
    """Answer 503 when the app runs without a document database."""

    @functools.wraps(view)
    def wrapper(*args, **kwargs):
        if get_store() is None:
            raise StoreUnavailableError("Database not configured")
        return view(*args, **kwargs)

    return wrapper


def check_admin_key() -> Optional[tuple]:
    """Blueprint before_request hook: 401 unless X-Admin-Key matches ADMIN_KEY."""
    expected = app_config().ADMIN_KEY
    supplied = request.headers.get("X-Admin-Key", "")
    if not expected or not supplied or not hmac.compare_digest(supplied, expected):
        return error("Unauthorized", 401)
    return None
