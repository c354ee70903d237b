"""
VitaBot Application Factory
===========================

Wires the vitamin-store support bot:
- Redis context manager (per-session conversation state)
- MongoDB store (optional; data routes answer 503 without it)
- Anthropic LLM service (optional; open-ended turns fall back to canned replies)
- Bot core + chat service
- Flask-SocketIO realtime channel
- REST blueprints (auto-registered)
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from .bot_core import ChatbotCore
from .chat_service import ChatService
from .config import BaseConfig, get_config
from .errors import StoreUnavailableError
from .llm_service import LLMService, is_llm_configured
from .redis_manager import RedisContextManager
from .routes import register_routes
from .socket_handler import SocketHandler
from .store import MongoStore, open_store
from .utils.helpers import iso_now

log = logging.getLogger(__name__)

__version__ = "1.0.0"

# Marks "build it from config" for injectable collaborators that may legitimately be None
_FROM_CONFIG: Any = object()


def _cors_origins(cfg: BaseConfig):
    origins = [o.strip() for o in cfg.CORS_ALLOW_ORIGINS.split(",") if o.strip()]
    return origins or "*"


def _init_redis(ctx_mgr: Optional[RedisContextManager], cfg: BaseConfig) -> RedisContextManager:
    try:
        log.info("INIT_REDIS | starting Redis connection")
        ctx_mgr = ctx_mgr or RedisContextManager(cfg=cfg)

        health = ctx_mgr.health_check()
        if not health.get("ping_success", False):
            log.error(f"INIT_REDIS_FAILED | health={health}")
            raise RuntimeError(f"Redis connection failed: {health.get('error')}")

        if not health.get("connection_healthy"):
            log.warning(f"INIT_REDIS_WARNING | Full health check failed but ping succeeded. health={health}")

        log.info("INIT_REDIS_SUCCESS")
        return ctx_mgr
    except Exception as e:
        log.error(f"INIT_REDIS_ERROR | error={e}", exc_info=True)
        raise RuntimeError(f"Failed to initialize Redis: {e}")


def create_app(
    config_name: Optional[str] = None,
    *,
    ctx_mgr: Optional[RedisContextManager] = None,
    store: Optional[MongoStore] = _FROM_CONFIG,
    llm_service: Any = _FROM_CONFIG,
) -> Flask:
    """
    App factory.

    INITIALIZATION ORDER:
    1. Config + CORS
    2. Redis connection & health check
    3. Document store and LLM service (both optional)
    4. Bot core, chat service, realtime channel
    5. Routes and error handlers

    Args:
        config_name: 'development', 'production' or 'testing' (defaults to APP_ENV)
        ctx_mgr: pre-built context manager (tests pass one over fakeredis)
        store: pre-built MongoStore, or None to run without a database
        llm_service: pre-built LLM service, or None to disable the LLM
    """
    cfg = get_config(config_name)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = cfg.SECRET_KEY
    app.config["TESTING"] = cfg.TESTING
    app.config["DEBUG"] = cfg.DEBUG
    app.json.sort_keys = cfg.JSON_SORT_KEYS
    app.extensions["vitabot_config"] = cfg

    origins = _cors_origins(cfg)
    CORS(
        app,
        resources={r"/api/*": {
            "origins": origins,
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization", "X-Admin-Key"],
        }},
        supports_credentials=False,
    )

    # ────────────────────────────────────────────────────────
    # STEP 1: Redis
    # ────────────────────────────────────────────────────────
    ctx_mgr = _init_redis(ctx_mgr, cfg)

    # ────────────────────────────────────────────────────────
    # STEP 2: Optional backends
    # ────────────────────────────────────────────────────────
    if store is _FROM_CONFIG:
        store = open_store(cfg)

    if llm_service is _FROM_CONFIG:
        llm_service = LLMService(cfg) if is_llm_configured(cfg) else None
    log.info(f"INIT_BACKENDS | database={'on' if store is not None else 'off'} | "
             f"llm={'on' if llm_service is not None else 'off'}")

    # ────────────────────────────────────────────────────────
    # STEP 3: Bot core, chat service, realtime channel
    # ────────────────────────────────────────────────────────
    bot_core = ChatbotCore(ctx_mgr, llm_service=llm_service, cfg=cfg)
    chat_service = ChatService(bot_core, ctx_mgr, store)

    socketio = SocketIO(app, async_mode=cfg.SOCKETIO_ASYNC_MODE, cors_allowed_origins=origins)
    socket_handler = SocketHandler(socketio, chat_service, cfg)
    socket_handler.register()

    app.extensions.update({
        "ctx_mgr": ctx_mgr,
        "store": store,
        "llm_service": llm_service,
        "bot_core": bot_core,
        "chat_service": chat_service,
        "socket_handler": socket_handler,
    })
    # Flask-SocketIO registers itself as app.extensions["socketio"]

    # ────────────────────────────────────────────────────────
    # STEP 4: Routes
    # ────────────────────────────────────────────────────────
    register_routes(app)

    # ────────────────────────────────────────────────────────
    # STEP 5: Error Handlers
    # ────────────────────────────────────────────────────────
    @app.errorhandler(500)
    def handle_internal_error(error):
        log.error(f"INTERNAL_ERROR | error={error}", exc_info=True)
        return {
            "error": "Internal server error",
            "timestamp": iso_now(),
            "details": str(error) if app.debug else "Contact support",
        }, 500

    @app.errorhandler(404)
    def handle_not_found(error):
        return {"error": "Endpoint not found", "timestamp": iso_now()}, 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return {"error": "Method not allowed", "timestamp": iso_now()}, 405

    @app.errorhandler(StoreUnavailableError)
    def handle_store_unavailable(error):
        return {"error": str(error)}, 503

    app.version = __version__
    log.info(f"APP_INIT_COMPLETE | config={type(cfg).__name__} | extensions={sorted(app.extensions)}")
    return app
