#!/usr/bin/env python3
"""
VitaBot Application Entry Point
- Works under both Gunicorn (WSGI import) and python CLI.
- Ensures smart logging is initialized exactly once per process.
- Serves REST and the Socket.IO channel from the same process.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Tuple

from dotenv import load_dotenv
from flask import request

# Load env before any other imports that might read it
load_dotenv()

from vitamin_bot import create_app
from vitamin_bot.utils.smart_logger import LogLevel, configure_logging

_LOGGING_INITIALIZED = False


def _to_python_level(level: LogLevel) -> int:
    return logging.DEBUG if level == LogLevel.DEBUG else logging.INFO


def setup_smart_logging() -> LogLevel:
    """Configure the smart logging system. Idempotent."""
    global _LOGGING_INITIALIZED

    desired = os.getenv("BOT_LOG_LEVEL", "STANDARD").upper()
    valid = {lvl.name for lvl in LogLevel}
    if desired not in valid:
        print(f"Warning: Invalid BOT_LOG_LEVEL '{desired}'. Valid options: {', '.join(sorted(valid))}")
        log_level = LogLevel.STANDARD
    else:
        log_level = LogLevel[desired]

    if not _LOGGING_INITIALIZED:
        if not logging.getLogger().handlers:
            configure_logging(
                level=log_level,
                format_string="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                silence_external=True,
            )
        _LOGGING_INITIALIZED = True

    return log_level


# --------------------------------------------------------------------------------------
# Environment validation
# --------------------------------------------------------------------------------------

def validate_environment() -> None:
    """
    Validate env vars.
    - REDIS_HOST falls back to localhost with a warning.
    - MongoDB, Anthropic and the admin key are optional and only produce a notice.
    """
    logger = logging.getLogger(__name__)

    if not os.getenv("REDIS_HOST"):
        logger.warning("Missing REDIS_HOST (required for session storage); defaulting to localhost")

    optional = {
        "MONGODB_URI": "conversation history, catalog and analytics routes",
        "ANTHROPIC_API_KEY": "LLM answers for open-ended questions",
        "ADMIN_KEY": "the admin API",
    }
    for name, purpose in optional.items():
        if not os.getenv(name):
            logger.info(f"ENV_OPTIONAL_MISSING | var={name} | disables={purpose}")


def create_application():
    validate_environment()

    app = create_app()

    log_level = setup_smart_logging()
    if app.logger.handlers:
        app.logger.handlers.clear()
    app.logger.propagate = True
    app.logger.setLevel(_to_python_level(log_level))

    @app.before_request
    def _log_request():
        app.logger.info("→ %s %s", request.method, request.path)

    return app


# --------------------------------------------------------------------------------------
# Local dev server (python run.py)
# --------------------------------------------------------------------------------------

def _resolve_server_config() -> Tuple[str, int, bool]:
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "5000"))

    flask_debug = os.getenv("FLASK_DEBUG", "").lower()
    if flask_debug in ("1", "true", "yes", "on"):
        debug = True
    elif flask_debug in ("0", "false", "no", "off"):
        debug = False
    else:
        debug = os.getenv("APP_ENV", "development").lower() == "development"

    return host, port, debug


def _print_startup_info(app, host: str, port: int, debug: bool, log_level: LogLevel) -> None:
    print("VitaBot Starting")
    print("=" * 60)
    print(f"Server:       http://{host}:{port}")
    print(f"Health check: http://{host}:{port}/health")
    print(f"Environment:  {os.getenv('APP_ENV', 'development')}")
    print(f"Debug mode:   {debug}")
    print(f"Log level:    {log_level.name}")
    print(f"Database:     {'connected' if app.extensions.get('store') is not None else 'not configured'}")
    print(f"LLM:          {'enabled' if app.extensions.get('llm_service') is not None else 'disabled'}")
    print("=" * 60)


def main() -> None:
    log_level = setup_smart_logging()
    host, port, debug = _resolve_server_config()
    _print_startup_info(app, host, port, debug, log_level)

    socketio = app.extensions["socketio"]
    try:
        socketio.run(
            app,
            host=host,
            port=port,
            debug=debug,
            use_reloader=False,
            allow_unsafe_werkzeug=True,
        )
    except KeyboardInterrupt:
        print("\nShutting down gracefully...")
    except Exception as e:
        print(f"Server error: {e}")
        sys.exit(1)


# --------------------------------------------------------------------------------------
# WSGI entrypoint for Gunicorn: `gunicorn -k gthread run:app`
# --------------------------------------------------------------------------------------
setup_smart_logging()
app = create_application()

if __name__ == "__main__":
    main()
