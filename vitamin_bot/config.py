"""
Application configuration.
Values come from environment variables (optionally via .env) with local defaults.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

BASE_DIR = Path(__file__).resolve().parent.parent

log = logging.getLogger(__name__)

# Values shipped in the sample .env; treated the same as "not configured"
PLACEHOLDER_MONGODB_URIS = {"", "mongodb://localhost:27017/vitamins_chatbot"}
PLACEHOLDER_API_KEYS = {"", "sk-test-key-for-development", "sk-ant-REDACTED"}


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-change-me")
    JSON_SORT_KEYS: bool = False
    DEBUG: bool = False
    TESTING: bool = False

    # Redis (per-session conversation state)
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", 6379))
    REDIS_DB: int = int(os.getenv("REDIS_DB", 0))
    REDIS_DECODE_RESPONSES: bool = True
    REDIS_TTL_SECONDS: int = int(os.getenv("REDIS_TTL_SECONDS", 86400))

    # MongoDB (conversations, catalog, customers, knowledge base)
    MONGODB_URI: str = os.getenv("MONGODB_URI", "")
    MONGODB_DB: str = os.getenv("MONGODB_DB", "vitamins_chatbot")
    MONGODB_TIMEOUT_MS: int = int(os.getenv("MONGODB_TIMEOUT_MS", "3000"))

    # Admin API
    ADMIN_KEY: str = os.getenv("ADMIN_KEY", "")

    # Anthropic (optional; open-ended turns fall back to canned replies without it)
    ANTHROPIC_API_KEY: str = os.getenv("ANTHROPIC_API_KEY", "")
    LLM_MODEL: str = os.getenv("LLM_MODEL", "claude-3-5-haiku-20241022")
    LLM_MAX_TOKENS: int = int(os.getenv("LLM_MAX_TOKENS", "200"))

    # Conversation memory
    HISTORY_MAX_MESSAGES: int = int(os.getenv("HISTORY_MAX_MESSAGES", "20"))
    LLM_HISTORY_WINDOW: int = int(os.getenv("LLM_HISTORY_WINDOW", "10"))

    # Realtime channel
    SOCKETIO_ASYNC_MODE: str = os.getenv("SOCKETIO_ASYNC_MODE", "threading")
    TYPING_DELAY_MIN: float = float(os.getenv("TYPING_DELAY_MIN", "1.0"))
    TYPING_DELAY_MAX: float = float(os.getenv("TYPING_DELAY_MAX", "2.5"))
    WELCOME_DELAY_SECONDS: float = float(os.getenv("WELCOME_DELAY_SECONDS", "1.0"))
    INACTIVE_CONNECTION_SECONDS: int = int(os.getenv("INACTIVE_CONNECTION_SECONDS", "300"))
    CLEANUP_INTERVAL_SECONDS: int = int(os.getenv("CLEANUP_INTERVAL_SECONDS", "300"))
    ENABLE_CONNECTION_CLEANUP: bool = _flag("ENABLE_CONNECTION_CLEANUP", "true")

    CORS_ALLOW_ORIGINS: str = os.getenv("CORS_ALLOW_ORIGINS", "")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def database_configured(self) -> bool:
        return self.MONGODB_URI.strip() not in PLACEHOLDER_MONGODB_URIS

    @property
    def llm_configured(self) -> bool:
        return self.ANTHROPIC_API_KEY.strip() not in PLACEHOLDER_API_KEYS


class DevelopmentConfig(BaseConfig):
    DEBUG: bool = True


class ProductionConfig(BaseConfig):
    DEBUG: bool = False


class TestingConfig(BaseConfig):
    TESTING: bool = True
    REDIS_DB: int = 15
    MONGODB_URI: str = ""
    MONGODB_DB: str = "vitamins_chatbot_test"
    ADMIN_KEY: str = "test-admin-key"
    ANTHROPIC_API_KEY: str = ""
    TYPING_DELAY_MIN: float = 0.0
    TYPING_DELAY_MAX: float = 0.0
    WELCOME_DELAY_SECONDS: float = 0.0
    ENABLE_CONNECTION_CLEANUP: bool = False


_CONFIGS = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "test": TestingConfig,
}


def get_config(env: Optional[str] = None) -> BaseConfig:
    """Get a configuration instance for `env` (defaults to APP_ENV / FLASK_ENV)."""
    env = (env or os.getenv("APP_ENV", os.getenv("FLASK_ENV", "development"))).lower()
    config_class = _CONFIGS.get(env, DevelopmentConfig)
    cfg = config_class()

    if not hasattr(get_config, '_logged_startup'):
        log.info(f"⚙️ CONFIG_STARTUP | env={env} | config_class={config_class.__name__}")
        log.info(f"🤖 LLM_CONFIG | configured={cfg.llm_configured} | model={cfg.LLM_MODEL} | max_tokens={cfg.LLM_MAX_TOKENS}")
        log.info(f"💾 REDIS_CONFIG | host={cfg.REDIS_HOST} | port={cfg.REDIS_PORT} | db={cfg.REDIS_DB} | ttl={cfg.REDIS_TTL_SECONDS}s")
        log.info(f"📊 MONGO_CONFIG | configured={cfg.database_configured} | db={cfg.MONGODB_DB}")
        get_config._logged_startup = True

    return cfg
