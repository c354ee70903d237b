# vitamin_bot/routes/health.py
"""
Simple readiness/liveness probe.

Returns HTTP 200 if:
• Flask is running
• Redis is reachable

Otherwise 500 (so the orchestrator can restart the pod). The document
database is reported but never fails the probe.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify

log = logging.getLogger(__name__)
bp = Blueprint("health", __name__)


@bp.get("/health")
def health_check() -> tuple[Dict[str, Any], int]:
    store = current_app.extensions.get("store")
    database = "connected" if store is not None else "not_configured"
    try:
        ctx_mgr = current_app.extensions.get("ctx_mgr")
        if ctx_mgr is None:
            return jsonify({"status": "unhealthy", "redis": "not_initialized", "service": "vitabot"}), 500

        ctx_mgr.ping()
        return jsonify({"status": "healthy", "redis": "connected", "database": database, "service": "vitabot"}), 200
    except Exception as exc:  # noqa: BLE001
        log.warning("Redis ping failed: %s", exc)
        return jsonify({"status": "unhealthy", "redis": "disconnected", "database": database, "service": "vitabot"}), 500
