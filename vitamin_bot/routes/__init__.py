# vitamin_bot/routes/__init__.py
"""
Blueprint auto-registration.

Put any flask.Blueprint in `vitamin_bot/routes/<name>.py` with the variable
name **bp** (carrying its own url_prefix) and it will be discovered and
registered when `register_routes(app)` is called.

The app factory stores shared objects like `ctx_mgr`, `store` and
`chat_service` into `app.extensions`; route modules reach them through the
accessors in `routes.common`.
"""

from __future__ import annotations

import importlib
import logging
import pkgutil
from types import ModuleType

from flask import Blueprint, Flask

log = logging.getLogger(__name__)


def register_routes(app: Flask) -> None:
    for _, name, _ in pkgutil.iter_modules(__path__):
        module: ModuleType = importlib.import_module(f"{__name__}.{name}")
        bp: Blueprint | None = getattr(module, "bp", None)
        if isinstance(bp, Blueprint):
            app.register_blueprint(bp)
            log.info(f"REGISTER_ROUTES_SUCCESS | blueprint={bp.name} | prefix={bp.url_prefix or '/'}")
