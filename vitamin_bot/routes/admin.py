# vitamin_bot/routes/admin.py
"""
Admin API (/api/admin)
──────────────────────
Every route requires the `X-Admin-Key` header. Covers the dashboard,
conversation browsing, catalog and knowledge-base management, customers,
an analytics summary and the realtime channel (broadcast + connections).
"""

from __future__ import annotations

import logging

from flask import Blueprint, request

from .. import analytics
from ..errors import ValidationError
from ..schemas import (build_knowledge_entry, build_product, knowledge_update,
                       product_update, validate_status)
from ..utils.helpers import days_ago, pagination_block, pagination_params, utcnow
from .common import (check_admin_key, days_param, error, get_socket_handler,
                     get_store, json_body, ok, require_store)

log = logging.getLogger(__name__)
bp = Blueprint("admin", __name__, url_prefix="/api/admin")
bp.before_request(check_admin_key)


# ─────────────────────────────────────────────────────────────
# Dashboard
# ─────────────────────────────────────────────────────────────
@bp.get("/dashboard")
@require_store
def dashboard():
    store = get_store()
    try:
        last_30_days = store.conversations_since(days_ago(30))
        cutoff_7 = days_ago(7)
        last_7_days = [c for c in last_30_days if c.get("created_at") and c["created_at"] >= cutoff_7]

        payload = {
            "overview": {
                "total_conversations": store.count_conversations(),
                "active_conversations": store.count_conversations("active"),
                "total_customers": store.count_customers(),
                "total_products": store.count_active_products(),
            },
            "recent_conversations": store.recent_conversations(10),
            "intent_stats": analytics.intent_counts(last_7_days),
            "satisfaction": analytics.satisfaction_summary(last_30_days),
        }
    except Exception as exc:
        log.error(f"ADMIN_DASHBOARD_ERROR | error={exc}", exc_info=True)
        return error("Unable to load dashboard", 500)
    return ok({"success": True, "dashboard": payload})


# ─────────────────────────────────────────────────────────────
# Conversations
# ─────────────────────────────────────────────────────────────
@bp.get("/conversations")
@require_store
def list_conversations():
    page, limit = pagination_params(request.args)
    status = request.args.get("status")
    try:
        status = validate_status(status) if status else None
    except ValidationError as exc:
        return error(str(exc), 400)
    try:
        conversations, total = get_store().list_conversations(
            page=page,
            limit=limit,
            status=status,
            search=request.args.get("search"),
        )
    except Exception as exc:
        log.error(f"ADMIN_CONVERSATIONS_ERROR | error={exc}", exc_info=True)
        return error("Unable to retrieve conversations", 500)
    return ok({
        "success": True,
        "conversations": conversations,
        "pagination": pagination_block(page, limit, total),
    })


@bp.get("/conversations/<session_id>")
@require_store
def conversation_detail(session_id: str):
    try:
        conversation = get_store().get_conversation(session_id)
    except Exception as exc:
        log.error(f"ADMIN_CONVERSATION_ERROR | session={session_id} | error={exc}", exc_info=True)
        return error("Unable to retrieve conversation details", 500)
    if conversation is None:
        return error("Conversation not found", 404)
    return ok({"success": True, "conversation": conversation})


# ─────────────────────────────────────────────────────────────
# Products
# ─────────────────────────────────────────────────────────────
@bp.post("/products")
@require_store
def create_product():
    try:
        product = get_store().insert_product(build_product(json_body()))
    except ValidationError as e:
        return error(str(e), 400)
    except Exception as exc:
        log.error(f"ADMIN_PRODUCT_CREATE_ERROR | error={exc}", exc_info=True)
        return error("Unable to create product", 500)
    log.info(f"ADMIN_PRODUCT_CREATED | id={product['_id']} | name={product['name']}")
    return ok({"success": True, "product": product}, 201)


@bp.get("/products")
@require_store
def list_products():
    page, limit = pagination_params(request.args)
    try:
        products, total = get_store().list_products(
            page=page,
            limit=limit,
            category=request.args.get("category"),
            status=request.args.get("status"),
            search=request.args.get("search"),
        )
    except Exception as exc:
        log.error(f"ADMIN_PRODUCTS_ERROR | error={exc}", exc_info=True)
        return error("Unable to retrieve products", 500)
    return ok({"success": True, "products": products, "pagination": pagination_block(page, limit, total)})


@bp.put("/products/<product_id>")
@require_store
def update_product(product_id: str):
    try:
        product = get_store().update_product(product_id, product_update(json_body()))
    except ValidationError as e:
        return error(str(e), 400)
    except Exception as exc:
        log.error(f"ADMIN_PRODUCT_UPDATE_ERROR | id={product_id} | error={exc}", exc_info=True)
        return error("Unable to update product", 500)
    if product is None:
        return error("Product not found", 404)
    return ok({"success": True, "product": product})


@bp.delete("/products/<product_id>")
@require_store
def delete_product(product_id: str):
    try:
        found = get_store().deactivate_product(product_id)
    except Exception as exc:
        log.error(f"ADMIN_PRODUCT_DELETE_ERROR | id={product_id} | error={exc}", exc_info=True)
        return error("Unable to delete product", 500)
    if not found:
        return error("Product not found", 404)
    log.info(f"ADMIN_PRODUCT_DEACTIVATED | id={product_id}")
    return ok({"success": True, "message": "Product deactivated successfully"})


# ─────────────────────────────────────────────────────────────
# Customers
# ─────────────────────────────────────────────────────────────
@bp.get("/customers")
@require_store
def list_customers():
    page, limit = pagination_params(request.args)
    try:
        customers, total = get_store().list_customers(page=page, limit=limit, search=request.args.get("search"))
    except Exception as exc:
        log.error(f"ADMIN_CUSTOMERS_ERROR | error={exc}", exc_info=True)
        return error("Unable to retrieve customers", 500)
    return ok({"success": True, "customers": customers, "pagination": pagination_block(page, limit, total)})


# ─────────────────────────────────────────────────────────────
# Knowledge base
# ─────────────────────────────────────────────────────────────
@bp.post("/knowledge-base")
@require_store
def create_knowledge_entry():
    try:
        entry = get_store().insert_knowledge(build_knowledge_entry(json_body()))
    except ValidationError as e:
        return error(str(e), 400)
    except Exception as exc:
        log.error(f"ADMIN_KNOWLEDGE_CREATE_ERROR | error={exc}", exc_info=True)
        return error("Unable to create knowledge base entry", 500)
    return ok({"success": True, "entry": entry}, 201)


@bp.get("/knowledge-base")
@require_store
def list_knowledge_entries():
    page, limit = pagination_params(request.args)
    try:
        entries, total = get_store().list_knowledge(
            page=page,
            limit=limit,
            category=request.args.get("category"),
            search=request.args.get("search"),
        )
    except Exception as exc:
        log.error(f"ADMIN_KNOWLEDGE_LIST_ERROR | error={exc}", exc_info=True)
        return error("Unable to retrieve knowledge base", 500)
    return ok({"success": True, "entries": entries, "pagination": pagination_block(page, limit, total)})


@bp.put("/knowledge-base/<entry_id>")
@require_store
def update_knowledge_entry(entry_id: str):
    try:
        entry = get_store().update_knowledge(entry_id, knowledge_update(json_body()))
    except ValidationError as e:
        return error(str(e), 400)
    except Exception as exc:
        log.error(f"ADMIN_KNOWLEDGE_UPDATE_ERROR | id={entry_id} | error={exc}", exc_info=True)
        return error("Unable to update knowledge base entry", 500)
    if entry is None:
        return error("Knowledge base entry not found", 404)
    return ok({"success": True, "entry": entry})


# ─────────────────────────────────────────────────────────────
# Analytics summary
# ─────────────────────────────────────────────────────────────
@bp.get("/analytics/summary")
@require_store
def analytics_summary():
    days = days_param(30)
    start = days_ago(days)
    store = get_store()
    try:
        conversations = store.conversations_since(start)
        payload = {
            "daily_stats": store.daily_analytics_since(start),
            "total_metrics": analytics.total_metrics(conversations),
            "intent_distribution": analytics.intent_counts(conversations),
            "satisfaction_data": analytics.rating_distribution(conversations),
            "period": {"days": days, "start_date": start, "end_date": utcnow()},
        }
    except Exception as exc:
        log.error(f"ADMIN_ANALYTICS_ERROR | error={exc}", exc_info=True)
        return error("Unable to retrieve analytics", 500)
    return ok({"success": True, "analytics": payload})


# ─────────────────────────────────────────────────────────────
# Realtime channel
# ─────────────────────────────────────────────────────────────
@bp.post("/system/broadcast")
def broadcast():
    data = json_body()
    message = data.get("message")
    if not message:
        return error("Message is required", 400)

    targets = data.get("target_sessions") or []
    if isinstance(targets, str):
        targets = [targets]

    handler = get_socket_handler()
    try:
        if targets:
            for session_id in targets:
                handler.broadcast_message(message, session_id)
        else:
            handler.broadcast_message(message)
    except Exception as exc:
        log.error(f"ADMIN_BROADCAST_ERROR | error={exc}", exc_info=True)
        return error("Unable to send broadcast", 500)

    log.info(f"📢 ADMIN_BROADCAST | targets={targets or 'all'}")
    return ok({"success": True, "message": "Broadcast sent successfully", "targets": targets or "all"})


@bp.get("/system/connections")
def connections():
    handler = get_socket_handler()
    return ok({
        "success": True,
        "stats": handler.get_active_stats(),
        "connected_users": handler.get_connected_users(),
    })
