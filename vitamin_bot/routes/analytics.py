# vitamin_bot/routes/analytics.py
"""Conversation analytics (/api/analytics). Every view takes `?days=N`."""

from __future__ import annotations

import logging

from flask import Blueprint

from .. import analytics
from ..utils.helpers import days_ago
from .common import days_param, error, get_store, ok, require_store

log = logging.getLogger(__name__)
bp = Blueprint("analytics", __name__, url_prefix="/api/analytics")


def _window(default_days: int):
    days = days_param(default_days)
    start = days_ago(days)
    return days, start, get_store().conversations_since(start)


@bp.get("/overview")
@require_store
def overview():
    try:
        days, start, conversations = _window(7)
        payload = {**analytics.overview(conversations), "period": {"days": days, "start_date": start}}
    except Exception as exc:
        log.error(f"ANALYTICS_OVERVIEW_ERROR | error={exc}", exc_info=True)
        return error("Unable to retrieve analytics overview", 500)
    return ok({"success": True, "overview": payload})


@bp.get("/intents")
@require_store
def intents():
    try:
        days, start, conversations = _window(7)
        payload = {**analytics.intent_distribution(conversations), "period": {"days": days, "start_date": start}}
    except Exception as exc:
        log.error(f"ANALYTICS_INTENTS_ERROR | error={exc}", exc_info=True)
        return error("Unable to retrieve intent analytics", 500)
    return ok({"success": True, "intent_analytics": payload})


@bp.get("/satisfaction")
@require_store
def satisfaction():
    try:
        days, start, conversations = _window(30)
        payload = {**analytics.satisfaction_report(conversations), "period": {"days": days, "start_date": start}}
    except Exception as exc:
        log.error(f"ANALYTICS_SATISFACTION_ERROR | error={exc}", exc_info=True)
        return error("Unable to retrieve satisfaction analytics", 500)
    return ok({"success": True, "satisfaction": payload})


@bp.get("/popular-products")
@require_store
def popular_products():
    try:
        days, start, conversations = _window(30)
        products = get_store().top_rated_products(10)
        payload = {
            "products": analytics.product_mentions(products, conversations),
            "period": {"days": days, "start_date": start},
        }
    except Exception as exc:
        log.error(f"ANALYTICS_PRODUCTS_ERROR | error={exc}", exc_info=True)
        return error("Unable to retrieve product analytics", 500)
    return ok({"success": True, "popular_products": payload})


@bp.get("/daily-trends")
@require_store
def daily_trends():
    try:
        days, start, conversations = _window(30)
        payload = {"trends": analytics.daily_trends(conversations), "period": {"days": days, "start_date": start}}
    except Exception as exc:
        log.error(f"ANALYTICS_TRENDS_ERROR | error={exc}", exc_info=True)
        return error("Unable to retrieve daily trends", 500)
    return ok({"success": True, "daily_trends": payload})


@bp.get("/conversation-flow")
@require_store
def conversation_flow():
    try:
        days, start, conversations = _window(7)
        payload = {
            **analytics.conversation_flow(conversations),
            "period": {"days": days, "start_date": start},
        }
    except Exception as exc:
        log.error(f"ANALYTICS_FLOW_ERROR | error={exc}", exc_info=True)
        return error("Unable to retrieve conversation flow", 500)
    return ok({"success": True, "conversation_flow": payload})
