# vitamin_bot/routes/chat.py
"""
Chat endpoints (/api/chat)
──────────────────────────
Message exchange, conversation lookup, feedback, clearing, catalog search,
goal-based recommendations and customer profiles.
"""

from __future__ import annotations

import logging

from flask import Blueprint, request
from pymongo.errors import DuplicateKeyError

from ..errors import ValidationError
from ..knowledge import tags_for_goal
from ..schemas import (build_chat_session, build_customer,
                       validate_health_profile, validate_profile)
from ..utils.helpers import iso_now, parse_positive_int, utcnow
from .common import (error, get_bot_core, get_chat_service, get_store,
                     json_body, ok, require_store)

log = logging.getLogger(__name__)
bp = Blueprint("chat", __name__, url_prefix="/api/chat")


# ─────────────────────────────────────────────────────────────
# Conversation
# ─────────────────────────────────────────────────────────────
@bp.post("/message")
async def send_message():
    data = json_body()
    session_id = data.get("session_id")
    message = data.get("message")

    if not isinstance(session_id, str) or not session_id.strip() or not isinstance(message, str) or not message.strip():
        return error("Missing required fields: session_id and message", 400)

    try:
        metadata = {
            "user_agent": data.get("user_agent") or request.headers.get("User-Agent"),
            "ip_address": data.get("ip_address") or request.remote_addr,
            "referrer": request.referrer,
        }
        response = await get_chat_service().handle_message(session_id, message, metadata)
        log.info(f"CHAT_MESSAGE_OK | session={session_id} | intent={response.intent}")
        return ok({
            "success": True,
            "response": response.to_dict(),
            "session_id": session_id,
            "timestamp": iso_now(),
        })
    except Exception as exc:
        log.error(f"CHAT_MESSAGE_ERROR | session={session_id} | error={exc}", exc_info=True)
        return error("Internal server error", 500, message="Unable to process message at this time")


@bp.get("/conversation/<session_id>")
@require_store
def get_conversation(session_id: str):
    try:
        conversation = get_store().get_conversation(session_id)
    except Exception as exc:
        log.error(f"CONVERSATION_LOOKUP_ERROR | session={session_id} | error={exc}", exc_info=True)
        return error("Unable to retrieve conversation", 500)

    if conversation is None:
        return error("Conversation not found", 404)
    return ok({
        "success": True,
        "conversation": conversation,
        "message_count": len(conversation.get("messages") or []),
    })


@bp.post("/feedback")
def submit_feedback():
    data = json_body()
    session_id = data.get("session_id")
    message_id = data.get("message_id")
    rating = data.get("rating")

    if not session_id or not message_id or rating is None:
        return error("Missing required fields: session_id, message_id, and rating", 400)

    try:
        stored = get_chat_service().record_feedback(session_id, message_id, rating, data.get("comment"))
    except ValidationError as e:
        return error(str(e), 400)
    except Exception as exc:
        log.error(f"FEEDBACK_ERROR | session={session_id} | error={exc}", exc_info=True)
        return error("Unable to submit feedback", 500)

    if not stored:
        return error("Conversation not found", 404)
    return ok({"success": True, "message": "Feedback submitted successfully"})


@bp.post("/clear/<session_id>")
def clear_conversation(session_id: str):
    try:
        get_chat_service().clear(session_id)
    except Exception as exc:
        log.error(f"CLEAR_ERROR | session={session_id} | error={exc}", exc_info=True)
        return error("Unable to clear conversation", 500)
    return ok({"success": True, "message": "Conversation cleared successfully"})


# ─────────────────────────────────────────────────────────────
# Catalog helpers for the chat widget
# ─────────────────────────────────────────────────────────────
@bp.get("/products/search")
@require_store
def search_products():
    limit = parse_positive_int(request.args.get("limit"), 10)
    try:
        products = get_store().search_catalog(
            query=request.args.get("query"),
            category=request.args.get("category"),
            limit=limit,
        )
    except Exception as exc:
        log.error(f"PRODUCT_SEARCH_ERROR | error={exc}", exc_info=True)
        return error("Unable to search products", 500)
    return ok({"success": True, "products": products, "count": len(products)})


@bp.get("/products/recommendations")
@require_store
def product_recommendations():
    session_id = request.args.get("session_id")
    health_goals = request.args.get("health_goals")

    try:
        context = get_bot_core().get_conversation_context(session_id) if session_id else {}
        session_info = context.get("extracted_info") if context else None
        goal = health_goals or (session_info or {}).get("health_goal")

        recommendations = get_store().recommend_products(tags_for_goal(goal), limit=6)
    except Exception as exc:
        log.error(f"RECOMMENDATIONS_ERROR | session={session_id} | error={exc}", exc_info=True)
        return error("Unable to get recommendations", 500)

    return ok({
        "success": True,
        "recommendations": recommendations,
        "criteria": {
            "health_goals": goal,
            "age": request.args.get("age"),
            "gender": request.args.get("gender"),
            "session_context": session_info,
        },
    })


# ─────────────────────────────────────────────────────────────
# Customer profile
# ─────────────────────────────────────────────────────────────
@bp.post("/customer/profile")
@require_store
def update_customer_profile():
    data = json_body()
    session_id = data.get("session_id")
    email = data.get("email")

    if not session_id and not email:
        return error("Either session_id or email is required", 400)

    store = get_store()
    try:
        profile = validate_profile(data.get("profile"))
        health_profile = validate_health_profile(data.get("health_profile"))

        if email:
            customer = store.find_customer(str(email).strip().lower()) or build_customer(email)
        else:
            customer = store.find_customer_by_session(session_id)
            if customer is None:
                return error("Email is required to create a customer profile", 400)

        customer["profile"] = {**(customer.get("profile") or {}), **profile}
        customer["health_profile"] = {**(customer.get("health_profile") or {}), **health_profile}

        if session_id:
            sessions = customer.setdefault("chat_sessions", [])
            if not any(s.get("session_id") == session_id for s in sessions):
                sessions.append(build_chat_session(session_id))
                analytics = customer.setdefault("analytics", {})
                analytics["total_chat_sessions"] = (analytics.get("total_chat_sessions") or 0) + 1

        customer.setdefault("analytics", {})["last_activity"] = utcnow()
        customer = store.save_customer(customer)

    except ValidationError as e:
        return error(str(e), 400)
    except DuplicateKeyError:
        return error("A customer with this email already exists", 409)
    except Exception as exc:
        log.error(f"CUSTOMER_PROFILE_ERROR | session={session_id} | error={exc}", exc_info=True)
        return error("Unable to update customer profile", 500)

    return ok({
        "success": True,
        "customer": {
            "id": customer["_id"],
            "email": customer["email"],
            "profile": customer.get("profile"),
            "health_profile": customer.get("health_profile"),
        },
    })
