"""
Aggregations over conversation documents for the admin and analytics routes.

Routes fetch the conversations for a period from the store and hand them
to these functions; nothing here talks to the database.
"""

from __future__ import annotations

import re
from collections import Counter
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from .enums import Role


def _assistant_intents(conversation: Dict[str, Any]) -> List[str]:
    return [
        m["intent"]
        for m in conversation.get("messages") or []
        if m.get("role") == Role.ASSISTANT.value and m.get("intent") is not None
    ]


def _total_messages(conversation: Dict[str, Any]) -> int:
    return int((conversation.get("metadata") or {}).get("total_messages") or 0)


def _feedback(conversations: Iterable[Dict[str, Any]]):
    for conv in conversations:
        for item in conv.get("feedback") or []:
            if item.get("rating") is not None:
                yield conv, item


# ─────────────────────────────────────────────────────────────
# Intents
# ─────────────────────────────────────────────────────────────
def intent_counts(conversations: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    counter: Counter = Counter()
    for conv in conversations:
        counter.update(_assistant_intents(conv))
    return [{"intent": intent, "count": count} for intent, count in counter.most_common()]


def intent_distribution(conversations: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    counts = intent_counts(conversations)
    total = sum(item["count"] for item in counts)
    for item in counts:
        item["percentage"] = round(item["count"] / total * 100, 1) if total else 0
    return {"intents": counts, "total_intents": total}


# ─────────────────────────────────────────────────────────────
# Satisfaction
# ─────────────────────────────────────────────────────────────
def rating_distribution(conversations: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    counter = Counter(item["rating"] for _, item in _feedback(conversations))
    return [{"rating": rating, "count": counter[rating]} for rating in sorted(counter, reverse=True)]


def satisfaction_summary(conversations: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    ratings = [item["rating"] for _, item in _feedback(conversations)]
    if not ratings:
        return {"average_rating": 0, "total_feedback": 0}
    return {"average_rating": round(sum(ratings) / len(ratings), 2), "total_feedback": len(ratings)}


def satisfaction_report(conversations: List[Dict[str, Any]], recent_limit: int = 10) -> Dict[str, Any]:
    summary = satisfaction_summary(conversations)

    comments = [
        {
            "session_id": conv.get("session_id"),
            "rating": item["rating"],
            "comment": item.get("comment"),
            "timestamp": item.get("timestamp"),
        }
        for conv, item in _feedback(conversations)
        if item.get("comment")
    ]
    comments.sort(key=lambda c: c["timestamp"] or datetime.min, reverse=True)

    return {
        "average_rating": summary["average_rating"],
        "total_feedback": summary["total_feedback"],
        "rating_distribution": rating_distribution(conversations),
        "recent_feedback": comments[:recent_limit],
    }


# ─────────────────────────────────────────────────────────────
# Volume
# ─────────────────────────────────────────────────────────────
def total_metrics(conversations: List[Dict[str, Any]]) -> Dict[str, int]:
    return {
        "total_sessions": len(conversations),
        "total_messages": sum(_total_messages(c) for c in conversations),
    }


def overview(conversations: List[Dict[str, Any]]) -> Dict[str, Any]:
    totals = total_metrics(conversations)
    sessions = totals["total_sessions"]
    return {
        "total_conversations": sessions,
        "active_conversations": sum(1 for c in conversations if c.get("status") == "active"),
        "unique_users": len({c.get("session_id") for c in conversations}),
        "average_messages_per_session": round(totals["total_messages"] / sessions, 2) if sessions else 0,
        "total_messages": totals["total_messages"],
    }


def daily_trends(conversations: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    days: Dict[Any, Dict[str, Any]] = {}
    for conv in conversations:
        created = conv.get("created_at")
        if not isinstance(created, datetime):
            continue
        bucket = days.setdefault(created.date(), {"conversations": 0, "total_messages": 0, "users": set()})
        bucket["conversations"] += 1
        bucket["total_messages"] += _total_messages(conv)
        bucket["users"].add(conv.get("session_id"))

    return [
        {
            "date": day.isoformat(),
            "conversations": bucket["conversations"],
            "total_messages": bucket["total_messages"],
            "unique_users": len(bucket["users"]),
        }
        for day, bucket in sorted(days.items())
    ]


def _duration_ms(conversation: Dict[str, Any]) -> Optional[float]:
    metadata = conversation.get("metadata") or {}
    start = metadata.get("start_time")
    end = metadata.get("end_time") or conversation.get("updated_at")
    if not isinstance(start, datetime) or not isinstance(end, datetime):
        return None
    return (end - start).total_seconds() * 1000


def conversation_flow(conversations: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    sessions = [c for c in conversations if _total_messages(c) >= 2]
    if not sessions:
        return {"avg_message_count": 0, "avg_duration": 0, "total_sessions": 0, "all_intent_sequences": []}

    durations = [d for d in (_duration_ms(c) for c in sessions) if d is not None]
    return {
        "avg_message_count": sum(_total_messages(c) for c in sessions) / len(sessions),
        "avg_duration": sum(durations) / len(durations) if durations else 0,
        "total_sessions": len(sessions),
        "all_intent_sequences": [_assistant_intents(c) for c in sessions],
    }


# ─────────────────────────────────────────────────────────────
# Products
# ─────────────────────────────────────────────────────────────
def _mention_pattern(product: Dict[str, Any]) -> Optional[re.Pattern]:
    terms = [product.get("name") or ""]
    terms += [t.replace("-", " ") for t in product.get("tags") or []]
    terms += list(product.get("tags") or [])
    alternatives = "|".join(re.escape(t.lower()) for t in terms if t)
    if not alternatives:
        return None
    return re.compile(rf"(?<!\w)(?:{alternatives})(?!\w)", re.IGNORECASE)


def product_mentions(products: List[Dict[str, Any]],
                     conversations: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Rank products, counting the user messages that mention each one by name or tag."""
    user_texts = [
        m.get("content") or ""
        for conv in conversations
        for m in conv.get("messages") or []
        if m.get("role") == Role.USER.value
    ]

    ranked = []
    for index, product in enumerate(products):
        pattern = _mention_pattern(product)
        ratings = product.get("ratings") or {}
        ranked.append({
            "product_id": product.get("_id"),
            "product_name": product.get("name"),
            "category": product.get("category"),
            "mentions": sum(1 for text in user_texts if pattern.search(text)) if pattern else 0,
            "rating": ratings.get("average", 0),
            "rank": index + 1,
        })
    return ranked
