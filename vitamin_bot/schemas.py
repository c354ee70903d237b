"""
Document shapes for the MongoDB collections.

`build_*` functions validate a full document and fill defaults before insert;
`*_update` functions validate only the supplied fields and return a `$set`
payload with nested sections flattened to dotted paths.
All of them raise `ValidationError` on bad input.
"""

from __future__ import annotations

from copy import deepcopy
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from .enums import (ActivityLevel, CommunicationMethod, ConversationStatus,
                    Gender, InventoryStatus, KnowledgeCategory,
                    ProductCategory, RecommendationFrequency, Role,
                    enum_values)
from .errors import ValidationError
from .utils.helpers import utcnow


# ─────────────────────────────────────────────────────────────
# Field helpers
# ─────────────────────────────────────────────────────────────
def _required_str(data: Dict[str, Any], field: str, *, label: Optional[str] = None) -> str:
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label or field} is required", field=field)
    return value.strip()


def _optional_str(value: Any, field: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)
    return value


def _enum(value: Any, enum_cls, field: str) -> Any:
    if value is None:
        return None
    if value not in enum_values(enum_cls):
        allowed = ", ".join(sorted(enum_values(enum_cls)))
        raise ValidationError(f"{field} must be one of: {allowed}", field=field)
    return value


def _number(value: Any, field: str, *, required: bool = False) -> Optional[float]:
    if value is None:
        if required:
            raise ValidationError(f"{field} is required", field=field)
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number", field=field)
    return value


def _bool(value: Any, field: str) -> Optional[bool]:
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ValidationError(f"{field} must be true or false", field=field)
    return value


def _str_list(value: Any, field: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f"{field} must be a list of strings", field=field)
    return list(value)


def _section(value: Any, field: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationError(f"{field} must be an object", field=field)
    return dict(value)


def _pick(data: Dict[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
    return {k: data[k] for k in fields if k in data}


def _flatten_set(update: Dict[str, Any], nested: Iterable[str]) -> Dict[str, Any]:
    """Turn {"pricing": {"sale_price": 9}} into {"pricing.sale_price": 9}."""
    flat: Dict[str, Any] = {}
    for key, value in update.items():
        if key in nested and isinstance(value, dict):
            for sub_key, sub_value in value.items():
                flat[f"{key}.{sub_key}"] = sub_value
        else:
            flat[key] = value
    return flat


def _timestamps(doc: Dict[str, Any]) -> Dict[str, Any]:
    now = utcnow()
    doc.setdefault("created_at", now)
    doc["updated_at"] = now
    return doc


# ─────────────────────────────────────────────────────────────
# Conversations
# ─────────────────────────────────────────────────────────────
def build_message(role: str, content: str, *, intent: Optional[str] = None,
                  entities: Optional[Dict[str, Any]] = None,
                  timestamp: Optional[datetime] = None) -> Dict[str, Any]:
    _enum(role, Role, "role")
    if role is None:
        raise ValidationError("role is required", field="role")
    if not isinstance(content, str) or not content:
        raise ValidationError("content is required", field="content")
    msg: Dict[str, Any] = {"role": role, "content": content, "timestamp": timestamp or utcnow()}
    if intent is not None:
        msg["intent"] = intent
    if entities is not None:
        msg["entities"] = _section(entities, "entities")
    return msg


def build_conversation(session_id: str, metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    if not isinstance(session_id, str) or not session_id.strip():
        raise ValidationError("session_id is required", field="session_id")
    metadata = _section(metadata, "metadata")
    now = utcnow()
    doc = {
        "session_id": session_id,
        "messages": [],
        "context": {"intent": None, "extracted_info": {}, "user_profile": {}},
        "metadata": {
            "user_agent": _optional_str(metadata.get("user_agent"), "user_agent"),
            "ip_address": _optional_str(metadata.get("ip_address"), "ip_address"),
            "referrer": _optional_str(metadata.get("referrer"), "referrer"),
            "start_time": now,
            "end_time": None,
            "total_messages": 0,
            "last_activity": now,
        },
        "feedback": [],
        "status": ConversationStatus.ACTIVE.value,
    }
    return _timestamps(doc)


def validate_status(status: Any) -> str:
    if status is None:
        raise ValidationError("status is required", field="status")
    return _enum(status, ConversationStatus, "status")


def build_feedback(message_id: Any, rating: Any, comment: Any = None) -> Dict[str, Any]:
    if message_id is None or message_id == "":
        raise ValidationError("message_id is required", field="message_id")
    if isinstance(rating, bool) or not isinstance(rating, (int, float)) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5", field="rating")
    return {
        "message_id": str(message_id),
        "rating": rating,
        "comment": _optional_str(comment, "comment"),
        "timestamp": utcnow(),
    }


# ─────────────────────────────────────────────────────────────
# Products
# ─────────────────────────────────────────────────────────────
PRODUCT_FIELDS = (
    "name", "category", "subcategory", "description", "benefits", "ingredients",
    "usage", "pricing", "inventory", "specifications", "certifications", "images",
    "tags", "seo", "ratings", "is_active",
)
_PRODUCT_SECTIONS = ("usage", "pricing", "inventory", "specifications", "seo", "ratings")


def _validate_pricing(pricing: Dict[str, Any], *, partial: bool) -> Dict[str, Any]:
    _number(pricing.get("base_price"), "pricing.base_price", required=not partial)
    _number(pricing.get("sale_price"), "pricing.sale_price")
    _optional_str(pricing.get("currency"), "pricing.currency")
    return pricing


def _validate_inventory(inventory: Dict[str, Any]) -> Dict[str, Any]:
    _number(inventory.get("stock"), "inventory.stock")
    _number(inventory.get("low_stock_threshold"), "inventory.low_stock_threshold")
    _enum(inventory.get("status"), InventoryStatus, "inventory.status")
    return inventory


def _validate_product_fields(data: Dict[str, Any], *, partial: bool) -> Dict[str, Any]:
    doc = deepcopy(_pick(data, PRODUCT_FIELDS))

    if "name" in doc or not partial:
        doc["name"] = _required_str(doc, "name")
    if "category" in doc or not partial:
        if doc.get("category") is None:
            raise ValidationError("category is required", field="category")
        _enum(doc["category"], ProductCategory, "category")
    if "description" in doc or not partial:
        doc["description"] = _required_str(doc, "description")

    for field in _PRODUCT_SECTIONS:
        if field in doc:
            doc[field] = _section(doc[field], field)
    if "pricing" in doc or not partial:
        doc["pricing"] = _validate_pricing(doc.get("pricing") or {}, partial=partial)
    if "inventory" in doc:
        _validate_inventory(doc["inventory"])
    if "ratings" in doc:
        _number(doc["ratings"].get("average"), "ratings.average")
        _number(doc["ratings"].get("count"), "ratings.count")

    for field in ("benefits", "certifications", "images", "tags"):
        if field in doc:
            doc[field] = _str_list(doc[field], field)
    if "ingredients" in doc:
        if not isinstance(doc["ingredients"], list) or not all(isinstance(i, dict) for i in doc["ingredients"]):
            raise ValidationError("ingredients must be a list of objects", field="ingredients")
    if "subcategory" in doc:
        _optional_str(doc["subcategory"], "subcategory")
    if "is_active" in doc:
        _bool(doc["is_active"], "is_active")
    return doc


def build_product(data: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError("Product payload must be an object")
    doc = _validate_product_fields(data, partial=False)

    doc["pricing"].setdefault("currency", "USD")
    inventory = doc.setdefault("inventory", {})
    inventory.setdefault("stock", 0)
    inventory.setdefault("low_stock_threshold", 10)
    inventory.setdefault("status", InventoryStatus.IN_STOCK.value)
    ratings = doc.setdefault("ratings", {})
    ratings.setdefault("average", 0)
    ratings.setdefault("count", 0)
    for field in ("benefits", "ingredients", "certifications", "images", "tags"):
        doc.setdefault(field, [])
    doc.setdefault("is_active", True)
    return _timestamps(doc)


def product_update(data: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError("Product payload must be an object")
    doc = _validate_product_fields(data, partial=True)
    if not doc:
        raise ValidationError("No updatable fields supplied")
    update = _flatten_set(doc, _PRODUCT_SECTIONS)
    update["updated_at"] = utcnow()
    return update


# ─────────────────────────────────────────────────────────────
# Customers
# ─────────────────────────────────────────────────────────────
PROFILE_FIELDS = ("first_name", "last_name", "date_of_birth", "gender", "phone")
HEALTH_PROFILE_FIELDS = (
    "health_goals", "medical_conditions", "allergies", "medications",
    "dietary_restrictions", "activity_level",
)


def validate_profile(profile: Any) -> Dict[str, Any]:
    profile = _pick(_section(profile, "profile"), PROFILE_FIELDS)
    for field in ("first_name", "last_name", "date_of_birth", "phone"):
        if field in profile:
            _optional_str(profile[field], f"profile.{field}")
    _enum(profile.get("gender"), Gender, "profile.gender")
    return profile


def validate_health_profile(health_profile: Any) -> Dict[str, Any]:
    health_profile = _pick(_section(health_profile, "health_profile"), HEALTH_PROFILE_FIELDS)
    for field in HEALTH_PROFILE_FIELDS[:-1]:
        if field in health_profile:
            health_profile[field] = _str_list(health_profile[field], f"health_profile.{field}")
    _enum(health_profile.get("activity_level"), ActivityLevel, "health_profile.activity_level")
    return health_profile


def validate_preferences(preferences: Any) -> Dict[str, Any]:
    preferences = _section(preferences, "preferences")
    _enum(preferences.get("communication_method"), CommunicationMethod, "preferences.communication_method")
    _bool(preferences.get("newsletter"), "preferences.newsletter")
    _enum(preferences.get("recommendation_frequency"), RecommendationFrequency,
          "preferences.recommendation_frequency")
    return {
        "communication_method": preferences.get("communication_method", CommunicationMethod.EMAIL.value),
        "newsletter": preferences.get("newsletter", True),
        "recommendation_frequency": preferences.get("recommendation_frequency", RecommendationFrequency.MONTHLY.value),
    }


def normalize_email(email: Any) -> str:
    if not isinstance(email, str) or not email.strip():
        raise ValidationError("Email is required", field="email")
    email = email.strip().lower()
    if "@" not in email:
        raise ValidationError("Email is invalid", field="email")
    return email


def build_customer(email: Any, profile: Any = None, health_profile: Any = None,
                   preferences: Any = None) -> Dict[str, Any]:
    doc = {
        "email": normalize_email(email),
        "profile": validate_profile(profile),
        "health_profile": validate_health_profile(health_profile),
        "preferences": validate_preferences(preferences),
        "chat_sessions": [],
        "orders": [],
        "analytics": {
            "total_chat_sessions": 0,
            "average_session_duration": None,
            "total_orders": 0,
            "total_spent": 0,
            "last_activity": None,
        },
    }
    return _timestamps(doc)


def build_chat_session(session_id: str) -> Dict[str, Any]:
    return {
        "session_id": session_id,
        "start_time": utcnow(),
        "end_time": None,
        "message_count": 0,
        "satisfaction": None,
    }


# ─────────────────────────────────────────────────────────────
# Knowledge base
# ─────────────────────────────────────────────────────────────
KNOWLEDGE_FIELDS = (
    "category", "title", "content", "keywords", "related_products",
    "source", "is_active", "metadata",
)


def _validate_knowledge_fields(data: Dict[str, Any], *, partial: bool) -> Dict[str, Any]:
    doc = deepcopy(_pick(data, KNOWLEDGE_FIELDS))
    if "category" in doc or not partial:
        if doc.get("category") is None:
            raise ValidationError("category is required", field="category")
        _enum(doc["category"], KnowledgeCategory, "category")
    if "title" in doc or not partial:
        doc["title"] = _required_str(doc, "title")
    if "content" in doc or not partial:
        doc["content"] = _required_str(doc, "content")
    if "keywords" in doc:
        doc["keywords"] = _str_list(doc["keywords"], "keywords")
    if "related_products" in doc and not isinstance(doc["related_products"], list):
        raise ValidationError("related_products must be a list", field="related_products")
    if "source" in doc:
        _optional_str(doc["source"], "source")
    if "is_active" in doc:
        _bool(doc["is_active"], "is_active")
    if "metadata" in doc:
        doc["metadata"] = _section(doc["metadata"], "metadata")
        _number(doc["metadata"].get("accuracy"), "metadata.accuracy")
    return doc


def build_knowledge_entry(data: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError("Knowledge entry payload must be an object")
    doc = _validate_knowledge_fields(data, partial=False)
    doc.setdefault("keywords", [])
    doc.setdefault("related_products", [])
    doc.setdefault("is_active", True)
    doc.setdefault("metadata", {})
    doc.setdefault("last_verified", None)
    return _timestamps(doc)


def knowledge_update(data: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError("Knowledge entry payload must be an object")
    doc = _validate_knowledge_fields(data, partial=True)
    if not doc:
        raise ValidationError("No updatable fields supplied")
    update = _flatten_set(doc, ("metadata",))
    now = utcnow()
    update["last_verified"] = now
    update["updated_at"] = now
    return update
