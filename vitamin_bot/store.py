"""
MongoDB document store
──────────────────────
Conversations, catalog, customers, knowledge base and daily analytics.
Every query the REST routes need lives here so routes never touch pymongo.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.errors import PyMongoError

from .config import BaseConfig, get_config
from .enums import ConversationStatus, InventoryStatus, Role
from .models import BotResponse
from .schemas import build_conversation, build_message
from .utils.helpers import regex_filter, utcnow

log = logging.getLogger(__name__)

CONVERSATION_SUMMARY_FIELDS = {"session_id": 1, "status": 1, "metadata": 1, "created_at": 1, "updated_at": 1}
CATALOG_SEARCH_FIELDS = {
    "name": 1, "category": 1, "description": 1, "benefits": 1,
    "pricing.base_price": 1, "inventory.status": 1, "ratings": 1,
}
RECOMMENDATION_FIELDS = {
    "name": 1, "category": 1, "description": 1, "benefits": 1,
    "pricing.base_price": 1, "ratings": 1, "images": 1,
}
CUSTOMER_SUMMARY_FIELDS = {"email": 1, "profile": 1, "analytics": 1, "created_at": 1}


def to_object_id(value: Any) -> Optional[ObjectId]:
    """ObjectId for a route parameter, or None when it is not a valid id."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def _skip(page: int, limit: int) -> int:
    return (page - 1) * limit


class MongoStore:
    def __init__(self, client: Optional[MongoClient] = None, cfg: Optional[BaseConfig] = None,
                 db_name: Optional[str] = None) -> None:
        cfg = cfg or get_config()
        self.client = client or MongoClient(cfg.MONGODB_URI, serverSelectionTimeoutMS=cfg.MONGODB_TIMEOUT_MS)
        self.db = self.client[db_name or cfg.MONGODB_DB]
        self.conversations = self.db["conversations"]
        self.products = self.db["products"]
        self.customers = self.db["customers"]
        self.knowledge = self.db["knowledge_base"]
        self.analytics = self.db["analytics"]

    def ping(self) -> bool:
        self.client.admin.command("ping")
        return True

    def ensure_indexes(self) -> None:
        self.conversations.create_index([("session_id", ASCENDING), ("messages.timestamp", DESCENDING)])
        self.products.create_index([("category", ASCENDING), ("name", ASCENDING)])
        self.products.create_index([("inventory.status", ASCENDING)])
        self.customers.create_index([("email", ASCENDING)], unique=True)
        self.analytics.create_index([("date", DESCENDING)])
        self.knowledge.create_index([("category", ASCENDING), ("keywords", ASCENDING)])
        log.info("MONGO_INDEXES_READY")

    # ────────────────────────────────────────────────────────
    # Conversations
    # ────────────────────────────────────────────────────────
    def get_conversation(self, session_id: str) -> Optional[Dict[str, Any]]:
        return self.conversations.find_one({"session_id": session_id})

    def append_exchange(
        self,
        session_id: str,
        user_message: str,
        response: BotResponse,
        context: Dict[str, Any],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Record one user turn plus the assistant reply, creating the conversation on first write."""
        if self.conversations.count_documents({"session_id": session_id}, limit=1) == 0:
            self.conversations.insert_one(build_conversation(session_id, metadata))

        now = utcnow()
        messages = [
            build_message(Role.USER.value, user_message, timestamp=now),
            build_message(
                Role.ASSISTANT.value,
                response.message,
                intent=response.intent,
                entities=response.entities or {},
                timestamp=now,
            ),
        ]
        return self.conversations.find_one_and_update(
            {"session_id": session_id},
            {
                "$push": {"messages": {"$each": messages}},
                "$inc": {"metadata.total_messages": len(messages)},
                "$set": {
                    "metadata.last_activity": now,
                    "context.intent": context.get("intent"),
                    "context.extracted_info": context.get("extracted_info") or {},
                    "updated_at": now,
                },
            },
            return_document=ReturnDocument.AFTER,
        )

    def add_feedback(self, session_id: str, feedback: Dict[str, Any]) -> bool:
        result = self.conversations.update_one(
            {"session_id": session_id},
            {"$push": {"feedback": feedback}, "$set": {"updated_at": utcnow()}},
        )
        return result.matched_count > 0

    def set_conversation_status(self, session_id: str, status: str, *, ended: bool = False) -> bool:
        now = utcnow()
        fields: Dict[str, Any] = {"status": status, "updated_at": now}
        if ended:
            fields["metadata.end_time"] = now
        result = self.conversations.update_one({"session_id": session_id}, {"$set": fields})
        return result.matched_count > 0

    def complete_conversation(self, session_id: str) -> bool:
        return self.set_conversation_status(session_id, ConversationStatus.COMPLETED.value, ended=True)

    def list_conversations(self, *, page: int, limit: int, status: Optional[str] = None,
                           search: Optional[str] = None) -> Tuple[List[Dict[str, Any]], int]:
        query: Dict[str, Any] = {}
        if status:
            query["status"] = status
        if search:
            query["session_id"] = regex_filter(search)
        docs = list(
            self.conversations.find(query, CONVERSATION_SUMMARY_FIELDS)
            .sort("updated_at", DESCENDING)
            .skip(_skip(page, limit))
            .limit(limit)
        )
        return docs, self.conversations.count_documents(query)

    def recent_conversations(self, limit: int = 10) -> List[Dict[str, Any]]:
        fields = {"session_id": 1, "status": 1, "metadata.total_messages": 1, "updated_at": 1}
        return list(self.conversations.find({}, fields).sort("updated_at", DESCENDING).limit(limit))

    def count_conversations(self, status: Optional[str] = None) -> int:
        return self.conversations.count_documents({"status": status} if status else {})

    def conversations_since(self, since: datetime) -> List[Dict[str, Any]]:
        return list(self.conversations.find({"created_at": {"$gte": since}}))

    # ────────────────────────────────────────────────────────
    # Products
    # ────────────────────────────────────────────────────────
    def insert_product(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        result = self.products.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    def insert_products(self, docs: List[Dict[str, Any]]) -> List[ObjectId]:
        if not docs:
            return []
        return list(self.products.insert_many(docs).inserted_ids)

    def get_product(self, product_id: Any, *, active_only: bool = False) -> Optional[Dict[str, Any]]:
        oid = to_object_id(product_id)
        if oid is None:
            return None
        query: Dict[str, Any] = {"_id": oid}
        if active_only:
            query["is_active"] = True
        return self.products.find_one(query)

    def update_product(self, product_id: Any, update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        oid = to_object_id(product_id)
        if oid is None:
            return None
        return self.products.find_one_and_update(
            {"_id": oid}, {"$set": update}, return_document=ReturnDocument.AFTER
        )

    def deactivate_product(self, product_id: Any) -> bool:
        return self.update_product(product_id, {"is_active": False, "updated_at": utcnow()}) is not None

    def list_products(self, *, page: int, limit: int, category: Optional[str] = None,
                      status: Optional[str] = None, search: Optional[str] = None,
                      active_only: bool = False) -> Tuple[List[Dict[str, Any]], int]:
        query: Dict[str, Any] = {}
        if active_only:
            query["is_active"] = True
        if category:
            query["category"] = category
        if status:
            query["inventory.status"] = status
        if search:
            query["$or"] = [{"name": regex_filter(search)}, {"description": regex_filter(search)}]
        docs = list(
            self.products.find(query)
            .sort("name", ASCENDING)
            .skip(_skip(page, limit))
            .limit(limit)
        )
        return docs, self.products.count_documents(query)

    def search_catalog(self, *, query: Optional[str] = None, category: Optional[str] = None,
                       limit: int = 10) -> List[Dict[str, Any]]:
        criteria: Dict[str, Any] = {"is_active": True}
        if category:
            criteria["category"] = category
        if query:
            criteria["$or"] = [
                {field: regex_filter(query)} for field in ("name", "description", "benefits", "tags")
            ]
        cursor = (
            self.products.find(criteria, CATALOG_SEARCH_FIELDS)
            .sort([("ratings.average", DESCENDING), ("name", ASCENDING)])
            .limit(limit)
        )
        return list(cursor)

    def recommend_products(self, tags: Optional[List[str]] = None, limit: int = 6) -> List[Dict[str, Any]]:
        criteria: Dict[str, Any] = {"is_active": True, "inventory.status": InventoryStatus.IN_STOCK.value}
        if tags:
            criteria["tags"] = {"$in": list(tags)}
        cursor = (
            self.products.find(criteria, RECOMMENDATION_FIELDS)
            .sort("ratings.average", DESCENDING)
            .limit(limit)
        )
        return list(cursor)

    def top_rated_products(self, limit: int = 10) -> List[Dict[str, Any]]:
        cursor = (
            self.products.find({"is_active": True}, {"name": 1, "category": 1, "ratings": 1, "tags": 1})
            .sort([("ratings.average", DESCENDING), ("ratings.count", DESCENDING)])
            .limit(limit)
        )
        return list(cursor)

    def count_active_products(self) -> int:
        return self.products.count_documents({"is_active": True})

    def count_products(self) -> int:
        return self.products.count_documents({})

    def delete_all_products(self) -> int:
        return self.products.delete_many({}).deleted_count

    # ────────────────────────────────────────────────────────
    # Customers
    # ────────────────────────────────────────────────────────
    def find_customer(self, email: str) -> Optional[Dict[str, Any]]:
        return self.customers.find_one({"email": email})

    def find_customer_by_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        return self.customers.find_one({"chat_sessions.session_id": session_id})

    def save_customer(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a new customer or replace an existing one (matched on `_id`)."""
        doc["updated_at"] = utcnow()
        if doc.get("_id") is None:
            doc.pop("_id", None)
            doc.setdefault("created_at", doc["updated_at"])
            doc["_id"] = self.customers.insert_one(doc).inserted_id
        else:
            self.customers.replace_one({"_id": doc["_id"]}, doc)
        return doc

    def list_customers(self, *, page: int, limit: int,
                       search: Optional[str] = None) -> Tuple[List[Dict[str, Any]], int]:
        query: Dict[str, Any] = {}
        if search:
            query["$or"] = [
                {"email": regex_filter(search)},
                {"profile.first_name": regex_filter(search)},
                {"profile.last_name": regex_filter(search)},
            ]
        docs = list(
            self.customers.find(query, CUSTOMER_SUMMARY_FIELDS)
            .sort("created_at", DESCENDING)
            .skip(_skip(page, limit))
            .limit(limit)
        )
        return docs, self.customers.count_documents(query)

    def count_customers(self) -> int:
        return self.customers.count_documents({})

    # ────────────────────────────────────────────────────────
    # Knowledge base
    # ────────────────────────────────────────────────────────
    def insert_knowledge(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        doc["related_products"] = [oid for oid in map(to_object_id, doc.get("related_products") or []) if oid]
        doc["_id"] = self.knowledge.insert_one(doc).inserted_id
        return doc

    def update_knowledge(self, entry_id: Any, update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        oid = to_object_id(entry_id)
        if oid is None:
            return None
        if "related_products" in update:
            update["related_products"] = [
                pid for pid in map(to_object_id, update["related_products"] or []) if pid
            ]
        return self.knowledge.find_one_and_update(
            {"_id": oid}, {"$set": update}, return_document=ReturnDocument.AFTER
        )

    def list_knowledge(self, *, page: int, limit: int, category: Optional[str] = None,
                       search: Optional[str] = None) -> Tuple[List[Dict[str, Any]], int]:
        query: Dict[str, Any] = {"is_active": True}
        if category:
            query["category"] = category
        if search:
            query["$or"] = [
                {"title": regex_filter(search)},
                {"content": regex_filter(search)},
                {"keywords": regex_filter(search)},
            ]
        docs = list(
            self.knowledge.find(query)
            .sort("updated_at", DESCENDING)
            .skip(_skip(page, limit))
            .limit(limit)
        )
        return [self._resolve_related(doc) for doc in docs], self.knowledge.count_documents(query)

    def _resolve_related(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        ids = entry.get("related_products") or []
        if ids:
            found = {
                p["_id"]: p
                for p in self.products.find({"_id": {"$in": ids}}, {"name": 1, "category": 1})
            }
            entry["related_products"] = [found[pid] for pid in ids if pid in found]
        return entry

    def delete_all_knowledge(self) -> int:
        return self.knowledge.delete_many({}).deleted_count

    # ────────────────────────────────────────────────────────
    # Daily analytics documents
    # ────────────────────────────────────────────────────────
    def daily_analytics_since(self, since: datetime) -> List[Dict[str, Any]]:
        return list(self.analytics.find({"date": {"$gte": since}}).sort("date", ASCENDING))


def open_store(cfg: Optional[BaseConfig] = None) -> Optional[MongoStore]:
    """Connect to MongoDB, or return None so the app runs without a database."""
    cfg = cfg or get_config()
    if not cfg.database_configured:
        log.warning("MONGO_NOT_CONFIGURED | running without database; persistence-backed routes answer 503")
        return None
    try:
        store = MongoStore(cfg=cfg)
        store.ping()
        store.ensure_indexes()
        log.info(f"MONGO_CONNECTED | db={cfg.MONGODB_DB}")
        return store
    except PyMongoError as e:
        log.warning(f"MONGO_CONNECT_FAILED | error={e} | running without database")
        return None
