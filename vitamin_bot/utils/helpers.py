"""
Utility helpers
"""

from __future__ import annotations

import math
import re
from dataclasses import asdict, is_dataclass
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Tuple

from bson import ObjectId


def utcnow() -> datetime:
    """Naive UTC timestamp, the form pymongo hands back from the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso_now() -> str:
    return utcnow().isoformat() + "Z"


def days_ago(days: int) -> datetime:
    return utcnow() - timedelta(days=days)


def trim_history(history: List[Dict[str, Any]], max_len: int) -> None:
    if max_len <= 0:
        return
    overflow = len(history) - max_len
    if overflow > 0:
        del history[:overflow]


def parse_positive_int(raw: Any, default: int) -> int:
    """Parse query-string integers; non-numeric or non-positive input falls back to default."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def pagination_params(args: Any, default_limit: int = 20) -> Tuple[int, int]:
    page = parse_positive_int(args.get("page"), 1)
    limit = parse_positive_int(args.get("limit"), default_limit)
    return page, limit


def pagination_block(page: int, limit: int, total: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }


def regex_filter(term: str) -> Dict[str, str]:
    """Case-insensitive regex match on an escaped user-supplied search term."""
    return {"$regex": re.escape(term), "$options": "i"}


def to_json_safe(obj: Any) -> Any:
    """Convert documents (ObjectId, datetimes, enums, dataclasses) to JSON-safe values."""
    if isinstance(obj, ObjectId):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    if is_dataclass(obj) and not isinstance(obj, type):
        return to_json_safe(asdict(obj))
    if isinstance(obj, dict):
        return {k: to_json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [to_json_safe(v) for v in obj]
    if isinstance(obj, datetime):
        if obj.tzinfo is None:
            return obj.isoformat() + "Z"
        return obj.isoformat()
    if isinstance(obj, date):
        return obj.isoformat()
    return obj
