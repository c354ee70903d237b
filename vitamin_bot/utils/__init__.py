# vitamin_bot/utils/__init__.py
"""
Expose helpers at package-level for convenience:

    from vitamin_bot.utils import to_json_safe
"""

from .helpers import (  # noqa: F401
    days_ago,
    iso_now,
    pagination_block,
    pagination_params,
    parse_positive_int,
    regex_filter,
    to_json_safe,
    trim_history,
    utcnow,
)

__all__ = [
    "days_ago",
    "iso_now",
    "pagination_block",
    "pagination_params",
    "parse_positive_int",
    "regex_filter",
    "to_json_safe",
    "trim_history",
    "utcnow",
]
