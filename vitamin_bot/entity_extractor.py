"""
Keyword and regex entity extraction for chat messages.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Pattern

from .knowledge import HEALTH_GOALS, MINERALS, VITAMINS

_AGE_PATTERNS = (
    re.compile(r"(\d+)\s*(?:year|age)", re.IGNORECASE),
    re.compile(r"age\s*(\d+)", re.IGNORECASE),
)
_FEMALE = re.compile(r"\b(?:woman|women|female)\b", re.IGNORECASE)
_MALE = re.compile(r"\b(?:man|men|male)\b", re.IGNORECASE)


def _term_pattern(key: str, entry: Dict[str, Any]) -> Pattern[str]:
    terms = {entry["name"].lower(), key, key.replace("_", " ")}
    terms.update(alias.lower() for alias in entry.get("aliases", []))
    # Longest first so "vitamin b12" is tried before "b12"
    alternatives = "|".join(re.escape(t) for t in sorted(terms, key=len, reverse=True))
    return re.compile(rf"\b(?:{alternatives})\b", re.IGNORECASE)


_VITAMIN_PATTERNS = [(key, _term_pattern(key, entry)) for key, entry in VITAMINS.items()]
_MINERAL_PATTERNS = [(key, _term_pattern(key, entry)) for key, entry in MINERALS.items()]
_GOAL_PATTERNS = [(goal, re.compile(rf"\b{re.escape(goal)}", re.IGNORECASE)) for goal in HEALTH_GOALS]


def _last_match(message: str, patterns: List[tuple]) -> Optional[str]:
    found = None
    for key, pattern in patterns:
        if pattern.search(message):
            found = key
    return found


def extract_age(message: str) -> Optional[int]:
    for pattern in _AGE_PATTERNS:
        match = pattern.search(message)
        if match:
            return int(match.group(1))
    return None


def extract_gender(message: str) -> Optional[str]:
    if _FEMALE.search(message):
        return "female"
    if _MALE.search(message):
        return "male"
    return None


def extract_entities(message: str) -> Dict[str, Any]:
    """Pull vitamins, minerals, health goal, age and gender out of a message.

    Only keys that were found are present in the result.
    """
    message = message or ""
    entities: Dict[str, Any] = {}

    vitamin = _last_match(message, _VITAMIN_PATTERNS)
    if vitamin:
        entities["requested_vitamin"] = vitamin

    mineral = _last_match(message, _MINERAL_PATTERNS)
    if mineral:
        entities["requested_mineral"] = mineral

    goal = _last_match(message, _GOAL_PATTERNS)
    if goal:
        entities["health_goal"] = goal

    age = extract_age(message)
    if age is not None:
        entities["age"] = age

    gender = extract_gender(message)
    if gender:
        entities["gender"] = gender

    return entities
