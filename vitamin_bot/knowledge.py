"""
Reference data for the vitamins and minerals the assistant can talk about,
plus the health-goal advice and goal → catalog tag mapping.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

VITAMINS: Dict[str, Dict[str, Any]] = {
    "vitamin_a": {
        "name": "Vitamin A",
        "benefits": ["Eye health", "Immune function", "Cell growth", "Skin health"],
        "sources": ["Carrots", "Sweet potatoes", "Spinach", "Liver"],
        "daily_value": "900 mcg RAE for men, 700 mcg RAE for women",
        "deficiency_symptoms": ["Night blindness", "Dry eyes", "Dry skin"],
        "aliases": ["retinol"],
    },
    "vitamin_b12": {
        "name": "Vitamin B12",
        "benefits": ["Nerve function", "Red blood cell formation", "DNA synthesis", "Energy metabolism"],
        "sources": ["Meat", "Fish", "Dairy products", "Fortified cereals"],
        "daily_value": "2.4 mcg",
        "deficiency_symptoms": ["Fatigue", "Weakness", "Memory problems"],
        "aliases": ["b12", "vitamin b-12", "methylcobalamin"],
    },
    "vitamin_c": {
        "name": "Vitamin C",
        "benefits": ["Immune support", "Collagen synthesis", "Antioxidant protection", "Iron absorption"],
        "sources": ["Citrus fruits", "Berries", "Bell peppers", "Broccoli"],
        "daily_value": "90 mg for men, 75 mg for women",
        "deficiency_symptoms": ["Fatigue", "Joint pain", "Easy bruising"],
        "aliases": ["ascorbic acid"],
    },
    "vitamin_d": {
        "name": "Vitamin D",
        "benefits": ["Bone health", "Immune function", "Muscle function", "Calcium absorption"],
        "sources": ["Sunlight exposure", "Fatty fish", "Fortified milk", "Supplements"],
        "daily_value": "600-800 IU",
        "deficiency_symptoms": ["Bone pain", "Muscle weakness", "Fatigue"],
        "aliases": ["vitamin d3", "d3", "cholecalciferol"],
    },
    "vitamin_e": {
        "name": "Vitamin E",
        "benefits": ["Antioxidant protection", "Immune function", "Skin health", "Cell protection"],
        "sources": ["Nuts", "Seeds", "Vegetable oils", "Green leafy vegetables"],
        "daily_value": "15 mg",
        "deficiency_symptoms": ["Muscle weakness", "Vision problems"],
        "aliases": ["tocopherol"],
    },
}

MINERALS: Dict[str, Dict[str, Any]] = {
    "iron": {
        "name": "Iron",
        "benefits": ["Oxygen transport", "Energy production", "Immune function"],
        "sources": ["Red meat", "Spinach", "Lentils", "Fortified cereals"],
        "daily_value": "8 mg for men, 18 mg for women",
        "deficiency_symptoms": ["Fatigue", "Pale skin", "Shortness of breath"],
        "aliases": [],
    },
    "calcium": {
        "name": "Calcium",
        "benefits": ["Bone health", "Muscle function", "Nerve transmission"],
        "sources": ["Dairy products", "Leafy greens", "Fortified foods"],
        "daily_value": "1000-1200 mg",
        "deficiency_symptoms": ["Weak bones", "Muscle cramps"],
        "aliases": [],
    },
    "magnesium": {
        "name": "Magnesium",
        "benefits": ["Muscle function", "Heart health", "Bone health", "Energy production"],
        "sources": ["Nuts", "Seeds", "Whole grains", "Leafy greens"],
        "daily_value": "400-420 mg for men, 310-320 mg for women",
        "deficiency_symptoms": ["Muscle cramps", "Fatigue", "Irregular heartbeat"],
        "aliases": [],
    },
    "zinc": {
        "name": "Zinc",
        "benefits": ["Immune function", "Wound healing", "Protein synthesis"],
        "sources": ["Oysters", "Beef", "Pumpkin seeds", "Chickpeas"],
        "daily_value": "11 mg for men, 8 mg for women",
        "deficiency_symptoms": ["Frequent infections", "Slow wound healing", "Hair loss"],
        "aliases": [],
    },
}

# Health goal keywords recognised in chat, in match order (a later match wins)
HEALTH_GOALS: List[str] = [
    "energy", "immune", "bone health", "skin", "hair", "weight loss", "muscle", "heart",
]

GOAL_RECOMMENDATIONS: Dict[str, str] = {
    "energy": "For energy support, I recommend Vitamin B12, Iron, and Magnesium. "
              "These help with energy metabolism and reducing fatigue.",
    "immune": "For immune support, Vitamin C, Vitamin D, and Zinc are excellent choices. "
              "They help strengthen your immune system.",
    "bone health": "For bone health, Calcium, Vitamin D, and Magnesium work together to maintain strong bones.",
    "skin": "For skin health, Vitamin E, Vitamin C, and Biotin can help maintain healthy, glowing skin.",
    "hair": "For hair health, Biotin, Iron, and Vitamin D can support strong, healthy hair growth.",
    "heart": "For heart health, Omega-3, CoQ10, and Magnesium support normal cardiovascular function.",
    "muscle": "For muscle support, Magnesium, Vitamin D, and a quality protein help with recovery and strength.",
    "weight loss": "For weight management, a balanced multivitamin alongside fiber and protein can help "
                   "support healthy metabolism. Our team can suggest options that fit your plan.",
}
DEFAULT_GOAL_RECOMMENDATION = "Let me help you find the right vitamins for your specific needs."

# Recommendation endpoint: goal key → product tags
HEALTH_GOAL_TAGS: Dict[str, List[str]] = {
    "energy": ["vitamin-b12", "iron", "magnesium", "b-complex"],
    "immune": ["vitamin-c", "vitamin-d", "zinc", "elderberry"],
    "bone-health": ["calcium", "vitamin-d", "magnesium", "vitamin-k"],
    "heart-health": ["omega-3", "coq10", "magnesium", "vitamin-e"],
    "skin-health": ["vitamin-e", "vitamin-c", "biotin", "collagen"],
}

# Chat goal keywords that differ from the endpoint's goal keys
_GOAL_ALIASES: Dict[str, str] = {
    "heart": "heart-health",
    "skin": "skin-health",
    "immune-support": "immune",
}


def goal_recommendation(goal: str) -> str:
    return GOAL_RECOMMENDATIONS.get(goal, DEFAULT_GOAL_RECOMMENDATION)


def normalize_goal(goal: Optional[str]) -> str:
    key = (goal or "").strip().lower().replace("_", "-").replace(" ", "-")
    return _GOAL_ALIASES.get(key, key)


def tags_for_goal(goal: Optional[str]) -> List[str]:
    return list(HEALTH_GOAL_TAGS.get(normalize_goal(goal), []))
