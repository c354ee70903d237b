from __future__ import annotations

import pytest

from vitamin_bot.entity_extractor import extract_age, extract_entities, extract_gender


def test_extracts_everything_from_one_message():
    entities = extract_entities("I'm a 35 year old woman looking for vitamin D for bone health")
    assert entities == {
        "requested_vitamin": "vitamin_d",
        "health_goal": "bone health",
        "age": 35,
        "gender": "female",
    }


@pytest.mark.parametrize(
    "text,key",
    [
        ("Tell me about Vitamin B12", "vitamin_b12"),
        ("is b12 safe?", "vitamin_b12"),
        ("benefits of ascorbic acid", "vitamin_c"),
        ("do you sell D3?", "vitamin_d"),
        ("what does vitamin_e do", "vitamin_e"),
    ],
)
def test_vitamin_names_and_aliases(text: str, key: str):
    assert extract_entities(text)["requested_vitamin"] == key


def test_minerals():
    assert extract_entities("I need more magnesium")["requested_mineral"] == "magnesium"
    assert extract_entities("Zinc for colds?")["requested_mineral"] == "zinc"


def test_matches_whole_words_only():
    # "ironing" is not iron, "vitamin cream" is not vitamin C
    entities = extract_entities("ironing my vitamin cream shirt")
    assert "requested_mineral" not in entities
    assert "requested_vitamin" not in entities


def test_later_vitamin_in_catalog_order_wins():
    assert extract_entities("vitamin A or vitamin E?")["requested_vitamin"] == "vitamin_e"


@pytest.mark.parametrize(
    "text,age",
    [
        ("I am 42 years old", 42),
        ("age 29, looking for a multi", 29),
        ("my son is 7 year", 7),
        ("no numbers here", None),
    ],
)
def test_age(text: str, age):
    assert extract_age(text) == age


@pytest.mark.parametrize(
    "text,gender",
    [
        ("vitamins for women", "female"),
        ("I'm a woman", "female"),
        ("something for men over 50", "male"),
        ("I am a male runner", "male"),
        ("for my mentor", None),
        ("", None),
    ],
)
def test_gender(text: str, gender):
    assert extract_gender(text) == gender


def test_goals():
    assert extract_entities("I want more energy")["health_goal"] == "energy"
    assert extract_entities("support my immune system")["health_goal"] == "immune"
    assert extract_entities("Help with weight loss")["health_goal"] == "weight loss"


def test_only_found_keys_present():
    assert extract_entities("hello there") == {}
    assert extract_entities(None) == {}
