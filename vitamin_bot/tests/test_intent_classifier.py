from __future__ import annotations

import pytest

from vitamin_bot.intent_classifier import IntentClassifier, get_intent_classifier


@pytest.fixture(scope="module")
def classifier() -> IntentClassifier:
    return get_intent_classifier()


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Track my order please", "order_tracking"),
        ("When will my delivery arrive?", "order_tracking"),
        ("Can you recommend something for sleep?", "product_recommendation"),
        ("What vitamins should I take", "product_recommendation"),
        ("Could you suggest a multivitamin", "product_recommendation"),
        ("What's the price of fish oil?", "pricing"),
        ("How much is the vitamin D?", "pricing"),
    ],
)
def test_keyword_rules(classifier: IntentClassifier, text: str, expected: str):
    assert classifier.classify(text) == expected


def test_order_rule_wins_over_pricing(classifier: IntentClassifier):
    # first matching rule wins
    assert classifier.classify("How much does order delivery cost") == "order_tracking"


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Is this in stock", "availability"),
        ("Benefits of vitamin C", "health_information"),
        ("Customer service", "general_support"),
        ("Ingredients list", "product_info"),
    ],
)
def test_model_labels_training_phrases(classifier: IntentClassifier, text: str, expected: str):
    assert classifier.classify(text) == expected


@pytest.mark.parametrize("text", ["", "   ", None])
def test_empty_message_is_general_support(classifier: IntentClassifier, text):
    assert classifier.classify(text) == "general_support"
    assert classifier.predict(text) == "general_support"


def test_classifier_is_a_singleton():
    assert get_intent_classifier() is get_intent_classifier()


def test_custom_training_data():
    from vitamin_bot.enums import Intent

    small = IntentClassifier([
        ("where is my parcel", Intent.ORDER_TRACKING),
        ("is it available", Intent.AVAILABILITY),
    ])
    assert small.predict("is it available") == "availability"
