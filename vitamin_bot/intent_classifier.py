"""
Intent classification for incoming chat messages.

A bag-of-words logistic regression is trained once on the labelled phrases
in `intent_config.TRAINING_DATA`; keyword rules from `KEYWORD_RULES` are
checked afterwards and override the model's label.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

from sklearn.feature_extraction.text import CountVectorizer
from sklearn.linear_model import LogisticRegression
from sklearn.pipeline import Pipeline

from .enums import Intent
from .intent_config import EMPTY_MESSAGE_INTENT, KEYWORD_RULES, TRAINING_DATA

log = logging.getLogger(__name__)


class IntentClassifier:
    def __init__(self, training_data: Optional[Iterable[Tuple[str, Intent]]] = None):
        samples = list(training_data or TRAINING_DATA)
        texts = [self._clean(text) for text, _ in samples]
        labels = [intent.value for _, intent in samples]

        # High C so the tiny training set is fit closely
        self._model = Pipeline([
            ("vectorizer", CountVectorizer(lowercase=True)),
            ("clf", LogisticRegression(C=10.0, max_iter=1000)),
        ])
        self._model.fit(texts, labels)
        log.info(f"INTENT_MODEL_TRAINED | samples={len(samples)} | labels={len(set(labels))}")

    @staticmethod
    def _clean(message: str) -> str:
        return (message or "").lower().strip()

    def predict(self, message: str) -> str:
        """Raw model label, without keyword overrides."""
        clean = self._clean(message)
        if not clean:
            return EMPTY_MESSAGE_INTENT.value
        return str(self._model.predict([clean])[0])

    def classify(self, message: str) -> str:
        clean = self._clean(message)
        if not clean:
            return EMPTY_MESSAGE_INTENT.value

        label = self.predict(clean)

        for keywords, intent in KEYWORD_RULES:
            if any(keyword in clean for keyword in keywords):
                if intent.value != label:
                    log.debug(f"INTENT_RULE_OVERRIDE | model={label} | rule={intent.value}")
                return intent.value

        return label


_classifier: Optional[IntentClassifier] = None


def get_intent_classifier() -> IntentClassifier:
    """Process-wide classifier, trained on first use."""
    global _classifier
    if _classifier is None:
        _classifier = IntentClassifier()
    return _classifier
