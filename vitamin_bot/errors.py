"""Exception types shared across the store, schemas and chatbot engine."""

from __future__ import annotations


class VitaBotError(Exception):
    """Base class for application errors."""


class ValidationError(VitaBotError):
    """A document failed schema validation. Routes answer 400."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class StoreUnavailableError(VitaBotError):
    """No document database is configured or reachable. Routes answer 503."""


class LLMUnavailableError(VitaBotError):
    """No completion client is configured."""
