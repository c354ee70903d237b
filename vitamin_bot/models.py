"""
Dataclass models for conversation state and chatbot replies.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .utils.helpers import iso_now


@dataclass
class QuickAction:
    """Suggested reply button: `label` is shown, `value` is sent back as the next message."""
    label: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"label": self.label, "value": self.value}


@dataclass
class BotResponse:
    message: str
    intent: str
    quick_actions: List[QuickAction] = field(default_factory=list)
    entities: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=iso_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "intent": self.intent,
            "quick_actions": [qa.to_dict() for qa in self.quick_actions],
            "entities": dict(self.entities),
            "timestamp": self.timestamp,
        }


@dataclass
class SessionState:
    """Rolling per-session conversation state kept in Redis."""
    session_id: str
    history: List[Dict[str, str]] = field(default_factory=list)
    intent: Optional[str] = None
    extracted_info: Dict[str, Any] = field(default_factory=dict)

    @property
    def context(self) -> Dict[str, Any]:
        return {"intent": self.intent, "extracted_info": dict(self.extracted_info)}

    def add_message(self, role: str, content: str) -> None:
        self.history.append({"role": role, "content": content})

    def merge_entities(self, entities: Dict[str, Any]) -> None:
        self.extracted_info.update(entities)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, session_id: str, data: Dict[str, Any]) -> "SessionState":
        return cls(
            session_id=session_id,
            history=list(data.get("history") or []),
            intent=data.get("intent"),
            extracted_info=dict(data.get("extracted_info") or {}),
        )


@dataclass
class ClientInfo:
    """Realtime connection bookkeeping."""
    session_id: Optional[str]
    connected_at: datetime
    last_activity: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "connected_at": self.connected_at.isoformat() + "Z",
            "last_activity": self.last_activity.isoformat() + "Z",
        }

