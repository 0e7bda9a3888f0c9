"""Conversation turns and their mapping to backend contents."""

from __future__ import annotations

from dataclasses import dataclass, field
import time
from typing import TYPE_CHECKING, Any, Literal, TypedDict
import uuid

if TYPE_CHECKING:
    from collections.abc import Iterable

Role = Literal["user", "model"]
ROLES: frozenset[str] = frozenset({"user", "model"})


class ContentPart(TypedDict):
    text: str


class Content(TypedDict):
    """Backend-native history entry: one role plus its content parts."""

    role: str
    parts: list[ContentPart]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Turn:
    """One message in a conversation, tagged with its speaker role."""

    role: Role
    text: str
    timestamp: int = field(default_factory=_now_ms)
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Turn.role must be 'user' or 'model', got {self.role!r}")

    @classmethod
    def user(cls, text: str) -> Turn:
        """Create a user turn stamped with the current time."""
        return cls(role="user", text=text)

    @classmethod
    def model(cls, text: str) -> Turn:
        """Create a model turn stamped with the current time."""
        return cls(role="model", text=text)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "text": self.text,
            "timestamp": self.timestamp,
        }


def to_contents(turns: Iterable[Turn]) -> list[Content]:
    """Map turns to backend contents, one text part per turn, order preserved."""
    return [{"role": t.role, "parts": [{"text": t.text}]} for t in turns]
