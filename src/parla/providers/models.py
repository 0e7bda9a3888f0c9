"""Domain models for the backend transport layer."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ChatSettings:
    """Fixed configuration bound to a chat context for its whole lifetime."""

    model: str
    system_instruction: str | None = None
    temperature: float | None = None
    top_k: int | None = None


@dataclass
class ChatReply:
    """A standardized reply from a chat turn."""

    text: str = ""
    usage: dict[str, int] = field(default_factory=dict)
