"""Backend protocol: minimal interface for stateful chat backends."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from parla.providers.models import ChatReply, ChatSettings
    from parla.turns import Content


@runtime_checkable
class ChatHandle(Protocol):
    """A backend-held conversation: seed memory plus fixed settings."""

    @property
    def seed_history(self) -> list[Content]:
        """The contents this context was created with."""
        ...

    async def send_message(self, text: str) -> ChatReply:
        """Send one user message and return the model's reply.

        Failures must be raised as ``parla.errors.APIError`` tagged with a
        ``FailureKind``.
        """
        ...


@runtime_checkable
class ChatBackend(Protocol):
    """Factory for chat contexts. Creation is synchronous and does no I/O."""

    def create_chat(
        self, settings: ChatSettings, *, history: list[Content]
    ) -> ChatHandle:
        """Create a chat context seeded with *history*."""
        ...
