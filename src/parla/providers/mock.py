"""Mock chat backend for testing and offline use."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from parla.providers.models import ChatReply, ChatSettings

if TYPE_CHECKING:
    from parla.turns import Content


class MockChat:
    """In-memory chat context that echoes messages.

    Like the real backend it keeps its own memory and appends an exchange only
    after replying.
    """

    def __init__(self, settings: ChatSettings, *, seed_history: list[Content]) -> None:
        self.settings = settings
        self._seed_history = seed_history
        self.history: list[Content] = copy.deepcopy(seed_history)

    @property
    def seed_history(self) -> list[Content]:
        """The contents this chat was created with."""
        return copy.deepcopy(self._seed_history)

    async def send_message(self, text: str) -> ChatReply:
        """Return a deterministic echo reply."""
        reply = f"echo: {text[:100]}"
        self.history.append({"role": "user", "parts": [{"text": text}]})
        self.history.append({"role": "model", "parts": [{"text": reply}]})
        return ChatReply(text=reply, usage={"input_tokens": 10, "total_tokens": 20})


class MockBackend:
    """Backend that creates MockChat contexts without any network access."""

    def create_chat(self, settings: ChatSettings, *, history: list[Content]) -> MockChat:
        """Create an echo chat seeded with *history*."""
        return MockChat(settings, seed_history=copy.deepcopy(history))
