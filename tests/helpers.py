"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: it exists to prevent test suites from
growing lots of one-off backend classes as coverage expands.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from parla.errors import APIError, FailureKind, OverloadedError, RateLimitError
from parla.providers.models import ChatReply, ChatSettings


@dataclass
class FakeSleep:
    """Awaitable stand-in for asyncio.sleep that records requested delays."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@dataclass
class ScriptedChat:
    """Chat context that pops replies/exceptions from its backend's script."""

    backend: ScriptedBackend
    settings: ChatSettings
    _seed_history: list[dict[str, Any]]
    sent: list[str] = field(default_factory=list)

    @property
    def seed_history(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._seed_history)

    async def send_message(self, text: str) -> ChatReply:
        self.sent.append(text)
        self.backend.send_calls += 1
        if not self.backend.script:
            return ChatReply(text=f"ok:{text}")
        item = self.backend.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, ChatReply):
            return item
        return ChatReply(text=item)


@dataclass
class ScriptedBackend:
    """Backend whose chats share one script of replies and exceptions.

    Script items are ``str`` (reply text), ``ChatReply`` or an exception to
    raise. An empty script answers ``ok:<text>``.
    """

    script: list[str | ChatReply | BaseException] = field(default_factory=list)
    send_calls: int = 0
    chats: list[ScriptedChat] = field(default_factory=list)

    def create_chat(
        self, settings: ChatSettings, *, history: list[dict[str, Any]]
    ) -> ScriptedChat:
        chat = ScriptedChat(self, settings, copy.deepcopy(history))
        self.chats.append(chat)
        return chat


def rate_limited(message: str = "quota exceeded") -> RateLimitError:
    return RateLimitError(message, status_code=429, provider="gemini", phase="send")


def overloaded(message: str = "service unavailable") -> OverloadedError:
    return OverloadedError(message, status_code=503, provider="gemini", phase="send")


def terminal(message: str = "bad request", status_code: int | None = 400) -> APIError:
    return APIError(
        message,
        status_code=status_code,
        provider="gemini",
        phase="send",
        kind=FailureKind.TERMINAL,
    )
