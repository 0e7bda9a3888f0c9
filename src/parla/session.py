"""Conversation session manager: the active chat context and turn dispatch.

``SessionHolder`` owns the single active chat context of one conversation and
replaces it wholesale on every ``initialize``. ``TurnDispatcher`` sends user
text through whatever context is active at the time of each attempt, retrying
transient backend failures with exponential backoff.

Example:
    holder = SessionHolder(MockBackend(), config.settings())
    dispatcher = TurnDispatcher(holder)
    holder.initialize(previous_turns)
    reply = await dispatcher.dispatch("Ciao")
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from parla.retry import RetryPolicy, is_transient, retry_async
from parla.turns import to_contents

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from parla.providers.base import ChatBackend, ChatHandle
    from parla.providers.models import ChatSettings
    from parla.retry import RetryEvent
    from parla.turns import Content, Turn

log = logging.getLogger(__name__)


class SessionHolder:
    """Owns the one active chat context for a conversation."""

    def __init__(self, backend: ChatBackend, settings: ChatSettings) -> None:
        self.backend = backend
        self.settings = settings
        self._active: ChatHandle | None = None

    @property
    def active(self) -> ChatHandle | None:
        return self._active

    @property
    def seed_history(self) -> list[Content]:
        """Seed contents of the active context, empty when there is none."""
        if self._active is None:
            return []
        return self._active.seed_history

    def initialize(self, prior_turns: Iterable[Turn] = ()) -> ChatHandle:
        """Replace the active context with one seeded from *prior_turns*.

        The backend memory afterwards holds exactly *prior_turns*. Any previous
        context is dropped; requests still in flight against it are not
        drained.
        """
        history = to_contents(prior_turns)
        handle = self.backend.create_chat(self.settings, history=history)
        self._active = handle
        log.debug("Chat session initialized with %d seed turn(s)", len(history))
        return handle

    def ensure_active(self) -> ChatHandle:
        """Return the active context, bootstrapping an empty one if needed."""
        if self._active is None:
            return self.initialize(())
        return self._active


class TurnDispatcher:
    """Deliver user utterances to the holder's active context."""

    def __init__(
        self,
        holder: SessionHolder,
        policy: RetryPolicy | None = None,
        *,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        on_retry: Callable[[RetryEvent], None] | None = None,
    ) -> None:
        self.holder = holder
        self.policy = policy if policy is not None else RetryPolicy()
        self._sleep = sleep
        self._on_retry = on_retry

    async def dispatch(self, user_text: str) -> str:
        """Send *user_text* and return the model's reply text.

        Rate-limit and overload failures are retried per the policy; the last
        such failure is re-raised unchanged once attempts run out. Any other
        failure is raised immediately. Callers should filter blank input and
        must not run two dispatches against the same holder at once.
        """

        async def _attempt() -> str:
            # Resolve the context on every attempt so a reset between retries
            # is honored.
            handle = self.holder.ensure_active()
            reply = await handle.send_message(user_text)
            return reply.text or ""

        try:
            return await retry_async(
                _attempt,
                policy=self.policy,
                should_retry=is_transient,
                sleep=self._sleep,
                on_retry=self._on_retry,
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log.debug("Dispatch failed: %s: %s", type(exc).__name__, exc)
            raise
