"""Caller-side chat: the visible turn log around a session.

The session manager never touches this log. ``Chat`` appends the user turn
before dispatching and the model turn (or a persona-styled failure reply)
afterwards, the way a chat UI would.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from parla import transcript
from parla.errors import FailureKind, ParlaError
from parla.persona import FALLBACK_REPLY, QUOTA_REPLY, WELCOME_MESSAGE
from parla.turns import Turn

if TYPE_CHECKING:
    import os

    from parla.session import SessionHolder, TurnDispatcher

log = logging.getLogger(__name__)


def failure_reply(exc: BaseException) -> str:
    """Pick the persona reply for a failed dispatch."""
    if getattr(exc, "kind", None) is FailureKind.RATE_LIMIT:
        return QUOTA_REPLY
    return FALLBACK_REPLY


class Chat:
    """A single conversation as the user sees it."""

    def __init__(self, holder: SessionHolder, dispatcher: TurnDispatcher) -> None:
        self.holder = holder
        self.dispatcher = dispatcher
        self._turns: list[Turn] = []
        self._busy = False

    @property
    def turns(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    @property
    def busy(self) -> bool:
        return self._busy

    def start(self) -> None:
        """Reset to an empty session and show the welcome message.

        The welcome turn is display-only and is not seeded into the backend.
        """
        self.holder.initialize(())
        self._turns = [Turn.model(WELCOME_MESSAGE)]

    clear = start

    async def send(self, text: str) -> Turn | None:
        """Send user text and return the model turn that was appended.

        Returns None without side effects for blank input or while a previous
        send is still pending.
        """
        text = text.strip()
        if not text or self._busy:
            return None

        self._turns.append(Turn.user(text))
        self._busy = True
        try:
            reply = await self.dispatcher.dispatch(text)
            turn = Turn.model(reply)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log.error("Failed to get a reply: %s", exc)
            if isinstance(exc, ParlaError) and exc.hint:
                log.info("Hint: %s", exc.hint)
            turn = Turn.model(failure_reply(exc))
        finally:
            self._busy = False
        self._turns.append(turn)
        return turn

    def export(self, path: str | os.PathLike[str] | None = None) -> Path:
        """Write the visible log as a transcript file and return its path."""
        target = Path(path) if path is not None else Path(transcript.default_filename())
        return transcript.save(target, self._turns)

    def load(self, path: str | os.PathLike[str]) -> None:
        """Replace the log with a transcript and reseed the session with it."""
        turns = transcript.load(path)
        self._turns = list(turns)
        self.holder.initialize(turns)
