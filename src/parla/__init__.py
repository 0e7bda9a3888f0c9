"""Parla: a persistent multi-turn persona chat on top of Gemini.

Public API:
    - create_session(): Wire a SessionHolder and TurnDispatcher from a Config
    - create_chat(): Same, wrapped in a caller-side Chat with a visible log
    - SessionHolder / TurnDispatcher: The conversation session manager
    - Config: Configuration dataclass
    - Turn: One message in a conversation
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from parla.chat import Chat
from parla.config import Config
from parla.errors import (
    APIError,
    ConfigurationError,
    FailureKind,
    OverloadedError,
    ParlaError,
    RateLimitError,
    TranscriptError,
)
from parla.retry import RetryEvent, RetryPolicy
from parla.session import SessionHolder, TurnDispatcher
from parla.turns import Turn

if TYPE_CHECKING:
    from collections.abc import Callable

    from parla.providers.base import ChatBackend

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("parla")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("parla").addHandler(logging.NullHandler())


def create_session(
    config: Config,
    *,
    backend: ChatBackend | None = None,
    on_retry: Callable[[RetryEvent], None] | None = None,
) -> tuple[SessionHolder, TurnDispatcher]:
    """Build a session holder and a dispatcher bound to it.

    No chat context is created yet: call ``holder.initialize(history)`` or let
    the first dispatch bootstrap an empty one.

    Example:
        holder, dispatcher = create_session(Config())
        reply = await dispatcher.dispatch("Ciao")
    """
    holder = SessionHolder(backend or _get_backend(config), config.settings())
    dispatcher = TurnDispatcher(holder, config.retry, on_retry=on_retry)
    return holder, dispatcher


def create_chat(config: Config, *, backend: ChatBackend | None = None) -> Chat:
    """Build a started Chat (empty session plus welcome message)."""
    holder, dispatcher = create_session(config, backend=backend)
    chat = Chat(holder, dispatcher)
    chat.start()
    return chat


def _get_backend(config: Config) -> ChatBackend:
    """Get the appropriate backend based on configuration."""
    if config.use_mock:
        from parla.providers.mock import MockBackend

        return MockBackend()

    from parla.providers.gemini import GeminiBackend

    if not config.api_key:
        raise ConfigurationError(
            "api_key required for real API",
            hint="Set GEMINI_API_KEY or pass Config(api_key=...).",
        )
    return GeminiBackend(config.api_key)


__all__ = [
    "APIError",
    "Chat",
    "Config",
    "ConfigurationError",
    "FailureKind",
    "OverloadedError",
    "ParlaError",
    "RateLimitError",
    "RetryEvent",
    "RetryPolicy",
    "SessionHolder",
    "TranscriptError",
    "Turn",
    "TurnDispatcher",
    "create_chat",
    "create_session",
]
