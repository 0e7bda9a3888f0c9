"""Backend implementations."""

from .base import ChatBackend, ChatHandle
from .gemini import GeminiBackend, GeminiChat
from .mock import MockBackend, MockChat
from .models import ChatReply, ChatSettings

__all__ = [
    "ChatBackend",
    "ChatHandle",
    "ChatReply",
    "ChatSettings",
    "GeminiBackend",
    "GeminiChat",
    "MockBackend",
    "MockChat",
]
