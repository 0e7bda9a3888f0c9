"""Gemini chat backend implementation."""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import TYPE_CHECKING, Any

from parla.errors import APIError
from parla.providers._errors import wrap_provider_error
from parla.providers.models import ChatReply, ChatSettings

if TYPE_CHECKING:
    from parla.turns import Content

log = logging.getLogger(__name__)


class GeminiChat:
    """One stateful Gemini chat context.

    The SDK chat object keeps the conversation memory and only records an
    exchange once the model has replied successfully, so failed sends leave
    the memory untouched.
    """

    def __init__(self, chat: Any, *, seed_history: list[Content]) -> None:
        self._chat = chat
        self._seed_history = seed_history

    @property
    def seed_history(self) -> list[Content]:
        """The contents this chat was created with."""
        return copy.deepcopy(self._seed_history)

    async def send_message(self, text: str) -> ChatReply:
        """Send one message through the SDK chat."""
        try:
            response = await self._chat.send_message(text)
            if response is None:
                return ChatReply()
            return _parse_response(response)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider="gemini",
                phase="send",
                message="Gemini send failed",
            ) from e


class GeminiBackend:
    """Google Gemini chat backend."""

    def __init__(self, api_key: str) -> None:
        """Create backend with an API key."""
        self.api_key = api_key
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazy-initialize the Gemini client."""
        if self._client is None:
            try:
                from google import genai
            except ImportError as e:
                raise APIError(
                    "google-genai package not installed",
                    hint="pip install google-genai",
                ) from e

            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def create_chat(
        self, settings: ChatSettings, *, history: list[Content]
    ) -> GeminiChat:
        """Create a chat context seeded with *history*.

        Chat creation is local to the SDK; nothing goes over the network until
        the first message is sent.
        """
        client = self._get_client()
        from google.genai import types

        config_kwargs: dict[str, Any] = {}
        if settings.system_instruction is not None:
            config_kwargs["system_instruction"] = settings.system_instruction
        if settings.temperature is not None:
            config_kwargs["temperature"] = settings.temperature
        if settings.top_k is not None:
            config_kwargs["top_k"] = settings.top_k

        seed = copy.deepcopy(history)
        contents = [
            types.Content(
                role=item["role"],
                parts=[types.Part.from_text(text=p["text"]) for p in item["parts"]],
            )
            for item in seed
        ]
        chat = client.aio.chats.create(
            model=settings.model,
            config=types.GenerateContentConfig(**config_kwargs),
            history=contents,
        )
        log.debug("Created Gemini chat model=%s seed_turns=%d", settings.model, len(seed))
        return GeminiChat(chat, seed_history=seed)


def _parse_response(response: Any) -> ChatReply:
    """Parse a Gemini response into a ChatReply; missing text becomes ""."""
    text = ""
    try:
        if hasattr(response, "text"):
            text = response.text or ""
    except Exception:
        # The SDK raises from .text on some blocked or partial candidates.
        text = ""

    usage: dict[str, int] = {}
    um = getattr(response, "usage_metadata", None)
    if um is not None:
        # Gemini SDK attrs → backend-agnostic keys
        for key, attr in (
            ("input_tokens", "prompt_token_count"),
            ("output_tokens", "candidates_token_count"),
            ("total_tokens", "total_token_count"),
        ):
            value = getattr(um, attr, None)
            if isinstance(value, int):
                usage[key] = value

    return ChatReply(text=text if isinstance(text, str) else "", usage=usage)
