"""Configuration: frozen Config resolved from arguments and the environment."""

from __future__ import annotations

from dataclasses import dataclass, field
import os

from dotenv import load_dotenv

from parla.errors import ConfigurationError
from parla.persona import SYSTEM_INSTRUCTION
from parla.providers.models import ChatSettings
from parla.retry import RetryPolicy

load_dotenv()

DEFAULT_MODEL = "gemini-2.5-flash"

# Checked in order when no api_key is passed.
_API_KEY_ENV_VARS: tuple[str, ...] = ("GEMINI_API_KEY", "GOOGLE_API_KEY")


@dataclass(frozen=True)
class Config:
    """Immutable configuration for a Parla conversation.

    The API key is auto-resolved from ``GEMINI_API_KEY`` (then
    ``GOOGLE_API_KEY``) when not given.

    Example:
        config = Config()
        holder, dispatcher = create_session(config)
    """

    model: str = DEFAULT_MODEL
    api_key: str | None = None
    use_mock: bool = False
    system_instruction: str = SYSTEM_INSTRUCTION
    #: Slightly creative, natural replies.
    temperature: float = 0.7
    top_k: int = 40
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    def __post_init__(self) -> None:
        """Auto-resolve API key and validate configuration."""
        if not self.model:
            raise ConfigurationError(
                "model must be a non-empty string",
                hint=f"For example Config(model={DEFAULT_MODEL!r}).",
            )
        if not 0.0 <= self.temperature <= 2.0:
            raise ConfigurationError(
                f"temperature must be within [0, 2], got {self.temperature}",
                hint="Lower values make replies more predictable.",
            )
        if self.top_k < 1:
            raise ConfigurationError(
                f"top_k must be ≥ 1, got {self.top_k}",
                hint="This caps how many candidate tokens are sampled from.",
            )

        if self.api_key is None and not self.use_mock:
            for env_var in _API_KEY_ENV_VARS:
                resolved_key = os.environ.get(env_var)
                if resolved_key:
                    object.__setattr__(self, "api_key", resolved_key)
                    break

        if not self.use_mock and not self.api_key:
            raise ConfigurationError(
                "API key required for gemini",
                hint="Set GEMINI_API_KEY environment variable or pass api_key=...",
            )

    def settings(self) -> ChatSettings:
        """Return the fixed chat settings every session is created with."""
        return ChatSettings(
            model=self.model,
            system_instruction=self.system_instruction,
            temperature=self.temperature,
            top_k=self.top_k,
        )

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"Config(model={self.model!r}, "
            f"api_key={'[REDACTED]' if self.api_key else None}, use_mock={self.use_mock}, "
            f"temperature={self.temperature}, top_k={self.top_k})"
        )

    __repr__ = __str__
