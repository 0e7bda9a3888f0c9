"""Exception hierarchy for Parla."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class FailureKind(Enum):
    """Tag attached to backend failures at the adapter boundary."""

    RATE_LIMIT = "rate_limit"
    OVERLOAD = "overload"
    TERMINAL = "terminal"

    @property
    def transient(self) -> bool:
        """Whether a delayed retry is expected to help."""
        return self is not FailureKind.TERMINAL


class ParlaError(Exception):
    """Base exception for all Parla errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(ParlaError):
    """Configuration validation or resolution failed."""


class TranscriptError(ParlaError):
    """A conversation transcript could not be read or parsed."""


class APIError(ParlaError):
    """Backend call failed.

    The backend adapter tags every failure with a ``FailureKind`` so the turn
    dispatcher can decide on retries without inspecting messages.
    """

    default_kind: FailureKind = FailureKind.TERMINAL

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        retryable: bool | None = None,
        status_code: int | None = None,
        retry_after_s: float | None = None,
        provider: str | None = None,
        phase: str | None = None,
        kind: FailureKind | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.kind = kind if kind is not None else self.default_kind
        self.retryable = retryable if retryable is not None else self.kind.transient
        self.status_code = status_code
        self.retry_after_s = retry_after_s
        self.provider = provider
        self.phase = phase


class RateLimitError(APIError):
    """Backend throttled the request (HTTP 429 or exhausted quota)."""

    default_kind = FailureKind.RATE_LIMIT


class OverloadedError(APIError):
    """Backend is temporarily unavailable (HTTP 503)."""

    default_kind = FailureKind.OVERLOAD


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
