"""Minimal async retry with explicit error contracts.

Design goals:
- Small API surface
- Explicit state (policy + attempt counters)
- No substring matching for retry decisions: adapters tag failures first
- Injectable sleep so tests never wait on the wall clock
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import random
from typing import TYPE_CHECKING, TypeVar

from parla.errors import APIError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterator

T = TypeVar("T")

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry policy with exponential backoff.

    The defaults give four attempts with 1s, 2s and 4s between them.
    """

    max_attempts: int = 4
    initial_delay_s: float = 1.0
    backoff_multiplier: float = 2.0
    max_delay_s: float | None = None
    jitter: bool = False  # "full jitter" when enabled

    def __post_init__(self) -> None:
        """Validate invariants to keep retry behavior predictable."""
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy.max_attempts must be >= 1")
        if self.initial_delay_s < 0:
            raise ValueError("RetryPolicy.initial_delay_s must be >= 0")
        if self.backoff_multiplier <= 0:
            raise ValueError("RetryPolicy.backoff_multiplier must be > 0")
        if self.max_delay_s is not None and self.max_delay_s < 0:
            raise ValueError("RetryPolicy.max_delay_s must be >= 0 or None")

    @property
    def max_retries(self) -> int:
        """Number of retries after the first attempt."""
        return self.max_attempts - 1


@dataclass(frozen=True)
class RetryEvent:
    """A scheduled retry, reported to observers before the wait starts."""

    attempt: int  # 1-based number of the attempt that failed
    delay_s: float
    error: BaseException


def is_transient(exc: BaseException) -> bool:
    """Return True when *exc* is a backend failure tagged as transient.

    Contract:
    - Cancellation is never retried.
    - Only APIError carries a transient tag; anything else is terminal.
    """
    if isinstance(exc, asyncio.CancelledError):
        return False
    if isinstance(exc, APIError):
        return exc.kind.transient
    return False


def _compute_backoff_delay(policy: RetryPolicy, *, retry_index: int) -> float:
    # retry_index starts at 1 for the first retry sleep.
    base = policy.initial_delay_s * (
        policy.backoff_multiplier ** max(0, retry_index - 1)
    )
    if policy.max_delay_s is not None:
        base = min(policy.max_delay_s, base)
    if base <= 0:
        return 0.0
    if not policy.jitter:
        return base
    # Full jitter: random in [0, base] to avoid thundering herd.
    return random.random() * base  # noqa: S311


def backoff_delays(policy: RetryPolicy) -> Iterator[float]:
    """Yield the delay slept before each retry the policy allows."""
    for retry_index in range(1, policy.max_attempts):
        yield _compute_backoff_delay(policy, retry_index=retry_index)


async def retry_async(
    factory: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    should_retry: Callable[[BaseException], bool] = is_transient,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    on_retry: Callable[[RetryEvent], None] | None = None,
) -> T:
    """Run an async factory with bounded retries.

    The final exception is re-raised unchanged, whether it was terminal or the
    last of a run of transient failures.
    """
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await factory()
        except Exception as exc:
            if not should_retry(exc) or attempt >= policy.max_attempts:
                raise

            delay = _compute_backoff_delay(policy, retry_index=attempt)
            log.warning(
                "Attempt %d/%d failed (status=%s); retrying in %.0fms",
                attempt,
                policy.max_attempts,
                getattr(exc, "status_code", None),
                delay * 1000,
            )
            if on_retry is not None:
                # Observers are advisory; a failing one must not end the retry loop.
                try:
                    on_retry(RetryEvent(attempt=attempt, delay_s=delay, error=exc))
                except Exception:
                    log.exception("on_retry observer failed")
            if delay > 0:
                await sleep(delay)

    # Loop always returns or raises.
    raise RuntimeError("retry_async exhausted without an exception")  # pragma: no cover
