"""Retry combinator tests.

All waits go through FakeSleep; nothing here touches the wall clock.
"""

from __future__ import annotations

import asyncio
import logging

import pytest

from parla.retry import (
    RetryEvent,
    RetryPolicy,
    backoff_delays,
    is_transient,
    retry_async,
)
from tests.helpers import FakeSleep, overloaded, rate_limited, terminal

pytestmark = pytest.mark.unit


def _factory(script: list[object]):
    calls = {"n": 0}

    async def _call() -> str:
        calls["n"] += 1
        item = script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return str(item)

    return _call, calls


# =============================================================================
# Policy
# =============================================================================


def test_default_policy_schedule_is_1_2_4_seconds() -> None:
    policy = RetryPolicy()
    assert policy.max_attempts == 4
    assert policy.max_retries == 3
    assert list(backoff_delays(policy)) == [1.0, 2.0, 4.0]


def test_max_delay_caps_schedule() -> None:
    policy = RetryPolicy(max_attempts=5, max_delay_s=3.0)
    assert list(backoff_delays(policy)) == [1.0, 2.0, 3.0, 3.0]


def test_jitter_stays_within_base(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("parla.retry.random.random", lambda: 0.5)
    policy = RetryPolicy(jitter=True)
    assert list(backoff_delays(policy)) == [0.5, 1.0, 2.0]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_attempts": 0},
        {"initial_delay_s": -1.0},
        {"backoff_multiplier": 0.0},
        {"max_delay_s": -0.5},
    ],
)
def test_policy_rejects_invalid_values(kwargs: dict[str, float]) -> None:
    with pytest.raises(ValueError, match="RetryPolicy"):
        RetryPolicy(**kwargs)


# =============================================================================
# Classification
# =============================================================================


def test_is_transient_only_for_tagged_transient_errors() -> None:
    assert is_transient(rate_limited())
    assert is_transient(overloaded())
    assert not is_transient(terminal())
    assert not is_transient(RuntimeError("429 quota RESOURCE_EXHAUSTED"))
    assert not is_transient(asyncio.CancelledError())


# =============================================================================
# retry_async
# =============================================================================


@pytest.mark.asyncio
async def test_success_on_first_attempt_never_sleeps() -> None:
    sleep = FakeSleep()
    factory, calls = _factory(["hello"])

    result = await retry_async(factory, policy=RetryPolicy(), sleep=sleep)

    assert result == "hello"
    assert calls["n"] == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_transient_failures_then_success() -> None:
    sleep = FakeSleep()
    factory, calls = _factory([rate_limited(), overloaded(), rate_limited(), "done"])

    result = await retry_async(factory, policy=RetryPolicy(), sleep=sleep)

    assert result == "done"
    assert calls["n"] == 4
    assert sleep.delays == [1.0, 2.0, 4.0]


@pytest.mark.asyncio
async def test_exhausted_retries_reraise_last_error_unchanged() -> None:
    sleep = FakeSleep()
    errors = [rate_limited(f"quota #{i}") for i in range(4)]
    factory, calls = _factory(list(errors))

    with pytest.raises(type(errors[-1])) as exc:
        await retry_async(factory, policy=RetryPolicy(), sleep=sleep)

    assert exc.value is errors[-1]
    assert calls["n"] == 4
    assert sleep.delays == [1.0, 2.0, 4.0]


@pytest.mark.asyncio
async def test_terminal_error_is_raised_immediately() -> None:
    sleep = FakeSleep()
    err = terminal()
    factory, calls = _factory([err, "never"])

    with pytest.raises(type(err)) as exc:
        await retry_async(factory, policy=RetryPolicy(), sleep=sleep)

    assert exc.value is err
    assert calls["n"] == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_terminal_after_transient_stops_retrying() -> None:
    sleep = FakeSleep()
    err = terminal("permission denied", status_code=403)
    factory, calls = _factory([overloaded(), err, "never"])

    with pytest.raises(type(err)) as exc:
        await retry_async(factory, policy=RetryPolicy(), sleep=sleep)

    assert exc.value is err
    assert calls["n"] == 2
    assert sleep.delays == [1.0]


@pytest.mark.asyncio
async def test_on_retry_reports_each_scheduled_retry(
    caplog: pytest.LogCaptureFixture,
) -> None:
    sleep = FakeSleep()
    events: list[RetryEvent] = []
    first, second = rate_limited(), overloaded()
    factory, _ = _factory([first, second, "ok"])

    with caplog.at_level(logging.WARNING, logger="parla.retry"):
        await retry_async(
            factory, policy=RetryPolicy(), sleep=sleep, on_retry=events.append
        )

    assert [(e.attempt, e.delay_s) for e in events] == [(1, 1.0), (2, 2.0)]
    assert events[0].error is first
    assert events[1].error is second
    assert "retrying in 1000ms" in caplog.text
    assert "status=503" in caplog.text


@pytest.mark.asyncio
async def test_failing_on_retry_observer_does_not_abort_retries(
    caplog: pytest.LogCaptureFixture,
) -> None:
    sleep = FakeSleep()
    factory, calls = _factory([rate_limited(), "ok"])

    def _broken(event: RetryEvent) -> None:
        raise RuntimeError("observer down")

    with caplog.at_level(logging.ERROR, logger="parla.retry"):
        result = await retry_async(
            factory, policy=RetryPolicy(), sleep=sleep, on_retry=_broken
        )

    assert result == "ok"
    assert calls["n"] == 2
    assert sleep.delays == [1.0]
    assert "on_retry observer failed" in caplog.text


@pytest.mark.asyncio
async def test_single_attempt_policy_never_retries() -> None:
    sleep = FakeSleep()
    err = rate_limited()
    factory, calls = _factory([err])

    with pytest.raises(type(err)):
        await retry_async(factory, policy=RetryPolicy(max_attempts=1), sleep=sleep)

    assert calls["n"] == 1
    assert sleep.delays == []
