"""Shared backend-side error helpers.

Adapters tag failures via ``APIError.kind`` so the turn dispatcher can retry
transient failures without looking at messages itself. This module is the one
place where status codes and message fragments are inspected.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any

import httpx

from parla._http import (
    OVERLOAD_MARKERS,
    OVERLOAD_STATUS,
    RATE_LIMIT_MARKERS,
    RATE_LIMIT_STATUS,
)
from parla.errors import (
    APIError,
    FailureKind,
    OverloadedError,
    RateLimitError,
    _walk_exception_chain,
)


def extract_status_code(exc: BaseException) -> int | None:
    """Walk the exception chain to find an HTTP status code."""
    for e in _walk_exception_chain(exc):
        # google-genai exposes the HTTP status as ``code`` and the gRPC-style
        # status name as ``status``; other clients use ``status_code``.
        for attr in ("status_code", "code", "status"):
            value = getattr(e, attr, None)
            if isinstance(value, int) and 100 <= value <= 599:
                return value
        response = getattr(e, "response", None)
        value = getattr(response, "status_code", None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
    return None


def _error_texts(exc: BaseException) -> list[str]:
    texts: list[str] = []
    for e in _walk_exception_chain(exc):
        texts.append(str(e))
        for attr in ("message", "status"):
            value = getattr(e, attr, None)
            if isinstance(value, str) and value:
                texts.append(value)
    return texts


def classify_failure(exc: BaseException) -> FailureKind:
    """Tag a raw backend exception as rate limit, overload or terminal."""
    status_code = extract_status_code(exc)
    texts = _error_texts(exc)

    if status_code == RATE_LIMIT_STATUS or any(
        marker in text for text in texts for marker in RATE_LIMIT_MARKERS
    ):
        return FailureKind.RATE_LIMIT
    if status_code == OVERLOAD_STATUS or any(
        marker in text for text in texts for marker in OVERLOAD_MARKERS
    ):
        return FailureKind.OVERLOAD
    return FailureKind.TERMINAL


_PROTO_DURATION_RE = re.compile(r"^(\d+(?:\.\d+)?)s$")


def _extract_retry_info_seconds(exc: BaseException) -> float | None:
    """Extract retry delay from Google API-style RetryInfo in error details.

    Gemini SDK ``ClientError`` exposes the parsed JSON body via a ``.details``
    attribute shaped like::

        {"error": {"details": [{"@type": "...RetryInfo", "retryDelay": "8s"}]}}
    """
    details: Any = getattr(exc, "details", None)
    if not isinstance(details, dict):
        return None
    error: Any = details.get("error")
    if not isinstance(error, dict):
        return None
    detail_list: Any = error.get("details")
    if not isinstance(detail_list, list):
        return None
    for entry in detail_list:
        if not isinstance(entry, dict):
            continue
        at_type = entry.get("@type", "")
        if not isinstance(at_type, str) or "RetryInfo" not in at_type:
            continue
        delay_raw = entry.get("retryDelay")
        if not isinstance(delay_raw, str):
            continue
        m = _PROTO_DURATION_RE.match(delay_raw)
        if m:
            return float(m.group(1))
    return None


def extract_retry_after_s(exc: BaseException) -> float | None:
    """Walk the exception chain to find a backend-suggested delay in seconds.

    Recorded on the error for callers; the dispatcher's schedule ignores it.
    """
    for e in _walk_exception_chain(exc):
        value = getattr(e, "retry_after", None)
        if isinstance(value, (int, float)) and value >= 0:
            return float(value)

        response = getattr(e, "response", None)
        headers: Any = getattr(response, "headers", None)
        if headers is not None:
            raw: Any = None
            try:
                raw = headers.get("Retry-After")
            except Exception:
                raw = None
            if isinstance(raw, str) and raw.strip():
                try:
                    seconds = float(raw)
                except ValueError:
                    seconds = -1.0
                if seconds >= 0:
                    return seconds

        retry_info = _extract_retry_info_seconds(e)
        if retry_info is not None:
            return retry_info
    return None


def _derive_hint(status_code: int | None, exc: BaseException) -> str | None:
    cause_lower = str(exc).lower()
    if status_code in {401, 403} or (
        status_code == 400 and ("api key" in cause_lower or "api_key" in cause_lower)
    ):
        return "Check credentials/permissions (try setting GEMINI_API_KEY or Config.api_key)."
    for e in _walk_exception_chain(exc):
        if isinstance(e, (httpx.TimeoutException, httpx.RequestError)):
            return "Could not reach the Gemini API; check your network connection."
    return None


def wrap_provider_error(
    exc: BaseException,
    *,
    provider: str,
    phase: str,
    message: str | None = None,
    hint: str | None = None,
) -> APIError:
    """Map backend SDK exceptions into a tagged APIError."""
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    # Already wrapped: fill in missing context only.
    if isinstance(exc, APIError):
        if exc.provider is None:
            exc.provider = provider
        if exc.phase is None:
            exc.phase = phase
        if hint is not None and exc.hint is None:
            exc.hint = hint
        return exc

    status_code = extract_status_code(exc)
    kind = classify_failure(exc)

    err_cls: type[APIError] = APIError
    if kind is FailureKind.RATE_LIMIT:
        err_cls = RateLimitError
    elif kind is FailureKind.OVERLOAD:
        err_cls = OverloadedError

    msg = message or f"{provider} {phase} failed"
    status_note = f" (status={status_code})" if isinstance(status_code, int) else ""
    cause = str(exc)
    return err_cls(
        f"{msg}{status_note}: {cause}" if cause else f"{msg}{status_note}",
        hint=hint if hint is not None else _derive_hint(status_code, exc),
        status_code=status_code,
        retry_after_s=extract_retry_after_s(exc),
        provider=provider,
        phase=phase,
        kind=kind,
    )
