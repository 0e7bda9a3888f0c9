"""Small HTTP-related constants shared across Parla.

This module is intentionally tiny to avoid circular imports and drift.
"""

from __future__ import annotations

RATE_LIMIT_STATUS = 429
OVERLOAD_STATUS = 503

# Message fragments that identify a transient failure when no status code
# survives the SDK's exception wrapping.
RATE_LIMIT_MARKERS: tuple[str, ...] = ("429", "quota", "RESOURCE_EXHAUSTED")
OVERLOAD_MARKERS: tuple[str, ...] = ("503",)
