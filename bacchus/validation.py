"""Boundary checks and time helpers shared by the engine."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

from bacchus.errors import InvalidInput


def to_float(value: Any, name: str) -> float:
    """Parse a finite number or raise InvalidInput."""
    if isinstance(value, bool):
        raise InvalidInput(f"{name} must be a number")
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{name} must be a number") from None
    if not math.isfinite(parsed):
        raise InvalidInput(f"{name} must be finite")
    return parsed


def parse_timestamp(value: Any, name: str = "timestamp") -> datetime:
    """Return a timezone-aware datetime. Naive values and strings are read as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        # Python < 3.11 fromisoformat does not take a trailing Z.
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidInput(f"{name} is not an ISO-8601 timestamp: {value!r}") from None
    else:
        raise InvalidInput(f"{name} must be a datetime or ISO-8601 string")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def hours_between(start: datetime, end: datetime) -> float:
    """Signed hours from start to end."""
    return (end - start).total_seconds() / 3600.0


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
