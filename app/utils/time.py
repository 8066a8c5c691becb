"""Utility functions for time handling.

All timestamps are timezone-aware. Services never call ``datetime.now()``
directly; they ask an injected :class:`Clock` so that tests (and the
scheduler CLI) can control time deterministically.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class Clock(Protocol):
    """Anything that can tell the current aware time."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in a fixed IANA timezone."""

    def __init__(self, tz: str = "UTC") -> None:
        try:
            self.tz = ZoneInfo(tz)
        except ZoneInfoNotFoundError:
            from app.domain.exceptions import ConfigurationError

            raise ConfigurationError(f"Unknown timezone: {tz}") from None

    def now(self) -> datetime:
        return datetime.now(self.tz)


def utc_now() -> datetime:
    """Return current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def iso_now(*, timespec: str | None = None) -> str:
    """Return current UTC time as an ISO8601 string (timezone-aware)."""
    now = utc_now()
    if timespec:
        return now.isoformat(timespec=timespec)
    return now.isoformat()


def iso_or_none(value: datetime | None) -> str | None:
    """Render an optional datetime for ``to_dict`` payloads."""
    return value.isoformat() if value else None


def parse_hhmm(value: str) -> tuple[int, int]:
    """Split an ``HH:MM`` string into (hour, minute)."""
    hour, minute = value.split(":")
    return int(hour), int(minute)


def coerce_datetime(value: Any) -> datetime | None:
    """
    Coerce value to datetime, returning None on failure.

    Args:
        value: String or datetime to coerce

    Returns:
        Datetime in timezone.utc or None if invalid
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw.replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    else:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed
