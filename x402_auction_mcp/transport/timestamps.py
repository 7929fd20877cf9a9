"""Timestamp helpers for payment expiry countdowns."""

from __future__ import annotations

from datetime import datetime, timezone


class TimestampError(ValueError):
    """Raised when an upstream timestamp is malformed."""


def parse_timestamp(value: str) -> datetime:
    if not value:
        raise TimestampError("timestamp missing")
    try:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        dt = datetime.fromisoformat(value)
    except ValueError as exc:  # pragma: no cover - delegated to datetime
        raise TimestampError("timestamp is not ISO-8601 compatible") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def seconds_until(timestamp: str, *, now: datetime | None = None) -> int:
    """Whole seconds from ``now`` until ``timestamp``, floored at zero."""
    dt = parse_timestamp(timestamp)
    ref = now or datetime.now(timezone.utc)
    return max(int((dt - ref).total_seconds()), 0)
