"""Process-wide cache of rate-limit "calm" tokens, one per endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable


@dataclass
class _CalmToken:
    value: str
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CalmTokenCache:
    """Stores the token issued with a 420 answer until it expires.

    Freshness is checked on every read; an expired token is evicted and
    never replayed.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._tokens: dict[str, _CalmToken] = {}

    def get(self, endpoint: str) -> str | None:
        entry = self._tokens.get(endpoint)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._tokens[endpoint]
            return None
        return entry.value

    def store(self, endpoint: str, token: str, expires_in_seconds: float) -> None:
        if not token or expires_in_seconds <= 0:
            return
        expires_at = self._clock() + timedelta(seconds=expires_in_seconds)
        self._tokens[endpoint] = _CalmToken(token, expires_at)
