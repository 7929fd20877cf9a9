"""Pure checks applied to tool arguments before any request is issued."""

from __future__ import annotations

import math
import re
from numbers import Real
from typing import Any

from ..errors import InvalidInput

MIN_BID = 1
MAX_BID = 100
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _is_finite(value: Real) -> bool:
    # isfinite converts to float, which overflows for very large integers.
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def validate_amount(amount: Any, *, minimum: float = MIN_BID, maximum: float = MAX_BID) -> float:
    if not _is_number(amount) or not _is_finite(amount):
        raise InvalidInput("Bid amount must be a valid number", field="amount")
    if amount < minimum or amount > maximum:
        raise InvalidInput(
            f"Bid amount must be between {minimum:g} and {maximum:g}", field="amount"
        )
    return amount


def _require_text(value: Any, message: str, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(message, field=field)
    return value.strip()


def validate_wallet(wallet: Any, *, pattern: str | None = None) -> str:
    """Return the trimmed wallet; ``pattern`` switches on strict format checking."""
    value = _require_text(wallet, "Valid wallet address is required", "wallet")
    if pattern and not re.fullmatch(pattern, value):
        raise InvalidInput("Wallet address format is not recognised", field="wallet")
    return value


def validate_bid_id(bid_id: Any) -> str:
    return _require_text(bid_id, "Valid bid ID is required", "bid_id")


def clamp_limit(limit: Any, *, default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT) -> int:
    if limit is None or not _is_number(limit) or not limit > 0:
        return default
    return max(int(min(limit, maximum)), 1)
