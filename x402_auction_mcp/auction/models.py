"""Value objects parsed from auction API payloads.

Prices and amounts are carried exactly as the API sent them (usually decimal
strings) so that nothing is reformatted for a locale or rounded through float.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping


class EndpointKind(str, Enum):
    INFO = "info"
    CREATE_BID = "create_bid"
    CHECK_BID = "check_bid"
    MY_BID = "my_bid"
    RECENT_BIDS = "recent_bids"


class AuctionStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"
    FAILED = "failed"


class BidStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    ALLOCATED = "allocated"
    REFUNDED = "refunded"
    EXPIRED = "expired"

    @classmethod
    def parse(cls, value: Any) -> BidStatus | None:
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class Urgency(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    NORMAL = "normal"


def pick(payload: Mapping[str, Any], *keys: str) -> Any:
    """Return the first non-null value among ``keys``."""
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None


def to_decimal(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


@dataclass(frozen=True)
class AuctionSnapshot:
    auction_id: Any
    status: str
    start_price: Any = None
    current_price: Any = None
    ceiling_price: Any = None
    tick_size: Any = None
    min_bid: Any = None
    max_bid: Any = None
    target_raised: Any = None
    total_raised: Any = None
    progress_percent: Any = None
    supply: Any = None
    tokens_per_unit: Any = None
    started_at: Any = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> AuctionSnapshot:
        return cls(
            auction_id=payload.get("auction_id"),
            status=str(payload.get("status") or AuctionStatus.ACTIVE.value),
            start_price=pick(payload, "start_price_ton", "start_price"),
            current_price=pick(payload, "current_price_ton", "current_price"),
            ceiling_price=pick(payload, "ceiling_price_ton", "ceiling_price"),
            tick_size=pick(payload, "tick_size_ton", "tick_size"),
            min_bid=pick(payload, "min_ton", "min_bid"),
            max_bid=pick(payload, "max_ton", "max_bid"),
            target_raised=pick(payload, "target_ton", "target_raised"),
            total_raised=pick(payload, "total_raised_ton", "total_raised"),
            progress_percent=payload.get("progress_percent"),
            supply=pick(payload, "auction_supply_tping", "available_supply", "supply"),
            tokens_per_unit=pick(payload, "tokens_per_ton", "tokens_per_unit"),
            started_at=payload.get("started_at"),
        )

    @property
    def is_active(self) -> bool:
        return self.status == AuctionStatus.ACTIVE.value


@dataclass(frozen=True)
class BidQuote:
    bid_id: str
    amount_requested: Any
    locked_price: Any
    estimated_allocation: Any
    payment_recipient: Any
    expires_at: Any
    seconds_remaining: int | None
    auction_id: Any = None
    universal_link: str | None = None

    @classmethod
    def from_payload(
        cls, payload: Mapping[str, Any], *, seconds_remaining: int | None
    ) -> BidQuote:
        return cls(
            bid_id=str(payload.get("bid_id") or ""),
            amount_requested=pick(payload, "ton_amount", "amount", "maxAmountRequired"),
            locked_price=pick(payload, "current_price_ton", "locked_price", "bid_price_ton", "current_price"),
            estimated_allocation=pick(payload, "estimated_tping", "estimated_token", "estimated_allocation"),
            payment_recipient=pick(payload, "pay_to", "payment_address", "recipient"),
            expires_at=pick(payload, "expires_at", "expiresAt"),
            seconds_remaining=seconds_remaining,
            auction_id=payload.get("auction_id"),
            universal_link=payload.get("tonconnect_universal_link"),
        )

    @property
    def payment_comment(self) -> str:
        return self.bid_id


@dataclass(frozen=True)
class BidRecord:
    bid_id: Any
    wallet: Any
    status: str
    amount: Any = None
    locked_price: Any = None
    current_price: Any = None
    tx_hash: Any = None
    created_at: Any = None
    allocated_amount: Any = None
    refund_amount: Any = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> BidRecord:
        return cls(
            bid_id=payload.get("bid_id"),
            wallet=payload.get("wallet"),
            status=str(payload.get("status") or ""),
            amount=pick(payload, "ton_amount", "amount"),
            locked_price=pick(payload, "bid_price_ton", "locked_price", "price"),
            current_price=pick(payload, "current_price_ton", "current_price"),
            tx_hash=payload.get("tx_hash"),
            created_at=payload.get("created_at"),
            allocated_amount=pick(payload, "allocated_token", "allocated_tping", "allocated_amount"),
            refund_amount=pick(payload, "refund_ton", "refund_amount"),
            raw=dict(payload),
        )

    @property
    def bid_status(self) -> BidStatus | None:
        return BidStatus.parse(self.status)


@dataclass(frozen=True)
class RecentBidEntry:
    bidder_display: Any
    amount: Any
    locked_price: Any
    timestamp: Any
    status: Any

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> RecentBidEntry:
        return cls(
            bidder_display=pick(payload, "bidder", "bidder_display"),
            amount=pick(payload, "amount", "ton_amount"),
            locked_price=pick(payload, "price", "locked_price", "bid_price_ton"),
            timestamp=pick(payload, "time", "timestamp", "created_at"),
            status=payload.get("status"),
        )
