"""Outcome variants produced by the response classifier.

Each variant is a disjoint dataclass; callers dispatch on the type. Every
variant renders itself to the data-only payload returned to the agent.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from ..errors import is_retryable
from .models import AuctionSnapshot, BidQuote, BidRecord, RecentBidEntry, Urgency

MECHANISM = "dutch_ascending_pay_as_bid"
REFUND_FEE_NOTE = "transaction_fee_deducted"


def _compact(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


@dataclass(frozen=True)
class PaymentDetails:
    recipient: Any
    amount: Any
    comment: str
    deeplink: str | None
    universal_link: str | None
    expires_in_seconds: int | None

    def to_payload(self) -> dict[str, Any]:
        return _compact(
            {
                "required": True,
                "recipient": self.recipient,
                "amount": self.amount,
                "comment": self.comment,
                "comment_required": True,
                "deeplink": self.deeplink,
                "universal_link": self.universal_link,
                "expires_in_seconds": self.expires_in_seconds,
            }
        )


@dataclass(frozen=True)
class PriceComparison:
    locked_price: Any
    current_price: Any
    price_favorable: bool | None


@dataclass(frozen=True)
class AllocationSummary:
    allocated_amount: Any
    refund_amount: Any
    oversubscribed: bool
    full_allocation: bool


@dataclass(frozen=True)
class RefundSummary:
    refund_amount: Any
    note: str = REFUND_FEE_NOTE


@dataclass(frozen=True)
class Snapshot:
    auction: AuctionSnapshot

    def to_payload(self) -> dict[str, Any]:
        auction = self.auction
        return _compact(
            {
                "auction_id": auction.auction_id,
                "status": auction.status,
                "accepting_bids": auction.is_active,
                "mechanism": MECHANISM,
                "start_price": auction.start_price,
                "current_price": auction.current_price,
                "ceiling_price": auction.ceiling_price,
                "tick_size": auction.tick_size,
                "min_bid": auction.min_bid,
                "max_bid": auction.max_bid,
                "target_raised": auction.target_raised,
                "total_raised": auction.total_raised,
                "progress_percent": auction.progress_percent,
                "supply": auction.supply,
                "tokens_per_unit": auction.tokens_per_unit,
                "started_at": auction.started_at,
            }
        )


@dataclass(frozen=True)
class PaymentRequired:
    quote: BidQuote
    urgency: Urgency
    payment: PaymentDetails
    state: str = "payment_required"

    def to_payload(self) -> dict[str, Any]:
        quote = self.quote
        payload: dict[str, Any] = {
            "status": self.state,
            "action_required": "payment",
            "urgency": self.urgency.value,
            "next_step": "send_payment",
            "bid": _compact(
                {
                    "bid_id": quote.bid_id,
                    "amount": quote.amount_requested,
                    "locked_price": quote.locked_price,
                    "estimated_allocation": quote.estimated_allocation,
                    "expires_at": quote.expires_at,
                    "seconds_remaining": quote.seconds_remaining,
                }
            ),
            "payment": self.payment.to_payload(),
        }
        auction = _compact({"auction_id": quote.auction_id, "current_price": quote.locked_price})
        if quote.auction_id is not None:
            auction["mechanism"] = MECHANISM
            payload["auction"] = auction
        return payload


_EXISTING_BID_ACTIONS = {
    "pending": ("payment", "send_payment"),
    "completed": ("wait", "wait_for_allocation"),
    "allocated": ("none", "check_wallet"),
    "refunded": ("none", "check_wallet"),
    "expired": ("create_new_bid", "create_new_bid"),
}


@dataclass(frozen=True)
class ExistingBid:
    record: BidRecord
    urgency: Urgency | None = None
    payment: PaymentDetails | None = None
    comparison: PriceComparison | None = None
    allocation: AllocationSummary | None = None
    refund: RefundSummary | None = None

    def to_payload(self) -> dict[str, Any]:
        record = self.record
        status = record.bid_status.value
        action_required, next_step = _EXISTING_BID_ACTIONS[status]
        payload: dict[str, Any] = {
            "status": status,
            "action_required": action_required,
            "next_step": next_step,
            "bid": _compact(
                {
                    "bid_id": record.bid_id,
                    "wallet": record.wallet,
                    "amount": record.amount,
                    "locked_price": record.locked_price,
                    "tx_hash": record.tx_hash,
                    "created_at": record.created_at,
                }
            ),
        }
        if self.urgency is not None:
            payload["urgency"] = self.urgency.value
        if self.payment is not None:
            payload["payment"] = self.payment.to_payload()
        if self.comparison is not None:
            payload["price_comparison"] = {
                "locked_price": self.comparison.locked_price,
                "current_price": self.comparison.current_price,
                "price_favorable": self.comparison.price_favorable,
            }
        if self.allocation is not None:
            payload["allocation"] = {
                "success": True,
                "allocated_amount": self.allocation.allocated_amount,
                "refund_amount": self.allocation.refund_amount,
                "oversubscribed": self.allocation.oversubscribed,
                "full_allocation": self.allocation.full_allocation,
                "pricing_model": "pay_as_bid",
            }
        if self.refund is not None:
            payload["refund"] = {
                "processed": True,
                "refund_amount": self.refund.refund_amount,
                "transaction_fee_deducted": True,
                "note": self.refund.note,
            }
        return payload


@dataclass(frozen=True)
class UnknownStatus:
    """A bid record whose status this adapter does not recognise yet."""

    record: BidRecord

    def to_payload(self) -> dict[str, Any]:
        return {
            "status": self.record.status,
            "recognized_status": False,
            "action_required": "none",
            "next_step": "check_bid_status",
            "bid": dict(self.record.raw),
        }


@dataclass(frozen=True)
class NoBid:
    wallet: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "status": "no_bid",
            "wallet": self.wallet,
            "has_bid": False,
            "action_required": "none",
            "next_step": "create_auction_bid",
        }


@dataclass(frozen=True)
class BidList:
    entries: tuple[RecentBidEntry, ...]
    current_price: Any

    def to_payload(self) -> dict[str, Any]:
        return {
            "bids": [
                _compact(
                    {
                        "bidder": entry.bidder_display,
                        "amount": entry.amount,
                        "locked_price": entry.locked_price,
                        "time": entry.timestamp,
                        "status": entry.status,
                    }
                )
                for entry in self.entries
            ],
            "count": len(self.entries),
            "current_price": self.current_price,
        }


class ErrorKind(str, Enum):
    NO_AUCTION = "no_auction"
    INVALID_AMOUNT = "invalid_amount"
    AUCTION_CLOSED = "auction_closed"
    BID_NOT_FOUND = "bid_not_found"
    UPSTREAM = "upstream"


_ACTION_HINTS = {
    "no_auction": "check_auction_status",
    "no_active_auction": "check_auction_status",
    "auction_closed": "check_auction_status",
    "invalid_amount": "adjust_amount",
    "bid_not_found": "verify_bid_id",
}


@dataclass(frozen=True)
class DomainError:
    """A well-formed error answer from the auction API."""

    kind: ErrorKind
    status: int
    error_code: str
    message: str
    details: Any = None
    final_price: Any = None
    closed_at: Any = None

    @property
    def retryable(self) -> bool:
        return is_retryable(self.status)

    @property
    def action_required(self) -> str | None:
        return _ACTION_HINTS.get(self.error_code)

    def to_payload(self) -> dict[str, Any]:
        return _compact(
            {
                "error": self.error_code,
                "message": self.message,
                "code": self.status,
                "retryable": self.retryable,
                "action_required": self.action_required,
                "final_price": self.final_price,
                "closed_at": self.closed_at,
                "details": self.details or None,
            }
        )


Outcome = Union[
    Snapshot,
    PaymentRequired,
    ExistingBid,
    UnknownStatus,
    NoBid,
    BidList,
    DomainError,
]
