"""Classification of auction API answers into outcome variants.

The API overloads HTTP status codes (402 means "pay now", 404 means "no bid
yet" on one endpoint and "unknown bid id" on another), so every endpoint kind
owns its own status table. Statuses missing from a table become an
``Upstream`` domain error.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Mapping
from urllib.parse import quote

from ..config import PaymentConfig, UrgencyConfig
from ..transport.timestamps import TimestampError, seconds_until
from .models import (
    AuctionSnapshot,
    BidQuote,
    BidRecord,
    BidStatus,
    EndpointKind,
    RecentBidEntry,
    Urgency,
    pick,
    to_decimal,
)
from .outcomes import (
    AllocationSummary,
    BidList,
    DomainError,
    ErrorKind,
    ExistingBid,
    NoBid,
    Outcome,
    PaymentDetails,
    PaymentRequired,
    PriceComparison,
    RefundSummary,
    Snapshot,
    UnknownStatus,
)

logger = logging.getLogger(__name__)

NANO_PER_UNIT = 10**9
DEFAULT_DEEPLINK_BASE = "ton://transfer/"

_Handler = Callable[[int, Mapping[str, Any], Mapping[str, Any]], Outcome]


def urgency_for(seconds_remaining: int | None, *, critical: int = 60, high: int = 300) -> Urgency:
    if seconds_remaining is None:
        return Urgency.NORMAL
    if seconds_remaining < critical:
        return Urgency.CRITICAL
    if seconds_remaining < high:
        return Urgency.HIGH
    return Urgency.NORMAL


def to_nano(amount: Any, nano_per_unit: int = NANO_PER_UNIT) -> int | None:
    """Convert a currency amount to its smallest unit, truncating toward zero."""
    value = to_decimal(amount)
    if value is None or value < 0:
        return None
    return int(value * Decimal(nano_per_unit))


def build_deeplink(
    recipient: Any,
    amount: Any,
    comment: Any,
    *,
    base: str = DEFAULT_DEEPLINK_BASE,
    nano_per_unit: int = NANO_PER_UNIT,
) -> str | None:
    """Build a wallet transfer URI, or None when a component is missing."""
    if not recipient or not comment:
        return None
    nano = to_nano(amount, nano_per_unit)
    if nano is None:
        return None
    return f"{base}{quote(str(recipient), safe='')}?amount={nano}&text={quote(str(comment), safe='')}"


def _as_mapping(body: Any) -> Mapping[str, Any]:
    return body if isinstance(body, Mapping) else {}


class ResponseClassifier:
    def __init__(
        self,
        urgency: UrgencyConfig | None = None,
        payment: PaymentConfig | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._critical_seconds = urgency.critical_seconds if urgency else 60
        self._high_seconds = urgency.high_seconds if urgency else 300
        self._deeplink_base = payment.deeplink_base if payment else DEFAULT_DEEPLINK_BASE
        self._nano_per_unit = payment.nano_per_unit if payment else NANO_PER_UNIT
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._tables: dict[EndpointKind, dict[int, _Handler]] = {
            EndpointKind.INFO: {
                200: self._snapshot,
                404: self._no_auction,
            },
            EndpointKind.CREATE_BID: {
                402: self._payment_required,
                200: self._existing_bid,
                422: self._invalid_amount,
                410: self._auction_closed,
            },
            EndpointKind.CHECK_BID: {
                402: self._payment_pending,
                410: self._auction_closed,
                404: self._bid_not_found,
                200: self._existing_bid,
            },
            EndpointKind.MY_BID: {
                402: self._payment_pending,
                410: self._auction_closed,
                404: self._no_bid,
                200: self._existing_bid,
            },
            EndpointKind.RECENT_BIDS: {
                200: self._bid_list,
            },
        }

    def classify(
        self,
        kind: EndpointKind,
        status: int,
        body: Any,
        context: Mapping[str, Any] | None = None,
    ) -> Outcome:
        """Map one API answer to exactly one outcome.

        ``context`` carries request parameters some outcomes echo back,
        e.g. the wallet for a ``NoBid`` answer.
        """
        if isinstance(body, list):
            # Older API revisions answered the bids list with a bare array.
            body = {"bids": body}
        handler = self._tables[kind].get(status, self._upstream)
        outcome = handler(status, _as_mapping(body), context or {})
        logger.debug("classified %s %s as %s", kind.value, status, type(outcome).__name__)
        return outcome

    # Derived fields ----------------------------------------------------------

    def seconds_remaining(self, payload: Mapping[str, Any]) -> int | None:
        expires_in = pick(payload, "expires_in", "expires_in_seconds", "seconds_remaining")
        if expires_in is not None:
            try:
                return max(int(float(expires_in)), 0)
            except (TypeError, ValueError, OverflowError):
                pass
        expires_at = pick(payload, "expires_at", "expiresAt")
        if expires_at:
            try:
                return seconds_until(str(expires_at), now=self._clock())
            except TimestampError:
                logger.debug("ignoring malformed expiry %r", expires_at)
        return None

    def urgency(self, seconds_remaining: int | None) -> Urgency:
        return urgency_for(
            seconds_remaining, critical=self._critical_seconds, high=self._high_seconds
        )

    def payment_details(
        self,
        recipient: Any,
        amount: Any,
        comment: str,
        *,
        universal_link: str | None,
        seconds_remaining: int | None,
    ) -> PaymentDetails:
        return PaymentDetails(
            recipient=recipient,
            amount=amount,
            comment=comment,
            deeplink=build_deeplink(
                recipient,
                amount,
                comment,
                base=self._deeplink_base,
                nano_per_unit=self._nano_per_unit,
            ),
            universal_link=universal_link,
            expires_in_seconds=seconds_remaining,
        )

    # Success handlers --------------------------------------------------------

    def _snapshot(self, status: int, body: Mapping[str, Any], context: Mapping[str, Any]) -> Outcome:
        return Snapshot(AuctionSnapshot.from_payload(body))

    def _quote(self, body: Mapping[str, Any], state: str) -> PaymentRequired:
        seconds = self.seconds_remaining(body)
        quote = BidQuote.from_payload(body, seconds_remaining=seconds)
        payment = self.payment_details(
            quote.payment_recipient,
            quote.amount_requested,
            quote.payment_comment,
            universal_link=quote.universal_link,
            seconds_remaining=seconds,
        )
        return PaymentRequired(quote=quote, urgency=self.urgency(seconds), payment=payment, state=state)

    def _payment_required(self, status: int, body: Mapping[str, Any], context: Mapping[str, Any]) -> Outcome:
        return self._quote(body, "payment_required")

    def _payment_pending(self, status: int, body: Mapping[str, Any], context: Mapping[str, Any]) -> Outcome:
        return self._quote(body, "payment_pending")

    def _existing_bid(self, status: int, body: Mapping[str, Any], context: Mapping[str, Any]) -> Outcome:
        record = BidRecord.from_payload(body)
        bid_status = record.bid_status
        if bid_status is None:
            logger.info("passing through unrecognised bid status %r", record.status)
            return UnknownStatus(record)
        if bid_status is BidStatus.PENDING:
            seconds = self.seconds_remaining(body)
            payment = self.payment_details(
                pick(body, "pay_to", "payment_address", "recipient"),
                record.amount,
                str(record.bid_id or ""),
                universal_link=body.get("tonconnect_universal_link"),
                seconds_remaining=seconds,
            )
            return ExistingBid(record, urgency=self.urgency(seconds), payment=payment)
        if bid_status is BidStatus.COMPLETED:
            current = to_decimal(record.current_price)
            locked = to_decimal(record.locked_price)
            favorable = current > locked if current is not None and locked is not None else None
            comparison = PriceComparison(record.locked_price, record.current_price, favorable)
            return ExistingBid(record, comparison=comparison)
        if bid_status is BidStatus.ALLOCATED:
            refund = to_decimal(record.refund_amount) or Decimal(0)
            oversubscribed = refund > 0
            allocation = AllocationSummary(
                allocated_amount=record.allocated_amount,
                refund_amount=record.refund_amount,
                oversubscribed=oversubscribed,
                full_allocation=not oversubscribed,
            )
            return ExistingBid(record, allocation=allocation)
        if bid_status is BidStatus.REFUNDED:
            return ExistingBid(record, refund=RefundSummary(record.refund_amount))
        return ExistingBid(record)

    def _no_bid(self, status: int, body: Mapping[str, Any], context: Mapping[str, Any]) -> Outcome:
        return NoBid(wallet=str(context.get("wallet") or body.get("wallet") or ""))

    def _bid_list(self, status: int, body: Mapping[str, Any], context: Mapping[str, Any]) -> Outcome:
        raw_entries = body.get("bids") or []
        entries = tuple(
            RecentBidEntry.from_payload(entry) for entry in raw_entries if isinstance(entry, Mapping)
        )
        return BidList(entries=entries, current_price=pick(body, "current_price", "current_price_ton"))

    # Error handlers ----------------------------------------------------------

    def _domain_error(
        self,
        kind: ErrorKind,
        status: int,
        body: Mapping[str, Any],
        code: str,
        default_message: str,
        **extra: Any,
    ) -> DomainError:
        return DomainError(
            kind=kind,
            status=status,
            error_code=code,
            message=str(body.get("message") or default_message),
            details=dict(body) or None,
            **extra,
        )

    def _no_auction(self, status: int, body: Mapping[str, Any], context: Mapping[str, Any]) -> Outcome:
        return self._domain_error(ErrorKind.NO_AUCTION, status, body, "no_auction", "No auction found")

    def _invalid_amount(self, status: int, body: Mapping[str, Any], context: Mapping[str, Any]) -> Outcome:
        return self._domain_error(
            ErrorKind.INVALID_AMOUNT, status, body, "invalid_amount", "Bid amount rejected"
        )

    def _auction_closed(self, status: int, body: Mapping[str, Any], context: Mapping[str, Any]) -> Outcome:
        return self._domain_error(
            ErrorKind.AUCTION_CLOSED,
            status,
            body,
            "auction_closed",
            "Auction has closed",
            final_price=pick(body, "final_price", "final_price_ton"),
            closed_at=body.get("closed_at"),
        )

    def _bid_not_found(self, status: int, body: Mapping[str, Any], context: Mapping[str, Any]) -> Outcome:
        return self._domain_error(
            ErrorKind.BID_NOT_FOUND, status, body, "bid_not_found", "Bid ID not found"
        )

    def _upstream(self, status: int, body: Mapping[str, Any], context: Mapping[str, Any]) -> Outcome:
        code = str(body.get("error") or "api_error")
        return self._domain_error(ErrorKind.UPSTREAM, status, body, code, "API request failed")
