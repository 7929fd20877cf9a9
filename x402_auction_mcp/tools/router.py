"""Dispatch of tool invocations by name and rendering of their results."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping

from ..auction.outcomes import (
    BidList,
    DomainError,
    ExistingBid,
    NoBid,
    Outcome,
    PaymentRequired,
    Snapshot,
    UnknownStatus,
)
from ..errors import AuctionToolError, UnknownTool
from ..transport.canonical_json import dumps
from .handlers import AuctionTools

logger = logging.getLogger(__name__)

_Handler = Callable[[Mapping[str, Any]], Awaitable[Outcome]]


@dataclass(frozen=True)
class ToolResult:
    payload: dict[str, Any]
    is_error: bool = False

    def text(self) -> str:
        return dumps(self.payload)


def render(outcome: Outcome) -> ToolResult:
    if isinstance(outcome, DomainError):
        return ToolResult(outcome.to_payload(), is_error=True)
    if isinstance(
        outcome,
        (Snapshot, PaymentRequired, ExistingBid, UnknownStatus, NoBid, BidList),
    ):
        return ToolResult(outcome.to_payload())
    raise TypeError(f"unhandled outcome {type(outcome).__name__}")


class ToolRouter:
    def __init__(self, tools: AuctionTools) -> None:
        self._tools = tools
        self._handlers: dict[str, _Handler] = {
            "get_auction_info": self._get_auction_info,
            "create_auction_bid": self._create_auction_bid,
            "check_bid_status": self._check_bid_status,
            "get_my_bid": self._get_my_bid,
            "get_recent_bids": self._get_recent_bids,
        }

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)

    async def dispatch(self, name: str, arguments: Mapping[str, Any] | None) -> ToolResult:
        """Run one tool call; failures local to the call become error results."""
        handler = self._handlers.get(name)
        if handler is None:
            return ToolResult(UnknownTool(f"Unknown tool: {name}").to_payload(), is_error=True)
        logger.info("tool call %s", name)
        try:
            outcome = await handler(arguments or {})
        except AuctionToolError as exc:
            logger.info("tool %s failed: %s (%s)", name, exc.code, exc.message)
            return ToolResult(exc.to_payload(), is_error=True)
        except Exception:
            logger.exception("tool %s raised an internal fault", name)
            fault = AuctionToolError(f"Internal error while running {name}")
            return ToolResult(fault.to_payload(), is_error=True)
        result = render(outcome)
        if result.is_error:
            logger.info("tool %s returned %s", name, result.payload.get("error"))
        return result

    async def _get_auction_info(self, arguments: Mapping[str, Any]) -> Outcome:
        return await self._tools.get_auction_info()

    async def _create_auction_bid(self, arguments: Mapping[str, Any]) -> Outcome:
        amount = arguments.get("amount", arguments.get("ton_amount"))
        return await self._tools.create_auction_bid(amount, arguments.get("wallet"))

    async def _check_bid_status(self, arguments: Mapping[str, Any]) -> Outcome:
        return await self._tools.check_bid_status(arguments.get("bid_id"))

    async def _get_my_bid(self, arguments: Mapping[str, Any]) -> Outcome:
        return await self._tools.get_my_bid(arguments.get("wallet"))

    async def _get_recent_bids(self, arguments: Mapping[str, Any]) -> Outcome:
        return await self._tools.get_recent_bids(arguments.get("limit"))
