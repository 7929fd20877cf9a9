"""One handler per tool: validate, call the API, classify."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from ..auction.classifier import ResponseClassifier
from ..auction.models import EndpointKind
from ..auction.outcomes import Outcome
from ..config import ServerConfig
from ..transport.client import AuctionApiClient
from ..validation.inputs import clamp_limit, validate_amount, validate_bid_id, validate_wallet


def format_amount(amount: float) -> str:
    """Render an amount without float noise or a trailing ``.0``."""
    return format(Decimal(str(amount)).normalize(), "f")


class AuctionTools:
    def __init__(
        self,
        client: AuctionApiClient,
        classifier: ResponseClassifier,
        config: ServerConfig,
    ) -> None:
        self._client = client
        self._classifier = classifier
        self._bids = config.bids
        self._wallet_pattern = config.wallet.pattern if config.wallet.strict_format else None

    async def _call(
        self,
        kind: EndpointKind,
        params: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
    ) -> Outcome:
        response = await self._client.send(kind, params)
        return self._classifier.classify(kind, response.status, response.body, context)

    async def get_auction_info(self) -> Outcome:
        return await self._call(EndpointKind.INFO)

    async def create_auction_bid(self, amount: Any, wallet: Any) -> Outcome:
        amount = validate_amount(
            amount, minimum=self._bids.min_amount, maximum=self._bids.max_amount
        )
        wallet = validate_wallet(wallet, pattern=self._wallet_pattern)
        params = {"ton_amount": format_amount(amount), "wallet": wallet}
        return await self._call(EndpointKind.CREATE_BID, params, {"wallet": wallet})

    async def check_bid_status(self, bid_id: Any) -> Outcome:
        bid_id = validate_bid_id(bid_id)
        return await self._call(EndpointKind.CHECK_BID, {"bid_id": bid_id}, {"bid_id": bid_id})

    async def get_my_bid(self, wallet: Any) -> Outcome:
        wallet = validate_wallet(wallet, pattern=self._wallet_pattern)
        return await self._call(EndpointKind.MY_BID, {"wallet": wallet}, {"wallet": wallet})

    async def get_recent_bids(self, limit: Any = None) -> Outcome:
        limit = clamp_limit(
            limit, default=self._bids.default_limit, maximum=self._bids.max_limit
        )
        return await self._call(EndpointKind.RECENT_BIDS, {"limit": limit})
