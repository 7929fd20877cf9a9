"""Unit tests for tool dispatch, from arguments to rendered results."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

import httpx
import pytest

from x402_auction_mcp.auction.classifier import ResponseClassifier
from x402_auction_mcp.config import build_server_config
from x402_auction_mcp.tools import AuctionTools, ToolRouter
from x402_auction_mcp.tools.handlers import format_amount
from x402_auction_mcp.transport.calm_tokens import CalmTokenCache
from x402_auction_mcp.transport.client import AuctionApiClient

WALLET = "UQBlen9nrjWVN5K-O6yzLeNH5hMrQqAw-6LfW3RnISrMg0nw"
NOW = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeAuctionApi:
    """Records requests and answers them from a (path -> response) table."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: dict[str, httpx.Response] = {}

    def answer(self, path: str, status: int, body=None) -> None:
        self.responses[path] = httpx.Response(status, json=body if body is not None else {})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses[request.url.path]


@pytest.fixture
def api():
    return FakeAuctionApi()


def build_router(api, **config_overrides):
    config = build_server_config(config_overrides)
    client = AuctionApiClient(
        config.api,
        config.endpoints,
        calm_tokens=CalmTokenCache(),
        transport=httpx.MockTransport(api),
    )
    classifier = ResponseClassifier(config.urgency, config.payment, clock=lambda: NOW)
    return ToolRouter(AuctionTools(client, classifier, config))


@pytest.fixture
def router(api, monkeypatch):
    monkeypatch.delenv("X402_AUCTION_API_BASE_URL", raising=False)
    return build_router(api)


def test_format_amount():
    assert format_amount(5.0) == "5"
    assert format_amount(100) == "100"
    assert format_amount(2.5) == "2.5"


class TestCreateAuctionBid:
    @pytest.mark.asyncio
    async def test_out_of_range_amount_never_reaches_network(self, router, api):
        result = await router.dispatch("create_auction_bid", {"amount": 150, "wallet": WALLET})
        assert result.is_error is True
        assert result.payload["error"] == "invalid_input"
        assert result.payload["code"] == 400
        assert result.payload["retryable"] is False
        assert result.payload["details"] == {"field": "amount"}
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_huge_integer_amount_is_invalid_input(self, router, api):
        result = await router.dispatch("create_auction_bid", {"amount": 10**400, "wallet": WALLET})
        assert result.is_error is True
        assert json.loads(result.text())["error"] == "invalid_input"
        assert result.payload["details"] == {"field": "amount"}
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_strict_wallet_format_accepts_real_address(self, api, monkeypatch):
        monkeypatch.delenv("X402_AUCTION_API_BASE_URL", raising=False)
        router = build_router(api, wallet={"strict_format": True})
        api.answer("/api/auction/my-bid", 404, {})
        result = await router.dispatch("get_my_bid", {"wallet": WALLET})
        assert result.payload["status"] == "no_bid"

        result = await router.dispatch("get_my_bid", {"wallet": "UQshort"})
        assert result.payload["error"] == "invalid_input"
        assert len(api.requests) == 1

    @pytest.mark.asyncio
    async def test_missing_wallet_never_reaches_network(self, router, api):
        result = await router.dispatch("create_auction_bid", {"amount": 10})
        assert result.is_error is True
        assert result.payload["details"] == {"field": "wallet"}
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_new_bid_returns_payment_instructions(self, router, api):
        api.answer(
            "/api/auction/bid",
            402,
            {"bid_id": "bid_42", "ton_amount": "5", "current_price_ton": "0.15",
             "pay_to": "UQRecipient", "expires_in": 45},
        )
        result = await router.dispatch("create_auction_bid", {"amount": 5, "wallet": WALLET})

        assert result.is_error is False
        assert result.payload["status"] == "payment_required"
        assert result.payload["urgency"] == "critical"
        assert result.payload["payment"]["deeplink"] == (
            "ton://transfer/UQRecipient?amount=5000000000&text=bid_42"
        )
        params = api.requests[0].url.params
        assert params["ton_amount"] == "5"
        assert params["wallet"] == WALLET

    @pytest.mark.asyncio
    async def test_legacy_ton_amount_argument(self, router, api):
        api.answer("/api/auction/bid", 200, {"bid_id": "bid_1", "status": "completed"})
        result = await router.dispatch("create_auction_bid", {"ton_amount": 7.5, "wallet": WALLET})
        assert result.payload["status"] == "completed"
        assert api.requests[0].url.params["ton_amount"] == "7.5"

    @pytest.mark.asyncio
    async def test_closed_auction_is_error_result(self, router, api):
        api.answer("/api/auction/bid", 410, {"error": "auction_closed", "message": "Auction is closed"})
        result = await router.dispatch("create_auction_bid", {"amount": 5, "wallet": WALLET})
        assert result.is_error is True
        assert result.payload["error"] == "auction_closed"
        assert result.payload["message"] == "Auction is closed"
        assert result.payload["action_required"] == "check_auction_status"

    @pytest.mark.asyncio
    async def test_strict_wallet_format(self, api, monkeypatch):
        monkeypatch.delenv("X402_AUCTION_API_BASE_URL", raising=False)
        router = build_router(api, wallet={"strict_format": True})
        result = await router.dispatch("create_auction_bid", {"amount": 5, "wallet": "UQ123"})
        assert result.is_error is True
        assert api.requests == []


class TestOtherTools:
    @pytest.mark.asyncio
    async def test_get_auction_info(self, router, api):
        api.answer("/api/auction/info", 200, {"auction_id": "a1", "status": "closed", "current_price_ton": "0.5"})
        result = await router.dispatch("get_auction_info", {})
        assert result.payload["status"] == "closed"
        assert result.payload["accepting_bids"] is False

    @pytest.mark.asyncio
    async def test_check_bid_status_not_found(self, router, api):
        api.answer("/api/auction/bid", 404, {"error": "bid_not_found", "message": "Bid ID not found"})
        result = await router.dispatch("check_bid_status", {"bid_id": " bid_404 "})
        assert result.is_error is True
        assert result.payload["error"] == "bid_not_found"
        assert api.requests[0].url.params["bid_id"] == "bid_404"

    @pytest.mark.asyncio
    async def test_get_my_bid_absent_is_not_an_error(self, router, api):
        api.answer("/api/auction/my-bid", 404, {"error": "not_found"})
        result = await router.dispatch("get_my_bid", {"wallet": WALLET})
        assert result.is_error is False
        assert result.payload["status"] == "no_bid"
        assert result.payload["wallet"] == WALLET

    @pytest.mark.asyncio
    async def test_get_recent_bids_clamps_limit(self, router, api):
        api.answer("/api/auction/bids", 200, {"bids": [], "current_price": "0.15"})
        result = await router.dispatch("get_recent_bids", {"limit": 500})
        assert result.payload == {"bids": [], "count": 0, "current_price": "0.15"}
        assert api.requests[0].url.params["limit"] == "100"

    @pytest.mark.asyncio
    async def test_get_recent_bids_default_limit(self, router, api):
        api.answer("/api/auction/bids", 200, {"bids": []})
        await router.dispatch("get_recent_bids", None)
        assert api.requests[0].url.params["limit"] == "20"

    @pytest.mark.asyncio
    async def test_unreachable_api_is_error_result(self, api, monkeypatch):
        monkeypatch.delenv("X402_AUCTION_API_BASE_URL", raising=False)

        def unreachable(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("dns failure", request=request)

        router = build_router(unreachable)
        result = await router.dispatch("get_auction_info", {})
        assert result.is_error is True
        assert result.payload["error"] == "transport_error"
        assert result.payload["retryable"] is True

    @pytest.mark.asyncio
    async def test_server_error_is_retryable(self, router, api):
        api.answer("/api/auction/info", 500, {"error": "internal_error", "message": "boom"})
        result = await router.dispatch("get_auction_info", {})
        assert result.payload["error"] == "internal_error"
        assert result.payload["retryable"] is True

    @pytest.mark.asyncio
    async def test_internal_fault_becomes_error_result(self, caplog, monkeypatch):
        monkeypatch.delenv("X402_AUCTION_API_BASE_URL", raising=False)

        def broken(request: httpx.Request) -> httpx.Response:
            raise RuntimeError("handler bug")

        router = build_router(broken)
        with caplog.at_level(logging.ERROR, logger="x402_auction_mcp.tools.router"):
            result = await router.dispatch("get_auction_info", {})
        assert result.is_error is True
        assert result.payload["error"] == "internal_error"
        assert result.payload["code"] == 500
        assert result.payload["retryable"] is True
        assert any(record.exc_info for record in caplog.records)

    @pytest.mark.asyncio
    async def test_unknown_tool(self, router, api):
        result = await router.dispatch("place_order", {})
        assert result.is_error is True
        assert result.payload["error"] == "unknown_tool"
        assert "place_order" in result.payload["message"]


def test_router_exposes_every_tool(router):
    assert set(router.tool_names) == {
        "get_auction_info",
        "create_auction_bid",
        "check_bid_status",
        "get_my_bid",
        "get_recent_bids",
    }


@pytest.mark.asyncio
async def test_rendered_text_round_trips(router, api):
    api.answer("/api/auction/bid", 200, {"bid_id": "bid_1", "status": "refunded", "refund_ton": "9.9"})
    result = await router.dispatch("check_bid_status", {"bid_id": "bid_1"})
    assert json.loads(result.text()) == result.payload
