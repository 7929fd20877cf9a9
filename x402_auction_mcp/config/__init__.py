"""Configuration helpers for the auction MCP server."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from .. import __version__

_DEFAULT_SERVER_CONFIG = Path(__file__).resolve().parent / "server.yaml"


@dataclass(frozen=True)
class ApiConfig:
    base_url: str
    timeout_seconds: float
    user_agent: str


@dataclass(frozen=True)
class EndpointConfig:
    info: str
    bid: str
    my_bid: str
    bids: str


@dataclass(frozen=True)
class BidLimits:
    min_amount: float
    max_amount: float
    default_limit: int
    max_limit: int


@dataclass(frozen=True)
class WalletConfig:
    strict_format: bool
    pattern: str


@dataclass(frozen=True)
class UrgencyConfig:
    critical_seconds: int
    high_seconds: int


@dataclass(frozen=True)
class PaymentConfig:
    deeplink_base: str
    nano_per_unit: int


@dataclass(frozen=True)
class ServerConfig:
    api: ApiConfig
    endpoints: EndpointConfig
    bids: BidLimits
    wallet: WalletConfig
    urgency: UrgencyConfig
    payment: PaymentConfig
    log_level: str


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    return yaml.safe_load(path.read_text()) or {}


def build_server_config(data: dict[str, Any]) -> ServerConfig:
    """Build a ServerConfig from parsed YAML, filling in defaults for missing keys."""
    api = data.get("api") or {}
    endpoints = data.get("endpoints") or {}
    bids = data.get("bids") or {}
    wallet = data.get("wallet") or {}
    urgency = data.get("urgency") or {}
    payment = data.get("payment") or {}
    logging_cfg = data.get("logging") or {}
    base_url = os.getenv("X402_AUCTION_API_BASE_URL") or api.get(
        "base_url", "https://x402.palette.finance/api"
    )
    return ServerConfig(
        api=ApiConfig(
            base_url=str(base_url).rstrip("/"),
            timeout_seconds=float(api.get("timeout_seconds", 30)),
            user_agent=str(api.get("user_agent", f"x402-auction-mcp/{__version__}")),
        ),
        endpoints=EndpointConfig(
            info=str(endpoints.get("info", "/auction/info")),
            bid=str(endpoints.get("bid", "/auction/bid")),
            my_bid=str(endpoints.get("my_bid", "/auction/my-bid")),
            bids=str(endpoints.get("bids", "/auction/bids")),
        ),
        bids=BidLimits(
            min_amount=float(bids.get("min_amount", 1)),
            max_amount=float(bids.get("max_amount", 100)),
            default_limit=int(bids.get("default_limit", 20)),
            max_limit=int(bids.get("max_limit", 100)),
        ),
        wallet=WalletConfig(
            strict_format=bool(wallet.get("strict_format", False)),
            pattern=str(wallet.get("pattern", r"^(UQ|EQ)[A-Za-z0-9_-]{46}$")),
        ),
        urgency=UrgencyConfig(
            critical_seconds=int(urgency.get("critical_seconds", 60)),
            high_seconds=int(urgency.get("high_seconds", 300)),
        ),
        payment=PaymentConfig(
            deeplink_base=str(payment.get("deeplink_base", "ton://transfer/")),
            nano_per_unit=int(payment.get("nano_per_unit", 10**9)),
        ),
        log_level=str(logging_cfg.get("level", "INFO")).upper(),
    )


@lru_cache(maxsize=1)
def get_server_config() -> ServerConfig:
    path = Path(os.getenv("X402_AUCTION_CONFIG_PATH", _DEFAULT_SERVER_CONFIG))
    return build_server_config(_load_yaml(path))
