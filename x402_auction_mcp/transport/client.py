"""HTTP client for the x402 auction API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from ..auction.models import EndpointKind
from ..config import ApiConfig, EndpointConfig
from ..errors import TransportError
from .calm_tokens import CalmTokenCache

logger = logging.getLogger(__name__)

RATE_LIMITED = 420
CALM_TOKEN_HEADER = "calm-token"

# One process-wide cache shared by every client unless one is injected.
_SHARED_CALM_TOKENS = CalmTokenCache()


@dataclass(frozen=True)
class ApiResponse:
    status: int
    body: Any


class AuctionApiClient:
    def __init__(
        self,
        api: ApiConfig,
        endpoints: EndpointConfig,
        *,
        calm_tokens: CalmTokenCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoints = endpoints
        self._calm_tokens = calm_tokens if calm_tokens is not None else _SHARED_CALM_TOKENS
        self._client = httpx.AsyncClient(
            base_url=api.base_url,
            timeout=api.timeout_seconds,
            headers={"user-agent": api.user_agent, "accept": "application/json"},
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    def path_for(self, kind: EndpointKind) -> str:
        if kind is EndpointKind.INFO:
            return self._endpoints.info
        if kind in (EndpointKind.CREATE_BID, EndpointKind.CHECK_BID):
            return self._endpoints.bid
        if kind is EndpointKind.MY_BID:
            return self._endpoints.my_bid
        return self._endpoints.bids

    async def send(
        self, kind: EndpointKind, params: Mapping[str, Any] | None = None
    ) -> ApiResponse:
        """Issue one GET and return the status with the decoded JSON body.

        Raises TransportError when the API cannot be reached; HTTP error
        statuses are returned, not raised.
        """
        path = self.path_for(kind)
        headers = {}
        calm_token = self._calm_tokens.get(path)
        if calm_token:
            headers[CALM_TOKEN_HEADER] = calm_token
        logger.debug("GET %s params=%s", path, dict(params or {}))
        try:
            response = await self._client.get(path, params=params, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("auction api unreachable path=%s: %s", path, exc)
            raise TransportError(f"auction api unreachable: {exc}") from exc
        body = self._decode(response)
        if response.status_code == RATE_LIMITED and isinstance(body, dict):
            self._remember_calm_token(path, body)
        logger.debug("GET %s -> %s", path, response.status_code)
        return ApiResponse(status=response.status_code, body=body)

    def _decode(self, response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            if response.status_code >= 400 and response.status_code != 402:
                # Error pages from proxies are still classified by status.
                return {}
            raise TransportError(
                f"auction api returned a non-JSON body (status {response.status_code})"
            ) from exc

    def _remember_calm_token(self, path: str, body: dict[str, Any]) -> None:
        token = body.get("calm_token")
        try:
            expires_in = float(body.get("calm_token_expires_in") or 0)
        except (TypeError, ValueError):
            expires_in = 0.0
        if token:
            self._calm_tokens.store(path, str(token), expires_in)
            logger.info("stored calm token for %s (expires in %ss)", path, expires_in)
