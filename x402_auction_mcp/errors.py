"""Errors raised before or around an upstream call.

Well-formed error answers from the auction API are not exceptions; they are
classified into ``DomainError`` outcomes (see ``auction.outcomes``).
"""

from __future__ import annotations

from typing import Any


def is_retryable(status: int) -> bool:
    return status == 429 or status >= 500


class AuctionToolError(Exception):
    """Base error carrying a machine-readable code and an HTTP-like status."""

    code = "internal_error"
    status = 500

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def retryable(self) -> bool:
        return is_retryable(self.status)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": self.code,
            "message": self.message,
            "code": self.status,
            "retryable": self.retryable,
        }
        if self.details is not None:
            payload["details"] = self.details
        return payload


class InvalidInput(AuctionToolError, ValueError):
    """Raised when tool arguments fail local validation."""

    code = "invalid_input"
    status = 400

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message, details={"field": field} if field else None)
        self.field = field


class TransportError(AuctionToolError):
    """Raised when the auction API could not be reached or answered garbage."""

    code = "transport_error"
    status = 502


class UnknownTool(AuctionToolError):
    code = "unknown_tool"
    status = 404
