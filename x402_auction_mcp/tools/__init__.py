"""Tool surface: per-tool handlers and the name-based router."""

from .handlers import AuctionTools
from .router import ToolResult, ToolRouter

__all__ = ["AuctionTools", "ToolResult", "ToolRouter"]
