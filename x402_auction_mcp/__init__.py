"""MCP adapter for the x402 Dutch auction API."""

__version__ = "1.1.1"
