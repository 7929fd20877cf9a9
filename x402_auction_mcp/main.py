"""MCP server exposing the x402 auction tools over stdio."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from typing import Any

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from . import __version__
from .auction.classifier import ResponseClassifier
from .config import ServerConfig, get_server_config
from .tools import AuctionTools, ToolResult, ToolRouter
from .transport.client import AuctionApiClient
from .validation.registry import ToolSchemaRegistry, get_tool_registry

SERVER_NAME = "x402-auction-mcp"

logger = logging.getLogger(__name__)


class ToolCallError(Exception):
    """Carries an error result to the MCP layer, which flags it with isError."""

    def __init__(self, result: ToolResult) -> None:
        super().__init__(result.text())
        self.result = result


# Wiring ---------------------------------------------------------------------


def build_router(config: ServerConfig, client: AuctionApiClient) -> ToolRouter:
    classifier = ResponseClassifier(config.urgency, config.payment)
    return ToolRouter(AuctionTools(client, classifier, config))


def build_server(router: ToolRouter, registry: ToolSchemaRegistry) -> Server:
    missing = [name for name in router.tool_names if registry.get(name) is None]
    unrouted = [tool.name for tool in registry.all() if tool.name not in router.tool_names]
    if missing or unrouted:
        raise ValueError(
            f"tool catalogue out of sync (no descriptor: {missing}, no handler: {unrouted})"
        )
    tools = [
        types.Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema)
        for tool in registry.all()
    ]
    server: Server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return tools

    # Arguments are checked by the local validators, which clamp some values
    # the advertised schema would reject.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
        result = await router.dispatch(name, arguments)
        if result.is_error:
            raise ToolCallError(result)
        return [types.TextContent(type="text", text=result.text())]

    return server


async def serve(config: ServerConfig) -> None:
    registry = get_tool_registry()
    client = AuctionApiClient(config.api, config.endpoints)
    try:
        server = build_server(build_router(config, client), registry)
        async with stdio_server() as (read_stream, write_stream):
            logger.info(
                "%s %s running on stdio (api=%s)", SERVER_NAME, __version__, config.api.base_url
            )
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await client.close()


# Process boundary -----------------------------------------------------------


def configure_logging(level: str) -> None:
    # stdout carries the protocol; logs go to stderr only.
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _interrupt(signum: int, frame: Any) -> None:
    raise KeyboardInterrupt


def main() -> int:
    configure_logging("INFO")
    signal.signal(signal.SIGTERM, _interrupt)
    try:
        config = get_server_config()
        logging.getLogger().setLevel(config.log_level)
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("shutdown requested")
        return 0
    except Exception:
        logger.exception("fatal error, exiting")
        return 1
    logger.info("input closed, exiting")
    return 0


if __name__ == "__main__":
    sys.exit(main())
