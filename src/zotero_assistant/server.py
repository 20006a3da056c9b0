"""MCP server entry point for zotero-assistant."""

import asyncio
import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from zotero_assistant.handlers import ToolHandler
from zotero_assistant.settings import settings
from zotero_assistant.utils.config import load_config
from zotero_assistant.utils.logging_config import initialize_logging

logger = logging.getLogger(__name__)


def create_server(tool_handler: ToolHandler | None = None) -> Server:
    """Build the MCP server with its tool handlers registered."""
    handler = tool_handler or ToolHandler()
    server = Server(settings.server_name, version=settings.server_version)

    @server.list_tools()
    async def _list_tools() -> list[Tool]:
        return handler.get_tools()

    @server.call_tool()
    async def _call_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
        return list(await handler.handle_tool(name, arguments))

    return server


async def serve() -> None:
    """Run the MCP server using stdio transport."""
    initialize_logging()
    load_config()

    tool_handler = ToolHandler()
    server = create_server(tool_handler)
    logger.info(f"Starting {settings.server_name} v{settings.server_version} on stdio")

    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream, write_stream, server.create_initialization_options()
            )
    finally:
        await tool_handler.close()


def run() -> None:
    """Run the Zotero Assistant server."""
    asyncio.run(serve())


if __name__ == "__main__":
    run()
