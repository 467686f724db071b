"""
Reference stdio MCP server.

A minimal server built on the ``mcp`` SDK, handy for checking that a
deployment can spawn, handshake with and call a stdio server end to end.

Usage:
    python -m toolhub.infrastructure.mcp.servers.echo_server
"""

import asyncio
import logging
from typing import Any

from mcp.server import NotificationOptions, Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

logger = logging.getLogger(__name__)


class EchoMCPServer:
    """MCP server exposing ``ping`` and ``echo``."""

    def __init__(self, name: str = "echo-server"):
        self.server = Server(name)
        self._register_handlers()

    def _register_handlers(self) -> None:
        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return [
                Tool(
                    name="ping",
                    description="Check that the server is responsive",
                    inputSchema={"type": "object", "properties": {}},
                ),
                Tool(
                    name="echo",
                    description="Return the given text unchanged",
                    inputSchema={
                        "type": "object",
                        "properties": {
                            "text": {
                                "type": "string",
                                "description": "Text to echo back",
                            }
                        },
                        "required": ["text"],
                    },
                ),
            ]

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            logger.info("call_tool %s", name)
            if name == "ping":
                return [TextContent(type="text", text="pong")]
            elif name == "echo":
                return [TextContent(type="text", text=str(arguments.get("text", "")))]
            raise ValueError(f"Unknown tool: {name}")

    async def run(self) -> None:
        """Run the MCP server using stdio transport."""
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            )


def main() -> None:
    # stdout carries the protocol; diagnostics go to stderr
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    logger.info("echo MCP server starting")
    asyncio.run(EchoMCPServer().run())


if __name__ == "__main__":
    main()
