"""
Tool registry aggregating every enabled MCP server of a scope.

Tools are exposed under namespaced names (``mcp__{server}__{tool}``) so that
tools from different servers cannot shadow each other or the built-in tools.
The aggregated catalog is cached per scope for a short TTL.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Optional

from toolhub.application.interfaces.i_cache_service import ICacheService
from toolhub.application.interfaces.i_mcp_client import BorrowedMcpClient, IMcpClientFactory
from toolhub.application.interfaces.i_stdio_client_cache import IStdioClientCache
from toolhub.application.interfaces.i_tool_registry import IToolRegistry
from toolhub.domain.entities.server_config import ServerConfig
from toolhub.domain.entities.tool_call_result import ToolCallResult
from toolhub.domain.entities.tool_descriptor import ToolDescriptor
from toolhub.domain.exceptions.domain_exceptions import InvalidToolNameError
from toolhub.domain.repositories.i_server_config_repository import IServerConfigRepository
from toolhub.domain.value_objects.namespaced_tool_name import (
    NamespacedToolName,
    is_namespaced,
    normalize_server_name,
)

logger = logging.getLogger(__name__)

CATALOG_CACHE_PREFIX = "mcp_tools:"
DEFAULT_CATALOG_TTL = 30
DEFAULT_DISCOVERY_TIMEOUT = 60.0


def catalog_cache_key(scope: str) -> str:
    return f"{CATALOG_CACHE_PREFIX}{scope}"


class ToolRegistry(IToolRegistry):
    """Discovers and dispatches namespaced tools across MCP servers."""

    def __init__(
        self,
        repository: IServerConfigRepository,
        factory: IMcpClientFactory,
        stdio_cache: IStdioClientCache,
        cache: ICacheService,
        catalog_ttl_seconds: int = DEFAULT_CATALOG_TTL,
        discovery_timeout_seconds: float = DEFAULT_DISCOVERY_TIMEOUT,
    ):
        self._repository = repository
        self._factory = factory
        self._stdio_cache = stdio_cache
        self._cache = cache
        self._catalog_ttl = catalog_ttl_seconds
        self._discovery_timeout = discovery_timeout_seconds

    @staticmethod
    def is_mcp_tool(name: str) -> bool:
        return is_namespaced(name)

    async def list_all(self, scope: str) -> List[ToolDescriptor]:
        """Namespaced catalog of every enabled server in ``scope``.

        Servers are queried concurrently. A server that fails or exceeds the
        discovery timeout is logged and left out; it never fails the listing.
        """
        key = catalog_cache_key(scope)
        cached = await self._cache.get(key)
        if cached is not None:
            return [ToolDescriptor.from_mcp(entry) for entry in cached]

        servers = await self._repository.list_enabled_by_scope(scope)
        per_server = await asyncio.gather(
            *(self._discover_safely(server) for server in servers)
        )
        tools = [tool for server_tools in per_server for tool in server_tools]

        await self._cache.set(
            key, [tool.to_mcp() for tool in tools], ttl_seconds=self._catalog_ttl
        )
        logger.info(
            "Discovered %d MCP tools for scope '%s' from %d server(s)",
            len(tools),
            scope,
            len(servers),
        )
        return tools

    async def invalidate_catalog(self, scope: str) -> None:
        await self._cache.delete(catalog_cache_key(scope))

    async def dispatch(
        self, name: str, arguments: Optional[dict[str, Any]], scope: str
    ) -> ToolCallResult:
        """Route a namespaced tool call to the server that owns it.

        Raises:
            InvalidToolNameError: If ``name`` does not carry the MCP prefix.
        """
        if not self.is_mcp_tool(name):
            raise InvalidToolNameError(f"'{name}' is not a namespaced MCP tool name.")

        try:
            target = NamespacedToolName.parse(name)
        except InvalidToolNameError as e:
            return ToolCallResult.failure(f"Error: {e}")
        if not target.is_complete:
            return ToolCallResult.failure(
                f"Error: Invalid MCP tool name format '{name}'. "
                "Expected 'mcp__serverName__toolName'."
            )

        server = await self._find_server(target.server, scope)
        if server is None:
            logger.warning(
                "No enabled MCP server found matching '%s' for scope '%s'",
                target.server,
                scope,
            )
            return ToolCallResult.failure(
                f"Error: MCP server '{target.server}' not found or is disabled."
            )

        try:
            async with self.lease(server) as client:
                logger.info(
                    "Dispatching MCP tool call: %s on server '%s'", target.tool, server.name
                )
                return await client.call_tool(target.tool, arguments or {})
        except Exception as e:
            logger.error(
                "MCP tool call failed: %s on server '%s': %s", target.tool, server.name, e
            )
            return ToolCallResult.failure(
                f"Error calling MCP tool '{target.tool}' on server '{server.name}': {e}"
            )

    @asynccontextmanager
    async def lease(self, server: ServerConfig) -> AsyncIterator[BorrowedMcpClient]:
        """Use a client for ``server`` for the duration of the block.

        Stdio clients come from the long-lived cache and stay running. HTTP
        clients are created for the lease and closed when it ends.
        """
        if server.is_stdio:
            yield await self._stdio_cache.get_or_create(server)
            return

        client = await self._factory.create(server)
        try:
            yield client.borrow()
        finally:
            await client.aclose()

    async def _find_server(self, normalized_name: str, scope: str) -> Optional[ServerConfig]:
        wanted = normalized_name.lower()
        for server in await self._repository.list_enabled_by_scope(scope):
            if normalize_server_name(server.name) == wanted:
                return server
        return None

    async def _discover_safely(self, server: ServerConfig) -> List[ToolDescriptor]:
        try:
            return await asyncio.wait_for(
                self._discover(server), timeout=self._discovery_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Timed out discovering tools from MCP server '%s' (%s) after %gs",
                server.name,
                server.id,
                self._discovery_timeout,
            )
        except Exception as e:
            # One failing server must not block the others
            logger.warning(
                "Failed to discover tools from MCP server '%s' (%s): %s",
                server.name,
                server.id,
                e,
            )
        return []

    async def _discover(self, server: ServerConfig) -> List[ToolDescriptor]:
        async with self.lease(server) as client:
            tools = await client.list_tools()

        return [
            ToolDescriptor(
                name=str(NamespacedToolName.build(server.name, tool.name)),
                description=f"[{server.name}] {tool.description}",
                input_schema=tool.input_schema,
            )
            for tool in tools
        ]
