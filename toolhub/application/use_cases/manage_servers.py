import logging
from dataclasses import dataclass
from typing import List, Optional

from toolhub.application.dtos.server_dtos import (
    LogEntryDTO,
    ServerCreateRequest,
    ServerDTO,
    ServerTestResult,
    ServerUpdateRequest,
    ToolSummaryDTO,
    TransportType,
)
from toolhub.application.interfaces.i_mcp_client import IMcpClientFactory
from toolhub.application.interfaces.i_stdio_client_cache import IStdioClientCache
from toolhub.application.interfaces.i_tool_registry import IToolRegistry
from toolhub.domain.entities.server_config import DEFAULT_SCOPE, ServerConfig, TransportKind
from toolhub.domain.exceptions.domain_exceptions import (
    ServerNotFoundError,
    ServerUnreachableError,
)
from toolhub.domain.repositories.i_server_config_repository import IServerConfigRepository

logger = logging.getLogger(__name__)


def to_server_dto(server: ServerConfig) -> ServerDTO:
    """Public view of a server configuration (the stored secret is left out)."""
    return ServerDTO(
        id=server.id,
        scope=server.scope,
        name=server.name,
        description=server.description,
        transport=TransportType(server.transport.value),
        command=server.command,
        args=list(server.args),
        cwd=server.cwd,
        env=dict(server.env),
        base_url=server.base_url,
        has_api_key=server.api_key_encrypted is not None,
        enabled=server.enabled,
        created_at=server.created_at,
    )


@dataclass
class ManageServersUseCase:
    """Use case for configuring MCP servers and inspecting them live.

    Any edit or removal shuts down the cached stdio process of the old
    configuration and drops the scope's cached tool catalog.
    """

    repository: IServerConfigRepository
    client_factory: IMcpClientFactory
    stdio_cache: IStdioClientCache
    registry: IToolRegistry

    async def list_servers(self, scope: str = DEFAULT_SCOPE) -> List[ServerDTO]:
        servers = await self.repository.list_by_scope(scope)
        return [to_server_dto(server) for server in servers]

    async def get_server(self, server_id: str, scope: Optional[str] = None) -> ServerDTO:
        return to_server_dto(await self._load(server_id, scope))

    async def create_server(
        self, request: ServerCreateRequest, scope: Optional[str] = None
    ) -> ServerDTO:
        """Register a server.

        Raises:
            ConfigurationError: If the command (stdio) or URL (http) is missing.
        """
        server = ServerConfig(
            name=request.name.strip(),
            transport=TransportKind(request.transport.value),
            scope=scope or request.scope or DEFAULT_SCOPE,
            description=request.description,
            command=request.command,
            args=tuple(request.args),
            cwd=request.cwd,
            env=dict(request.env),
            base_url=request.base_url,
            api_key_encrypted=request.api_key or None,
            enabled=request.enabled,
        )
        server.validate()

        await self.repository.save(server)
        await self.registry.invalidate_catalog(server.scope)
        logger.info("Registered MCP server '%s' (%s)", server.name, server.id)
        return to_server_dto(server)

    async def update_server(
        self,
        server_id: str,
        request: ServerUpdateRequest,
        scope: Optional[str] = None,
    ) -> ServerDTO:
        """Apply the provided fields and restart whatever used the old config.

        Raises:
            ServerNotFoundError: If the server does not exist.
            ConfigurationError: If the edit leaves the server unusable.
        """
        current = await self._load(server_id, scope)

        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        api_key = changes.pop("api_key", None)
        if "name" in changes:
            changes["name"] = changes["name"].strip()
        if api_key is not None:
            changes["api_key_encrypted"] = api_key or None
        if "env" in changes:
            changes["env"] = dict(changes["env"])

        updated = current.with_changes(**changes)
        updated.validate()

        await self.repository.save(updated)
        await self.stdio_cache.invalidate(server_id)
        await self.registry.invalidate_catalog(updated.scope)
        logger.info("Updated MCP server '%s' (%s)", updated.name, updated.id)
        return to_server_dto(updated)

    async def delete_server(self, server_id: str, scope: Optional[str] = None) -> None:
        server = await self._load(server_id, scope)

        # Stop the process before the configuration disappears
        await self.stdio_cache.forget(server_id)
        await self.repository.delete(server_id)
        await self.registry.invalidate_catalog(server.scope)
        logger.info("Deleted MCP server '%s' (%s)", server.name, server.id)

    async def test_connection(
        self, server_id: str, scope: Optional[str] = None
    ) -> ServerTestResult:
        """Connect with a fresh client, list its tools, then shut it down.

        The cached stdio process is not touched.
        """
        server = await self._load(server_id, scope)

        try:
            async with await self.client_factory.create(server) as client:
                tools = await client.list_tools()
        except Exception as e:
            logger.warning("Connection test failed for MCP server '%s': %s", server.name, e)
            return ServerTestResult(success=False, error=str(e))

        return ServerTestResult(
            success=True,
            tool_count=len(tools),
            tools=[ToolSummaryDTO(name=t.name, description=t.description) for t in tools],
        )

    async def list_server_tools(
        self, server_id: str, scope: Optional[str] = None
    ) -> List[ToolSummaryDTO]:
        """Live tool listing; stdio servers reuse their cached process.

        Raises:
            ServerNotFoundError: If the server does not exist.
            ServerUnreachableError: If the server could not be queried.
        """
        server = await self._load(server_id, scope)

        try:
            async with self.registry.lease(server) as client:
                tools = await client.list_tools()
        except Exception as e:
            raise ServerUnreachableError(f"Failed to reach MCP server: {e}") from e

        return [ToolSummaryDTO(name=t.name, description=t.description) for t in tools]

    async def get_logs(
        self, server_id: str, count: int = 100, scope: Optional[str] = None
    ) -> List[LogEntryDTO]:
        await self._load(server_id, scope)
        return [
            LogEntryDTO(
                timestamp=entry.timestamp,
                level=entry.level.value,
                message=entry.message,
            )
            for entry in self.stdio_cache.get_logs(server_id, count)
        ]

    async def _load(self, server_id: str, scope: Optional[str]) -> ServerConfig:
        server = await self.repository.get_by_id(server_id)
        if server is None or (scope is not None and server.scope != scope):
            raise ServerNotFoundError(f"MCP server {server_id} not found")
        return server
