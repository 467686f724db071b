"""
Dependency Injection Configuration.

The long-lived services (stdio process cache, catalog cache, SSE sessions) are
built once per application and kept on ``app.state``; the providers below
hand them and the use cases built on them to the routers.
"""

from dataclasses import dataclass
from typing import Annotated, Optional

import httpx
from fastapi import Depends, Query, Request

from toolhub.infrastructure.config.settings import Settings
from toolhub.infrastructure.cache.memory_cache import InMemoryCacheService
from toolhub.infrastructure.cache.redis_cache import RedisCacheService
from toolhub.infrastructure.mcp.client.client_cache import StdioClientCache
from toolhub.infrastructure.mcp.client.client_factory import McpClientFactory
from toolhub.infrastructure.mcp.registry import ToolRegistry
from toolhub.infrastructure.mcp.server.handler import McpRequestHandler
from toolhub.infrastructure.mcp.server.sse_sessions import SseSessionRegistry
from toolhub.infrastructure.repositories.in_memory_server_repository import (
    InMemoryServerConfigRepository,
)
from toolhub.infrastructure.security.passthrough_decryptor import PassthroughSecretDecryptor
from toolhub.infrastructure.tools.null_executor import NullLocalToolExecutor

from toolhub.application.interfaces.i_cache_service import ICacheService
from toolhub.application.interfaces.i_local_tool_executor import ILocalToolExecutor
from toolhub.application.interfaces.i_mcp_client import IMcpClientFactory
from toolhub.application.interfaces.i_stdio_client_cache import IStdioClientCache
from toolhub.application.interfaces.i_tool_registry import IToolRegistry
from toolhub.domain.entities.server_config import DEFAULT_SCOPE
from toolhub.domain.repositories.i_server_config_repository import IServerConfigRepository

from toolhub.application.use_cases.execute_tool_call import ExecuteToolCallUseCase
from toolhub.application.use_cases.list_available_tools import ListAvailableToolsUseCase
from toolhub.application.use_cases.manage_servers import ManageServersUseCase
from toolhub.application.use_cases.warmup_servers import WarmupStdioServersUseCase


@dataclass
class ServiceContainer:
    """Process-wide services shared by every request."""

    settings: Settings
    repository: IServerConfigRepository
    client_factory: IMcpClientFactory
    stdio_cache: IStdioClientCache
    cache: ICacheService
    registry: IToolRegistry
    local_executor: ILocalToolExecutor
    sse_sessions: SseSessionRegistry

    def warmup_use_case(self) -> WarmupStdioServersUseCase:
        return WarmupStdioServersUseCase(
            repository=self.repository,
            stdio_cache=self.stdio_cache,
            delay_seconds=self.settings.mcp_warmup_delay_seconds,
        )

    async def aclose(self) -> None:
        """Stop every stdio server, end open SSE streams and close the cache."""
        self.sse_sessions.close_all()
        await self.stdio_cache.dispose_all()
        await self.cache.close()


def build_cache(settings: Settings) -> ICacheService:
    if settings.cache_backend == "redis":
        return RedisCacheService(
            redis_url=settings.redis_url,
            default_ttl=settings.mcp_tool_cache_ttl_seconds,
        )
    return InMemoryCacheService(default_ttl=settings.mcp_tool_cache_ttl_seconds)


def build_container(
    settings: Settings,
    *,
    repository: Optional[IServerConfigRepository] = None,
    local_executor: Optional[ILocalToolExecutor] = None,
    cache: Optional[ICacheService] = None,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ServiceContainer:
    """Wire the concrete implementations together."""
    if repository is None:
        if settings.mcp_servers_file:
            repository = InMemoryServerConfigRepository.from_file(settings.mcp_servers_file)
        else:
            repository = InMemoryServerConfigRepository()

    factory = McpClientFactory(
        settings=settings,
        decryptor=PassthroughSecretDecryptor(),
        http_transport=http_transport,
    )
    stdio_cache = StdioClientCache(factory, log_capacity=settings.mcp_log_buffer_size)
    cache = cache or build_cache(settings)
    registry = ToolRegistry(
        repository=repository,
        factory=factory,
        stdio_cache=stdio_cache,
        cache=cache,
        catalog_ttl_seconds=settings.mcp_tool_cache_ttl_seconds,
        discovery_timeout_seconds=settings.mcp_discovery_timeout_seconds,
    )

    return ServiceContainer(
        settings=settings,
        repository=repository,
        client_factory=factory,
        stdio_cache=stdio_cache,
        cache=cache,
        registry=registry,
        local_executor=local_executor or NullLocalToolExecutor(),
        sse_sessions=SseSessionRegistry(),
    )


# Container
def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


ContainerDep = Annotated[ServiceContainer, Depends(get_container)]


def get_sse_sessions(container: ContainerDep) -> SseSessionRegistry:
    return container.sse_sessions


SseSessionsDep = Annotated[SseSessionRegistry, Depends(get_sse_sessions)]


# Scope (organization); requests without one use the default scope
def get_scope(scope: str = Query(default=DEFAULT_SCOPE, min_length=1)) -> str:
    return scope


ScopeDep = Annotated[str, Depends(get_scope)]


# Use Cases
def get_list_tools_use_case(container: ContainerDep) -> ListAvailableToolsUseCase:
    return ListAvailableToolsUseCase(
        registry=container.registry,
        local_executor=container.local_executor,
    )


ListToolsUseCaseDep = Annotated[ListAvailableToolsUseCase, Depends(get_list_tools_use_case)]


def get_execute_tool_use_case(container: ContainerDep) -> ExecuteToolCallUseCase:
    return ExecuteToolCallUseCase(
        registry=container.registry,
        local_executor=container.local_executor,
    )


ExecuteToolUseCaseDep = Annotated[ExecuteToolCallUseCase, Depends(get_execute_tool_use_case)]


def get_manage_servers_use_case(container: ContainerDep) -> ManageServersUseCase:
    return ManageServersUseCase(
        repository=container.repository,
        client_factory=container.client_factory,
        stdio_cache=container.stdio_cache,
        registry=container.registry,
    )


ManageServersUseCaseDep = Annotated[
    ManageServersUseCase, Depends(get_manage_servers_use_case)
]


# MCP endpoint
def get_mcp_handler(
    container: ContainerDep,
    list_tools: ListToolsUseCaseDep,
    execute_tool: ExecuteToolUseCaseDep,
) -> McpRequestHandler:
    return McpRequestHandler(
        list_tools=list_tools,
        execute_tool=execute_tool,
        server_name=container.settings.app_name,
        server_version=container.settings.app_version,
    )


McpHandlerDep = Annotated[McpRequestHandler, Depends(get_mcp_handler)]
