"""
Shared pytest fixtures for all tests.
"""

import sys
from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock

import pytest

from toolhub.application.interfaces.i_cache_service import ICacheService
from toolhub.application.interfaces.i_local_tool_executor import ILocalToolExecutor
from toolhub.application.interfaces.i_mcp_client import IMcpClientFactory
from toolhub.application.interfaces.i_stdio_client_cache import IStdioClientCache
from toolhub.application.interfaces.i_tool_registry import IToolRegistry
from toolhub.domain.entities.server_config import ServerConfig, TransportKind
from toolhub.domain.entities.tool_call_result import ToolCallResult
from toolhub.domain.entities.tool_descriptor import ToolDescriptor
from toolhub.domain.repositories.i_server_config_repository import IServerConfigRepository
from toolhub.infrastructure.config.settings import Settings
from toolhub.infrastructure.repositories.in_memory_server_repository import (
    InMemoryServerConfigRepository,
)

STUB_SERVER = Path(__file__).parent / "fixtures" / "stub_mcp_server.py"
PROJECT_ROOT = Path(__file__).parent.parent


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings with short timeouts so failing tests fail fast."""
    return Settings().model_copy(
        update={
            "mcp_stdio_initialize_timeout_seconds": 10.0,
            "mcp_stdio_request_timeout_seconds": 5.0,
            "mcp_stdio_shutdown_grace_seconds": 1.0,
            "mcp_http_timeout_seconds": 5.0,
            "mcp_discovery_timeout_seconds": 10.0,
            "mcp_warmup_enabled": False,
            "mcp_servers_file": None,
            "cache_backend": "memory",
        }
    )


# ============================================================================
# Entity Fixtures
# ============================================================================


@pytest.fixture
def stub_server_config() -> Callable[..., ServerConfig]:
    """Build a stdio config that runs the stub MCP server in the given modes."""

    def build(*modes: str, name: str = "Stub Server", **overrides) -> ServerConfig:
        fields = {
            "name": name,
            "transport": TransportKind.STDIO,
            "command": sys.executable,
            "args": (str(STUB_SERVER), *modes),
        }
        fields.update(overrides)
        return ServerConfig(**fields)

    return build


@pytest.fixture
def echo_server_config() -> ServerConfig:
    """The bundled SDK-based echo server."""
    return ServerConfig(
        name="Echo MCP",
        transport=TransportKind.STDIO,
        command=sys.executable,
        args=("-m", "toolhub.infrastructure.mcp.servers.echo_server"),
        cwd=str(PROJECT_ROOT),
    )


@pytest.fixture
def http_server_config() -> ServerConfig:
    return ServerConfig(
        name="Remote Tools",
        transport=TransportKind.HTTP,
        base_url="http://mcp.test/api/",
        api_key_encrypted="secret-key",
    )


@pytest.fixture
def server_repository() -> InMemoryServerConfigRepository:
    return InMemoryServerConfigRepository()


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_server_repository() -> AsyncMock:
    """Mock IServerConfigRepository."""
    mock = AsyncMock(spec=IServerConfigRepository)
    mock.get_by_id.return_value = None
    mock.list_by_scope.return_value = []
    mock.list_enabled_by_scope.return_value = []
    mock.list_enabled_stdio.return_value = []
    mock.save.return_value = None
    mock.delete.return_value = None
    return mock


@pytest.fixture
def mock_cache_service() -> AsyncMock:
    """Mock ICacheService."""
    mock = AsyncMock(spec=ICacheService)
    mock.get.return_value = None
    mock.set.return_value = None
    mock.delete.return_value = None
    return mock


@pytest.fixture
def mock_registry() -> AsyncMock:
    """Mock IToolRegistry that recognizes the mcp__ prefix."""
    mock = AsyncMock(spec=IToolRegistry)
    mock.is_mcp_tool.side_effect = lambda name: name.lower().startswith("mcp__")
    mock.list_all.return_value = [
        ToolDescriptor(name="mcp__stub__ping", description="[Stub] Reply with pong"),
    ]
    mock.dispatch.return_value = ToolCallResult.ok("pong")
    return mock


@pytest.fixture
def mock_local_executor() -> AsyncMock:
    """Mock ILocalToolExecutor with one built-in tool."""
    mock = AsyncMock(spec=ILocalToolExecutor)
    mock.list_tools.side_effect = None
    mock.list_tools.return_value = [
        ToolDescriptor(name="execute_command", description="Run a command on a host"),
    ]
    mock.execute.return_value = ToolCallResult.ok("done")
    return mock


@pytest.fixture
def mock_stdio_cache() -> AsyncMock:
    """Mock IStdioClientCache."""
    mock = AsyncMock(spec=IStdioClientCache)
    mock.get_logs.side_effect = None
    mock.get_logs.return_value = []
    return mock


@pytest.fixture
def mock_client_factory() -> AsyncMock:
    """Mock IMcpClientFactory."""
    return AsyncMock(spec=IMcpClientFactory)


# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "e2e: mark test as an end-to-end test"
    )
