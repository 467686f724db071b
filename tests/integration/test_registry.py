"""
Integration tests for the tool registry and the stdio client cache with real
server processes.
"""

import asyncio

import httpx
import pytest
import pytest_asyncio

from toolhub.domain.entities.log_entry import LogLevel
from toolhub.domain.entities.server_config import ServerConfig, TransportKind
from toolhub.domain.exceptions.domain_exceptions import InvalidToolNameError
from toolhub.infrastructure.cache.memory_cache import InMemoryCacheService
from toolhub.infrastructure.mcp.client.client_cache import StdioClientCache
from toolhub.infrastructure.mcp.client.client_factory import McpClientFactory
from toolhub.infrastructure.mcp.registry import ToolRegistry, catalog_cache_key
from toolhub.infrastructure.security.passthrough_decryptor import PassthroughSecretDecryptor


def unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture
def factory(test_settings) -> McpClientFactory:
    return McpClientFactory(
        test_settings,
        PassthroughSecretDecryptor(),
        http_transport=httpx.MockTransport(unreachable),
    )


@pytest_asyncio.fixture
async def stdio_cache(factory):
    cache = StdioClientCache(factory)
    yield cache
    await cache.dispose_all()


@pytest.fixture
def registry(server_repository, factory, stdio_cache) -> ToolRegistry:
    return ToolRegistry(
        repository=server_repository,
        factory=factory,
        stdio_cache=stdio_cache,
        cache=InMemoryCacheService(),
        discovery_timeout_seconds=10,
    )


@pytest.mark.integration
@pytest.mark.asyncio
class TestStdioClientCacheWithProcesses:
    """Tests for StdioClientCache backed by real processes."""

    async def test_concurrent_callers_share_one_process(self, stdio_cache, stub_server_config):
        server = stub_server_config()

        clients = await asyncio.gather(*(stdio_cache.get_or_create(server) for _ in range(4)))
        pids = {(await client.call_tool("pid", {})).text for client in clients}

        assert len(pids) == 1

    async def test_crashed_process_is_restarted(self, stdio_cache, stub_server_config):
        server = stub_server_config()
        client = await stdio_cache.get_or_create(server)
        first_pid = (await client.call_tool("pid", {})).text

        crashed = await client.call_tool("crash", {})
        assert crashed.is_error is True

        client = await stdio_cache.get_or_create(server)
        second_pid = (await client.call_tool("pid", {})).text

        assert second_pid != first_pid
        warnings = [e for e in stdio_cache.get_logs(server.id) if e.level is LogLevel.WARN]
        assert any("restarting" in e.message for e in warnings)

    async def test_invalidate_stops_process(self, stdio_cache, stub_server_config):
        server = stub_server_config()
        client = await stdio_cache.get_or_create(server)
        first_pid = (await client.call_tool("pid", {})).text

        await stdio_cache.invalidate(server.id)
        client = await stdio_cache.get_or_create(server)

        assert (await client.call_tool("pid", {})).text != first_pid


@pytest.mark.integration
@pytest.mark.asyncio
class TestToolRegistry:
    """Tests for ToolRegistry."""

    async def test_echo_server_tools_are_namespaced(
        self, registry, server_repository, echo_server_config
    ):
        await server_repository.save(echo_server_config)

        tools = await registry.list_all("default")
        result = await registry.dispatch("mcp__echo_mcp__ping", {}, "default")
        echoed = await registry.dispatch("mcp__echo_mcp__echo", {"text": "hi"}, "default")

        assert sorted(tool.name for tool in tools) == ["mcp__echo_mcp__echo", "mcp__echo_mcp__ping"]
        assert all(tool.description.startswith("[Echo MCP] ") for tool in tools)
        assert result.text == "pong"
        assert echoed.text == "hi"

    async def test_failing_server_is_left_out(
        self, registry, server_repository, stub_server_config
    ):
        await server_repository.save(stub_server_config(name="Good"))
        await server_repository.save(
            ServerConfig(
                name="Broken",
                transport=TransportKind.STDIO,
                command="definitely-not-a-binary-xyz",
            )
        )
        await server_repository.save(
            ServerConfig(
                name="Remote", transport=TransportKind.HTTP, base_url="http://mcp.test"
            )
        )

        tools = await registry.list_all("default")

        assert len(tools) == 7
        assert all(tool.name.startswith("mcp__good__") for tool in tools)

    async def test_disabled_and_other_scope_servers_are_ignored(
        self, registry, server_repository, stub_server_config
    ):
        await server_repository.save(stub_server_config(name="Off", enabled=False))
        await server_repository.save(stub_server_config(name="Elsewhere", scope="team-b"))

        assert await registry.list_all("default") == []

        result = await registry.dispatch("mcp__off__ping", {}, "default")
        assert result.is_error is True
        assert result.text == "Error: MCP server 'off' not found or is disabled."

    async def test_catalog_is_cached_until_invalidated(
        self, registry, server_repository, stub_server_config
    ):
        await server_repository.save(stub_server_config(name="First"))
        assert len(await registry.list_all("default")) == 7

        await server_repository.save(stub_server_config(name="Second"))
        assert len(await registry.list_all("default")) == 7

        await registry.invalidate_catalog("default")
        assert len(await registry.list_all("default")) == 14

    async def test_server_disabled_after_discovery_is_refused(
        self, registry, server_repository, stub_server_config
    ):
        server = stub_server_config(name="Stub")
        await server_repository.save(server)
        assert "mcp__stub__ping" in [tool.name for tool in await registry.list_all("default")]

        await server_repository.save(server.with_changes(enabled=False))

        # The catalog is still cached but dispatch rereads the configuration
        assert "mcp__stub__ping" in [tool.name for tool in await registry.list_all("default")]
        result = await registry.dispatch("mcp__stub__ping", {}, "default")
        assert result.is_error is True
        assert result.text == "Error: MCP server 'stub' not found or is disabled."

    async def test_invalidate_during_a_call_fails_it_and_next_call_restarts(
        self, registry, server_repository, stdio_cache, stub_server_config
    ):
        server = stub_server_config(name="Slow")
        await server_repository.save(server)
        first_pid = (await registry.dispatch("mcp__slow__pid", {}, "default")).text

        pending = asyncio.create_task(
            registry.dispatch("mcp__slow__slow", {"seconds": 2}, "default")
        )
        await asyncio.sleep(0.3)
        await stdio_cache.invalidate(server.id)
        interrupted = await pending

        assert interrupted.is_error is True
        assert interrupted.text == (
            "Error calling tool 'slow' on stdio MCP server 'Slow': "
            "MCP server 'Slow' is shutting down"
        )
        assert (await registry.dispatch("mcp__slow__ping", {}, "default")).text == "pong"
        second_pid = (await registry.dispatch("mcp__slow__pid", {}, "default")).text
        assert second_pid != first_pid

    async def test_dispatch_uses_cached_process(
        self, registry, server_repository, stub_server_config
    ):
        await server_repository.save(stub_server_config(name="Stub"))

        first = await registry.dispatch("mcp__stub__pid", {}, "default")
        second = await registry.dispatch("MCP__stub__pid", {}, "default")

        assert first.text == second.text

    async def test_dispatch_reports_tool_errors(
        self, registry, server_repository, stub_server_config
    ):
        await server_repository.save(stub_server_config(name="Stub"))

        result = await registry.dispatch("mcp__stub__fail", {}, "default")

        assert result.is_error is True
        assert result.text == "tool failed"

    async def test_dispatch_http_failure_is_text(self, registry, server_repository):
        await server_repository.save(
            ServerConfig(
                name="Remote", transport=TransportKind.HTTP, base_url="http://mcp.test"
            )
        )

        result = await registry.dispatch("mcp__remote__search", {}, "default")

        assert result.is_error is True
        assert result.text.startswith("Error calling tool 'search' on MCP server 'Remote':")

    async def test_dispatch_without_prefix_raises(self, registry):
        with pytest.raises(InvalidToolNameError):
            await registry.dispatch("execute_command", {}, "default")

    @pytest.mark.parametrize("name", ["mcp__stub", "mcp____ping", "mcp__stub__"])
    async def test_dispatch_malformed_name(self, registry, name):
        result = await registry.dispatch(name, {}, "default")

        assert result.is_error is True
        assert "Expected 'mcp__serverName__toolName'" in result.text

    async def test_catalog_is_cached_as_plain_data(
        self, server_repository, factory, stdio_cache, stub_server_config
    ):
        cache = InMemoryCacheService()
        registry = ToolRegistry(server_repository, factory, stdio_cache, cache)
        await server_repository.save(stub_server_config(name="Stub"))

        await registry.list_all("default")

        cached = await cache.get(catalog_cache_key("default"))
        assert cached[0] == {
            "name": "mcp__stub__ping",
            "description": "[Stub] Reply with pong",
            "inputSchema": {"type": "object", "properties": {}},
        }
