from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

from toolhub.domain.entities.log_entry import LogEntry
from toolhub.domain.entities.server_config import ServerConfig
from toolhub.domain.entities.tool_call_result import ToolCallResult
from toolhub.domain.entities.tool_descriptor import ToolDescriptor

LogSink = Callable[[LogEntry], None]


class IMcpClient(ABC):
    """Interface for talking to one MCP server.

    Implementations exist for the stdio and HTTP transports. The holder of an
    ``IMcpClient`` owns it and must call :meth:`aclose` (or use ``async with``).
    Code that only needs to use a client someone else owns receives a
    :class:`BorrowedMcpClient` instead, which has no way to close it.
    """

    @abstractmethod
    async def list_tools(self) -> List[ToolDescriptor]:
        """List the tools the server advertises."""
        pass

    @abstractmethod
    async def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> ToolCallResult:
        """Call a tool. Failures are returned as an error result, not raised."""
        pass

    @abstractmethod
    async def aclose(self) -> None:
        """Release the transport (terminate the process, close the connection)."""
        pass

    def borrow(self) -> "BorrowedMcpClient":
        return BorrowedMcpClient(self)

    async def __aenter__(self) -> "IMcpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


class BorrowedMcpClient:
    """Use-only view of a client whose lifetime belongs to someone else."""

    __slots__ = ("_inner",)

    def __init__(self, inner: IMcpClient):
        self._inner = inner

    async def list_tools(self) -> List[ToolDescriptor]:
        return await self._inner.list_tools()

    async def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> ToolCallResult:
        return await self._inner.call_tool(tool_name, arguments)


class IMcpClientFactory(ABC):
    """Builds an owned client for a server configuration."""

    @abstractmethod
    async def create(
        self,
        server: ServerConfig,
        log_sink: Optional[LogSink] = None,
    ) -> IMcpClient:
        """Create a client for ``server``.

        Raises:
            ConfigurationError: If the command or URL is missing. Nothing is
                spawned in that case.
        """
        pass
