from abc import ABC, abstractmethod
from typing import Any, AsyncContextManager, List, Optional

from toolhub.application.interfaces.i_mcp_client import BorrowedMcpClient
from toolhub.domain.entities.server_config import ServerConfig
from toolhub.domain.entities.tool_call_result import ToolCallResult
from toolhub.domain.entities.tool_descriptor import ToolDescriptor


class IToolRegistry(ABC):
    """Aggregated, namespaced view over every MCP server of a scope."""

    @abstractmethod
    def is_mcp_tool(self, name: str) -> bool:
        """True if ``name`` carries the MCP namespace prefix (case-insensitive)."""
        pass

    @abstractmethod
    async def list_all(self, scope: str) -> List[ToolDescriptor]:
        """Namespaced tools of every enabled server in the scope."""
        pass

    @abstractmethod
    async def invalidate_catalog(self, scope: str) -> None:
        """Forget the cached catalog of a scope."""
        pass

    @abstractmethod
    async def dispatch(
        self, name: str, arguments: Optional[dict[str, Any]], scope: str
    ) -> ToolCallResult:
        """Call a namespaced tool. Raises InvalidToolNameError without the prefix."""
        pass

    @abstractmethod
    def lease(self, server: ServerConfig) -> AsyncContextManager[BorrowedMcpClient]:
        """Borrow a client for one server for the duration of a block."""
        pass
