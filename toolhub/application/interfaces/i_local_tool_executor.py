from abc import ABC, abstractmethod
from typing import Any, List

from toolhub.domain.entities.tool_call_result import ToolCallResult
from toolhub.domain.entities.tool_descriptor import ToolDescriptor


class ILocalToolExecutor(ABC):
    """Executes the platform's built-in, policy-gated tools.

    Built-in tool names never carry the ``mcp__`` prefix, which is what lets the
    router tell them apart from registry tools.
    """

    @abstractmethod
    def list_tools(self) -> List[ToolDescriptor]:
        """Descriptors of the built-in tools."""
        pass

    @abstractmethod
    async def execute(
        self, tool_name: str, arguments: dict[str, Any], scope: str
    ) -> ToolCallResult:
        """Run a built-in tool and return its textual outcome."""
        pass
