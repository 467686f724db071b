from typing import Any, List

from toolhub.application.interfaces.i_local_tool_executor import ILocalToolExecutor
from toolhub.domain.entities.tool_call_result import ToolCallResult
from toolhub.domain.entities.tool_descriptor import ToolDescriptor


class NullLocalToolExecutor(ILocalToolExecutor):
    """Executor for deployments without built-in tools."""

    def list_tools(self) -> List[ToolDescriptor]:
        return []

    async def execute(
        self, tool_name: str, arguments: dict[str, Any], scope: str
    ) -> ToolCallResult:
        return ToolCallResult.failure(f"Error: Unknown tool '{tool_name}'.")
