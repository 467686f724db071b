from dataclasses import dataclass
from typing import List

from toolhub.application.interfaces.i_local_tool_executor import ILocalToolExecutor
from toolhub.application.interfaces.i_tool_registry import IToolRegistry
from toolhub.domain.entities.server_config import DEFAULT_SCOPE
from toolhub.domain.entities.tool_descriptor import ToolDescriptor


@dataclass
class ListAvailableToolsUseCase:
    """Use case for the combined catalog: built-in tools first, then MCP tools."""

    registry: IToolRegistry
    local_executor: ILocalToolExecutor

    async def execute(self, scope: str = DEFAULT_SCOPE) -> List[ToolDescriptor]:
        local_tools = self.local_executor.list_tools()
        mcp_tools = await self.registry.list_all(scope)
        return [*local_tools, *mcp_tools]
