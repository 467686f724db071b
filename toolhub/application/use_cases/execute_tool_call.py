import logging
from dataclasses import dataclass
from typing import Any, Optional

from toolhub.application.interfaces.i_local_tool_executor import ILocalToolExecutor
from toolhub.application.interfaces.i_tool_registry import IToolRegistry
from toolhub.domain.entities.server_config import DEFAULT_SCOPE
from toolhub.domain.entities.tool_call_result import ToolCallResult

logger = logging.getLogger(__name__)


@dataclass
class ExecuteToolCallUseCase:
    """Use case routing a tool call to the MCP registry or the local executor."""

    registry: IToolRegistry
    local_executor: ILocalToolExecutor

    async def execute(
        self,
        tool_name: str,
        arguments: Optional[dict[str, Any]] = None,
        scope: str = DEFAULT_SCOPE,
    ) -> ToolCallResult:
        """Run a tool and return its textual outcome.

        Namespaced names (``mcp__...``) go to the registry; every other name is
        a built-in tool.
        """
        arguments = arguments or {}

        if self.registry.is_mcp_tool(tool_name):
            return await self.registry.dispatch(tool_name, arguments, scope)

        logger.debug("Executing local tool '%s' for scope '%s'", tool_name, scope)
        return await self.local_executor.execute(tool_name, arguments, scope)
