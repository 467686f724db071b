"""
Tools Router - The aggregated tool catalog and tool invocation.
"""

from fastapi import APIRouter, HTTPException, status

from toolhub.application.dtos.tool_dtos import (
    ToolCallRequest,
    ToolCallResponse,
    ToolDTO,
    ToolListResponse,
)
from toolhub.domain.entities.server_config import DEFAULT_SCOPE
from toolhub.domain.exceptions.domain_exceptions import InvalidToolNameError
from toolhub.presentation.api.dependencies import (
    ExecuteToolUseCaseDep,
    ListToolsUseCaseDep,
    ScopeDep,
)

router = APIRouter(prefix="/api/tools", tags=["tools"])


@router.get(
    "",
    response_model=ToolListResponse,
    summary="List available tools",
    description="Built-in tools plus the namespaced tools of every enabled MCP server.",
)
async def list_tools(use_case: ListToolsUseCaseDep, scope: ScopeDep):
    tools = await use_case.execute(scope)
    return ToolListResponse(
        tools=[ToolDTO(**tool.to_mcp()) for tool in tools],
        total=len(tools),
    )


@router.post(
    "/call",
    response_model=ToolCallResponse,
    summary="Call a tool",
    description="Failures are reported in the response text with is_error set.",
)
async def call_tool(request: ToolCallRequest, use_case: ExecuteToolUseCaseDep):
    try:
        result = await use_case.execute(
            request.name,
            request.arguments,
            request.scope or DEFAULT_SCOPE,
        )
    except InvalidToolNameError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ToolCallResponse(text=result.text, is_error=result.is_error)
