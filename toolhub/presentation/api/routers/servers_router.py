"""
MCP Servers Router - Endpoints for configuring and inspecting MCP servers.
"""

from typing import List

from fastapi import APIRouter, HTTPException, Query, Response, status

from toolhub.application.dtos.server_dtos import (
    LogEntryDTO,
    ServerCreateRequest,
    ServerDTO,
    ServerTestResult,
    ServerUpdateRequest,
    ToolSummaryDTO,
)
from toolhub.domain.exceptions.domain_exceptions import (
    ConfigurationError,
    ServerNotFoundError,
    ServerUnreachableError,
)
from toolhub.presentation.api.dependencies import ManageServersUseCaseDep, ScopeDep

router = APIRouter(prefix="/api/mcp-servers", tags=["mcp-servers"])


def _not_found(e: ServerNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get(
    "",
    response_model=List[ServerDTO],
    summary="List MCP servers",
)
async def list_servers(use_case: ManageServersUseCaseDep, scope: ScopeDep):
    return await use_case.list_servers(scope)


@router.get("/{server_id}", response_model=ServerDTO, summary="Get an MCP server")
async def get_server(server_id: str, use_case: ManageServersUseCaseDep, scope: ScopeDep):
    try:
        return await use_case.get_server(server_id, scope)
    except ServerNotFoundError as e:
        raise _not_found(e)


@router.post(
    "",
    response_model=ServerDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Register an MCP server",
    description="Stdio servers need a command, HTTP servers a base URL.",
)
async def create_server(
    request: ServerCreateRequest,
    use_case: ManageServersUseCaseDep,
    scope: ScopeDep,
):
    try:
        return await use_case.create_server(request, scope)
    except ConfigurationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )


@router.put("/{server_id}", response_model=ServerDTO, summary="Update an MCP server")
async def update_server(
    server_id: str,
    request: ServerUpdateRequest,
    use_case: ManageServersUseCaseDep,
    scope: ScopeDep,
):
    try:
        return await use_case.update_server(server_id, request, scope)
    except ServerNotFoundError as e:
        raise _not_found(e)
    except ConfigurationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )


@router.delete(
    "/{server_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an MCP server",
)
async def delete_server(server_id: str, use_case: ManageServersUseCaseDep, scope: ScopeDep):
    try:
        await use_case.delete_server(server_id, scope)
    except ServerNotFoundError as e:
        raise _not_found(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{server_id}/test",
    response_model=ServerTestResult,
    summary="Test connectivity",
    description="Connect with a fresh client and list the server's tools.",
)
async def test_server(server_id: str, use_case: ManageServersUseCaseDep, scope: ScopeDep):
    try:
        return await use_case.test_connection(server_id, scope)
    except ServerNotFoundError as e:
        raise _not_found(e)


@router.get(
    "/{server_id}/tools",
    response_model=List[ToolSummaryDTO],
    summary="List a server's tools",
    description="Live discovery; stdio servers reuse their running process.",
)
async def list_server_tools(
    server_id: str,
    use_case: ManageServersUseCaseDep,
    scope: ScopeDep,
):
    try:
        return await use_case.list_server_tools(server_id, scope)
    except ServerNotFoundError as e:
        raise _not_found(e)
    except ServerUnreachableError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.get(
    "/{server_id}/logs",
    response_model=List[LogEntryDTO],
    summary="Recent server output",
    description="Stderr lines and lifecycle events of a stdio server, oldest first.",
)
async def get_server_logs(
    server_id: str,
    use_case: ManageServersUseCaseDep,
    scope: ScopeDep,
    count: int = Query(default=100, ge=1, le=1000),
):
    try:
        return await use_case.get_logs(server_id, count, scope)
    except ServerNotFoundError as e:
        raise _not_found(e)
