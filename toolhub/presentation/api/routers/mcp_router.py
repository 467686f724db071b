"""
MCP Router - Exposes the platform itself as an MCP server.

Two transports share one handler:

1. Stateless POST: ``POST /mcp/messages`` answers in the HTTP body.
2. HTTP+SSE: ``GET /mcp/sse`` opens a stream whose first event names the
   endpoint to POST to; ``POST /mcp/messages?session=ID`` then returns 202
   and the response arrives on the stream.
"""

import json
from typing import Optional

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse, StreamingResponse

from toolhub.infrastructure.mcp import jsonrpc
from toolhub.presentation.api.dependencies import McpHandlerDep, ScopeDep, SseSessionsDep

router = APIRouter(prefix="/mcp", tags=["mcp"])


@router.get(
    "/sse",
    summary="Open an MCP SSE stream",
    response_class=StreamingResponse,
)
async def open_stream(sessions: SseSessionsDep):
    session = sessions.open()
    return StreamingResponse(
        session.events(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.post(
    "/messages",
    summary="Send an MCP JSON-RPC message",
)
async def post_message(
    request: Request,
    handler: McpHandlerDep,
    sessions: SseSessionsDep,
    scope: ScopeDep,
    session: Optional[str] = None,
):
    body = await request.body()
    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=jsonrpc.build_error(None, jsonrpc.PARSE_ERROR, "Parse error"),
        )

    response = await handler.handle(payload, scope)
    if response is None:
        return Response(status_code=status.HTTP_202_ACCEPTED)

    # Unknown or closed sessions fall back to answering in the body
    stream = sessions.get(session)
    if stream is not None:
        stream.send(response)
        return Response(status_code=status.HTTP_202_ACCEPTED)

    return JSONResponse(content=response)
