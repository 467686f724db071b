"""
JSON-RPC request handling for the platform's own MCP endpoint.

The handler is transport-agnostic: the router hands it one decoded envelope
and either returns the response envelope in the HTTP body or queues it to an
SSE session.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from toolhub.application.use_cases.execute_tool_call import ExecuteToolCallUseCase
from toolhub.application.use_cases.list_available_tools import ListAvailableToolsUseCase
from toolhub.infrastructure.mcp import jsonrpc

logger = logging.getLogger(__name__)


class McpRequestHandler:
    """Answers ``initialize``, ``tools/list``, ``tools/call`` and ``ping``."""

    def __init__(
        self,
        list_tools: ListAvailableToolsUseCase,
        execute_tool: ExecuteToolCallUseCase,
        server_name: str = "toolhub",
        server_version: str = "1.0.0",
    ):
        self._list_tools = list_tools
        self._execute_tool = execute_tool
        self._server_info = {"name": server_name, "version": server_version}
        self._methods: Dict[str, Callable[[dict[str, Any], str], Awaitable[Any]]] = {
            "initialize": self._initialize,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
            "ping": self._ping,
        }

    async def handle(self, payload: Any, scope: str) -> Optional[dict[str, Any]]:
        """Process one decoded JSON-RPC message.

        Returns:
            The response envelope, or None for notifications.
        """
        envelope = jsonrpc.classify(payload)

        if envelope.kind is jsonrpc.EnvelopeKind.NOTIFICATION:
            logger.debug("MCP notification received: %s", envelope.method)
            return None

        if envelope.kind is not jsonrpc.EnvelopeKind.REQUEST:
            return jsonrpc.build_error(
                envelope.id, jsonrpc.INVALID_REQUEST, "Invalid Request"
            )

        method = self._methods.get(envelope.method)
        if method is None:
            return jsonrpc.build_error(
                envelope.id,
                jsonrpc.METHOD_NOT_FOUND,
                f"Method not found: {envelope.method}",
            )

        try:
            result = await method(envelope.params or {}, scope)
        except Exception as e:
            logger.exception("MCP method '%s' failed", envelope.method)
            return jsonrpc.build_error(envelope.id, jsonrpc.INTERNAL_ERROR, str(e))

        return jsonrpc.build_response(envelope.id, result)

    async def _initialize(self, params: dict[str, Any], scope: str) -> dict[str, Any]:
        return {
            "protocolVersion": jsonrpc.PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": self._server_info,
        }

    async def _tools_list(self, params: dict[str, Any], scope: str) -> dict[str, Any]:
        tools = await self._list_tools.execute(scope)
        return {"tools": [tool.to_mcp() for tool in tools]}

    async def _tools_call(self, params: dict[str, Any], scope: str) -> dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("tools/call requires a tool name")

        arguments = params.get("arguments")
        if not isinstance(arguments, dict):
            arguments = {}

        result = await self._execute_tool.execute(name, arguments, scope)
        return {
            "content": [{"type": "text", "text": result.text}],
            "isError": result.is_error,
        }

    async def _ping(self, params: dict[str, Any], scope: str) -> dict[str, Any]:
        return {}
