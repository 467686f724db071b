"""
MCP client for remote servers reached over HTTP.

Every JSON-RPC envelope is a single ``POST {base_url}/messages``; the response
body carries the matching envelope. Failures never escape the client: listing
tools degrades to an empty list and tool calls come back as error text.
"""

import logging
from typing import Any, List, Optional

import httpx

from toolhub.application.interfaces.i_mcp_client import IMcpClient, LogSink
from toolhub.domain.entities.log_entry import LogEntry, LogLevel
from toolhub.domain.entities.tool_call_result import ToolCallResult
from toolhub.domain.entities.tool_descriptor import ToolDescriptor
from toolhub.infrastructure.mcp import jsonrpc
from toolhub.infrastructure.mcp.client.errors import (
    McpClientError,
    McpTimeoutError,
    ProtocolError,
    RpcError,
    TransportDisconnectedError,
)
from toolhub.infrastructure.mcp.client.results import parse_tool_call, parse_tool_list

logger = logging.getLogger(__name__)

DEFAULT_HTTP_TIMEOUT = 30.0


class HttpMcpClient(IMcpClient):
    """MCP client speaking JSON-RPC over plain HTTP POSTs."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        *,
        server_name: Optional[str] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        client_name: str = "toolhub",
        client_version: str = "1.0",
        http_client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        log_sink: Optional[LogSink] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._server_name = server_name or self._base_url
        self._client_info = {"name": client_name, "version": client_version}
        self._log_sink = log_sink
        self._initialized = False

        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._headers = headers

        # An injected client belongs to the caller and is left open on close
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout, transport=transport
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def messages_url(self) -> str:
        return f"{self._base_url}/messages"

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def _emit(self, level: LogLevel, message: str) -> None:
        if self._log_sink is not None:
            self._log_sink(LogEntry(level=level, message=message))

    async def list_tools(self) -> List[ToolDescriptor]:
        try:
            await self._ensure_initialized()
            result = await self._send_rpc("tools/list")
        except McpClientError as e:
            logger.error(
                "Failed to list tools from MCP server at %s: %s", self._base_url, e
            )
            return []

        tools = parse_tool_list(result)
        logger.info(
            "Discovered %d tools from MCP server at %s", len(tools), self._base_url
        )
        return tools

    async def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> ToolCallResult:
        try:
            await self._ensure_initialized()
            result = await self._send_rpc(
                "tools/call", {"name": tool_name, "arguments": arguments or {}}
            )
        except McpClientError as e:
            return ToolCallResult.failure(
                f"Error calling tool '{tool_name}' on MCP server "
                f"'{self._server_name}': {e.message}"
            )
        return parse_tool_call(result)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _ensure_initialized(self) -> None:
        if self._initialized:
            return

        params = {
            "protocolVersion": jsonrpc.PROTOCOL_VERSION,
            "capabilities": {
                "roots": {"listChanged": False},
                "sampling": {},
            },
            "clientInfo": self._client_info,
        }
        await self._send_rpc("initialize", params)
        await self._send_notification("notifications/initialized")

        # Only a successful handshake counts; a failed one is retried next call
        self._initialized = True

    async def _send_rpc(self, method: str, params: Optional[dict[str, Any]] = None) -> Any:
        """POST one request envelope and return its ``result``.

        Raises:
            McpTimeoutError: The HTTP request timed out.
            TransportDisconnectedError: Network failure or non-2xx status.
            ProtocolError: The body is not a JSON-RPC response.
            RpcError: The server returned a JSON-RPC error.
        """
        request = jsonrpc.build_request(method, params)

        try:
            response = await self._client.post(
                self.messages_url, content=request.to_json(), headers=self._headers
            )
        except httpx.TimeoutException as e:
            logger.error("MCP request '%s' to %s timed out", method, self._base_url)
            raise McpTimeoutError(
                method=method, timeout_s=_timeout_seconds(self._client)
            ) from e
        except httpx.HTTPError as e:
            logger.error("MCP request failed for '%s' at %s: %s", method, self._base_url, e)
            raise TransportDisconnectedError(
                self._server_name, f"is unreachable: {e}"
            ) from e

        if not response.is_success:
            logger.error(
                "MCP server returned %s for '%s': %s",
                response.status_code,
                method,
                response.text[:500],
            )
            self._emit(LogLevel.ERROR, f"HTTP {response.status_code} for '{method}'")
            raise TransportDisconnectedError(
                self._server_name, f"returned HTTP {response.status_code}"
            )

        envelope = jsonrpc.parse_envelope(response.content)
        if envelope.kind is jsonrpc.EnvelopeKind.ERROR:
            logger.error("MCP RPC error for '%s': %s", method, envelope.error_message)
            self._emit(LogLevel.ERROR, f"RPC error: {envelope.error_message}")
            raise RpcError(code=envelope.error_code, message=envelope.error_message)

        if envelope.kind is not jsonrpc.EnvelopeKind.RESPONSE:
            raise ProtocolError(
                f"MCP server '{self._server_name}' returned an invalid response for '{method}'"
            )
        return envelope.result

    async def _send_notification(self, method: str) -> None:
        notification = jsonrpc.build_notification(method)
        try:
            await self._client.post(
                self.messages_url, content=notification.to_json(), headers=self._headers
            )
        except httpx.HTTPError as e:
            logger.warning("Failed to send MCP notification '%s': %s", method, e)


def _timeout_seconds(client: httpx.AsyncClient) -> float:
    return client.timeout.read or 0.0
