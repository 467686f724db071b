"""
MCP client over a local subprocess (stdio transport).

JSON-RPC 2.0 messages are exchanged as one JSON document per line. Each client
owns two background tasks for its whole life:

- the stdout pump, which routes responses to the pending request with the same
  id and fails every pending request when stdout reaches EOF;
- the stderr pump, which forwards every line to the log sink.

No other code reads the child's stdout or stderr.
"""

import asyncio
import logging
from typing import Any, List, Optional

from toolhub.application.interfaces.i_mcp_client import IMcpClient, LogSink
from toolhub.domain.entities.log_entry import LogEntry, LogLevel
from toolhub.domain.entities.tool_call_result import ToolCallResult
from toolhub.domain.entities.tool_descriptor import ToolDescriptor
from toolhub.infrastructure.mcp import jsonrpc
from toolhub.infrastructure.mcp.client.errors import (
    McpClientError,
    McpTimeoutError,
    RpcError,
    TransportDisconnectedError,
)
from toolhub.infrastructure.mcp.client.results import parse_tool_call, parse_tool_list
from toolhub.infrastructure.mcp.process import ProcessHandle

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 60.0
# uvx/npx may download and byte-compile a whole package on first start
DEFAULT_INITIALIZE_TIMEOUT = 300.0
DEFAULT_SHUTDOWN_GRACE = 3.0


class StdioMcpClient(IMcpClient):
    """MCP client bound to one running :class:`ProcessHandle`."""

    def __init__(
        self,
        handle: ProcessHandle,
        server_name: str,
        *,
        client_name: str = "toolhub",
        client_version: str = "1.0",
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        initialize_timeout: float = DEFAULT_INITIALIZE_TIMEOUT,
        shutdown_grace: float = DEFAULT_SHUTDOWN_GRACE,
        log_sink: Optional[LogSink] = None,
    ):
        self._handle = handle
        self._server_name = server_name
        self._client_info = {"name": client_name, "version": client_version}
        self._request_timeout = request_timeout
        self._initialize_timeout = initialize_timeout
        self._shutdown_grace = shutdown_grace
        self._log_sink = log_sink

        self._pending: dict[str, asyncio.Future] = {}
        self._transport_closed = False
        self._disposed = False
        self._initialized = False
        self._init_task: Optional[asyncio.Task] = None
        self.server_info: Optional[dict[str, Any]] = None

        # Start both readers right away so early output is not lost
        self._stdout_task = asyncio.create_task(
            self._stdout_pump(), name=f"mcp-stdout-{server_name}"
        )
        self._stderr_task = asyncio.create_task(
            self._stderr_pump(), name=f"mcp-stderr-{server_name}"
        )

    @property
    def server_name(self) -> str:
        return self._server_name

    @property
    def pid(self) -> Optional[int]:
        return self._handle.pid

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def has_exited(self) -> bool:
        """True if the process was reaped or its stdout is closed."""
        return self._transport_closed or self._handle.has_exited()

    def _emit(self, level: LogLevel, message: str) -> None:
        if self._log_sink is not None:
            self._log_sink(LogEntry(level=level, message=message))

    # -- Public API ---------------------------------------------------------

    async def list_tools(self) -> List[ToolDescriptor]:
        await self.ensure_initialized()
        result = await self.send_request("tools/list")
        tools = parse_tool_list(result)
        logger.info(
            "Discovered %d tools from stdio MCP server '%s'", len(tools), self._server_name
        )
        return tools

    async def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> ToolCallResult:
        try:
            await self.ensure_initialized()
            result = await self.send_request(
                "tools/call", {"name": tool_name, "arguments": arguments or {}}
            )
        except McpClientError as e:
            return ToolCallResult.failure(
                f"Error calling tool '{tool_name}' on stdio MCP server "
                f"'{self._server_name}': {e.message}"
            )
        return parse_tool_call(result)

    async def ensure_initialized(self) -> None:
        """Run the initialize handshake once; later calls return immediately.

        Concurrent callers share one handshake. The handshake is shielded, so a
        caller that gives up does not abort it for the others.
        """
        if self._initialized:
            return

        task = self._init_task
        if task is None or (task.done() and (task.cancelled() or task.exception())):
            task = asyncio.create_task(self._initialize())
            task.add_done_callback(_consume_exception)
            self._init_task = task

        await asyncio.shield(task)

    async def send_request(
        self,
        method: str,
        params: Optional[dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Send a request and wait for the matching response.

        Raises:
            TransportDisconnectedError: The process is gone or stdout closed.
            RpcError: The server answered with a JSON-RPC error.
            McpTimeoutError: No answer within ``timeout``.
        """
        if self._transport_closed or self._disposed:
            raise TransportDisconnectedError(self._server_name, "is not running")

        request = jsonrpc.build_request(method, params)
        key = str(request.id)
        timeout = self._request_timeout if timeout is None else timeout

        # Register before writing so a fast response cannot be missed
        future = asyncio.get_running_loop().create_future()
        self._pending[key] = future

        try:
            await self._write(jsonrpc.encode_line(request))
            return await asyncio.wait_for(future, timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "stdio MCP request '%s' timed out for '%s'", method, self._server_name
            )
            self._emit(LogLevel.WARN, f"Request '{method}' timed out after {timeout:g}s")
            raise McpTimeoutError(method=method, timeout_s=timeout) from None
        except asyncio.CancelledError:
            self._emit(LogLevel.WARN, f"Request '{method}' cancelled")
            raise
        finally:
            self._pending.pop(key, None)

    async def send_notification(
        self, method: str, params: Optional[dict[str, Any]] = None
    ) -> None:
        """Write a notification; failures are logged, never raised."""
        try:
            await self._write(jsonrpc.encode_line(jsonrpc.build_notification(method, params)))
        except McpClientError as e:
            logger.warning(
                "Failed to send stdio MCP notification '%s' to '%s': %s",
                method,
                self._server_name,
                e,
            )

    async def aclose(self) -> None:
        """Shut down: close stdin, wait the grace period, kill, join both pumps."""
        if self._disposed:
            return
        self._disposed = True

        if self._init_task is not None and not self._init_task.done():
            self._init_task.cancel()

        self._fail_pending(TransportDisconnectedError(self._server_name, "is shutting down"))

        try:
            code = await self._handle.terminate(self._shutdown_grace)
            logger.info(
                "Stopped stdio MCP server '%s' (exit code %s)", self._server_name, code
            )
            self._emit(LogLevel.INFO, f"Process stopped (exit code {code})")
        finally:
            for task in (self._stdout_task, self._stderr_task):
                task.cancel()
            await asyncio.gather(self._stdout_task, self._stderr_task, return_exceptions=True)

    # -- Handshake ----------------------------------------------------------

    async def _initialize(self) -> None:
        # Minimal capabilities: some servers reject unknown capability keys
        params = {
            "protocolVersion": jsonrpc.PROTOCOL_VERSION,
            "capabilities": {},
            "clientInfo": self._client_info,
        }

        logger.info(
            "Sending MCP initialize to '%s' (timeout %ds)",
            self._server_name,
            self._initialize_timeout,
        )
        self._emit(
            LogLevel.INFO,
            f"Sending initialize handshake (timeout {int(self._initialize_timeout)}s)",
        )

        try:
            result = await self.send_request(
                "initialize", params, timeout=self._initialize_timeout
            )
        except McpClientError as e:
            self._emit(LogLevel.ERROR, f"Initialize failed: {e.message}")
            raise

        if isinstance(result, dict):
            self.server_info = result.get("serverInfo")
        self._emit(LogLevel.INFO, "Initialize handshake complete")

        await self.send_notification("notifications/initialized")
        self._initialized = True

    # -- Transport ----------------------------------------------------------

    async def _write(self, data: bytes) -> None:
        stdin = self._handle.stdin
        try:
            stdin.write(data)
            await stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            raise TransportDisconnectedError(
                self._server_name, "closed its stdin"
            ) from e

    def _fail_pending(self, error: McpClientError) -> None:
        pending = list(self._pending.values())
        self._pending.clear()
        for future in pending:
            if not future.done():
                future.set_exception(error)

    async def _stdout_pump(self) -> None:
        reader = self._handle.stdout
        try:
            while True:
                try:
                    line = await reader.readline()
                except ValueError:
                    logger.warning(
                        "stdio MCP server '%s' wrote a line over the size limit",
                        self._server_name,
                    )
                    self._emit(LogLevel.WARN, "Dropped an oversized stdout line")
                    continue

                if not line:
                    logger.info("stdio MCP server '%s' closed its stdout", self._server_name)
                    break

                if line.strip():
                    self._dispatch_line(line)
        except (ConnectionResetError, BrokenPipeError) as e:
            logger.error("stdio MCP reader loop error for '%s': %s", self._server_name, e)
        finally:
            self._transport_closed = True
            self._fail_pending(TransportDisconnectedError(self._server_name))

    def _dispatch_line(self, line: bytes) -> None:
        envelope = jsonrpc.parse_envelope(line)
        kind = envelope.kind

        if kind is jsonrpc.EnvelopeKind.MALFORMED:
            self._emit(LogLevel.WARN, "Ignored a non-JSON-RPC line on stdout")
            return

        if kind is jsonrpc.EnvelopeKind.NOTIFICATION:
            params = envelope.params or {}
            logger.debug(
                "[%s] %s %s", self._server_name, envelope.method, params.get("data", "")
            )
            return

        if kind is jsonrpc.EnvelopeKind.REQUEST:
            self._answer_server_request(envelope)
            return

        future = self._pending.get(str(envelope.id))
        if future is None or future.done():
            logger.debug(
                "Discarding response %s from '%s' with no waiting request",
                envelope.id,
                self._server_name,
            )
            return

        if kind is jsonrpc.EnvelopeKind.ERROR:
            logger.error(
                "stdio MCP RPC error from '%s': %s", self._server_name, envelope.error_message
            )
            self._emit(LogLevel.ERROR, f"RPC error: {envelope.error_message}")
            future.set_exception(
                RpcError(code=envelope.error_code, message=envelope.error_message)
            )
            return

        future.set_result(envelope.result)

    def _answer_server_request(self, envelope: jsonrpc.Envelope) -> None:
        # Servers may ping the client; every other server-initiated request is unsupported
        if envelope.method == "ping":
            reply = jsonrpc.build_response(envelope.id, {})
        else:
            reply = jsonrpc.build_error(
                envelope.id,
                jsonrpc.METHOD_NOT_FOUND,
                f"Method not found: {envelope.method}",
            )
        try:
            self._handle.stdin.write(jsonrpc.encode_line(reply))
        except (BrokenPipeError, ConnectionResetError):
            pass

    async def _stderr_pump(self) -> None:
        reader = self._handle.stderr
        try:
            while True:
                try:
                    raw = await reader.readline()
                except ValueError:
                    continue
                if not raw:
                    break

                line = raw.decode("utf-8", errors="replace").rstrip()
                if not line.strip():
                    continue

                logger.debug("[%s] stderr: %s", self._server_name, line)
                self._emit(LogLevel.STDERR, line)
        except (ConnectionResetError, BrokenPipeError) as e:
            logger.debug("stdio MCP stderr reader exited for '%s': %s", self._server_name, e)


def _consume_exception(task: asyncio.Task) -> None:
    if not task.cancelled():
        task.exception()
