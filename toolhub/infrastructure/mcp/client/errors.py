class McpClientError(RuntimeError):
    """Base exception for MCP client failures.

    Transport and protocol failures are normalized into a small set of error
    types so callers at a tool-call boundary can turn them into text.
    """

    def __init__(self, error_type: str, message: str, *, details: dict[str, str] | None = None):
        super().__init__(message)
        self.error_type = error_type
        self.message = message
        self.details = details or {}


class TransportDisconnectedError(McpClientError):
    """The pipe, process or connection behind a client is gone."""

    def __init__(self, server_name: str, reason: str = "disconnected unexpectedly"):
        super().__init__(
            "transport_disconnected",
            f"MCP server '{server_name}' {reason}",
            details={"server": server_name},
        )


class ProtocolError(McpClientError):
    """A message could not be understood as JSON-RPC."""

    def __init__(self, message: str):
        super().__init__("protocol_error", message)


class RpcError(McpClientError):
    """The server answered with a well-formed JSON-RPC error."""

    def __init__(self, *, code: int, message: str):
        super().__init__("rpc_error", message, details={"code": str(code)})
        self.code = code


class McpTimeoutError(McpClientError):
    def __init__(self, *, method: str, timeout_s: float):
        super().__init__(
            "timeout",
            f"MCP request '{method}' timed out after {timeout_s:g}s",
            details={"method": method, "timeout_s": str(timeout_s)},
        )
