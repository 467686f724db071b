from .namespaced_tool_name import (
    MCP_PREFIX,
    NamespacedToolName,
    is_namespaced,
    normalize_server_name,
)
from .session_id import SessionId

__all__ = [
    "MCP_PREFIX",
    "NamespacedToolName",
    "is_namespaced",
    "normalize_server_name",
    "SessionId",
]
