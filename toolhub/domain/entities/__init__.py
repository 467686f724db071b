from .log_entry import LogEntry, LogLevel
from .server_config import DEFAULT_SCOPE, ServerConfig, TransportKind
from .tool_call_result import ToolCallResult
from .tool_descriptor import ToolDescriptor

__all__ = [
    "DEFAULT_SCOPE",
    "LogEntry",
    "LogLevel",
    "ServerConfig",
    "ToolCallResult",
    "ToolDescriptor",
    "TransportKind",
]
