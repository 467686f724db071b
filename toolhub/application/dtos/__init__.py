from .server_dtos import (
    LogEntryDTO,
    ServerCreateRequest,
    ServerDTO,
    ServerTestResult,
    ServerUpdateRequest,
    ToolSummaryDTO,
    TransportType,
)
from .tool_dtos import ToolCallRequest, ToolCallResponse, ToolDTO, ToolListResponse

__all__ = [
    "LogEntryDTO",
    "ServerCreateRequest",
    "ServerDTO",
    "ServerTestResult",
    "ServerUpdateRequest",
    "ToolSummaryDTO",
    "TransportType",
    "ToolCallRequest",
    "ToolCallResponse",
    "ToolDTO",
    "ToolListResponse",
]
