from pydantic import BaseModel, Field
from enum import Enum
from typing import Dict, List, Optional
from datetime import datetime


class TransportType(str, Enum):
    STDIO = "stdio"
    HTTP = "http"


class ServerCreateRequest(BaseModel):
    """Request DTO for registering an MCP server."""

    name: str
    description: Optional[str] = None
    transport: TransportType = TransportType.STDIO
    scope: Optional[str] = None

    # stdio
    command: Optional[str] = None
    args: List[str] = Field(default_factory=list)
    cwd: Optional[str] = None
    env: Dict[str, str] = Field(default_factory=dict)

    # http
    base_url: Optional[str] = None
    api_key: Optional[str] = None

    enabled: bool = True

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Echo MCP",
                "transport": "stdio",
                "command": "python",
                "args": ["-m", "toolhub.infrastructure.mcp.servers.echo_server"],
            }
        }


class ServerUpdateRequest(BaseModel):
    """Request DTO for editing an MCP server. Omitted fields are kept."""

    name: Optional[str] = None
    description: Optional[str] = None
    command: Optional[str] = None
    args: Optional[List[str]] = None
    cwd: Optional[str] = None
    env: Optional[Dict[str, str]] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None  # "" removes the stored key
    enabled: Optional[bool] = None


class ServerDTO(BaseModel):
    """DTO representing a configured MCP server. Never carries the secret."""

    id: str
    scope: str
    name: str
    description: Optional[str] = None
    transport: TransportType
    command: Optional[str] = None
    args: List[str] = Field(default_factory=list)
    cwd: Optional[str] = None
    env: Dict[str, str] = Field(default_factory=dict)
    base_url: Optional[str] = None
    has_api_key: bool = False
    enabled: bool
    created_at: datetime


class ToolSummaryDTO(BaseModel):
    name: str
    description: str = ""


class ServerTestResult(BaseModel):
    """Outcome of a connectivity test against a fresh client."""

    success: bool
    tool_count: int = 0
    tools: List[ToolSummaryDTO] = Field(default_factory=list)
    error: Optional[str] = None


class LogEntryDTO(BaseModel):
    """DTO representing one captured server log line."""

    timestamp: datetime
    level: str  # "info", "warn", "error" or "stderr"
    message: str

