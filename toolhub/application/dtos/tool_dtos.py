from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class ToolDTO(BaseModel):
    """DTO representing a callable tool in MCP shape."""

    name: str
    description: str = ""
    inputSchema: Dict[str, Any] = Field(default_factory=dict)


class ToolListResponse(BaseModel):
    tools: List[ToolDTO]
    total: int


class ToolCallRequest(BaseModel):
    """Request DTO for invoking a tool by name."""

    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)
    scope: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "name": "mcp__echo_mcp__echo",
                "arguments": {"text": "hello"},
            }
        }


class ToolCallResponse(BaseModel):
    """Textual outcome of a tool call."""

    text: str
    is_error: bool = False
