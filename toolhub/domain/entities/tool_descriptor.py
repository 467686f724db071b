from dataclasses import dataclass, field
from typing import Any


def _empty_schema() -> dict[str, Any]:
    return {"type": "object", "properties": {}}


@dataclass(frozen=True)
class ToolDescriptor:
    """A tool as advertised by an MCP server.

    ``input_schema`` is the server's JSON schema, kept as an untyped dict.
    """

    name: str
    description: str = ""
    input_schema: dict[str, Any] = field(default_factory=_empty_schema)

    @classmethod
    def from_mcp(cls, payload: dict[str, Any]) -> "ToolDescriptor":
        """Build from a ``tools/list`` entry (``name``, ``description``, ``inputSchema``)."""
        schema = payload.get("inputSchema")
        return cls(
            name=payload.get("name") or "",
            description=payload.get("description") or "",
            input_schema=schema if isinstance(schema, dict) else _empty_schema(),
        )

    def to_mcp(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }
