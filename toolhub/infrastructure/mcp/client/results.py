import json
from typing import Any, List

from toolhub.domain.entities.tool_call_result import ToolCallResult
from toolhub.domain.entities.tool_descriptor import ToolDescriptor


def parse_tool_list(result: Any) -> List[ToolDescriptor]:
    """Read the ``tools`` array of a ``tools/list`` result, skipping nameless entries."""
    if not isinstance(result, dict):
        return []

    tools = result.get("tools")
    if not isinstance(tools, list):
        return []

    descriptors = []
    for entry in tools:
        if not isinstance(entry, dict):
            continue
        descriptor = ToolDescriptor.from_mcp(entry)
        if descriptor.name:
            descriptors.append(descriptor)
    return descriptors


def parse_tool_call(result: Any) -> ToolCallResult:
    """Flatten a ``tools/call`` result into text.

    MCP results look like ``{"content": [{"type": "text", "text": "..."}]}``.
    Text blocks are joined line by line, ``error`` blocks are prefixed, and a
    result without a content array is returned as its JSON.
    """
    if not isinstance(result, dict) or not isinstance(result.get("content"), list):
        return ToolCallResult.ok(json.dumps(result))

    lines = []
    for block in result["content"]:
        if not isinstance(block, dict):
            continue
        block_type = block.get("type")
        if block_type == "text":
            lines.append(str(block.get("text") or ""))
        elif block_type == "error":
            lines.append(f"Error: {block.get('text') or ''}")

    text = "\n".join(lines).strip()
    if result.get("isError") is True:
        return ToolCallResult(text=text, is_error=True)
    return ToolCallResult.ok(text)
