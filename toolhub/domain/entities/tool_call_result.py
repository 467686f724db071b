from dataclasses import dataclass


@dataclass(frozen=True)
class ToolCallResult:
    """Outcome of a tool call as text the orchestrating LLM can read.

    Failures travel through this object rather than as exceptions.
    """

    text: str
    is_error: bool = False

    @classmethod
    def ok(cls, text: str) -> "ToolCallResult":
        return cls(text=text)

    @classmethod
    def failure(cls, text: str) -> "ToolCallResult":
        if not text.startswith("Error"):
            text = f"Error: {text}"
        return cls(text=text, is_error=True)
