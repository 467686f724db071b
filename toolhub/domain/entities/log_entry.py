from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class LogLevel(Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    STDERR = "stderr"


@dataclass(frozen=True)
class LogEntry:
    """A single line of output or lifecycle event captured for an MCP server."""

    level: LogLevel
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
