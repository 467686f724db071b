import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ..exceptions.domain_exceptions import ConfigurationError

DEFAULT_SCOPE = "default"


class TransportKind(Enum):
    STDIO = "stdio"
    HTTP = "http"


@dataclass(frozen=True)
class ServerConfig:
    """Immutable snapshot of one external MCP server's configuration.

    Clients built from a snapshot never observe later edits; an edit produces a
    new snapshot and the cached client for the old one has to be invalidated.
    """

    name: str
    transport: TransportKind
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    scope: str = DEFAULT_SCOPE
    description: Optional[str] = None

    # Stdio transport
    command: Optional[str] = None
    args: tuple[str, ...] = ()
    cwd: Optional[str] = None
    env: dict[str, str] = field(default_factory=dict)

    # HTTP transport
    base_url: Optional[str] = None
    api_key_encrypted: Optional[str] = None

    enabled: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_stdio(self) -> bool:
        return self.transport is TransportKind.STDIO

    def validate(self) -> None:
        """Fail fast when the connection parameters for the transport are missing."""
        if not self.name or not self.name.strip():
            raise ConfigurationError("MCP server name cannot be empty.")
        if self.transport is TransportKind.STDIO:
            if not self.command or not self.command.strip():
                raise ConfigurationError(
                    f"MCP server '{self.name}' has no command configured."
                )
        elif not self.base_url or not self.base_url.strip():
            raise ConfigurationError(
                f"MCP server '{self.name}' has no base URL configured."
            )

    def with_changes(self, **changes) -> "ServerConfig":
        """Return a new snapshot with the given fields replaced."""
        if "args" in changes and changes["args"] is not None:
            changes["args"] = tuple(changes["args"])
        return dataclasses.replace(self, **changes)
