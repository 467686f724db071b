import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from toolhub.domain.entities.server_config import DEFAULT_SCOPE, ServerConfig, TransportKind
from toolhub.domain.exceptions.domain_exceptions import ConfigurationError
from toolhub.domain.repositories.i_server_config_repository import IServerConfigRepository

logger = logging.getLogger(__name__)


def deserialize_server(data: dict[str, Any]) -> ServerConfig:
    """Build a server configuration from a dict such as a seed-file entry.

    Raises:
        ConfigurationError: If the transport is unknown or the entry has no name.
    """
    try:
        transport = TransportKind(data.get("transport", TransportKind.STDIO.value))
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown MCP transport '{data.get('transport')}' for server '{data.get('name')}'"
        ) from e

    if not data.get("name"):
        raise ConfigurationError("MCP server entry is missing a name.")

    fields: dict[str, Any] = {
        "name": data["name"],
        "transport": transport,
        "scope": data.get("scope") or DEFAULT_SCOPE,
        "description": data.get("description"),
        "command": data.get("command"),
        "args": tuple(data.get("args") or ()),
        "cwd": data.get("cwd"),
        "env": dict(data.get("env") or {}),
        "base_url": data.get("base_url"),
        "api_key_encrypted": data.get("api_key_encrypted"),
        "enabled": data.get("enabled", True),
    }
    if data.get("id"):
        fields["id"] = str(data["id"])
    if data.get("created_at"):
        fields["created_at"] = datetime.fromisoformat(data["created_at"])
    return ServerConfig(**fields)


class InMemoryServerConfigRepository(IServerConfigRepository):
    """Process-local store of server configurations."""

    def __init__(self, servers: Optional[List[ServerConfig]] = None):
        self._servers: Dict[str, ServerConfig] = {}
        for server in servers or []:
            self._servers[server.id] = server

    @classmethod
    def from_file(cls, path: str) -> "InMemoryServerConfigRepository":
        """Seed from a JSON file holding a list of server entries.

        Raises:
            ConfigurationError: If the file cannot be read or an entry is invalid.
        """
        try:
            entries = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot load MCP servers file '{path}': {e}") from e

        if not isinstance(entries, list):
            raise ConfigurationError(
                f"MCP servers file '{path}' must contain a JSON list."
            )

        servers = [deserialize_server(entry) for entry in entries]
        logger.info("Loaded %d MCP server configurations from %s", len(servers), path)
        return cls(servers)

    async def get_by_id(self, server_id: str) -> Optional[ServerConfig]:
        return self._servers.get(server_id)

    async def list_by_scope(self, scope: str) -> List[ServerConfig]:
        return self._sorted(s for s in self._servers.values() if s.scope == scope)

    async def list_enabled_by_scope(self, scope: str) -> List[ServerConfig]:
        return self._sorted(
            s for s in self._servers.values() if s.scope == scope and s.enabled
        )

    async def list_enabled_stdio(self) -> List[ServerConfig]:
        return self._sorted(
            s for s in self._servers.values() if s.enabled and s.is_stdio
        )

    async def save(self, server: ServerConfig) -> None:
        self._servers[server.id] = server

    async def delete(self, server_id: str) -> None:
        self._servers.pop(server_id, None)

    @staticmethod
    def _sorted(servers) -> List[ServerConfig]:
        return sorted(servers, key=lambda s: (s.created_at, s.name))
