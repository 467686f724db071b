from abc import ABC, abstractmethod
from typing import List, Optional

from ..entities.server_config import ServerConfig


class IServerConfigRepository(ABC):
    """Abstract repository interface for MCP server configuration storage."""

    @abstractmethod
    async def get_by_id(self, server_id: str) -> Optional[ServerConfig]:
        """Retrieve a server configuration by its ID."""
        pass

    @abstractmethod
    async def list_by_scope(self, scope: str) -> List[ServerConfig]:
        """List every server configuration in a scope."""
        pass

    @abstractmethod
    async def list_enabled_by_scope(self, scope: str) -> List[ServerConfig]:
        """List the enabled server configurations in a scope."""
        pass

    @abstractmethod
    async def list_enabled_stdio(self) -> List[ServerConfig]:
        """List enabled stdio servers across all scopes."""
        pass

    @abstractmethod
    async def save(self, server: ServerConfig) -> None:
        """Create or replace a server configuration."""
        pass

    @abstractmethod
    async def delete(self, server_id: str) -> None:
        """Delete a server configuration."""
        pass
