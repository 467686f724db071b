from abc import ABC, abstractmethod
from typing import List

from toolhub.application.interfaces.i_mcp_client import BorrowedMcpClient
from toolhub.domain.entities.log_entry import LogEntry
from toolhub.domain.entities.server_config import ServerConfig


class IStdioClientCache(ABC):
    """Long-lived stdio clients keyed by server id, plus their captured logs."""

    @abstractmethod
    async def get_or_create(self, server: ServerConfig) -> BorrowedMcpClient:
        pass

    @abstractmethod
    async def invalidate(self, server_id: str) -> None:
        pass

    @abstractmethod
    async def forget(self, server_id: str) -> None:
        """Stop the client and drop its captured logs."""
        pass

    @abstractmethod
    def get_logs(self, server_id: str, count: int = 100) -> List[LogEntry]:
        pass

    @abstractmethod
    async def dispose_all(self) -> None:
        pass
