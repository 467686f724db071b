from abc import ABC, abstractmethod
from typing import Any, Optional


class ICacheService(ABC):
    """Interface for the short-lived key/value cache holding tool catalogs.

    Values must be JSON-serializable so that any backend can store them.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Get a value, or None if missing or expired."""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Set a value with an optional TTL (the backend default otherwise)."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete a key."""
        pass

    async def close(self) -> None:
        """Release backend resources."""
        return None
