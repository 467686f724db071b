"""
Process-wide cache of running stdio MCP clients.

Stdio servers are expensive to start (``uvx``/``npx`` may download a package on
first run), so one client per server id is kept alive across requests and
handed out as a borrowed view. A per-server ring buffer keeps the most recent
stderr lines and lifecycle events for display.
"""

import asyncio
import logging
from collections import deque
from typing import Deque, Dict, List

from toolhub.application.interfaces.i_mcp_client import (
    BorrowedMcpClient,
    IMcpClient,
    IMcpClientFactory,
)
from toolhub.application.interfaces.i_stdio_client_cache import IStdioClientCache
from toolhub.domain.entities.log_entry import LogEntry, LogLevel
from toolhub.domain.entities.server_config import ServerConfig

logger = logging.getLogger(__name__)

DEFAULT_LOG_CAPACITY = 200


class LogRingBuffer:
    """Bounded per-server log; the oldest entry is dropped when full."""

    def __init__(self, capacity: int = DEFAULT_LOG_CAPACITY):
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)

    def append(self, entry: LogEntry) -> None:
        self._entries.append(entry)

    def tail(self, count: int) -> List[LogEntry]:
        """The last ``count`` entries, oldest first."""
        if count <= 0:
            return []
        entries = list(self._entries)
        return entries[-count:]

    def __len__(self) -> int:
        return len(self._entries)


class StdioClientCache(IStdioClientCache):
    """Keeps one running client per stdio server id."""

    def __init__(self, factory: IMcpClientFactory, log_capacity: int = DEFAULT_LOG_CAPACITY):
        self._factory = factory
        self._log_capacity = log_capacity
        self._clients: Dict[str, asyncio.Task] = {}
        self._logs: Dict[str, LogRingBuffer] = {}

    async def get_or_create(self, server: ServerConfig) -> BorrowedMcpClient:
        """Return the running client for ``server``, starting one if needed.

        Concurrent first callers share a single creation. A client whose
        process has exited is evicted and replaced.

        Raises:
            ConfigurationError: The configuration cannot produce a client.
            McpClientError: The process could not be started.
        """
        client = await self._get_running(server)
        return client.borrow()

    async def invalidate(self, server_id: str) -> None:
        """Remove and shut down the cached client; a no-op if there is none."""
        task = self._clients.pop(server_id, None)
        if task is None:
            return

        # An in-flight creation is allowed to finish so its process can be closed
        try:
            client = await task
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.debug("Discarded failed stdio MCP client creation for %s: %s", server_id, e)
            return

        try:
            await client.aclose()
        except OSError as e:
            logger.warning("Error disposing cached stdio MCP client for server %s: %s", server_id, e)

    async def forget(self, server_id: str) -> None:
        """Shut down the client and discard its log buffer."""
        await self.invalidate(server_id)
        self._logs.pop(server_id, None)

    def get_logs(self, server_id: str, count: int = 100) -> List[LogEntry]:
        """The last ``count`` log entries for a server, oldest first."""
        buffer = self._logs.get(server_id)
        if buffer is None:
            return []
        return buffer.tail(count)

    def append_log(self, server_id: str, level: LogLevel, message: str) -> None:
        self._buffer(server_id).append(LogEntry(level=level, message=message))

    def is_cached(self, server_id: str) -> bool:
        return server_id in self._clients

    async def dispose_all(self) -> None:
        """Shut down every cached client concurrently."""
        server_ids = list(self._clients)
        if not server_ids:
            return
        logger.info("Stopping %d cached stdio MCP servers", len(server_ids))
        await asyncio.gather(
            *(self.invalidate(server_id) for server_id in server_ids),
            return_exceptions=True,
        )

    async def _get_running(self, server: ServerConfig) -> IMcpClient:
        while True:
            task = self._clients.get(server.id)
            if task is None:
                task = asyncio.create_task(self._create(server), name=f"mcp-start-{server.name}")
                self._clients[server.id] = task

            try:
                client = await asyncio.shield(task)
            except asyncio.CancelledError:
                raise
            except Exception:
                # Drop the failed creation so the next caller starts over
                if self._clients.get(server.id) is task:
                    del self._clients[server.id]
                raise

            if not client.has_exited():
                return client

            logger.warning(
                "stdio MCP server '%s' process has exited unexpectedly; restarting",
                server.name,
            )
            self.append_log(server.id, LogLevel.WARN, "Process exited unexpectedly; restarting")
            if self._clients.get(server.id) is task:
                await self.invalidate(server.id)

    async def _create(self, server: ServerConfig) -> IMcpClient:
        logger.info(
            "Starting persistent stdio MCP server '%s' (%s)", server.name, server.id
        )
        command_line = " ".join([server.command or "", *server.args]).strip()
        self.append_log(server.id, LogLevel.INFO, f"Starting process: {command_line}")

        buffer = self._buffer(server.id)
        try:
            return await self._factory.create(server, log_sink=buffer.append)
        except Exception as e:
            self.append_log(server.id, LogLevel.ERROR, f"Failed to start: {e}")
            raise

    def _buffer(self, server_id: str) -> LogRingBuffer:
        buffer = self._logs.get(server_id)
        if buffer is None:
            buffer = LogRingBuffer(self._log_capacity)
            self._logs[server_id] = buffer
        return buffer
