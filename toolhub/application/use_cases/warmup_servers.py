import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from toolhub.application.interfaces.i_stdio_client_cache import IStdioClientCache
from toolhub.domain.entities.server_config import ServerConfig
from toolhub.domain.repositories.i_server_config_repository import IServerConfigRepository

logger = logging.getLogger(__name__)


@dataclass
class WarmupStdioServersUseCase:
    """Use case that starts every enabled stdio server ahead of first use.

    ``uvx``/``npx`` servers can take minutes to cold-start. Starting them in the
    background means the handshake is usually finished before the first request
    arrives. A server that fails here is simply started on first use instead.
    """

    repository: IServerConfigRepository
    stdio_cache: IStdioClientCache
    delay_seconds: float = 0.0

    async def execute(self) -> Dict[str, Optional[int]]:
        """Warm all servers concurrently.

        Returns:
            Tool count per server name, or None for servers that failed.
        """
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

        servers = await self.repository.list_enabled_stdio()
        if not servers:
            logger.info("No enabled stdio MCP servers to pre-warm")
            return {}

        logger.info(
            "Pre-warming %d stdio MCP server(s): %s",
            len(servers),
            ", ".join(server.name for server in servers),
        )
        counts = await asyncio.gather(*(self._warm_one(server) for server in servers))
        logger.info("Stdio MCP pre-warm complete")
        return {server.name: count for server, count in zip(servers, counts)}

    async def _warm_one(self, server: ServerConfig) -> Optional[int]:
        try:
            logger.info("Starting '%s' in background...", server.name)
            client = await self.stdio_cache.get_or_create(server)
            # Listing tools runs the initialize handshake
            tools = await client.list_tools()
        except Exception as e:
            logger.warning(
                "Failed to pre-warm '%s'; it will be started on first use instead: %s",
                server.name,
                e,
            )
            return None

        logger.info("'%s' is ready: %d tool(s) discovered", server.name, len(tools))
        return len(tools)
