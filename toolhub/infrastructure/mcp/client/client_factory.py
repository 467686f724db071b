import logging
from typing import Optional

import httpx

from toolhub.application.interfaces.i_mcp_client import IMcpClient, IMcpClientFactory, LogSink
from toolhub.application.interfaces.i_secret_decryptor import ISecretDecryptor
from toolhub.domain.entities.server_config import ServerConfig
from toolhub.infrastructure.config.settings import Settings
from toolhub.infrastructure.mcp.client.http_client import HttpMcpClient
from toolhub.infrastructure.mcp.client.stdio_client import StdioMcpClient
from toolhub.infrastructure.mcp.process import ProcessSupervisor

logger = logging.getLogger(__name__)


class McpClientFactory(IMcpClientFactory):
    """Builds stdio or HTTP clients from server configurations.

    Configuration is validated before anything is spawned, so a missing
    command or URL surfaces as ``ConfigurationError`` with no side effects.
    """

    def __init__(
        self,
        settings: Settings,
        decryptor: ISecretDecryptor,
        supervisor: Optional[ProcessSupervisor] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings
        self._decryptor = decryptor
        self._supervisor = supervisor or ProcessSupervisor()
        self._http_transport = http_transport

    async def create(
        self,
        server: ServerConfig,
        log_sink: Optional[LogSink] = None,
    ) -> IMcpClient:
        server.validate()

        if server.is_stdio:
            return await self._create_stdio_client(server, log_sink)
        return self._create_http_client(server, log_sink)

    async def _create_stdio_client(
        self, server: ServerConfig, log_sink: Optional[LogSink]
    ) -> StdioMcpClient:
        handle = await self._supervisor.start(server)
        return StdioMcpClient(
            handle,
            server.name,
            client_name=self._settings.mcp_client_name,
            client_version=self._settings.app_version,
            request_timeout=self._settings.mcp_stdio_request_timeout_seconds,
            initialize_timeout=self._settings.mcp_stdio_initialize_timeout_seconds,
            shutdown_grace=self._settings.mcp_stdio_shutdown_grace_seconds,
            log_sink=log_sink,
        )

    def _create_http_client(
        self, server: ServerConfig, log_sink: Optional[LogSink]
    ) -> HttpMcpClient:
        return HttpMcpClient(
            server.base_url,
            self._decrypt_api_key(server),
            server_name=server.name,
            timeout=self._settings.mcp_http_timeout_seconds,
            client_name=self._settings.mcp_client_name,
            client_version=self._settings.app_version,
            transport=self._http_transport,
            log_sink=log_sink,
        )

    def _decrypt_api_key(self, server: ServerConfig) -> Optional[str]:
        if not server.api_key_encrypted:
            return None
        try:
            return self._decryptor.decrypt(server.api_key_encrypted)
        except ValueError as e:
            # Proceed without a key; the server will reject the call if it needs one
            logger.warning("Failed to decrypt API key for MCP server '%s': %s", server.name, e)
            return None
