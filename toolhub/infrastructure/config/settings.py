from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Identity advertised by the self-hosted MCP endpoint
    app_name: str = Field(default="toolhub", validation_alias="APP_NAME")
    app_version: str = Field(default="1.0.0", validation_alias="APP_VERSION")

    # Server
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=8000, validation_alias="PORT")
    debug: bool = Field(default=False, validation_alias="DEBUG")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # MCP server configurations (JSON list) seeding the in-memory repository
    mcp_servers_file: str | None = Field(
        default=None, validation_alias="MCP_SERVERS_FILE"
    )

    # MCP client behaviour
    mcp_client_name: str = Field(default="toolhub", validation_alias="MCP_CLIENT_NAME")
    mcp_stdio_initialize_timeout_seconds: float = Field(
        default=300.0, validation_alias="MCP_STDIO_INITIALIZE_TIMEOUT_SECONDS"
    )
    mcp_stdio_request_timeout_seconds: float = Field(
        default=60.0, validation_alias="MCP_STDIO_REQUEST_TIMEOUT_SECONDS"
    )
    mcp_stdio_shutdown_grace_seconds: float = Field(
        default=3.0, validation_alias="MCP_STDIO_SHUTDOWN_GRACE_SECONDS"
    )
    mcp_log_buffer_size: int = Field(default=200, validation_alias="MCP_LOG_BUFFER_SIZE")
    mcp_http_timeout_seconds: float = Field(
        default=30.0, validation_alias="MCP_HTTP_TIMEOUT_SECONDS"
    )
    mcp_tool_cache_ttl_seconds: int = Field(
        default=30, validation_alias="MCP_TOOL_CACHE_TTL_SECONDS"
    )
    mcp_discovery_timeout_seconds: float = Field(
        default=60.0, validation_alias="MCP_DISCOVERY_TIMEOUT_SECONDS"
    )

    # Pre-start enabled stdio servers in the background at startup
    mcp_warmup_enabled: bool = Field(default=True, validation_alias="MCP_WARMUP_ENABLED")
    mcp_warmup_delay_seconds: float = Field(
        default=2.0, validation_alias="MCP_WARMUP_DELAY_SECONDS"
    )

    # Tool catalog cache
    cache_backend: Literal["memory", "redis"] = Field(
        default="memory", validation_alias="CACHE_BACKEND"
    )
    redis_url: str = Field(
        default="redis://localhost:6379", validation_alias="REDIS_URL"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
