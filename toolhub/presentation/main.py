"""
FastAPI Application Entry Point.

This is the main entry point for the toolhub API: MCP server management, the
aggregated tool catalog and the platform's own MCP endpoint.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from toolhub.infrastructure.config.logging_config import configure_logging
from toolhub.infrastructure.config.settings import Settings, get_settings
from toolhub.presentation.api.dependencies import ServiceContainer, build_container
from toolhub.presentation.api.routers import mcp_router, servers_router, tools_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    # Startup
    container: ServiceContainer = app.state.container
    settings = container.settings
    configure_logging(settings.log_level)
    logger.info("Starting %s on %s:%s", settings.app_name, settings.host, settings.port)
    logger.info("Debug mode: %s", settings.debug)

    warmup_task: Optional[asyncio.Task] = None
    if settings.mcp_warmup_enabled:
        # Fire and forget so startup is not delayed by slow cold starts
        warmup_task = asyncio.create_task(
            container.warmup_use_case().execute(), name="mcp-warmup"
        )

    yield

    # Shutdown
    logger.info("Shutting down %s", settings.app_name)
    if warmup_task is not None and not warmup_task.done():
        warmup_task.cancel()
        await asyncio.gather(warmup_task, return_exceptions=True)
    await container.aclose()


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or (container.settings if container else get_settings())

    app = FastAPI(
        title="toolhub",
        description="MCP tool aggregator and server",
        version=settings.app_version,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.container = container or build_container(settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(servers_router)
    app.include_router(tools_router)
    app.include_router(mcp_router)

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "health": "/health",
            "mcp": "/mcp/messages",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "toolhub.presentation.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
