from .servers_router import router as servers_router
from .tools_router import router as tools_router
from .mcp_router import router as mcp_router

__all__ = ["servers_router", "tools_router", "mcp_router"]
