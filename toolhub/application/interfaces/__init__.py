from .i_cache_service import ICacheService
from .i_local_tool_executor import ILocalToolExecutor
from .i_mcp_client import BorrowedMcpClient, IMcpClient, IMcpClientFactory, LogSink
from .i_secret_decryptor import ISecretDecryptor
from .i_stdio_client_cache import IStdioClientCache
from .i_tool_registry import IToolRegistry

__all__ = [
    "BorrowedMcpClient",
    "ICacheService",
    "ILocalToolExecutor",
    "IMcpClient",
    "IMcpClientFactory",
    "ISecretDecryptor",
    "IStdioClientCache",
    "IToolRegistry",
    "LogSink",
]
