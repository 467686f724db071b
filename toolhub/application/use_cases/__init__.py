from .execute_tool_call import ExecuteToolCallUseCase
from .list_available_tools import ListAvailableToolsUseCase
from .manage_servers import ManageServersUseCase
from .warmup_servers import WarmupStdioServersUseCase

__all__ = [
    "ExecuteToolCallUseCase",
    "ListAvailableToolsUseCase",
    "ManageServersUseCase",
    "WarmupStdioServersUseCase",
]
