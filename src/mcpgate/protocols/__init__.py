"""Protocol layer — tool registry, executor and the MCP surface."""

from mcpgate.protocols.errors import (
    InvalidParamsError,
    ProtocolError,
    ToolExecutionError,
    ToolNotFoundError,
)
from mcpgate.protocols.executor import ToolExecutor
from mcpgate.protocols.models import BatchResult, Tool, ToolCallRequest, ToolExecutionResult
from mcpgate.protocols.registry import ToolRegistry

__all__ = [
    "BatchResult",
    "InvalidParamsError",
    "ProtocolError",
    "Tool",
    "ToolCallRequest",
    "ToolExecutionError",
    "ToolExecutionResult",
    "ToolExecutor",
    "ToolNotFoundError",
    "ToolRegistry",
]
