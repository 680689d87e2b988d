"""
MCP layer: tool registry, dispatcher and JSON-RPC handling.

Transports (stdio, HTTP) only decode messages and hand them to McpServer.
"""

from .dispatcher import Dispatcher
from .jsonrpc import McpServer
from .models import ToolCallRequest, ToolDescriptor, ToolOutcome, ToolResponse
from .registry import ToolRegistry, validate_required

__all__ = [
    "Dispatcher",
    "McpServer",
    "ToolCallRequest",
    "ToolDescriptor",
    "ToolOutcome",
    "ToolRegistry",
    "ToolResponse",
    "validate_required",
]
