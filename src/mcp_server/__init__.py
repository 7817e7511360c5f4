"""MCP Server - credential resolution, tool registry and dispatch.

Each inbound request resolves its own credentials, binds the shared tool
registry to them through a ToolRouter, and makes at most one outbound call
per tool invocation.
"""

from mcp_server.registry import ToolRegistry, get_registry
from mcp_server.router import ToolRouter, create_mcp_server
from mcp_server.auth import resolve_credentials

__all__ = [
    "ToolRegistry",
    "get_registry",
    "ToolRouter",
    "create_mcp_server",
    "resolve_credentials",
]
