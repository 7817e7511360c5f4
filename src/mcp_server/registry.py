"""Tool Registry for the Marvin MCP server.

Holds the static tool table: registration, discovery, lookup and input
validation. The registry carries no credentials and is safe to share
between connections once populated.
"""

from typing import Any, Iterable, Optional

from mcp import types

from shared.logging import get_logger
from shared.models import ToolDefinition
from shared.schema import validate_schema

logger = get_logger(__name__)


class ToolRegistry:
    """
    Central registry for all MCP tools.

    Responsibilities:
    - Register tools by unique name
    - Discover available tools
    - Lookup tools by exact name
    - Validate tool inputs
    """

    def __init__(self, tools: Optional[Iterable[ToolDefinition]] = None) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        if tools is not None:
            self.register_many(tools)

    def register(self, tool: ToolDefinition) -> None:
        """
        Register a tool in the registry.

        Raises:
            ValueError: If tool name is already registered
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        self._tools[tool.name] = tool

        logger.debug("Tool registered", tool=tool.name, tier=tool.tier.value)

    def register_many(self, tools: Iterable[ToolDefinition]) -> None:
        """Register multiple tools at once."""
        for tool in tools:
            self.register(tool)

    def get(self, tool_name: str) -> Optional[ToolDefinition]:
        """Get a tool by its exact name."""
        return self._tools.get(tool_name)

    def list_tools(self) -> list[ToolDefinition]:
        """List all registered tools in registration order."""
        return list(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, tool_name: object) -> bool:
        return tool_name in self._tools

    def validate_input(
        self,
        tool_name: str,
        arguments: dict[str, Any]
    ) -> tuple[bool, list[str]]:
        """
        Validate tool arguments against the tool's input schema.

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        tool = self.get(tool_name)
        if not tool:
            return False, [f"Tool '{tool_name}' not found"]

        return validate_schema(arguments, tool.input_schema)

    def get_tools_for_mcp(self) -> list[types.Tool]:
        """Get tool definitions in MCP discovery format."""
        return [
            types.Tool(
                name=tool.name,
                description=tool.description,
                inputSchema=tool.input_schema,
            )
            for tool in self.list_tools()
        ]


_registry: Optional[ToolRegistry] = None


def get_registry() -> ToolRegistry:
    """Get the global registry, populated with the Marvin catalog."""
    global _registry
    if _registry is None:
        from marvin.tools import CATALOG

        _registry = ToolRegistry(CATALOG)
        logger.info("Tool registry loaded", tool_count=len(_registry))
    return _registry
