"""Tool Router for the Marvin MCP server.

Binds the shared registry to one connection's credentials and HTTP client,
and turns each tool invocation into exactly one outbound call.
"""

from typing import Any, Optional

import httpx
from mcp import types
from mcp.server.lowlevel import Server

from marvin.client import MarvinClient
from shared.errors import RemoteCallError, ToolNotFoundError, ToolValidationError
from shared.logging import get_logger
from shared.models import CredentialPair, OutboundCall, ToolCall, ToolResult
from shared.schema import filter_to_schema
from mcp_server.registry import ToolRegistry

logger = get_logger(__name__)

SERVER_NAME = "marvin-mcp-server"
SERVER_VERSION = "1.0.0"


class ToolRouter:
    """
    Per-connection dispatcher.

    Responsibilities:
    - Lookup tools by exact name
    - Validate arguments before anything else happens
    - Build the outbound call from validated fields only
    - Attach the credential of the tool's tier
    - Surface remote failures without retrying them
    """

    def __init__(
        self,
        registry: ToolRegistry,
        client: MarvinClient,
        credentials: CredentialPair
    ) -> None:
        self.registry = registry
        self.client = client
        self.credentials = credentials

    def prepare(self, call: ToolCall) -> OutboundCall:
        """
        Validate a tool call and derive its outbound call.

        Raises:
            ToolNotFoundError: If the tool is not registered
            ToolValidationError: If the arguments fail the input schema
        """
        tool = self.registry.get(call.tool_name)
        if not tool:
            raise ToolNotFoundError(call.tool_name)

        is_valid, errors = self.registry.validate_input(call.tool_name, call.arguments)
        if not is_valid:
            logger.info("Tool arguments rejected", tool=call.tool_name, errors=errors)
            raise ToolValidationError(call.tool_name, errors)

        arguments = filter_to_schema(call.arguments, tool.input_schema)
        outbound = tool.build_request(arguments)

        # The tool definition alone decides which credential is sent
        return outbound.model_copy(update={"tier": tool.tier})

    async def execute(self, tool_name: str, arguments: Optional[dict[str, Any]] = None) -> ToolResult:
        """
        Run one tool invocation.

        Raises:
            ToolNotFoundError: If the tool is not registered
            ToolValidationError: If the arguments fail the input schema
            RemoteCallError: If the Marvin API call fails
        """
        call = ToolCall(tool_name=tool_name, arguments=arguments or {})
        outbound = self.prepare(call)

        logger.info(
            "Dispatching tool",
            tool=tool_name,
            method=outbound.method.value,
            path=outbound.path,
            tier=outbound.tier.value
        )

        try:
            body = await self.client.send(outbound, self.credentials)
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Marvin API returned an error",
                tool=tool_name,
                status_code=e.response.status_code
            )
            raise RemoteCallError(tool_name, e.response.status_code, e.response.text) from e
        except httpx.RequestError as e:
            logger.warning("Marvin API unreachable", tool=tool_name, error=str(e))
            raise RemoteCallError(tool_name, None, str(e)) from e

        return ToolResult.from_body(body)


def create_mcp_server(router: ToolRouter) -> Server:
    """Build an MCP server whose tools dispatch through ``router``."""
    server: Server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return router.registry.get_tools_for_mcp()

    # Arguments are validated by the router so errors name every field
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
        result = await router.execute(name, arguments)
        return result.as_content()

    return server
