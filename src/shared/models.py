"""Core data models for the Marvin MCP server.

All entities are request-scoped; nothing here is persisted.
"""

import json
from enum import Enum
from typing import Any, Callable, Optional

from mcp.types import TextContent
from pydantic import BaseModel, ConfigDict, Field


class TokenTier(str, Enum):
    """Privilege tier a tool needs on the Marvin API."""
    API = "api"
    FULL_ACCESS = "full_access"


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    DELETE = "DELETE"


# Outbound header name per tier
TIER_HEADERS: dict[TokenTier, str] = {
    TokenTier.API: "X-API-Token",
    TokenTier.FULL_ACCESS: "X-Full-Access-Token",
}


class CredentialPair(BaseModel):
    """
    Tokens resolved for one inbound connection.

    Immutable for the lifetime of the connection and never stored
    outside of it.
    """
    model_config = ConfigDict(frozen=True)

    api_token: str = Field(..., min_length=1, repr=False)
    full_access_token: str = Field(..., min_length=1, repr=False)

    def token_for(self, tier: TokenTier) -> str:
        if tier == TokenTier.FULL_ACCESS:
            return self.full_access_token
        return self.api_token

    def header_for(self, tier: TokenTier) -> dict[str, str]:
        """Return the single credential header for a tier."""
        return {TIER_HEADERS[tier]: self.token_for(tier)}


class OutboundCall(BaseModel):
    """A single HTTP request to issue against the Marvin API."""
    model_config = ConfigDict(frozen=True)

    method: HTTPMethod
    path: str
    params: Optional[dict[str, Any]] = None
    json_body: Optional[Any] = None
    tier: TokenTier = TokenTier.API


RequestBuilder = Callable[[dict[str, Any]], OutboundCall]


class ToolDefinition(BaseModel):
    """
    Declarative definition of one Marvin tool.

    The request builder receives arguments that already passed schema
    validation and were reduced to the schema's declared properties.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Unique tool name")
    description: str = Field(..., description="Clear description for LLM usage")
    input_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        description="JSON Schema for input validation"
    )
    tier: TokenTier = Field(default=TokenTier.API)
    build_request: RequestBuilder


class ToolCall(BaseModel):
    """A request from a protocol client to run a named tool."""
    tool_name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ContentItem(BaseModel):
    type: str = "text"
    text: str


class ToolResult(BaseModel):
    """Uniform envelope around the Marvin API's response body."""
    content: list[ContentItem]

    @classmethod
    def from_body(cls, body: Any) -> "ToolResult":
        """Render a response body as indented JSON text."""
        text = json.dumps(body, indent=2, ensure_ascii=False)
        return cls(content=[ContentItem(text=text)])

    @property
    def text(self) -> str:
        return self.content[0].text

    def as_content(self) -> list[TextContent]:
        """Convert to MCP text content items."""
        return [TextContent(type="text", text=item.text) for item in self.content]
