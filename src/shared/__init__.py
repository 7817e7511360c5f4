"""Shared models, configuration, errors and logging for the Marvin MCP server."""

from shared.models import (
    CredentialPair,
    OutboundCall,
    TokenTier,
    ToolCall,
    ToolDefinition,
    ToolResult,
)
from shared.config import Settings, get_settings
from shared.errors import (
    MarvinMCPError,
    MissingCredentialsError,
    RemoteCallError,
    ToolNotFoundError,
    ToolValidationError,
)
from shared.logging import get_logger, setup_logging

__all__ = [
    "CredentialPair",
    "OutboundCall",
    "TokenTier",
    "ToolCall",
    "ToolDefinition",
    "ToolResult",
    "Settings",
    "get_settings",
    "MarvinMCPError",
    "MissingCredentialsError",
    "RemoteCallError",
    "ToolNotFoundError",
    "ToolValidationError",
    "get_logger",
    "setup_logging",
]
