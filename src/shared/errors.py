"""Exception hierarchy for the Marvin MCP server.

Every failure ends the single tool invocation (or inbound request) that
raised it; none are retried.
"""

from typing import Optional


class MarvinMCPError(Exception):
    """Base exception for all server errors."""
    pass


class MissingCredentialsError(MarvinMCPError):
    """The inbound request did not resolve both credential tiers."""

    DEFAULT_MESSAGE = (
        "Unauthorized. Provide API tokens via environment variables "
        "(MARVIN_API_TOKEN, MARVIN_FULL_ACCESS_TOKEN) or headers "
        '("x-api-token", "x-full-access-token", or "Authorization: Bearer <token>").'
    )

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(self.DEFAULT_MESSAGE)


class ToolNotFoundError(MarvinMCPError):
    """No tool is registered under the requested name."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' not found")


class ToolValidationError(MarvinMCPError):
    """Tool arguments failed schema validation."""

    def __init__(self, tool_name: str, errors: list[str]) -> None:
        self.tool_name = tool_name
        self.errors = errors
        super().__init__(
            f"Invalid arguments for tool '{tool_name}': {'; '.join(errors)}"
        )


class RemoteCallError(MarvinMCPError):
    """
    The outbound call to the Marvin API failed.

    ``status_code`` is None when no response was received at all
    (connection refused, DNS failure, timeout).
    """

    def __init__(
        self,
        tool_name: str,
        status_code: Optional[int],
        body: str
    ) -> None:
        self.tool_name = tool_name
        self.status_code = status_code
        self.body = body

        if status_code is None:
            message = f"Request failed: {body}"
        else:
            message = f"Request failed with status code {status_code}: {body}"
        super().__init__(message)
