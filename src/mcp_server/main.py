"""Marvin MCP Server - FastAPI Application.

Serves the Model Context Protocol over streamable HTTP on ``POST /mcp``.
Each request resolves its own credentials and gets its own MCP server,
tool router and Marvin HTTP client, all discarded when the request ends.
"""

from contextlib import asynccontextmanager
from typing import Optional

import anyio
import httpx
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from mcp.server.streamable_http import StreamableHTTPServerTransport
from pydantic import BaseModel
from starlette.types import Receive, Scope, Send

from marvin.client import MarvinClient
from shared.config import Settings, get_settings
from shared.errors import MissingCredentialsError
from shared.logging import get_logger, setup_logging
from mcp_server.auth import resolve_credentials
from mcp_server.registry import ToolRegistry, get_registry
from mcp_server.router import SERVER_VERSION, ToolRouter, create_mcp_server

logger = get_logger(__name__)

INFO_PAGE = """
<h1>MCP Server is running</h1>
<p>This server provides an interface to the Amazing Marvin API via the Model Context Protocol.</p>
<h2>Available Endpoints:</h2>
<ul>
  <li><strong>POST /mcp</strong>: The main endpoint for MCP requests.</li>
</ul>
"""


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    tool_count: int


class MCPGateway:
    """
    ASGI endpoint for ``POST /mcp``.

    Rejects the request with 401 before any tool dispatch when credentials
    are missing. Otherwise runs one stateless MCP exchange bound to the
    resolved credentials.
    """

    def __init__(
        self,
        settings: Settings,
        registry: ToolRegistry,
        http_transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        self.settings = settings
        self.registry = registry
        self.http_transport = http_transport

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope)

        try:
            credentials = resolve_credentials(request.headers, self.settings.marvin)
        except MissingCredentialsError as e:
            response = PlainTextResponse(str(e), status_code=status.HTTP_401_UNAUTHORIZED)
            await response(scope, receive, send)
            return

        logger.debug("Authentication successful")

        async with MarvinClient(self.settings.marvin, transport=self.http_transport) as client:
            router = ToolRouter(self.registry, client, credentials)
            await self._run_exchange(router, scope, receive, send)

    async def _run_exchange(
        self,
        router: ToolRouter,
        scope: Scope,
        receive: Receive,
        send: Send
    ) -> None:
        """Run a single-request MCP session over the streamable HTTP transport."""
        server = create_mcp_server(router)
        transport = StreamableHTTPServerTransport(
            mcp_session_id=None,
            is_json_response_enabled=True,
        )

        async def run_server(*, task_status=anyio.TASK_STATUS_IGNORED) -> None:
            async with transport.connect() as (read_stream, write_stream):
                task_status.started()
                await server.run(
                    read_stream,
                    write_stream,
                    server.create_initialization_options(),
                    stateless=True,
                )

        async with anyio.create_task_group() as tg:
            await tg.start(run_server)
            try:
                await transport.handle_request(scope, receive, send)
            finally:
                await transport.terminate()
                tg.cancel_scope.cancel()


def create_app(
    settings: Optional[Settings] = None,
    registry: Optional[ToolRegistry] = None,
    http_transport: Optional[httpx.AsyncBaseTransport] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings (defaults to the cached settings)
        registry: Tool registry (defaults to the Marvin catalog)
        http_transport: Optional httpx transport for outbound Marvin calls
    """
    settings = settings or get_settings()
    registry = registry or get_registry()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, json_output=settings.environment == "production")
        logger.info(
            "Marvin MCP Server started",
            api_url=settings.marvin.api_url,
            tool_count=len(registry)
        )
        yield
        logger.info("Shutting down Marvin MCP Server")

    app = FastAPI(
        title="Marvin MCP Server",
        description="Amazing Marvin API exposed over the Model Context Protocol",
        version=SERVER_VERSION,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "x-api-token", "x-full-access-token"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(
            "Received request",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None
        )
        return await call_next(request)

    @app.options("/mcp", include_in_schema=False)
    async def mcp_preflight() -> Response:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    app.add_route(
        "/mcp",
        MCPGateway(settings, registry, http_transport=http_transport),
        methods=["POST"],
        include_in_schema=False,
    )

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            version=SERVER_VERSION,
            tool_count=len(registry)
        )

    @app.get("/{full_path:path}", response_class=HTMLResponse, include_in_schema=False)
    async def info_page(full_path: str):
        return HTMLResponse(INFO_PAGE)

    return app


def main():
    """Run the Marvin MCP Server."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "mcp_server.main:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.environment == "development"
    )


if __name__ == "__main__":
    main()
