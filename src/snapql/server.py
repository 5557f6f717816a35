"""FastMCP server implementation for SnapQL."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import dotenv
from fastmcp import FastMCP
from fastmcp.utilities.logging import get_logger
from starlette.requests import Request
from starlette.responses import JSONResponse

from snapql.mcp_tools import register_all_tools
from snapql.services.query_service import QueryService

# Load environment variables
dotenv.load_dotenv()

_logger = get_logger(__name__)

service = QueryService.get_instance()


@asynccontextmanager
async def lifespan(_mcp_instance: FastMCP) -> AsyncGenerator[None]:
    _logger.info(
        "SnapQL server starting (dialect=%s, descriptor_form=%s)",
        service.adapter.display_name,
        service.gateway.descriptor_form,
    )
    yield
    _logger.info("SnapQL server stopped")


mcp = FastMCP(
    name="snapql",
    instructions=(
        "SnapQL turns natural-language requests into read-only SQL for the configured "
        "database and runs SQL on request. Configure a connection with "
        "set_connection_config before calling generate_query or run_query."
    ),
    lifespan=lifespan,
)

register_all_tools(mcp, service)


# -- Health Check ----------------------------------------------------------
@mcp.custom_route("/health", methods=["GET"])
async def health_check(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "healthy", "service": "snapql"})
