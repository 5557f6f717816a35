"""MCP tool registration for the SnapQL operations.

Exposes the query service as tools:
- Connection: get/set/test the connection descriptor
- Queries: run_query, generate_query, get_query_history
- Model provider: get/set the OpenAI key, base URL and model
"""

from __future__ import annotations

from typing import Annotated

from fastmcp import FastMCP
from fastmcp.utilities.logging import get_logger
from pydantic import Field

from snapql.dialects.base import preview
from snapql.models import (
    ConnectionConfig,
    ConnectionStringConfig,
    Envelope,
    QueryHistoryEntry,
    QueryResult,
)
from snapql.services.query_service import QueryService

_logger = get_logger(__name__)

DescriptorParam = Annotated[
    ConnectionConfig | ConnectionStringConfig,
    Field(
        description=(
            "Connection descriptor: either {host, port, username, password, database} or "
            "{connection_string}, matching the form this deployment accepts"
        )
    ),
]


def register_connection_tools(mcp: FastMCP, service: QueryService) -> None:
    """Register connection descriptor tools."""

    @mcp.tool
    async def get_connection_config() -> ConnectionConfig | ConnectionStringConfig | None:  # pyright: ignore[reportUnusedFunction]
        """Return the saved connection descriptor, or null when none is configured."""
        return await service.gateway.get_connection_config()

    @mcp.tool
    async def set_connection_config(connection: DescriptorParam) -> bool:  # pyright: ignore[reportUnusedFunction]
        """Test the descriptor and save it only when the connection succeeds.

        Returns false, leaving the previous descriptor in place, when the descriptor
        is not in the accepted form or the test fails.
        """
        return await service.set_connection_config(connection)

    @mcp.tool
    async def test_connection(connection: DescriptorParam) -> bool:  # pyright: ignore[reportUnusedFunction]
        """Open a connection with the descriptor and run a trivial query. Nothing is saved.

        Returns false without connecting when the descriptor is not in the accepted form.
        """
        return await service.test_connection(connection)

    _ = (get_connection_config, set_connection_config, test_connection)


def register_query_tools(mcp: FastMCP, service: QueryService) -> None:
    """Register query execution and generation tools."""

    @mcp.tool
    async def run_query(  # pyright: ignore[reportUnusedFunction]
        query: Annotated[
            str,
            Field(description="SQL to execute verbatim on the configured database"),
        ],
    ) -> QueryResult:
        """Execute SQL and return {error, data}; data is a list of row objects keyed by column."""
        _logger.info("run_query: %s", preview(query))
        return await service.run_query(query)

    @mcp.tool
    async def generate_query(  # pyright: ignore[reportUnusedFunction]
        intent: Annotated[
            str,
            Field(description="What the user wants to retrieve, in natural language"),
        ],
        existing_query: Annotated[
            str,
            Field(description="Current editor contents to modify; empty to start fresh"),
        ] = "",
    ) -> Envelope[str]:
        """Generate one read-only SQL query grounded on the live schema and return {error, data}."""
        _logger.info("generate_query: %s", preview(intent))
        return await service.generate_query(intent, existing_query)

    @mcp.tool
    def get_query_history() -> list[QueryHistoryEntry]:  # pyright: ignore[reportUnusedFunction]
        """Recently executed queries, newest first."""
        return service.query_history()

    _ = (run_query, generate_query, get_query_history)


def register_model_tools(mcp: FastMCP, service: QueryService) -> None:
    """Register model provider credential tools."""
    gateway = service.gateway

    @mcp.tool
    async def get_openai_key() -> str | None:  # pyright: ignore[reportUnusedFunction]
        """Return the saved OpenAI API key, if any."""
        return await gateway.get_openai_key()

    @mcp.tool
    async def set_openai_key(  # pyright: ignore[reportUnusedFunction]
        openai_key: Annotated[str, Field(description="OpenAI API key; empty to clear")],
    ) -> None:
        """Save the OpenAI API key."""
        await gateway.set_openai_key(openai_key)

    @mcp.tool
    async def get_openai_base_url() -> str | None:  # pyright: ignore[reportUnusedFunction]
        """Return the saved base URL for an OpenAI-compatible provider, if any."""
        return await gateway.get_openai_base_url()

    @mcp.tool
    async def set_openai_base_url(  # pyright: ignore[reportUnusedFunction]
        openai_base_url: Annotated[
            str, Field(description="Base URL of an OpenAI-compatible API; empty for the default")
        ],
    ) -> None:
        """Save the provider base URL."""
        await gateway.set_openai_base_url(openai_base_url)

    @mcp.tool
    async def get_openai_model() -> str | None:  # pyright: ignore[reportUnusedFunction]
        """Return the saved model identifier, if any."""
        return await gateway.get_openai_model()

    @mcp.tool
    async def set_openai_model(  # pyright: ignore[reportUnusedFunction]
        openai_model: Annotated[str, Field(description="Model identifier; empty for the default")],
    ) -> None:
        """Save the model identifier used for generation."""
        await gateway.set_openai_model(openai_model)

    _ = (
        get_openai_key,
        set_openai_key,
        get_openai_base_url,
        set_openai_base_url,
        get_openai_model,
        set_openai_model,
    )


def register_all_tools(mcp: FastMCP, service: QueryService) -> None:
    register_connection_tools(mcp, service)
    register_query_tools(mcp, service)
    register_model_tools(mcp, service)
