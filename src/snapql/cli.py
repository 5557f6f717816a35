"""Command-line entrypoint for the SnapQL FastMCP server.

Runs the server over stdio by default; set ``SNAPQL_TRANSPORT=http`` to serve
over HTTP (the ``/health`` route is only reachable that way).
"""

from __future__ import annotations

import traceback

from fastmcp.utilities.logging import get_logger

from snapql.server import mcp
from snapql.services.config_service import ConfigService

_logger = get_logger(__name__)


def main() -> None:
    """Start the SnapQL FastMCP server via CLI."""
    try:
        if ConfigService.transport() == "http":
            mcp.run(
                transport="http",
                host=ConfigService.http_host(),
                port=ConfigService.http_port(),
            )
        else:
            mcp.run()
    except KeyboardInterrupt:
        _logger.info("Interrupted by user. Exiting cleanly.")
    except Exception:  # noqa: BLE001
        traceback.print_exc(limit=1)


if __name__ == "__main__":
    main()
