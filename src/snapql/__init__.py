"""SnapQL core: natural-language to SQL for PostgreSQL and SQL Server.

Provides dialect adapters, schema canonicalization, schema-grounded query
synthesis and the settings gateway, exposed as a FastMCP server.
"""

from snapql.dialects import DialectAdapter, create_adapter
from snapql.exceptions import (
    ConfigurationError,
    ConnectivityError,
    GenerationError,
    SchemaIntrospectionError,
    SnapqlError,
)
from snapql.generation import QuerySynthesizer
from snapql.models import (
    AppSettings,
    ConnectionConfig,
    ConnectionStringConfig,
    Envelope,
    QueryHistoryEntry,
    QueryResult,
)
from snapql.schema import ColumnMetadata, canonicalize
from snapql.services import ConfigService, QueryService, SettingsGateway

__all__ = [  # noqa: RUF022
    # Models
    "AppSettings",
    "ColumnMetadata",
    "ConnectionConfig",
    "ConnectionStringConfig",
    "Envelope",
    "QueryHistoryEntry",
    "QueryResult",
    # Components
    "DialectAdapter",
    "QuerySynthesizer",
    "canonicalize",
    "create_adapter",
    # Services
    "ConfigService",
    "QueryService",
    "SettingsGateway",
    # Errors
    "ConfigurationError",
    "ConnectivityError",
    "GenerationError",
    "SchemaIntrospectionError",
    "SnapqlError",
]
