"""PostgreSQL dialect adapter.

Connects through psycopg 3 and reads column metadata from
``information_schema``. Foreign-key targets are resolved through
``referential_constraints`` and matched by ``position_in_unique_constraint``
so composite keys pair each column with its own referenced column.
"""

from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.exc import ArgumentError

from snapql.exceptions import ConfigurationError
from snapql.models import ConnectionConfig

from .base import DialectAdapter
from .constants import POSTGRES_DEFAULT_PORT

DRIVERNAME = "postgresql+psycopg"

INTROSPECTION_SQL = """
SELECT
    c.table_schema AS table_schema,
    c.table_name AS table_name,
    c.column_name AS column_name,
    CASE WHEN c.data_type = 'USER-DEFINED' THEN c.udt_name ELSE c.data_type END AS data_type,
    c.character_maximum_length AS character_maximum_length,
    c.is_nullable AS is_nullable,
    c.column_default AS column_default,
    tc.constraint_type AS constraint_type,
    ref.table_schema AS foreign_table_schema,
    ref.table_name AS foreign_table_name,
    ref.column_name AS foreign_column_name,
    c.ordinal_position AS ordinal_position
FROM information_schema.columns AS c
JOIN information_schema.tables AS t
    ON t.table_schema = c.table_schema
   AND t.table_name = c.table_name
LEFT JOIN information_schema.key_column_usage AS kcu
    ON kcu.table_schema = c.table_schema
   AND kcu.table_name = c.table_name
   AND kcu.column_name = c.column_name
LEFT JOIN information_schema.table_constraints AS tc
    ON tc.constraint_schema = kcu.constraint_schema
   AND tc.constraint_name = kcu.constraint_name
   AND tc.constraint_type IN ('PRIMARY KEY', 'FOREIGN KEY')
LEFT JOIN information_schema.referential_constraints AS rc
    ON rc.constraint_schema = tc.constraint_schema
   AND rc.constraint_name = tc.constraint_name
LEFT JOIN information_schema.key_column_usage AS ref
    ON ref.constraint_schema = rc.unique_constraint_schema
   AND ref.constraint_name = rc.unique_constraint_name
   AND ref.ordinal_position = kcu.position_in_unique_constraint
WHERE c.table_schema NOT IN ('pg_catalog', 'information_schema', 'pg_toast')
  AND t.table_type IN ('BASE TABLE', 'VIEW')
ORDER BY c.table_schema, c.table_name, c.ordinal_position
"""


class PostgresAdapter(DialectAdapter):
    """PostgreSQL adapter; identifiers are quoted with double quotes."""

    name = "postgres"
    display_name = "PostgreSQL"
    sqlglot_dialect = "postgres"
    quote_style = "double quotes"
    default_schema = "public"
    introspection_sql = INTROSPECTION_SQL

    def url_from_config(self, config: ConnectionConfig) -> sa.URL:
        return sa.URL.create(
            DRIVERNAME,
            username=config.username,
            password=config.password,
            host=config.host,
            port=config.port or POSTGRES_DEFAULT_PORT,
            database=config.database,
        )

    def url_from_string(self, connection_string: str) -> sa.URL:
        """Accept ``postgres://`` and ``postgresql[+driver]://`` URLs."""
        try:
            url = sa.make_url(connection_string.strip())
        except ArgumentError as exc:
            msg = f"Invalid PostgreSQL connection string: {exc}"
            raise ConfigurationError(msg) from exc
        if url.get_backend_name() not in {"postgres", "postgresql"}:
            msg = f"Not a PostgreSQL connection string (scheme '{url.drivername}')"
            raise ConfigurationError(msg)
        return url.set(drivername=DRIVERNAME)

    def connect_args(self) -> dict[str, object]:
        return {"connect_timeout": self.options.connect_timeout}
