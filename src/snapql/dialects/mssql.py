"""Microsoft SQL Server dialect adapter.

Connects through pyodbc. SQL Server's ``CONSTRAINT_COLUMN_USAGE`` lists the
referencing columns of a foreign key, not the referenced ones, so the target
column is found through ``REFERENTIAL_CONSTRAINTS`` and the key columns of
the referenced unique constraint, matched by ordinal position.
"""

from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.exc import ArgumentError

from snapql.exceptions import ConfigurationError
from snapql.models import ConnectionConfig, ConnectionDescriptor

from .base import DialectAdapter
from .constants import MSSQL_DEFAULT_PORT

DRIVERNAME = "mssql+pyodbc"

INTROSPECTION_SQL = """
SELECT
    c.TABLE_SCHEMA AS table_schema,
    c.TABLE_NAME AS table_name,
    c.COLUMN_NAME AS column_name,
    c.DATA_TYPE AS data_type,
    c.CHARACTER_MAXIMUM_LENGTH AS character_maximum_length,
    c.IS_NULLABLE AS is_nullable,
    c.COLUMN_DEFAULT AS column_default,
    tc.CONSTRAINT_TYPE AS constraint_type,
    ref.TABLE_SCHEMA AS foreign_table_schema,
    ref.TABLE_NAME AS foreign_table_name,
    ref.COLUMN_NAME AS foreign_column_name,
    c.ORDINAL_POSITION AS ordinal_position
FROM INFORMATION_SCHEMA.COLUMNS AS c
JOIN INFORMATION_SCHEMA.TABLES AS t
    ON t.TABLE_SCHEMA = c.TABLE_SCHEMA
   AND t.TABLE_NAME = c.TABLE_NAME
LEFT JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE AS kcu
    ON kcu.TABLE_SCHEMA = c.TABLE_SCHEMA
   AND kcu.TABLE_NAME = c.TABLE_NAME
   AND kcu.COLUMN_NAME = c.COLUMN_NAME
LEFT JOIN INFORMATION_SCHEMA.TABLE_CONSTRAINTS AS tc
    ON tc.CONSTRAINT_SCHEMA = kcu.CONSTRAINT_SCHEMA
   AND tc.CONSTRAINT_NAME = kcu.CONSTRAINT_NAME
   AND tc.CONSTRAINT_TYPE IN ('PRIMARY KEY', 'FOREIGN KEY')
LEFT JOIN INFORMATION_SCHEMA.REFERENTIAL_CONSTRAINTS AS rc
    ON rc.CONSTRAINT_SCHEMA = tc.CONSTRAINT_SCHEMA
   AND rc.CONSTRAINT_NAME = tc.CONSTRAINT_NAME
LEFT JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE AS ref
    ON ref.CONSTRAINT_SCHEMA = rc.UNIQUE_CONSTRAINT_SCHEMA
   AND ref.CONSTRAINT_NAME = rc.UNIQUE_CONSTRAINT_NAME
   AND ref.ORDINAL_POSITION = kcu.ORDINAL_POSITION
WHERE c.TABLE_SCHEMA NOT IN ('sys', 'INFORMATION_SCHEMA')
  AND t.TABLE_TYPE IN ('BASE TABLE', 'VIEW')
ORDER BY c.TABLE_SCHEMA, c.TABLE_NAME, c.ORDINAL_POSITION
"""


class MSSQLAdapter(DialectAdapter):
    """SQL Server adapter; identifiers are quoted with square brackets."""

    name = "mssql"
    display_name = "Microsoft SQL Server"
    sqlglot_dialect = "tsql"
    quote_style = "square brackets"
    default_schema = "dbo"
    introspection_sql = INTROSPECTION_SQL

    def url_from_config(self, config: ConnectionConfig) -> sa.URL:
        return sa.URL.create(
            DRIVERNAME,
            username=config.username,
            password=config.password,
            host=config.host,
            port=config.port or MSSQL_DEFAULT_PORT,
            database=config.database,
            query={
                "driver": self.options.mssql_odbc_driver,
                "TrustServerCertificate": "yes",
            },
        )

    def url_from_string(self, connection_string: str) -> sa.URL:
        """Accept ``mssql[+driver]://`` URLs or raw ODBC connection strings."""
        raw = connection_string.strip()
        if "://" not in raw:
            return sa.URL.create(DRIVERNAME, query={"odbc_connect": raw})
        try:
            url = sa.make_url(raw)
        except ArgumentError as exc:
            msg = f"Invalid SQL Server connection string: {exc}"
            raise ConfigurationError(msg) from exc
        if url.get_backend_name() not in {"mssql", "sqlserver"}:
            msg = f"Not a SQL Server connection string (scheme '{url.drivername}')"
            raise ConfigurationError(msg)
        return url.set(drivername=DRIVERNAME)

    def connect_args(self) -> dict[str, object]:
        # pyodbc login timeout
        return {"timeout": self.options.connect_timeout}

    def create_engine(self, descriptor: ConnectionDescriptor) -> sa.Engine:
        import pyodbc  # noqa: PLC0415 - needs the system ODBC library, load on first use

        pyodbc.pooling = False
        return super().create_engine(descriptor)
