"""Constants shared by the dialect adapters."""

from __future__ import annotations

from typing import Final, Literal

DialectName = Literal["postgres", "mssql"]

DEFAULT_CONNECT_TIMEOUT: Final[int] = 10
DEFAULT_ODBC_DRIVER: Final[str] = "ODBC Driver 18 for SQL Server"

POSTGRES_DEFAULT_PORT: Final[int] = 5432
MSSQL_DEFAULT_PORT: Final[int] = 1433

# Column aliases every introspection query must return.
INTROSPECTION_COLUMNS: Final[tuple[str, ...]] = (
    "table_schema",
    "table_name",
    "column_name",
    "data_type",
    "character_maximum_length",
    "is_nullable",
    "column_default",
    "constraint_type",
    "foreign_table_schema",
    "foreign_table_name",
    "foreign_column_name",
    "ordinal_position",
)
