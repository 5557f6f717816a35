"""Dialect adapter contract and the shared SQLAlchemy execution flow.

A dialect adapter knows how to reach one relational engine: how to turn a
connection descriptor into a SQLAlchemy URL, which connect arguments bound
the login time, how identifiers are quoted, and which catalog query lists
the user-visible columns. Everything else (connection testing, statement
execution, row shaping) is shared here so that supporting another engine
means subclassing ``DialectAdapter`` and nothing more.

Every operation opens a fresh engine with ``NullPool`` and disposes of it on
both the success and the failure path; no connection outlives a call. The
blocking driver work runs in a worker thread so callers can await it from
an event loop.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, time as dt_time
from decimal import Decimal
import time
from typing import Any, ClassVar

from fastmcp.utilities.logging import get_logger
import sqlalchemy as sa
from sqlalchemy.engine import Connection, RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool
from sqlglot import exp

from snapql.exceptions import (
    ConfigurationError,
    ConnectivityError,
    SchemaIntrospectionError,
    SnapqlError,
)
from snapql.models import (
    ConnectionConfig,
    ConnectionDescriptor,
    ConnectionStringConfig,
    QueryResult,
    Row,
    Scalar,
)
from snapql.schema.models import FOREIGN_KEY, PRIMARY_KEY, ColumnMetadata

from .constants import DEFAULT_CONNECT_TIMEOUT, DEFAULT_ODBC_DRIVER, INTROSPECTION_COLUMNS

_logger = get_logger(__name__)

MAX_QUERY_DISPLAY = 100


@dataclass(slots=True)
class AdapterOptions:
    """Connection options applied by every adapter.

    Attributes:
        connect_timeout: Seconds to wait for the database login handshake
        mssql_odbc_driver: ODBC driver name used by the SQL Server adapter
    """

    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT
    mssql_odbc_driver: str = DEFAULT_ODBC_DRIVER


def _to_scalar(val: object) -> Scalar:
    """Convert a driver value to a JSON-safe scalar without truncation."""
    if val is None:
        return None
    if isinstance(val, bool | int | float | str):
        return val
    if isinstance(val, Decimal):
        return str(val)
    if isinstance(val, datetime | date | dt_time):
        return val.isoformat()
    if isinstance(val, bytes | bytearray | memoryview):
        return bytes(val).hex()
    return str(val)


def _shape_rows(columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> list[Row]:
    """Convert result tuples to ordered column -> scalar mappings."""
    return [
        {col: _to_scalar(value) for col, value in zip(columns, row, strict=False)}
        for row in rows
    ]


def error_message(exc: BaseException) -> str:
    """Prefer the driver's own message over SQLAlchemy's wrapper text."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def preview(sql: str) -> str:
    """Shorten SQL text for log lines."""
    flat = " ".join(sql.split())
    return flat[:MAX_QUERY_DISPLAY] + ("..." if len(flat) > MAX_QUERY_DISPLAY else "")


def _opt_int(val: Any) -> int | None:
    return None if val is None else int(val)


def _opt_str(val: object) -> str | None:
    return None if val is None else str(val)


class DialectAdapter(ABC):
    """Abstract base class for per-engine adapters.

    Subclasses provide the engine identity (``name``, ``display_name``,
    ``sqlglot_dialect``, ``quote_style``, ``default_schema``), URL
    construction for both descriptor forms and the catalog query used by
    ``introspect``. Tables outside ``default_schema`` are reported as
    ``schema.table``.
    """

    name: ClassVar[str]
    display_name: ClassVar[str]
    sqlglot_dialect: ClassVar[str]
    quote_style: ClassVar[str]
    default_schema: ClassVar[str]
    introspection_sql: ClassVar[str]

    def __init__(self, options: AdapterOptions | None = None) -> None:
        self.options = options or AdapterOptions()

    # ---- engine identity ---------------------------------------------------
    def quote_identifier(self, identifier: str) -> str:
        """Quote an identifier the way this engine expects."""
        return exp.to_identifier(identifier, quoted=True).sql(dialect=self.sqlglot_dialect)

    def qualify_table(self, schema: str | None, table: str) -> str:
        """Name a table the way canonical schema text refers to it."""
        if schema is None or schema == self.default_schema:
            return table
        return f"{schema}.{table}"

    # ---- connection --------------------------------------------------------
    def build_url(self, descriptor: ConnectionDescriptor) -> sa.URL:
        """Build the SQLAlchemy URL for either descriptor form."""
        if isinstance(descriptor, ConnectionConfig):
            return self.url_from_config(descriptor)
        if isinstance(descriptor, ConnectionStringConfig):
            return self.url_from_string(descriptor.connection_string)
        msg = f"Unsupported connection descriptor: {type(descriptor).__name__}"
        raise ConfigurationError(msg)

    @abstractmethod
    def url_from_config(self, config: ConnectionConfig) -> sa.URL:
        """Build a URL from a structured descriptor."""
        ...

    @abstractmethod
    def url_from_string(self, connection_string: str) -> sa.URL:
        """Build a URL from a connection string."""
        ...

    def connect_args(self) -> dict[str, object]:
        """Driver keyword arguments passed to every ``connect`` call."""
        return {}

    def create_engine(self, descriptor: ConnectionDescriptor) -> sa.Engine:
        """Create a single-use engine; callers must ``dispose`` it."""
        return sa.create_engine(
            self.build_url(descriptor),
            poolclass=NullPool,
            connect_args=self.connect_args(),
        )

    # ---- public async contract ---------------------------------------------
    async def test_connection(self, descriptor: ConnectionDescriptor) -> bool:
        """Open and close a connection; True only on a full round-trip."""
        return await asyncio.to_thread(self._test_connection_sync, descriptor)

    async def execute(self, descriptor: ConnectionDescriptor, query: str) -> QueryResult:
        """Run one statement and return every row, or the error message.

        Rows map column name to value. When a result repeats a column name
        only the rightmost value under that name is kept.
        """
        return await asyncio.to_thread(self._execute_sync, descriptor, query)

    async def introspect(self, descriptor: ConnectionDescriptor) -> list[ColumnMetadata]:
        """Return column metadata for all user-visible tables.

        Raises:
            SchemaIntrospectionError: If the catalog query fails
        """
        return await asyncio.to_thread(self._introspect_sync, descriptor)

    # ---- internals ---------------------------------------------------------
    @contextmanager
    def connection(self, descriptor: ConnectionDescriptor) -> Iterator[Connection]:
        """Open a single-use connection; the engine is disposed on exit.

        Raises:
            ConfigurationError: If no engine can be built from the descriptor
            ConnectivityError: If the database cannot be reached
        """
        try:
            engine = self.create_engine(descriptor)
        except (SQLAlchemyError, ImportError) as exc:
            msg = f"Cannot create {self.display_name} engine: {error_message(exc)}"
            raise ConfigurationError(msg) from exc
        try:
            _logger.debug("Connecting to %s", self._safe_url(engine))
            try:
                conn = engine.connect()
            except SQLAlchemyError as exc:
                msg = f"Could not connect to {self.display_name}: {error_message(exc)}"
                raise ConnectivityError(msg) from exc
            with conn:
                yield conn
        finally:
            engine.dispose()

    def _test_connection_sync(self, descriptor: ConnectionDescriptor) -> bool:
        _logger.info("Testing %s connection", self.display_name)
        try:
            with self.connection(descriptor) as conn:
                conn.exec_driver_sql("SELECT 1")
        except Exception as exc:  # noqa: BLE001 - any failure is reported as False
            _logger.warning("%s connection test failed: %s", self.display_name, error_message(exc))
            return False
        return True

    def _execute_sync(self, descriptor: ConnectionDescriptor, query: str) -> QueryResult:
        _logger.info("Executing on %s: %s", self.display_name, preview(query))
        start = time.perf_counter()
        try:
            with self.connection(descriptor) as conn:
                result = conn.exec_driver_sql(query)
                if result.returns_rows:
                    columns = list(result.keys())
                    rows = _shape_rows(columns, result.fetchall())
                else:
                    rows = []
                conn.commit()
        except (SnapqlError, SQLAlchemyError) as exc:
            elapsed_ms = (time.perf_counter() - start) * 1000.0
            _logger.warning("Execution error after %.1f ms: %s", elapsed_ms, error_message(exc))
            return QueryResult.fail(error_message(exc))

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        _logger.info("Execution finished (elapsed_ms=%.1f, rows=%d)", elapsed_ms, len(rows))
        return QueryResult.ok(rows)

    def _introspect_sync(self, descriptor: ConnectionDescriptor) -> list[ColumnMetadata]:
        _logger.info("Introspecting %s catalog", self.display_name)
        try:
            with self.connection(descriptor) as conn:
                result = conn.exec_driver_sql(self.introspection_sql)
                missing = [col for col in INTROSPECTION_COLUMNS if col not in result.keys()]
                raw = result.mappings().all()
        except (SnapqlError, SQLAlchemyError) as exc:
            msg = f"Schema introspection failed: {error_message(exc)}"
            raise SchemaIntrospectionError(msg) from exc
        if missing:
            msg = f"Schema introspection failed: catalog query lacks {', '.join(missing)}"
            raise SchemaIntrospectionError(msg)

        columns = [self.row_to_metadata(row) for row in raw]
        _logger.info("Introspection returned %d column rows", len(columns))
        return columns

    def row_to_metadata(self, row: RowMapping) -> ColumnMetadata:
        """Map one introspection row to ``ColumnMetadata``."""
        constraint = row["constraint_type"]
        is_fk = constraint == FOREIGN_KEY
        foreign_table = _opt_str(row["foreign_table_name"]) if is_fk else None
        if foreign_table is not None:
            foreign_table = self.qualify_table(_opt_str(row["foreign_table_schema"]), foreign_table)
        return ColumnMetadata(
            table_name=self.qualify_table(_opt_str(row["table_schema"]), str(row["table_name"])),
            column_name=str(row["column_name"]),
            data_type=str(row["data_type"]),
            max_length=_opt_int(row["character_maximum_length"]),
            nullable=str(row["is_nullable"]).upper() == "YES",
            default=_opt_str(row["column_default"]),
            constraint_type=constraint if constraint in (PRIMARY_KEY, FOREIGN_KEY) else None,
            foreign_table=foreign_table,
            foreign_column=_opt_str(row["foreign_column_name"]) if is_fk else None,
            ordinal_position=_opt_int(row["ordinal_position"]),
        )

    @staticmethod
    def _safe_url(engine: sa.Engine) -> str:
        return engine.url.render_as_string(hide_password=True)
