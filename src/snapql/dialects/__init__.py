"""Dialect adapters for the supported relational engines.

The adapter is chosen once, at configuration time, through
``create_adapter``; the rest of the core only sees ``DialectAdapter``.
"""

from __future__ import annotations

from snapql.exceptions import ConfigurationError

from .base import AdapterOptions, DialectAdapter
from .constants import DialectName
from .mssql import MSSQLAdapter
from .postgres import PostgresAdapter

ADAPTERS: dict[str, type[DialectAdapter]] = {
    PostgresAdapter.name: PostgresAdapter,
    MSSQLAdapter.name: MSSQLAdapter,
}


def create_adapter(name: str, options: AdapterOptions | None = None) -> DialectAdapter:
    """Instantiate the adapter registered under ``name``.

    Raises:
        ConfigurationError: If no adapter is registered for ``name``
    """
    adapter_cls = ADAPTERS.get(name.lower())
    if adapter_cls is None:
        available = ", ".join(ADAPTERS)
        msg = f"No dialect adapter registered for '{name}'. Available: {available}"
        raise ConfigurationError(msg)
    return adapter_cls(options)


__all__ = [
    "ADAPTERS",
    "AdapterOptions",
    "DialectAdapter",
    "DialectName",
    "MSSQLAdapter",
    "PostgresAdapter",
    "create_adapter",
]
