"""Schema introspection models and canonical schema text rendering."""

from __future__ import annotations

from .canonicalizer import canonicalize, dedupe_columns, group_by_table, render_column
from .models import FOREIGN_KEY, PRIMARY_KEY, ColumnMetadata, ConstraintType

__all__ = [
    "FOREIGN_KEY",
    "PRIMARY_KEY",
    "ColumnMetadata",
    "ConstraintType",
    "canonicalize",
    "dedupe_columns",
    "group_by_table",
    "render_column",
]
