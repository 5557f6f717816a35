"""Canonical schema text for language-model grounding.

Turns raw catalog rows from any dialect adapter into a deterministic,
DDL-like text block. The output only depends on the multiset of input rows
(and the first-seen order of tables), so it is stable across calls and
friendly to prompt caching.

Functions:
- dedupe_columns(): collapse join fan-out to one row per (table, column)
- render_column(): render one column definition
- canonicalize(): render the full schema text
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .models import FOREIGN_KEY, PRIMARY_KEY, ColumnMetadata

INDENT = "    "


def _richness(col: ColumnMetadata) -> tuple[int, str, str]:
    """Sort key where the smallest value is the richest row."""
    if col.constraint_type == PRIMARY_KEY:
        rank = 0
    elif col.constraint_type == FOREIGN_KEY and col.foreign_table and col.foreign_column:
        rank = 1
    elif col.constraint_type == FOREIGN_KEY:
        rank = 2
    else:
        rank = 3
    return (rank, col.foreign_table or "", col.foreign_column or "")


def dedupe_columns(columns: Iterable[ColumnMetadata]) -> list[ColumnMetadata]:
    """Keep one row per ``(table, column)`` at its first-seen position.

    When a column appears several times the richest row wins: a primary key
    beats a foreign key, which beats no constraint. Ties between foreign
    keys resolve to the smallest referenced ``(table, column)`` so the choice
    does not depend on row order.
    """
    chosen: dict[tuple[str, str], ColumnMetadata] = {}
    for col in columns:
        current = chosen.get(col.key)
        if current is None or _richness(col) < _richness(current):
            # dict keeps the first insertion position on reassignment
            chosen[col.key] = col
    return list(chosen.values())


def _render_type(col: ColumnMetadata) -> str:
    if col.max_length is None:
        return col.data_type
    if col.max_length < 0:
        return f"{col.data_type}(max)"
    return f"{col.data_type}({col.max_length})"


def render_column(col: ColumnMetadata) -> str:
    """Render ``name type[(length)][ NOT NULL][ key][ DEFAULT expr]``."""
    parts = [col.column_name, _render_type(col)]
    if not col.nullable:
        parts.append("NOT NULL")
    if col.constraint_type == PRIMARY_KEY:
        parts.append("PRIMARY KEY")
    elif col.constraint_type == FOREIGN_KEY and col.foreign_table and col.foreign_column:
        parts.append(f"REFERENCES {col.foreign_table}({col.foreign_column})")
    if col.default is not None:
        parts.append(f"DEFAULT {col.default}")
    return " ".join(parts)


def _order_columns(cols: Sequence[ColumnMetadata]) -> list[ColumnMetadata]:
    if all(c.ordinal_position is not None for c in cols):
        return sorted(cols, key=lambda c: (c.ordinal_position or 0, c.column_name))
    return list(cols)


def group_by_table(columns: Iterable[ColumnMetadata]) -> dict[str, list[ColumnMetadata]]:
    """Deduplicate and group columns by table, preserving first-seen table order."""
    tables: dict[str, list[ColumnMetadata]] = {}
    for col in dedupe_columns(columns):
        tables.setdefault(col.table_name, []).append(col)
    return {name: _order_columns(cols) for name, cols in tables.items()}


def canonicalize(columns: Iterable[ColumnMetadata]) -> str:
    """Render catalog rows as ``CREATE TABLE`` blocks separated by a blank line.

    Pure and idempotent: the same rows, in any order within a table, yield
    byte-identical text.
    """
    blocks: list[str] = []
    for table, cols in group_by_table(columns).items():
        body = ",\n".join(f"{INDENT}{render_column(c)}" for c in cols)
        blocks.append(f"CREATE TABLE {table} (\n{body}\n);")
    return "\n\n".join(blocks)
