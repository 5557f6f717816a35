"""Data models for schema introspection.

Models:
- ColumnMetadata: one catalog row describing a column and, optionally, one
  key constraint it participates in
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

ConstraintType = Literal["PRIMARY KEY", "FOREIGN KEY"]

PRIMARY_KEY: Final[ConstraintType] = "PRIMARY KEY"
FOREIGN_KEY: Final[ConstraintType] = "FOREIGN KEY"


@dataclass(frozen=True, slots=True)
class ColumnMetadata:
    """Catalog metadata for a single column.

    The introspection query joins columns to their key constraints with
    LEFT JOINs, so a column that takes part in several constraints appears
    once per constraint. Deduplication happens in the canonicalizer.

    Attributes:
        table_name: Table the column belongs to
        column_name: Column name as defined in the database
        data_type: Declared SQL type as reported by the catalog
        max_length: Character length for sized types; negative means unbounded
        nullable: Whether the column accepts NULL values
        default: Default expression text, if any
        constraint_type: Key constraint carried by this row, if any
        foreign_table: Referenced table when constraint_type is FOREIGN KEY
        foreign_column: Referenced column when constraint_type is FOREIGN KEY
        ordinal_position: 1-based column position within the table
    """

    table_name: str
    column_name: str
    data_type: str
    max_length: int | None = None
    nullable: bool = True
    default: str | None = None
    constraint_type: ConstraintType | None = None
    foreign_table: str | None = None
    foreign_column: str | None = None
    ordinal_position: int | None = None

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the column: ``(table_name, column_name)``."""
        return (self.table_name, self.column_name)
