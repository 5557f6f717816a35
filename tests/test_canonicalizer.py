from __future__ import annotations

import itertools

from snapql.schema import (
    FOREIGN_KEY,
    PRIMARY_KEY,
    ColumnMetadata,
    canonicalize,
    dedupe_columns,
    render_column,
)


def _col(table: str, name: str, pos: int, **kw: object) -> ColumnMetadata:
    return ColumnMetadata(
        table_name=table,
        column_name=name,
        data_type=str(kw.pop("data_type", "integer")),
        ordinal_position=pos,
        **kw,  # type: ignore[arg-type]
    )


def _fk(table: str, name: str, pos: int, ref_table: str, ref_col: str) -> ColumnMetadata:
    return _col(
        table, name, pos, constraint_type=FOREIGN_KEY, foreign_table=ref_table, foreign_column=ref_col
    )


def test_primary_key_wins_over_plain_duplicate() -> None:
    rows = [
        _col("users", "id", 1, nullable=False),
        _col("users", "id", 1, nullable=False, constraint_type=PRIMARY_KEY),
    ]
    text = canonicalize(rows)
    assert text == "CREATE TABLE users (\n    id integer NOT NULL PRIMARY KEY\n);"
    assert text.count(" id ") == 1


def test_render_column_attribute_order() -> None:
    col = ColumnMetadata(
        table_name="orders",
        column_name="user_id",
        data_type="character varying",
        max_length=40,
        nullable=False,
        default="'x'::character varying",
        constraint_type=FOREIGN_KEY,
        foreign_table="users",
        foreign_column="id",
    )
    assert render_column(col) == (
        "user_id character varying(40) NOT NULL REFERENCES users(id) "
        "DEFAULT 'x'::character varying"
    )


def test_render_unbounded_length_and_dangling_foreign_key() -> None:
    col = ColumnMetadata(
        table_name="docs",
        column_name="body",
        data_type="nvarchar",
        max_length=-1,
        constraint_type=FOREIGN_KEY,
    )
    assert render_column(col) == "body nvarchar(max)"


def test_foreign_key_with_target_beats_one_without() -> None:
    bare = _col("orders", "user_id", 2, constraint_type=FOREIGN_KEY)
    full = _fk("orders", "user_id", 2, "users", "id")
    assert dedupe_columns([bare, full]) == [full]
    assert dedupe_columns([full, bare]) == [full]


def test_output_is_invariant_under_row_permutation_within_table() -> None:
    rows = [
        _col("users", "id", 1, nullable=False),
        _col("users", "id", 1, nullable=False, constraint_type=PRIMARY_KEY),
        _col("users", "email", 2, data_type="varchar", max_length=255, nullable=False),
        _fk("users", "team_id", 3, "teams", "id"),
        _col("users", "team_id", 3),
        _fk("users", "manager_id", 4, "users", "id"),
    ]
    outputs = {canonicalize(list(perm)) for perm in itertools.permutations(rows)}
    assert len(outputs) == 1
    (text,) = outputs
    assert text == (
        "CREATE TABLE users (\n"
        "    id integer NOT NULL PRIMARY KEY,\n"
        "    email varchar(255) NOT NULL,\n"
        "    team_id integer REFERENCES teams(id),\n"
        "    manager_id integer REFERENCES users(id)\n"
        ");"
    )


def test_tables_keep_first_seen_order_and_are_not_repeated() -> None:
    rows = [
        _col("orders", "id", 1, constraint_type=PRIMARY_KEY),
        _col("users", "id", 1, constraint_type=PRIMARY_KEY),
        _fk("orders", "user_id", 2, "users", "id"),
        _col("users", "name", 2, data_type="text"),
    ]
    text = canonicalize(rows)
    blocks = text.split("\n\n")
    assert [b.splitlines()[0] for b in blocks] == ["CREATE TABLE orders (", "CREATE TABLE users ("]
    assert text.count("CREATE TABLE") == 2


def test_columns_without_ordinals_keep_received_order() -> None:
    rows = [
        ColumnMetadata(table_name="t", column_name="b", data_type="int"),
        ColumnMetadata(table_name="t", column_name="a", data_type="int"),
    ]
    assert canonicalize(rows) == "CREATE TABLE t (\n    b int,\n    a int\n);"


def test_canonicalize_is_idempotent_and_empty_safe() -> None:
    rows = [_col("t", "id", 1, constraint_type=PRIMARY_KEY)]
    assert canonicalize(rows) == canonicalize(rows)
    assert canonicalize([]) == ""
