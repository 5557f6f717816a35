"""Test doubles shared by the suite: a SQLite adapter and a stub model factory."""

from __future__ import annotations

from pydantic_ai.messages import ModelMessage, ModelResponse, SystemPromptPart, ToolCallPart
from pydantic_ai.models import Model
from pydantic_ai.models.function import AgentInfo, FunctionModel
import sqlalchemy as sa

from snapql.dialects.base import DialectAdapter
from snapql.generation import GenerationOptions
from snapql.models import ConnectionConfig, ConnectionDescriptor

SQLITE_INTROSPECTION_SQL = """
SELECT
    'main' AS table_schema,
    m.name AS table_name,
    c.name AS column_name,
    c.type AS data_type,
    NULL AS character_maximum_length,
    CASE WHEN c."notnull" = 1 THEN 'NO' ELSE 'YES' END AS is_nullable,
    c.dflt_value AS column_default,
    CASE
        WHEN c.pk > 0 THEN 'PRIMARY KEY'
        WHEN f."from" IS NOT NULL THEN 'FOREIGN KEY'
    END AS constraint_type,
    CASE WHEN f."table" IS NOT NULL THEN 'main' END AS foreign_table_schema,
    f."table" AS foreign_table_name,
    f."to" AS foreign_column_name,
    c.cid + 1 AS ordinal_position
FROM sqlite_master AS m
JOIN pragma_table_info(m.name) AS c
LEFT JOIN pragma_foreign_key_list(m.name) AS f ON f."from" = c.name
WHERE m.type = 'table' AND m.name NOT LIKE 'sqlite_%'
ORDER BY m.name, c.cid
"""

SCHEMA_DDL = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY,
    email VARCHAR(255) NOT NULL,
    nickname TEXT DEFAULT 'anon'
);
CREATE TABLE orders (
    id INTEGER PRIMARY KEY,
    user_id INTEGER NOT NULL REFERENCES users(id),
    total NUMERIC
);
INSERT INTO users (id, email, nickname) VALUES (1, 'a@example.com', NULL);
INSERT INTO users (id, email, nickname) VALUES (2, 'b@example.com', '');
INSERT INTO orders (id, user_id, total) VALUES (10, 1, 9.5);
"""


class SQLiteAdapter(DialectAdapter):
    """File-backed adapter used to exercise the shared adapter flow."""

    name = "sqlite"
    display_name = "SQLite"
    sqlglot_dialect = "sqlite"
    quote_style = "double quotes"
    default_schema = "main"
    introspection_sql = SQLITE_INTROSPECTION_SQL

    def url_from_config(self, config: ConnectionConfig) -> sa.URL:
        return sa.URL.create("sqlite+pysqlite", database=config.database)

    def url_from_string(self, connection_string: str) -> sa.URL:
        return sa.make_url(connection_string)


class CountingSQLiteAdapter(SQLiteAdapter):
    """Counts engine creations, i.e. connection attempts."""

    def __init__(self) -> None:
        super().__init__()
        self.engines_created = 0

    def create_engine(self, descriptor: ConnectionDescriptor) -> sa.Engine:
        self.engines_created += 1
        return super().create_engine(descriptor)


class StubModelFactory:
    """Model factory returning a FunctionModel that records each request."""

    def __init__(self, query: str = "SELECT id FROM users", error: Exception | None = None) -> None:
        self.query = query
        self.error = error
        self.options: list[GenerationOptions] = []
        self.system_prompts: list[str] = []
        self.user_prompts: list[str] = []

    def __call__(self, options: GenerationOptions) -> Model:
        self.options.append(options)
        return FunctionModel(self._respond)

    def _respond(self, messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        for message in messages:
            for part in message.parts:
                if isinstance(part, SystemPromptPart):
                    self.system_prompts.append(part.content)
                elif part.part_kind == "user-prompt":
                    self.user_prompts.append(str(part.content))
        if self.error is not None:
            raise self.error
        return ModelResponse(parts=[ToolCallPart(info.output_tools[0].name, {"query": self.query})])
