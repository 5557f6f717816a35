"""Natural-language to SQL synthesis with a PydanticAI agent.

The flow is deliberately short:
- Introspect the database through the active dialect adapter
- Render canonical schema text
- Ask the model for a structured ``GeneratedQuery`` grounded on that text
- Return the ``query`` field verbatim

The read-only restriction lives in the system prompt only; the returned SQL
is not parsed or checked before it reaches the caller.
"""

from __future__ import annotations

from collections.abc import Callable
import time

from fastmcp.utilities.logging import get_logger
from openai import AsyncOpenAI
from pydantic_ai import Agent
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from snapql.dialects.base import DialectAdapter, preview
from snapql.exceptions import GenerationError, SchemaIntrospectionError
from snapql.models import ConnectionDescriptor
from snapql.schema.canonicalizer import canonicalize

from .models import GeneratedQuery, GenerationOptions

_logger = get_logger(__name__)

ModelFactory = Callable[[GenerationOptions], Model]


def build_openai_model(options: GenerationOptions) -> Model:
    """Create an OpenAI-compatible chat model with client retries disabled."""
    client = AsyncOpenAI(
        api_key=options.api_key or None,
        base_url=options.base_url or None,
        timeout=options.timeout,
        max_retries=0,
    )
    return OpenAIChatModel(options.model, provider=OpenAIProvider(openai_client=client))


def build_system_prompt(
    adapter: DialectAdapter, schema_text: str, existing_query: str | None = None
) -> str:
    """Compose the system instruction for one generation request."""
    example = adapter.quote_identifier("order_items")
    sections = [
        (
            f"You write SQL for a {adapter.display_name} database. Translate the user's "
            "request into exactly one query.\n"
            "Rules:\n"
            "- Only write read-only retrieval statements (SELECT, optionally with CTEs).\n"
            "- Never write INSERT, UPDATE, DELETE, MERGE, DDL, or permission statements.\n"
            f"- Quote identifiers with {adapter.quote_style}, for example {example}.\n"
            "- Use only tables and columns from the schema below.\n"
            "- Put the SQL in the `query` field with no explanation or markdown."
        ),
        f"Database schema:\n{schema_text}",
    ]
    if existing_query and existing_query.strip():
        sections.append(
            "The user is editing the query below. Modify it to satisfy the request "
            f"instead of starting over:\n{existing_query}"
        )
    return "\n\n".join(sections)


class QuerySynthesizer:
    """Generate one SQL query grounded on the live schema."""

    def __init__(
        self, adapter: DialectAdapter, *, model_factory: ModelFactory = build_openai_model
    ) -> None:
        self.adapter = adapter
        self._model_factory = model_factory

    async def schema_text(self, descriptor: ConnectionDescriptor) -> str:
        """Introspect and canonicalize the schema.

        Raises:
            SchemaIntrospectionError: If the catalog query fails or finds no tables
        """
        columns = await self.adapter.introspect(descriptor)
        text = canonicalize(columns)
        if not text:
            msg = "Schema introspection returned zero tables"
            raise SchemaIntrospectionError(msg)
        return text

    def build_agent(
        self, options: GenerationOptions, system_prompt: str
    ) -> Agent[None, GeneratedQuery]:
        """Create a single-use agent with retries disabled."""
        return Agent(
            model=self._model_factory(options),
            system_prompt=system_prompt,
            output_type=GeneratedQuery,
            retries=0,
            output_retries=0,
        )

    async def generate(
        self,
        intent: str,
        descriptor: ConnectionDescriptor,
        *,
        existing_query: str | None = None,
        options: GenerationOptions | None = None,
    ) -> str:
        """Return a single SQL string for ``intent``.

        Raises:
            SchemaIntrospectionError: If the schema cannot be read; no model call is made
            GenerationError: If the provider fails or returns malformed output
        """
        opts = options or GenerationOptions()
        schema_text = await self.schema_text(descriptor)
        system_prompt = build_system_prompt(self.adapter, schema_text, existing_query)

        _logger.info(
            "Generating query (model=%s, schema_chars=%d, editing=%s): %s",
            opts.model,
            len(schema_text),
            bool(existing_query and existing_query.strip()),
            preview(intent),
        )
        start = time.perf_counter()
        try:
            agent = self.build_agent(opts, system_prompt)
            result = await agent.run(intent)
        except Exception as exc:  # noqa: BLE001 - provider failures are reported verbatim
            _logger.warning("Generation failed: %s", exc)
            raise GenerationError(str(exc) or type(exc).__name__) from exc

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        _logger.info("Generation finished (elapsed_ms=%.1f)", elapsed_ms)
        return result.output.query
