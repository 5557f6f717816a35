"""Models for the query synthesizer.

``GeneratedQuery`` is the structured output the model must return;
``GenerationOptions`` groups the provider knobs that travel with a request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MODEL: Final[str] = "gpt-4o"


class GeneratedQuery(BaseModel):
    """Structured output from the generation step: exactly one string field."""

    model_config = ConfigDict(extra="forbid")

    query: str = Field(
        description="A single read-only SQL query, with no explanation or markdown fences"
    )


@dataclass(slots=True)
class GenerationOptions:
    """Provider settings for one generation request.

    Attributes:
        api_key: Provider credential; the OPENAI_API_KEY environment variable
            is used when unset
        model: Model identifier, defaults to ``DEFAULT_MODEL``
        base_url: Override for OpenAI-compatible alternative providers
        timeout: Request timeout in seconds at the HTTP client
    """

    api_key: str | None = None
    model: str = DEFAULT_MODEL
    base_url: str | None = None
    timeout: float | None = None
