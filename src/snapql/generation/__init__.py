"""Query synthesis package.

Exports the typed models and the PydanticAI-backed synthesizer.
"""

from __future__ import annotations

from .models import DEFAULT_MODEL, GeneratedQuery, GenerationOptions
from .synthesizer import (
    ModelFactory,
    QuerySynthesizer,
    build_openai_model,
    build_system_prompt,
)

__all__ = [
    "DEFAULT_MODEL",
    "GeneratedQuery",
    "GenerationOptions",
    "ModelFactory",
    "QuerySynthesizer",
    "build_openai_model",
    "build_system_prompt",
]
