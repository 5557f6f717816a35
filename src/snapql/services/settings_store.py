"""Persistence media for the settings document.

The core never touches these directly; it goes through ``SettingsGateway``.
Two stores are provided: a JSON file for the desktop deployment and an
in-memory store for tests and embedding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from fastmcp.utilities.logging import get_logger
from pydantic import ValidationError

from snapql.models import AppSettings

_logger = get_logger(__name__)


class SettingsStore(Protocol):
    """Key-value medium holding one ``AppSettings`` document."""

    def load(self) -> AppSettings: ...

    def save(self, settings: AppSettings) -> None: ...


class InMemorySettingsStore:
    """Settings held in process memory."""

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    def load(self) -> AppSettings:
        return self._settings.model_copy(deep=True)

    def save(self, settings: AppSettings) -> None:
        self._settings = settings.model_copy(deep=True)


class JsonSettingsStore:
    """Settings persisted as a JSON document on disk.

    A missing file, or one that does not validate, is replaced with the
    default (empty) settings so the application always starts.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> AppSettings:
        try:
            raw = self.path.read_text(encoding="utf-8")
            return AppSettings.model_validate_json(raw)
        except FileNotFoundError:
            _logger.info("No settings at %s; writing defaults", self.path)
        except ValidationError as exc:
            _logger.error("Invalid settings at %s; resetting to defaults: %s", self.path, exc)
        settings = AppSettings()
        self.save(settings)
        return settings

    def save(self, settings: AppSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(settings.model_dump_json(indent=2), encoding="utf-8")
