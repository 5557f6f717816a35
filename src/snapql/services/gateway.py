"""Connection/settings gateway.

The single source of truth for "is a connection configured" and for the
model provider credentials. Store access runs in a worker thread and
read-modify-write updates are serialized with an asyncio lock.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

from fastmcp.utilities.logging import get_logger
from pydantic import BaseModel, ValidationError

from snapql.exceptions import ConfigurationError
from snapql.models import (
    DESCRIPTOR_TYPES,
    AppSettings,
    ConnectionDescriptor,
    DescriptorForm,
)

from .settings_store import SettingsStore

_logger = get_logger(__name__)


class SettingsGateway:
    """Typed get/set access to the persisted settings document."""

    def __init__(
        self, store: SettingsStore, descriptor_form: DescriptorForm = "structured"
    ) -> None:
        self._store = store
        self.descriptor_form = descriptor_form
        self._write_lock = asyncio.Lock()

    @property
    def descriptor_type(self) -> type[Any]:
        return DESCRIPTOR_TYPES[self.descriptor_form]

    def parse_descriptor(
        self, payload: ConnectionDescriptor | Mapping[str, Any]
    ) -> ConnectionDescriptor:
        """Return ``payload`` as a descriptor of this deployment's form.

        Accepts a built descriptor or a raw mapping. No connection is attempted.

        Raises:
            ConfigurationError: If the payload does not match the form
        """
        if isinstance(payload, self.descriptor_type):
            return payload
        if isinstance(payload, BaseModel):
            msg = (
                f"This deployment accepts {self.descriptor_form} connection descriptors, "
                f"got {type(payload).__name__}"
            )
            raise ConfigurationError(msg)
        try:
            descriptor: ConnectionDescriptor = self.descriptor_type.model_validate(payload)
        except ValidationError as exc:
            msg = f"Invalid {self.descriptor_form} connection descriptor: {exc}"
            raise ConfigurationError(msg) from exc
        return descriptor

    async def get_settings(self) -> AppSettings:
        return await asyncio.to_thread(self._store.load)

    async def _update(self, **changes: object) -> None:
        async with self._write_lock:
            settings = await asyncio.to_thread(self._store.load)
            updated = settings.model_copy(update=changes)
            await asyncio.to_thread(self._store.save, updated)

    # ---- connection descriptor ---------------------------------------------
    async def get_connection_config(self) -> ConnectionDescriptor | None:
        """Return the stored descriptor, or None when unconfigured."""
        config = (await self.get_settings()).connection_config
        if config is not None and not isinstance(config, self.descriptor_type):
            _logger.warning(
                "Stored connection descriptor is not in the %s form; treating as unset",
                self.descriptor_form,
            )
            return None
        return config

    async def set_connection_config(self, descriptor: ConnectionDescriptor) -> None:
        """Persist ``descriptor``.

        Raises:
            ConfigurationError: If the descriptor is not in this deployment's form
        """
        await self._update(connection_config=self.parse_descriptor(descriptor))

    # ---- model provider credentials ----------------------------------------
    async def get_openai_key(self) -> str | None:
        return (await self.get_settings()).openai_key

    async def set_openai_key(self, openai_key: str | None) -> None:
        await self._update(openai_key=openai_key or None)

    async def get_openai_base_url(self) -> str | None:
        return (await self.get_settings()).openai_base_url

    async def set_openai_base_url(self, openai_base_url: str | None) -> None:
        await self._update(openai_base_url=openai_base_url or None)

    async def get_openai_model(self) -> str | None:
        return (await self.get_settings()).openai_model

    async def set_openai_model(self, openai_model: str | None) -> None:
        await self._update(openai_model=openai_model or None)
