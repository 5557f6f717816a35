"""Query service: the boundary the user interface talks to.

Every operation returns an ``Envelope`` instead of raising. The service reads
the current connection descriptor from the settings gateway on each call, so
a descriptor saved from another surface is picked up without restart.
"""

from __future__ import annotations

from collections import deque
import threading
from typing import ClassVar
import uuid

from fastmcp.utilities.logging import get_logger

from snapql.dialects import DialectAdapter, create_adapter
from snapql.exceptions import ConfigurationError, SnapqlError
from snapql.generation import GenerationOptions, QuerySynthesizer
from snapql.models import (
    ConnectionDescriptor,
    Envelope,
    QueryHistoryEntry,
    QueryResult,
)

from .config_service import ConfigService
from .gateway import SettingsGateway
from .settings_store import JsonSettingsStore

_logger = get_logger(__name__)

NO_CONNECTION_MESSAGE = "No connection configuration set"
HISTORY_LIMIT = 20


class QueryService:
    """Run and generate queries against the configured database."""

    _instance: ClassVar[QueryService | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(
        self,
        gateway: SettingsGateway,
        adapter: DialectAdapter,
        synthesizer: QuerySynthesizer | None = None,
        *,
        default_model: str | None = None,
        llm_timeout: float | None = None,
    ) -> None:
        self.gateway = gateway
        self.adapter = adapter
        self.synthesizer = synthesizer or QuerySynthesizer(adapter)
        self.default_model = default_model or GenerationOptions().model
        self.llm_timeout = llm_timeout
        self._history: deque[QueryHistoryEntry] = deque(maxlen=HISTORY_LIMIT)

    @classmethod
    def from_env(cls) -> QueryService:
        """Build a service wired from environment configuration.

        Raises:
            ConfigurationError: If the dialect or descriptor form is unsupported
        """
        adapter = create_adapter(ConfigService.get_dialect(), ConfigService.adapter_options())
        gateway = SettingsGateway(
            JsonSettingsStore(ConfigService.settings_path()),
            descriptor_form=ConfigService.get_descriptor_form(),
        )
        _logger.info(
            "Query service configured (dialect=%s, descriptor_form=%s)",
            adapter.name,
            gateway.descriptor_form,
        )
        return cls(
            gateway,
            adapter,
            default_model=ConfigService.default_model(),
            llm_timeout=ConfigService.llm_timeout(),
        )

    @classmethod
    def get_instance(cls) -> QueryService:
        """Process-wide service built from the environment on first use."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls.from_env()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        with cls._lock:
            cls._instance = None

    # ---- connection ----------------------------------------------------------
    def _accepted(self, descriptor: ConnectionDescriptor) -> ConnectionDescriptor | None:
        try:
            return self.gateway.parse_descriptor(descriptor)
        except ConfigurationError as exc:
            _logger.warning("Connection descriptor rejected: %s", exc)
            return None

    async def test_connection(self, descriptor: ConnectionDescriptor) -> bool:
        """True only if ``descriptor`` is in the accepted form and connects."""
        accepted = self._accepted(descriptor)
        if accepted is None:
            return False
        return await self.adapter.test_connection(accepted)

    async def set_connection_config(self, descriptor: ConnectionDescriptor) -> bool:
        """Persist ``descriptor`` only if a connection can be established with it.

        A descriptor in the wrong form is refused before any connection attempt.
        """
        accepted = self._accepted(descriptor)
        if accepted is None:
            return False
        if not await self.adapter.test_connection(accepted):
            _logger.info("Connection test failed; descriptor not saved")
            return False
        await self.gateway.set_connection_config(accepted)
        _logger.info("Connection descriptor saved")
        return True

    # ---- queries -------------------------------------------------------------
    async def _require_descriptor(self) -> ConnectionDescriptor:
        descriptor = await self.gateway.get_connection_config()
        if descriptor is None:
            raise ConfigurationError(NO_CONNECTION_MESSAGE)
        return descriptor

    async def run_query(self, query: str) -> QueryResult:
        """Execute ``query`` on the configured database."""
        try:
            descriptor = await self._require_descriptor()
            result = await self.adapter.execute(descriptor, query)
        except SnapqlError as exc:
            return QueryResult.fail(str(exc))
        except Exception as exc:
            _logger.exception("Unexpected error while running query")
            return QueryResult.fail(str(exc) or type(exc).__name__)

        if result.data is not None:
            self._history.appendleft(
                QueryHistoryEntry(id=uuid.uuid4().hex, query=query, row_count=len(result.data))
            )
        return result

    async def generate_query(self, intent: str, existing_query: str = "") -> Envelope[str]:
        """Generate SQL for ``intent``, optionally editing ``existing_query``."""
        try:
            descriptor = await self._require_descriptor()
            settings = await self.gateway.get_settings()
            options = GenerationOptions(
                api_key=settings.openai_key,
                model=settings.openai_model or self.default_model,
                base_url=settings.openai_base_url,
                timeout=self.llm_timeout,
            )
            query = await self.synthesizer.generate(
                intent, descriptor, existing_query=existing_query, options=options
            )
        except SnapqlError as exc:
            return Envelope[str].fail(str(exc))
        except Exception as exc:
            _logger.exception("Unexpected error while generating query")
            return Envelope[str].fail(str(exc) or type(exc).__name__)
        return Envelope[str].ok(query)

    def query_history(self) -> list[QueryHistoryEntry]:
        """Recently executed queries, newest first."""
        return list(self._history)
