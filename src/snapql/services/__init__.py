"""Services package for SnapQL.

Main Components:
- ConfigService: Environment-driven deployment configuration
- SettingsGateway: Typed access to the persisted settings document
- QueryService: Envelope-returning run/generate operations for the UI
"""

from .config_service import ConfigService
from .gateway import SettingsGateway
from .query_service import HISTORY_LIMIT, NO_CONNECTION_MESSAGE, QueryService
from .settings_store import InMemorySettingsStore, JsonSettingsStore, SettingsStore

__all__ = [
    "HISTORY_LIMIT",
    "NO_CONNECTION_MESSAGE",
    "ConfigService",
    "InMemorySettingsStore",
    "JsonSettingsStore",
    "QueryService",
    "SettingsGateway",
    "SettingsStore",
]
