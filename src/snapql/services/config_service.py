"""Configuration service for SnapQL.

This module centralizes environment variable handling: which dialect adapter
the deployment uses, which descriptor form it accepts, where settings live,
and the timeouts applied at the network-client boundary.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import cast, get_args

from snapql.dialects.base import AdapterOptions
from snapql.dialects.constants import DEFAULT_ODBC_DRIVER, DialectName
from snapql.exceptions import ConfigurationError
from snapql.generation.models import DEFAULT_MODEL
from snapql.models import DescriptorForm


def _int_env(name: str, default: int, minimum: int) -> int:
    val = os.getenv(name, str(default))
    try:
        n = int(val)
    except ValueError:
        n = default
    return max(minimum, n)


class ConfigService:
    """Service for reading deployment configuration from the environment."""

    @staticmethod
    def get_dialect() -> DialectName:
        """Dialect adapter selected for this deployment.

        Raises:
            ConfigurationError: If SNAPQL_DIALECT names an unsupported engine
        """
        value = os.getenv("SNAPQL_DIALECT", "postgres").strip().lower()
        if value not in get_args(DialectName):
            supported = ", ".join(get_args(DialectName))
            msg = f"Unsupported SNAPQL_DIALECT '{value}'. Supported: {supported}"
            raise ConfigurationError(msg)
        return cast(DialectName, value)

    @staticmethod
    def get_descriptor_form() -> DescriptorForm:
        """Connection descriptor form accepted by this deployment.

        Raises:
            ConfigurationError: If SNAPQL_DESCRIPTOR_FORM is not a known form
        """
        value = os.getenv("SNAPQL_DESCRIPTOR_FORM", "structured").strip().lower()
        if value not in get_args(DescriptorForm):
            supported = ", ".join(get_args(DescriptorForm))
            msg = f"Unsupported SNAPQL_DESCRIPTOR_FORM '{value}'. Supported: {supported}"
            raise ConfigurationError(msg)
        return cast(DescriptorForm, value)

    @staticmethod
    def settings_path() -> Path:
        """Location of the persisted settings document."""
        override = os.getenv("SNAPQL_SETTINGS_PATH")
        if override:
            return Path(override).expanduser()
        return Path.home() / "SnapQL" / "settings.json"

    # ---- network-client timeouts -----------------------------------------
    @staticmethod
    def connect_timeout() -> int:
        """Database connect timeout in seconds."""
        return _int_env("SNAPQL_CONNECT_TIMEOUT", 10, 1)

    @staticmethod
    def llm_timeout() -> int:
        """Language-model request timeout in seconds."""
        return _int_env("SNAPQL_LLM_TIMEOUT", 60, 1)

    # ---- model / driver defaults -----------------------------------------
    @staticmethod
    def default_model() -> str:
        """Model used when none is stored in settings."""
        return os.getenv("SNAPQL_DEFAULT_MODEL") or DEFAULT_MODEL

    @staticmethod
    def mssql_odbc_driver() -> str:
        """ODBC driver name used for SQL Server connections."""
        return os.getenv("SNAPQL_MSSQL_ODBC_DRIVER") or DEFAULT_ODBC_DRIVER

    @staticmethod
    def adapter_options() -> AdapterOptions:
        """Connection options for the configured dialect adapter."""
        return AdapterOptions(
            connect_timeout=ConfigService.connect_timeout(),
            mssql_odbc_driver=ConfigService.mssql_odbc_driver(),
        )

    # ---- server transport ------------------------------------------------
    @staticmethod
    def transport() -> str:
        """MCP transport: ``stdio`` (default) or ``http``."""
        value = os.getenv("SNAPQL_TRANSPORT", "stdio").strip().lower()
        return value if value in {"stdio", "http"} else "stdio"

    @staticmethod
    def http_host() -> str:
        return os.getenv("SNAPQL_HOST") or "127.0.0.1"

    @staticmethod
    def http_port() -> int:
        return _int_env("SNAPQL_PORT", 8000, 1)
