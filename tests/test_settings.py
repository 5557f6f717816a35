from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from snapql.dialects.constants import DEFAULT_ODBC_DRIVER
from snapql.exceptions import ConfigurationError
from snapql.models import AppSettings, ConnectionConfig, ConnectionStringConfig, Envelope
from snapql.services import ConfigService, JsonSettingsStore, SettingsGateway

DESCRIPTOR = ConnectionConfig(host="h", port=5433, username="u", password="p", database="d")


# ---- JSON settings store ------------------------------------------------------


def test_missing_file_is_created_with_defaults(tmp_path: Path) -> None:
    path = tmp_path / "SnapQL" / "settings.json"
    settings = JsonSettingsStore(path).load()
    assert settings == AppSettings()
    assert json.loads(path.read_text(encoding="utf-8"))["connection_config"] is None


def test_invalid_file_is_reset(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text('{"connection_config": 42}', encoding="utf-8")
    assert JsonSettingsStore(path).load() == AppSettings()
    assert AppSettings.model_validate_json(path.read_text(encoding="utf-8")) == AppSettings()


def test_malformed_json_is_reset(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert JsonSettingsStore(path).load() == AppSettings()


def test_gateway_round_trip_through_file(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    gateway = SettingsGateway(JsonSettingsStore(path))

    async def scenario() -> None:
        await gateway.set_connection_config(DESCRIPTOR)
        await gateway.set_openai_key("sk-1")
        await gateway.set_openai_base_url("https://llm.local/v1")
        await gateway.set_openai_model("")

    asyncio.run(scenario())

    reread = SettingsGateway(JsonSettingsStore(path))
    assert asyncio.run(reread.get_connection_config()) == DESCRIPTOR
    assert asyncio.run(reread.get_openai_key()) == "sk-1"
    assert asyncio.run(reread.get_openai_base_url()) == "https://llm.local/v1"
    assert asyncio.run(reread.get_openai_model()) is None


def test_gateway_connection_string_form(tmp_path: Path) -> None:
    gateway = SettingsGateway(JsonSettingsStore(tmp_path / "s.json"), "connection_string")
    descriptor = ConnectionStringConfig(connection_string="postgresql://u:p@h:5432/d")

    with pytest.raises(ConfigurationError):
        asyncio.run(gateway.set_connection_config(DESCRIPTOR))
    asyncio.run(gateway.set_connection_config(descriptor))

    assert asyncio.run(gateway.get_connection_config()) == descriptor


def test_stored_descriptor_of_other_form_reads_as_unset(tmp_path: Path) -> None:
    path = tmp_path / "s.json"
    asyncio.run(SettingsGateway(JsonSettingsStore(path)).set_connection_config(DESCRIPTOR))

    gateway = SettingsGateway(JsonSettingsStore(path), "connection_string")
    assert asyncio.run(gateway.get_connection_config()) is None


def test_parse_descriptor_validates_form(tmp_path: Path) -> None:
    gateway = SettingsGateway(JsonSettingsStore(tmp_path / "s.json"))
    parsed = gateway.parse_descriptor(
        {"host": "h", "port": 5433, "username": "u", "password": "p", "database": "d"}
    )
    assert parsed == DESCRIPTOR
    assert gateway.parse_descriptor(DESCRIPTOR) is DESCRIPTOR
    with pytest.raises(ConfigurationError, match="structured"):
        gateway.parse_descriptor({"connection_string": "postgresql://h/d"})
    with pytest.raises(ConfigurationError, match="ConnectionStringConfig"):
        gateway.parse_descriptor(ConnectionStringConfig(connection_string="postgresql://h/d"))


# ---- envelope -------------------------------------------------------------------


def test_envelope_requires_exactly_one_side() -> None:
    assert Envelope[list[int]].ok([]).is_ok
    assert not Envelope[str].fail("boom").is_ok
    with pytest.raises(ValueError, match="exactly one"):
        Envelope[str](error="x", data="y")
    with pytest.raises(ValueError, match="exactly one"):
        Envelope[str]()


# ---- environment configuration --------------------------------------------------


def test_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in (
        "SNAPQL_DIALECT",
        "SNAPQL_DESCRIPTOR_FORM",
        "SNAPQL_CONNECT_TIMEOUT",
        "SNAPQL_LLM_TIMEOUT",
        "SNAPQL_DEFAULT_MODEL",
        "SNAPQL_MSSQL_ODBC_DRIVER",
        "SNAPQL_TRANSPORT",
    ):
        monkeypatch.delenv(var, raising=False)

    assert ConfigService.get_dialect() == "postgres"
    assert ConfigService.get_descriptor_form() == "structured"
    assert ConfigService.connect_timeout() == 10
    assert ConfigService.llm_timeout() == 60
    assert ConfigService.default_model() == "gpt-4o"
    assert ConfigService.mssql_odbc_driver() == DEFAULT_ODBC_DRIVER
    assert ConfigService.transport() == "stdio"


def test_config_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("SNAPQL_DIALECT", "MSSQL")
    monkeypatch.setenv("SNAPQL_DESCRIPTOR_FORM", "connection_string")
    monkeypatch.setenv("SNAPQL_SETTINGS_PATH", str(tmp_path / "s.json"))
    monkeypatch.setenv("SNAPQL_CONNECT_TIMEOUT", "0")
    monkeypatch.setenv("SNAPQL_LLM_TIMEOUT", "abc")

    assert ConfigService.get_dialect() == "mssql"
    assert ConfigService.get_descriptor_form() == "connection_string"
    assert ConfigService.settings_path() == tmp_path / "s.json"
    assert ConfigService.connect_timeout() == 1
    assert ConfigService.llm_timeout() == 60
    assert ConfigService.adapter_options().connect_timeout == 1


def test_config_rejects_unknown_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SNAPQL_DIALECT", "oracle")
    with pytest.raises(ConfigurationError, match="SNAPQL_DIALECT"):
        ConfigService.get_dialect()

    monkeypatch.setenv("SNAPQL_DESCRIPTOR_FORM", "yaml")
    with pytest.raises(ConfigurationError, match="SNAPQL_DESCRIPTOR_FORM"):
        ConfigService.get_descriptor_form()
