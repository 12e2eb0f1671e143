from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from mcphost.core.config import ServerConfig, load_config


def test_defaults_when_file_missing(isolate_config: Path) -> None:
    config, meta = load_config()

    assert config.server_name == "MCPServer"
    assert config.server_version == "1.0.0"
    assert config.protocol_version == "2024-11-05"
    assert config.log_level == "WARNING"
    assert meta.path == isolate_config
    assert meta.file_loaded is False
    assert meta.error is None


def test_toml_server_table(isolate_config: Path) -> None:
    isolate_config.write_text(
        '[server]\nserver_name = "notes"\nserver_version = "0.9.0"\nlog_level = "debug"\n',
        encoding="utf-8",
    )

    config, meta = load_config()

    assert config.server_name == "notes"
    assert config.server_version == "0.9.0"
    assert config.log_level == "DEBUG"
    assert meta.file_loaded is True


def test_flat_json_file(tmp_path: Path) -> None:
    path = tmp_path / "mcphost.json"
    path.write_text(json.dumps({"protocol_version": "2025-03-26"}), encoding="utf-8")

    config, meta = load_config(config_path=path)

    assert config.protocol_version == "2025-03-26"
    assert meta.path == path


def test_env_overrides_file(isolate_config: Path) -> None:
    isolate_config.write_text('server_name = "from-file"\n', encoding="utf-8")

    config, meta = load_config(env={"MCPHOST_SERVER_NAME": "from-env"})

    assert config.server_name == "from-env"
    assert meta.env_overrides == {"server_name"}


def test_env_mapping_does_not_leak(isolate_config: Path) -> None:
    load_config(env={"MCPHOST_SERVER_VERSION": "5.0.0"})
    config, _ = load_config()
    assert config.server_version == "1.0.0"


def test_syntax_error_falls_back_to_defaults(isolate_config: Path) -> None:
    isolate_config.write_text("server_name = [unterminated\n", encoding="utf-8")

    config, meta = load_config()

    assert config.server_name == "MCPServer"
    assert meta.error is not None
    assert "Syntax error" in meta.error


def test_non_mapping_root_is_an_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2]", encoding="utf-8")

    _, meta = load_config(config_path=path)

    assert meta.error is not None
    assert "must be a mapping" in meta.error


def test_invalid_value_falls_back_to_defaults(isolate_config: Path) -> None:
    isolate_config.write_text("server_name = 42\n", encoding="utf-8")

    config, meta = load_config()

    assert config.server_name == "MCPServer"
    assert meta.error is not None


def test_server_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MCPHOST_PROTOCOL_VERSION", "2025-06-18")
    assert ServerConfig().protocol_version == "2025-06-18"


def test_unknown_log_level_is_rejected(isolate_config: Path) -> None:
    isolate_config.write_text('log_level = "chatty"\n', encoding="utf-8")

    config, meta = load_config()

    assert config.log_level == "WARNING"
    assert meta.error is not None
    assert "unknown log level" in meta.error


def test_invalid_environment_value_still_falls_back(isolate_config: Path) -> None:
    config, meta = load_config(env={"MCPHOST_LOG_LEVEL": "loud"})

    assert config.log_level == "WARNING"
    assert config.server_name == "MCPServer"
    assert meta.env_overrides == {"log_level"}
    assert meta.error is not None


def test_config_is_immutable() -> None:
    config = ServerConfig()
    with pytest.raises(ValidationError):
        config.server_name = "changed"  # type: ignore[misc]
    assert config.model_copy(update={"server_name": "copy"}).server_name == "copy"
