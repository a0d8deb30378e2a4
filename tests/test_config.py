from __future__ import annotations

from pathlib import Path

import pytest

from policybook.core import config as app_config
from policybook.core.errors import InvalidArgumentError


def test_load_config_reads_yaml(tmp_path: Path) -> None:
    config_file = tmp_path / "policybook.yaml"
    config_file.write_text(
        "company:\n  name: If\nlogging:\n  level: debug\n  json: true\naudit:\n  retention_days: 30\n",
        encoding="utf-8",
    )

    config = app_config.load_config(config_file)

    assert config.company.name == "If"
    assert config.logging.level == "DEBUG"
    assert config.logging.json is True
    assert config.audit.retention_days == 30
    assert config.audit.max_entries == 10000


def test_load_config_missing_file_uses_defaults(tmp_path: Path) -> None:
    config = app_config.load_config(tmp_path / "missing.yaml")

    assert config == app_config.AppConfig()
    assert config.company.name == "Insurance Company"


def test_load_config_rejects_invalid_values(tmp_path: Path) -> None:
    config_file = tmp_path / "policybook.yaml"
    config_file.write_text("audit:\n  retention_days: 0\n", encoding="utf-8")
    with pytest.raises(InvalidArgumentError):
        app_config.load_config(config_file)

    config_file.write_text("logging:\n  level: chatty\n", encoding="utf-8")
    with pytest.raises(InvalidArgumentError):
        app_config.load_config(config_file)


def test_resolve_default_config_path_prefers_env(monkeypatch, tmp_path: Path) -> None:
    target = tmp_path / "custom.yaml"
    monkeypatch.setenv("POLICYBOOK_CONFIG_PATH", str(target))

    assert app_config.resolve_default_config_path() == target


def test_resolve_default_config_path_uses_cwd(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("POLICYBOOK_CONFIG_PATH", raising=False)
    config_file = tmp_path / "config" / "policybook.yaml"
    config_file.parent.mkdir()
    config_file.write_text("company:\n  name: Local\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert app_config.resolve_default_config_path() == config_file
    assert app_config.load_config().company.name == "Local"
