from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import pytest
import structlog

from policybook.core.container import build_container
from policybook.models.risk import Risk


@pytest.fixture
def restore_logging():
    package_logger = logging.getLogger("policybook")
    yield
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True
    structlog.reset_defaults()


def write_config(tmp_path: Path, level: str) -> Path:
    config_file = tmp_path / "policybook.yaml"
    config_file.write_text(
        f"company:\n  name: If\nlogging:\n  level: {level}\naudit:\n  retention_days: 10\n",
        encoding="utf-8",
    )
    return config_file


def test_build_container_wires_company(tmp_path: Path, restore_logging) -> None:
    container = build_container(write_config(tmp_path, "INFO"), clock=lambda: datetime(2018, 11, 1))
    company = container.company
    fire = Risk("fire", 1)
    company.available_risks = [fire]
    policy = company.sell_policy("car", datetime(2018, 11, 5), 1, [fire])

    assert company.name == "If"
    assert policy.premium == 1
    assert logging.getLogger("policybook").level == logging.INFO
    assert [log["action"] for log in container.audit_repo.list_logs()] == ["SELL", "SET_RISKS"]
    assert container.cleanup_audit_logs() == 0


def test_configured_logging_writes_events_to_stderr(tmp_path: Path, capsys, restore_logging) -> None:
    container = build_container(write_config(tmp_path, "INFO"), clock=lambda: datetime(2018, 11, 1))
    fire = Risk("fire", 1)
    container.company.available_risks = [fire]
    container.company.sell_policy("car", datetime(2018, 11, 5), 1, [fire])

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "policy_sold" in captured.err
