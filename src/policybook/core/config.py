"""Configuration loader for company, logging and audit settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from policybook.core.errors import InvalidArgumentError


@dataclass(frozen=True)
class CompanyConfig:
    name: str = "Insurance Company"


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "WARNING"
    json: bool = False


@dataclass(frozen=True)
class AuditConfig:
    retention_days: int = 1095
    max_entries: int = 10000


@dataclass(frozen=True)
class AppConfig:
    company: CompanyConfig = field(default_factory=CompanyConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    audit: AuditConfig = field(default_factory=AuditConfig)


DEFAULT_CONFIG_REL_PATH = Path("config/policybook.yaml")
CONFIG_PATH_ENV = "POLICYBOOK_CONFIG_PATH"


def resolve_default_config_path() -> Path:
    """Resolve configuration path from the environment, the cwd or the project root."""
    env_path = os.getenv(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)

    candidates = [
        Path.cwd() / DEFAULT_CONFIG_REL_PATH,
        Path(__file__).resolve().parents[3] / DEFAULT_CONFIG_REL_PATH,
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate

    return candidates[0]


def _positive_int(value: object, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as error:
        raise InvalidArgumentError(f"{field_name} must be an integer: {value!r}") from error
    if number < 1:
        raise InvalidArgumentError(f"{field_name} must be positive, got {number}.")
    return number


def _log_level(value: object) -> str:
    level = str(value).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise InvalidArgumentError(f"Unknown logging level: {value!r}")
    return level


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load the app configuration from YAML; a missing file yields the defaults."""
    path = config_path or resolve_default_config_path()
    if not path.exists():
        return AppConfig()

    with path.open("r", encoding="utf-8") as file:
        raw = yaml.safe_load(file) or {}

    company = raw.get("company") or {}
    logging_section = raw.get("logging") or {}
    audit = raw.get("audit") or {}
    defaults = AppConfig()

    return AppConfig(
        company=CompanyConfig(
            name=str(company.get("name", defaults.company.name)),
        ),
        logging=LoggingConfig(
            level=_log_level(logging_section.get("level", defaults.logging.level)),
            json=bool(logging_section.get("json", defaults.logging.json)),
        ),
        audit=AuditConfig(
            retention_days=_positive_int(
                audit.get("retention_days", defaults.audit.retention_days),
                "audit.retention_days",
            ),
            max_entries=_positive_int(
                audit.get("max_entries", defaults.audit.max_entries),
                "audit.max_entries",
            ),
        ),
    )
