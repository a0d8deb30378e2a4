"""Application dependency container."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from policybook.core.config import AppConfig, load_config
from policybook.core.logging import configure_logging
from policybook.repositories.audit_repository import AuditRepository
from policybook.services.csv_import_service import CsvImportService
from policybook.services.insurance_company import InsuranceCompany


@dataclass
class ServiceContainer:
    """Wires the company and its collaborators."""

    config: AppConfig
    company: InsuranceCompany
    csv_import_service: CsvImportService
    audit_repo: AuditRepository

    def cleanup_audit_logs(self) -> int:
        """Drop audit logs older than the configured retention."""
        return self.audit_repo.cleanup_old_logs(self.config.audit.retention_days)


def build_container(
    config_path: Path | None = None,
    clock: Callable[[], datetime] | None = None,
) -> ServiceContainer:
    """Load configuration, configure logging and build the company."""
    config = load_config(config_path)
    configure_logging(level=config.logging.level, log_json=config.logging.json)
    clock = clock or datetime.now

    audit_repo = AuditRepository(clock=clock, max_entries=config.audit.max_entries)
    company = InsuranceCompany(name=config.company.name, clock=clock, audit_repo=audit_repo)

    return ServiceContainer(
        config=config,
        company=company,
        csv_import_service=CsvImportService(company),
        audit_repo=audit_repo,
    )
