"""CSV import service for the risk catalog."""

from __future__ import annotations

import csv
from dataclasses import dataclass

from policybook.core.errors import PolicyBookError
from policybook.models.risk import Risk
from policybook.services.insurance_company import InsuranceCompany

RISK_CSV_HEADERS = ["name", "yearly_price"]
MAX_REPORTED_ERRORS = 10


@dataclass
class CsvImportResult:
    """Result summary for CSV imports."""

    created_count: int
    failed_count: int
    error_messages: list[str]


class CsvImportService:
    """Imports risks from CSV and hands them to the company in one catalog update."""

    def __init__(self, company: InsuranceCompany):
        self._company = company

    @staticmethod
    def _validate_headers(fieldnames: list[str] | None, required: list[str]) -> None:
        if fieldnames is None:
            raise ValueError("CSV header is missing.")
        missing = [header for header in required if header not in fieldnames]
        if missing:
            raise ValueError(f"CSV headers missing: {', '.join(missing)}")

    def import_risks(self, file_path: str, replace: bool = False) -> CsvImportResult:
        """Import a risk CSV and return success/failure counts.

        Rows that fail validation are skipped and reported. The valid rows are
        merged into the current catalog, or replace it when ``replace`` is set;
        a replacement that would drop an insured risk raises ``RiskInUseError``.
        """
        failed_count = 0
        errors: list[str] = []
        imported: dict[Risk, None] = {}

        with open(file_path, "r", encoding="utf-8-sig", newline="") as csv_file:
            reader = csv.DictReader(csv_file)
            self._validate_headers(reader.fieldnames, RISK_CSV_HEADERS)

            for row_index, row in enumerate(reader, start=2):
                try:
                    risk = Risk(name=row["name"], yearly_price=(row["yearly_price"] or "").strip())
                    imported[risk] = None
                except (PolicyBookError, KeyError, TypeError) as error:
                    failed_count += 1
                    if len(errors) < MAX_REPORTED_ERRORS:
                        errors.append(f"row {row_index}: {error}")

        new_risks = frozenset(imported)
        previous = self._company.available_risks
        if replace:
            self._company.available_risks = new_risks
            created_count = len(new_risks)
        else:
            self._company.available_risks = previous | new_risks
            created_count = len(new_risks - previous)

        return CsvImportResult(
            created_count=created_count,
            failed_count=failed_count,
            error_messages=errors,
        )
