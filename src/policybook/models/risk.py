"""Risk domain model."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from policybook.core.validation import validate_required_text, validate_yearly_price


@dataclass(frozen=True)
class Risk:
    """A named coverage type charged per started year of coverage.

    Two risks are the same risk when both name and yearly price match.
    """

    name: str
    yearly_price: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", validate_required_text(self.name, "Risk name"))
        object.__setattr__(self, "yearly_price", validate_yearly_price(self.yearly_price))

    def __str__(self) -> str:
        return f"{self.name} ({self.yearly_price}/year)"
