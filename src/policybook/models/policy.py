"""Policy domain models and premium arithmetic.

Policies are immutable. Amending the covered risks means deriving a new
``Policy`` through ``Policy.clone`` and storing it in place of the old one.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from policybook.models.risk import Risk

PolicyKey = tuple[str, datetime, datetime]


def add_months(moment: datetime, months: int) -> datetime:
    """Add calendar months, clamping to the last day of a shorter month."""
    return moment + relativedelta(months=months)


def years_covered(start: datetime, end: datetime) -> int:
    """Return the number of started years between ``start`` and ``end``.

    Whole years are counted by calendar year difference; one more year is
    charged when ``end`` sits later in its year than ``start`` does in its own.
    The position inside the year is compared as (month, day, time) rather
    than as a day-of-year number, deliberately departing from the plain
    day-of-year rule so a leap day does not move the boundary: 2020-02-29 to
    2021-03-01 counts as 2 years here, 1 under day-of-year numbering.
    """
    years = end.year - start.year
    if (end.month, end.day, end.time()) > (start.month, start.day, start.time()):
        years += 1
    return years


@dataclass(frozen=True)
class RiskCoverageInterval:
    """One continuous span during which a risk was covered.

    ``valid_to`` is None while the coverage is still open.
    """

    valid_from: datetime
    valid_to: datetime | None
    risk: Risk

    @property
    def is_open(self) -> bool:
        return self.valid_to is None

    def close(self, valid_to: datetime) -> RiskCoverageInterval:
        return replace(self, valid_to=valid_to)

    def end_or(self, default: datetime) -> datetime:
        return self.valid_to if self.valid_to is not None else default


@dataclass(frozen=True)
class Policy:
    """An issued policy for one insured object over ``[valid_from, valid_till)``."""

    insured_object_name: str
    valid_from: datetime
    valid_till: datetime
    coverage: tuple[RiskCoverageInterval, ...] = field(default_factory=tuple)

    @property
    def key(self) -> PolicyKey:
        return (self.insured_object_name, self.valid_from, self.valid_till)

    @property
    def insured_risks(self) -> frozenset[Risk]:
        """Every risk the policy has covered at some point, open or closed."""
        return frozenset(interval.risk for interval in self.coverage)

    @property
    def premium(self) -> Decimal:
        """Sum of started coverage years times the yearly price, per interval."""
        return sum(
            (
                years_covered(interval.valid_from, interval.end_or(self.valid_till))
                * interval.risk.yearly_price
                for interval in self.coverage
            ),
            Decimal("0"),
        )

    def covers(self, moment: datetime) -> bool:
        return self.valid_from <= moment < self.valid_till

    def overlaps(self, valid_from: datetime, valid_till: datetime) -> bool:
        return self.valid_from < valid_till and valid_from < self.valid_till

    def intervals_for(self, risk: Risk) -> list[RiskCoverageInterval]:
        return [interval for interval in self.coverage if interval.risk == risk]

    def clone(
        self,
        transform: Callable[[tuple[RiskCoverageInterval, ...]], Iterable[RiskCoverageInterval]],
    ) -> Policy:
        """Return a copy whose coverage is ``transform(coverage)``."""
        return replace(self, coverage=tuple(transform(self.coverage)))
