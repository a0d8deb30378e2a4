"""Input validation rules for risks, policies and amendment dates."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from policybook.core.errors import InvalidArgumentError, InvalidPolicyDateError

MAX_YEARLY_PRICE = Decimal("1000000000")


def validate_required_text(value: str | None, field_name: str) -> str:
    """Validate non-empty text fields."""
    if not isinstance(value, str):
        raise InvalidArgumentError(f"{field_name} is required.")
    normalized = value.strip()
    if not normalized:
        raise InvalidArgumentError(f"{field_name} is required.")
    return normalized


def validate_yearly_price(price: Decimal | int | str) -> Decimal:
    """Validate a yearly risk price and return it as Decimal."""
    if isinstance(price, bool) or isinstance(price, float):
        raise InvalidArgumentError("Yearly price must be a Decimal, int or numeric string.")
    try:
        amount = Decimal(price)
    except (InvalidOperation, TypeError, ValueError) as error:
        raise InvalidArgumentError(f"Yearly price is not a number: {price!r}") from error
    if not amount.is_finite():
        raise InvalidArgumentError("Yearly price must be finite.")
    if amount < 0:
        raise InvalidArgumentError("Yearly price must not be negative.")
    if amount > MAX_YEARLY_PRICE:
        raise InvalidArgumentError("Yearly price exceeds the limit (1,000,000,000).")
    return amount


def validate_valid_months(valid_months: int) -> int:
    """A policy has to run for at least one month."""
    if isinstance(valid_months, bool) or not isinstance(valid_months, int):
        raise InvalidArgumentError("Policy duration must be a whole number of months.")
    if valid_months < 1:
        raise InvalidPolicyDateError(
            f"Policy must be valid for at least one month, got {valid_months}."
        )
    return valid_months


def validate_moment(value: date | datetime | None, field_name: str) -> datetime:
    """Normalize a date or datetime to datetime; plain dates become midnight."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raise InvalidArgumentError(f"{field_name} must be a date or datetime.")


def is_aware(moment: datetime) -> bool:
    return moment.tzinfo is not None and moment.utcoffset() is not None


def validate_same_awareness(moment: datetime, reference: datetime, field_name: str) -> datetime:
    """Naive and timezone-aware datetimes cannot be compared; reject the mix."""
    if is_aware(moment) != is_aware(reference):
        expected = "timezone-aware" if is_aware(reference) else "naive"
        raise InvalidArgumentError(f"{field_name} must be a {expected} datetime.")
    return moment


def validate_not_in_past(moment: datetime, now: datetime, field_name: str) -> datetime:
    """Disallow dates before the current time."""
    validate_same_awareness(moment, now, field_name)
    if moment < now:
        raise InvalidPolicyDateError(
            f"{field_name} {moment.isoformat()} is in the past (now is {now.isoformat()})."
        )
    return moment
