"""Date literal and comparison helpers for search filters.

Date literals accepted by the query language:

- absolute: ``YYYY-MM-DD`` (local midnight of that day)
- signed relative: ``-7d``, ``+2w`` (offset from now; ``-`` is the past)
- unsigned relative: ``7d`` (same as ``-7d``, "seven days ago")

Units are ``h`` (hours), ``d`` (days), ``w`` (weeks), ``m`` (months) and
``y`` (years).
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from enum import Enum

from dateutil.relativedelta import relativedelta


class ComparisonOp(Enum):
    """Comparison operators usable in filters."""

    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="
    EQ = "="
    NEQ = "!="

    def __str__(self) -> str:
        return self.value


_ABSOLUTE_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")
_RELATIVE_DATE = re.compile(r"([+-]?)(\d+)([hdwmy])")

DAY_FORMAT = "%Y-%m-%d"


def parse_op(symbol: str) -> ComparisonOp:
    """Convert an operator symbol such as ``>=`` into a ComparisonOp.

    Raises:
        ValueError: If the symbol is not a comparison operator.
    """
    return ComparisonOp(symbol)


def compare(a: int, op: ComparisonOp, b: int) -> bool:
    """Compare two integers with ``op``."""
    if op is ComparisonOp.GT:
        return a > b
    if op is ComparisonOp.GTE:
        return a >= b
    if op is ComparisonOp.LT:
        return a < b
    if op is ComparisonOp.LTE:
        return a <= b
    if op is ComparisonOp.EQ:
        return a == b
    if op is ComparisonOp.NEQ:
        return a != b
    return False


def now() -> datetime:
    """Current local time as an aware datetime."""
    return datetime.now().astimezone()


def is_date_literal(value: str) -> bool:
    """Return whether ``value`` has the shape of an absolute or relative date literal.

    Only the shape is checked: ``2025-02-30`` is a literal, it just never
    resolves to a day.
    """
    return bool(_RELATIVE_DATE.fullmatch(value) or _ABSOLUTE_DATE.fullmatch(value))


def _local(value: datetime) -> datetime:
    # Naive datetimes are taken to be local time
    return value.astimezone()


def _add_months(reference: datetime, months: int) -> datetime:
    # Days past the end of the target month roll over: 31 Jan + 1m = 3 Mar
    first = reference.replace(day=1) + relativedelta(months=months)
    return first + timedelta(days=reference.day - 1)


def resolve_date(value: str, reference: datetime) -> datetime | None:
    """Resolve a date literal against ``reference`` ("now").

    Returns:
        An aware datetime, or None when ``value`` is not a date literal or
        names a day that does not exist.
    """
    match = _RELATIVE_DATE.fullmatch(value)
    if match:
        sign, amount, unit = match.groups()
        n = int(amount) if sign == "+" else -int(amount)
        if unit == "h":
            return reference + timedelta(hours=n)
        if unit == "d":
            return reference + timedelta(days=n)
        if unit == "w":
            return reference + timedelta(weeks=n)
        if unit == "m":
            return _add_months(reference, n)
        return _add_months(reference, 12 * n)

    if _ABSOLUTE_DATE.fullmatch(value):
        try:
            day = date.fromisoformat(value)
        except ValueError:
            return None
        return datetime(day.year, day.month, day.day).astimezone()
    return None


def parse_stored_date(value: str, reference: datetime) -> datetime | None:
    """Interpret a stored attribute value as a point in time.

    Accepts the date literal grammar plus full ISO-8601 timestamps.
    Returns None for anything else.
    """
    value = value.strip()
    resolved = resolve_date(value, reference)
    if resolved is not None:
        return resolved
    try:
        return _local(datetime.fromisoformat(value))
    except ValueError:
        return None


def compare_dates(target: datetime, op: ComparisonOp, other: datetime) -> bool:
    """Compare two points in time.

    ``=`` and ``!=`` compare local calendar days; the ordering operators
    compare full timestamps.
    """
    target = _local(target)
    other = _local(other)
    if op is ComparisonOp.EQ:
        return target.strftime(DAY_FORMAT) == other.strftime(DAY_FORMAT)
    if op is ComparisonOp.NEQ:
        return target.strftime(DAY_FORMAT) != other.strftime(DAY_FORMAT)
    if op is ComparisonOp.GT:
        return target > other
    if op is ComparisonOp.GTE:
        return target >= other
    if op is ComparisonOp.LT:
        return target < other
    if op is ComparisonOp.LTE:
        return target <= other
    return False


def format_day(value: datetime | None) -> str:
    """Format a timestamp as ``YYYY-MM-DD`` (empty string when unset)."""
    if value is None:
        return ""
    return _local(value).strftime(DAY_FORMAT)
