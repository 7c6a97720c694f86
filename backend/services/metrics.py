"""
Shared numeric helpers for the analytics services.

Rates are rounded half-up on the exact binary value of the float, which is the
behavior of fixed-point number formatting in the dashboard (e.g. 2.675 -> 2.67,
because the double nearest 2.675 is slightly below it). Python's built-in
round() uses banker's rounding and would disagree on exact halves such as
12.5 -> 12.

Modes are taken with collections.Counter; on ties the value seen first wins.
"""

from collections import Counter
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, TypeVar


T = TypeVar('T')

# Decimal places used for conversion rates everywhere except the monthly
# timeline insight, which reports one decimal
DECIMAL_PLACES = 2


def round_half_up(value: float, digits: int = DECIMAL_PLACES) -> float:
    """
    Round a float half-up to the given number of decimal places.

    Args:
        value: Number to round.
        digits: Decimal places to keep.

    Returns:
        float: Rounded value.
    """
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def conversion_rate(closed: int, count: int, digits: int = DECIMAL_PLACES) -> float:
    """
    Percentage of closed deals, rounded half-up.

    Returns 0.0 when count is zero.
    """
    if not count:
        return 0.0
    return round_half_up(closed / count * 100, digits)


def dominant_value(values: Iterable[Optional[T]], default: T) -> T:
    """
    Statistical mode of the non-null values.

    Counter preserves insertion order and most_common() is stable, so the
    first-seen value wins a tie.

    Args:
        values: Values to inspect; None entries are ignored.
        default: Returned when there is no non-null value.
    """
    counts = Counter(value for value in values if value is not None)
    if not counts:
        return default
    return counts.most_common(1)[0][0]


def as_utc(moment: datetime) -> datetime:
    """
    Interpret a timestamp as UTC.

    Naive timestamps (TIMESTAMP columns come back naive from asyncpg) are
    stored in UTC; aware ones are converted.
    """
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def to_naive_utc(moment: datetime) -> datetime:
    """Convert to the naive UTC form stored in TIMESTAMP columns."""
    return as_utc(moment).replace(tzinfo=None)


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
