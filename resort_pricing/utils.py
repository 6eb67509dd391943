"""Calendar and money helpers.

All functions take explicit calendar values; nothing here reads the clock
except ``today``, which callers pass down instead of calling directly.
"""
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Iterator, Optional, Sequence, Union

CENT = Decimal("0.01")

WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def _day_value(day) -> str:
    return getattr(day, "value", day)


def today() -> date:
    return datetime.now(timezone.utc).date()


def quantize_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Round a money amount to cents, half up."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """Parse an ISO calendar date. Raises ValueError on malformed input."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


def parse_month_day(value: str) -> tuple:
    """Parse ``MM-DD`` into a (month, day) tuple.

    February 29 is accepted since recurring windows are year-independent.
    """
    parts = value.strip().split("-")
    if len(parts) != 2 or not all(p.isdigit() and len(p) == 2 for p in parts):
        raise ValueError(f"Expected MM-DD, got {value!r}")
    month, day = int(parts[0]), int(parts[1])
    # 2000 is a leap year, so 02-29 validates
    date(2000, month, day)
    return month, day


def month_day(day: date) -> str:
    return f"{day.month:02d}-{day.day:02d}"


def is_month_day_in_range(value: str, start: str, end: str) -> bool:
    """Check a ``MM-DD`` value against an inclusive window that may wrap the year."""
    value_month, value_day = parse_month_day(value)
    start_month, start_day = parse_month_day(start)
    end_month, end_day = parse_month_day(end)

    current = value_month * 100 + value_day
    lower = start_month * 100 + start_day
    upper = end_month * 100 + end_day

    if lower <= upper:
        return lower <= current <= upper
    # e.g. 12-15 .. 01-05
    return current >= lower or current <= upper


def days_between(start: date, end: date) -> int:
    """Whole days from ``start`` to ``end`` (negative when end is earlier)."""
    return (end - start).days


def weekday_name(day: date) -> str:
    return WEEKDAY_NAMES[day.weekday()]


def is_weekend(day: date, weekend_days: Iterable[str] = ("saturday", "sunday")) -> bool:
    return weekday_name(day) in {_day_value(d) for d in weekend_days}


def matches_day_of_week(day: date, mask: Sequence[str]) -> bool:
    """An empty mask matches every day."""
    if not mask:
        return True
    return weekday_name(day) in {_day_value(d) for d in mask}


def date_range(start: date, end: date) -> Iterator[date]:
    """Yield every date from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
