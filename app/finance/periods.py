"""
Reporting periods.

Resolves a symbolic period ("day", "week", "month", "quarter", "year") into a
concrete local date range, and produces the period of the same kind that
immediately precedes it. Unknown periods fall back to "month".
"""
from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple, Union

from app.finance.errors import ValidationError

PERIODS = ("day", "week", "month", "quarter", "year")
DEFAULT_PERIOD = "month"


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


def normalize_period(period: Optional[str]) -> str:
    """Lowercase the keyword; anything unrecognised means 'month'."""
    if not period:
        return DEFAULT_PERIOD
    period = str(period).strip().lower()
    return period if period in PERIODS else DEFAULT_PERIOD


def _start_of_day(d: date) -> datetime:
    return datetime.combine(d, time.min)


def _end_of_day(d: date) -> datetime:
    return datetime.combine(d, time.max)


def add_months(d: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month's length."""
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    _, last_day = monthrange(year, month)
    return d.replace(year=year, month=month, day=min(d.day, last_day))


def _last_day_of_month(d: date) -> date:
    _, last_day = monthrange(d.year, d.month)
    return d.replace(day=last_day)


def _first_day(period: str, today: date) -> date:
    if period == "day":
        return today
    if period == "week":
        return today - timedelta(days=today.weekday())
    if period == "quarter":
        return date(today.year, (today.month - 1) // 3 * 3 + 1, 1)
    if period == "year":
        return date(today.year, 1, 1)
    return today.replace(day=1)


def _last_day(period: str, first: date) -> date:
    if period == "day":
        return first
    if period == "week":
        return first + timedelta(days=6)
    if period == "quarter":
        return _last_day_of_month(add_months(first, 2))
    if period == "year":
        return date(first.year, 12, 31)
    return _last_day_of_month(first)


def _step_back(period: str, first: date) -> date:
    """First day of the period preceding the one starting on `first`."""
    if period == "day":
        return first - timedelta(days=1)
    if period == "week":
        return first - timedelta(days=7)
    if period == "quarter":
        return add_months(first, -3)
    if period == "year":
        return first.replace(year=first.year - 1)
    return add_months(first, -1)


def resolve_current(period: Optional[str], now: Optional[datetime] = None) -> DateRange:
    """Date range of the period containing `now` (defaults to the local clock)."""
    period = normalize_period(period)
    today = (now or datetime.now()).date()
    first = _first_day(period, today)
    return DateRange(start=_start_of_day(first), end=_end_of_day(_last_day(period, first)))


def resolve_previous(period: Optional[str], now: Optional[datetime] = None) -> DateRange:
    """
    Date range of the period immediately before the current one.

    Month, quarter and year step back by calendar units, so a previous month
    spans the whole prior month whatever its length.
    """
    period = normalize_period(period)
    current = resolve_current(period, now)
    first = _step_back(period, current.start.date())
    return DateRange(start=_start_of_day(first), end=_end_of_day(_last_day(period, first)))


def _coerce_date(value: Union[str, date, datetime, None], field: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD)", details={field: value})


def explicit_range(start_date, end_date) -> Optional[DateRange]:
    """
    Build a range from explicit bounds, or None when neither bound is given.

    Both bounds are required together, and the end may not precede the start.
    """
    start = _coerce_date(start_date, "start_date")
    end = _coerce_date(end_date, "end_date")
    if start is None and end is None:
        return None
    if start is None or end is None:
        raise ValidationError(
            "start_date and end_date must be provided together",
            details={"start_date": start_date, "end_date": end_date},
        )
    if end < start:
        raise ValidationError(
            "end_date cannot be before start_date",
            details={"start_date": start.isoformat(), "end_date": end.isoformat()},
        )
    return DateRange(start=_start_of_day(start), end=_end_of_day(end))


def resolve_filter_range(
    period: Optional[str],
    start_date=None,
    end_date=None,
    now: Optional[datetime] = None,
) -> Tuple[DateRange, Optional[DateRange]]:
    """
    Resolve a filter into (current, previous).

    Explicit dates override the symbolic period and disable the comparison,
    in which case `previous` is None.
    """
    custom = explicit_range(start_date, end_date)
    if custom is not None:
        return custom, None
    return resolve_current(period, now), resolve_previous(period, now)
