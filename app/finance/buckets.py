"""
Fixed-size time buckets for charting.

A period type decides how many buckets a series has and what each is labelled.
`bucket_index` is positional only: callers drop timestamps outside the
resolved range before indexing.
"""
from datetime import datetime
from typing import Dict, List, Optional

from app.finance.periods import normalize_period

BUCKET_LABELS: Dict[str, List[str]] = {
    "day": ["00:00", "03:00", "06:00", "09:00", "12:00", "15:00", "18:00", "21:00"],
    "week": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
    "month": ["Week 1", "Week 2", "Week 3", "Week 4"],
    "quarter": ["Month 1", "Month 2", "Month 3"],
    "year": ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"],
}


def bucket_count(period: Optional[str]) -> int:
    return len(BUCKET_LABELS[normalize_period(period)])


def bucket_labels(period: Optional[str]) -> List[str]:
    """Display labels for the period's buckets (a fresh list each call)."""
    return list(BUCKET_LABELS[normalize_period(period)])


def bucket_index(timestamp: datetime, period_start: Optional[datetime], period: Optional[str]) -> int:
    """
    Map a timestamp to its bucket inside a period.

    day: 3-hour slots; week: ISO weekday (Monday=0, Sunday=6);
    month: 7-day bands by day of month, the 29th onwards folded into the last;
    quarter: month within the quarter; year: calendar month (0-based).
    """
    period = normalize_period(period)
    if period == "day":
        return timestamp.hour // 3
    if period == "week":
        return timestamp.weekday()
    if period == "quarter":
        return (timestamp.month - 1) % 3
    if period == "year":
        return timestamp.month - 1
    return min((timestamp.day - 1) // 7, 3)
