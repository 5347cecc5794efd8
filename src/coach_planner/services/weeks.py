"""Calendar helpers for plan weeks."""

from datetime import UTC, date, datetime, timedelta

DAYS_PER_WEEK = 7


def days_since_start(
    start_date: date | datetime, reference_date: date | datetime
) -> int:
    """Return whole days elapsed since the start, negative before it."""
    delta = _as_datetime(reference_date) - _as_datetime(start_date)
    return delta // timedelta(days=1)


def resolve_enrollment_week(
    start_date: date | datetime,
    reference_date: date | datetime,
    max_weeks: int | None = None,
) -> int:
    """Map a reference date to a 1-based plan week; 0 before the start."""
    days = days_since_start(start_date, reference_date)
    if days < 0:
        return 0
    week = days // DAYS_PER_WEEK + 1
    if max_weeks is not None and max_weeks > 0:
        return min(week, max_weeks)
    return week


def day_index(day: date | datetime) -> int:
    """Return the weekday index with Monday as 1 and Sunday as 7."""
    return day.isoweekday()


def iso_week_parts(day: date | datetime) -> tuple[int, int]:
    """Return the ISO year and ISO week number of a day."""
    iso = day.isocalendar()
    return iso.year, iso.week


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
    return datetime(value.year, value.month, value.day, tzinfo=UTC)
