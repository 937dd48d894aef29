"""Date utility functions for fbTimeCheck."""
import re
from datetime import datetime, date, time, timedelta
from typing import Tuple, Union

DATE_FORMAT = "%Y-%m-%d"
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def to_date(value: Union[str, date]) -> date:
    """Convert a YYYY-MM-DD string (or a date) to a date."""
    if isinstance(value, date):
        return value
    return datetime.strptime(value, DATE_FORMAT).date()


def iso_datetime(dt: Union[str, date], is_end: bool = False) -> str:
    """Convert a date to a UTC day-boundary timestamp.

    Args:
        dt: Date to convert
        is_end: Whether this is an end date (23:59:59 instead of 00:00:00)

    Returns:
        Timestamp string such as 2025-09-01T00:00:00Z
    """
    t = time(23, 59, 59) if is_end else time.min
    return datetime.combine(to_date(dt), t).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_date(value: str, label: str = "Date") -> date:
    """Parse and validate a YYYY-MM-DD date argument.

    Args:
        value: Date string
        label: Name used in error messages (e.g. "Start date")

    Returns:
        Parsed date

    Raises:
        ValueError: If the value is not a valid YYYY-MM-DD date
    """
    if not value or not DATE_PATTERN.match(value):
        raise ValueError(f"{label} must be in format YYYY-MM-DD")
    try:
        return to_date(value)
    except ValueError:
        raise ValueError(f"Invalid {label.lower()}: {value}")


def validate_dates(start_str: str, end_str: str) -> Tuple[date, date]:
    """Validate the start and end date arguments.

    Returns:
        Tuple of (start_date, end_date)

    Raises:
        ValueError: If a date is malformed or start is after end
    """
    start_date = parse_date(start_str, "Start date")
    end_date = parse_date(end_str, "End date")
    if start_date > end_date:
        raise ValueError("Start date must be before or equal to end date")
    return start_date, end_date


def count_weekdays(start_date: Union[str, date], end_date: Union[str, date], is_range: bool) -> int:
    """Count Monday-Friday days between two dates (inclusive).

    Args:
        start_date: First day
        end_date: Last day (ignored unless is_range)
        is_range: Whether the report spans multiple days

    Returns:
        Number of weekdays
    """
    current = to_date(start_date)
    end = to_date(end_date) if is_range else current

    count = 0
    while current <= end:
        if current.weekday() < 5:
            count += 1
        current += timedelta(days=1)
    return count


def day_str(dt: date) -> str:
    """Format a date as a string with day of week.

    Args:
        dt: Date to format

    Returns:
        Formatted date string
    """
    return f"({['Mo','Tue','Wed','Thu','Fri','Sat','Sun'][dt.weekday()]}){dt}"
