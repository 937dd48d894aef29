"""Hours aggregation and note classification for fbTimeCheck."""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from ..models import TimeEntry

HOURS_PER_WORKDAY = 8
FULL_MONTH_WORKDAYS = 20
OOO_MARKERS = ("ooo", "out of office", "out of the office")


def calculate_logged_hours(total_logged_seconds: int) -> float:
    """Convert logged seconds to hours, rounded half-up to 2 decimals.

    Args:
        total_logged_seconds: Logged duration in seconds

    Returns:
        Hours as a float (e.g. 5400 -> 1.5)
    """
    hours = Decimal(max(int(total_logged_seconds or 0), 0)) / Decimal(3600)
    return float(hours.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def expected_hours(weekday_count: int, minimum_hours_per_month: int = 160) -> int:
    """Get the expected hours baseline for a number of working days.

    Under a full month of working days each day counts 8 hours, otherwise
    the monthly minimum applies.
    """
    if weekday_count < FULL_MONTH_WORKDAYS:
        return weekday_count * HOURS_PER_WORKDAY
    return minimum_hours_per_month


def parse_time_entries(response: Optional[Dict[str, Any]]) -> List[TimeEntry]:
    """Get the time entries of a time_entries response in API order."""
    if not response or not isinstance(response.get("time_entries"), list):
        return []
    return [TimeEntry.from_api(e) for e in response["time_entries"] if isinstance(e, dict)]


def get_total_logged(response: Optional[Dict[str, Any]]) -> int:
    """Get the pre-aggregated total_logged seconds of a response."""
    if not response:
        return 0
    meta = response.get("meta") or {}
    return int(meta.get("total_logged") or 0)


def get_note_value(response: Optional[Dict[str, Any]]) -> str:
    """Return the first non-blank note of a response, or '' if there is none."""
    for entry in parse_time_entries(response):
        if entry.note.strip():
            return entry.note
    return ""


def mentions_ooo(text: str) -> bool:
    text = (text or "").lower()
    return any(marker in text for marker in OOO_MARKERS)


def check_ooo_status(response: Optional[Dict[str, Any]], total_hours: float, is_range: bool) -> bool:
    """Check whether a member was out of office on a single day.

    Only zero-hour single-day reports qualify; any note mentioning OOO marks
    the member as out of office.
    """
    if is_range or total_hours > 0:
        return False
    return any(mentions_ooo(entry.note) for entry in parse_time_entries(response))
