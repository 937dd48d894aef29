"""Formatting utility functions for fbTimeCheck."""
from datetime import datetime

from rich.console import Console
from rich.markup import escape


def make_console() -> Console:
    """Console for report output; colors only when writing to a terminal."""
    return Console(soft_wrap=True, highlight=False, emoji=False)


def format_number(hours: float) -> str:
    """Format hours with up to 2 decimals (8.0 -> '8', 7.25 -> '7.25')."""
    return f"{hours:.2f}".rstrip("0").rstrip(".")


def format_hours(hours: float) -> str:
    """Format hours with a unit (8.0 -> '8h', 12345.67 -> '12345.67h')."""
    return f"{format_number(hours)}h"


def format_date(dt: datetime) -> str:
    """Format a date as e.g. 'October 17, 2026'."""
    return f"{dt.strftime('%B')} {dt.day}, {dt.year}"


def format_time(dt: datetime) -> str:
    """Format a time as e.g. '3:05 PM'."""
    hour = dt.hour % 12 or 12
    return f"{hour}:{dt.minute:02} {'AM' if dt.hour < 12 else 'PM'}"


def dotted_name(name: str, width: int = 45) -> str:
    """Pad a name with dim dots for the per-member line (rich markup)."""
    dots = "." * max(3, width - len(name))
    return f"{escape(name)} [bright_black]{dots}[/bright_black]"
