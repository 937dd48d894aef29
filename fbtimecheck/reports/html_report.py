"""HTML rendering of time reports."""
import os
from datetime import datetime
from typing import List, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..models import MemberResult, ReportOptions
from ..utils.format_utils import format_date, format_hours, format_number, format_time
from ..utils.hours_utils import mentions_ooo

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates")
TEMPLATE_NAME = "report.html"

GROUP_TITLES = ("💼 Worked Hours", "🏖️ Out of Office", "❓ No Hours / Other")

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
)


def group_results(results: List[MemberResult]) -> Tuple[List[MemberResult], List[MemberResult], List[MemberResult]]:
    """Split results into worked, out-of-office and other members.

    Returns:
        Tuple of (worked, ooo, other), each in original order
    """
    worked, ooo, other = [], [], []
    for result in results:
        if result.hours > 0:
            worked.append(result)
        elif result.ooo_status or mentions_ooo(result.note):
            ooo.append(result)
        else:
            other.append(result)
    return worked, ooo, other


def hours_class(hours: float, expected: float, is_range: bool) -> str:
    """CSS severity class for a member's hours."""
    if is_range:
        if hours >= expected:
            return "hours-good"
        if hours > 0:
            return "hours-partial"
        return "hours-none"
    return "hours-partial" if hours > 0 else "hours-none"


def report_title(options: ReportOptions) -> str:
    if options.range:
        return f"FreshBooks Time Report - {options.start_date} to {options.end_date}"
    return f"FreshBooks Time Report - {options.start_date}"


def render_html(results: List[MemberResult], options: ReportOptions, total_hours: float,
                working_days: int, expected_hours: int, generated_at: Optional[datetime] = None) -> str:
    """Render the report document.

    Args:
        results: Report rows
        options: Report options
        total_hours: Sum of all members' hours
        working_days: Weekdays in the report window
        expected_hours: Expected hours per member
        generated_at: Timestamp for the footer (optional, defaults to now)

    Returns:
        HTML document
    """
    generated_at = generated_at or datetime.now()
    is_range = options.range

    groups = []
    for title, members, highlight in zip(GROUP_TITLES, group_results(results), (not is_range, False, False)):
        if not members:
            continue
        rows = []
        for r in members:
            worked_single_day = not is_range and r.hours > 0
            rows.append({
                "name": r.member.full_name,
                "hours": format_hours(r.hours),
                "hours_class": hours_class(r.hours, expected_hours, is_range),
                "row_class": "highlight-row" if highlight and worked_single_day else "",
                "warning": worked_single_day,
                "ooo": not is_range and r.ooo_status,
                "note": "" if is_range else r.note,
            })
        groups.append({"title": title, "rows": rows})

    template = _env.get_template(TEMPLATE_NAME)
    return template.render(
        title=report_title(options),
        is_range=is_range,
        member_count=len(results),
        total_hours=format_number(total_hours),
        working_days=working_days,
        expected_hours=expected_hours,
        groups=groups,
        generated_date=format_date(generated_at),
        generated_time=format_time(generated_at),
    )
