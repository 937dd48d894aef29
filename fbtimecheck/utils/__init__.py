"""Utility modules for fbTimeCheck."""

from .date_utils import iso_datetime, count_weekdays, validate_dates, day_str
from .hours_utils import calculate_logged_hours, expected_hours, get_note_value, check_ooo_status
from .format_utils import format_hours, format_number, format_date, format_time, make_console
from .file_utils import write_excel, write_html, write_pdf, open_file

__all__ = [
    'iso_datetime', 'count_weekdays', 'validate_dates', 'day_str',
    'calculate_logged_hours', 'expected_hours', 'get_note_value', 'check_ooo_status',
    'format_hours', 'format_number', 'format_date', 'format_time', 'make_console',
    'write_excel', 'write_html', 'write_pdf', 'open_file'
]
