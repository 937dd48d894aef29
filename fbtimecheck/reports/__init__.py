"""Report generation modules for fbTimeCheck."""

from .report_generator import ReportGenerator
from .html_report import render_html, group_results

__all__ = ['ReportGenerator', 'render_html', 'group_results']
