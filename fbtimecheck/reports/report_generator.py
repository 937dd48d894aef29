"""ReportGenerator class for generating team time reports."""
import os
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from tabulate import tabulate

from ..api.client import FreshBooksClient
from ..auth.token_manager import TokenManager
from ..exceptions import TokenExpiredError
from ..models import MemberResult, ReportOptions, TeamMember
from ..utils.date_utils import count_weekdays
from ..utils.file_utils import open_file, write_excel, write_html, write_pdf
from ..utils.format_utils import dotted_name, format_hours, format_number, make_console
from ..utils.hours_utils import (calculate_logged_hours, check_ooo_status, expected_hours,
                                 get_note_value, get_total_logged)
from .html_report import group_results, render_html

FILE_PREFIX = "freshbooks-time-report"
API_ERROR_NOTE = "API Error"


class ReportGenerator:
    """Fetches time entries member by member and writes the report files."""

    def __init__(self, client: FreshBooksClient, team_members: List[TeamMember], options: ReportOptions,
                 minimum_hours_per_month: int = 160, token_manager: Optional[TokenManager] = None,
                 output_dir: str = ".", auto_open: bool = True,
                 console: Optional[Console] = None):
        """Initialize a ReportGenerator.

        Args:
            client: FreshBooks API client
            team_members: Members to report on
            options: Date window, range flag and output formats
            minimum_hours_per_month: Expected hours once a window spans a full month of weekdays
            token_manager: Used to recover from expired tokens (optional)
            output_dir: Directory the report files are written to
            auto_open: Whether to open the PDF after writing it
            console: Rich console for progress output (optional)
        """
        self.client = client
        self.team_members = team_members
        self.options = options
        self.minimum_hours_per_month = minimum_hours_per_month
        self.token_manager = token_manager
        self.output_dir = output_dir
        self.auto_open = auto_open
        self.console = console or make_console()

        self.working_days = count_weekdays(options.start_date, options.end_date, options.range)
        self.expected_hours = expected_hours(self.working_days, minimum_hours_per_month)

        self.results: List[MemberResult] = []
        self.total_hours = 0.0
        self.processed_count = 0
        self.skipped_count = 0
        self.written_files: List[str] = []

    def generate_report(self) -> List[MemberResult]:
        """Process all team members and write the requested output files.

        Returns:
            Report rows in processing order
        """
        self.console.print("\nStarting FreshBooks Time Report Generation...\n")

        for member in self.team_members:
            if not member.identity_id:
                self.console.print(f"⚠️ Skipping {escape(member.full_name)} - no identity_id")
                self.skipped_count += 1
                continue

            self.processed_count += 1
            result = self.process_member(member)
            self.results.append(result)
            self.total_hours += result.hours
            self.console.print(f"[dim]Progress: ({self.processed_count * 100 // len(self.team_members)}%)[/dim]")

        self.print_summary()
        self.generate_output_files()
        return self.results

    def fetch_time_entries(self, member: TeamMember) -> dict:
        end_date = self.options.end_date if self.options.range else self.options.start_date
        return self.client.fetch_time_entries(member.identity_id, self.options.start_date, end_date)

    def error_result(self, member: TeamMember, error: Exception) -> MemberResult:
        self.console.print(f"  [blue]👤[/blue] {dotted_name(member.full_name)} [red]ERROR: {escape(str(error))}[/red]")
        return MemberResult(member=member, hours=0.0, note=API_ERROR_NOTE, ooo_status=False)

    def process_member(self, member: TeamMember) -> MemberResult:
        """Build the report row for one member.

        An expired token triggers one recovery cycle and one retry; if the
        recovery itself fails the error propagates. Any other failure becomes
        an 'API Error' row so the batch continues.
        """
        try:
            response = self.fetch_time_entries(member)
        except TokenExpiredError as e:
            if not self.token_manager:
                return self.error_result(member, e)
            self.console.print("\n🔑 Token expired during report generation, requesting new authorization...")
            self.token_manager.handle_expired_token()
            try:
                response = self.fetch_time_entries(member)
            except Exception as retry_error:
                return self.error_result(member, retry_error)
        except Exception as e:
            return self.error_result(member, e)

        hours = calculate_logged_hours(get_total_logged(response))
        note = "" if self.options.range else get_note_value(response)
        ooo_status = check_ooo_status(response, hours, self.options.range)

        result = MemberResult(member=member, hours=hours, note=note, ooo_status=ooo_status)
        self.display_member_result(result)
        return result

    def hours_style(self, hours: float) -> str:
        """Rich style for a member's hours: green meets expectation, yellow partial, red none."""
        if self.options.range and hours >= self.expected_hours:
            return "green"
        if hours > 0:
            return "yellow"
        return "red"

    def display_member_result(self, result: MemberResult):
        style = self.hours_style(result.hours)
        output = f"  [blue]👤[/blue] {dotted_name(result.member.full_name)} " \
                 f"[{style}]{format_hours(result.hours)}[/{style}]"
        if not self.options.range:
            if result.note:
                output += f" Note: {escape(result.note)}"
            if result.ooo_status:
                output += " ✅"
            if result.hours > 0:
                output += " ⚠️"
        self.console.print(output)

    def summary_table(self) -> str:
        """Console table of all rows, grouped like the document."""
        headers = ["Team Member", "Hours"] + ([] if self.options.range else ["Note"])
        rows = []
        for group in group_results(self.results):
            for r in group:
                rows.append([r.member.full_name, format_number(r.hours)] + ([] if self.options.range else [r.note]))
        return tabulate(rows, headers=headers, tablefmt="github", disable_numparse=True)

    def print_summary(self):
        total = len(self.team_members)
        self.console.print(f"[green]✅ Completed[/green] │ [yellow]{self.processed_count}[/yellow]/"
                           f"[yellow]{total}[/yellow] team members processed")
        self.console.print("\n✅ Report generation completed successfully!\n")

        self.console.print("📊 Member Summary:")
        self.console.print(f"   • {self.processed_count} members with identity_id processed")
        if self.skipped_count > 0:
            self.console.print(f"   • {self.skipped_count} members skipped (no identity_id)")
        self.console.print(f"   • {total} total members found\n")

        if self.results:
            self.console.print(self.summary_table(), markup=False)
            self.console.print()
        self.console.print(f"Total Hours Logged: {format_number(self.total_hours)}")
        if self.options.range:
            self.console.print(f"Working Days: {self.working_days}")
            self.console.print(f"Minimum Expected Hours: {self.expected_hours}")

    def output_path(self, extension: str) -> str:
        return os.path.join(self.output_dir, f"{FILE_PREFIX}-{self.options.report_date}.{extension}")

    def generate_output_files(self):
        os.makedirs(self.output_dir, exist_ok=True)
        if "csv" in self.options.output_formats:
            self.generate_excel()
        if "html" in self.options.output_formats:
            self.generate_pdf()

    def generate_excel(self) -> str:
        filename = self.output_path("xlsx")
        headers = ["First Name", "Last Name", "Total Logged Hours"]
        if not self.options.range:
            headers.append("Note")
        rows = [r.to_row(self.options.range) for r in self.results]

        write_excel(filename, headers, rows)
        self.written_files.append(filename)
        self.console.print(f"📄 Excel Report saved to: {escape(filename)}")
        return filename

    def generate_pdf(self) -> str:
        """Write the report as PDF, or as HTML if PDF rendering fails.

        Returns:
            Path of the written file
        """
        html = render_html(self.results, self.options, self.total_hours,
                           self.working_days, self.expected_hours)
        filename = self.output_path("pdf")
        try:
            self.console.print("⏳ Generating PDF...")
            write_pdf(filename, html)
        except Exception as e:
            self.console.print(f"[red]❌ Error generating PDF: {escape(str(e))}[/red]")
            self.console.print("Falling back to HTML generation...")
            filename = self.output_path("html")
            write_html(filename, html)
            self.written_files.append(filename)
            self.console.print(f"HTML Report saved to: {escape(filename)}")
            return filename

        self.written_files.append(filename)
        full_path = os.path.abspath(filename)
        self.console.print(f"PDF Report saved to: {escape(full_path)}")
        if self.auto_open:
            try:
                open_file(full_path)
                self.console.print("Opening PDF report...")
            except OSError as e:
                self.console.print(f"Could not auto-open PDF. Please manually open the file. ({escape(str(e))})")
        return filename
