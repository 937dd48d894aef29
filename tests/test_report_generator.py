import sys
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch, MagicMock
from datetime import date, datetime
from io import StringIO

from openpyxl import load_workbook
from rich.console import Console

# Add the parent directory to sys.path to import the fbtimecheck package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from fbtimecheck.exceptions import AuthenticationError, FreshBooksAPIError, TokenExpiredError
from fbtimecheck.models import MemberResult, ReportOptions, TeamMember
from fbtimecheck.reports.html_report import group_results, hours_class, render_html
from fbtimecheck.reports.report_generator import ReportGenerator


def entries_response(total_seconds, *notes):
    return {
        "time_entries": [{"note": n, "duration": 0} for n in notes],
        "meta": {"total_logged": total_seconds},
    }


class TestReportGenerator(unittest.TestCase):
    """Test per-member processing, grouping and output files."""

    def setUp(self):
        """Set up test fixtures."""
        self.tmp_dir = tempfile.mkdtemp()
        self.members = [
            TeamMember("Ada", "Lovelace", "1"),
            TeamMember("Grace", "Hopper", "2"),
            TeamMember("Alan", "Turing", None),
            TeamMember("Edsger", "Dijkstra", "3"),
        ]
        self.responses = {
            "1": entries_response(28800, "", "Sprint <planning>"),
            "2": entries_response(0, "OOO today"),
            "3": entries_response(0),
        }
        self.client = MagicMock()
        self.client.fetch_time_entries.side_effect = lambda identity_id, start, end: self.responses[identity_id]
        self.single_day = ReportOptions(date(2025, 9, 15), date(2025, 9, 15), False, ["csv", "html"])

        self.stdout_patcher = patch('sys.stdout', new_callable=StringIO)
        self.stdout = self.stdout_patcher.start()
        self.pdf_patcher = patch('fbtimecheck.reports.report_generator.write_pdf',
                                 side_effect=OSError("cannot load library 'pango'"))
        self.mock_write_pdf = self.pdf_patcher.start()

    def tearDown(self):
        """Tear down test fixtures."""
        self.pdf_patcher.stop()
        self.stdout_patcher.stop()
        shutil.rmtree(self.tmp_dir)

    def make_generator(self, options=None, token_manager=None):
        return ReportGenerator(self.client, self.members, options or self.single_day,
                               token_manager=token_manager, output_dir=self.tmp_dir, auto_open=False)

    def test_single_day_report(self):
        generator = self.make_generator()
        results = generator.generate_report()

        self.assertEqual([r.member.first_name for r in results], ["Ada", "Grace", "Edsger"])
        ada, grace, edsger = results
        self.assertEqual((ada.hours, ada.note, ada.ooo_status), (8, "Sprint <planning>", False))
        self.assertEqual((grace.hours, grace.note, grace.ooo_status), (0, "OOO today", True))
        self.assertEqual((edsger.hours, edsger.note, edsger.ooo_status), (0, "", False))

        self.assertEqual(generator.processed_count, 3)
        self.assertEqual(generator.skipped_count, 1)
        self.assertEqual(generator.total_hours, 8)
        self.assertEqual(generator.expected_hours, 8)

        self.client.fetch_time_entries.assert_any_call("1", date(2025, 9, 15), date(2025, 9, 15))
        output = self.stdout.getvalue()
        self.assertIn("Skipping Alan Turing - no identity_id", output)
        self.assertIn("1 members skipped (no identity_id)", output)

    def test_range_report_has_no_notes_or_ooo(self):
        options = ReportOptions(date(2025, 9, 1), date(2025, 9, 30), True, ["csv"])
        generator = self.make_generator(options)
        results = generator.generate_report()

        self.assertTrue(all(r.note == "" and not r.ooo_status for r in results))
        self.assertEqual(generator.working_days, 22)
        self.assertEqual(generator.expected_hours, 160)
        self.client.fetch_time_entries.assert_any_call("2", date(2025, 9, 1), date(2025, 9, 30))
        self.assertIn("Minimum Expected Hours: 160", self.stdout.getvalue())

    def test_api_error_row_does_not_abort_batch(self):
        def fetch(identity_id, start, end):
            if identity_id == "2":
                raise FreshBooksAPIError("API request failed (500): boom", 500)
            return self.responses[identity_id]
        self.client.fetch_time_entries.side_effect = fetch

        results = self.make_generator().generate_report()

        self.assertEqual(len(results), 3)
        self.assertEqual((results[1].hours, results[1].note, results[1].ooo_status), (0, "API Error", False))
        self.assertEqual(results[2].member.first_name, "Edsger")
        self.assertIn("ERROR: API request failed (500): boom", self.stdout.getvalue())

    def test_expired_token_recovers_and_retries_once(self):
        token_manager = MagicMock()
        self.client.fetch_time_entries.side_effect = [
            TokenExpiredError(), self.responses["1"], self.responses["2"], self.responses["3"],
        ]

        results = self.make_generator(token_manager=token_manager).generate_report()

        token_manager.handle_expired_token.assert_called_once_with()
        self.assertEqual(self.client.fetch_time_entries.call_count, 4)
        self.assertEqual(results[0].hours, 8)

    def test_second_expiry_after_retry_is_an_error_row(self):
        token_manager = MagicMock()
        self.client.fetch_time_entries.side_effect = [
            TokenExpiredError(), TokenExpiredError(), self.responses["2"], self.responses["3"],
        ]

        results = self.make_generator(token_manager=token_manager).generate_report()

        self.assertEqual(results[0].note, "API Error")
        self.assertEqual(results[1].note, "OOO today")

    def test_failed_recovery_propagates(self):
        token_manager = MagicMock()
        token_manager.handle_expired_token.side_effect = AuthenticationError("Code expired or is not valid")
        self.client.fetch_time_entries.side_effect = TokenExpiredError()

        with self.assertRaises(AuthenticationError):
            self.make_generator(token_manager=token_manager).generate_report()

    def test_expired_token_without_manager_is_an_error_row(self):
        self.client.fetch_time_entries.side_effect = TokenExpiredError()
        results = self.make_generator().generate_report()
        self.assertTrue(all(r.note == "API Error" for r in results))

    def test_excel_single_day_layout(self):
        options = ReportOptions(date(2025, 9, 15), date(2025, 9, 15), False, ["csv"])
        self.make_generator(options).generate_report()

        path = os.path.join(self.tmp_dir, "freshbooks-time-report-2025-09-15.xlsx")
        ws = load_workbook(path)["Time Report"]
        rows = list(ws.iter_rows(values_only=True))
        self.assertEqual(rows[0], ("First Name", "Last Name", "Total Logged Hours", "Note"))
        self.assertEqual(rows[1], ("Ada", "Lovelace", 8, "Sprint <planning>"))
        self.assertEqual(len(rows), 4)
        self.assertTrue(ws["A1"].font.bold)
        self.assertEqual(ws["C2"].alignment.horizontal, "center")
        self.mock_write_pdf.assert_not_called()

    def test_excel_range_layout_named_by_end_date(self):
        options = ReportOptions(date(2025, 9, 1), date(2025, 9, 30), True, ["csv"])
        self.make_generator(options).generate_report()

        path = os.path.join(self.tmp_dir, "freshbooks-time-report-2025-09-30.xlsx")
        rows = list(load_workbook(path).active.iter_rows(values_only=True))
        self.assertEqual(rows[0], ("First Name", "Last Name", "Total Logged Hours"))

    def test_pdf_failure_falls_back_to_html(self):
        options = ReportOptions(date(2025, 9, 15), date(2025, 9, 15), False, ["html"])
        generator = self.make_generator(options)
        generator.generate_report()

        html_path = os.path.join(self.tmp_dir, "freshbooks-time-report-2025-09-15.html")
        self.assertEqual(generator.written_files, [html_path])
        with open(html_path, encoding="utf-8") as f:
            html = f.read()
        self.assertIn("Ada Lovelace", html)
        self.assertIn("Sprint &lt;planning&gt;", html)
        self.assertIn("Falling back to HTML generation...", self.stdout.getvalue())

    @patch('fbtimecheck.reports.report_generator.open_file')
    def test_pdf_written_and_opened(self, mock_open_file):
        self.mock_write_pdf.side_effect = None
        options = ReportOptions(date(2025, 9, 15), date(2025, 9, 15), False, ["html"])
        generator = ReportGenerator(self.client, self.members, options, output_dir=self.tmp_dir)
        generator.generate_report()

        pdf_path = os.path.join(self.tmp_dir, "freshbooks-time-report-2025-09-15.pdf")
        self.mock_write_pdf.assert_called_once()
        self.assertEqual(self.mock_write_pdf.call_args[0][0], pdf_path)
        mock_open_file.assert_called_once_with(os.path.abspath(pdf_path))

    def test_redirected_console_output_has_no_escape_codes(self):
        with patch.dict('os.environ'):
            for key in ('FORCE_COLOR', 'TTY_COMPATIBLE', 'TTY_INTERACTIVE'):
                os.environ.pop(key, None)
            generator = self.make_generator(ReportOptions(date(2025, 9, 15), date(2025, 9, 15), False, []))
            generator.generate_report()

        output = self.stdout.getvalue()
        self.assertNotIn("\x1b[", output)
        self.assertIn("Ada Lovelace", output)
        self.assertIn("8h Note: Sprint <planning>", output)
        self.assertIn("✅ Completed │ 3/4 team members processed", output)
        self.assertIn("Progress: (75%)", output)

    def test_terminal_console_colors_hours(self):
        buffer = StringIO()
        console = Console(file=buffer, force_terminal=True, color_system="standard", soft_wrap=True)
        options = ReportOptions(date(2025, 9, 1), date(2025, 9, 30), True, [])
        generator = ReportGenerator(self.client, self.members, options, output_dir=self.tmp_dir,
                                    auto_open=False, console=console)
        generator.generate_report()

        self.assertIn("\x1b[", buffer.getvalue())
        self.assertEqual(self.stdout.getvalue(), "")
        self.assertEqual(generator.hours_style(160), "green")
        self.assertEqual(generator.hours_style(8), "yellow")
        self.assertEqual(generator.hours_style(0), "red")

    def test_notes_with_brackets_are_printed_verbatim(self):
        self.responses["1"] = entries_response(3600, "Fixed [bold]layout[/bold] bug")
        self.make_generator(ReportOptions(date(2025, 9, 15), date(2025, 9, 15), False, [])).generate_report()
        self.assertIn("Note: Fixed [bold]layout[/bold] bug", self.stdout.getvalue())


class TestHtmlReport(unittest.TestCase):
    """Test grouping and HTML rendering."""

    def setUp(self):
        """Set up test fixtures."""
        self.results = [
            MemberResult(TeamMember("Zero", "Hours", "1"), 0, "", False),
            MemberResult(TeamMember("Away", "Note", "2"), 0, "Vacation - Out of Office", False),
            MemberResult(TeamMember("Busy", "Worker", "3"), 7.5, "Coding", False),
            MemberResult(TeamMember("Away", "Flag", "4"), 0, "", True),
        ]

    def test_group_results_order(self):
        worked, ooo, other = group_results(self.results)
        self.assertEqual([r.member.first_name for r in worked], ["Busy"])
        self.assertEqual([r.member.last_name for r in ooo], ["Note", "Flag"])
        self.assertEqual([r.member.first_name for r in other], ["Zero"])

    def test_hours_class(self):
        self.assertEqual(hours_class(160, 160, True), "hours-good")
        self.assertEqual(hours_class(100, 160, True), "hours-partial")
        self.assertEqual(hours_class(0, 160, True), "hours-none")
        self.assertEqual(hours_class(9, 8, False), "hours-partial")
        self.assertEqual(hours_class(0, 8, False), "hours-none")

    def test_render_single_day(self):
        options = ReportOptions(date(2025, 9, 15), date(2025, 9, 15), False)
        html = render_html(self.results, options, 7.5, 1, 8, generated_at=datetime(2025, 9, 16, 14, 5))

        self.assertIn("FreshBooks Time Report - 2025-09-15", html)
        self.assertIn("📝 Note", html)
        self.assertIn('class="highlight-row"', html)
        self.assertIn("Generated on September 16, 2025 at 2:05 PM", html)
        self.assertNotIn("Working Days", html)
        self.assertLess(html.index("Worked Hours"), html.index("Out of Office"))
        self.assertLess(html.index("Out of Office"), html.index("No Hours / Other"))

    def test_render_range(self):
        options = ReportOptions(date(2025, 9, 1), date(2025, 9, 30), True)
        results = [MemberResult(TeamMember("Busy", "Worker", "3"), 162, "", False)]
        html = render_html(results, options, 162, 22, 160)

        self.assertIn("FreshBooks Time Report - 2025-09-01 to 2025-09-30", html)
        self.assertIn("Working Days", html)
        self.assertIn("Minimum Expected Hours", html)
        self.assertIn("hours-good", html)
        self.assertNotIn("📝 Note", html)
        self.assertNotIn('class="highlight-row"', html)
        self.assertNotIn("group-header", html.split("<tbody>")[1])

    def test_total_hours_formatted_like_rows(self):
        options = ReportOptions(date(2025, 9, 15), date(2025, 9, 15), False)
        results = [MemberResult(TeamMember("Busy", "Worker", "3"), 8.0, "", False)]
        html = render_html(results, options, 8.0, 1, 8)

        self.assertIn('<div class="stat-number">8</div>', html)
        self.assertNotIn("8.0", html)
        self.assertIn(">8h", html)


if __name__ == '__main__':
    unittest.main()
