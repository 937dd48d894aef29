"""Main module for the fbTimeCheck package."""
import sys
import argparse
from typing import List, Optional

import requests

from .api.client import FreshBooksClient
from .auth.token_manager import CodeProvider, TokenManager
from .config import Config, load_config
from .exceptions import FreshBooksError, TokenExpiredError
from .models import ReportOptions
from .reports.report_generator import ReportGenerator
from .utils.date_utils import day_str, validate_dates

PROG = "fbtimecheck"
GENERATE_TOKEN_COMMAND = "generate-token"


# --- CLI Logic ---
def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for report generation.

    Returns:
        Argument parser
    """
    parser = argparse.ArgumentParser(
        description="FreshBooks time tracking checker: report hours logged by every team member.",
        epilog=f"""
Examples:
    # Single day report (Excel + PDF)
  {PROG} 2025-09-15
    ---
    # Report for September, Excel only
  {PROG} 2025-09-01 2025-09-30 --csv
    ---
    # Only the start date, even if an end date is given
  {PROG} 2025-09-01 2025-09-30 --single-day
    ---
    # Generate a new access token from an authorization code
  {PROG} {GENERATE_TOKEN_COMMAND}
""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        prog=PROG
    )
    parser.add_argument('start_date', metavar='start-date', help='Start date (YYYY-MM-DD)')
    parser.add_argument('end_date', metavar='end-date', nargs='?', help='End date (YYYY-MM-DD), defaults to start date')
    parser.add_argument('-s', '--single-day', action='store_true', help='Query only for start date (overrides end-date)')
    parser.add_argument('--csv', action='store_true', help='Generate the Excel spreadsheet only')
    parser.add_argument('--html', action='store_true', help='Generate the PDF/HTML document only')
    parser.add_argument('--output-dir', default='.', help='Directory for report files (default: current directory)')
    parser.add_argument('--no-open', action='store_true', help='Do not open the PDF report after writing it')
    return parser


def build_token_parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        prog=f"{PROG} {GENERATE_TOKEN_COMMAND}",
        description="Generate a new access token from an authorization code",
    )


def get_output_formats(args: argparse.Namespace) -> List[str]:
    """Get requested output formats; both when none is given."""
    if not args.csv and not args.html:
        return ["csv", "html"]
    return [fmt for fmt in ("csv", "html") if getattr(args, fmt)]


def build_report_options(args: argparse.Namespace) -> ReportOptions:
    """Validate the date arguments and build the report options.

    Raises:
        ValueError: If a date is invalid
    """
    end_str = args.end_date or args.start_date
    start_date, end_date = validate_dates(args.start_date, end_str)
    is_range = not args.single_day and end_date != start_date
    return ReportOptions(
        start_date=start_date,
        end_date=end_date if is_range else start_date,
        range=is_range,
        output_formats=get_output_formats(args),
    )


def generate_token(config: Config, code_provider: Optional[CodeProvider] = None) -> None:
    """Interactively mint a new access token and store it."""
    config.validate()
    client = FreshBooksClient(config)
    TokenManager(client, config.env_path, code_provider).generate_and_save_token()


def run_report(config: Config, options: ReportOptions, output_dir: str = ".", auto_open: bool = True,
               code_provider: Optional[CodeProvider] = None) -> ReportGenerator:
    """Run the full report flow: token, team members, time entries, files.

    Args:
        config: Application configuration
        options: Report options
        output_dir: Directory for report files
        auto_open: Whether to open the PDF afterwards
        code_provider: Source of authorization codes (optional, defaults to console input)

    Returns:
        The ReportGenerator that produced the report
    """
    config.validate()
    client = FreshBooksClient(config)
    token_manager = TokenManager(client, config.env_path, code_provider)

    if not token_manager.has_valid_token():
        print("⚠️  No valid access token found. Generating new token...")
        token_manager.generate_and_save_token()

    if options.range:
        print(f"📅 Range: {day_str(options.start_date)} → {day_str(options.end_date)}")
    else:
        print(f"📅 Day: {day_str(options.start_date)}")

    print("🔍 Fetching team members from FreshBooks API...")
    try:
        team_members = client.fetch_team_members()
    except TokenExpiredError:
        token_manager.handle_expired_token()
        team_members = client.fetch_team_members()
    print(f"✅ Found {len(team_members)} team members")

    report_generator = ReportGenerator(
        client, team_members, options,
        minimum_hours_per_month=config.minimum_hours_per_month,
        token_manager=token_manager,
        output_dir=output_dir,
        auto_open=auto_open,
    )
    report_generator.generate_report()
    return report_generator


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point.

    Returns:
        Exit status (0 on success, 1 on error)
    """
    argv = sys.argv[1:] if argv is None else argv
    parser = build_parser()

    if not argv:
        parser.print_help()
        return 0

    try:
        if argv[0] == GENERATE_TOKEN_COMMAND:
            build_token_parser().parse_args(argv[1:])
            generate_token(load_config())
            return 0

        args = parser.parse_args(argv)
        options = build_report_options(args)
        run_report(load_config(), options, args.output_dir, auto_open=not args.no_open)
    except (FreshBooksError, ValueError, OSError, requests.RequestException) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1
    except (KeyboardInterrupt, EOFError):
        print("\n❌ Error: Aborted", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
