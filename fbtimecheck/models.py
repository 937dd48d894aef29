"""Data classes for team members, time entries and report rows."""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

OUTPUT_FORMATS = ("csv", "html")


@dataclass
class TeamMember:
    """A FreshBooks team member."""

    first_name: str = ""
    last_name: str = ""
    identity_id: Optional[str] = None
    email: str = ""
    active: bool = True

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "TeamMember":
        """Create a TeamMember from a team_members API record.

        Args:
            data: Raw member data from the FreshBooks API

        Returns:
            TeamMember instance
        """
        identity_id = data.get("identity_id")
        return cls(
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            identity_id=str(identity_id) if identity_id not in (None, "") else None,
            email=data.get("email") or "",
            active=bool(data.get("active", True)),
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class TimeEntry:
    """A single logged time entry."""

    logged_duration: int = 0
    note: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "TimeEntry":
        return cls(
            logged_duration=int(data.get("duration") or data.get("logged_duration") or 0),
            note=data.get("note") or "",
        )


@dataclass
class MemberResult:
    """Report row for one team member."""

    member: TeamMember
    hours: float = 0.0
    note: str = ""
    ooo_status: bool = False

    def to_row(self, is_range: bool) -> List[Any]:
        """Convert to a spreadsheet row.

        Args:
            is_range: Whether this is a range report (no note column)

        Returns:
            Row values
        """
        row = [self.member.first_name, self.member.last_name, self.hours]
        if not is_range:
            row.append(self.note)
        return row


@dataclass
class ReportOptions:
    """What to report on and which files to write."""

    start_date: date
    end_date: date
    range: bool = False
    output_formats: List[str] = field(default_factory=lambda: list(OUTPUT_FORMATS))

    @property
    def report_date(self) -> date:
        """Date used in output file names: end date for ranges, else the single date."""
        return self.end_date if self.range else self.start_date
