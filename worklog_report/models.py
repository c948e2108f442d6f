"""
models.py — Input and derived data structures for a worklog report.

TimeEntry and ReportRequest are supplied by the caller (the dashboard or
the CLI loader). ContributorSummary, DayGroup and TeamStats are derived per
build by the pure functions in `worklog_report.grouping` and never persisted.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TimeEntry:
    """One worklog entry as exported by the issue tracker."""
    issue_key: str
    issue_summary: str
    author_name: str
    author_email: str
    seconds_spent: int
    started_at: datetime
    comment: Optional[str] = None

    @property
    def hours(self) -> float:
        return self.seconds_spent / 3600


@dataclass(frozen=True)
class ReportRequest:
    """Everything needed for one document build."""
    start_date: date
    end_date: date
    entries: tuple[TimeEntry, ...]
    generated_at: datetime
    include_individual_reports: bool = True

    def __post_init__(self):
        # Accept any sequence from callers but keep the request immutable.
        object.__setattr__(self, "entries", tuple(self.entries))


# ---------------------------------------------------------------------------
# Derived structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ContributorSummary:
    """All entries of one author plus their aggregated time."""
    author_name: str
    author_email: str
    total_seconds: int
    entries: tuple[TimeEntry, ...] = field(default_factory=tuple)

    @property
    def total_hours(self) -> float:
        return self.total_seconds / 3600

    @property
    def entry_count(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class DayGroup:
    """Entries of a single weekday (Monday..Saturday) for one contributor."""
    weekday_name: str
    entries: tuple[TimeEntry, ...]


@dataclass(frozen=True)
class TeamStats:
    """Headline numbers for the team overview page."""
    total_hours: float
    contributor_count: int
    issue_count: int
    entry_count: int
