"""
grouping.py — Aggregation of time entries for the report sections.

Pure functions over immutable inputs: nothing here mutates the caller's
entry list, so independent builds can run side by side.

    group_by_contributor  — per-author summaries, descending total hours
    group_by_weekday      — Monday→Saturday day groups, Sunday dropped
    compute_team_stats    — totals shown on the overview page
    format_hours          — 11.87 → '11h52m'
"""

import logging
from datetime import datetime, timezone, tzinfo
from typing import Iterable, Optional

from worklog_report.models import ContributorSummary, DayGroup, TeamStats, TimeEntry

logger = logging.getLogger(__name__)

REPORT_WEEKDAYS = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_hours(hours: float) -> str:
    """Format decimal hours as a compact duration string.

    Args:
        hours: Hours in decimal form (11.87 → '11h52m').

    Returns:
        '0h' for zero, 'Nh' for whole hours, otherwise 'NhMMm'.
    """
    total_minutes = int(round(hours * 60))
    if total_minutes == 0:
        return "0h"
    whole, minutes = divmod(total_minutes, 60)
    if minutes == 0:
        return f"{whole}h"
    return f"{whole}h{minutes:02d}m"


def format_long_date(value) -> str:
    """'Monday, June 2, 2025'."""
    return f"{value:%A}, {value:%B} {value.day}, {value:%Y}"


def format_short_date(value) -> str:
    """'Jun 2, 2025'."""
    return f"{value:%b} {value.day}, {value:%Y}"


def localize(moment: datetime, tz: Optional[tzinfo]) -> datetime:
    """Convert a timestamp into the report timezone.

    Naive timestamps are read as UTC. Without a report timezone the
    recorded offset is kept.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    if tz is None:
        return moment
    return moment.astimezone(tz)


# ---------------------------------------------------------------------------
# Aggregations
# ---------------------------------------------------------------------------

def group_by_contributor(entries: Iterable[TimeEntry]) -> tuple[ContributorSummary, ...]:
    """Group entries by author display name.

    Contributors are ordered by descending total time. Python's sort is
    stable, so contributors with equal totals keep the order in which they
    first appear in the input. Totals are compared in whole seconds to avoid
    float ties drifting apart.

    Args:
        entries: Time entries in input order.

    Returns:
        Tuple of ContributorSummary, one per distinct author.
    """
    buckets: dict[str, list[TimeEntry]] = {}
    for entry in entries:
        buckets.setdefault(entry.author_name, []).append(entry)

    summaries = [
        ContributorSummary(
            author_name=name,
            author_email=items[0].author_email,
            total_seconds=sum(e.seconds_spent for e in items),
            entries=tuple(items),
        )
        for name, items in buckets.items()
    ]
    return tuple(sorted(summaries, key=lambda s: -s.total_seconds))


def group_by_weekday(
    entries: Iterable[TimeEntry],
    tz: Optional[tzinfo] = None,
) -> tuple[DayGroup, ...]:
    """Bucket entries into Monday→Saturday groups.

    Entries are first sorted by start time. Sunday entries are dropped and
    weekdays without entries produce no group.

    Args:
        entries: One contributor's entries.
        tz: Timezone the weekday is evaluated in (None = as recorded).

    Returns:
        Tuple of DayGroup in fixed weekday order.
    """
    ordered = sorted(entries, key=lambda e: localize(e.started_at, tz))
    by_day: dict[str, list[TimeEntry]] = {day: [] for day in REPORT_WEEKDAYS}
    skipped = 0
    for entry in ordered:
        day = f"{localize(entry.started_at, tz):%A}"
        if day in by_day:
            by_day[day].append(entry)
        else:
            skipped += 1
    if skipped:
        logger.debug("Skipped %d Sunday entries", skipped)

    return tuple(
        DayGroup(weekday_name=day, entries=tuple(by_day[day]))
        for day in REPORT_WEEKDAYS
        if by_day[day]
    )


def compute_team_stats(entries: Iterable[TimeEntry]) -> TeamStats:
    """Totals for the overview summary table."""
    items = tuple(entries)
    return TeamStats(
        total_hours=sum(e.seconds_spent for e in items) / 3600,
        contributor_count=len({e.author_name for e in items}),
        issue_count=len({e.issue_key for e in items}),
        entry_count=len(items),
    )
