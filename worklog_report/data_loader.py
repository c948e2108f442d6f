"""
data_loader.py — Reads worklog exports and resolves reporting windows.

Export files are CSV or JSON (list of records) with one row per worklog:

    issue_key, issue_summary, author_name, author_email,
    seconds_spent, started_at, comment

`started_at` is ISO-8601; values without an offset are read as UTC.
"""

import calendar
import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable, Optional, Union
from zoneinfo import ZoneInfo

import pandas as pd

from worklog_report.grouping import localize
from worklog_report.models import TimeEntry

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = (
    "issue_key", "issue_summary", "author_name", "author_email",
    "seconds_spent", "started_at",
)
TEXT_COLUMNS = ("issue_key", "issue_summary", "author_name", "author_email")
PERIOD_KINDS = ("week", "month", "custom")


def _read_frame(path: Path) -> pd.DataFrame:
    if path.suffix.lower() == ".json":
        return pd.read_json(path, orient="records", dtype=False, convert_dates=False)
    return pd.read_csv(path, dtype={"issue_key": str, "comment": str})


def frame_to_entries(df: pd.DataFrame) -> tuple[TimeEntry, ...]:
    """Convert an export DataFrame into TimeEntry records, keeping row order.

    Raises:
        ValueError: If a required column is missing.
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Worklog export is missing columns: {', '.join(missing)}")

    df = df.copy()
    for column in TEXT_COLUMNS:
        df[column] = df[column].fillna("").astype(str)
    df["started_at"] = pd.to_datetime(df["started_at"], utc=True, format="ISO8601")
    if "comment" not in df.columns:
        df["comment"] = None

    entries = []
    for row in df.itertuples(index=False):
        comment = row.comment if isinstance(row.comment, str) and row.comment.strip() else None
        entries.append(TimeEntry(
            issue_key=row.issue_key,
            issue_summary=row.issue_summary,
            author_name=row.author_name,
            author_email=row.author_email,
            seconds_spent=int(row.seconds_spent),
            started_at=row.started_at.to_pydatetime(),
            comment=comment,
        ))
    return tuple(entries)


def load_entries(path: Union[str, Path]) -> tuple[TimeEntry, ...]:
    """Load a worklog export from disk.

    Args:
        path: CSV or JSON file.

    Returns:
        Tuple of TimeEntry in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(
            f"Worklog export not found at {p}. Run --generate-data first."
        )
    entries = frame_to_entries(_read_frame(p))
    logger.info("Loaded %d worklog entries from %s", len(entries), p)
    return entries


def filter_entries(
    entries: Iterable[TimeEntry],
    start: date,
    end: date,
    tz: Optional[ZoneInfo] = None,
) -> tuple[TimeEntry, ...]:
    """Keep entries whose start date falls within [start, end] inclusive."""
    kept = tuple(
        e for e in entries
        if start <= localize(e.started_at, tz).date() <= end
    )
    logger.debug("Period %s..%s keeps %d entries", start, end, len(kept))
    return kept


def resolve_period(
    kind: str,
    today: date,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> tuple[date, date]:
    """Reporting window for a period kind.

    Args:
        kind: 'week' (Monday-Sunday containing `today`), 'month' (calendar
            month containing `today`) or 'custom' (explicit `start`/`end`).
        today: Reference date.
        start: Custom window start.
        end: Custom window end.

    Returns:
        (start_date, end_date), both inclusive.
    """
    if kind == "week":
        monday = today - timedelta(days=today.weekday())
        return monday, monday + timedelta(days=6)
    if kind == "month":
        last_day = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last_day)
    if kind == "custom":
        if start is None or end is None:
            raise ValueError("A custom period needs both a start and an end date")
        if end < start:
            raise ValueError(f"Period end {end} is before start {start}")
        return start, end
    raise ValueError(f"Unknown period '{kind}'; expected one of {PERIOD_KINDS}")
