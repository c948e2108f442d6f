"""
data_simulator.py — Synthetic worklog export generator.

Produces a CSV that looks like an issue-tracker worklog export, so the
report pipeline can be run end-to-end without tracker credentials:

    - one row per worklog, several per contributor per working day
    - Monday-Friday activity, occasional Saturday and rare Sunday entries
    - durations in 15-minute steps, realistic comments (some missing)

The generator is seeded, so the same config always yields the same file.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from worklog_report.config import load_config

logger = logging.getLogger(__name__)

_COMMENTS = (
    "Implemented the happy path and unit tests",
    "Code review feedback addressed",
    "Investigated flaky integration test",
    "Pairing session on the data model",
    "Refactored service layer",
    "Fixed regression reported by QA",
    "Updated API documentation",
    "",
)
_SUMMARIES = (
    "Export worklogs to PDF",
    "Team dashboard filters",
    "OAuth callback hardening",
    "Weekly hours chart",
    "Invite flow for new members",
    "Notification settings page",
    "Worklog calendar view",
    "Sync issues from tracker",
)


def _week_starts(weeks: int, today: date) -> list[date]:
    """Mondays of the last `weeks` weeks, oldest first (current week included)."""
    this_monday = today - timedelta(days=today.weekday())
    return [this_monday - timedelta(weeks=n) for n in reversed(range(weeks))]


def _generate_worklogs(cfg: dict[str, Any], rng: np.random.Generator, today: date) -> pd.DataFrame:
    """Generate worklog rows for every configured contributor.

    Args:
        cfg: Full configuration dictionary.
        rng: Seeded NumPy random generator.
        today: Reference date; the last simulated week contains it.

    Returns:
        DataFrame with the worklog export columns.
    """
    sim = cfg["data_simulation"]
    project = sim.get("project_key", "WT")
    issue_count = int(sim.get("issue_count", 24))
    saturday_prob = float(sim.get("saturday_probability", 0.2))
    sunday_prob = float(sim.get("sunday_probability", 0.03))

    records = []
    for monday in _week_starts(int(sim.get("weeks_history", 4)), today):
        for person in sim["contributors"]:
            daily_hours = float(person.get("weekly_hours", 40)) / 5
            for offset in range(7):
                day = monday + timedelta(days=offset)
                if day > today:
                    break
                if offset == 5 and rng.random() > saturday_prob:
                    continue
                if offset == 6 and rng.random() > sunday_prob:
                    continue
                hours_today = max(0.25, rng.normal(daily_hours, 1.2))
                if offset >= 5:
                    hours_today /= 2

                clock = datetime.combine(day, time(9, 0), tzinfo=timezone.utc)
                remaining = hours_today
                while remaining > 0.2:
                    block = min(remaining, float(rng.choice([0.5, 1.0, 1.5, 2.0, 3.0])))
                    seconds = int(round(block * 4)) * 900
                    issue = int(rng.integers(1, issue_count + 1))
                    records.append({
                        "issue_key": f"{project}-{issue}",
                        "issue_summary": _SUMMARIES[issue % len(_SUMMARIES)],
                        "author_name": person["name"],
                        "author_email": person["email"],
                        "seconds_spent": seconds,
                        "started_at": clock.isoformat(),
                        "comment": _COMMENTS[int(rng.integers(0, len(_COMMENTS)))],
                    })
                    clock += timedelta(seconds=seconds)
                    remaining -= block

    logger.info("Generated %d worklog entries", len(records))
    return pd.DataFrame(records)


def generate_worklogs(config_path: str = "config.yaml", today: date = None) -> pd.DataFrame:
    """Generate the synthetic worklog export and write it to disk.

    Args:
        config_path: Path to configuration YAML.
        today: Reference date (defaults to today).

    Returns:
        The generated DataFrame.
    """
    cfg = load_config(config_path)
    seed = cfg["data_simulation"]["seed"]
    rng = np.random.default_rng(seed)
    logger.info("Starting worklog generation (seed=%d)", seed)

    df = _generate_worklogs(cfg, rng, today or date.today())

    path = Path(cfg["paths"]["entries_file"])
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    logger.info("Written worklogs: %d rows -> %s", len(df), path)
    return df
