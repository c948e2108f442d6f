"""
scheduler.py — Weekly Worklog Report Scheduler.

Builds last week's worklog report every Monday at 06:00 London time, so the
team report is ready before the working week begins.

Usage:
    python scheduler.py              # Start daemon (blocking)
    python scheduler.py --run-now   # One immediate run, then exit
    python scheduler.py --config custom.yaml
"""

import argparse
import logging
import signal
import sys
import time
from datetime import date, timedelta

import yaml
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from main import _configure_logging, run_pipeline

logger = logging.getLogger(__name__)


def previous_week(today: date) -> tuple[date, date]:
    """Monday and Sunday of the week before the one containing `today`."""
    monday = today - timedelta(days=today.weekday() + 7)
    return monday, monday + timedelta(days=6)


def _run_weekly_report(config_path: str, max_retries: int, retry_delay: int) -> None:
    """Build last week's report with retry logic.

    Args:
        config_path: Path to configuration YAML.
        max_retries: Maximum retry attempts.
        retry_delay: Seconds between retries.
    """
    start, end = previous_week(date.today())
    logger.info("Starting scheduled worklog report for %s -> %s", start, end)

    args = argparse.Namespace(
        config=config_path,
        log_level="INFO",
        full_run=False,
        generate_data=False,
        report=True,
        input=None,
        period="custom",
        start=start,
        end=end,
        today=None,
        team_only=False,
    )

    for attempt in range(1, max_retries + 1):
        try:
            exit_code = run_pipeline(args, logger)
            if exit_code == 0:
                logger.info("Scheduled run succeeded (attempt %d)", attempt)
                return
            logger.error("Pipeline returned non-zero exit code (attempt %d)", attempt)
        except Exception as exc:
            logger.error("Pipeline exception (attempt %d): %s", attempt, exc, exc_info=True)

        if attempt < max_retries:
            logger.info("Retrying in %ds...", retry_delay)
            time.sleep(retry_delay)

    logger.error("Pipeline failed after %d attempts", max_retries)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="scheduler",
        description="Weekly worklog report scheduler (Monday 06:00).",
    )
    parser.add_argument("--config", default="config.yaml")
    parser.add_argument("--run-now", action="store_true",
                        help="Run immediately then exit (testing)")
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    try:
        with open(args.config, "r") as fh:
            cfg = yaml.safe_load(fh)
    except FileNotFoundError:
        print(f"ERROR: Config not found: {args.config}", file=sys.stderr)
        sys.exit(1)

    _configure_logging(log_dir=cfg.get("paths", {}).get("log_dir", "logs"))
    logging.getLogger("apscheduler").setLevel(logging.WARNING)

    sched_cfg = cfg.get("scheduler", {})
    run_day = sched_cfg.get("run_day_of_week", "mon")
    run_time = sched_cfg.get("run_time", "06:00")
    timezone = sched_cfg.get("timezone", "Europe/London")
    max_retries = sched_cfg.get("max_retries", 3)
    retry_delay = sched_cfg.get("retry_delay_seconds", 300)

    run_hour, run_minute = map(int, run_time.split(":"))

    if args.run_now:
        logger.info("--run-now: building last week's report immediately")
        _run_weekly_report(args.config, max_retries, retry_delay)
        logger.info("Immediate run complete")
        return

    scheduler = BlockingScheduler(timezone=timezone)
    scheduler.add_job(
        _run_weekly_report,
        trigger=CronTrigger(
            day_of_week=run_day,
            hour=run_hour,
            minute=run_minute,
            timezone=timezone,
        ),
        kwargs={"config_path": args.config, "max_retries": max_retries,
                "retry_delay": retry_delay},
        id="weekly_worklog_report",
        name="Weekly Worklog Report",
        replace_existing=True,
        misfire_grace_time=600,
    )

    def _shutdown(sig, frame):
        logger.info("Shutdown signal — stopping scheduler")
        scheduler.shutdown(wait=False)
        sys.exit(0)

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    logger.info(
        "Scheduler started -- weekly run: %s at %s (%s)",
        run_day.upper(), run_time, timezone,
    )
    scheduler.start()


if __name__ == "__main__":
    main()
