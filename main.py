"""
main.py — Worklog Report Generator — CLI Entry Point.

Runs the pipeline stages in order. Stages share data in memory.

Usage:
    python main.py --full-run                        # synthetic data + this week's report
    python main.py --generate-data                   # refresh synthetic worklogs
    python main.py --report --period month           # report for the current month
    python main.py --report --period custom --start 2025-06-02 --end 2025-06-07
    python main.py --report --team-only --input export.json --log-level DEBUG

Outputs (data/output/):
    worklog-report-{start}-to-{end}.pdf   — team overview + per-developer reports
"""

import argparse
import logging
import logging.handlers
import os
import sys
from datetime import date, datetime
from pathlib import Path

import yaml


def _configure_logging(log_dir: str = "logs", level: str = "INFO") -> None:
    """Configure rotating file handler + stream handler.

    Args:
        log_dir: Directory for log files.
        level: Log level string.
    """
    effective_level = os.environ.get("LOG_LEVEL", level).upper()
    numeric = getattr(logging, effective_level, logging.INFO)

    Path(log_dir).mkdir(parents=True, exist_ok=True)
    log_file = Path(log_dir) / f"worklog_report_{datetime.today().strftime('%Y%m%d')}.log"

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)-35s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    fh = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=10 * 1024 * 1024, backupCount=7, encoding="utf-8"
    )
    fh.setFormatter(fmt)
    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(numeric)
    root.addHandler(fh)
    root.addHandler(sh)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected YYYY-MM-DD, got '{value}'") from exc


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="worklog-report-generator",
        description="Worklog Report Generator — team + per-developer PDF reports.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --full-run
  python main.py --generate-data
  python main.py --report --period month
  python main.py --report --period custom --start 2025-06-02 --end 2025-06-07
        """,
    )
    parser.add_argument("--config", default="config.yaml",
                        help="Path to config.yaml (default: config.yaml)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    stages = parser.add_argument_group("Pipeline Stages")
    stages.add_argument("--generate-data", action="store_true",
                        help="Generate a synthetic worklog export")
    stages.add_argument("--report", action="store_true",
                        help="Generate the PDF report")
    stages.add_argument("--full-run", action="store_true",
                        help="Run all stages: generate -> report")

    period = parser.add_argument_group("Report Options")
    period.add_argument("--input", default=None,
                        help="Worklog export (CSV/JSON); defaults to paths.entries_file")
    period.add_argument("--period", default="week", choices=["week", "month", "custom"],
                        help="Reporting window (default: current week)")
    period.add_argument("--start", type=_iso_date, default=None,
                        help="Custom period start (YYYY-MM-DD)")
    period.add_argument("--end", type=_iso_date, default=None,
                        help="Custom period end (YYYY-MM-DD)")
    period.add_argument("--today", type=_iso_date, default=None,
                        help="Reference date for week/month periods (default: today)")
    period.add_argument("--team-only", action="store_true",
                        help="Only the team overview; skip individual developer reports")
    return parser.parse_args(argv)


def run_pipeline(args: argparse.Namespace, logger: logging.Logger) -> int:
    """Execute the requested pipeline stages.

    Args:
        args: Parsed CLI arguments.
        logger: Configured root logger.

    Returns:
        0 on success, 1 on error.
    """
    from worklog_report.config import ReportSettings, load_config
    from worklog_report.data_loader import filter_entries, load_entries, resolve_period
    from worklog_report.data_simulator import generate_worklogs
    from worklog_report.errors import ReportError
    from worklog_report.models import ReportRequest
    from worklog_report.report import generate_report

    config_path = args.config
    do_all = args.full_run

    # -------------------------------------------------------------------------
    # Stage 1: Data generation
    # -------------------------------------------------------------------------
    if do_all or args.generate_data:
        logger.info("=" * 65)
        logger.info("STAGE 1: Worklog Generation")
        logger.info("=" * 65)
        try:
            df = generate_worklogs(config_path, today=args.today)
            logger.info("Worklog generation complete -- %d entries", len(df))
        except Exception as exc:
            logger.error("Worklog generation failed: %s", exc, exc_info=True)
            return 1

    # -------------------------------------------------------------------------
    # Stage 2: PDF report
    # -------------------------------------------------------------------------
    if do_all or args.report:
        logger.info("=" * 65)
        logger.info("STAGE 2: PDF Report")
        logger.info("=" * 65)
        try:
            cfg = load_config(config_path)
            settings = ReportSettings.from_config(cfg)
            start, end = resolve_period(args.period, args.today or date.today(),
                                        args.start, args.end)
            source = args.input or cfg["paths"]["entries_file"]
            entries = filter_entries(load_entries(source), start, end, settings.tzinfo)
            request = ReportRequest(
                start_date=start,
                end_date=end,
                entries=entries,
                generated_at=datetime.now(),
                include_individual_reports=not args.team_only,
            )
            pdf_path = generate_report(request, config_path)
            logger.info("PDF report generated: %s", pdf_path)
        except FileNotFoundError as exc:
            logger.error("Worklog export missing. Run --generate-data first.\n%s", exc)
            return 1
        except ReportError as exc:
            logger.error("Report build aborted: %s", exc, exc_info=True)
            return 1
        except Exception as exc:
            logger.error("PDF generation failed: %s", exc, exc_info=True)
            return 1

        logger.info("=" * 65)
        logger.info("PIPELINE COMPLETE")
        logger.info("  Period:   %s -> %s", start, end)
        logger.info("  Entries:  %d", len(entries))
        logger.info("  Output:   %s", pdf_path)
        logger.info("=" * 65)
    return 0


def main() -> None:
    """Parse args, configure logging, and run pipeline."""
    args = _parse_args()

    try:
        with open(args.config, "r") as fh:
            cfg = yaml.safe_load(fh)
        log_dir = cfg.get("paths", {}).get("log_dir", "logs")
    except Exception:
        log_dir = "logs"

    _configure_logging(log_dir=log_dir, level=args.log_level)
    logger = logging.getLogger(__name__)

    if not any([args.full_run, args.generate_data, args.report]):
        _parse_args(["--help"])

    logger.info(
        "Worklog Report Generator v1.0 | %s",
        datetime.today().strftime("%Y-%m-%d %H:%M:%S"),
    )
    sys.exit(run_pipeline(args, logger))


if __name__ == "__main__":
    main()
