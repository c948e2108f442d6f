"""
report.py — Public entry points for building a worklog report.

    compose_document  — lay out and finalize, returning the sealed page model
    build_report      — compose + serialize, returning PDF bytes
    generate_report   — build_report + write the PDF into the output directory

Every call creates its own Document, cursor and styles, so separate builds
may run concurrently in different threads.
"""

import logging
from pathlib import Path
from typing import Optional

from worklog_report.composer import SectionComposer
from worklog_report.config import ReportSettings, load_config
from worklog_report.document import Document
from worklog_report.finalizer import Finalizer
from worklog_report.layout import LayoutCursor, PageBreakPolicy
from worklog_report.models import ReportRequest
from worklog_report.pdf_sink import DocumentSink
from worklog_report.styles import build_styles
from worklog_report.tables import TableRenderer

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "worklog-report-{start}-to-{end}.pdf"


def compose_document(request: ReportRequest, settings: Optional[ReportSettings] = None) -> Document:
    """Run composition and finalization for one request.

    Args:
        request: Entries, reporting window and flags.
        settings: Report settings (defaults when omitted).

    Returns:
        Sealed Document ready for serialization.
    """
    settings = settings or ReportSettings()
    document = Document()
    cursor = LayoutCursor(document, settings.layout)
    policy = PageBreakPolicy(cursor)
    renderer = TableRenderer(cursor, build_styles(settings.brand), settings.brand)

    SectionComposer(document, cursor, policy, renderer, settings).compose(request)
    Finalizer(settings.layout).finalize(document, cursor, request.generated_at)

    if document.warnings:
        logger.warning("Report built with %d warning(s)", len(document.warnings))
    return document


def build_report(request: ReportRequest, settings: Optional[ReportSettings] = None) -> bytes:
    """Build the complete PDF for a request.

    Raises:
        LayoutOverflowError: Layout invariant violated; nothing is returned.
        SerializationError: PDF encoding failed; nothing is returned.
    """
    settings = settings or ReportSettings()
    logger.info(
        "Building worklog report %s -> %s (%d entries)",
        request.start_date, request.end_date, len(request.entries),
    )
    document = compose_document(request, settings)
    return DocumentSink(settings).serialize(document)


def report_filename(request: ReportRequest, pattern: str = DEFAULT_FILENAME) -> str:
    return pattern.format(
        start=request.start_date.strftime("%Y-%m-%d"),
        end=request.end_date.strftime("%Y-%m-%d"),
    )


def generate_report(request: ReportRequest, config_path: str = "config.yaml") -> Path:
    """Build the report and save it under `paths.output_dir`.

    Args:
        request: Entries, reporting window and flags.
        config_path: Path to configuration YAML.

    Returns:
        Path to the written PDF file.
    """
    cfg = load_config(config_path)
    settings = ReportSettings.from_config(cfg)
    paths = cfg.get("paths", {}) or {}

    output_dir = Path(paths.get("output_dir", "data/output"))
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / report_filename(request, paths.get("pdf_filename", DEFAULT_FILENAME))

    pdf_bytes = build_report(request, settings)
    output_path.write_bytes(pdf_bytes)
    logger.info("PDF report saved to %s", output_path)
    return output_path
