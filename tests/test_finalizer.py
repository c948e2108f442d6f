"""
test_finalizer.py — Tests for generation notice, page numbering and sealing.

Tests cover:
    - 'Page i of N' footers are contiguous and complete
    - Re-running page numbering overwrites instead of duplicating
    - Generation notice text and placement on the last page
    - Lifecycle ordering (stamp → number → seal) and sealed-document guards
"""

import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from worklog_report.composer import SectionComposer
from worklog_report.config import LayoutConfig, ReportSettings
from worklog_report.document import BuildState, Document, TextRegion
from worklog_report.errors import DocumentStateError
from worklog_report.finalizer import Finalizer, format_generated_at
from worklog_report.layout import LayoutCursor, PageBreakPolicy
from worklog_report.models import ReportRequest, TimeEntry
from worklog_report.report import compose_document
from worklog_report.styles import build_styles
from worklog_report.tables import TableRenderer

MONDAY = datetime(2025, 6, 2, 9, 0, tzinfo=timezone.utc)
GENERATED = datetime(2025, 6, 2, 14, 3, 5)


def _entries(authors=("Alice", "Bob", "Chloe"), per_day=2):
    out = []
    for author in authors:
        for day in range(6):
            for i in range(per_day):
                out.append(TimeEntry(
                    issue_key=f"WT-{day}{i}",
                    issue_summary="Review pull request",
                    author_name=author,
                    author_email=f"{author.lower()}@example.com",
                    seconds_spent=2700,
                    started_at=MONDAY + timedelta(days=day, hours=i),
                    comment="Reviewed",
                ))
    return out


def _request(entries):
    return ReportRequest(
        start_date=date(2025, 6, 2),
        end_date=date(2025, 6, 8),
        entries=entries,
        generated_at=GENERATED,
    )


@pytest.fixture
def composed():
    """A composed but not yet finalized document with its cursor."""
    settings = ReportSettings()
    document = Document()
    cursor = LayoutCursor(document, settings.layout)
    renderer = TableRenderer(cursor, build_styles(settings.brand), settings.brand)
    SectionComposer(document, cursor, PageBreakPolicy(cursor), renderer, settings).compose(
        _request(_entries())
    )
    return document, cursor, Finalizer(settings.layout)


class TestPageNumbers:

    def test_footers_contiguous(self):
        document = compose_document(_request(_entries()))
        total = document.page_count
        assert total > 3
        footers = [page.footer.text for page in document.pages]
        assert footers == [f"Page {i} of {total}" for i in range(1, total + 1)]

    def test_footer_position(self):
        layout = LayoutConfig()
        footer = compose_document(_request(_entries())).pages[0].footer
        assert footer.align == "right"
        assert footer.x == pytest.approx(layout.page_width - layout.margin)
        assert footer.y == pytest.approx(layout.page_height - layout.footer_offset)

    def test_restamping_is_idempotent(self, composed):
        document, cursor, finalizer = composed
        finalizer.stamp_generation_metadata(document, cursor, GENERATED)
        finalizer.stamp_page_numbers(document)
        first = [page.footer for page in document.pages]
        finalizer.stamp_page_numbers(document)
        assert [page.footer for page in document.pages] == first
        assert all(
            not (isinstance(r, TextRegion) and r.text.startswith("Page "))
            for page in document.pages for r in page.regions
        )

    def test_numbering_before_metadata_rejected(self, composed):
        document, _, finalizer = composed
        with pytest.raises(DocumentStateError):
            finalizer.stamp_page_numbers(document)


class TestGenerationNotice:

    def test_format(self):
        assert format_generated_at(GENERATED) == "Monday, June 2, 2025 at 14:03:05"

    def test_notice_on_last_page_only(self):
        document = compose_document(_request(_entries()))
        notices = [page.generation_notice for page in document.pages]
        assert all(n is None for n in notices[:-1])
        assert notices[-1].text == "Report generated on Monday, June 2, 2025 at 14:03:05"

    def test_notice_at_cursor(self, composed):
        document, cursor, finalizer = composed
        layout = finalizer.layout
        y = min(cursor.y, layout.page_height - layout.margin + layout.notice_height)
        finalizer.stamp_generation_metadata(document, cursor, GENERATED)
        assert document.pages[-1].generation_notice.y == pytest.approx(y)
        assert document.pages[-1].generation_notice.x == pytest.approx(layout.margin)

    def test_full_page_notice_pulled_into_margin(self, composed):
        document, cursor, finalizer = composed
        layout = finalizer.layout
        before = document.page_count
        cursor.advance(cursor.remaining_space() + 50)
        finalizer.stamp_generation_metadata(document, cursor, GENERATED)
        notice = document.pages[-1].generation_notice
        assert document.page_count == before
        assert notice.y == pytest.approx(layout.page_height - layout.margin + layout.notice_height)
        assert notice.y < layout.page_height - layout.footer_offset


class TestSealing:

    def test_compose_document_is_sealed(self):
        document = compose_document(_request([]))
        assert document.sealed
        assert document.pages[0].footer.text == "Page 1 of 1"

    def test_no_mutation_after_seal(self):
        document = compose_document(_request(_entries(("Alice",))))
        with pytest.raises(DocumentStateError):
            document.add_page()
        with pytest.raises(DocumentStateError):
            document.append(0, TextRegion("late", 0, 0))
        with pytest.raises(DocumentStateError):
            Finalizer(LayoutConfig()).stamp_page_numbers(document)

    def test_seal_requires_page_numbers(self, composed):
        document, cursor, finalizer = composed
        finalizer.stamp_generation_metadata(document, cursor, GENERATED)
        with pytest.raises(DocumentStateError):
            finalizer.seal(document)

    def test_finalize_runs_all_passes(self, composed):
        document, cursor, finalizer = composed
        finalizer.finalize(document, cursor, GENERATED)
        assert document.state is BuildState.SEALED
        assert document.pages[-1].generation_notice is not None
