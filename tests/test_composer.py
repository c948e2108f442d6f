"""
test_composer.py — Tests for section composition and pagination.

Tests cover:
    - Overview content and contributor ordering
    - Per-contributor day tables (Monday→Saturday, no Sunday)
    - Page breaks before oversized days and chunking of very long days
    - The no-orphan rule for day labels
    - Logo handling and lifecycle guards
"""

import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from worklog_report.composer import DAY_COLUMNS, SectionComposer
from worklog_report.config import ReportSettings
from worklog_report.document import BuildState, Document, ImageRegion, TableRegion, TextRegion
from worklog_report.errors import DocumentStateError, LayoutOverflowError, ResourceLoadWarning
from worklog_report.grouping import REPORT_WEEKDAYS
from worklog_report.layout import LayoutCursor, PageBreakPolicy
from worklog_report.models import ContributorSummary, ReportRequest, TimeEntry
from worklog_report.report import compose_document
from worklog_report.styles import build_styles
from worklog_report.tables import TableRenderer

MONDAY = datetime(2025, 6, 2, 9, 0, tzinfo=timezone.utc)
GENERATED = datetime(2025, 6, 7, 18, 30, 0)


def _entry(author="Alice", seconds=3600, started=MONDAY, issue="WT-1", comment="Done"):
    return TimeEntry(
        issue_key=issue,
        issue_summary="Export worklogs to PDF",
        author_name=author,
        author_email=f"{author.lower()}@example.com",
        seconds_spent=seconds,
        started_at=started,
        comment=comment,
    )


def _request(entries, include=True):
    return ReportRequest(
        start_date=date(2025, 6, 2),
        end_date=date(2025, 6, 8),
        entries=entries,
        generated_at=GENERATED,
        include_individual_reports=include,
    )


def _compose(request, settings=None):
    settings = settings or ReportSettings()
    document = Document()
    cursor = LayoutCursor(document, settings.layout)
    policy = PageBreakPolicy(cursor)
    renderer = TableRenderer(cursor, build_styles(settings.brand), settings.brand)
    composer = SectionComposer(document, cursor, policy, renderer, settings)
    composer.compose(request)
    return document, composer


def _texts(page):
    return [r.text for r in page.regions if isinstance(r, TextRegion)]


def _tables(page):
    return [r for r in page.regions if isinstance(r, TableRegion)]


def _day_labels(document):
    labels = []
    for page in document.pages:
        labels += [t for t in _texts(page) if t.split(" (")[0] in REPORT_WEEKDAYS]
    return labels


class TestOverview:

    def test_single_contributor_scenario(self):
        entries = [_entry(seconds=3 * 3600), _entry(seconds=2 * 3600, issue="WT-2")]
        document = compose_document(_request(entries))

        assert document.page_count == 2
        summary, roster = _tables(document.pages[0])
        assert roster.rows == (("Alice", "Software Engineer", "5h", "2"),)
        assert ("Total Hours", "5h") in summary.rows

        alice_page = document.pages[1]
        assert "Developer Report: Alice" in _texts(alice_page)
        assert _day_labels(document) == ["Monday"]
        day_tables = _tables(alice_page)
        assert len(day_tables) == 1
        assert day_tables[0].header == DAY_COLUMNS
        assert len(day_tables[0].rows) == 2

    def test_period_and_caveat(self):
        document, _ = _compose(_request([_entry()]))
        texts = _texts(document.pages[0])
        assert "Monday, June 2, 2025 - Sunday, June 8, 2025" in texts
        assert "Note: This report reflects data as of the export time." in texts

    def test_empty_entries_single_overview_page(self):
        document = compose_document(_request([], include=True))
        assert document.page_count == 1
        summary, roster = _tables(document.pages[0])
        assert summary.rows == (
            ("Total Hours", "0h"),
            ("Total Developers", "0"),
            ("Total Issues", "0"),
            ("Total Worklog Entries", "0"),
        )
        assert roster.rows == ()

    def test_team_only_skips_individual_pages(self):
        entries = [_entry("Alice"), _entry("Bob")]
        document, _ = _compose(_request(entries, include=False))
        assert document.page_count == 1
        assert document.state is BuildState.OVERVIEW_WRITTEN

    def test_roster_and_reports_sorted_by_hours(self):
        entries = [
            _entry("Ten", 10 * 3600),
            _entry("TwentyFive", 25 * 3600),
            _entry("Two", 2 * 3600),
        ]
        document, _ = _compose(_request(entries))
        roster = _tables(document.pages[0])[1]
        assert [row[0] for row in roster.rows] == ["TwentyFive", "Ten", "Two"]
        assert [row[2] for row in roster.rows] == ["25h", "10h", "2h"]

        headers = [
            t for page in document.pages[1:] for t in _texts(page)
            if t.startswith("Developer Report: ")
        ]
        assert headers == [
            "Developer Report: TwentyFive",
            "Developer Report: Ten",
            "Developer Report: Two",
        ]

    def test_long_roster_continues_on_next_page(self):
        entries = [_entry(f"Dev {i:03d}", 3600 + i) for i in range(120)]
        document, _ = _compose(_request(entries, include=False))
        assert document.page_count > 1
        assert "Team Members (continued)" in _texts(document.pages[1])
        names = [row[0] for page in document.pages for t in _tables(page)[-1:] for row in t.rows
                 if row[0].startswith("Dev ")]
        assert len(names) == 120


class TestContributorReports:

    def test_monday_to_saturday_without_sunday(self):
        entries = [_entry(started=MONDAY + timedelta(days=d), issue=f"WT-{d}") for d in range(7)]
        document, _ = _compose(_request(entries))
        assert _day_labels(document) == list(REPORT_WEEKDAYS)
        assert "Sunday" not in [t for p in document.pages for t in _texts(p)]

    def test_day_rows(self):
        entry = _entry(seconds=5400, comment=None)
        document, _ = _compose(_request([entry]))
        row = _tables(document.pages[1])[0].rows[0]
        assert row == ("Jun 2, 2025", "WT-1", "Export worklogs to PDF", "N/A", "No comment", "1h30m")

    def test_page_break_before_oversized_day(self):
        monday = [_entry(started=MONDAY + timedelta(minutes=i)) for i in range(3)]
        tuesday = [_entry(started=MONDAY + timedelta(days=1, minutes=i)) for i in range(30)]
        document, _ = _compose(_request(monday + tuesday))

        assert document.page_count == 3
        assert "Monday" in _texts(document.pages[1])
        moved = document.pages[2].regions
        assert isinstance(moved[0], TextRegion) and moved[0].text == "Tuesday"
        assert isinstance(moved[1], TableRegion) and len(moved[1].rows) == 30

    def test_day_longer_than_a_page_is_chunked(self):
        entries = [_entry(started=MONDAY + timedelta(minutes=i)) for i in range(80)]
        document, _ = _compose(_request(entries))

        labels = _day_labels(document)
        assert labels[0] == "Monday"
        assert set(labels[1:]) == {"Monday (continued)"}
        day_tables = [t for p in document.pages[1:] for t in _tables(p)]
        assert sum(len(t.rows) for t in day_tables) == 80
        assert all(t.header == DAY_COLUMNS for t in day_tables)

    def test_day_labels_never_orphaned(self):
        entries = []
        for person, count in (("Alice", 9), ("Bob", 23), ("Chloe", 41)):
            for day in range(6):
                for i in range(count // (day + 1) + 1):
                    entries.append(_entry(person, 1800,
                                          started=MONDAY + timedelta(days=day, minutes=i)))
        document, _ = _compose(_request(entries))

        checked = 0
        for page in document.pages:
            for i, region in enumerate(page.regions):
                if isinstance(region, TextRegion) and region.text.split(" (")[0] in REPORT_WEEKDAYS:
                    follower = page.regions[i + 1]
                    assert isinstance(follower, TableRegion)
                    assert len(follower.rows) >= 1
                    checked += 1
        assert checked >= 18

    def test_sunday_only_contributor_has_page_without_days(self):
        document, _ = _compose(_request([_entry(started=MONDAY + timedelta(days=6))]))
        assert document.page_count == 2
        assert _tables(document.pages[1]) == []

    def test_contributor_without_entries_is_skipped(self):
        document, composer = _compose(_request([_entry()], include=False))
        composer.write_contributor(ContributorSummary("Ghost", "ghost@example.com", 0, ()))
        assert document.page_count == 1

    def test_row_taller_than_page_aborts(self):
        huge = _entry(comment="lorem ipsum " * 4000)
        with pytest.raises(LayoutOverflowError):
            _compose(_request([huge]))


class TestLogoAndLifecycle:

    def test_missing_logo_warns_and_keeps_layout(self, tmp_path):
        entries = [_entry("Alice"), _entry("Bob")]
        plain, _ = _compose(_request(entries))
        settings = ReportSettings(logo_path=str(tmp_path / "missing.png"))
        document, _ = _compose(_request(entries), settings)

        assert document.page_count == plain.page_count
        assert len(document.warnings) == 3  # overview + two contributor pages
        assert all(isinstance(w, ResourceLoadWarning) for w in document.warnings)
        first_table = _tables(document.pages[0])[0]
        assert first_table.y == _tables(plain.pages[0])[0].y

    def test_logo_is_placed(self, tmp_path):
        Image = pytest.importorskip("PIL.Image")
        logo = tmp_path / "logo.png"
        Image.new("RGB", (300, 100), "navy").save(logo)
        document, _ = _compose(_request([_entry()]), ReportSettings(logo_path=str(logo)))

        images = [r for r in document.pages[0].regions if isinstance(r, ImageRegion)]
        assert len(images) == 1
        assert document.warnings == []

    def test_compose_only_once(self):
        document, composer = _compose(_request([_entry()]))
        with pytest.raises(DocumentStateError):
            composer.compose(_request([_entry()]))
