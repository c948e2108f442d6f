"""
composer.py — Builds the report sections page by page.

Section order:
    Page 1:      Team overview — logo, title, report period + caveat,
                 team summary table, team member roster
    Pages 2..k:  One report per contributor (descending hours), each starting
                 on a new page, with one table per weekday Monday→Saturday

Before every weekday table the PageBreakPolicy checks the estimated height of
label + table, so a label never ends up alone at the bottom of a page. Tables
longer than a page are cut into page-sized chunks with a '(continued)' label.
"""

import logging
from typing import Sequence

from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader

from worklog_report.config import ReportSettings
from worklog_report.document import BuildState, Document, ImageRegion, TextRegion
from worklog_report.errors import LayoutOverflowError, ResourceLoadWarning
from worklog_report.grouping import (
    compute_team_stats,
    format_hours,
    format_long_date,
    format_short_date,
    group_by_contributor,
    group_by_weekday,
    localize,
)
from worklog_report.layout import LayoutCursor, PageBreakPolicy
from worklog_report.models import ContributorSummary, ReportRequest
from worklog_report.tables import TableRenderer

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Section geometry (vertical advances after each line)
# ---------------------------------------------------------------------------
OVERVIEW_LOGO = (60 * mm, 20 * mm, 10 * mm)   # width, height, gap below
CONTRIBUTOR_LOGO = (40 * mm, 13 * mm, 5 * mm)
OVERVIEW_LOGO_FALLBACK = 5 * mm
CONTRIBUTOR_LOGO_FALLBACK = 3 * mm

CAVEAT_LINES = (
    "Note: This report reflects data as of the export time.",
    "Team members may have continued working after this report was generated.",
    "Report covers Monday to Saturday business operations "
    "(Saturday included only if work activity exists).",
)
CAVEAT_LINE_SPACING = 5 * mm
CAVEAT_BLOCK_HEIGHT = 25 * mm

SUMMARY_COLUMNS = ("Metric", "Value")
SUMMARY_PROPORTIONS = (0.5, 0.5)

ROSTER_COLUMNS = ("Developer", "Position", "Total Hours", "Worklog Entries")
ROSTER_PROPORTIONS = (0.35, 0.25, 0.2, 0.2)

DAY_COLUMNS = ("Date", "Issue", "Task", "Status", "Achievement description", "Duration")
DAY_PROPORTIONS = tuple(w / 170 for w in (20, 20, 40, 20, 50, 20))


class SectionComposer:
    """Drives cursor, break policy and table renderer over one Document."""

    def __init__(
        self,
        document: Document,
        cursor: LayoutCursor,
        policy: PageBreakPolicy,
        renderer: TableRenderer,
        settings: ReportSettings,
    ):
        self.document = document
        self.cursor = cursor
        self.policy = policy
        self.renderer = renderer
        self.settings = settings
        self.layout = settings.layout

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def compose(self, request: ReportRequest) -> Document:
        """Lay out the overview and, if requested, every contributor report."""
        self.document.require(BuildState.EMPTY)
        contributors = group_by_contributor(request.entries)

        self.write_overview(request, contributors)
        if request.include_individual_reports:
            for contributor in contributors:
                self.write_contributor(contributor)

        logger.info(
            "Composed %d pages (%d contributors, individual reports: %s)",
            self.document.page_count,
            len(contributors),
            "yes" if request.include_individual_reports else "no",
        )
        return self.document

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def write_overview(
        self,
        request: ReportRequest,
        contributors: Sequence[ContributorSummary],
    ) -> None:
        stats = compute_team_stats(request.entries)
        lay = self.layout

        self._logo(OVERVIEW_LOGO, OVERVIEW_LOGO_FALLBACK)
        self._line(self.settings.title, "title", 15 * mm, align="centre")

        self._line("Report Period", "section", 8 * mm)
        period = f"{format_long_date(request.start_date)} - {format_long_date(request.end_date)}"
        self._line(period, "body", 12 * mm)
        self._caveat()

        summary_rows = [
            ("Total Hours", format_hours(stats.total_hours)),
            ("Total Developers", str(stats.contributor_count)),
            ("Total Issues", str(stats.issue_count)),
            ("Total Worklog Entries", str(stats.entry_count)),
        ]
        self._labelled_table("Team Summary", "section", 8 * mm,
                             SUMMARY_COLUMNS, summary_rows, SUMMARY_PROPORTIONS, "grid")
        self.cursor.advance(lay.table_gap)

        roster_rows = [
            (c.author_name, self.settings.role_label,
             format_hours(c.total_hours), str(c.entry_count))
            for c in contributors
        ]
        self._labelled_table("Team Members", "section", 8 * mm,
                             ROSTER_COLUMNS, roster_rows, ROSTER_PROPORTIONS, "grid")
        self.cursor.advance(lay.table_gap)

        self.document.advance(BuildState.OVERVIEW_WRITTEN)

    def write_contributor(self, contributor: ContributorSummary) -> None:
        if not contributor.entries:
            logger.debug("Skipping %s: no entries", contributor.author_name)
            return

        self.cursor.new_page()
        self._logo(CONTRIBUTOR_LOGO, CONTRIBUTOR_LOGO_FALLBACK)
        self._line(f"Developer Report: {contributor.author_name}", "contributor_title", 6 * mm)
        self._line(f"Position: {self.settings.role_label}", "body", 12 * mm)

        self._line("Summary:", "subsection", 6 * mm)
        self._line(f"• Total Hours: {format_hours(contributor.total_hours)}", "small", 5 * mm)
        self._line(f"• Total Worklog Entries: {contributor.entry_count}", "small", 12 * mm)

        self._line("Detailed Worklog Entries:", "subsection", 8 * mm)
        tz = self.settings.tzinfo
        for day in group_by_weekday(contributor.entries, tz):
            rows = [
                (
                    format_short_date(localize(e.started_at, tz)),
                    e.issue_key,
                    e.issue_summary,
                    "N/A",
                    e.comment or "No comment",
                    format_hours(e.hours),
                )
                for e in day.entries
            ]
            if self.policy.ensure_space(self.policy.estimate_day(len(rows))):
                logger.debug("%s / %s moved to page %d",
                             contributor.author_name, day.weekday_name, self.cursor.page.number)
            self._labelled_table(day.weekday_name, "day_label", self.layout.day_header_height,
                                 DAY_COLUMNS, rows, DAY_PROPORTIONS, "day")
            self.cursor.advance(self.layout.table_gap)

        self.document.advance(BuildState.CONTRIBUTOR_WRITTEN)

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------

    def _line(self, text: str, style: str, advance: float, align: str = "left") -> None:
        """Write one line at the cursor, breaking first if it would not fit."""
        self.policy.ensure_space(advance)
        self._put_line(text, style, advance, align)

    def _put_line(self, text: str, style: str, advance: float, align: str = "left") -> None:
        s = self.cursor.state
        x = s.page_width / 2 if align == "centre" else s.margin
        self.document.append(s.page_index, TextRegion(text, x, s.current_y, style, align))
        self.cursor.advance(advance)

    def _caveat(self) -> None:
        self.policy.ensure_space(CAVEAT_BLOCK_HEIGHT)
        s = self.cursor.state
        for i, line in enumerate(CAVEAT_LINES):
            self.document.append(
                s.page_index,
                TextRegion(line, s.margin, s.current_y + i * CAVEAT_LINE_SPACING, "warning"),
            )
        self.cursor.advance(CAVEAT_BLOCK_HEIGHT)

    def _labelled_table(
        self,
        label: str,
        label_style: str,
        label_advance: float,
        header: Sequence[str],
        rows: Sequence[Sequence[str]],
        proportions: Sequence[float],
        style: str,
    ) -> None:
        """Label + table, chunked across pages when the rows do not fit.

        The label is only written once at least the first row (or, for an
        empty table, the header) fits beneath it on the same page.
        """
        pending = list(rows)
        caption = label
        while True:
            available = self.cursor.remaining_space() - label_advance
            count = self.renderer.rows_fitting(header, pending, proportions, available, style)
            if pending:
                fits = count > 0
            else:
                fits = self.renderer.measure(header, [], proportions, style) <= available
            if not fits:
                if self.cursor.at_page_top():
                    raise LayoutOverflowError(
                        f"'{caption}' cannot fit its first row on an empty page"
                    )
                self.cursor.new_page()
                continue

            self._put_line(caption, label_style, label_advance)
            self.renderer.render(header, pending[:count], proportions, style)
            pending = pending[count:]
            if not pending:
                return
            self.cursor.new_page()
            caption = f"{label} (continued)"

    def _logo(self, geometry: tuple, fallback_gap: float) -> None:
        """Place the configured logo, or just leave a small gap without one."""
        path = self.settings.logo_path
        if not path:
            self.cursor.advance(fallback_gap)
            return
        width, height, gap = geometry
        try:
            ImageReader(path).getSize()
        except Exception as exc:
            warning = ResourceLoadWarning(f"Could not load logo '{path}': {exc}")
            logger.warning("%s -- continuing without it", warning)
            self.document.record_warning(warning)
            self.cursor.advance(fallback_gap)
            return

        s = self.cursor.state
        self.document.append(s.page_index, ImageRegion(path, s.margin, s.current_y, width, height))
        self.cursor.advance(height + gap)
