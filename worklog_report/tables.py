"""
tables.py — Grid tables: construction, measurement and placement.

`build_table` is the single place a ReportLab Table is assembled, used by
the TableRenderer to measure and by the DocumentSink to draw. The renderer
never splits a table; callers chunk long tables with `rows_fitting`.
"""

import logging
from typing import Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.platypus import Paragraph, Table, TableStyle

from worklog_report.document import TableRegion
from worklog_report.errors import LayoutOverflowError
from worklog_report.layout import LayoutCursor
from worklog_report.styles import table_header_fill

logger = logging.getLogger(__name__)

_PROPORTION_TOLERANCE = 1e-6
_FIT_TOLERANCE = 0.01


def build_table(
    header: Sequence[str],
    rows: Sequence[Sequence[str]],
    col_widths: Sequence[float],
    style: str,
    styles: dict,
    brand: dict,
) -> Table:
    """Build a styled ReportLab Table with wrapping Paragraph cells.

    Args:
        header: Column titles.
        rows: Body rows, one string per column.
        col_widths: Absolute column widths in points.
        style: 'grid' (overview tables) or 'day' (worklog tables).
        styles: Paragraph style dict from `build_styles`.
        brand: Brand colour dict.

    Returns:
        Styled ReportLab Table.
    """
    head_style = styles["day_header" if style == "day" else "grid_header"]
    cell_style = styles["day_cell" if style == "day" else "grid_cell"]

    data = [[Paragraph(escape(str(h)), head_style) for h in header]]
    for row in rows:
        data.append([Paragraph(escape(str(v)), cell_style) for v in row])

    table = Table(data, colWidths=list(col_widths), repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), table_header_fill(style, brand)),
        ("GRID", (0, 0), (-1, -1), 0.4, colors.lightgrey),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ("LEFTPADDING", (0, 0), (-1, -1), 4),
        ("RIGHTPADDING", (0, 0), (-1, -1), 4),
    ]))
    return table


class TableRenderer:
    """Places tables at the cursor with fixed column proportions."""

    def __init__(self, cursor: LayoutCursor, styles: dict, brand: dict):
        self.cursor = cursor
        self.styles = styles
        self.brand = brand

    def column_widths(self, proportions: Sequence[float]) -> tuple[float, ...]:
        total = sum(proportions)
        if abs(total - 1.0) > _PROPORTION_TOLERANCE:
            raise ValueError(f"Column proportions must sum to 1, got {total:.4f}")
        width = self.cursor.content_width
        return tuple(width * p for p in proportions)

    def measure(
        self,
        header: Sequence[str],
        rows: Sequence[Sequence[str]],
        proportions: Sequence[float],
        style: str = "grid",
    ) -> float:
        """Real height of the table in points."""
        widths = self.column_widths(proportions)
        table = build_table(header, rows, widths, style, self.styles, self.brand)
        _, height = table.wrap(sum(widths), self.cursor.state.page_height)
        return height

    def rows_fitting(
        self,
        header: Sequence[str],
        rows: Sequence[Sequence[str]],
        proportions: Sequence[float],
        available: float,
        style: str = "grid",
    ) -> int:
        """Largest prefix of `rows` that fits into `available` points.

        Table height grows with every row, so a binary search over the
        prefix length needs only a handful of measurements.
        """
        lo, hi = 0, len(rows)
        while lo < hi:
            mid = (lo + hi + 1) // 2
            if self.measure(header, rows[:mid], proportions, style) <= available + _FIT_TOLERANCE:
                lo = mid
            else:
                hi = mid - 1
        return lo

    def render(
        self,
        header: Sequence[str],
        rows: Sequence[Sequence[str]],
        proportions: Sequence[float],
        style: str = "grid",
    ) -> float:
        """Write the table at the cursor and return the Y just below it.

        Raises:
            LayoutOverflowError: If the table does not fit in the space left
                on the current page.
        """
        widths = self.column_widths(proportions)
        height = self.measure(header, rows, proportions, style)
        remaining = self.cursor.remaining_space()
        if height > remaining + _FIT_TOLERANCE:
            raise LayoutOverflowError(
                f"Table of {len(rows)} rows needs {height:.1f}pt but only "
                f"{remaining:.1f}pt remain on page {self.cursor.page.number}"
            )

        region = TableRegion(
            header=tuple(str(h) for h in header),
            rows=tuple(tuple(str(v) for v in row) for row in rows),
            col_widths=widths,
            x=self.cursor.state.margin,
            y=self.cursor.y,
            height=height,
            style=style,
        )
        self.cursor.document.append(self.cursor.state.page_index, region)
        return self.cursor.advance(height)
