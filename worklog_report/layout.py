"""
layout.py — Vertical layout cursor and page-break policy.

The cursor is an explicit state object bound to one Document. Every
composition call receives it instead of reaching for module state, which is
what lets independent builds run in parallel.
"""

import logging
from dataclasses import dataclass

from worklog_report.config import LayoutConfig
from worklog_report.document import Document, Page

logger = logging.getLogger(__name__)

_EPSILON = 1e-6


@dataclass
class LayoutState:
    """Mutable position of an in-progress build (points from the top edge)."""
    current_y: float
    page_width: float
    page_height: float
    margin: float
    page_index: int = 0


class LayoutCursor:
    """Tracks where the next region goes and how much room is left."""

    def __init__(self, document: Document, layout: LayoutConfig):
        self.document = document
        self.layout = layout
        self.state = LayoutState(
            current_y=layout.margin,
            page_width=layout.page_width,
            page_height=layout.page_height,
            margin=layout.margin,
            page_index=document.page_count - 1,
        )

    @property
    def y(self) -> float:
        return self.state.current_y

    @property
    def page(self) -> Page:
        return self.document.pages[self.state.page_index]

    @property
    def content_width(self) -> float:
        return self.state.page_width - 2 * self.state.margin

    def advance(self, height: float) -> float:
        """Move down by `height` and return the new Y position."""
        self.state.current_y += height
        return self.state.current_y

    def remaining_space(self) -> float:
        s = self.state
        return s.page_height - s.margin - s.current_y

    def at_page_top(self) -> bool:
        return abs(self.state.current_y - self.state.margin) < _EPSILON

    def new_page(self) -> Page:
        """Start a fresh page in the document and reset Y to the top margin."""
        page = self.document.add_page()
        self.state.page_index = len(self.document.pages) - 1
        self.state.current_y = self.state.margin
        logger.debug("Page break -> page %d", page.number)
        return page


class PageBreakPolicy:
    """Breaks the page before content that is estimated not to fit."""

    def __init__(self, cursor: LayoutCursor):
        self.cursor = cursor

    @property
    def layout(self) -> LayoutConfig:
        return self.cursor.layout

    def estimate_table(self, row_count: int) -> float:
        """Heuristic height of a table: header + rows + safety buffer."""
        lay = self.layout
        return lay.table_header_height + row_count * lay.row_height + lay.safety_buffer

    def estimate_day(self, row_count: int) -> float:
        """Heuristic height of a weekday label followed by its table."""
        return self.layout.day_header_height + self.estimate_table(row_count)

    def ensure_space(self, estimated_height: float) -> bool:
        """Start a new page if `estimated_height` does not fit on this one.

        A fresh page is never broken again: content taller than a whole page
        is left to the caller to chunk.

        Returns:
            True if a page break was inserted.
        """
        if self.cursor.remaining_space() >= estimated_height:
            return False
        if self.cursor.at_page_top():
            logger.debug(
                "Estimated %.1fpt exceeds an empty page; not breaking again",
                estimated_height,
            )
            return False
        self.cursor.new_page()
        return True
