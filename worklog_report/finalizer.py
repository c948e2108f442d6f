"""
finalizer.py — Post-composition stamping of a finished Document.

Runs after every section has been laid out, because the total page count is
only known then:

    1. stamp_generation_metadata — 'Report generated on ...' on the last page
    2. stamp_page_numbers        — 'Page i of N' footer on every page
    3. seal                      — no further changes allowed

Both stamps write into dedicated page slots, so running a pass again
overwrites rather than appends.
"""

import logging
from datetime import datetime

from worklog_report.config import LayoutConfig
from worklog_report.document import BuildState, Document, TextRegion
from worklog_report.layout import LayoutCursor

logger = logging.getLogger(__name__)


def format_generated_at(moment: datetime) -> str:
    """'Monday, June 2, 2025 at 14:03:05'."""
    return f"{moment:%A}, {moment:%B} {moment.day}, {moment:%Y} at {moment:%H:%M:%S}"


class Finalizer:
    """Stamps generation metadata and page numbers, then seals."""

    def __init__(self, layout: LayoutConfig):
        self.layout = layout

    def stamp_generation_metadata(
        self,
        document: Document,
        cursor: LayoutCursor,
        generated_at: datetime,
    ) -> None:
        """Write the generation notice on the last page.

        The notice goes at the cursor; if the page is already full it is
        pulled up into the bottom margin just above the footer, so the page
        count never changes here.
        """
        document.advance(BuildState.METADATA_STAMPED)
        lay = self.layout
        lowest = lay.page_height - lay.margin + lay.notice_height
        y = min(cursor.y, lowest)
        page = document.pages[-1]
        page.generation_notice = TextRegion(
            f"Report generated on {format_generated_at(generated_at)}",
            lay.margin,
            y,
            "notice",
        )

    def stamp_page_numbers(self, document: Document) -> None:
        """Write 'Page i of N' bottom-right on every page."""
        if document.state is not BuildState.PAGE_NUMBERED:
            document.advance(BuildState.PAGE_NUMBERED)
        lay = self.layout
        total = document.page_count
        x = lay.page_width - lay.margin
        y = lay.page_height - lay.footer_offset
        for page in document.pages:
            page.footer = TextRegion(f"Page {page.number} of {total}", x, y, "footer", "right")
        logger.debug("Stamped page numbers on %d pages", total)

    def seal(self, document: Document) -> None:
        document.advance(BuildState.SEALED)

    def finalize(self, document: Document, cursor: LayoutCursor, generated_at: datetime) -> Document:
        """Run both stamping passes and seal the document."""
        self.stamp_generation_metadata(document, cursor, generated_at)
        self.stamp_page_numbers(document)
        self.seal(document)
        return document
