"""
pdf_sink.py — Serializes a sealed Document into PDF bytes.

Draws every region with the ReportLab canvas into a BytesIO buffer; nothing
is written to disk here. Output is byte-for-byte reproducible for the same
document (ReportLab invariant mode), and either complete or not returned at
all: any encoder failure surfaces as SerializationError.
"""

import io
import logging
from typing import Optional

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as rl_canvas

from worklog_report.config import ReportSettings
from worklog_report.document import BuildState, Document, ImageRegion, Page, TableRegion, TextRegion
from worklog_report.errors import SerializationError
from worklog_report.styles import build_styles
from worklog_report.tables import build_table

logger = logging.getLogger(__name__)


class DocumentSink:
    """Turns the page model into a PDF byte stream."""

    def __init__(self, settings: ReportSettings, title: Optional[str] = None):
        self.settings = settings
        self.title = title or settings.title
        self.styles = build_styles(settings.brand)

    def serialize(self, document: Document) -> bytes:
        """Encode every page of a sealed document.

        Raises:
            DocumentStateError: If the document has not been sealed.
            SerializationError: If ReportLab fails or the output is not a
                complete PDF.
        """
        document.require(BuildState.SEALED)
        lay = self.settings.layout
        buf = io.BytesIO()
        try:
            pdf = rl_canvas.Canvas(
                buf,
                pagesize=(lay.page_width, lay.page_height),
                pageCompression=1 if self.settings.page_compression else 0,
                invariant=1,
            )
            pdf.setTitle(self.title)
            for page in document.pages:
                self._draw_page(pdf, page)
                pdf.showPage()
            pdf.save()
        except Exception as exc:
            raise SerializationError(f"PDF encoding failed: {exc}") from exc

        data = buf.getvalue()
        if not data.startswith(b"%PDF-") or not data.rstrip().endswith(b"%%EOF"):
            raise SerializationError("PDF encoder produced an incomplete byte stream")
        logger.info("Serialized %d pages (%d bytes)", document.page_count, len(data))
        return data

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _draw_page(self, pdf, page: Page) -> None:
        for region in page.regions:
            if isinstance(region, TextRegion):
                self._draw_text(pdf, region)
            elif isinstance(region, TableRegion):
                self._draw_table(pdf, region)
            elif isinstance(region, ImageRegion):
                self._draw_image(pdf, region)
            else:
                raise SerializationError(f"Unknown region type: {type(region).__name__}")
        for stamp in (page.generation_notice, page.footer):
            if stamp is not None:
                self._draw_text(pdf, stamp)

    def _flip(self, y: float) -> float:
        return self.settings.layout.page_height - y

    def _draw_text(self, pdf, region: TextRegion) -> None:
        style = self.styles[region.style]
        pdf.saveState()
        pdf.setFont(style.fontName, style.fontSize)
        pdf.setFillColor(style.textColor)
        y = self._flip(region.y)
        if region.align == "centre":
            pdf.drawCentredString(region.x, y, region.text)
        elif region.align == "right":
            pdf.drawRightString(region.x, y, region.text)
        else:
            pdf.drawString(region.x, y, region.text)
        pdf.restoreState()

    def _draw_table(self, pdf, region: TableRegion) -> None:
        table = build_table(region.header, region.rows, region.col_widths,
                            region.style, self.styles, self.settings.brand)
        table.wrapOn(pdf, sum(region.col_widths), region.height)
        table.drawOn(pdf, region.x, self._flip(region.y + region.height))

    def _draw_image(self, pdf, region: ImageRegion) -> None:
        pdf.drawImage(
            ImageReader(region.path),
            region.x,
            self._flip(region.y + region.height),
            width=region.width,
            height=region.height,
            preserveAspectRatio=True,
            mask="auto",
        )
