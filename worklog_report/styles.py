"""
styles.py — Paragraph styles and colours shared by layout and drawing.

The TableRenderer measures tables with the same styles the DocumentSink
draws them with, so measured heights and drawn heights agree. Styles are
rebuilt per build; nothing here is cached at module level.
"""

from reportlab.lib import colors
from reportlab.lib.enums import TA_LEFT
from reportlab.lib.styles import ParagraphStyle


def hex_colour(h: str) -> colors.Color:
    """Convert a hex colour string to ReportLab Color."""
    h = h.lstrip("#")
    r, g, b = int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    return colors.Color(r / 255, g / 255, b / 255)


def _text(name: str, font: str, size: float, colour, leading: float = None) -> ParagraphStyle:
    return ParagraphStyle(
        name,
        fontName=font,
        fontSize=size,
        leading=leading or size * 1.2,
        textColor=colour,
        alignment=TA_LEFT,
    )


def build_styles(brand: dict) -> dict[str, ParagraphStyle]:
    """Create every text and table-cell style used in the report.

    Args:
        brand: Brand colour dict from config (hex strings).

    Returns:
        Dict of named ParagraphStyle objects.
    """
    primary = hex_colour(brand["primary"])
    accent = hex_colour(brand["accent"])
    text_col = hex_colour(brand["text"])
    muted = hex_colour(brand["muted"])
    warning = hex_colour(brand["warning"])
    cell_col = colors.Color(44 / 255, 44 / 255, 44 / 255)

    return {
        # Free-standing lines
        "title": _text("title", "Helvetica-Bold", 20, text_col),
        "section": _text("section", "Helvetica-Bold", 14, primary),
        "body": _text("body", "Helvetica", 12, text_col),
        "small": _text("small", "Helvetica", 10, text_col),
        "warning": _text("warning", "Helvetica", 10, warning),
        "contributor_title": _text("contributor_title", "Helvetica-Bold", 16, primary),
        "subsection": _text("subsection", "Helvetica-Bold", 12, primary),
        "day_label": _text("day_label", "Helvetica-Bold", 11, accent),
        "notice": _text("notice", "Helvetica-Oblique", 10, muted),
        "footer": _text("footer", "Helvetica", 10, muted),
        # Table cells
        "grid_header": _text("grid_header", "Helvetica-Bold", 11, colors.white),
        "grid_cell": _text("grid_cell", "Helvetica", 10, cell_col),
        "day_header": _text("day_header", "Helvetica-Bold", 9, colors.white),
        "day_cell": _text("day_cell", "Helvetica", 8, cell_col),
    }


def table_header_fill(style: str, brand: dict) -> colors.Color:
    """Header background for a table style ('grid' or 'day')."""
    return hex_colour(brand["accent"] if style == "day" else brand["primary"])
