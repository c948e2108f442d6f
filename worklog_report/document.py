"""
document.py — In-memory page model produced by the layout engine.

A Document is an ordered list of Pages; each Page holds the regions laid out
on it (text lines, tables, images) in drawing order, plus two stamp slots
filled by the Finalizer: the generation notice and the page-number footer.
Stamps are slots rather than regions so re-stamping overwrites.

All Y coordinates are measured in points from the top edge of the page; the
DocumentSink flips them into PDF space.

Lifecycle:
    EMPTY → OVERVIEW_WRITTEN → (CONTRIBUTOR_WRITTEN)* →
    METADATA_STAMPED → PAGE_NUMBERED → SEALED
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from worklog_report.errors import DocumentStateError, ResourceLoadWarning

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Regions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TextRegion:
    """A single line of text; `y` is the baseline."""
    text: str
    x: float
    y: float
    style: str = "body"
    align: str = "left"  # 'left' | 'centre' | 'right' (x is the anchor)


@dataclass(frozen=True)
class TableRegion:
    """A grid laid out by the TableRenderer; `y` is the top edge."""
    header: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    col_widths: tuple[float, ...]
    x: float
    y: float
    height: float
    style: str = "grid"


@dataclass(frozen=True)
class ImageRegion:
    """A decorative image; `y` is the top edge."""
    path: str
    x: float
    y: float
    width: float
    height: float


Region = Union[TextRegion, TableRegion, ImageRegion]


@dataclass
class Page:
    number: int
    regions: list = field(default_factory=list)
    generation_notice: Optional[TextRegion] = None
    footer: Optional[TextRegion] = None


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------

class BuildState(enum.Enum):
    EMPTY = "empty"
    OVERVIEW_WRITTEN = "overview_written"
    CONTRIBUTOR_WRITTEN = "contributor_written"
    METADATA_STAMPED = "metadata_stamped"
    PAGE_NUMBERED = "page_numbered"
    SEALED = "sealed"


_TRANSITIONS = {
    BuildState.EMPTY: {BuildState.OVERVIEW_WRITTEN},
    BuildState.OVERVIEW_WRITTEN: {BuildState.CONTRIBUTOR_WRITTEN, BuildState.METADATA_STAMPED},
    BuildState.CONTRIBUTOR_WRITTEN: {BuildState.CONTRIBUTOR_WRITTEN, BuildState.METADATA_STAMPED},
    BuildState.METADATA_STAMPED: {BuildState.PAGE_NUMBERED},
    BuildState.PAGE_NUMBERED: {BuildState.PAGE_NUMBERED, BuildState.SEALED},
    BuildState.SEALED: set(),
}

_WRITABLE = {BuildState.EMPTY, BuildState.OVERVIEW_WRITTEN, BuildState.CONTRIBUTOR_WRITTEN}


class Document:
    """Page arena for one report build. Starts with a single blank page."""

    def __init__(self):
        self.pages: list[Page] = [Page(number=1)]
        self.state = BuildState.EMPTY
        self.warnings: list[ResourceLoadWarning] = []

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def sealed(self) -> bool:
        return self.state is BuildState.SEALED

    def advance(self, target: BuildState) -> None:
        """Move the lifecycle forward; illegal transitions raise."""
        if target not in _TRANSITIONS[self.state]:
            raise DocumentStateError(
                f"Cannot move document from {self.state.value} to {target.value}"
            )
        self.state = target

    def require(self, *states: BuildState) -> None:
        if self.state not in states:
            expected = ", ".join(s.value for s in states)
            raise DocumentStateError(
                f"Document is {self.state.value}; operation needs one of: {expected}"
            )

    def add_page(self) -> Page:
        self.require(*_WRITABLE)
        page = Page(number=len(self.pages) + 1)
        self.pages.append(page)
        return page

    def append(self, page_index: int, region: Region) -> None:
        self.require(*_WRITABLE)
        self.pages[page_index].regions.append(region)

    def record_warning(self, warning: ResourceLoadWarning) -> None:
        self.warnings.append(warning)
