"""
errors.py — Exception and warning types raised by the report engine.

Fatal errors derive from ReportError and abort the whole build; the caller
never receives a partially-correct document. ResourceLoadWarning is the only
non-fatal condition: it is logged and recorded on the document.
"""


class ReportError(Exception):
    """Base class for errors that abort a report build."""


class LayoutOverflowError(ReportError):
    """Content would not fit where the layout engine placed it."""


class SerializationError(ReportError):
    """The PDF encoder could not produce a complete byte stream."""


class DocumentStateError(ReportError):
    """An operation was attempted in the wrong document lifecycle state."""


class ResourceLoadWarning(UserWarning):
    """A decorative asset (e.g. the logo) could not be loaded."""
