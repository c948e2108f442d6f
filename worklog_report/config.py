"""
config.py — Typed settings built from config.yaml.

The YAML file stays the single source of configuration; this module only
turns the `report` and `layout` sections into dataclasses the engine can
use without re-reading the file. Lengths are given in millimetres in YAML
and converted to PDF points here.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo

import yaml
from reportlab.lib.pagesizes import A4, LETTER, LEGAL
from reportlab.lib.units import mm

logger = logging.getLogger(__name__)

PAGE_SIZES = {"A4": A4, "LETTER": LETTER, "LEGAL": LEGAL}

DEFAULT_BRAND = {
    "primary": "34495E",
    "accent": "2980B9",
    "text": "2C3E50",
    "muted": "95A5A6",
    "warning": "E74C3C",
}


def load_config(config_path: str = "config.yaml") -> dict[str, Any]:
    """Read the YAML configuration file.

    Args:
        config_path: Path to configuration YAML.

    Returns:
        Parsed configuration dict (empty dict for an empty file).
    """
    with open(config_path, "r") as fh:
        return yaml.safe_load(fh) or {}


@dataclass(frozen=True)
class LayoutConfig:
    """Page geometry and the height heuristics used for page breaks (points)."""
    page_width: float = A4[0]
    page_height: float = A4[1]
    margin: float = 20 * mm
    day_header_height: float = 6 * mm
    table_header_height: float = 8 * mm
    row_height: float = 6 * mm
    safety_buffer: float = 20 * mm
    table_gap: float = 15 * mm
    footer_offset: float = 15 * mm
    notice_height: float = 4 * mm

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @classmethod
    def from_config(cls, layout: dict[str, Any]) -> "LayoutConfig":
        page_size = str(layout.get("page_size", "A4")).upper()
        if page_size not in PAGE_SIZES:
            raise ValueError(
                f"Unknown page_size '{page_size}'; expected one of {sorted(PAGE_SIZES)}"
            )
        width, height = PAGE_SIZES[page_size]
        defaults = cls()

        def _mm(key: str, default_pts: float) -> float:
            value = layout.get(f"{key}_mm")
            return default_pts if value is None else float(value) * mm

        return cls(
            page_width=width,
            page_height=height,
            margin=_mm("margin", defaults.margin),
            day_header_height=_mm("day_header_height", defaults.day_header_height),
            table_header_height=_mm("table_header_height", defaults.table_header_height),
            row_height=_mm("row_height", defaults.row_height),
            safety_buffer=_mm("safety_buffer", defaults.safety_buffer),
            table_gap=_mm("table_gap", defaults.table_gap),
            footer_offset=_mm("footer_offset", defaults.footer_offset),
            notice_height=_mm("notice_height", defaults.notice_height),
        )


@dataclass(frozen=True)
class ReportSettings:
    """Everything the engine needs besides the ReportRequest itself."""
    title: str = "Team Worklog Overview Report"
    role_label: str = "Software Engineer"
    logo_path: Optional[str] = None
    timezone: Optional[str] = None
    page_compression: bool = True
    brand: dict = field(default_factory=lambda: dict(DEFAULT_BRAND))
    layout: LayoutConfig = field(default_factory=LayoutConfig)

    @property
    def tzinfo(self) -> Optional[ZoneInfo]:
        return ZoneInfo(self.timezone) if self.timezone else None

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> "ReportSettings":
        report = cfg.get("report", {}) or {}
        defaults = cls()
        brand = dict(DEFAULT_BRAND)
        brand.update(report.get("brand", {}) or {})
        logo = report.get("logo_path")
        return cls(
            title=report.get("title", defaults.title),
            role_label=report.get("role_label", defaults.role_label),
            logo_path=str(Path(logo)) if logo else None,
            timezone=report.get("timezone") or None,
            page_compression=bool(report.get("page_compression", defaults.page_compression)),
            brand=brand,
            layout=LayoutConfig.from_config(cfg.get("layout", {}) or {}),
        )

    @classmethod
    def from_file(cls, config_path: str = "config.yaml") -> "ReportSettings":
        settings = cls.from_config(load_config(config_path))
        logger.debug("Loaded report settings from %s", config_path)
        return settings
