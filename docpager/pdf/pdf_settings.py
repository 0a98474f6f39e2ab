"""Fonts, styles, and drawing settings for PDF generation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from ..units import DEFAULT_DPI, POINTS_PER_INCH

# Device pixels are drawn at 72pt per 96px so that a 96 DPI page maps onto
# the physical paper size.
PX_TO_PT = POINTS_PER_INCH / DEFAULT_DPI


@dataclass(slots=True)
class RendererSettings:
    """Drawing options for rendered and generated pages.

    Example:
        >>> RendererSettings().font_size > 0
        True
    """

    font_name: str = "Helvetica"
    font_bold_name: str = "Helvetica-Bold"
    font_size: float = 10.0
    leading: float = 13.0
    background_color: colors.Color | None = None
    border_color: colors.Color = colors.lightgrey
    placeholder_color: colors.Color = colors.red
    hyphenate: bool = True
    hyphenation_lang: str = "en_US"
    prefer_unicode_font: bool = False
    debug_borders: bool = False


def register_unicode_font() -> str | None:
    """Register a Unicode-capable TrueType font when one is installed.

    Returns:
        Registered font name, or None when no candidate exists (the
        built-in Helvetica is used then).
    """

    candidates = [
        ("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf", "DejaVuSans"),
        ("/usr/share/fonts/truetype/noto/NotoSans-Regular.ttf", "NotoSans"),
        ("/Library/Fonts/Arial Unicode.ttf", "ArialUnicode"),
        ("/System/Library/Fonts/Supplemental/Arial Unicode.ttf", "ArialUnicode"),
    ]
    for path, name in candidates:
        if not Path(path).exists():
            continue
        if name not in pdfmetrics.getRegisteredFontNames():
            try:
                pdfmetrics.registerFont(TTFont(name, path))
            except Exception:
                continue
        return name
    return None


def build_styles(settings: RendererSettings) -> Dict[str, ParagraphStyle]:
    """Create paragraph styles used on rendered pages.

    Args:
        settings: Renderer settings with font choices.
    Returns:
        Mapping of style keys to ParagraphStyle objects.

    Example:
        >>> styles = build_styles(RendererSettings())
        >>> "body" in styles
        True
    """

    base = getSampleStyleSheet()
    body = ParagraphStyle(
        "body",
        parent=base["Normal"],
        fontName=settings.font_name,
        fontSize=settings.font_size,
        leading=settings.leading,
        alignment=TA_LEFT,
    )
    cell = ParagraphStyle("cell", parent=body, fontSize=settings.font_size - 1)
    header_cell = ParagraphStyle(
        "header_cell", parent=cell, fontName=settings.font_bold_name
    )
    caption = ParagraphStyle(
        "caption",
        parent=body,
        fontSize=settings.font_size - 1,
        textColor=colors.grey,
        alignment=TA_CENTER,
    )
    heading = ParagraphStyle(
        "heading",
        parent=body,
        fontName=settings.font_bold_name,
        fontSize=settings.font_size * 1.8,
        leading=settings.font_size * 2.2,
        spaceAfter=settings.font_size,
    )
    toc_entry = ParagraphStyle("toc_entry", parent=body, spaceAfter=2)
    toc_page = ParagraphStyle("toc_page", parent=toc_entry, alignment=TA_RIGHT)
    placeholder = ParagraphStyle(
        "placeholder",
        parent=heading,
        textColor=settings.placeholder_color,
        alignment=TA_CENTER,
    )
    return {
        "body": body,
        "cell": cell,
        "header_cell": header_cell,
        "caption": caption,
        "heading": heading,
        "toc_entry": toc_entry,
        "toc_page": toc_page,
        "placeholder": placeholder,
    }
