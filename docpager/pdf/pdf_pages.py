"""Generated pages: failure placeholders, table of contents, page-number overlays."""

from __future__ import annotations

from io import BytesIO
from typing import List, Sequence, Tuple

import pypdf
from reportlab.pdfgen import canvas
from reportlab.platypus import Frame, Paragraph, Table, TableStyle

from ..logger import get_logger
from ..models import Dimensions
from ..text import plain_text_markup
from .pdf_settings import PX_TO_PT, RendererSettings, build_styles

logger = get_logger(__name__)

# Points kept clear around generated content.
PAGE_INSET_PT = 36.0
PAGE_NUMBER_FONT_SIZE = 9.0


def _page_size(dimensions: Dimensions) -> Tuple[float, float]:
    return dimensions.width_px * PX_TO_PT, dimensions.height_px * PX_TO_PT


def _first_page(data: bytes) -> pypdf.PageObject:
    reader = pypdf.PdfReader(BytesIO(data))
    return reader.pages[0]


def placeholder_page_bytes(
    dimensions: Dimensions,
    *,
    page_index: int,
    error: BaseException | None = None,
    settings: RendererSettings | None = None,
) -> bytes:
    """Draw the page that stands in for one that failed to render.

    Args:
        dimensions: Page size in device pixels.
        page_index: Zero-based index of the failed content page.
        error: Failure cause, printed under the heading when given.
        settings: Optional drawing settings.
    Returns:
        One-page PDF bytes.
    """

    resolved = settings or RendererSettings()
    styles = build_styles(resolved)
    width, height = _page_size(dimensions)
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(width, height))
    pdf.setStrokeColor(resolved.placeholder_color)
    pdf.setLineWidth(2)
    pdf.rect(
        PAGE_INSET_PT / 2,
        PAGE_INSET_PT / 2,
        max(width - PAGE_INSET_PT, 1),
        max(height - PAGE_INSET_PT, 1),
    )
    story = [Paragraph(f"Page {page_index + 1} failed to render", styles["placeholder"])]
    if error is not None:
        story.append(Paragraph(plain_text_markup(str(error)), styles["caption"]))
    frame = Frame(
        PAGE_INSET_PT,
        PAGE_INSET_PT,
        max(width - 2 * PAGE_INSET_PT, 1),
        max(height - 2 * PAGE_INSET_PT, 1),
        showBoundary=0,
    )
    frame.addFromList(story, pdf)
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


def toc_page_bytes(
    entries: Sequence[Tuple[str, int]],
    dimensions: Dimensions,
    *,
    title: str = "Contents",
    settings: RendererSettings | None = None,
) -> bytes:
    """Draw a single table-of-contents page.

    Entries that do not fit on the page are dropped with a warning.

    Args:
        entries: ``(title, page_number)`` pairs, page numbers one-based as printed.
        dimensions: Page size in device pixels.
        title: Heading drawn above the entries.
        settings: Optional drawing settings.
    Returns:
        One-page PDF bytes.
    """

    resolved = settings or RendererSettings()
    styles = build_styles(resolved)
    width, height = _page_size(dimensions)
    content_width = max(width - 2 * PAGE_INSET_PT, 1)
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(width, height))
    story: List = [Paragraph(plain_text_markup(title), styles["heading"])]
    for entry_title, page_number in entries:
        row = Table(
            [
                [
                    Paragraph(plain_text_markup(entry_title), styles["toc_entry"]),
                    Paragraph(str(page_number), styles["toc_page"]),
                ]
            ],
            colWidths=[content_width * 0.85, content_width * 0.15],
        )
        row.setStyle(
            TableStyle(
                [
                    ("LINEBELOW", (0, 0), (-1, -1), 0.25, resolved.border_color),
                    ("LEFTPADDING", (0, 0), (-1, -1), 0),
                    ("RIGHTPADDING", (0, 0), (-1, -1), 0),
                ]
            )
        )
        story.append(row)
    frame = Frame(
        PAGE_INSET_PT,
        PAGE_INSET_PT,
        content_width,
        max(height - 2 * PAGE_INSET_PT, 1),
        showBoundary=0,
    )
    frame.addFromList(story, pdf)
    if story:
        logger.warning(
            "Table of contents overflowed its page; %d entries dropped", len(story)
        )
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


def page_number_overlay(
    dimensions: Dimensions,
    *,
    text: str,
    settings: RendererSettings | None = None,
) -> pypdf.PageObject:
    """Build a transparent page carrying ``text`` centred in the bottom margin.

    Args:
        dimensions: Page size in device pixels.
        text: Label to draw, e.g. ``"3 / 12"``.
        settings: Optional drawing settings.
    Returns:
        PDF page object ready for ``merge_page``.
    """

    resolved = settings or RendererSettings()
    width, height = _page_size(dimensions)
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(width, height))
    pdf.setFont(resolved.font_name, PAGE_NUMBER_FONT_SIZE)
    pdf.setFillColorRGB(0.3, 0.3, 0.3)
    pdf.drawCentredString(width / 2, min(PAGE_INSET_PT / 2, height / 4), text)
    pdf.save()
    return _first_page(buffer.getvalue())
