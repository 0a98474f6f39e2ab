"""Default page renderer: draws one PageLayout into a one-page PDF with ReportLab."""

from __future__ import annotations

import asyncio
import threading
from dataclasses import replace
from io import BytesIO
from pathlib import Path
from typing import List

from pyphen import Pyphen
from reportlab.lib.styles import ParagraphStyle
from reportlab.pdfgen import canvas
from reportlab.platypus import (
    Flowable,
    Frame,
    Image,
    KeepInFrame,
    ListFlowable,
    ListItem,
    Paragraph,
    Table,
    TableStyle,
)
from reportlab.platypus.doctemplate import LayoutError

from ..exceptions import RenderError
from ..logger import get_logger
from ..models import (
    CustomContent,
    Dimensions,
    ImageContent,
    ListContent,
    MarkdownContent,
    PageLayout,
    Placement,
    TableContent,
    TextContent,
)
from ..text import hyphenate_html, markdown_to_markup, plain_text_markup
from .pdf_settings import PX_TO_PT, RendererSettings, build_styles, register_unicode_font

logger = get_logger(__name__)

# ReportLab keeps module-level font and style caches; draw one page at a time.
_DRAW_LOCK = threading.Lock()


def _prepare_fonts(*, settings: RendererSettings | None) -> RendererSettings:
    """Return settings with a Unicode font swapped in when requested and available.

    Args:
        settings: Optional RendererSettings override.
    Returns:
        Resolved RendererSettings.
    """

    resolved = settings or RendererSettings()
    if resolved.prefer_unicode_font:
        font_name = register_unicode_font()
        if font_name:
            resolved = replace(resolved, font_name=font_name, font_bold_name=font_name)
    return resolved


class ReportLabPageRenderer:
    """Render planned pages with ReportLab.

    Each placement becomes a frame at its planned position; content is
    shrunk to the frame when the height estimate was too optimistic.

    Args:
        settings: Fonts, colours, and hyphenation options.
    """

    # Drawing is serialised on _DRAW_LOCK.
    max_concurrent_renders = 1

    def __init__(self, settings: RendererSettings | None = None) -> None:
        self.settings = _prepare_fonts(settings=settings)
        self.styles = build_styles(self.settings)
        self.hyphenator = (
            Pyphen(lang=self.settings.hyphenation_lang)
            if self.settings.hyphenate
            else None
        )

    async def render_page(self, layout: PageLayout, dimensions: Dimensions) -> bytes:
        """Render ``layout`` in a worker thread and return the PDF bytes."""

        return await asyncio.to_thread(self.render_sync, layout, dimensions)

    def render_sync(self, layout: PageLayout, dimensions: Dimensions) -> bytes:
        """Render ``layout`` to a one-page PDF.

        Args:
            layout: Planned page.
            dimensions: Page size in device pixels.
        Returns:
            PDF bytes.
        Raises:
            RenderError: Not retryable, when the layout cannot be drawn.
        """

        with _DRAW_LOCK:
            return self._draw_page(layout, dimensions)

    def _draw_page(self, layout: PageLayout, dimensions: Dimensions) -> bytes:
        page_width = dimensions.width_px * PX_TO_PT
        page_height = dimensions.height_px * PX_TO_PT
        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=(page_width, page_height))
        if self.settings.background_color is not None:
            pdf.saveState()
            pdf.setFillColor(self.settings.background_color)
            pdf.rect(0, 0, page_width, page_height, stroke=0, fill=1)
            pdf.restoreState()
        try:
            for placement in layout.placements:
                self._draw_placement(pdf=pdf, placement=placement, page_height=page_height)
        except (LayoutError, ValueError, OSError) as exc:
            raise RenderError(
                f"Cannot draw page {layout.index}: {exc}", retryable=False
            ) from exc
        pdf.showPage()
        pdf.save()
        return buffer.getvalue()

    def _draw_placement(
        self, *, pdf: canvas.Canvas, placement: Placement, page_height: float
    ) -> None:
        """Draw one placement inside its own frame.

        Args:
            pdf: Target canvas.
            placement: Section position in device pixels (top-left origin).
            page_height: Page height in points.
        Returns:
            None.
        """

        width = placement.width * PX_TO_PT
        height = placement.height * PX_TO_PT
        if width <= 0 or height <= 0:
            return
        frame = Frame(
            placement.x * PX_TO_PT,
            page_height - placement.y * PX_TO_PT - height,
            width,
            height,
            leftPadding=0,
            rightPadding=0,
            topPadding=0,
            bottomPadding=0,
            id=placement.section.id,
            showBoundary=int(self.settings.debug_borders),
        )
        flowables = self._flowables(placement=placement, width=width, height=height)
        frame.addFromList(
            [KeepInFrame(width, height, flowables, mode="shrink")], pdf
        )

    def _paragraph(self, markup: str, style: ParagraphStyle) -> Paragraph:
        if self.hyphenator is not None:
            markup = hyphenate_html(markup, self.hyphenator)
        return Paragraph(markup, style)

    def _flowables(
        self, *, placement: Placement, width: float, height: float
    ) -> List[Flowable]:
        """Return flowables for a placement's section content.

        Args:
            placement: Placement to render.
            width: Frame width in points.
            height: Frame height in points.
        Returns:
            Flowables for the frame.
        """

        content = placement.section.content
        body = self.styles["body"]
        if isinstance(content, TextContent):
            return [self._paragraph(plain_text_markup(content.text), body)]
        if isinstance(content, MarkdownContent):
            return [self._paragraph(markdown_to_markup(content.source), body)]
        if isinstance(content, ListContent):
            return self._list(content=content)
        if isinstance(content, TableContent):
            return [self._table(content=content, width=width)]
        if isinstance(content, ImageContent):
            return [self._image(content=content, width=width, height=height)]
        if isinstance(content, CustomContent):
            label = content.label or f"[{placement.section.id}]"
            return [self._labelled_box(label=label, width=width, height=height)]
        raise RenderError(
            f"No drawing rule for section '{placement.section.id}'", retryable=False
        )

    def _list(self, *, content: ListContent) -> List[Flowable]:
        body = self.styles["body"]
        paragraphs = [self._paragraph(plain_text_markup(item), body) for item in content.items]
        if content.style == "plain":
            return list(paragraphs)
        items = [ListItem(paragraph) for paragraph in paragraphs]
        if content.style == "ordered":
            return [ListFlowable(items, bulletType="1", start=content.start)]
        return [ListFlowable(items, bulletType="bullet")]

    def _table(self, *, content: TableContent, width: float) -> Table:
        cell = self.styles["cell"]
        rows: List[list] = []
        if content.header is not None:
            rows.append(
                [Paragraph(plain_text_markup(c), self.styles["header_cell"]) for c in content.header]
            )
        rows.extend(
            [Paragraph(plain_text_markup(c), cell) for c in row] for row in content.rows
        )
        columns = max((len(row) for row in rows), default=1) or 1
        for row in rows:
            row.extend([""] * (columns - len(row)))
        table = Table(
            rows or [[""]],
            colWidths=[width / columns] * columns,
            repeatRows=1 if content.header is not None else 0,
        )
        table.setStyle(
            TableStyle(
                [
                    ("GRID", (0, 0), (-1, -1), 0.4, self.settings.border_color),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ]
            )
        )
        return table

    def _image(self, *, content: ImageContent, width: float, height: float) -> Flowable:
        if Path(content.src).is_file():
            return Image(content.src, width=width, height=height)
        logger.warning("Image %s not found; drawing its caption instead", content.src)
        return self._labelled_box(label=content.alt or content.src, width=width, height=height)

    def _labelled_box(self, *, label: str, width: float, height: float) -> Table:
        box = Table(
            [[Paragraph(plain_text_markup(label), self.styles["caption"])]],
            colWidths=[width],
            rowHeights=[height],
        )
        box.setStyle(
            TableStyle(
                [
                    ("BOX", (0, 0), (-1, -1), 0.6, self.settings.border_color),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ]
            )
        )
        return box

