"""Merge per-page render results into a single PDF document."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from io import BytesIO
from typing import List, Sequence, Tuple

import pypdf
from pypdf.errors import PdfReadError

from ..exceptions import AssemblyError
from ..logger import get_logger
from ..models import Dimensions
from ..render.render_types import Failed, Rendered, RenderResult
from .pdf_pages import page_number_overlay, placeholder_page_bytes, toc_page_bytes
from .pdf_settings import RendererSettings

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class DocumentMetadata:
    title: str | None = None
    author: str | None = None
    subject: str | None = None
    creator: str = "docpager"


@dataclass(frozen=True, slots=True)
class TocEntry:
    """A table-of-contents line pointing at a content page (zero-based)."""

    title: str
    page_index: int


@dataclass(frozen=True, slots=True)
class AssemblyOptions:
    """Output options for the assembled PDF.

    Args:
        metadata: Document information dictionary values.
        page_numbers: Stamp every output page with ``page_number_format``.
        page_number_format: Format string with ``{current}`` and ``{total}``.
        toc: Entries for a leading table-of-contents page; ``None`` for none.
        renderer_settings: Fonts and colours for generated pages.
    """

    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    page_numbers: bool = False
    page_number_format: str = "{current} / {total}"
    toc: Tuple[TocEntry, ...] | None = None
    renderer_settings: RendererSettings | None = None


@dataclass(frozen=True, slots=True)
class AssembledDocument:
    """Final artifact plus job metadata.

    ``page_count`` counts content pages and always equals the number of
    render results; a table-of-contents page is reported separately.
    """

    data: bytes
    page_count: int
    total_size_bytes: int
    failed_page_indices: Tuple[int, ...]
    duration_ms: int
    toc_page_count: int = 0

    @property
    def output_page_count(self) -> int:
        return self.page_count + self.toc_page_count


def _readable_page(data: bytes, index: int) -> pypdf.PageObject | None:
    """Return the first page of ``data`` or None when it is not a usable PDF."""

    try:
        reader = pypdf.PdfReader(BytesIO(data))
        pages = reader.pages
        if len(pages) == 0:
            logger.warning("Page %d rendered to a PDF without pages", index)
            return None
        if len(pages) > 1:
            logger.warning(
                "Page %d rendered to %d pages; keeping the first", index, len(pages)
            )
        return pages[0]
    except (PdfReadError, ValueError, KeyError) as exc:
        logger.warning("Page %d produced unreadable PDF bytes: %s", index, exc)
        return None


def _placeholder(
    dimensions: Dimensions,
    *,
    index: int,
    error: BaseException | None,
    settings: RendererSettings | None,
) -> pypdf.PageObject:
    data = placeholder_page_bytes(
        dimensions, page_index=index, error=error, settings=settings
    )
    return pypdf.PdfReader(BytesIO(data)).pages[0]


def _metadata_dict(metadata: DocumentMetadata, created: datetime) -> dict:
    values = {
        "/Creator": metadata.creator,
        "/Producer": "docpager (pypdf)",
        "/CreationDate": created.strftime("D:%Y%m%d%H%M%S"),
    }
    if metadata.title:
        values["/Title"] = metadata.title
    if metadata.author:
        values["/Author"] = metadata.author
    if metadata.subject:
        values["/Subject"] = metadata.subject
    return values


def assemble(
    results: Sequence[RenderResult],
    *,
    dimensions: Dimensions,
    options: AssemblyOptions | None = None,
) -> AssembledDocument:
    """Merge render results, in index order, into one PDF.

    Failed pages, and rendered pages whose bytes cannot be read, are
    replaced by placeholder pages so page numbering stays intact.

    Args:
        results: One result per planned page, index-aligned.
        dimensions: Page size used for generated pages.
        options: Metadata, page numbering, and table-of-contents options.
    Returns:
        AssembledDocument with the PDF bytes and job metadata.
    Raises:
        AssemblyError: When there are no results or every page failed.
    """

    started = time.perf_counter()
    resolved = options or AssemblyOptions()
    if not results:
        raise AssemblyError("Nothing to assemble: no pages were rendered")
    if all(isinstance(result, Failed) for result in results):
        raise AssemblyError(f"All {len(results)} pages failed to render")

    writer = pypdf.PdfWriter()
    toc_page_count = 0
    if resolved.toc is not None:
        toc_page_count = 1
        lines = [(entry.title, entry.page_index + 1 + toc_page_count) for entry in resolved.toc]
        writer.add_page(
            pypdf.PdfReader(
                BytesIO(
                    toc_page_bytes(
                        lines,
                        dimensions,
                        settings=resolved.renderer_settings,
                    )
                )
            ).pages[0]
        )

    failed: List[int] = []
    for index, result in enumerate(results):
        page = None
        error: BaseException | None = None
        if isinstance(result, Rendered):
            page = _readable_page(result.data, index)
        else:
            error = result.error
        if page is None:
            failed.append(index)
            logger.warning("Substituting placeholder for page %d", index)
            page = _placeholder(
                dimensions, index=index, error=error, settings=resolved.renderer_settings
            )
        writer.add_page(page)

    if len(failed) == len(results):
        raise AssemblyError(f"All {len(results)} pages failed to render")

    for entry in resolved.toc or ():
        if 0 <= entry.page_index < len(results):
            writer.add_outline_item(entry.title, entry.page_index + toc_page_count)
        else:
            logger.warning(
                "Contents entry '%s' points at missing page %d", entry.title, entry.page_index
            )

    if resolved.page_numbers:
        total = len(writer.pages)
        for position, page in enumerate(writer.pages):
            label = resolved.page_number_format.format(current=position + 1, total=total)
            page.merge_page(
                page_number_overlay(
                    dimensions, text=label, settings=resolved.renderer_settings
                )
            )

    writer.add_metadata(_metadata_dict(resolved.metadata, datetime.now()))
    buffer = BytesIO()
    writer.write(buffer)
    data = buffer.getvalue()
    duration_ms = round((time.perf_counter() - started) * 1000.0)
    logger.info(
        "Assembled %d pages (%d failed, %d contents) into %d bytes in %d ms",
        len(results),
        len(failed),
        toc_page_count,
        len(data),
        duration_ms,
    )
    return AssembledDocument(
        data=data,
        page_count=len(results),
        total_size_bytes=len(data),
        failed_page_indices=tuple(failed),
        duration_ms=duration_ms,
        toc_page_count=toc_page_count,
    )
