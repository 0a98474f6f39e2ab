"""End-to-end pagination job: validate, plan, render, assemble."""

from __future__ import annotations

import asyncio
import dataclasses
import re
import time
from pathlib import Path
from typing import Dict, List, Sequence

from .ingest import document_from_mapping, load_document
from .logger import get_logger
from .models import Document, MarkdownContent, PageLayout, ProgressTracker
from .pagination.pagination_flow import plan_pages
from .pagination.pagination_settings import MeasureSettings
from .pagination.pagination_validate import validate_document
from .pdf.pdf_assembler import (
    AssembledDocument,
    AssemblyOptions,
    DocumentMetadata,
    TocEntry,
    assemble,
)
from .pdf.pdf_renderer import ReportLabPageRenderer
from .render.render_dispatch import render_all
from .render.render_pool import RenderSlotPool, SemaphoreSlotPool
from .render.render_types import DispatchSettings, PageRenderer

__all__ = [
    "AssembledDocument",
    "AssemblyOptions",
    "DispatchSettings",
    "DocumentMetadata",
    "MeasureSettings",
    "ReportLabPageRenderer",
    "SemaphoreSlotPool",
    "TocEntry",
    "build_document",
    "build_document_sync",
    "document_from_mapping",
    "load_document",
    "plan_pages",
    "toc_entries",
    "write_document",
]

logger = get_logger(__name__)

_HEADING_RE = re.compile(r"^\s*#{1,6}\s+(.+?)\s*#*\s*$", re.MULTILINE)


def toc_entries(layouts: Sequence[PageLayout]) -> List[TocEntry]:
    """Return one contents entry per source section, at the page where it starts.

    Markdown sections are titled by their first heading; other sections by
    their id.

    Example:
        >>> toc_entries([])
        []
    """

    seen: Dict[str, TocEntry] = {}
    for layout in layouts:
        for placement in layout.placements:
            section = placement.section
            if section.origin_id in seen:
                continue
            title = section.origin_id
            if isinstance(section.content, MarkdownContent):
                heading = _HEADING_RE.search(section.content.source)
                if heading:
                    title = heading.group(1)
            seen[section.origin_id] = TocEntry(title=title, page_index=layout.index)
    return list(seen.values())


async def build_document(
    document: Document,
    *,
    renderer: PageRenderer | None = None,
    measure_settings: MeasureSettings | None = None,
    dispatch_settings: DispatchSettings | None = None,
    options: AssemblyOptions | None = None,
    with_toc: bool = False,
    pool: RenderSlotPool | None = None,
    cancel_event: asyncio.Event | None = None,
    plan_progress: ProgressTracker | None = None,
    render_progress: ProgressTracker | None = None,
) -> AssembledDocument:
    """Paginate and render ``document`` into a single PDF.

    Args:
        document: Document to build.
        renderer: Page renderer; defaults to ``ReportLabPageRenderer``.
        measure_settings: Measurement model used by the planner.
        dispatch_settings: Concurrency, retry and timeout configuration.
        options: Assembly options (metadata, page numbers, contents).
        with_toc: Generate contents entries from the plan when ``options``
            carries none.
        pool: Optional renderer slot pool.
        cancel_event: Optional job cancellation signal.
        plan_progress: Tracker advanced once per planned section.
        render_progress: Tracker advanced once per rendered page.
    Returns:
        AssembledDocument whose ``duration_ms`` covers the whole job.
    Raises:
        ValidationError: Before any rendering, for invalid input.
        AssemblyError: When no page rendered.
    """

    started = time.perf_counter()
    validate_document(document)
    layouts = plan_pages(document, settings=measure_settings, progress=plan_progress)
    logger.info(
        "Planned %d pages for %d sections", len(layouts), len(document.arena)
    )
    resolved = options or AssemblyOptions()
    if with_toc and resolved.toc is None:
        resolved = dataclasses.replace(resolved, toc=tuple(toc_entries(layouts)))
    if document.title and resolved.metadata.title is None:
        resolved = dataclasses.replace(
            resolved,
            metadata=dataclasses.replace(resolved.metadata, title=document.title),
        )
    results = await render_all(
        layouts,
        renderer=renderer or ReportLabPageRenderer(),
        dimensions=document.layout.dimensions,
        settings=dispatch_settings,
        pool=pool,
        cancel_event=cancel_event,
        progress=render_progress,
    )
    assembled = assemble(
        results, dimensions=document.layout.dimensions, options=resolved
    )
    return dataclasses.replace(
        assembled, duration_ms=round((time.perf_counter() - started) * 1000.0)
    )


def build_document_sync(document: Document, **kwargs) -> AssembledDocument:
    """Blocking wrapper around ``build_document``."""

    return asyncio.run(build_document(document, **kwargs))


def write_document(assembled: AssembledDocument, path: Path) -> Path:
    """Write the assembled PDF to ``path``, creating parent folders."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(assembled.data)
    logger.info("Wrote %s (%d bytes)", target, assembled.total_size_bytes)
    return target
