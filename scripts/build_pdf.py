"""
Paginate a JSON document description and write the merged PDF.
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from tqdm import tqdm

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from docpager.exceptions import DocPagerError
from docpager.logger import configure_logging, get_logger
from docpager.models import Document
from docpager.pipeline import (
    AssemblyOptions,
    DispatchSettings,
    DocumentMetadata,
    build_document_sync,
    load_document,
    write_document,
)
from docpager.units import PAGE_FORMATS, resolve_dimensions

logger = get_logger(__name__)


def _parse_args() -> argparse.Namespace:
    """Return CLI arguments for the build script."""

    parser = argparse.ArgumentParser(
        description="Paginate a document description into output/document.pdf."
    )
    parser.add_argument(
        "--input",
        "-i",
        type=Path,
        required=True,
        help="JSON file with {sections, layout, customDimensions?, title?}.",
    )
    parser.add_argument(
        "--output-file",
        "-o",
        type=Path,
        default=Path("output/document.pdf"),
        help="File path into which the resulting pdf will be saved.",
    )
    parser.add_argument(
        "--format",
        choices=sorted(PAGE_FORMATS),
        default=None,
        help="Override the page format given in the input layout.",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=4,
        help="Number of pages rendered at the same time.",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=2,
        help="Extra render attempts per page after a retryable failure.",
    )
    parser.add_argument(
        "--page-numbers",
        action="store_true",
        help="Stamp 'current / total' at the bottom of every page.",
    )
    parser.add_argument(
        "--toc",
        action="store_true",
        help="Insert a table-of-contents page and PDF outline.",
    )
    parser.add_argument("--title", default=None, help="PDF title metadata.")
    parser.add_argument("--author", default=None, help="PDF author metadata.")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log at DEBUG level.",
    )
    return parser.parse_args()


def _with_format(document: Document, page_format: str | None) -> Document:
    """Return ``document`` laid out on ``page_format`` when one is given."""

    if page_format is None:
        return document
    layout = replace(document.layout, dimensions=resolve_dimensions(page_format))
    return replace(document, layout=layout)


def main() -> int:
    """Build the PDF described by ``--input``.

    Example:
        >>> main()  # doctest: +SKIP
    """

    args = _parse_args()
    configure_logging(verbose=args.verbose)
    try:
        document = _with_format(load_document(args.input), args.format)
        options = AssemblyOptions(
            metadata=DocumentMetadata(title=args.title, author=args.author),
            page_numbers=args.page_numbers,
        )
        dispatch = DispatchSettings(
            concurrency=args.concurrency, max_retries=args.retries
        )
        plan_progress = tqdm(
            total=len(document.arena), desc="Planning sections", unit="section"
        )
        render_progress = tqdm(desc="Rendering pages", unit="page")
        try:
            assembled = build_document_sync(
                document,
                dispatch_settings=dispatch,
                options=options,
                with_toc=args.toc,
                plan_progress=plan_progress,
                render_progress=render_progress,
            )
        finally:
            plan_progress.close()
            render_progress.close()
    except DocPagerError as exc:
        logger.error("Build failed: %s", exc)
        return 1

    write_document(assembled, args.output_file)
    if assembled.failed_page_indices:
        logger.warning(
            "Pages rendered as placeholders: %s",
            ", ".join(str(i) for i in assembled.failed_page_indices),
        )
    logger.info(
        "%d pages, %d bytes, %d ms",
        assembled.page_count,
        assembled.total_size_bytes,
        assembled.duration_ms,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
