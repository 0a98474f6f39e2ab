"""Up-front checks that reject a document before any planning or rendering."""

from __future__ import annotations

import math

from ..exceptions import InvalidMarginsError, InvalidSectionError, UnsupportedKindError, ValidationError
from ..models import (
    LIST_STYLES,
    CustomContent,
    Document,
    ImageContent,
    LayoutSettings,
    ListContent,
    MarkdownContent,
    Section,
    TableContent,
    TextContent,
    kind_of,
)
from ..units import DEFAULT_MAX_ASPECT_RATIO, require_valid_dimensions


def _finite_non_negative(value: object) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value >= 0
    )


def validate_layout(
    layout: LayoutSettings, *, max_aspect_ratio: float = DEFAULT_MAX_ASPECT_RATIO
) -> None:
    """Raise a ValidationError when the page geometry is unusable.

    Args:
        layout: Layout settings to check.
        max_aspect_ratio: Aspect ratio limit for the page.
    Returns:
        None.
    """

    require_valid_dimensions(layout.dimensions, max_aspect_ratio=max_aspect_ratio)
    margins = layout.margins
    for name in ("top", "right", "bottom", "left"):
        if not _finite_non_negative(getattr(margins, name)):
            raise InvalidMarginsError(
                f"Margin '{name}' must be a non-negative number, got {getattr(margins, name)!r}"
            )
    if layout.content_width <= 0 or layout.content_height <= 0:
        raise InvalidMarginsError(
            "Margins leave no content area "
            f"({layout.content_width}x{layout.content_height}px)"
        )
    if not _finite_non_negative(layout.section_gap_px):
        raise ValidationError(f"Section gap must be non-negative, got {layout.section_gap_px!r}")
    if not _finite_non_negative(layout.column_gap_px):
        raise ValidationError(f"Column gap must be non-negative, got {layout.column_gap_px!r}")
    if not isinstance(layout.columns, int) or layout.columns < 1:
        raise ValidationError(f"Column count must be a positive integer, got {layout.columns!r}")
    if layout.column_width <= 0:
        raise ValidationError("Column gaps leave no width for content")


def validate_section(section: Section) -> None:
    """Raise InvalidSectionError for unknown kinds or malformed payloads."""

    try:
        kind_of(section.content)
    except UnsupportedKindError as exc:
        raise InvalidSectionError(section.id, str(exc)) from exc
    content = section.content
    if isinstance(content, TextContent) and not isinstance(content.text, str):
        raise InvalidSectionError(section.id, "text content must be a string")
    if isinstance(content, MarkdownContent) and not isinstance(content.source, str):
        raise InvalidSectionError(section.id, "markdown content must be a string")
    if isinstance(content, ListContent) and content.style not in LIST_STYLES:
        raise InvalidSectionError(section.id, f"unknown list style {content.style!r}")
    if isinstance(content, TableContent) and any(
        not isinstance(row, tuple) for row in content.rows
    ):
        raise InvalidSectionError(section.id, "table rows must be tuples of cells")
    if isinstance(content, ImageContent):
        for name in ("natural_width", "natural_height"):
            value = getattr(content, name)
            if not _finite_non_negative(value) or value == 0:
                raise InvalidSectionError(section.id, f"image {name} must be positive")
    if isinstance(content, CustomContent) and not _finite_non_negative(content.height_px):
        raise InvalidSectionError(section.id, "custom height must be a non-negative number")
    if isinstance(content, (ImageContent, CustomContent)) and not section.atomic:
        raise InvalidSectionError(section.id, "image and custom sections are always atomic")


def validate_document(
    document: Document, *, max_aspect_ratio: float = DEFAULT_MAX_ASPECT_RATIO
) -> None:
    """Run every validation check for ``document``.

    Args:
        document: Document submitted for pagination.
        max_aspect_ratio: Aspect ratio limit for the page.
    Returns:
        None.
    Raises:
        ValidationError: On the first problem found.
    """

    validate_layout(document.layout, max_aspect_ratio=max_aspect_ratio)
    if not len(document.arena):
        raise ValidationError("Document has no sections")
    for section in document.sections:
        validate_section(section)
