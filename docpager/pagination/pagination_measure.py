"""Height estimates for sections at a given width."""

from __future__ import annotations

import math
from typing import Callable, Dict

from ..exceptions import UnsupportedKindError
from ..models import (
    CustomContent,
    ImageContent,
    ListContent,
    MarkdownContent,
    Section,
    SectionKind,
    TableContent,
    TextContent,
    kind_of,
)
from .pagination_settings import MeasureSettings


def section_text(section: Section) -> str:
    """Return the character stream of a text-like section.

    Args:
        section: Text or Markdown section.
    Returns:
        The text (or markdown source) that the line model operates on.
    """

    content = section.content
    if isinstance(content, TextContent):
        return content.text
    if isinstance(content, MarkdownContent):
        return content.source
    raise UnsupportedKindError(type(content).__name__)


def text_line_count(*, text: str, width: float, settings: MeasureSettings) -> int:
    """Return the estimated wrapped line count for ``text`` at ``width``."""

    return math.ceil(len(text) / settings.chars_per_line(width))


def _measure_text(
    section: Section, width: float, settings: MeasureSettings
) -> float:
    lines = text_line_count(text=section_text(section), width=width, settings=settings)
    return lines * settings.line_height


def _measure_list(section: Section, width: float, settings: MeasureSettings) -> float:
    content = section.content
    assert isinstance(content, ListContent)
    return len(content.items) * settings.list_item_height(content.style)


def _measure_table(section: Section, width: float, settings: MeasureSettings) -> float:
    content = section.content
    assert isinstance(content, TableContent)
    header = settings.table_header_height if content.header is not None else 0.0
    return header + len(content.rows) * settings.table_row_height


def _measure_image(section: Section, width: float, settings: MeasureSettings) -> float:
    content = section.content
    assert isinstance(content, ImageContent)
    return width * (content.natural_height / content.natural_width)


def _measure_custom(section: Section, width: float, settings: MeasureSettings) -> float:
    content = section.content
    assert isinstance(content, CustomContent)
    return content.height_px


_Measurer = Callable[[Section, float, MeasureSettings], float]

_MEASURERS: Dict[SectionKind, _Measurer] = {
    SectionKind.TEXT: _measure_text,
    SectionKind.MARKDOWN: _measure_text,
    SectionKind.LIST: _measure_list,
    SectionKind.TABLE: _measure_table,
    SectionKind.IMAGE: _measure_image,
    SectionKind.CUSTOM: _measure_custom,
}
assert set(_MEASURERS) == set(SectionKind)


def measure(
    section: Section,
    available_width_px: float,
    *,
    settings: MeasureSettings | None = None,
) -> int:
    """Estimate the rendered height of ``section``.

    Args:
        section: Section to measure.
        available_width_px: Width the section is laid out in.
        settings: Measurement model; defaults to ``MeasureSettings()``.
    Returns:
        Height in whole device pixels (rounded up).
    Raises:
        UnsupportedKindError: When the payload is not a known kind.

    Example:
        >>> measure(Section("s", TextContent("x" * 250)), 700)
        60
    """

    resolved = settings or MeasureSettings()
    kind = kind_of(section.content)
    height = _MEASURERS[kind](section, available_width_px, resolved)
    return math.ceil(height - 1e-9)


def minimum_split_height(
    section: Section,
    available_width_px: float,
    *,
    settings: MeasureSettings | None = None,
) -> int:
    """Return the height of the smallest head a split can produce.

    Args:
        section: Section about to be split.
        available_width_px: Layout width.
        settings: Measurement model.
    Returns:
        One line, one list item, or header plus one row. Atomic sections
        return their full height because they cannot be divided.
    """

    resolved = settings or MeasureSettings()
    if section.atomic:
        return measure(section, available_width_px, settings=resolved)
    content = section.content
    if isinstance(content, (TextContent, MarkdownContent)):
        unit = resolved.line_height
    elif isinstance(content, ListContent):
        unit = resolved.list_item_height(content.style)
    elif isinstance(content, TableContent):
        header = resolved.table_header_height if content.header is not None else 0.0
        unit = header + resolved.table_row_height
    else:
        return measure(section, available_width_px, settings=resolved)
    return math.ceil(unit - 1e-9)
