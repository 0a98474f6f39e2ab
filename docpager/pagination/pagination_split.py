"""Divide non-atomic sections at a page boundary."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Callable, Dict

from pyphen import Pyphen

from ..exceptions import SplitError
from ..models import (
    ListContent,
    MarkdownContent,
    Section,
    SectionKind,
    TableContent,
    TextContent,
    kind_of,
)
from .pagination_constants import EPSILON
from .pagination_measure import measure, section_text
from .pagination_settings import MeasureSettings


@dataclass(frozen=True, slots=True)
class SplitResult:
    """Outcome of a split.

    Attributes:
        head: Part that fits the budget (the original section when it all fits).
        tail: Remainder, or None when nothing is left over.
        boundary: Whitespace character dropped at a text cut ("" otherwise).
    """

    head: Section
    tail: Section | None
    boundary: str = ""


@dataclass(frozen=True, slots=True)
class _TextCut:
    head: str
    tail: str
    boundary: str


@lru_cache(maxsize=8)
def _hyphenator(lang: str) -> Pyphen:
    return Pyphen(lang=lang)


def _units_within(budget: float, unit: float) -> int:
    return int(math.floor(budget / unit + EPSILON))


def _whitespace_cut(*, text: str, cut: int) -> _TextCut | None:
    """Return the cut at the nearest whitespace at or before ``cut``."""

    for idx in range(cut, 0, -1):
        if text[idx].isspace():
            return _TextCut(head=text[:idx], tail=text[idx + 1 :], boundary=text[idx])
    return None


def _hyphenation_cut(*, text: str, cut: int, lang: str | None) -> _TextCut | None:
    """Return a cut at a syllable boundary of the word crossing ``cut``.

    No hyphen character is inserted into the content.
    """

    if not lang:
        return None
    start = 1 if text[:1].isspace() else 0
    end = cut
    while end < len(text) and not text[end].isspace():
        end += 1
    word = text[start:end]
    positions = [
        pos for pos in _hyphenator(lang).positions(word) if 0 < start + pos <= cut
    ]
    if not positions:
        return None
    idx = start + max(positions)
    return _TextCut(head=text[:idx], tail=text[idx:], boundary="")


def _with_text(content: TextContent | MarkdownContent, value: str):
    if isinstance(content, TextContent):
        return replace(content, text=value)
    return replace(content, source=value)


def _part_numbers(section: Section) -> tuple[int, int]:
    head = max(section.part, 1)
    return head, head + 1


def _split_text(
    section: Section, budget: float, width: float, settings: MeasureSettings
) -> SplitResult:
    text = section_text(section)
    lines = _units_within(budget, settings.line_height)
    if lines < 1:
        raise SplitError(
            f"Section '{section.id}': budget {budget:.1f}px holds no text line"
        )
    cut_index = lines * settings.chars_per_line(width)
    if cut_index >= len(text):
        return SplitResult(head=section, tail=None)
    cut = (
        _whitespace_cut(text=text, cut=cut_index)
        or _hyphenation_cut(text=text, cut=cut_index, lang=settings.hyphenation_lang)
        or _TextCut(head=text[:cut_index], tail=text[cut_index:], boundary="")
    )
    content = section.content
    assert isinstance(content, (TextContent, MarkdownContent))
    head_part, tail_part = _part_numbers(section)
    head = section.with_part(content=_with_text(content, cut.head), part=head_part)
    if not cut.tail:
        return SplitResult(head=head, tail=None, boundary=cut.boundary)
    tail = section.with_part(content=_with_text(content, cut.tail), part=tail_part)
    return SplitResult(head=head, tail=tail, boundary=cut.boundary)


def _split_table(
    section: Section, budget: float, width: float, settings: MeasureSettings
) -> SplitResult:
    content = section.content
    assert isinstance(content, TableContent)
    header = settings.table_header_height if content.header is not None else 0.0
    rows = _units_within(budget - header, settings.table_row_height)
    if rows >= len(content.rows):
        return SplitResult(head=section, tail=None)
    if rows < 1:
        raise SplitError(
            f"Section '{section.id}': budget {budget:.1f}px holds no table row"
        )
    head_part, tail_part = _part_numbers(section)
    head = section.with_part(
        content=replace(content, rows=content.rows[:rows]), part=head_part
    )
    tail = section.with_part(
        content=replace(
            content,
            rows=content.rows[rows:],
            header=content.header if content.repeat_header else None,
        ),
        part=tail_part,
    )
    return SplitResult(head=head, tail=tail)


def _split_list(
    section: Section, budget: float, width: float, settings: MeasureSettings
) -> SplitResult:
    content = section.content
    assert isinstance(content, ListContent)
    items = _units_within(budget, settings.list_item_height(content.style))
    if items >= len(content.items):
        return SplitResult(head=section, tail=None)
    if items < 1:
        raise SplitError(
            f"Section '{section.id}': budget {budget:.1f}px holds no list item"
        )
    head_part, tail_part = _part_numbers(section)
    head = section.with_part(
        content=replace(content, items=content.items[:items]), part=head_part
    )
    tail = section.with_part(
        content=replace(
            content, items=content.items[items:], start=content.start + items
        ),
        part=tail_part,
    )
    return SplitResult(head=head, tail=tail)


_Splitter = Callable[[Section, float, float, MeasureSettings], SplitResult]

_SPLITTERS: Dict[SectionKind, _Splitter] = {
    SectionKind.TEXT: _split_text,
    SectionKind.MARKDOWN: _split_text,
    SectionKind.TABLE: _split_table,
    SectionKind.LIST: _split_list,
}


def split_section(
    section: Section,
    budget_height_px: float,
    available_width_px: float,
    *,
    settings: MeasureSettings | None = None,
) -> SplitResult:
    """Split ``section`` so that the head fits ``budget_height_px``.

    Text is cut at the nearest whitespace before the budget's character
    index, then at a hyphenation point of the crossing word, and finally at
    the index itself. Tables split between rows and lists between items.

    Args:
        section: Non-atomic section to split.
        budget_height_px: Height still available on the page.
        available_width_px: Layout width.
        settings: Measurement model.
    Returns:
        SplitResult whose ``tail`` is None when the section already fits.
    Raises:
        SplitError: For atomic sections, or when not even one line, row or
            item fits the budget.
    """

    resolved = settings or MeasureSettings()
    if section.atomic:
        raise SplitError(f"Section '{section.id}' is atomic and cannot be split")
    kind = kind_of(section.content)
    splitter = _SPLITTERS.get(kind)
    if splitter is None:
        raise SplitError(f"Section '{section.id}' of kind {kind.value} cannot be split")
    if measure(section, available_width_px, settings=resolved) <= budget_height_px:
        return SplitResult(head=section, tail=None)
    return splitter(section, budget_height_px, available_width_px, resolved)
