"""
Helpers that turn the JSON input shape into typed Document objects.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Tuple

from .exceptions import InvalidSectionError, ValidationError
from .models import (
    CustomContent,
    Document,
    ImageContent,
    LayoutSettings,
    ListContent,
    Margins,
    MarkdownContent,
    Section,
    SectionContent,
    SectionKind,
    TableContent,
    TextContent,
)
from .units import resolve_dimensions


def _text_field(*, section_id: str, content: Any, key: str) -> str:
    """Return a string payload given either as a bare string or ``{key: str}``.

    Example:
        >>> _text_field(section_id="a", content={"text": "Hi"}, key="text")
        'Hi'
    """

    if isinstance(content, Mapping):
        content = content.get(key)
    if not isinstance(content, str):
        raise InvalidSectionError(section_id, f"'{key}' must be a string")
    return content


def _text(section_id: str, content: Any) -> TextContent:
    return TextContent(_text_field(section_id=section_id, content=content, key="text"))


def _markdown(section_id: str, content: Any) -> MarkdownContent:
    return MarkdownContent(
        _text_field(section_id=section_id, content=content, key="source")
    )


def _list(section_id: str, content: Any) -> ListContent:
    """Parse a list payload: a bare list of items or ``{items, style, start}``."""

    if isinstance(content, list):
        content = {"items": content}
    if not isinstance(content, Mapping) or not isinstance(content.get("items"), list):
        raise InvalidSectionError(section_id, "list content needs an 'items' array")
    try:
        start = int(content.get("start", 1))
    except (TypeError, ValueError) as exc:
        raise InvalidSectionError(section_id, "'start' must be an integer") from exc
    return ListContent(
        items=tuple(str(item) for item in content["items"]),
        style=str(content.get("style", "bullet")),
        start=start,
    )


def _row(section_id: str, row: Any) -> Tuple[str, ...]:
    if not isinstance(row, list):
        raise InvalidSectionError(section_id, "table rows must be arrays of cells")
    return tuple("" if cell is None else str(cell) for cell in row)


def _table(section_id: str, content: Any) -> TableContent:
    if not isinstance(content, Mapping) or not isinstance(content.get("rows"), list):
        raise InvalidSectionError(section_id, "table content needs a 'rows' array")
    header = content.get("header")
    return TableContent(
        rows=tuple(_row(section_id, row) for row in content["rows"]),
        header=_row(section_id, header) if header is not None else None,
        repeat_header=bool(content.get("repeatHeader", True)),
    )


def _image(section_id: str, content: Any) -> ImageContent:
    if not isinstance(content, Mapping):
        raise InvalidSectionError(section_id, "image content must be an object")
    try:
        return ImageContent(
            src=str(content["src"]),
            natural_width=float(content["naturalWidth"]),
            natural_height=float(content["naturalHeight"]),
            alt=str(content.get("alt", "")),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidSectionError(
            section_id, f"image content needs src, naturalWidth, naturalHeight ({exc})"
        ) from exc


def _custom(section_id: str, content: Any) -> CustomContent:
    if not isinstance(content, Mapping) or "heightPx" not in content:
        raise InvalidSectionError(section_id, "custom content needs 'heightPx'")
    try:
        height = float(content["heightPx"])
    except (TypeError, ValueError) as exc:
        raise InvalidSectionError(section_id, "'heightPx' must be a number") from exc
    return CustomContent(
        height_px=height,
        payload=content.get("payload"),
        label=str(content.get("label", "")),
    )


_PARSERS: Dict[SectionKind, Callable[[str, Any], SectionContent]] = {
    SectionKind.TEXT: _text,
    SectionKind.MARKDOWN: _markdown,
    SectionKind.LIST: _list,
    SectionKind.TABLE: _table,
    SectionKind.IMAGE: _image,
    SectionKind.CUSTOM: _custom,
}
assert set(_PARSERS) == set(SectionKind)


def section_from_mapping(data: Mapping[str, Any]) -> Section:
    """Build a Section from ``{id, kind, content, atomic?}``.

    Raises:
        InvalidSectionError: For a missing id, an unknown kind or a malformed payload.

    Example:
        >>> section_from_mapping({"id": "s1", "kind": "text", "content": "Hi"}).kind
        <SectionKind.TEXT: 'text'>
    """

    section_id = data.get("id")
    if not isinstance(section_id, str) or not section_id:
        raise InvalidSectionError(None, "section id must be a non-empty string")
    try:
        kind = SectionKind(data.get("kind"))
    except ValueError:
        raise InvalidSectionError(
            section_id, f"unsupported kind {data.get('kind')!r}"
        ) from None
    content = _PARSERS[kind](section_id, data.get("content"))
    atomic = data.get("atomic")
    return Section(
        id=section_id,
        content=content,
        atomic=None if atomic is None else bool(atomic),
    )


def _layout_number(value: Any, *, key: str, cast: Callable[[Any], Any] = float):
    """Convert a layout field, raising ValidationError for non-numeric input."""

    if isinstance(value, bool):
        raise ValidationError(f"'{key}' must be a number, got {value!r}")
    try:
        return cast(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"'{key}' must be a number, got {value!r}") from exc


def _margins(value: Any) -> Margins:
    """Parse ``marginsPx`` given as one number or ``{top, right, bottom, left}``."""

    if value is None:
        return Margins()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return Margins(value, value, value, value)
    if not isinstance(value, Mapping):
        raise ValidationError(f"marginsPx must be a number or an object, got {value!r}")
    return Margins(
        **{
            side: _layout_number(value.get(side, 0), key=f"marginsPx.{side}")
            for side in ("top", "right", "bottom", "left")
        }
    )


def layout_from_mapping(
    layout: Mapping[str, Any], custom: Mapping[str, Any] | None = None
) -> LayoutSettings:
    """Build LayoutSettings from the ``layout`` object and optional custom size."""

    dimensions = resolve_dimensions(
        str(layout.get("format", "letter")),
        custom,
        landscape=bool(layout.get("landscape", False)),
    )
    return LayoutSettings(
        dimensions=dimensions,
        margins=_margins(layout.get("marginsPx")),
        section_gap_px=_layout_number(layout.get("sectionGapPx", 0), key="sectionGapPx"),
        column_gap_px=_layout_number(layout.get("columnGapPx", 0), key="columnGapPx"),
        columns=_layout_number(layout.get("columns", 1), key="columns", cast=int),
    )


def document_from_mapping(data: Mapping[str, Any]) -> Document:
    """Create a Document from the parsed input shape.

    Args:
        data: ``{sections, layout, customDimensions?, title?}``.
    Returns:
        Document with its sections in input order.
    Raises:
        ValidationError: For malformed layouts, sizes or sections.
    """

    if not isinstance(data, Mapping):
        raise ValidationError("Document description must be a JSON object")
    sections = data.get("sections")
    if not isinstance(sections, list):
        raise ValidationError("Document needs a 'sections' array")
    layout = data.get("layout") or {}
    if not isinstance(layout, Mapping):
        raise ValidationError("'layout' must be an object")
    for entry in sections:
        if not isinstance(entry, Mapping):
            raise InvalidSectionError(None, "section entries must be objects")
    return Document.from_sections(
        [section_from_mapping(entry) for entry in sections],
        layout_from_mapping(layout, data.get("customDimensions")),
        title=data.get("title"),
    )


def load_document(path: Path) -> Document:
    """Load a JSON document description from ``path``.

    Example:
        >>> load_document(Path('samples/report.json'))  # doctest: +SKIP
    """

    try:
        data = json.loads(Path(path).read_text())
    except json.JSONDecodeError as exc:
        raise ValidationError(f"{path} is not valid JSON: {exc}") from exc
    return document_from_mapping(data)
