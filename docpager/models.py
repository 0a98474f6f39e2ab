"""
Typed containers for documents, sections, and planned page layouts.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Protocol, Tuple

from .exceptions import InvalidSectionError, UnsupportedKindError


class SectionKind(str, Enum):
    """Closed set of section kinds."""

    TEXT = "text"
    MARKDOWN = "markdown"
    TABLE = "table"
    IMAGE = "image"
    LIST = "list"
    CUSTOM = "custom"


ATOMIC_KINDS = frozenset({SectionKind.IMAGE, SectionKind.CUSTOM})
LIST_STYLES = ("bullet", "ordered", "plain")


@dataclass(frozen=True, slots=True)
class TextContent:
    """Plain text paragraph."""

    text: str


@dataclass(frozen=True, slots=True)
class MarkdownContent:
    """Markdown source; measured and split like plain text."""

    source: str


@dataclass(frozen=True, slots=True)
class ListContent:
    """List items in display order.

    Attributes:
        items: Item texts.
        style: ``bullet``, ``ordered`` or ``plain``.
        start: Number of the first item; continued lists start past 1.
    """

    items: Tuple[str, ...]
    style: str = "bullet"
    start: int = 1


@dataclass(frozen=True, slots=True)
class TableContent:
    """Table rows with an optional header row.

    Attributes:
        rows: Body rows, each a tuple of cell strings.
        header: Header cells, or None.
        repeat_header: Repeat the header on continuation parts after a split.
    """

    rows: Tuple[Tuple[str, ...], ...]
    header: Tuple[str, ...] | None = None
    repeat_header: bool = True


@dataclass(frozen=True, slots=True)
class ImageContent:
    """Image scaled to the available width, preserving aspect ratio."""

    src: str
    natural_width: float
    natural_height: float
    alt: str = ""


@dataclass(frozen=True, slots=True)
class CustomContent:
    """Opaque payload whose height is supplied by the caller."""

    height_px: float
    payload: Any = None
    label: str = ""


SectionContent = (
    TextContent
    | MarkdownContent
    | ListContent
    | TableContent
    | ImageContent
    | CustomContent
)

_KIND_BY_CONTENT: Dict[type, SectionKind] = {
    TextContent: SectionKind.TEXT,
    MarkdownContent: SectionKind.MARKDOWN,
    ListContent: SectionKind.LIST,
    TableContent: SectionKind.TABLE,
    ImageContent: SectionKind.IMAGE,
    CustomContent: SectionKind.CUSTOM,
}
assert set(_KIND_BY_CONTENT.values()) == set(SectionKind)


def kind_of(content: object) -> SectionKind:
    """Return the SectionKind for a payload.

    Raises:
        UnsupportedKindError: When the payload type is not part of the closed set.
    """

    kind = _KIND_BY_CONTENT.get(type(content))
    if kind is None:
        raise UnsupportedKindError(type(content).__name__)
    return kind


@dataclass(frozen=True, slots=True)
class Section:
    """Smallest unit of document content.

    Attributes:
        id: Unique id within the document.
        content: Kind-specific payload; the kind is derived from its type.
        atomic: Never split across pages. Defaults to True for images and
            custom sections, False otherwise.
        source_id: Id of the section this part was split from.
        part: Part number of a split section (0 for unsplit sections).

    Example:
        >>> Section("intro", TextContent("Hello")).atomic
        False
        >>> Section("logo", ImageContent("logo.png", 100, 50)).atomic
        True
    """

    id: str
    content: SectionContent
    atomic: bool | None = None
    source_id: str | None = None
    part: int = 0

    def __post_init__(self) -> None:
        if self.atomic is None:
            kind = _KIND_BY_CONTENT.get(type(self.content))
            object.__setattr__(self, "atomic", kind in ATOMIC_KINDS)

    @property
    def kind(self) -> SectionKind:
        return kind_of(self.content)

    @property
    def origin_id(self) -> str:
        """Return the id of the unsplit section this one derives from."""

        return self.source_id or self.id

    def with_part(self, *, content: SectionContent, part: int) -> "Section":
        """Return a split part of this section carrying ``content``."""

        origin = self.origin_id
        return replace(
            self,
            id=f"{origin}#{part}",
            content=content,
            source_id=origin,
            part=part,
        )


@dataclass(frozen=True, slots=True)
class SectionArena:
    """Sections addressed by id in document order.

    Edits return a new arena that shares every untouched Section instead of
    copying the tree.
    """

    order: Tuple[str, ...] = ()
    entries: Mapping[str, Section] = field(default_factory=dict)

    @classmethod
    def from_sections(cls, sections: Iterable[Section]) -> "SectionArena":
        """Build an arena, rejecting duplicate ids."""

        order: List[str] = []
        entries: Dict[str, Section] = {}
        for section in sections:
            if section.id in entries:
                raise InvalidSectionError(section.id, "duplicate section id")
            order.append(section.id)
            entries[section.id] = section
        return cls(order=tuple(order), entries=entries)

    def __len__(self) -> int:
        return len(self.order)

    def __iter__(self) -> Iterator[Section]:
        return (self.entries[section_id] for section_id in self.order)

    def __contains__(self, section_id: object) -> bool:
        return section_id in self.entries

    def get(self, section_id: str) -> Section:
        try:
            return self.entries[section_id]
        except KeyError:
            raise InvalidSectionError(section_id, "no such section") from None

    def replace(self, section_id: str, section: Section) -> "SectionArena":
        """Return an arena where ``section_id`` is replaced by ``section``."""

        self.get(section_id)
        if section.id != section_id and section.id in self.entries:
            raise InvalidSectionError(section.id, "duplicate section id")
        entries = {k: v for k, v in self.entries.items() if k != section_id}
        entries[section.id] = section
        order = tuple(section.id if k == section_id else k for k in self.order)
        return SectionArena(order=order, entries=entries)

    def insert(self, index: int, section: Section) -> "SectionArena":
        """Return an arena with ``section`` inserted at position ``index``."""

        if section.id in self.entries:
            raise InvalidSectionError(section.id, "duplicate section id")
        order = list(self.order)
        order.insert(index, section.id)
        return SectionArena(
            order=tuple(order), entries={**self.entries, section.id: section}
        )

    def remove(self, section_id: str) -> "SectionArena":
        """Return an arena without ``section_id``."""

        self.get(section_id)
        return SectionArena(
            order=tuple(k for k in self.order if k != section_id),
            entries={k: v for k, v in self.entries.items() if k != section_id},
        )


@dataclass(frozen=True, slots=True)
class Dimensions:
    """Page size in device pixels."""

    width_px: int
    height_px: int


@dataclass(frozen=True, slots=True)
class Margins:
    """Non-negative page insets in device pixels."""

    top: float = 0
    right: float = 0
    bottom: float = 0
    left: float = 0


@dataclass(frozen=True, slots=True)
class LayoutSettings:
    """Page geometry used by the planner.

    Example:
        >>> settings = LayoutSettings(Dimensions(816, 1056), Margins(48, 48, 48, 48))
        >>> settings.content_height
        960
    """

    dimensions: Dimensions
    margins: Margins = Margins()
    section_gap_px: float = 0
    column_gap_px: float = 0
    columns: int = 1

    @property
    def content_width(self) -> float:
        return self.dimensions.width_px - self.margins.left - self.margins.right

    @property
    def content_height(self) -> float:
        return self.dimensions.height_px - self.margins.top - self.margins.bottom

    @property
    def content_top(self) -> float:
        return self.margins.top

    @property
    def content_bottom(self) -> float:
        return self.dimensions.height_px - self.margins.bottom

    @property
    def column_width(self) -> float:
        """Return the width of one column inside the content area."""

        gaps = self.column_gap_px * (self.columns - 1)
        return (self.content_width - gaps) / self.columns

    def column_x(self, column: int) -> float:
        """Return the left edge of ``column``."""

        return self.margins.left + column * (self.column_width + self.column_gap_px)


@dataclass(frozen=True, slots=True)
class Document:
    """Ordered sections plus the layout they are paginated against."""

    arena: SectionArena
    layout: LayoutSettings
    title: str | None = None

    @classmethod
    def from_sections(
        cls,
        sections: Iterable[Section],
        layout: LayoutSettings,
        title: str | None = None,
    ) -> "Document":
        return cls(arena=SectionArena.from_sections(sections), layout=layout, title=title)

    @property
    def sections(self) -> Tuple[Section, ...]:
        return tuple(self.arena)

    def replace_section(self, section_id: str, section: Section) -> "Document":
        return replace(self, arena=self.arena.replace(section_id, section))

    def insert_section(self, index: int, section: Section) -> "Document":
        return replace(self, arena=self.arena.insert(index, section))

    def remove_section(self, section_id: str) -> "Document":
        return replace(self, arena=self.arena.remove(section_id))


@dataclass(frozen=True, slots=True)
class Placement:
    """A section positioned on a page (top-left origin, device pixels)."""

    section: Section
    x: float
    y: float
    width: float
    height: float
    column: int = 0

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True, slots=True)
class PageLayout:
    """Ordered placements belonging to one page."""

    index: int
    placements: Tuple[Placement, ...]

    @property
    def section_ids(self) -> List[str]:
        return [placement.section.id for placement in self.placements]

    @property
    def bottom(self) -> float:
        """Return the lowest placed edge on the page."""

        return max((p.bottom for p in self.placements), default=0.0)

    def __len__(self) -> int:
        return len(self.placements)


class ProgressTracker(Protocol):
    """Anything with a tqdm-style ``update``; advanced as planning or rendering proceeds."""

    def update(self, n: int | float = 1) -> object:
        """Advance the progress tracker by ``n``."""
