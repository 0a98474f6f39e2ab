"""Page break planning: fold ordered sections into page layouts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ..exceptions import SplitError
from ..logger import get_logger
from ..models import Document, LayoutSettings, PageLayout, Placement, ProgressTracker, Section
from .pagination_constants import DEBUG_PAGINATION, EPSILON
from .pagination_measure import measure, minimum_split_height
from .pagination_settings import MeasureSettings
from .pagination_split import split_section

logger = get_logger(__name__)


@dataclass(slots=True)
class _PlanState:
    """Mutable state carried across sections while planning."""

    y: float
    column: int = 0
    placements: List[Placement] = field(default_factory=list)
    pages: List[PageLayout] = field(default_factory=list)

    @property
    def column_has_content(self) -> bool:
        return any(p.column == self.column for p in self.placements)


def _debug(*, msg: str) -> None:
    """Log pagination debug output when enabled.

    Args:
        msg: Message to log.
    Returns:
        None.
    """

    if DEBUG_PAGINATION:
        logger.debug(msg)


def _place(
    *,
    state: _PlanState,
    section: Section,
    top: float,
    height: float,
    layout: LayoutSettings,
) -> None:
    """Append a placement at ``top`` in the current column and advance ``y``."""

    state.placements.append(
        Placement(
            section=section,
            x=layout.column_x(state.column),
            y=top,
            width=layout.column_width,
            height=height,
            column=state.column,
        )
    )
    state.y = top + height
    _debug(
        msg="[place] page=%d col=%d id=%s y=%.1f h=%.1f"
        % (len(state.pages), state.column, section.id, top, height)
    )


def _close_page(*, state: _PlanState, layout: LayoutSettings) -> None:
    """Emit the open page (when non-empty) and reset to the first column."""

    if state.placements:
        state.pages.append(
            PageLayout(index=len(state.pages), placements=tuple(state.placements))
        )
        _debug(msg="[close] page=%d sections=%d" % (len(state.pages) - 1, len(state.placements)))
    state.placements = []
    state.column = 0
    state.y = layout.content_top


def _advance(*, state: _PlanState, layout: LayoutSettings) -> None:
    """Move to the next column, or to a new page after the last column."""

    if state.column + 1 < layout.columns:
        state.column += 1
        state.y = layout.content_top
        return
    _close_page(state=state, layout=layout)


def _place_section(
    *,
    state: _PlanState,
    section: Section,
    layout: LayoutSettings,
    settings: MeasureSettings,
) -> None:
    """Place one document section, splitting it across columns/pages as needed.

    Args:
        state: Planner state, updated in place.
        section: Next section in document order.
        layout: Page geometry.
        settings: Measurement model.
    Returns:
        None.
    """

    width = layout.column_width
    pending: Section | None = section
    while pending is not None:
        height = measure(pending, width, settings=settings)
        gap = layout.section_gap_px if state.column_has_content else 0.0
        top = state.y + gap
        if top + height <= layout.content_bottom + EPSILON:
            _place(state=state, section=pending, top=top, height=height, layout=layout)
            pending = None
            continue
        if pending.atomic:
            if state.column_has_content:
                _advance(state=state, layout=layout)
            _place(
                state=state, section=pending, top=state.y, height=height, layout=layout
            )
            pending = None
            continue
        if (
            not settings.split_fitting_sections
            and state.column_has_content
            and height <= layout.content_height + EPSILON
        ):
            _advance(state=state, layout=layout)
            continue
        budget = layout.content_bottom - top
        if budget + EPSILON >= minimum_split_height(pending, width, settings=settings):
            try:
                result = split_section(pending, budget, width, settings=settings)
            except SplitError as exc:
                logger.warning("Could not split section %s: %s", pending.id, exc)
                result = None
            if result is not None:
                head_height = measure(result.head, width, settings=settings)
                _place(
                    state=state,
                    section=result.head,
                    top=top,
                    height=head_height,
                    layout=layout,
                )
                pending = result.tail
                if pending is not None:
                    _advance(state=state, layout=layout)
                continue
        if state.column_has_content:
            _advance(state=state, layout=layout)
            continue
        # Nothing fits an empty column; place whole rather than loop.
        _place(state=state, section=pending, top=top, height=height, layout=layout)
        pending = None


def plan_pages(
    document: Document,
    *,
    settings: MeasureSettings | None = None,
    progress: ProgressTracker | None = None,
) -> List[PageLayout]:
    """Paginate a document into ordered page layouts.

    The result is a pure function of the document's sections and layout and
    the measurement settings.

    Args:
        document: Document to paginate.
        settings: Measurement model; defaults to ``MeasureSettings()``.
        progress: Optional tracker advanced once per source section.
    Returns:
        PageLayout objects in page order.

    Example:
        >>> from docpager.models import Dimensions, LayoutSettings, Margins, TextContent
        >>> doc = Document.from_sections(
        ...     [Section("a", TextContent("hello"))],
        ...     LayoutSettings(Dimensions(816, 1056), Margins(48, 48, 48, 48)),
        ... )
        >>> [page.section_ids for page in plan_pages(doc)]
        [['a']]
    """

    resolved = settings or MeasureSettings()
    layout = document.layout
    state = _PlanState(y=layout.content_top)
    for section in document.sections:
        _place_section(state=state, section=section, layout=layout, settings=resolved)
        if progress is not None:
            progress.update(1)
    _close_page(state=state, layout=layout)
    logger.debug("Planned %d pages for %d sections", len(state.pages), len(document.arena))
    return state.pages
