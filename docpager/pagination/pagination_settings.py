"""Heuristic constants used to estimate section heights, plus the page-break policy."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from ..exceptions import ValidationError


def _default_list_item_heights() -> Dict[str, float]:
    return {"bullet": 24.0, "ordered": 24.0, "plain": 20.0}


@dataclass(frozen=True, slots=True)
class MeasureSettings:
    """Measurement model for the planner.

    The values approximate a 12pt sans-serif face at 96 DPI. They are not
    pixel-exact for any rendering engine; override them to match the
    renderer in use.

    ``split_fitting_sections`` controls page breaks for splittable sections:
    when False, a section that would fit an empty column moves there whole
    and only taller sections are split across the break.

    Example:
        >>> MeasureSettings().chars_per_line(700)
        100
    """

    average_char_width: float = 7.0
    line_height: float = 20.0
    list_item_heights: Dict[str, float] = field(
        default_factory=_default_list_item_heights
    )
    table_header_height: float = 28.0
    table_row_height: float = 24.0
    hyphenation_lang: str | None = "en_US"
    split_fitting_sections: bool = False

    def __post_init__(self) -> None:
        if self.average_char_width <= 0 or self.line_height <= 0:
            raise ValidationError("Character width and line height must be positive")
        if self.table_row_height <= 0 or self.table_header_height < 0:
            raise ValidationError("Table row height must be positive")
        if "bullet" not in self.list_item_heights:
            raise ValidationError("List item heights need a 'bullet' entry")
        if any(height <= 0 for height in self.list_item_heights.values()):
            raise ValidationError("List item heights must be positive")

    def chars_per_line(self, width: float) -> int:
        """Return the estimated number of characters per line at ``width``."""

        return max(1, int(width // self.average_char_width))

    def list_item_height(self, style: str) -> float:
        """Return the item height for a list style, falling back to bullets."""

        return self.list_item_heights.get(style, self.list_item_heights["bullet"])
