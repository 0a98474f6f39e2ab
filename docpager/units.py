"""Unit conversion and page-size validation for device pixels."""

from __future__ import annotations

import math
from typing import Mapping

from .exceptions import AspectRatioError, SizeError, ValidationError
from .models import Dimensions

DEFAULT_DPI = 96
POINTS_PER_INCH = 72
MM_PER_INCH = 25.4
MIN_PAGE_SIZE = 72
MAX_PAGE_SIZE = 7200
DEFAULT_MAX_ASPECT_RATIO = 3.0

# Device-pixel page sizes at 96 DPI.
PAGE_FORMATS: Mapping[str, Dimensions] = {
    "letter": Dimensions(816, 1056),
    "legal": Dimensions(816, 1344),
    "a4": Dimensions(794, 1123),
    "tabloid": Dimensions(1056, 1632),
    "a3": Dimensions(1123, 1587),
    "a5": Dimensions(559, 794),
}

_INCHES_PER_UNIT = {
    "in": 1.0,
    "mm": 1.0 / MM_PER_INCH,
    "cm": 10.0 / MM_PER_INCH,
    "pt": 1.0 / POINTS_PER_INCH,
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def to_pixels(value: float, unit: str, dpi: float = DEFAULT_DPI) -> int:
    """Convert a length to device pixels, rounded to the nearest pixel.

    Args:
        value: Length in ``unit``.
        unit: One of ``px``, ``pt``, ``in``, ``mm``, ``cm``.
        dpi: Device resolution.
    Returns:
        Whole device pixels.
    Raises:
        SizeError: For negative or non-finite values, a non-positive dpi or an
            unknown unit.

    Example:
        >>> to_pixels(1, "in")
        96
        >>> to_pixels(210, "mm")
        794
    """

    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise SizeError(f"Length must be a finite number, got {value!r}")
    if value < 0:
        raise SizeError(f"Length must be non-negative, got {value!r}")
    if not math.isfinite(dpi) or dpi <= 0:
        raise SizeError(f"DPI must be positive, got {dpi!r}")
    normalized = unit.strip().lower()
    if normalized == "px":
        return _round_half_up(value)
    if normalized not in _INCHES_PER_UNIT:
        raise SizeError(f"Unknown unit {unit!r}")
    return _round_half_up(value * _INCHES_PER_UNIT[normalized] * dpi)


def px_to_points(px: float, dpi: float = DEFAULT_DPI) -> float:
    """Return PDF points for a device-pixel length."""

    return px * POINTS_PER_INCH / dpi


def validate_dimensions(
    width_px: float,
    height_px: float,
    *,
    max_aspect_ratio: float = DEFAULT_MAX_ASPECT_RATIO,
) -> ValidationError | None:
    """Check page dimensions against the size bounds and aspect ratio.

    Args:
        width_px: Page width in device pixels.
        height_px: Page height in device pixels.
        max_aspect_ratio: Largest accepted ``long side / short side``.
    Returns:
        ``None`` when valid, otherwise the ``SizeError`` or
        ``AspectRatioError`` describing the violation. Nothing is clamped.
    """

    for label, value in (("width", width_px), ("height", height_px)):
        if not isinstance(value, (int, float)) or not math.isfinite(value):
            return SizeError(f"Page {label} must be a finite number, got {value!r}")
        if not MIN_PAGE_SIZE <= value <= MAX_PAGE_SIZE:
            return SizeError(
                f"Page {label} {value}px outside [{MIN_PAGE_SIZE}, {MAX_PAGE_SIZE}]"
            )
    ratio = max(width_px, height_px) / min(width_px, height_px)
    if ratio > max_aspect_ratio:
        return AspectRatioError(ratio, max_aspect_ratio)
    return None


def require_valid_dimensions(
    dimensions: Dimensions,
    *,
    max_aspect_ratio: float = DEFAULT_MAX_ASPECT_RATIO,
) -> Dimensions:
    """Return ``dimensions`` unchanged or raise the validation error."""

    error = validate_dimensions(
        dimensions.width_px,
        dimensions.height_px,
        max_aspect_ratio=max_aspect_ratio,
    )
    if error is not None:
        raise error
    return dimensions


def resolve_dimensions(
    page_format: str,
    custom: Mapping[str, object] | None = None,
    *,
    landscape: bool = False,
    dpi: float = DEFAULT_DPI,
    max_aspect_ratio: float = DEFAULT_MAX_ASPECT_RATIO,
) -> Dimensions:
    """Return validated page dimensions for a named format or a custom size.

    Args:
        page_format: Catalog key or ``"custom"``.
        custom: ``{"width": ..., "height": ..., "unit": ...}`` for custom pages.
        landscape: Swap width and height.
        dpi: Resolution used to convert custom sizes.
        max_aspect_ratio: Aspect ratio limit passed to validation.
    Returns:
        Dimensions in device pixels.
    Raises:
        ValidationError: For unknown formats or invalid sizes.
    """

    key = page_format.strip().lower()
    if key == "custom":
        if not custom:
            raise ValidationError("Format 'custom' requires customDimensions")
        unit = str(custom.get("unit", "px"))
        dims = Dimensions(
            width_px=to_pixels(_number(custom.get("width")), unit, dpi),
            height_px=to_pixels(_number(custom.get("height")), unit, dpi),
        )
    elif key in PAGE_FORMATS:
        dims = PAGE_FORMATS[key]
    else:
        known = ", ".join(sorted([*PAGE_FORMATS, "custom"]))
        raise ValidationError(f"Unknown page format {page_format!r} (expected {known})")
    if landscape:
        dims = Dimensions(width_px=dims.height_px, height_px=dims.width_px)
    return require_valid_dimensions(dims, max_aspect_ratio=max_aspect_ratio)


def _number(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SizeError(f"Custom dimension must be a number, got {value!r}")
    return float(value)
