"""Exception hierarchy for docpager.

Job-level failures are limited to ``ValidationError`` (raised before any page
is rendered) and ``AssemblyError`` (nothing rendered at all). Every other
failure is absorbed into the assembled result as diagnostic metadata.
"""

from __future__ import annotations


class DocPagerError(Exception):
    """Base exception for all docpager errors."""


# Validation Errors
class ValidationError(DocPagerError):
    """Raised when a document or its layout settings are rejected."""


class SizeError(ValidationError):
    """Raised when a length or page dimension is negative, non-finite or out of bounds."""


class AspectRatioError(ValidationError):
    """Raised when page dimensions exceed the allowed aspect ratio."""

    def __init__(self, ratio: float, max_ratio: float):
        self.ratio = ratio
        self.max_ratio = max_ratio
        super().__init__(
            f"Page aspect ratio {ratio:.2f}:1 exceeds maximum {max_ratio:.2f}:1"
        )


class InvalidMarginsError(ValidationError):
    """Raised when margins are negative or leave no content area."""


class InvalidSectionError(ValidationError):
    """Raised when a section has an unknown kind or a malformed payload."""

    def __init__(self, section_id: str | None, reason: str):
        self.section_id = section_id
        label = section_id if section_id is not None else "<unknown>"
        super().__init__(f"Invalid section '{label}': {reason}")


# Measurement / splitting
class MeasurementError(DocPagerError):
    """Raised on an internal measurement invariant violation."""


class UnsupportedKindError(MeasurementError):
    """Raised when a section payload has no known kind."""

    def __init__(self, kind: object):
        self.kind = kind
        super().__init__(f"Unsupported section kind: {kind!r}")


class SplitError(DocPagerError):
    """Raised when a section cannot be divided at any valid boundary."""


# Rendering
class RenderError(DocPagerError):
    """Raised by a page renderer.

    Args:
        message: Human readable reason.
        retryable: False short-circuits remaining attempts for the page.
    """

    def __init__(self, message: str, retryable: bool = True):
        self.message = message
        self.retryable = retryable
        super().__init__(message)


class RenderTimeoutError(RenderError):
    """Raised when a single render attempt exceeds its timeout."""

    def __init__(self, page_index: int, timeout_s: float):
        self.page_index = page_index
        self.timeout_s = timeout_s
        super().__init__(
            f"Render of page {page_index} timed out after {timeout_s:g}s",
            retryable=True,
        )


class RenderCancelledError(RenderError):
    """Recorded for pages that were never dispatched because the job was cancelled."""

    def __init__(self, page_index: int):
        self.page_index = page_index
        super().__init__(f"Render of page {page_index} cancelled", retryable=False)


# Assembly
class AssemblyError(DocPagerError):
    """Raised when no page could be rendered."""
