"""Result and collaborator types for page rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union

from ..exceptions import ValidationError
from ..models import Dimensions, PageLayout


class PageRenderer(Protocol):
    """Renders one planned page into a byte buffer (a one-page PDF).

    A renderer that cannot draw many pages in parallel may set an integer
    ``max_concurrent_renders`` attribute; dispatch then starts no more
    workers than that, so no attempt's timeout is spent queueing.
    """

    async def render_page(self, layout: PageLayout, dimensions: Dimensions) -> bytes:
        """Return the rendered page; raise ``RenderError`` on failure."""


@dataclass(frozen=True, slots=True)
class Rendered:
    """A page that rendered successfully."""

    data: bytes
    attempts: int = 1


@dataclass(frozen=True, slots=True)
class Failed:
    """A page whose render attempts were exhausted, short-circuited or never started."""

    error: Exception
    attempts: int = 0


RenderResult = Union[Rendered, Failed]


@dataclass(frozen=True, slots=True)
class DispatchSettings:
    """Retry, timeout, and fan-out configuration for render dispatch.

    Args:
        concurrency: Upper bound on concurrently rendering pages.
        max_retries: Extra attempts after the first failure.
        backoff_base_s: Delay before the first retry.
        backoff_factor: Multiplier applied to the delay for each further retry.
        attempt_timeout_s: Per-attempt timeout; None disables it.
    """

    concurrency: int = 4
    max_retries: int = 2
    backoff_base_s: float = 0.25
    backoff_factor: float = 2.0
    attempt_timeout_s: float | None = 30.0

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValidationError("Render concurrency must be at least 1")
        if self.max_retries < 0:
            raise ValidationError("max_retries must be non-negative")
        if self.backoff_base_s < 0 or self.backoff_factor < 1:
            raise ValidationError("Backoff must be non-negative and non-decreasing")
        if self.attempt_timeout_s is not None and self.attempt_timeout_s <= 0:
            raise ValidationError("attempt_timeout_s must be positive")

    def backoff_delay(self, retry: int) -> float:
        """Return the sleep before retry number ``retry`` (1-based)."""

        return self.backoff_base_s * self.backoff_factor ** (retry - 1)
