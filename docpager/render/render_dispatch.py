"""Fan planned pages out to the renderer and collect index-aligned results."""

from __future__ import annotations

import asyncio
from typing import Iterator, List, Sequence

from ..exceptions import RenderCancelledError, RenderError, RenderTimeoutError
from ..logger import get_logger
from ..models import Dimensions, PageLayout, ProgressTracker
from .render_pool import RenderSlotPool, render_slot
from .render_types import DispatchSettings, Failed, PageRenderer, Rendered, RenderResult

logger = get_logger(__name__)


def _cancelled(cancel_event: asyncio.Event | None) -> bool:
    return cancel_event is not None and cancel_event.is_set()


async def _attempt(
    *,
    renderer: PageRenderer,
    layout: PageLayout,
    dimensions: Dimensions,
    timeout_s: float | None,
) -> bytes:
    """Run a single render attempt, bounded by ``timeout_s``."""

    call = renderer.render_page(layout, dimensions)
    if timeout_s is None:
        return await call
    return await asyncio.wait_for(call, timeout_s)


async def _render_with_retries(
    *,
    index: int,
    layout: PageLayout,
    renderer: PageRenderer,
    dimensions: Dimensions,
    settings: DispatchSettings,
    pool: RenderSlotPool | None,
    cancel_event: asyncio.Event | None,
) -> RenderResult:
    """Render one page, retrying retryable failures with increasing backoff.

    Args:
        index: Page position, used for diagnostics only.
        layout: Page to render.
        renderer: Rendering collaborator.
        dimensions: Page size.
        settings: Retry and timeout configuration.
        pool: Optional slot pool; one slot is held per attempt.
        cancel_event: Job cancellation signal; stops further retries.
    Returns:
        ``Rendered`` or ``Failed`` for this page.
    """

    attempt = 0
    while True:
        attempt += 1
        try:
            async with render_slot(pool):
                data = await _attempt(
                    renderer=renderer,
                    layout=layout,
                    dimensions=dimensions,
                    timeout_s=settings.attempt_timeout_s,
                )
            return Rendered(data=data, attempts=attempt)
        except RenderError as exc:
            error: RenderError = exc
        except asyncio.TimeoutError:
            error = RenderTimeoutError(index, settings.attempt_timeout_s or 0.0)
        except Exception as exc:
            error = RenderError(f"{type(exc).__name__}: {exc}", retryable=True)
            error.__cause__ = exc

        if not error.retryable:
            logger.error("Page %d failed permanently (not retryable): %s", index, error)
            return Failed(error=error, attempts=attempt)
        if attempt > settings.max_retries:
            logger.error(
                "Page %d failed after %d attempts: %s", index, attempt, error
            )
            return Failed(error=error, attempts=attempt)
        if _cancelled(cancel_event):
            logger.warning("Page %d not retried, job cancelled: %s", index, error)
            return Failed(error=error, attempts=attempt)
        delay = settings.backoff_delay(attempt)
        logger.warning(
            "Page %d attempt %d failed (%s); retrying in %.2fs",
            index,
            attempt,
            error,
            delay,
        )
        await asyncio.sleep(delay)


async def render_all(
    layouts: Sequence[PageLayout],
    *,
    renderer: PageRenderer,
    dimensions: Dimensions,
    settings: DispatchSettings | None = None,
    pool: RenderSlotPool | None = None,
    cancel_event: asyncio.Event | None = None,
    progress: ProgressTracker | None = None,
) -> List[RenderResult]:
    """Render every layout, returning results aligned with ``layouts``.

    Workers (``min(concurrency, len(layouts))``, further capped by the
    renderer's ``max_concurrent_renders`` when it declares one) pull page
    indices in order and write each outcome into its own slot of the result
    list, so output order never depends on completion order. A failed page
    never aborts the batch. Once ``cancel_event`` is set no new page is
    dispatched; pages that were never started become
    ``Failed(RenderCancelledError)``.

    Args:
        layouts: Planned pages.
        renderer: Rendering collaborator.
        dimensions: Page size passed to every render call.
        settings: Dispatch configuration.
        pool: Optional slot pool owned by the renderer's owner.
        cancel_event: Optional job-level cancellation signal.
        progress: Optional tracker advanced once per finished page.
    Returns:
        One RenderResult per layout, index-aligned.
    """

    resolved = settings or DispatchSettings()
    results: List[RenderResult | None] = [None] * len(layouts)
    if not layouts:
        return []
    pending: Iterator[int] = iter(range(len(layouts)))

    async def worker() -> None:
        for index in pending:
            if _cancelled(cancel_event):
                results[index] = Failed(error=RenderCancelledError(index))
            else:
                results[index] = await _render_with_retries(
                    index=index,
                    layout=layouts[index],
                    renderer=renderer,
                    dimensions=dimensions,
                    settings=resolved,
                    pool=pool,
                    cancel_event=cancel_event,
                )
            if progress is not None:
                progress.update(1)

    workers = min(resolved.concurrency, len(layouts))
    renderer_limit = getattr(renderer, "max_concurrent_renders", None)
    if renderer_limit is not None and renderer_limit < workers:
        logger.debug("Renderer draws at most %d pages at once", renderer_limit)
        workers = max(1, renderer_limit)
    await asyncio.gather(*(worker() for _ in range(workers)))
    failed = sum(1 for result in results if isinstance(result, Failed))
    if failed:
        logger.warning("%d of %d pages failed to render", failed, len(layouts))
    return [result for result in results if result is not None]


def render_all_sync(
    layouts: Sequence[PageLayout],
    *,
    renderer: PageRenderer,
    dimensions: Dimensions,
    settings: DispatchSettings | None = None,
    pool: RenderSlotPool | None = None,
) -> List[RenderResult]:
    """Blocking wrapper around ``render_all`` for non-async callers."""

    return asyncio.run(
        render_all(
            layouts,
            renderer=renderer,
            dimensions=dimensions,
            settings=settings,
            pool=pool,
        )
    )
