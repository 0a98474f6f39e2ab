"""
Pytest configuration for docpager
"""

import asyncio
import logging
import sys
from io import BytesIO
from pathlib import Path
from typing import Dict, List

import pytest
from reportlab.pdfgen import canvas

from docpager.models import (
    Dimensions,
    Document,
    LayoutSettings,
    Margins,
    PageLayout,
    Section,
    TextContent,
)

LETTER = Dimensions(816, 1056)
# Letter with 48px margins: 720px wide (102 chars per line), 960px tall.
CONTENT_WIDTH = 720
CHARS_PER_LINE = 102
SAMPLE = Path(__file__).resolve().parent.parent / "samples" / "report.json"


@pytest.fixture(autouse=True)
def configure_logging():
    """Console-only logging at WARNING for tests."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(name)s - %(levelname)s - %(message)s"))

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    root_logger.handlers.clear()


def make_layout(margin: float = 48, **kwargs) -> LayoutSettings:
    """Letter layout with equal margins."""
    return LayoutSettings(
        dimensions=kwargs.pop("dimensions", LETTER),
        margins=Margins(margin, margin, margin, margin),
        **kwargs,
    )


def text_of_height(height_px: int, word: str = "abcd") -> str:
    """Return word-separated text that measures ``height_px`` at 720px wide."""
    lines = height_px // 20
    length = lines * CHARS_PER_LINE
    unit = word + " "
    return (unit * (length // len(unit) + 1))[:length]


def text_section(section_id: str, height_px: int, **kwargs) -> Section:
    return Section(section_id, TextContent(text_of_height(height_px)), **kwargs)


def make_document(sections: List[Section], **layout_kwargs) -> Document:
    return Document.from_sections(sections, make_layout(**layout_kwargs))


def page_pdf_bytes(label: str, dimensions: Dimensions = LETTER) -> bytes:
    """A one-page PDF with ``label`` drawn on it."""
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(dimensions.width_px * 0.75, dimensions.height_px * 0.75))
    pdf.drawString(72, 400, label)
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


class ProgressCounter:
    """tqdm stand-in counting updates."""

    def __init__(self):
        self.count = 0

    def update(self, n=1):
        self.count += n


def blank_layouts(count: int) -> List[PageLayout]:
    return [PageLayout(index=i, placements=()) for i in range(count)]


class FakeRenderer:
    """Async renderer double.

    Args:
        failures: Page index -> exceptions raised by successive attempts.
        delays: Page index -> seconds to sleep before answering.
    """

    def __init__(self, failures: Dict[int, List[Exception]] | None = None, delays: Dict[int, float] | None = None):
        self.failures = {k: list(v) for k, v in (failures or {}).items()}
        self.delays = delays or {}
        self.calls: Dict[int, int] = {}
        self.active = 0
        self.peak_active = 0

    async def render_page(self, layout: PageLayout, dimensions: Dimensions) -> bytes:
        self.calls[layout.index] = self.calls.get(layout.index, 0) + 1
        self.active += 1
        self.peak_active = max(self.peak_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(layout.index, 0))
            pending = self.failures.get(layout.index)
            if pending:
                raise pending.pop(0)
            return page_pdf_bytes(f"content page {layout.index}", dimensions)
        finally:
            self.active -= 1


@pytest.fixture
def layout():
    return make_layout()


@pytest.fixture
def fake_renderer():
    return FakeRenderer()
