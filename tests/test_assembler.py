"""
Tests for merging render results into the final PDF.
"""

from io import BytesIO

import pypdf
import pytest

from docpager.exceptions import AssemblyError, RenderError
from docpager.pdf.pdf_assembler import (
    AssemblyOptions,
    DocumentMetadata,
    TocEntry,
    assemble,
)
from docpager.pdf.pdf_pages import page_number_overlay, placeholder_page_bytes, toc_page_bytes
from docpager.render.render_types import Failed, Rendered

from conftest import LETTER, page_pdf_bytes


def _reader(assembled) -> pypdf.PdfReader:
    return pypdf.PdfReader(BytesIO(assembled.data))


def _results(count, failed=()):
    return [
        Failed(error=RenderError(f"page {i} broke"), attempts=3)
        if i in failed
        else Rendered(data=page_pdf_bytes(f"content page {i}"))
        for i in range(count)
    ]


class TestAssemble:
    """Order, placeholders and job metadata."""

    def test_pages_in_result_order(self):
        assembled = assemble(_results(4), dimensions=LETTER)
        reader = _reader(assembled)
        assert assembled.page_count == 4
        assert len(reader.pages) == 4
        for index, page in enumerate(reader.pages):
            assert f"content page {index}" in page.extract_text()
        assert assembled.failed_page_indices == ()
        assert assembled.total_size_bytes == len(assembled.data)
        assert isinstance(assembled.duration_ms, int)
        assert assembled.duration_ms >= 0

    def test_failed_page_becomes_placeholder(self):
        assembled = assemble(_results(5, failed={2}), dimensions=LETTER)
        reader = _reader(assembled)
        assert assembled.page_count == 5
        assert assembled.failed_page_indices == (2,)
        assert "Page 3 failed to render" in reader.pages[2].extract_text()
        assert "content page 3" in reader.pages[3].extract_text()

    def test_placeholder_keeps_page_size(self):
        assembled = assemble(_results(2, failed={0}), dimensions=LETTER)
        box = _reader(assembled).pages[0].mediabox
        assert float(box.width) == pytest.approx(612)
        assert float(box.height) == pytest.approx(792)

    def test_unreadable_bytes_counted_as_failed(self):
        results = _results(3)
        results[1] = Rendered(data=b"not a pdf")
        assembled = assemble(results, dimensions=LETTER)
        assert assembled.failed_page_indices == (1,)
        assert len(_reader(assembled).pages) == 3

    def test_partial_failure_tolerance(self):
        assembled = assemble(_results(6, failed={0, 3, 5}), dimensions=LETTER)
        assert assembled.page_count == 6
        assert len(assembled.failed_page_indices) == 3

    def test_all_failed(self):
        with pytest.raises(AssemblyError, match="All 3 pages failed"):
            assemble(_results(3, failed={0, 1, 2}), dimensions=LETTER)

    def test_all_unreadable(self):
        with pytest.raises(AssemblyError):
            assemble([Rendered(data=b""), Rendered(data=b"junk")], dimensions=LETTER)

    def test_no_results(self):
        with pytest.raises(AssemblyError, match="Nothing to assemble"):
            assemble([], dimensions=LETTER)


class TestAssemblyOptions:
    """Metadata, page numbers and table of contents."""

    def test_metadata(self):
        options = AssemblyOptions(
            metadata=DocumentMetadata(title="Report", author="Finance", subject="Q3")
        )
        reader = _reader(assemble(_results(1), dimensions=LETTER, options=options))
        assert reader.metadata.title == "Report"
        assert reader.metadata.author == "Finance"
        assert reader.metadata.subject == "Q3"
        assert reader.metadata.creator == "docpager"

    def test_page_numbers(self):
        options = AssemblyOptions(page_numbers=True)
        reader = _reader(assemble(_results(3), dimensions=LETTER, options=options))
        assert "2 / 3" in reader.pages[1].extract_text()
        assert "content page 1" in reader.pages[1].extract_text()

    def test_custom_page_number_format(self):
        options = AssemblyOptions(page_numbers=True, page_number_format="Page {current} of {total}")
        reader = _reader(assemble(_results(2), dimensions=LETTER, options=options))
        assert "Page 1 of 2" in reader.pages[0].extract_text()

    def test_table_of_contents(self):
        toc = (TocEntry("Introduction", 0), TocEntry("Results", 2))
        assembled = assemble(_results(3), dimensions=LETTER, options=AssemblyOptions(toc=toc))
        reader = _reader(assembled)
        assert assembled.page_count == 3
        assert assembled.toc_page_count == 1
        assert assembled.output_page_count == 4
        assert len(reader.pages) == 4
        contents = reader.pages[0].extract_text()
        assert "Introduction" in contents
        assert "Results" in contents
        assert "content page 0" in reader.pages[1].extract_text()
        titles = [item.title for item in reader.outline]
        assert titles == ["Introduction", "Results"]
        assert reader.get_destination_page_number(reader.outline[1]) == 3

    def test_failed_indices_ignore_contents_page(self):
        options = AssemblyOptions(toc=(TocEntry("Only", 0),))
        assembled = assemble(_results(3, failed={1}), dimensions=LETTER, options=options)
        assert assembled.failed_page_indices == (1,)


class TestGeneratedPages:
    """Standalone generated pages."""

    def test_placeholder_names_page_and_error(self):
        data = placeholder_page_bytes(LETTER, page_index=6, error=RenderError("timeout"))
        text = pypdf.PdfReader(BytesIO(data)).pages[0].extract_text()
        assert "Page 7 failed to render" in text
        assert "timeout" in text

    def test_toc_page(self):
        data = toc_page_bytes([("Chapter One", 2)], LETTER)
        text = pypdf.PdfReader(BytesIO(data)).pages[0].extract_text()
        assert "Chapter One" in text
        assert "Contents" in text

    def test_overlay_is_a_page(self):
        overlay = page_number_overlay(LETTER, text="1 / 1")
        assert "1 / 1" in overlay.extract_text()
