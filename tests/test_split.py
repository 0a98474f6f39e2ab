"""
Tests for splitting sections at page boundaries.
"""

import pytest
from pyphen import Pyphen

from docpager.exceptions import SplitError
from docpager.models import (
    CustomContent,
    ListContent,
    MarkdownContent,
    Section,
    TableContent,
    TextContent,
)
from docpager.pagination.pagination_measure import measure
from docpager.pagination.pagination_settings import MeasureSettings
from docpager.pagination.pagination_split import split_section

from conftest import CONTENT_WIDTH, text_of_height


class TestTextSplit:
    """Whitespace, hyphenation and hard cuts."""

    def test_cut_at_whitespace_before_budget(self):
        text = text_of_height(1400)
        result = split_section(Section("a", TextContent(text)), 960, CONTENT_WIDTH)
        # 48 lines * 102 chars = index 4896, inside "abcd"; nearest space is 4894.
        assert result.head.content.text == text[:4894]
        assert result.boundary == " "
        assert result.tail.content.text == text[4895:]
        assert not result.head.content.text.endswith(" ")

    def test_content_preserved(self):
        text = text_of_height(1400, word="lorem ipsum dolor")
        section = Section("a", TextContent(text))
        for budget in range(20, 1400, 37):
            result = split_section(section, budget, CONTENT_WIDTH)
            assert result.tail is not None
            joined = result.head.content.text + result.boundary + result.tail.content.text
            assert joined == text

    def test_head_fits_budget(self):
        section = Section("a", TextContent(text_of_height(1400, word="pagination")))
        for budget in (20, 95, 480, 959):
            result = split_section(section, budget, CONTENT_WIDTH)
            assert measure(result.head, CONTENT_WIDTH) <= budget

    def test_part_ids(self):
        section = Section("intro", TextContent(text_of_height(1400)))
        result = split_section(section, 960, CONTENT_WIDTH)
        assert (result.head.id, result.tail.id) == ("intro#1", "intro#2")
        again = split_section(result.tail, 200, CONTENT_WIDTH)
        assert (again.head.id, again.tail.id) == ("intro#2", "intro#3")
        assert again.tail.source_id == "intro"

    def test_markdown_splits_like_text(self):
        source = text_of_height(400)
        result = split_section(Section("m", MarkdownContent(source)), 200, CONTENT_WIDTH)
        assert isinstance(result.head.content, MarkdownContent)
        assert result.head.content.source + result.boundary + result.tail.content.source == source

    def test_hyphenation_point_when_no_whitespace(self):
        word = "internationalization"
        # 70px / 7px = 10 chars per line; a 20px budget holds one line.
        result = split_section(Section("w", TextContent(word)), 20, 70)
        expected = max(p for p in Pyphen(lang="en_US").positions(word) if p <= 10)
        assert result.head.content.text == word[:expected]
        assert result.tail.content.text == word[expected:]
        assert result.boundary == ""

    def test_hard_split_without_hyphenation(self):
        settings = MeasureSettings(hyphenation_lang=None)
        result = split_section(Section("x", TextContent("x" * 25)), 20, 70, settings=settings)
        assert result.head.content.text == "x" * 10
        assert result.tail.content.text == "x" * 15
        assert result.boundary == ""

    def test_section_that_fits_is_returned_whole(self):
        section = Section("a", TextContent("short"))
        result = split_section(section, 960, CONTENT_WIDTH)
        assert result.head is section
        assert result.tail is None

    def test_whitespace_just_before_cut(self):
        text = "x" * 101 + " "
        section = Section("a", TextContent(text + "y"))
        result = split_section(section, 20, CONTENT_WIDTH)
        assert result.head.content.text == "x" * 101
        assert result.tail.content.text == "y"

    def test_budget_below_one_line(self):
        with pytest.raises(SplitError, match="no text line"):
            split_section(Section("a", TextContent(text_of_height(100))), 10, CONTENT_WIDTH)


class TestTableSplit:
    """Row boundaries and header repetition."""

    def _table(self, repeat_header=True) -> Section:
        rows = tuple((str(i), f"row {i}") for i in range(5))
        return Section("t", TableContent(rows, header=("n", "name"), repeat_header=repeat_header))

    def test_split_between_rows(self):
        result = split_section(self._table(), 28 + 2 * 24 + 10, CONTENT_WIDTH)
        assert result.head.content.rows == (("0", "row 0"), ("1", "row 1"))
        assert result.tail.content.rows[0] == ("2", "row 2")
        assert len(result.tail.content.rows) == 3
        assert result.tail.content.header == ("n", "name")

    def test_header_not_repeated_when_disabled(self):
        result = split_section(self._table(repeat_header=False), 100, CONTENT_WIDTH)
        assert result.head.content.header == ("n", "name")
        assert result.tail.content.header is None

    def test_no_row_fits(self):
        with pytest.raises(SplitError, match="no table row"):
            split_section(self._table(), 40, CONTENT_WIDTH)


class TestListSplit:
    """Item boundaries and numbering continuation."""

    def test_ordered_list_continues_numbering(self):
        section = Section("l", ListContent(("a", "b", "c", "d", "e"), style="ordered", start=1))
        result = split_section(section, 50, CONTENT_WIDTH)
        assert result.head.content.items == ("a", "b")
        assert result.tail.content.items == ("c", "d", "e")
        assert result.tail.content.start == 3
        assert result.tail.content.style == "ordered"

    def test_no_item_fits(self):
        section = Section("l", ListContent(("a", "b")))
        with pytest.raises(SplitError, match="no list item"):
            split_section(section, 10, CONTENT_WIDTH)


class TestUnsplittable:
    """Atomic sections fail fast."""

    def test_atomic_text(self):
        section = Section("a", TextContent(text_of_height(1400)), atomic=True)
        with pytest.raises(SplitError, match="atomic"):
            split_section(section, 960, CONTENT_WIDTH)

    def test_custom_kind_has_no_splitter(self):
        section = Section("c", CustomContent(2000), atomic=False)
        with pytest.raises(SplitError, match="cannot be split"):
            split_section(section, 960, CONTENT_WIDTH)
