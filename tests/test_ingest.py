"""
Tests for reading the JSON document description.
"""

import json

import pytest

from docpager.exceptions import InvalidSectionError, ValidationError
from docpager.ingest import document_from_mapping, load_document, section_from_mapping
from docpager.models import (
    CustomContent,
    Dimensions,
    ImageContent,
    ListContent,
    Margins,
    MarkdownContent,
    TableContent,
    TextContent,
)

from conftest import SAMPLE


def _payload(**overrides):
    data = {
        "title": "Doc",
        "layout": {
            "format": "letter",
            "marginsPx": {"top": 48, "right": 40, "bottom": 48, "left": 40},
            "columnGapPx": 24,
            "sectionGapPx": 12,
        },
        "sections": [{"id": "a", "kind": "text", "content": "Hello"}],
    }
    data.update(overrides)
    return data


class TestDocumentFromMapping:
    """Layout and document fields."""

    def test_layout(self):
        document = document_from_mapping(_payload())
        layout = document.layout
        assert layout.dimensions == Dimensions(816, 1056)
        assert layout.margins == Margins(48, 40, 48, 40)
        assert layout.section_gap_px == 12
        assert layout.column_gap_px == 24
        assert layout.columns == 1
        assert document.title == "Doc"

    def test_uniform_margins_and_columns(self):
        layout = document_from_mapping(
            _payload(layout={"format": "a4", "marginsPx": 30, "columns": 2, "landscape": True})
        ).layout
        assert layout.dimensions == Dimensions(1123, 794)
        assert layout.margins == Margins(30, 30, 30, 30)
        assert layout.columns == 2

    def test_custom_dimensions(self):
        document = document_from_mapping(
            _payload(
                layout={"format": "custom"},
                customDimensions={"width": 148, "height": 210, "unit": "mm"},
            )
        )
        assert document.layout.dimensions == Dimensions(559, 794)

    def test_sections_required(self):
        with pytest.raises(ValidationError, match="sections"):
            document_from_mapping({"layout": {}})

    @pytest.mark.parametrize(
        "layout",
        [
            {"marginsPx": {"top": "wide"}},
            {"marginsPx": {"left": None}},
            {"sectionGapPx": "big"},
            {"columnGapPx": [1]},
            {"columns": "two"},
            {"columns": True},
        ],
    )
    def test_malformed_layout_numbers(self, layout):
        with pytest.raises(ValidationError):
            document_from_mapping(_payload(layout=layout))

    def test_document_must_be_an_object(self):
        with pytest.raises(ValidationError, match="JSON object"):
            document_from_mapping([])

    def test_invalid_json_file(self, tmp_path):
        path = tmp_path / "doc.json"
        path.write_text("{not json")
        with pytest.raises(ValidationError, match="not valid JSON"):
            load_document(path)

    def test_duplicate_ids(self):
        sections = [{"id": "a", "kind": "text", "content": "1"}, {"id": "a", "kind": "text", "content": "2"}]
        with pytest.raises(InvalidSectionError, match="duplicate"):
            document_from_mapping(_payload(sections=sections))

    def test_load_sample(self):
        document = load_document(SAMPLE)
        assert [s.kind.value for s in document.sections] == [
            "markdown",
            "text",
            "table",
            "list",
            "image",
            "custom",
        ]

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "doc.json"
        path.write_text(json.dumps(_payload()))
        assert load_document(path).sections[0].content == TextContent("Hello")


class TestSectionFromMapping:
    """Kind-specific payload parsing."""

    def test_text_forms(self):
        assert section_from_mapping({"id": "a", "kind": "text", "content": {"text": "x"}}).content == TextContent("x")
        assert section_from_mapping({"id": "m", "kind": "markdown", "content": "# x"}).content == MarkdownContent("# x")

    def test_list(self):
        section = section_from_mapping(
            {"id": "l", "kind": "list", "content": {"items": ["a", "b"], "style": "ordered", "start": 4}}
        )
        assert section.content == ListContent(("a", "b"), style="ordered", start=4)
        bare = section_from_mapping({"id": "l", "kind": "list", "content": ["a"]})
        assert bare.content == ListContent(("a",))

    def test_table(self):
        section = section_from_mapping(
            {"id": "t", "kind": "table", "content": {"header": ["h"], "rows": [["1"], [None]], "repeatHeader": False}}
        )
        assert section.content == TableContent((("1",), ("",)), header=("h",), repeat_header=False)

    def test_image_and_custom(self):
        image = section_from_mapping(
            {"id": "i", "kind": "image", "content": {"src": "a.png", "naturalWidth": 10, "naturalHeight": 5}}
        )
        assert image.content == ImageContent("a.png", 10.0, 5.0)
        assert image.atomic is True
        custom = section_from_mapping({"id": "c", "kind": "custom", "content": {"heightPx": 40, "payload": [1]}})
        assert custom.content == CustomContent(40.0, payload=[1])

    def test_atomic_flag(self):
        section = section_from_mapping({"id": "a", "kind": "text", "content": "x", "atomic": True})
        assert section.atomic is True

    @pytest.mark.parametrize(
        "entry",
        [
            {"id": "a", "kind": "video", "content": "x"},
            {"kind": "text", "content": "x"},
            {"id": "a", "kind": "text", "content": 5},
            {"id": "a", "kind": "table", "content": {"rows": "nope"}},
            {"id": "a", "kind": "image", "content": {"src": "a.png"}},
            {"id": "a", "kind": "custom", "content": {"heightPx": "tall"}},
            {"id": "a", "kind": "list", "content": {"items": ["a"], "start": "x"}},
            {"id": "a", "kind": "list", "content": {"items": ["a"], "start": None}},
        ],
    )
    def test_invalid_entries(self, entry):
        with pytest.raises(InvalidSectionError):
            section_from_mapping(entry)
