"""Tests for note parsing and tag note rendering."""
import pytest

from roam_tags.models.schema import LinkType
from roam_tags.storage.markdown_parser import (
    MarkdownParser,
    classify_target,
    format_id_link,
)


@pytest.fixture
def parser():
    return MarkdownParser()


class TestClassifyTarget:
    """Tests for deciding what a link points at."""

    @pytest.mark.parametrize(
        "raw, link_type, target",
        [
            ("id:abc-123", LinkType.ID, "abc-123"),
            ("https://example.com/a", LinkType.WEB, "https://example.com/a"),
            ("http://example.com", LinkType.WEB, "http://example.com"),
            ("file:notes/a.md", LinkType.FILE, "notes/a.md"),
            ("other.md", LinkType.FILE, "other.md"),
            ("../up/there", LinkType.FILE, "../up/there"),
            ("mailto:me@example.com", LinkType.OTHER, "mailto:me@example.com"),
        ],
    )
    def test_targets(self, raw, link_type, target):
        element = classify_target(raw)
        assert element.link_type is link_type
        assert element.target == target


class TestParseLinks:
    """Tests for finding links in text."""

    def test_offsets_and_text(self, parser):
        text = "a [one](id:1) b [two](id:2)"
        links = parser.parse_links(text)
        assert [(link.text, link.target) for link in links] == [("one", "1"), ("two", "2")]
        assert text[links[0].start:links[0].end] == "[one](id:1)"
        assert all(link.is_id_link for link in links)

    def test_empty_id_is_not_a_link(self, parser):
        assert parser.parse_links("[x](id:)") == []

    def test_links_do_not_span_lines(self, parser):
        assert parser.parse_links("[broken\ntext](id:1)") == []

    def test_format_id_link_parses_back(self, parser):
        links = parser.parse_links(format_id_link("n1", "python"))
        assert links[0].target == "n1"
        assert links[0].text == "python"


class TestParseNote:
    """Tests for reading a note file's content."""

    def test_frontmatter_fields(self, parser):
        note = parser.parse_note(
            "---\nid: n1\ntitle: python\n---\n\n# python\n\nsee [x](id:n2)\n"
        )
        assert note.id == "n1"
        assert note.title == "python"
        assert [link.target for link in note.links] == ["n2"]

    def test_numeric_values_become_strings(self, parser):
        note = parser.parse_note("---\nid: 42\ntitle: 2024\n---\n")
        assert note.id == "42"
        assert note.title == "2024"

    def test_heading_fallback(self, parser):
        note = parser.parse_note("---\nid: n1\n---\n\n# Heading Title\n")
        assert note.title == "Heading Title"

    def test_missing_id(self, parser):
        with pytest.raises(ValueError):
            parser.parse_note("---\ntitle: x\n---\n")

    def test_missing_title(self, parser):
        with pytest.raises(ValueError):
            parser.parse_note("---\nid: n1\n---\n\nno heading\n")


class TestRenderTagNote:
    """Tests for new tag note content."""

    def test_minimal_document(self, parser):
        content = parser.render_tag_note("n1", "python")
        note = parser.parse_note(content)
        assert (note.id, note.title, note.links) == ("n1", "python", [])
        assert "# python" in content
        assert content.endswith("\n")

    def test_read_note_id(self, parser):
        assert parser.read_note_id(parser.render_tag_note("n1", "python")) == "n1"
        assert parser.read_note_id("no frontmatter") is None
