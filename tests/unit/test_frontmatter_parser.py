"""
Unit tests for frontmatter parsing.
"""

from pathlib import Path

from resource_catalog.lib.frontmatter_parser import (
    document_body,
    load_yaml_file,
    normalize_frontmatter,
    parse_frontmatter,
    parse_frontmatter_text,
)


class TestParseFrontmatterText:
    """Tests for parse_frontmatter_text."""

    def test_parses_mapping(self):
        text = "---\nname: my-agent\ntools: [read, edit]\nnested:\n  key: value\n---\n# Body\n"
        data = parse_frontmatter_text(text)
        assert data == {"name": "my-agent", "tools": ["read", "edit"], "nested": {"key": "value"}}

    def test_no_block_returns_none(self):
        assert parse_frontmatter_text("# Just a heading\n\nText.") is None

    def test_unterminated_block_returns_none(self):
        assert parse_frontmatter_text("---\nname: broken\n# never closed\n") is None

    def test_invalid_yaml_returns_none(self):
        assert parse_frontmatter_text("---\nname: [unclosed\n---\nbody") is None

    def test_non_mapping_returns_none(self):
        assert parse_frontmatter_text("---\n- a\n- b\n---\nbody") is None

    def test_empty_block_returns_empty_mapping(self):
        assert parse_frontmatter_text("---\n---\nbody") == {}

    def test_byte_order_mark_is_ignored(self):
        data = parse_frontmatter_text("\ufeff---\nname: bom\n---\n")
        assert data == {"name": "bom"}

    def test_name_trailing_newlines_trimmed(self):
        text = '---\nname: "foo\\n\\n"\n---\n'
        assert parse_frontmatter_text(text)["name"] == "foo"

    def test_description_keeps_internal_breaks(self):
        text = '---\ndescription: "Line1\\nLine2\\n  "\n---\n'
        assert parse_frontmatter_text(text)["description"] == "Line1\nLine2"

    def test_block_scalar_description(self):
        text = "---\ndescription: |\n  First line\n    indented\n\n---\n"
        assert parse_frontmatter_text(text)["description"] == "First line\n  indented"

    def test_reparse_is_idempotent(self):
        text = "---\nname: a\ndescription: |\n  x\n  y\n---\n# T\n"
        assert parse_frontmatter_text(text) == parse_frontmatter_text(text)


class TestNormalizeFrontmatter:
    """Tests for normalize_frontmatter."""

    def test_title_is_stripped(self):
        assert normalize_frontmatter({"title": "  Hello \n"})["title"] == "Hello"

    def test_description_leading_space_kept(self):
        assert normalize_frontmatter({"description": "  indented\t\n"})["description"] == "  indented"

    def test_non_string_values_untouched(self):
        data = {"name": 42, "description": ["a"]}
        assert normalize_frontmatter(dict(data)) == data


class TestFileHelpers:
    """Tests for the file-reading helpers."""

    def test_parse_frontmatter_reads_file(self, tmp_path: Path):
        path = tmp_path / "doc.md"
        path.write_text("---\nname: doc\n---\n")
        assert parse_frontmatter(path) == {"name": "doc"}

    def test_parse_frontmatter_missing_file(self, tmp_path: Path):
        assert parse_frontmatter(tmp_path / "missing.md") is None

    def test_document_body(self):
        assert document_body("---\nname: x\n---\n# Title\n").strip() == "# Title"
        assert document_body("# No block") == "# No block"

    def test_load_yaml_file(self, tmp_path: Path):
        path = tmp_path / "tools.yml"
        path.write_text("tools:\n  - id: one\n")
        assert load_yaml_file(path) == {"tools": [{"id": "one"}]}

    def test_load_yaml_file_invalid(self, tmp_path: Path):
        path = tmp_path / "tools.yml"
        path.write_text("tools: [unclosed\n")
        assert load_yaml_file(path) is None
