"""Tests for the line-oriented YAML subset extractor."""

from __future__ import annotations

from shortcode_lsp._engine.subset import (
    extract_items,
    extract_mapping,
    find_section,
    list_contains,
    split_frontmatter,
)

ACRONYMS_DOCUMENT = """\
---
title: "Report"
acronyms:
  keys:
    - shortname: API
      longname: "Application Programming Interface"
    - shortname: HTML
      longname: HyperText Markup Language
filters:
  - shortname: NOT-AN-ACRONYM
  - acronyms
---

Body with {{< acr API >}}.
"""


def _shortnames(text):
    items = extract_items(text, "acronyms.keys")
    return [item["shortname"] for item in items if item.get("shortname")]


class TestSplitFrontmatter:
    """Test frontmatter detection."""

    def test_leading_block(self):
        frontmatter = split_frontmatter(ACRONYMS_DOCUMENT)

        assert frontmatter is not None
        assert frontmatter.startswith('title: "Report"')
        assert "Body with" not in frontmatter

    def test_missing_or_unclosed(self):
        """Frontmatter must open on the first line and be closed."""
        assert split_frontmatter("# Title\n---\na: 1\n---\n") is None
        assert split_frontmatter("---\na: 1\n") is None
        assert split_frontmatter("") is None


class TestExtractItems:
    """Test section-scoped list item extraction."""

    def test_values_in_order_and_section_bounded(self):
        """Extraction stops where indentation returns to the section header level."""
        frontmatter = split_frontmatter(ACRONYMS_DOCUMENT)

        assert _shortnames(frontmatter) == ["API", "HTML"]

    def test_items_keep_other_fields(self):
        frontmatter = split_frontmatter(ACRONYMS_DOCUMENT)
        items = extract_items(frontmatter, "acronyms.keys")

        assert items == [
            {"shortname": "API", "longname": "Application Programming Interface"},
            {"shortname": "HTML", "longname": "HyperText Markup Language"},
        ]

    def test_flow_sequence(self):
        text = 'acronyms:\n  keys: [{shortname: API, longname: "A, B"}, {shortname: CSS}]\n'

        assert _shortnames(text) == ["API", "CSS"]
        assert extract_items(text, "acronyms.keys")[0]["longname"] == "A, B"

    def test_path_components_must_nest(self):
        """A key with the same name elsewhere is not a match."""
        text = "other:\n  keys:\n    - shortname: NO\nacronyms:\n  keys:\n    - shortname: YES\n"

        assert _shortnames(text) == ["YES"]

    def test_missing_section(self):
        assert _shortnames("title: x\n") == []
        assert find_section("title: x\n", "") is None

    def test_malformed_input_yields_fewer_matches(self):
        text = "acronyms:\n  keys:\n    - shortname API\n    - shortname: OK\n    ::::\n"

        assert _shortnames(text) == ["OK"]

    def test_comments_and_blank_lines(self):
        text = (
            "acronyms:\n"
            "  # defined by the team\n"
            "  keys:\n"
            "\n"
            "    - shortname: API  # interface\n"
            "    # - shortname: OLD\n"
            "    - shortname: 'CSS'\n"
        )

        assert _shortnames(text) == ["API", "CSS"]


class TestExtractMapping:
    """Test key/value extraction used for brand palettes."""

    def test_direct_children_only(self):
        text = (
            "color:\n"
            "  palette:\n"
            "    primary: '#447099'\n"
            "    accent: orange\n"
            "    nested:\n"
            "      deep: '#000000'\n"
            "  foreground: black\n"
        )

        assert extract_mapping(text, "color.palette") == [
            ("primary", "#447099"),
            ("accent", "orange"),
        ]

    def test_flow_mapping(self):
        text = "color:\n  palette: {primary: '#447099', accent: orange}\n"

        assert extract_mapping(text, "color.palette") == [
            ("primary", "#447099"),
            ("accent", "orange"),
        ]


class TestListContains:
    """Test filter detection in the frontmatter ``filters`` list."""

    def test_block_flow_and_scalar(self):
        block = "filters:\n  - fontawesome\n  - roughnotation\n"
        assert list_contains(block, "filters", "roughnotation")
        assert list_contains("filters: [fontawesome, roughnotation]\n", "filters", "fontawesome")
        assert list_contains("filters: fontawesome\n", "filters", "fontawesome")

    def test_absent(self):
        assert not list_contains("filters:\n  - fontawesome\n", "filters", "roughnotation")
        assert not list_contains("title: fontawesome\n", "filters", "fontawesome")
        assert not list_contains("filters:\n  - fontawesome-extra\n", "filters", "fontawesome")
