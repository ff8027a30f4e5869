"""Tests for locating shortcodes and spans around the cursor."""

from __future__ import annotations

import pytest

from shortcode_lsp._engine.locator import has_span_class, locate_shortcode, locate_span
from shortcode_lsp.models import DirectiveKind


class TestLocateShortcode:
    """Test locate_shortcode."""

    @pytest.mark.parametrize(
        ("marked", "content"),
        [
            ("{{< fa st|ar >}}", "star"),
            ("{{< fa |>}}", ""),
            ("{{<fa brands gi| >}}", "brands gi"),
            ("text {{< fa star size=|2x >}} more", "star size=2x"),
        ],
    )
    def test_full_content_is_trimmed_inner_text(self, split_cursor, marked, content):
        """Content is the exact trimmed text between the markers."""
        line, cursor = split_cursor(marked)
        raw = locate_shortcode(line, cursor, "fa")

        assert raw is not None
        assert raw.kind is DirectiveKind.SHORTCODE
        assert raw.full_content == content
        assert raw.cursor == cursor

    @pytest.mark.parametrize(
        "marked",
        [
            "|before {{< fa star >}}",
            "{{< fa star >}} after|",
            "{{< fa star >}} between| {{< fa heart >}}",
            "{{< fa star >}|}",
            "{{< fa star|",
            "{{< fancy |>}}",
            "{{< now |>}}",
        ],
    )
    def test_outside_any_instance(self, split_cursor, marked):
        """Cursors outside every instance of the directive find nothing."""
        line, cursor = split_cursor(marked)
        assert locate_shortcode(line, cursor, "fa") is None

    def test_second_instance_on_line(self, split_cursor):
        """The nearest opening marker before the cursor is used."""
        line, cursor = split_cursor("{{< fa star >}} and {{< fa he| >}}")
        raw = locate_shortcode(line, cursor, "fa")

        assert raw is not None
        assert raw.full_content == "he"
        assert raw.content_start == line.index("{{< fa he") + len("{{< fa")

    def test_space_flags(self, split_cursor):
        """Whitespace after the name and before the closing marker is reported."""
        line, cursor = split_cursor("{{< fa|>}}")
        raw = locate_shortcode(line, cursor, "fa")
        assert raw is not None
        assert not raw.has_space_after_name
        assert not raw.has_space_before_end

        line, cursor = split_cursor("{{< fa st| >}}")
        raw = locate_shortcode(line, cursor, "fa")
        assert raw is not None
        assert raw.has_space_after_name
        assert raw.has_space_before_end

        line, cursor = split_cursor("{{< fa star |>}}")
        raw = locate_shortcode(line, cursor, "fa")
        assert raw is not None
        assert not raw.has_space_before_end

    def test_cursor_out_of_bounds(self):
        assert locate_shortcode("{{< fa >}}", 50, "fa") is None
        assert locate_shortcode("{{< fa >}}", -1, "fa") is None


class TestLocateSpan:
    """Test locate_span."""

    def test_inside_span(self, split_cursor):
        """The content between the braces is returned trimmed."""
        line, cursor = split_cursor("[text]{.rn rn-type=|box }")
        raw = locate_span(line, cursor)

        assert raw is not None
        assert raw.kind is DirectiveKind.SPAN
        assert raw.full_content == ".rn rn-type=box"
        assert raw.content_start == line.index("{") + 1
        assert raw.has_space_before_end

    @pytest.mark.parametrize(
        "marked",
        [
            "[text]{.rn} more|",
            "|[text]{.rn}",
            "[a]{.rn} b|c {.rn}",
            "[text]{.rn |",
        ],
    )
    def test_outside_span(self, split_cursor, marked):
        """Closing braces before or opening braces after the cursor stop the scan."""
        line, cursor = split_cursor(marked)
        assert locate_span(line, cursor) is None

    def test_rejected_by_class_predicate(self, split_cursor):
        """Spans without the expected class are ignored."""
        line, cursor = split_cursor("[text]{.other rn-type=|}")
        assert locate_span(line, cursor, lambda content: has_span_class(content, ["rn"])) is None

        line, cursor = split_cursor("[text]{.rn rn-type=|}")
        assert locate_span(line, cursor, lambda content: has_span_class(content, ["rn"]))


class TestHasSpanClass:
    """Test whole-token class detection."""

    def test_whole_token_only(self):
        assert has_span_class(".rn rn-type=box", ["rn"])
        assert has_span_class(".fragment .rn-fragment", ["rn", "rn-fragment"])
        assert not has_span_class(".rn-fragment", ["rn"])
        assert not has_span_class("rn-type=box", ["rn"])
