"""Tests for the CompletionEngine facade."""

from __future__ import annotations

import asyncio
from dataclasses import replace

from shortcode_lsp._engine.registry import SpecRegistry
from shortcode_lsp.constants import SPEC_PATH_ENV
from shortcode_lsp.engine import CompletionEngine, document_from_path
from shortcode_lsp.models import CompletionKind

FILTERED_DOCUMENT = """\
---
title: Slides
filters:
  - roughnotation
  - fontawesome
---

Some [text]{.rn rn-type=} and {{< fa  >}}
"""


class TestEnablement:
    """Test filter based enablement."""

    def test_filter_listed(self, engine, document):
        document = replace(document, text=FILTERED_DOCUMENT)

        assert engine.is_enabled(document, engine.registry.load_spec("rn"))
        assert engine.is_enabled(document, engine.registry.load_spec("fa"))

    def test_filter_missing(self, engine, document):
        document = replace(document, text="---\nfilters: [acronyms]\n---\n")

        assert not engine.is_enabled(document, engine.registry.load_spec("rn"))
        assert not engine.is_enabled(replace(document, text=""), engine.registry.load_spec("rn"))

    def test_specs_without_filter_always_enabled(self, engine, document):
        assert engine.is_enabled(document, engine.registry.load_spec("countdown"))

    def test_cached_per_version(self, engine, document):
        """A new document version is evaluated again."""
        spec = engine.registry.load_spec("rn")
        old = replace(document, text="---\nfilters: [roughnotation]\n---\n", version=1)
        assert engine.is_enabled(old, spec)

        # Same version, changed text: the cached answer is kept
        assert engine.is_enabled(replace(old, text=""), spec)
        assert not engine.is_enabled(replace(old, text="", version=2), spec)

        engine.forget(old.uri)
        assert engine.is_enabled(old, spec)


class TestCompleteDocument:
    """Test completion over every enabled spec."""

    def test_span_in_document(self, engine, document):
        document = replace(document, text=FILTERED_DOCUMENT)
        line = FILTERED_DOCUMENT.splitlines()[7]
        cursor = line.index("rn-type=") + len("rn-type=")

        candidates = asyncio.run(engine.complete_document(document, 7, cursor))

        assert candidates[0].label == "highlight"
        assert candidates[0].insert_text == "highlight"

    def test_disabled_spec_offers_nothing(self, engine, document):
        text = FILTERED_DOCUMENT.replace("  - roughnotation\n", "")
        document = replace(document, text=text)
        line = text.splitlines()[6]
        cursor = line.index("rn-type=") + len("rn-type=")

        assert asyncio.run(engine.complete_document(document, 6, cursor)) == []

    def test_malformed_user_spec_does_not_block_others(self, tmp_path, monkeypatch, document):
        monkeypatch.delenv(SPEC_PATH_ENV, raising=False)
        (tmp_path / "bad.yaml").write_text("shortcode: bad\nattributes: true\n")
        engine = CompletionEngine(SpecRegistry([tmp_path], include_user_dir=False))
        document = replace(document, text="{{< now  >}}")

        candidates = asyncio.run(engine.complete_document(document, 0, 8))

        assert candidates[0].label == "year"

    def test_line_out_of_range(self, engine, document):
        document = replace(document, text="one line")
        assert asyncio.run(engine.complete_document(document, 3, 0)) == []
        assert asyncio.run(engine.complete_document(document, -1, 0)) == []


class TestEngine:
    """Test construction and helpers."""

    def test_multi_word_values(self, engine):
        values = engine.multi_word_values(engine.registry.load_spec("fa"))

        assert "brands github" in values
        assert "star" not in values
        assert engine.multi_word_values(engine.registry.load_spec("countdown")) == []

    def test_locate_and_classify(self, engine, split_cursor):
        line, cursor = split_cursor("{{< now iso| >}}")
        context = engine.locate_and_classify(line, cursor, engine.registry.load_spec("now"))

        assert context is not None
        assert context.completion_kind is CompletionKind.PRIMARY
        assert context.typed_text == "iso"

    def test_independent_caches(self, registry, document):
        """Engines never share cached state."""
        first = CompletionEngine(registry)
        second = CompletionEngine(registry)
        spec = registry.load_spec("rn")
        document = replace(document, text="---\nfilters: [roughnotation]\n---\n")

        assert first.is_enabled(document, spec)
        assert second.is_enabled(replace(document, text=""), spec) is False

    def test_clear(self, tmp_path, document):
        (tmp_path / "demo.yaml").write_text("shortcode: demo\n")
        engine = CompletionEngine(
            SpecRegistry([tmp_path], include_user_dir=False, include_bundled=False)
        )
        assert engine.registry.load_spec("demo").filter is None

        (tmp_path / "demo.yaml").write_text("shortcode: demo\nfilter: x\n")
        engine.clear()

        assert engine.registry.load_spec("demo").filter == "x"

    def test_document_from_path(self, tmp_path):
        path = tmp_path / "doc.qmd"
        path.write_text("{{< now >}}\n")

        document = document_from_path(path, tmp_path)

        assert document.text == "{{< now >}}\n"
        assert document.directory == tmp_path.resolve()
        assert document.workspace_root == tmp_path.resolve()
        assert document.uri.startswith("file://")
