"""Tests for the file system backed collaborators."""

from __future__ import annotations

import asyncio
import os

from shortcode_lsp._engine import sources
from shortcode_lsp._engine.sources import (
    BrandPaletteResolver,
    WorkspaceFileReader,
    find_upwards,
    list_directory,
    workspace_file_values,
)
from shortcode_lsp.models import BrandColor, DirectoryEntry, DocumentRef


def _document(path, root=None):
    return DocumentRef(uri=path.as_uri(), path=path, workspace_root=root)


class TestListDirectory:
    """Test the default directory listing."""

    def test_entries(self, tmp_path):
        (tmp_path / "img").mkdir()
        (tmp_path / "data.csv").write_text("a,b\n")

        entries = asyncio.run(list_directory(tmp_path))

        assert sorted(entries, key=lambda entry: entry.name) == [
            DirectoryEntry("data.csv", False),
            DirectoryEntry("img", True),
        ]

    def test_missing_directory(self, tmp_path):
        assert asyncio.run(list_directory(tmp_path / "missing")) == []


class TestFindUpwards:
    """Test discovery bounded by the workspace root."""

    def test_walks_up_to_root_inclusive(self, tmp_path):
        nested = tmp_path / "chapters" / "part1"
        nested.mkdir(parents=True)
        (tmp_path / "_brand.yml").write_text("color: {}\n")

        assert find_upwards(nested, "_brand.yml", tmp_path) == (tmp_path / "_brand.yml").resolve()

    def test_nearest_file_wins(self, tmp_path):
        nested = tmp_path / "chapters"
        nested.mkdir()
        (tmp_path / "_brand.yml").write_text("")
        (nested / "_brand.yml").write_text("")

        assert find_upwards(nested, "_brand.yml", tmp_path) == (nested / "_brand.yml").resolve()

    def test_does_not_pass_root(self, tmp_path):
        root = tmp_path / "project"
        nested = root / "chapters"
        nested.mkdir(parents=True)
        (tmp_path / "_brand.yml").write_text("")

        assert find_upwards(nested, "_brand.yml", root) is None

    def test_without_root_only_start(self, tmp_path):
        nested = tmp_path / "chapters"
        nested.mkdir()
        (tmp_path / "_brand.yml").write_text("")

        assert find_upwards(nested, "_brand.yml", None) is None
        assert find_upwards(tmp_path, "_brand.yml", None) is not None

    def test_start_outside_root(self, tmp_path):
        root = tmp_path / "project"
        other = tmp_path / "other"
        root.mkdir()
        other.mkdir()
        (other / "_brand.yml").write_text("")

        assert find_upwards(other, "_brand.yml", root) is None


class TestBrandPaletteResolver:
    """Test brand palette resolution and its mtime keyed cache."""

    def test_palette_and_invalidation(self, tmp_path):
        brand_file = tmp_path / "_brand.yml"
        brand_file.write_text("color:\n  palette:\n    primary: '#447099'\n")
        document = _document(tmp_path / "doc.qmd", tmp_path)
        resolver = BrandPaletteResolver()

        assert asyncio.run(resolver(document)) == [BrandColor("primary", "#447099")]

        brand_file.write_text("color:\n  palette:\n    accent: orange\n")
        stat = brand_file.stat()
        os.utime(brand_file, (stat.st_atime, stat.st_mtime + 10))

        assert asyncio.run(resolver(document)) == [BrandColor("accent", "orange")]

    def test_unchanged_file_is_not_read_again(self, tmp_path, monkeypatch):
        (tmp_path / "_brand.yml").write_text("color:\n  palette:\n    primary: '#447099'\n")
        document = _document(tmp_path / "doc.qmd", tmp_path)
        resolver = BrandPaletteResolver()
        reads = []
        read_with_mtime = sources._read_with_mtime

        async def counting_read(path):
            reads.append(path)
            return await read_with_mtime(path)

        monkeypatch.setattr(sources, "_read_with_mtime", counting_read)

        first = asyncio.run(resolver(document))
        second = asyncio.run(resolver(document))

        assert first == second == [BrandColor("primary", "#447099")]
        assert len(reads) == 1

    def test_no_brand_file(self, tmp_path):
        document = _document(tmp_path / "doc.qmd", tmp_path)
        assert asyncio.run(BrandPaletteResolver()(document)) == []

    def test_document_without_path(self):
        document = DocumentRef(uri="untitled:Untitled-1")
        assert asyncio.run(BrandPaletteResolver()(document)) == []


class TestWorkspaceFileReader:
    """Test reading named workspace files."""

    def test_reads_nearest_file(self, tmp_path):
        (tmp_path / "team.yml").write_text("people: []\n")
        nested = tmp_path / "posts"
        nested.mkdir()
        reader = WorkspaceFileReader()

        text = asyncio.run(reader(_document(nested / "post.qmd", tmp_path), "team.yml"))

        assert text == "people: []\n"
        assert asyncio.run(reader(_document(nested / "post.qmd", tmp_path), "absent.yml")) is None


class TestWorkspaceFileValues:
    """Test value extraction from JSON and YAML workspace files."""

    def test_yaml(self):
        text = "people:\n  - id: ada\n    name: Ada Lovelace\n  - id: alan\n"

        assert workspace_file_values(text, "team.yml", "people", "id") == [
            ("ada", "Ada Lovelace"),
            ("alan", None),
        ]

    def test_json(self):
        text = '{"team": {"people": [{"id": "ada", "name": "Ada"}, {"name": "anonymous"}, "bob"]}}'

        assert workspace_file_values(text, "team.json", "team.people", "id") == [
            ("ada", "Ada"),
            ("bob", None),
        ]

    def test_invalid_json_falls_back_to_yaml(self):
        text = "{broken\npeople:\n  - id: ada\n"

        assert workspace_file_values(text, "team.json", "people", "id") == [("ada", None)]
