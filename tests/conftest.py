from __future__ import annotations

from pathlib import Path

import pytest

from shortcode_lsp._engine.registry import SpecRegistry
from shortcode_lsp.constants import SPEC_PATH_ENV
from shortcode_lsp.engine import CompletionEngine
from shortcode_lsp.models import BrandColor, DirectoryEntry, DocumentRef


@pytest.fixture
def registry(monkeypatch):
    """Registry holding only the bundled specs."""
    monkeypatch.delenv(SPEC_PATH_ENV, raising=False)
    return SpecRegistry(include_user_dir=False)


@pytest.fixture
def brand_colors():
    return [BrandColor("primary", "#447099"), BrandColor("danger", "red")]


@pytest.fixture
def listing():
    """Directory listing used by the fake file system collaborator."""
    return {
        "": [
            DirectoryEntry(".git", True),
            DirectoryEntry("data.csv", False),
            DirectoryEntry("img", True),
            DirectoryEntry("notes.txt", False),
        ],
        "img": [
            DirectoryEntry("logo.png", False),
            DirectoryEntry("photo.jpg", False),
            DirectoryEntry("icons", True),
        ],
    }


@pytest.fixture
def engine(registry, brand_colors, listing):
    """Engine whose I/O collaborators are in-memory fakes rooted at /project."""

    async def list_directory(path: Path) -> list[DirectoryEntry]:
        relative = path.relative_to(Path("/project")).as_posix().strip("/")
        return listing.get("" if relative == "." else relative, [])

    async def brand_palette(document: DocumentRef) -> list[BrandColor]:
        return brand_colors

    async def read_workspace_file(document: DocumentRef, filename: str) -> str | None:
        return None

    return CompletionEngine(
        registry,
        list_directory=list_directory,
        brand_palette=brand_palette,
        read_workspace_file=read_workspace_file,
    )


@pytest.fixture
def document():
    return DocumentRef(uri="file:///project/doc.qmd", version=1, path=Path("/project/doc.qmd"))


@pytest.fixture
def split_cursor():
    """Turn ``"{{< fa st| >}}"`` into the line without ``|`` and the cursor offset."""

    def _split(marked: str) -> tuple[str, int]:
        cursor = marked.index("|")
        return marked[:cursor] + marked[cursor + 1 :], cursor

    return _split
