"""Default file-system backed collaborators of the completion engine.

Everything here touches the disk, so the public entry points are
coroutines that push the blocking work to a thread. Failures are logged
and turned into empty results.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections.abc import Awaitable, Callable
from pathlib import Path

from shortcode_lsp.cache import FileStampCache
from shortcode_lsp.constants import (
    BRAND_FILE,
    CACHE_MAX_BRAND_ENTRIES,
    CACHE_MAX_EXTRACTION_ENTRIES,
)
from shortcode_lsp.models import BrandColor, DirectoryEntry, DocumentRef

from .colors import parse_brand_colors
from .registry import resolve_dot_path
from .subset import extract_items

logger = logging.getLogger(__name__)

ListDirectory = Callable[[Path], Awaitable[list[DirectoryEntry]]]
ResolveBrandPalette = Callable[[DocumentRef], Awaitable[list[BrandColor]]]
ReadWorkspaceFile = Callable[[DocumentRef, str], Awaitable["str | None"]]


async def list_directory(path: Path) -> list[DirectoryEntry]:
    """List the immediate entries of a directory; empty when it cannot be read."""

    def _scan() -> list[DirectoryEntry]:
        with os.scandir(path) as entries:
            return [DirectoryEntry(entry.name, entry.is_dir()) for entry in entries]

    try:
        return await asyncio.to_thread(_scan)
    except OSError as e:
        logger.debug(f"Cannot list {path}: {e}")
        return []


def find_upwards(start: Path, filename: str, root: Path | None) -> Path | None:
    """Find ``filename`` in ``start`` or its parents, up to and including ``root``.

    Without a root only ``start`` itself is searched. Returns None when the
    start directory lies outside the root.
    """
    current = start.resolve()
    boundary = root.resolve() if root is not None else current
    if current != boundary and boundary not in current.parents:
        return None

    while True:
        candidate = current / filename
        if candidate.is_file():
            return candidate
        if current == boundary or current.parent == current:
            return None
        current = current.parent


async def _read_with_mtime(path: Path) -> tuple[float, str] | None:
    def _read() -> tuple[float, str]:
        mtime = path.stat().st_mtime
        return mtime, path.read_text(encoding="utf-8")

    try:
        return await asyncio.to_thread(_read)
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Cannot read {path}: {e}")
        return None


class WorkspaceFileReader:
    """Discover a named file between a document and the workspace root and read it.

    File contents are cached by path and modification time.
    """

    def __init__(self, max_entries: int = CACHE_MAX_EXTRACTION_ENTRIES):
        self._cache: FileStampCache[str] = FileStampCache(max_entries)

    async def find(self, document: DocumentRef, filename: str) -> Path | None:
        if document.directory is None:
            return None
        return await asyncio.to_thread(
            find_upwards, document.directory, filename, document.workspace_root
        )

    async def __call__(self, document: DocumentRef, filename: str) -> str | None:
        path = await self.find(document, filename)
        if path is None:
            return None

        try:
            mtime = (await asyncio.to_thread(path.stat)).st_mtime
        except OSError as e:
            logger.debug(f"Cannot stat {path}: {e}")
            return None
        cached = self._cache.get(str(path), mtime)
        if cached is not None:
            return cached

        result = await _read_with_mtime(path)
        if result is None:
            return None
        mtime, text = result
        self._cache.set(str(path), mtime, text)
        return text

    def clear(self) -> None:
        self._cache.clear()


class BrandPaletteResolver:
    """Resolve the brand colors applicable to a document from the nearest ``_brand.yml``.

    Parsed palettes are cached by file path and modification time.
    """

    def __init__(self, max_entries: int = CACHE_MAX_BRAND_ENTRIES):
        self._files = WorkspaceFileReader(max_entries)
        self._cache: FileStampCache[tuple[BrandColor, ...]] = FileStampCache(max_entries)

    async def __call__(self, document: DocumentRef) -> list[BrandColor]:
        brand_file = await self._files.find(document, BRAND_FILE)
        if brand_file is None:
            return []

        try:
            mtime = (await asyncio.to_thread(brand_file.stat)).st_mtime
        except OSError as e:
            logger.debug(f"Cannot stat {brand_file}: {e}")
            return []
        cached = self._cache.get(str(brand_file), mtime)
        if cached is not None:
            return list(cached)

        result = await _read_with_mtime(brand_file)
        if result is None:
            return []
        mtime, text = result
        colors = parse_brand_colors(text)
        logger.debug(f"Loaded {len(colors)} brand colors from {brand_file}")
        self._cache.set(str(brand_file), mtime, tuple(colors))
        return colors

    def clear(self) -> None:
        self._cache.clear()


def workspace_file_values(
    text: str, filename: str, section_path: str, field: str
) -> list[tuple[str, str | None]]:
    """Extract ``(value, detail)`` pairs from a JSON or YAML-subset workspace file.

    JSON is tried first for ``.json`` files and for text that looks like JSON;
    anything that fails to decode is read with the YAML-subset scanner.
    """
    stripped = text.lstrip()
    if filename.endswith(".json") or stripped.startswith(("{", "[")):
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.debug(f"{filename} is not valid JSON, reading as YAML: {e}")
        else:
            return _json_values(resolve_dot_path(data, section_path), field)

    return [
        (item[field], _first_other_value(item, field))
        for item in extract_items(text, section_path)
        if item.get(field)
    ]


def _json_values(data: object, field: str) -> list[tuple[str, str | None]]:
    if not isinstance(data, list):
        return []
    values: list[tuple[str, str | None]] = []
    for item in data:
        if isinstance(item, dict):
            value = item.get(field)
            if value is not None and value != "":
                scalars = {
                    str(k): str(v) for k, v in item.items() if isinstance(v, (str, int, float))
                }
                values.append((str(value), _first_other_value(scalars, field)))
        elif isinstance(item, (str, int, float)):
            values.append((str(item), None))
    return values


def _first_other_value(item: dict[str, str], field: str) -> str | None:
    for key, value in item.items():
        if key != field and value:
            return value
    return None
