"""Loading and caching of declarative directive specs and bundled data."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import platformdirs
import yaml

from shortcode_lsp.cache import BoundedCache
from shortcode_lsp.constants import (
    CACHE_MAX_FILE_DATA_ENTRIES,
    CACHE_MAX_SPEC_ENTRIES,
    DEFAULT_VALUE_PATH,
    SPEC_PATH_ENV,
)
from shortcode_lsp.models import (
    Argument,
    Attribute,
    BooleanSource,
    ColorSource,
    DirectiveSpec,
    EnumSource,
    FileDataSource,
    FileSource,
    FreeformSource,
    FrontmatterSource,
    NoneSource,
    ValueSource,
    WorkspaceFileSource,
)

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent.parent
BUNDLED_SPECS_DIR = PACKAGE_DIR / "specs"


def user_specs_dir() -> Path:
    """Directory for user-provided specs, e.g. ``~/.config/shortcode-lsp/specs``."""
    return Path(platformdirs.user_config_dir("shortcode-lsp", appauthor=False)) / "specs"


def spec_dirs_from_environment() -> list[Path]:
    raw = os.getenv(SPEC_PATH_ENV, "")
    return [Path(part).expanduser() for part in raw.split(os.pathsep) if part.strip()]


def _as_str_tuple(value: Any) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value if item is not None)
    if value is None:
        return ()
    return (str(value),)


def _as_optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def parse_value_source(raw: Any) -> ValueSource:
    """Build a value source from its ``completion`` mapping.

    Unknown or malformed descriptors degrade to NoneSource.
    """
    if not isinstance(raw, dict):
        return NoneSource()

    source_type = raw.get("type")
    if source_type == "enum":
        return EnumSource(
            values=_as_str_tuple(raw.get("values")),
            default=_as_optional_str(raw.get("default")),
        )
    if source_type == "boolean":
        default = raw.get("default")
        if isinstance(default, str):
            default = default.lower() == "true"
        return BooleanSource(default=default if isinstance(default, bool) else None)
    if source_type == "freeform":
        return FreeformSource(placeholder=str(raw.get("placeholder") or ""))
    if source_type == "file":
        return FileSource(extensions=_as_str_tuple(raw.get("extensions")))
    if source_type == "color":
        return ColorSource()
    if source_type == "file-data":
        return FileDataSource(
            source=str(raw.get("source") or ""),
            path=str(raw.get("path") or ""),
            label_path=_as_optional_str(raw.get("labelPath")),
            detail_path=_as_optional_str(raw.get("detailPath")),
        )
    if source_type == "frontmatter":
        return FrontmatterSource(
            key=str(raw.get("key") or ""),
            value_path=str(raw.get("valuePath") or DEFAULT_VALUE_PATH),
        )
    if source_type == "workspace-file":
        return WorkspaceFileSource(
            filename=str(raw.get("filename") or ""),
            path=str(raw.get("path") or ""),
            value_path=str(raw.get("valuePath") or DEFAULT_VALUE_PATH),
        )
    if source_type != "none":
        logger.debug(f"Unknown completion type {source_type!r}, treating as 'none'")
    return NoneSource()


def parse_spec(data: Any) -> DirectiveSpec | None:
    """Build a DirectiveSpec from a loaded YAML document, or None when unusable."""
    if not isinstance(data, dict):
        return None
    name = data.get("shortcode")
    if not isinstance(name, str) or not name.strip():
        return None

    raw_arguments = data.get("arguments") or []
    raw_attributes = data.get("attributes") or []
    if not isinstance(raw_arguments, list) or not isinstance(raw_attributes, list):
        return None

    arguments = tuple(
        Argument(
            name=str(raw.get("name", "")),
            required=bool(raw.get("required", False)),
            source=parse_value_source(raw.get("completion")),
        )
        for raw in raw_arguments
        if isinstance(raw, dict)
    )
    attributes = tuple(
        Attribute(
            name=str(raw["name"]),
            description=str(raw.get("description") or ""),
            category=_as_optional_str(raw.get("category")),
            quoted=bool(raw.get("quoted", False)),
            source=parse_value_source(raw.get("completion")),
        )
        for raw in raw_attributes
        if isinstance(raw, dict) and raw.get("name")
    )
    return DirectiveSpec(
        name=name.strip(),
        arguments=arguments,
        attributes=attributes,
        filter=_as_optional_str(data.get("filter")),
        span_classes=_as_str_tuple(data.get("span-classes")),
    )


class SpecRegistry:
    """Loads directive specs and bundled JSON data, caching both.

    Spec and data lookups search ``search_dirs`` in order, then the bundled
    package directories, so user files override bundled ones.
    """

    def __init__(
        self,
        search_dirs: Iterable[Path] | None = None,
        *,
        include_user_dir: bool = True,
        include_bundled: bool = True,
    ):
        dirs = [Path(d) for d in search_dirs or []]
        dirs.extend(spec_dirs_from_environment())
        if include_user_dir:
            dirs.append(user_specs_dir())
        self.search_dirs = dirs
        self.include_bundled = include_bundled
        self._spec_cache: BoundedCache[str, DirectiveSpec] = BoundedCache(CACHE_MAX_SPEC_ENTRIES)
        self._file_data_cache: BoundedCache[str, tuple[Any, ...]] = BoundedCache(
            CACHE_MAX_FILE_DATA_ENTRIES
        )

    @property
    def spec_dirs(self) -> list[Path]:
        dirs = list(self.search_dirs)
        if self.include_bundled:
            dirs.append(BUNDLED_SPECS_DIR)
        return dirs

    @property
    def data_roots(self) -> list[Path]:
        roots = list(self.search_dirs)
        if self.include_bundled:
            roots.append(PACKAGE_DIR)
        return roots

    def find_spec_file(self, name: str) -> Path | None:
        for directory in self.spec_dirs:
            for suffix in (".yaml", ".yml"):
                candidate = directory / f"{name}{suffix}"
                if candidate.is_file():
                    return candidate
        return None

    def load_spec(self, name: str) -> DirectiveSpec | None:
        """Load a spec by directive name; None when missing or malformed."""
        cached = self._spec_cache.get(name)
        if cached is not None:
            return cached

        spec_path = self.find_spec_file(name)
        if spec_path is None:
            logger.debug(f"No spec found for {name!r}")
            return None

        try:
            with spec_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            logger.debug(f"Failed to read spec {spec_path}: {e}")
            return None

        spec = parse_spec(data)
        if spec is None:
            logger.debug(f"Spec {spec_path} is malformed")
            return None

        self._spec_cache.set(name, spec)
        return spec

    def spec_names(self) -> list[str]:
        """Names of all available specs, user specs shadowing bundled ones."""
        names: dict[str, None] = {}
        for directory in self.spec_dirs:
            if not directory.is_dir():
                continue
            for spec_path in sorted(directory.iterdir()):
                if spec_path.suffix in (".yaml", ".yml"):
                    names.setdefault(spec_path.stem, None)
        return list(names)

    def load_all_specs(self) -> list[DirectiveSpec]:
        specs = []
        for name in self.spec_names():
            spec = self.load_spec(name)
            if spec is not None:
                specs.append(spec)
        return specs

    def _find_data_file(self, source: str) -> Path | None:
        for root in self.data_roots:
            candidate = root / source
            if candidate.is_file():
                return candidate
        return None

    def load_file_data(self, source: str, data_path: str) -> tuple[Any, ...]:
        """Load the array found at ``data_path`` inside the JSON asset ``source``."""
        cache_key = f"{source}:{data_path}"
        cached = self._file_data_cache.get(cache_key)
        if cached is not None:
            return cached

        data_file = self._find_data_file(source)
        if data_file is None:
            logger.debug(f"Data file {source!r} not found")
            return ()

        try:
            with data_file.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.debug(f"Failed to read data file {data_file}: {e}")
            return ()

        result = resolve_dot_path(data, data_path)
        if not isinstance(result, list):
            return ()

        values = tuple(result)
        self._file_data_cache.set(cache_key, values)
        return values

    def clear(self) -> None:
        """Clear all caches (useful for testing or reloading)."""
        self._spec_cache.clear()
        self._file_data_cache.clear()


def resolve_dot_path(data: Any, dot_path: str) -> Any:
    """Navigate nested mappings by a dot separated key path; None when a key is missing."""
    result = data
    for part in (p for p in dot_path.split(".") if p):
        if not isinstance(result, dict) or part not in result:
            return None
        result = result[part]
    return result
