"""Build ranked completion candidates for a classified context."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path
from typing import Any

from shortcode_lsp.cache import DocumentVersionCache
from shortcode_lsp.constants import CACHE_MAX_EXTRACTION_ENTRIES, CSS_COLOR_NAMES
from shortcode_lsp.models import (
    BooleanSource,
    Candidate,
    CandidateKind,
    ColorSource,
    DirectiveKind,
    DirectiveSpec,
    DocumentRef,
    EnumSource,
    FileDataSource,
    FileSource,
    FrontmatterSource,
    ParsedContext,
    ValueSource,
    WorkspaceFileSource,
)

from .classifier import used_attributes
from .colors import (
    color_to_hex,
    find_brand_color_name,
    find_named_color,
    parse_color,
    parse_color_value,
)
from .registry import SpecRegistry, resolve_dot_path
from .sources import (
    BrandPaletteResolver,
    ListDirectory,
    ReadWorkspaceFile,
    ResolveBrandPalette,
    WorkspaceFileReader,
    list_directory,
    workspace_file_values,
)
from .subset import extract_items, split_frontmatter

logger = logging.getLogger(__name__)

# Value sources whose attribute names re-trigger completion after "name="
FOLLOWUP_SOURCE_TYPES = frozenset(
    {"enum", "boolean", "color", "file", "file-data", "frontmatter", "workspace-file"}
)

Handler = Callable[[ParsedContext, Any, DocumentRef], Awaitable[list[Candidate]]]


def _matches(value: str, typed_text: str) -> bool:
    return not typed_text or value.lower().startswith(typed_text.lower())


def filter_by_prefix(values: Sequence[str], typed_text: str) -> list[str]:
    """Keep the values starting with ``typed_text``, ignoring case."""
    return [value for value in values if _matches(value, typed_text)]


def _escape_snippet(text: str) -> str:
    return text.replace("\\", "\\\\").replace("$", "\\$").replace("}", "\\}")


def separators(context: ParsedContext) -> tuple[str, str]:
    """Text to insert before and after a value for ``context``."""
    prefix = " " if context.needs_leading_space else ""
    if context.quote and context.quote_closed:
        return prefix, ""
    suffix = context.quote
    if context.directive_kind is DirectiveKind.SHORTCODE and not context.has_space_before_end:
        suffix += " "
    return prefix, suffix


class CompletionSynthesizer:
    """Produce candidates for a context from the value source that applies to it.

    Collaborators that do I/O are injected so tests and hosts can replace
    them; the defaults read from the local file system.
    """

    def __init__(
        self,
        registry: SpecRegistry,
        *,
        list_directory: ListDirectory = list_directory,
        brand_palette: ResolveBrandPalette | None = None,
        read_workspace_file: ReadWorkspaceFile | None = None,
    ):
        self.registry = registry
        self.list_directory = list_directory
        self.brand_palette = brand_palette or BrandPaletteResolver()
        self.read_workspace_file = read_workspace_file or WorkspaceFileReader()
        self._frontmatter_cache: DocumentVersionCache[list[tuple[str, str | None]]] = (
            DocumentVersionCache(CACHE_MAX_EXTRACTION_ENTRIES)
        )
        self._handlers: dict[str, Handler] = {
            "enum": self._enum_candidates,
            "boolean": self._boolean_candidates,
            "color": self._color_candidates,
            "file": self._file_candidates,
            "file-data": self._file_data_candidates,
            "frontmatter": self._frontmatter_candidates,
            "workspace-file": self._workspace_file_candidates,
        }

    async def synthesize(
        self, context: ParsedContext, source: ValueSource, document: DocumentRef
    ) -> list[Candidate]:
        """Candidates for ``context`` drawn from ``source``, ordered by sort key.

        Freeform and none sources offer nothing.
        """
        handler = self._handlers.get(source.type)
        if handler is None:
            return []
        candidates = await handler(context, source, document)
        return sorted(candidates, key=lambda candidate: candidate.sort_key)

    def _value_candidate(
        self,
        context: ParsedContext,
        label: str,
        sort_key: str,
        *,
        value: str | None = None,
        kind: CandidateKind = CandidateKind.VALUE,
        detail: str | None = None,
        documentation: str | None = None,
    ) -> Candidate:
        prefix, suffix = separators(context)
        return Candidate(
            label=label,
            insert_text=prefix + (label if value is None else value) + suffix,
            sort_key=sort_key,
            replacement_range=context.replacement_range,
            kind=kind,
            detail=detail,
            documentation=documentation,
        )

    def _ranked(
        self, context: ParsedContext, values: Sequence[str], default: str | None
    ) -> list[Candidate]:
        """Default value first, declaration order otherwise."""
        candidates = []
        for index, value in enumerate(values):
            if not _matches(value, context.typed_text):
                continue
            is_default = value == default
            candidates.append(
                self._value_candidate(
                    context,
                    value,
                    f"{0 if is_default else 1}{index:04d}",
                    detail="(default)" if is_default else None,
                )
            )
        return candidates

    async def _enum_candidates(
        self, context: ParsedContext, source: EnumSource, document: DocumentRef
    ) -> list[Candidate]:
        return self._ranked(context, source.values, source.default)

    async def _boolean_candidates(
        self, context: ParsedContext, source: BooleanSource, document: DocumentRef
    ) -> list[Candidate]:
        default = None if source.default is None else str(source.default).lower()
        return self._ranked(context, ("true", "false"), default)

    async def _color_candidates(
        self, context: ParsedContext, source: ColorSource, document: DocumentRef
    ) -> list[Candidate]:
        brand_colors = await self.brand_palette(document)
        candidates = []

        # Brand colors insert their value, the consuming directive cannot resolve names
        for index, brand_color in enumerate(brand_colors):
            if not _matches(brand_color.name, context.typed_text):
                continue
            documentation = f"Brand color from `_brand.yml`\n\nInserts: `{brand_color.value}`"
            resolved = parse_color(brand_color.value, brand_colors)
            if resolved is not None:
                documentation += f" ({color_to_hex(resolved)})"
                named = find_named_color(resolved)
                if named and named != brand_color.value:
                    documentation += f"\n\nSame as CSS `{named}`"
            candidates.append(
                self._value_candidate(
                    context,
                    brand_color.name,
                    f"0{index:04d}",
                    value=brand_color.value,
                    kind=CandidateKind.COLOR,
                    detail=f"Brand: {brand_color.value}",
                    documentation=documentation,
                )
            )

        for index, color in enumerate(CSS_COLOR_NAMES):
            if not _matches(color, context.typed_text):
                continue
            detail = "CSS color"
            rgba = parse_color_value(color)
            brand_name = find_brand_color_name(rgba, brand_colors) if rgba else None
            if brand_name:
                detail += f" (brand: {brand_name})"
            candidates.append(
                self._value_candidate(
                    context,
                    color,
                    f"1{index:04d}",
                    kind=CandidateKind.COLOR,
                    detail=detail,
                    documentation=f"`{color_to_hex(rgba)}`" if rgba else None,
                )
            )
        return candidates

    async def _file_candidates(
        self, context: ParsedContext, source: FileSource, document: DocumentRef
    ) -> list[Candidate]:
        document_dir = document.directory
        if document_dir is None:
            return []

        typed_text = context.typed_text
        kept, _, filter_text = typed_text.rpartition("/")
        kept = f"{kept}/" if "/" in typed_text else ""
        search_dir = document_dir / kept if kept else document_dir
        extensions = {_normalize_extension(ext) for ext in source.extensions}

        entries = await self.list_directory(search_dir)
        prefix, suffix = separators(context)
        candidates = []
        for entry in entries:
            if entry.name.startswith("."):
                continue
            if not _matches(entry.name, filter_text):
                continue
            if (
                not entry.is_directory
                and extensions
                and Path(entry.name).suffix.lower() not in extensions
            ):
                continue

            full_path = kept + entry.name
            if entry.is_directory:
                candidates.append(
                    Candidate(
                        label=entry.name,
                        insert_text=f"{prefix}{full_path}/",
                        sort_key=f"0{entry.name}",
                        replacement_range=context.replacement_range,
                        kind=CandidateKind.FOLDER,
                        detail="Directory",
                        request_followup=True,
                        filter_text=full_path,
                    )
                )
            else:
                candidates.append(
                    Candidate(
                        label=entry.name,
                        insert_text=f"{prefix}{full_path}{suffix}",
                        sort_key=f"1{entry.name}",
                        replacement_range=context.replacement_range,
                        kind=CandidateKind.FILE,
                        detail="File",
                        filter_text=full_path,
                    )
                )
        return candidates

    def file_data_values(self, source: FileDataSource) -> list[tuple[str, str | None]]:
        """``(label, detail)`` pairs of a bundled data asset in declaration order."""
        values = []
        for item in self.registry.load_file_data(source.source, source.path):
            label, detail = _file_data_entry(item, source)
            if label is not None:
                values.append((label, detail))
        return values

    async def _file_data_candidates(
        self, context: ParsedContext, source: FileDataSource, document: DocumentRef
    ) -> list[Candidate]:
        candidates = []
        for index, (label, detail) in enumerate(self.file_data_values(source)):
            if not _matches(label, context.typed_text):
                continue
            candidates.append(
                self._value_candidate(
                    context,
                    label,
                    f"{index:05d}",
                    kind=CandidateKind.CONSTANT,
                    detail=detail,
                )
            )
        return candidates

    def frontmatter_values(
        self, document: DocumentRef, key: str, value_path: str
    ) -> list[tuple[str, str | None]]:
        """``(value, detail)`` pairs read from the document frontmatter, cached per version."""
        cache_name = f"frontmatter:{key}:{value_path}"
        cached = self._frontmatter_cache.get(document.uri, document.version, cache_name)
        if cached is not None:
            return cached

        values: list[tuple[str, str | None]] = []
        frontmatter = split_frontmatter(document.text)
        if frontmatter is not None:
            for item in extract_items(frontmatter, key):
                value = item.get(value_path)
                if value:
                    others = [v for k, v in item.items() if k != value_path and v]
                    values.append((value, others[0] if others else None))

        self._frontmatter_cache.set(document.uri, document.version, cache_name, values)
        return values

    async def _frontmatter_candidates(
        self, context: ParsedContext, source: FrontmatterSource, document: DocumentRef
    ) -> list[Candidate]:
        candidates = []
        for index, (value, detail) in enumerate(
            self.frontmatter_values(document, source.key, source.value_path)
        ):
            if not _matches(value, context.typed_text):
                continue
            candidates.append(
                self._value_candidate(
                    context,
                    value,
                    f"{index:04d}",
                    kind=CandidateKind.REFERENCE,
                    detail=detail,
                    documentation=(
                        f"**{value}**: {detail}\n\n" if detail else ""
                    )
                    + f"Defined in document frontmatter under `{source.key}`",
                )
            )
        return candidates

    async def _workspace_file_candidates(
        self, context: ParsedContext, source: WorkspaceFileSource, document: DocumentRef
    ) -> list[Candidate]:
        text = await self.read_workspace_file(document, source.filename)
        if text is None:
            return []

        candidates = []
        values = workspace_file_values(text, source.filename, source.path, source.value_path)
        for index, (value, detail) in enumerate(values):
            if not _matches(value, context.typed_text):
                continue
            candidates.append(
                self._value_candidate(
                    context,
                    value,
                    f"{index:04d}",
                    kind=CandidateKind.REFERENCE,
                    detail=detail,
                    documentation=f"Defined in `{source.filename}` under `{source.path}`",
                )
            )
        return candidates

    def forget(self, uri: str) -> None:
        self._frontmatter_cache.forget(uri)

    def clear(self) -> None:
        self._frontmatter_cache.clear()
        for collaborator in (self.brand_palette, self.read_workspace_file):
            clear = getattr(collaborator, "clear", None)
            if clear is not None:
                clear()

    def attribute_name_candidates(
        self, context: ParsedContext, spec: DirectiveSpec
    ) -> list[Candidate]:
        """Candidates for the attributes of ``spec`` not yet used in the directive.

        Attributes sort by the first-appearance order of their category, then
        by declaration order.
        """
        attributes = spec.attributes
        used = used_attributes(context.full_content, spec.get_attribute_names())
        category_order: dict[str, int] = {}
        for attribute in attributes:
            category_order.setdefault(attribute.category or "Other", len(category_order))

        leading_space = " " if context.needs_leading_space else ""
        trailing_space = (
            ""
            if context.has_space_before_end or context.directive_kind is DirectiveKind.SPAN
            else " "
        )

        candidates = []
        for index, attribute in enumerate(attributes):
            if attribute.name in used or not _matches(attribute.name, context.typed_text):
                continue

            request_followup = attribute.source.type in FOLLOWUP_SOURCE_TYPES
            placeholder = _escape_snippet(attribute.placeholder)
            if request_followup and attribute.quoted:
                insert_text = f'{leading_space}{attribute.name}="$1"{trailing_space}'
            elif request_followup:
                insert_text = f"{leading_space}{attribute.name}=$1"
            elif attribute.quoted:
                insert_text = f'{leading_space}{attribute.name}="${{1:{placeholder}}}"'
                insert_text += trailing_space
            else:
                insert_text = f"{leading_space}{attribute.name}=${{1:{placeholder}}}"
                insert_text += trailing_space

            category_index = category_order[attribute.category or "Other"]
            candidates.append(
                Candidate(
                    label=attribute.name,
                    insert_text=insert_text,
                    sort_key=f"{category_index:02d}{index:03d}",
                    replacement_range=context.replacement_range,
                    kind=CandidateKind.PROPERTY,
                    detail=attribute.category or "Attribute",
                    documentation=attribute.description or None,
                    is_snippet=True,
                    request_followup=request_followup,
                )
            )
        return sorted(candidates, key=lambda candidate: candidate.sort_key)


def _normalize_extension(extension: str) -> str:
    extension = extension.strip().lower()
    return extension if extension.startswith(".") else f".{extension}"


def _file_data_entry(item: Any, source: FileDataSource) -> tuple[str | None, str | None]:
    if isinstance(item, dict):
        label = resolve_dot_path(item, source.label_path) if source.label_path else None
        detail = resolve_dot_path(item, source.detail_path) if source.detail_path else None
        return (
            None if label is None else str(label),
            None if detail is None else str(detail),
        )
    if item is None:
        return None, None
    return str(item), None
