"""Completion engine for shortcode and span directives.

The engine ties together the locator, the classifier and the synthesizer:

1. the locator finds the directive instance around the cursor,
2. the classifier decides whether a primary value, an attribute name or an
   attribute value is being typed,
3. the synthesizer turns the applicable value source into ranked candidates.

All caches belong to the engine instance, so separate engines never share
state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from ._engine.classifier import classify, has_primary_value
from ._engine.locator import has_span_class, locate_shortcode, locate_span
from ._engine.registry import SpecRegistry
from ._engine.sources import ListDirectory, ReadWorkspaceFile, ResolveBrandPalette, list_directory
from ._engine.subset import list_contains, split_frontmatter
from ._engine.synthesizer import CompletionSynthesizer
from .cache import DocumentVersionCache
from .constants import CACHE_MAX_FILTER_ENTRIES, FILTERS_KEY
from .models import (
    Candidate,
    CompletionKind,
    DirectiveSpec,
    DocumentRef,
    EnumSource,
    FileDataSource,
    ParsedContext,
    ValueSource,
)

logger = logging.getLogger(__name__)


class CompletionEngine:
    """Complete directives described by declarative specs.

    Args:
        registry: Source of directive specs and bundled data assets
        list_directory: Coroutine listing the entries of a directory
        brand_palette: Coroutine resolving the brand colors of a document
        read_workspace_file: Coroutine finding and reading a named workspace file
    """

    def __init__(
        self,
        registry: SpecRegistry | None = None,
        *,
        list_directory: ListDirectory = list_directory,
        brand_palette: ResolveBrandPalette | None = None,
        read_workspace_file: ReadWorkspaceFile | None = None,
    ):
        self.registry = registry or SpecRegistry()
        self.synthesizer = CompletionSynthesizer(
            self.registry,
            list_directory=list_directory,
            brand_palette=brand_palette,
            read_workspace_file=read_workspace_file,
        )
        self._enabled_cache: DocumentVersionCache[bool] = DocumentVersionCache(
            CACHE_MAX_FILTER_ENTRIES
        )

    def multi_word_values(self, spec: DirectiveSpec) -> list[str]:
        """Primary values of ``spec`` that contain a space, e.g. ``brands github``."""
        primary = spec.primary
        if primary is None:
            return []
        if isinstance(primary.source, EnumSource):
            values: Iterable[str] = primary.source.values
        elif isinstance(primary.source, FileDataSource):
            values = (label for label, _ in self.synthesizer.file_data_values(primary.source))
        else:
            return []
        return [value for value in values if " " in value.strip()]

    def locate_and_classify(
        self, line: str, cursor: int, spec: DirectiveSpec
    ) -> ParsedContext | None:
        """Describe what is typed at ``cursor`` inside an instance of ``spec`` on ``line``.

        Returns None when the cursor is not inside such an instance.
        """
        if spec.is_span:
            raw = locate_span(
                line, cursor, lambda content: has_span_class(content, spec.span_classes)
            )
        else:
            raw = locate_shortcode(line, cursor, spec.name)
        if raw is None:
            return None

        multi_word = self.multi_word_values(spec)
        return classify(
            raw,
            line,
            spec,
            lambda content: has_primary_value(content, spec, multi_word),
        )

    async def synthesize(
        self, context: ParsedContext, source: ValueSource, document: DocumentRef
    ) -> list[Candidate]:
        """Candidates for ``context`` from ``source``, ordered by sort key."""
        return await self.synthesizer.synthesize(context, source, document)

    async def complete(
        self, line: str, cursor: int, spec: DirectiveSpec, document: DocumentRef
    ) -> list[Candidate]:
        """Locate, classify and synthesize in one step.

        An attribute value for an attribute ``spec`` does not declare yields
        no candidates.
        """
        context = self.locate_and_classify(line, cursor, spec)
        if context is None:
            return []

        if context.completion_kind is CompletionKind.ATTRIBUTE_NAME:
            return self.synthesizer.attribute_name_candidates(context, spec)

        if context.completion_kind is CompletionKind.PRIMARY:
            primary = spec.primary
            if primary is None:
                return []
            return await self.synthesize(context, primary.source, document)

        attribute = spec.get_attribute(context.attribute_name or "")
        if attribute is None:
            logger.debug(f"Unknown attribute {context.attribute_name!r} for {spec.name!r}")
            return []
        return await self.synthesize(context, attribute.source, document)

    def is_enabled(self, document: DocumentRef, spec: DirectiveSpec) -> bool:
        """Check whether ``spec`` applies to ``document``.

        Specs with a ``filter`` only apply when the document frontmatter lists
        that filter under ``filters``. Results are cached per document version.
        """
        if not spec.filter:
            return True

        cached = self._enabled_cache.get(document.uri, document.version, spec.filter)
        if cached is not None:
            return cached

        frontmatter = split_frontmatter(document.text)
        enabled = frontmatter is not None and list_contains(frontmatter, FILTERS_KEY, spec.filter)
        self._enabled_cache.set(document.uri, document.version, spec.filter, enabled)
        return enabled

    def enabled_specs(self, document: DocumentRef) -> list[DirectiveSpec]:
        specs = self.registry.load_all_specs()
        return [spec for spec in specs if self.is_enabled(document, spec)]

    async def complete_document(
        self, document: DocumentRef, line_number: int, cursor: int
    ) -> list[Candidate]:
        """Complete at a position of ``document`` using every enabled spec.

        The first spec producing candidates wins.
        """
        lines = document.text.split("\n")
        if line_number < 0 or line_number >= len(lines):
            return []
        line = lines[line_number].rstrip("\r")

        for spec in self.enabled_specs(document):
            candidates = await self.complete(line, cursor, spec, document)
            if candidates:
                logger.debug(f"{len(candidates)} candidates from {spec.name!r}")
                return candidates
        return []

    def forget(self, uri: str) -> None:
        """Drop cached data of a closed document."""
        self._enabled_cache.forget(uri)
        self.synthesizer.forget(uri)

    def clear(self) -> None:
        """Clear every cache owned by the engine."""
        self.registry.clear()
        self._enabled_cache.clear()
        self.synthesizer.clear()


def document_from_path(path: Path, workspace_root: Path | None = None) -> DocumentRef:
    """Build a document reference for a file on disk."""
    path = path.resolve()
    return DocumentRef(
        uri=path.as_uri(),
        text=path.read_text(encoding="utf-8"),
        version=0,
        path=path,
        workspace_root=workspace_root.resolve() if workspace_root is not None else None,
    )
