"""Completion mixin converting engine candidates to LSP completion items."""

from __future__ import annotations

import logging
from typing import ClassVar

from lsprotocol.types import (
    Command,
    CompletionItem,
    CompletionItemKind,
    InsertTextFormat,
    MarkupContent,
    MarkupKind,
    Position,
    Range,
    TextEdit,
)

from shortcode_lsp.constants import TRIGGER_SUGGEST_COMMAND
from shortcode_lsp.models import Candidate, CandidateKind

from .base import LSPServerBase

logger = logging.getLogger(__name__)


class CompletionMixin(LSPServerBase):
    """Provides autocompletion functionality for the LSP server."""

    ITEM_KINDS: ClassVar[dict[CandidateKind, CompletionItemKind]] = {
        CandidateKind.VALUE: CompletionItemKind.Value,
        CandidateKind.PROPERTY: CompletionItemKind.Property,
        CandidateKind.COLOR: CompletionItemKind.Color,
        CandidateKind.FILE: CompletionItemKind.File,
        CandidateKind.FOLDER: CompletionItemKind.Folder,
        CandidateKind.CONSTANT: CompletionItemKind.Constant,
        CandidateKind.REFERENCE: CompletionItemKind.Reference,
    }

    def _candidate_to_item(self, candidate: Candidate, line: int) -> CompletionItem:
        """Convert a candidate on ``line`` to a completion item replacing its range."""
        start, end = candidate.replacement_range
        edit_range = Range(
            start=Position(line=line, character=start),
            end=Position(line=line, character=end),
        )
        documentation = None
        if candidate.documentation:
            documentation = MarkupContent(
                kind=MarkupKind.Markdown, value=candidate.documentation
            )
        command = None
        if candidate.request_followup:
            command = Command(title="Trigger Suggest", command=TRIGGER_SUGGEST_COMMAND)

        return CompletionItem(
            label=candidate.label,
            kind=self.ITEM_KINDS.get(candidate.kind, CompletionItemKind.Text),
            detail=candidate.detail,
            documentation=documentation,
            sort_text=candidate.sort_key,
            filter_text=candidate.filter_text or candidate.label,
            text_edit=TextEdit(range=edit_range, new_text=candidate.insert_text),
            insert_text_format=(
                InsertTextFormat.Snippet if candidate.is_snippet else InsertTextFormat.PlainText
            ),
            command=command,
        )

    async def _get_completions(self, uri: str, position: Position) -> list[CompletionItem]:
        """Completion items for a position of an open document."""
        document = self._document_ref(uri)
        candidates = await self.engine.complete_document(
            document, position.line, position.character
        )
        return [self._candidate_to_item(candidate, position.line) for candidate in candidates]
