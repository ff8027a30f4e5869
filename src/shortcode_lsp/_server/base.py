"""Base class for LSP server with interface for mixins."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from urllib.parse import unquote, urlsplit

from pygls.server import LanguageServer

from shortcode_lsp._engine.registry import SpecRegistry
from shortcode_lsp.engine import CompletionEngine
from shortcode_lsp.models import DocumentRef


class LSPServerBase(LanguageServer):
    """Base class defining the interface needed by mixins.

    Holds the completion engine and the workspace root captured on
    ``initialize``.
    """

    def __init__(self, *args, spec_dirs: Iterable[Path] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.workspace_root: Path | None = None
        self.engine = CompletionEngine(SpecRegistry(spec_dirs))

    def _uri_to_path(self, uri: str) -> Path | None:
        """Convert a ``file://`` URI to a path; None for other schemes."""
        parsed = urlsplit(uri)
        if parsed.scheme not in ("file", ""):
            return None
        return Path(unquote(parsed.path))

    def _document_ref(self, uri: str) -> DocumentRef:
        """Snapshot of an open document for the engine."""
        document = self.workspace.get_text_document(uri)
        return DocumentRef(
            uri=uri,
            text=document.source,
            version=document.version or 0,
            path=self._uri_to_path(uri),
            workspace_root=self.workspace_root,
        )
