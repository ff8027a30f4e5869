"""Language server for shortcode and span directives in Quarto documents."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from lsprotocol.types import (
    CompletionList,
    CompletionOptions,
    CompletionParams,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    InitializeParams,
)

from . import __version__
from ._server import CompletionMixin
from .constants import TRIGGER_CHARACTERS

logger = logging.getLogger(__name__)


class ShortcodeLanguageServer(CompletionMixin):
    """Language Server completing Quarto shortcodes and spans."""


def create_server(spec_dirs: Iterable[Path] | None = None) -> ShortcodeLanguageServer:
    """Create a server whose specs are searched in ``spec_dirs`` before the defaults."""
    server = ShortcodeLanguageServer("shortcode-lsp", __version__, spec_dirs=spec_dirs)

    @server.feature("initialize")
    def initialize(params: InitializeParams) -> None:
        """Capture the workspace root."""
        logger.info("Initializing Shortcode LSP server")

        root_uri = None
        if params.workspace_folders:
            root_uri = params.workspace_folders[0].uri
        elif params.root_uri:
            root_uri = params.root_uri

        if root_uri is not None:
            server.workspace_root = server._uri_to_path(root_uri)
        elif params.root_path:
            server.workspace_root = Path(params.root_path)

        logger.info(f"Workspace root: {server.workspace_root}")
        logger.info(f"Spec directories: {', '.join(map(str, server.engine.registry.spec_dirs))}")

    @server.feature("textDocument/didOpen")
    def did_open(params: DidOpenTextDocumentParams):
        """Handle document open event."""
        logger.info(f"Opened document: {params.text_document.uri}")

    @server.feature("textDocument/didChange")
    def did_change(params: DidChangeTextDocumentParams):
        """Drop data derived from the previous version of the document."""
        server.engine.forget(params.text_document.uri)

    @server.feature("textDocument/didClose")
    def did_close(params: DidCloseTextDocumentParams):
        """Handle document close event."""
        server.engine.forget(params.text_document.uri)
        logger.info(f"Closed document: {params.text_document.uri}")

    @server.feature(
        "textDocument/completion", CompletionOptions(trigger_characters=TRIGGER_CHARACTERS)
    )
    async def completion(params: CompletionParams) -> CompletionList:
        """Provide completion suggestions."""
        items = await server._get_completions(params.text_document.uri, params.position)
        return CompletionList(is_incomplete=False, items=items)

    return server
