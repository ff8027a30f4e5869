from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from . import __version__
from ._logging import setup_colored_logging

logger = logging.getLogger(__name__)

_DESCRIPTION = """\
shortcode-lsp: Language Server Protocol implementation for Quarto shortcodes

Provides completion inside Quarto documents for:
• Shortcodes such as {{< fa ... >}} and {{< countdown ... >}}
• Span attributes such as [text]{.rn rn-type=box}
• Values from enums, files, brand colors, frontmatter and workspace files

Directives are described by YAML spec files. Extra spec directories are
searched before the bundled specs; a spec with the same name overrides
the bundled one."""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=_DESCRIPTION,
        prog="shortcode-lsp",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level (default: %(default)s)",
    )
    parser.add_argument(
        "--spec-dir",
        action="append",
        default=[],
        type=Path,
        help="Directory with spec files, searched before the defaults (repeatable)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server subcommand
    server_parser = subparsers.add_parser(
        "server",
        help="Start the LSP server",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    server_parser.add_argument("--tcp", action="store_true", help="Use TCP instead of stdio")
    server_parser.add_argument(
        "--port", type=int, default=8080, help="TCP port to listen on (default: %(default)s)"
    )
    server_parser.add_argument("--stdio", action="store_true", help="Use stdio (default)")

    # Complete subcommand
    complete_parser = subparsers.add_parser(
        "complete",
        help="Print the completions at a position of a document",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    complete_parser.add_argument("file", type=Path, help="Document to complete in")
    complete_parser.add_argument("line", type=int, help="Line number (1-indexed)")
    complete_parser.add_argument("column", type=int, help="Cursor column (1-indexed)")
    complete_parser.add_argument(
        "--workspace",
        type=Path,
        help="Workspace root bounding the search for _brand.yml and workspace files",
    )

    # Specs subcommand
    specs_parser = subparsers.add_parser(
        "specs",
        help="Inspect the available directive specs",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    specs_group = specs_parser.add_mutually_exclusive_group(required=True)
    specs_group.add_argument("--list", action="store_true", help="List the available specs")
    specs_group.add_argument(
        "--show-dirs", action="store_true", help="Print the spec directories in search order"
    )
    return parser


def main():
    """Main entry point for the language server."""
    parser = _build_parser()
    args = parser.parse_args()

    # Require explicit subcommand
    if args.command is None:
        parser.error(
            "A subcommand is required. Use 'shortcode-lsp server' to start the LSP server.\n"
            "See 'shortcode-lsp --help' for available commands."
        )

    setup_colored_logging(level=getattr(logging, args.log_level))

    if args.command == "specs":
        _run_specs(args.spec_dir, show_dirs=args.show_dirs)
    elif args.command == "complete":
        _run_complete(args.spec_dir, args.file, args.line, args.column, args.workspace)
    elif args.command == "server":
        if args.tcp and args.stdio:
            parser.error("--tcp and --stdio are mutually exclusive")

        # Import server only when actually needed
        from .server import create_server

        server = create_server(args.spec_dir)
        if args.tcp:
            logger.info(f"Starting Shortcode LSP server ({__version__}) on TCP port {args.port}")
            server.start_tcp("localhost", args.port)
        else:
            logger.info(f"Starting Shortcode LSP server ({__version__}) on stdio")
            server.start_io()


def _run_specs(spec_dirs: list[Path], *, show_dirs: bool) -> None:
    """Print the spec search path or the available specs."""
    from ._engine.registry import SpecRegistry

    registry = SpecRegistry(spec_dirs)
    if show_dirs:
        for directory in registry.spec_dirs:
            marker = "" if directory.is_dir() else "  (missing)"
            print(f"{directory}{marker}")
        return

    for name in registry.spec_names():
        spec = registry.load_spec(name)
        origin = registry.find_spec_file(name)
        if spec is None:
            print(f"{name}: malformed ({origin})", file=sys.stderr)
            continue
        kind = "span" if spec.is_span else "shortcode"
        extra = f", filter: {spec.filter}" if spec.filter else ""
        print(f"{name} [{kind}{extra}] {origin}")


def _run_complete(
    spec_dirs: list[Path], file: Path, line: int, column: int, workspace: Path | None
) -> None:
    """Print the completion candidates at a 1-indexed position of ``file``."""
    from ._engine.registry import SpecRegistry
    from .engine import CompletionEngine, document_from_path

    try:
        document = document_from_path(file, workspace)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading {file}: {e}", file=sys.stderr)
        sys.exit(1)

    engine = CompletionEngine(SpecRegistry(spec_dirs))
    candidates = asyncio.run(engine.complete_document(document, line - 1, column - 1))
    if not candidates:
        print("No completions", file=sys.stderr)
        sys.exit(1)

    for candidate in candidates:
        start, end = candidate.replacement_range
        detail = f"  ({candidate.detail})" if candidate.detail else ""
        followup = "  [followup]" if candidate.request_followup else ""
        span = f"{start + 1}-{end + 1}"
        print(f"{candidate.label}{detail}  {span} -> {candidate.insert_text!r}{followup}")


if __name__ == "__main__":
    main()
