"""CLI entrypoints for docsync commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import ConfigError, DocSyncContext
from .errors import DocSyncError, NotFoundError
from .logging import configure_logging
from .models import TreeNode
from .orchestrator import Orchestrator
from .postproc.html import render_html
from .scanner import file_preview

DEFAULT_COMMAND = "browse"


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_path_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--path",
        default=argparse.SUPPRESS if suppress_default else ".",
        help="Path to the project directory (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsync",
        description="Keep per-file documentation in sync with source changes.",
    )
    _add_verbose_option(parser)
    _add_path_option(parser)
    subparsers = parser.add_subparsers(dest="command")

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate documentation for changed files.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_path_option(generate_parser, suppress_default=True)
    scope = generate_parser.add_mutually_exclusive_group()
    scope.add_argument(
        "--all",
        dest="all_files",
        action="store_true",
        help="Consider every supported file instead of only git changes.",
    )
    scope.add_argument(
        "--diff-base",
        default=None,
        help="Commit or ref to compare against when listing changed files.",
    )
    generate_parser.add_argument(
        "--write",
        action="store_true",
        default=None,
        help="Write documented source back into each file.",
    )
    generate_parser.add_argument(
        "files",
        nargs="*",
        help=(
            "Explicit files to process (overrides --all/--diff-base). Relative paths "
            "resolve against the current directory, falling back to the workspace root."
        ),
    )

    status_parser = subparsers.add_parser(
        "status",
        help="List files whose documentation is missing or stale.",
    )
    _add_verbose_option(status_parser, suppress_default=True)
    _add_path_option(status_parser, suppress_default=True)

    index_parser = subparsers.add_parser(
        "index",
        help="Rebuild the project tree snapshot without generating documentation.",
    )
    _add_verbose_option(index_parser, suppress_default=True)
    _add_path_option(index_parser, suppress_default=True)

    browse_parser = subparsers.add_parser(
        "browse",
        help="Show the project tree and per-file documentation (default).",
    )
    _add_verbose_option(browse_parser, suppress_default=True)
    _add_path_option(browse_parser, suppress_default=True)
    browse_parser.add_argument(
        "--file",
        default=None,
        help="Show the summary and preview for a single file.",
    )

    export_parser = subparsers.add_parser(
        "export",
        help="Render the documentation store as a single HTML page.",
    )
    _add_verbose_option(export_parser, suppress_default=True)
    _add_path_option(export_parser, suppress_default=True)
    export_parser.add_argument(
        "--output",
        default=None,
        help="Destination file (defaults to <state dir>/docs.html).",
    )

    chat_parser = subparsers.add_parser(
        "chat",
        help="Chat about the codebase (not implemented yet).",
    )
    _add_verbose_option(chat_parser, suppress_default=True)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docsync commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    command = args.command or DEFAULT_COMMAND

    verbose = bool(args.verbose)
    configure_logging(verbose=verbose)

    if command == "chat":
        parser.exit(1, "`docsync chat` is not implemented yet. Use `docsync browse --file` to read summaries.\n")
    if command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
        return

    try:
        context = DocSyncContext.for_workspace(args.path)
    except (FileNotFoundError, NotADirectoryError, ConfigError) as exc:
        parser.exit(1, f"{exc}\n")
    if context.config.log_file is not None:
        configure_logging(verbose=verbose, log_file=context.config.log_file)

    orchestrator = Orchestrator(context, write_back=getattr(args, "write", None))

    try:
        if command == "generate":
            report = orchestrator.run_generate(
                diff_base=args.diff_base,
                all_files=bool(args.all_files),
                paths=[_resolve_argument(context.root, item) for item in args.files] or None,
            )
            for result in report.results:
                if result.status == result.FAILED:
                    print(f"failed    {result.path}: {result.reason}")
                elif result.status == result.GENERATED:
                    print(f"generated {result.path}")
            print(report.summary_line())
        elif command == "status":
            stale = orchestrator.stale_files()
            if not stale:
                print("Documentation is up to date")
            for path, state in stale:
                print(f"{state:<9} {path}")
        elif command == "index":
            snapshot = orchestrator.refresh_index()
            print(f"Snapshot written to {_relativize(orchestrator.snapshot_store.path)} "
                  f"({len(snapshot.records)} documented file(s))")
        elif command == "browse":
            _browse(orchestrator, getattr(args, "file", None))
        elif command == "export":
            output = Path(args.output) if args.output else context.state_dir / "docs.html"
            doc = orchestrator.doc_cache.load_all()
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(
                render_html(doc, title=f"{context.root.name} documentation"), encoding="utf-8"
            )
            print(f"Documentation exported to {_relativize(output)}")
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except DocSyncError as exc:
        parser.exit(1, f"docsync {command} failed: {exc}\n")
    except (OSError, RuntimeError) as exc:
        parser.exit(1, f"docsync {command} failed: {exc}\nRun with --verbose for more details.\n")


def _browse(orchestrator: Orchestrator, file: Optional[str]) -> None:
    context = orchestrator.context
    if file:
        key = orchestrator.snapshot_store.relative_key(_resolve_argument(context.root, file))
        artifact = orchestrator.documentation_for(key)
        print(f"File: {key}")
        print()
        print("Documentation:")
        print(_indent(artifact.summary if artifact else "Not documented yet. Run `docsync generate`."))
        print()
        print("Preview:")
        print(_indent(file_preview(context.root / key, context.config.preview_lines)))
        return

    try:
        tree = orchestrator.snapshot_store.load().tree
    except NotFoundError:
        tree = None
    if tree is None:
        tree = orchestrator.scanner.scan().tree
    documented = set(orchestrator.doc_cache.documentation.files)
    print(f"Documentation Browser - {context.root}")
    for line in _render_tree(tree, documented):
        print(line)


def _render_tree(node: TreeNode, documented: set[str], depth: int = 0) -> List[str]:
    indent = "  " * depth
    if node.is_dir:
        lines = [f"{indent}{node.name}/"]
        for child in node.children:
            lines.extend(_render_tree(child, documented, depth + 1))
        return lines
    marker = "*" if node.path in documented else " "
    return [f"{indent}{marker} {node.name}"]


def _resolve_argument(root: Path, value: str) -> str:
    candidate = Path(value)
    if candidate.is_absolute():
        return value
    from_cwd = Path.cwd() / candidate
    if from_cwd.exists() and from_cwd.resolve().is_relative_to(root):
        return str(from_cwd.resolve())
    return value


def _indent(text: str) -> str:
    return "\n".join(f"  {line}" for line in text.splitlines())


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
