"""CLI entrypoints for callslice commands."""

from __future__ import annotations

import argparse
import sys
from contextlib import nullcontext
from pathlib import Path

from .errors import CallSliceError
from .extractor import Extractor
from .logging import configure_logging
from .workdir import working_directory


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "count",
        "help": "Increase log verbosity (-v for a summary, -vv for every visited function).",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = 0
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _non_negative(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid depth: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError("depth must not be negative")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="callslice",
        description="Extract a function and the project functions it calls, grouped by package.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-C",
        "--directory",
        default=None,
        help="Run as if callslice was started in this directory.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write debug logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser(
        "extract",
        help="Print the source of a function and of its transitive callees.",
    )
    _add_verbose_option(extract_parser, suppress_default=True)
    extract_parser.add_argument("function", help="Qualified name of the entry point, e.g. run or Class.method.")
    extract_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    extract_parser.add_argument(
        "--package",
        default=None,
        help="Import path of the package holding the entry point (defaults to the project name).",
    )
    extract_parser.add_argument(
        "--exclude-root",
        action="store_true",
        default=None,
        help="Leave the entry point's own package out of the output.",
    )
    extract_parser.add_argument(
        "--code-only",
        action="store_true",
        default=None,
        help="Emit plain source with '# package' headers instead of fenced blocks.",
    )
    extract_parser.add_argument(
        "--depth",
        type=_non_negative,
        default=None,
        help="Maximum call distance to follow (default 5, or 6 with --exclude-root).",
    )
    extract_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the document to this file instead of stdout.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP extraction service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for callslice commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbosity=args.verbose or 0, log_file=args.log_file)

    directory = args.directory
    try:
        with working_directory(directory) if directory else nullcontext():
            if args.command == "extract":
                _run_extract(args)
            elif args.command == "serve":
                _run_serve(args)
            else:  # pragma: no cover - argparse enforces choices
                parser.exit(1, "Unknown command\n")
    except CallSliceError as exc:
        parser.exit(1, f"callslice {args.command} failed: {exc}\nRun with --verbose for more details.\n")


def _run_extract(args: argparse.Namespace) -> None:
    result = Extractor().run(
        args.path,
        args.function,
        package=args.package,
        exclude_root=args.exclude_root,
        code_only=args.code_only,
        depth=args.depth,
    )
    if args.output is None:
        sys.stdout.write(result.document)
        if result.document and not result.document.endswith("\n"):
            sys.stdout.write("\n")
        return
    args.output.write_text(result.document, encoding="utf-8")
    print(f"Wrote {len(result.visited)} functions to {_relativize(args.output)}")


def _run_serve(args: argparse.Namespace) -> None:  # pragma: no cover - integration path
    from .service import run_service

    run_service(host=args.host, port=args.port)


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
