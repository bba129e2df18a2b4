#!/usr/bin/env python3
"""sassbuf/main.py: CLI entry-point for the sassbuf compiler.

Usage examples
--------------
    # Compile a stylesheet to stdout
    python -m sassbuf compile site.scss

    # Compile an indented stylesheet, compressed, into a file
    python -m sassbuf compile theme.sass --style compressed -o theme.css

    # Read from stdin
    cat site.scss | python -m sassbuf compile -

    # Dump the parse tree (debugging aid)
    python -m sassbuf tree site.scss

Exit codes
----------
    0   Success.
    1   The stylesheet has an error (syntax, nesting or evaluation).
    2   Infrastructure failure (missing file, unwritable output, etc.).

The module doubles as ``python -m sassbuf`` via the companion
``sassbuf/__main__.py`` which simply calls :func:`main`.
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from pathlib import Path
from typing import Optional, Sequence, TextIO, Tuple

from sassbuf import __version__
from sassbuf.engine import Engine
from sassbuf.errors import SassError
from sassbuf.options import CompilerOptions, OutputStyle, Syntax

_log = logging.getLogger("sassbuf")
_cli_handler: Optional[logging.Handler] = None

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the root ``sassbuf`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    global _cli_handler
    root = logging.getLogger("sassbuf")
    root.setLevel(level)
    # Repeated calls replace the handler instead of stacking another one.
    if _cli_handler is not None:
        root.removeHandler(_cli_handler)
    root.addHandler(handler)
    _cli_handler = handler


def _read_source(raw: str) -> Tuple[str, str]:
    """Return ``(text, filename)`` for a path, or for ``-`` (stdin)."""
    if raw == "-":
        return sys.stdin.read(), "<stdin>"
    p = Path(raw).expanduser()
    return p.read_text(encoding="utf-8"), str(p)


def _open_output(dest: Optional[str]) -> TextIO:
    """Return a writable text stream.

    *dest* ``None`` or ``"-"`` → ``sys.stdout``; otherwise open the path
    for writing (creating parent directories as needed).
    """
    if dest is None or dest == "-":
        return sys.stdout
    p = Path(dest).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    return open(p, "w", encoding="utf-8")


def _options(args: argparse.Namespace, filename: str) -> CompilerOptions:
    syntax = args.syntax or Syntax.for_filename(filename).value
    return CompilerOptions.from_mapping({
        "style": getattr(args, "style", None),
        "syntax": syntax,
        "filename": filename,
        "quiet": getattr(args, "quiet", None),
    })


def _write(text: str, dest: Optional[str]) -> None:
    stream = _open_output(dest)
    try:
        stream.write(text)
    finally:
        if stream is not sys.stdout:
            stream.close()


# ===========================================================================
# Sub-commands
# ===========================================================================

def cmd_compile(args: argparse.Namespace) -> int:
    """Compile a stylesheet to CSS."""
    try:
        source, filename = _read_source(args.source)
    except OSError as exc:
        _log.error("cannot read %s: %s", args.source, exc)
        return EXIT_INFRA

    try:
        css = Engine(source, _options(args, filename)).render()
    except SassError as exc:
        print(exc.to_gcc_format(), file=sys.stderr)
        return EXIT_ERROR

    try:
        _write(css, args.output)
    except OSError as exc:
        _log.error("cannot write %s: %s", args.output, exc)
        return EXIT_INFRA
    return EXIT_OK


def cmd_tree(args: argparse.Namespace) -> int:
    """Parse a stylesheet and dump its tree."""
    try:
        source, filename = _read_source(args.source)
    except OSError as exc:
        _log.error("cannot read %s: %s", args.source, exc)
        return EXIT_INFRA

    try:
        root = Engine(source, _options(args, filename)).to_tree()
    except SassError as exc:
        print(exc.to_gcc_format(), file=sys.stderr)
        return EXIT_ERROR

    _write(root.pretty() + "\n", None)
    return EXIT_OK


# ---------------------------------------------------------------------------
def _build_parser() -> argparse.ArgumentParser:
    """Construct the full CLI argument parser with subcommands."""

    parser = argparse.ArgumentParser(
        prog="sassbuf",
        description="Sass compiler with named output buffers (@buffer / @flush).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              sassbuf compile site.scss
              sassbuf compile theme.sass --style compressed -o theme.css
              sassbuf tree site.scss
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    def _add_source_args(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "source",
            metavar="SOURCE",
            help='Stylesheet to read ("-" for stdin).',
        )
        p.add_argument(
            "--syntax",
            choices=[s.value for s in Syntax],
            default=None,
            help="Input syntax (default: from the file extension, else scss).",
        )

    # --- compile -----------------------------------------------------------
    p_compile = subparsers.add_parser(
        "compile",
        help="Compile a stylesheet to CSS.",
    )
    _add_source_args(p_compile)
    p_compile.add_argument(
        "-o", "--output",
        default=None,
        metavar="FILE",
        help='Output file ("-" or omit for stdout).',
    )
    p_compile.add_argument(
        "-s", "--style",
        choices=[s.value for s in OutputStyle],
        default=OutputStyle.EXPANDED.value,
        help="Output style (default: expanded).",
    )
    p_compile.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Silence @warn output.",
    )
    p_compile.set_defaults(func=cmd_compile)

    # --- tree --------------------------------------------------------------
    p_tree = subparsers.add_parser(
        "tree",
        help="Parse a stylesheet and dump the tree.",
    )
    _add_source_args(p_tree)
    p_tree.set_defaults(func=cmd_tree)

    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the sassbuf CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    # No subcommand given → print help.
    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
