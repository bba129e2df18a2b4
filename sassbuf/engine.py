# sassbuf/engine.py
"""
The compilation pipeline.

::

    source ──parse──▶ tree ──CheckNesting──▶ tree ──Perform──▶ static tree
           ──Cssize──▶ flat tree ──ToCss──▶ CSS text

Any :class:`~sassbuf.errors.SassError` aborts the compilation; no partial
output is produced.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Union

from sassbuf.check_nesting import check_nesting
from sassbuf.codegen import to_css
from sassbuf.cssize import cssize
from sassbuf.indented import parse_sass
from sassbuf.options import CompilerOptions, Syntax
from sassbuf.parser import parse_scss
from sassbuf.perform import perform
from sassbuf.tree import RootNode

__all__ = ["Engine", "compile_string", "compile_file"]

logger = logging.getLogger(__name__)


class Engine:
    """Compiles one stylesheet."""

    def __init__(self, source: str, options: Optional[CompilerOptions] = None) -> None:
        self.source = source
        self.options = options or CompilerOptions()
        for warning in self.options.validate():
            logger.warning("options: %s", warning)

    def _parse(self) -> RootNode:
        if self.options.syntax is Syntax.SASS:
            return parse_sass(self.source, self.options.filename)
        return parse_scss(self.source, self.options.filename)

    def to_tree(self) -> RootNode:
        """Parse the source and validate its nesting."""
        return check_nesting(self._parse())

    def render(self) -> str:
        """Compile the source to CSS."""
        root = self.to_tree()
        root = perform(root, self.options)
        root = cssize(root)
        css = to_css(root, self.options)
        logger.info("compiled %s (%d bytes of CSS)", self.options.filename, len(css))
        return css


def compile_string(source: str, **options: Any) -> str:
    """Compile *source*; keyword arguments are :class:`CompilerOptions` fields."""
    return Engine(source, CompilerOptions.from_mapping(options)).render()


def compile_file(path: Union[str, Path], **options: Any) -> str:
    """Compile the stylesheet at *path*; the syntax is guessed from the extension."""
    path = Path(path)
    if options.get("filename") is None:
        options["filename"] = str(path)
    if options.get("syntax") is None:
        options["syntax"] = Syntax.for_filename(path.name)
    return compile_string(path.read_text(encoding="utf-8"), **options)
