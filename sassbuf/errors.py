# sassbuf/errors.py
"""
Error types for the sassbuf compiler pipeline.

Hierarchy
---------
::

    SassError (base)
    ├── SassSyntaxError       - malformed source, rejected by the parser
    │   └── NestingError      - illegal placement of a node (CheckNesting)
    └── SassRuntimeError      - evaluation failures (Perform)
        ├── UndefinedVariableError
        ├── UndefinedMixinError
        └── ArgumentError

Every error carries a :class:`SourceSpan`.  Passes raise as soon as they
find a problem; nothing in the pipeline recovers from an error, the
top-level caller (``Engine`` or the CLI) receives it and reports it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

__all__ = [
    "SourceSpan",
    "SassError",
    "SassSyntaxError",
    "NestingError",
    "SassRuntimeError",
    "UndefinedVariableError",
    "UndefinedMixinError",
    "ArgumentError",
]


@dataclass(frozen=True)
class SourceSpan:
    """Position in a stylesheet, used for diagnostics."""

    filename: str = "<string>"
    line: int = 0
    column: int = 0

    @classmethod
    def from_node(cls, node: Any) -> "SourceSpan":
        """Build a span from any tree node (``line``/``filename`` attributes)."""
        return cls(
            filename=getattr(node, "filename", None) or "<string>",
            line=getattr(node, "line", 0) or 0,
        )

    @property
    def is_known(self) -> bool:
        return self.line > 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.filename}:{self.line}"


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTION CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class SassError(Exception):
    """
    Base exception for all sassbuf errors.

    ``span`` may be unknown when the error is raised deep inside an
    expression; the pass that owns the failing node fills it in through
    :meth:`with_span` before re-raising.
    """

    def __init__(
        self,
        message: str,
        span: Optional[SourceSpan] = None,
        hint: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.span = span or SourceSpan()
        self.hint = hint

    def with_span(self, span: SourceSpan) -> "SassError":
        """Attach *span* unless a more precise location is already known."""
        if not self.span.is_known and span.is_known:
            self.span = span
        return self

    @property
    def line(self) -> int:
        return self.span.line

    def to_gcc_format(self) -> str:
        """Format as ``file:line:col: error: message``."""
        text = f"{self.span}: error: {self.message}"
        if self.hint:
            text += f"\n  hint: {self.hint}"
        return text

    def __str__(self) -> str:
        return self.to_gcc_format()


# ───────────────────────────────────────────────────────────────────────────────
# SYNTAX ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class SassSyntaxError(SassError):
    """Error during parsing."""


class NestingError(SassSyntaxError):
    """A node appears somewhere it is not allowed to appear."""

    def __init__(
        self,
        message: str,
        span: Optional[SourceSpan] = None,
        parent_kind: str = "",
        child_kind: str = "",
    ) -> None:
        super().__init__(message, span=span)
        self.parent_kind = parent_kind
        self.child_kind = child_kind


# ───────────────────────────────────────────────────────────────────────────────
# RUNTIME ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class SassRuntimeError(SassError):
    """Error while evaluating a stylesheet."""


class UndefinedVariableError(SassRuntimeError):

    def __init__(self, name: str, span: Optional[SourceSpan] = None) -> None:
        super().__init__(f"Undefined variable: \"${name}\".", span=span)
        self.name = name


class UndefinedMixinError(SassRuntimeError):

    def __init__(self, name: str, span: Optional[SourceSpan] = None) -> None:
        super().__init__(f"Undefined mixin '{name}'.", span=span)
        self.name = name


class ArgumentError(SassRuntimeError):
    """Wrong arguments passed to a mixin or function."""
