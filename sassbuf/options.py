# sassbuf/options.py
"""Compiler configuration."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, List, Mapping, Optional

__all__ = ["OutputStyle", "Syntax", "CompilerOptions"]


class OutputStyle(Enum):
    EXPANDED = "expanded"
    COMPRESSED = "compressed"


class Syntax(Enum):
    SCSS = "scss"    # brace-based
    SASS = "sass"    # indentation-based

    @classmethod
    def for_filename(cls, filename: Optional[str]) -> "Syntax":
        """Guess the syntax from a file extension (``.sass`` → SASS)."""
        if filename and filename.endswith(".sass"):
            return cls.SASS
        return cls.SCSS


@dataclass
class CompilerOptions:
    """Tuning knobs for a single compilation."""
    style: OutputStyle = OutputStyle.EXPANDED
    syntax: Syntax = Syntax.SCSS
    filename: str = "<string>"
    quiet: bool = False        # silence @warn
    indent: str = "  "

    def __post_init__(self) -> None:
        if isinstance(self.style, str):
            self.style = OutputStyle(self.style)
        if isinstance(self.syntax, str):
            self.syntax = Syntax(self.syntax)

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        if self.indent.strip():
            warnings.append("indent must contain only whitespace")
        if not self.filename:
            warnings.append("filename should not be empty")
        return warnings

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "CompilerOptions":
        """Build options from keyword arguments, ignoring ``None`` values.

        Unknown keys raise ``TypeError`` like a regular constructor call.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise TypeError(f"unknown compiler option(s): {', '.join(sorted(unknown))}")
        return cls(**{k: v for k, v in values.items() if v is not None})
