# sassbuf/indented.py
"""
The indentation-based syntax.

Indented stylesheets are translated to the brace syntax line by line and
then handed to :func:`sassbuf.parser.parse_scss`.  The translation keeps
one output line per input line, so line numbers in errors and in the tree
refer to the original source.  Closing braces are put at the start of the
line that dedents (or on a final extra line).

Shorthands::

    name->          @buffer name
    name ->         @buffer name
    <-name          @flush name
    <- name         @flush name
    =name(args)     @mixin name(args)
    +name(args)     @include name(args)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from sassbuf.errors import SassSyntaxError, SourceSpan
from sassbuf.parser import parse_scss
from sassbuf.tree import RootNode

__all__ = ["to_scss", "parse_sass"]

logger = logging.getLogger(__name__)

_BUFFER_ARROW = re.compile(r"^(.+?)\s*->$")
_FLUSH_ARROW = re.compile(r"^<-\s*(.+)$")
_PROPERTY = re.compile(r"^(?:#\{[^}]*\}|[a-zA-Z_*-][a-zA-Z0-9_-]*)+\s*:(?!:)")


@dataclass
class _Line:
    number: int          # 0-based index into the source lines
    indent: int
    content: str


def parse_sass(text: str, filename: str = "<string>") -> RootNode:
    """Parse indented *text* into a :class:`RootNode`."""
    return parse_scss(to_scss(text, filename), filename)


def to_scss(text: str, filename: str = "<string>") -> str:
    """Translate an indented stylesheet to the brace syntax."""
    source = text.splitlines()
    out = [""] * len(source)
    entries = _collect(source, out)

    indents = [0]
    for index, entry in enumerate(entries):
        closing = 0
        if entry.indent > indents[-1]:
            if index == 0:
                raise SassSyntaxError(
                    "Indenting at the beginning of the document is illegal.",
                    SourceSpan(filename, entry.number + 1),
                )
            indents.append(entry.indent)
        else:
            while entry.indent < indents[-1]:
                indents.pop()
                closing += 1
            if entry.indent != indents[-1]:
                raise SassSyntaxError(
                    "Inconsistent indentation.",
                    SourceSpan(filename, entry.number + 1),
                )

        following = entries[index + 1] if index + 1 < len(entries) else None
        has_children = following is not None and following.indent > entry.indent
        line = _translate(entry.content, has_children)
        out[entry.number] = "} " * closing + line

    if len(indents) > 1:
        out.append("}" * (len(indents) - 1))
    scss = "\n".join(out) + "\n"
    logger.debug("translated %s to brace syntax (%d lines)", filename, len(out))
    return scss


def _collect(source: List[str], out: List[str]) -> List[_Line]:
    """Return the statement lines; comment lines are written to *out* directly."""
    entries: List[_Line] = []
    comment_indent: Optional[int] = None
    loud_open = False
    last_comment_line = -1

    for number, raw in enumerate(source):
        stripped = raw.strip()
        if not stripped:
            continue
        indent = len(raw) - len(raw.lstrip())

        if comment_indent is not None and indent > comment_indent:
            # Continuation of a multi-line comment.
            out[number] = stripped if loud_open else "// " + stripped
            last_comment_line = number
            continue
        if comment_indent is not None:
            _close_comment(out, last_comment_line, loud_open)
            comment_indent = None

        if stripped.startswith("//") or stripped.startswith("/*"):
            comment_indent = indent
            loud_open = stripped.startswith("/*")
            out[number] = stripped
            last_comment_line = number
            continue

        entries.append(_Line(number, indent, stripped))

    if comment_indent is not None:
        _close_comment(out, last_comment_line, loud_open)
    return entries


def _close_comment(out: List[str], number: int, loud: bool) -> None:
    if loud and not out[number].endswith("*/"):
        out[number] += " */"


def _translate(content: str, has_children: bool) -> str:
    flush = _FLUSH_ARROW.match(content)
    if flush:
        content = f"@flush {flush.group(1)}"
    else:
        buffer = _BUFFER_ARROW.match(content)
        if buffer:
            content = f"@buffer {buffer.group(1)}"

    if content.startswith("="):
        content = "@mixin " + content[1:].strip()
    elif content.startswith("+"):
        content = "@include " + content[1:].strip()

    if has_children:
        return content + " {"
    if content.startswith("$") or content.startswith("@"):
        if content.startswith(("@mixin", "@function", "@media", "@supports", "@if", "@else",
                               "@for", "@each", "@while")):
            return content + " {}"
        return content + ";"
    if _PROPERTY.match(content):
        return content + ";"
    return content + " {}"
