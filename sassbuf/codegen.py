#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
sassbuf/codegen.py
==================

CSS generation for laid-out trees (the output of :mod:`sassbuf.cssize`).

Two output styles are supported:

``expanded``
    One declaration per line, blocks indented with ``options.indent``,
    a blank line after every node that ends a top-level group::

        html body {
          color: red;
        }

``compressed``
    No optional whitespace, no trailing semicolon in a block, and no
    comments except ``/*! ... */``::

        html body{color:red}
"""

from __future__ import annotations

from contextlib import contextmanager
from io import StringIO
from typing import Any, Callable, Iterator, Optional

from sassbuf.options import CompilerOptions, OutputStyle
from sassbuf.tree import (
    CommentNode,
    DirectiveNode,
    ImportNode,
    MediaNode,
    PropNode,
    RootNode,
    RuleNode,
    SupportsNode,
)
from sassbuf.visitor import Visitor

__all__ = ["CssEmitter", "ToCss", "to_css"]

Children = Callable[[], Any]


def to_css(root: RootNode, options: Optional[CompilerOptions] = None) -> str:
    """Render the laid-out tree *root* as CSS text."""
    return ToCss(options).visit(root)


# ═══════════════════════════════════════════════════════════════════════════
# EMITTER
# ═══════════════════════════════════════════════════════════════════════════

class CssEmitter:
    """Low-level CSS text emission with indentation management."""

    def __init__(self, indent_str: str = "  ", compressed: bool = False) -> None:
        self._buffer = StringIO()
        self._indent_str = indent_str
        self._indent_level = 0
        self._compressed = compressed
        # Compressed output separates declarations instead of terminating them.
        self._after_declaration = False

    def emit(self, text: str) -> None:
        """Emit a line at the current indentation."""
        if self._compressed:
            self._close_declarations()
            self._buffer.write(text)
        else:
            self._buffer.write(self._indent_str * self._indent_level)
            self._buffer.write(text)
            self._buffer.write("\n")

    def emit_blank(self) -> None:
        if not self._compressed:
            self._buffer.write("\n")

    def declaration(self, text: str) -> None:
        """Emit a ``;``-delimited statement (property, ``@import`` …)."""
        if self._compressed:
            if self._after_declaration:
                self._buffer.write(";")
            self._buffer.write(text)
            self._after_declaration = True
        else:
            self.emit(text + ";")

    @contextmanager
    def block(self, header: str) -> Iterator[None]:
        """Emit ``header { ... }`` around the body of the ``with`` block."""
        if self._compressed:
            self._close_declarations()
            self._buffer.write(header + "{")
        else:
            self.emit(header + " {")
        self._indent_level += 1
        try:
            yield
        finally:
            self._indent_level -= 1
            self._after_declaration = False
            self.emit("}")

    def _close_declarations(self) -> None:
        if self._after_declaration:
            self._buffer.write(";")
            self._after_declaration = False

    def getvalue(self) -> str:
        self._close_declarations()
        return self._buffer.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
# VISITOR
# ═══════════════════════════════════════════════════════════════════════════

class ToCss(Visitor):

    def __init__(self, options: Optional[CompilerOptions] = None) -> None:
        super().__init__()
        self.options = options or CompilerOptions()
        self.compressed = self.options.style is OutputStyle.COMPRESSED
        self.out = CssEmitter(self.options.indent, self.compressed)

    def visit_root(self, node: RootNode, children: Children) -> str:
        with self.with_parent(node):
            for index, child in enumerate(node.children):
                self.visit(child)
                if child.group_end and index < len(node.children) - 1:
                    self.out.emit_blank()
        css = self.out.getvalue()
        if not css:
            return ""
        return css.rstrip("\n") + "\n"

    def visit_rule(self, node: RuleNode, children: Children) -> None:
        joiner = "," if self.compressed else ", "
        with self.out.block(joiner.join(node.resolved_rules or [])):
            children()

    def visit_prop(self, node: PropNode, children: Children) -> None:
        separator = ":" if self.compressed else ": "
        self.out.declaration(f"{node.resolved_name}{separator}{node.resolved_value}")

    def visit_comment(self, node: CommentNode, children: Children) -> None:
        if node.silent or (self.compressed and not node.loud):
            return
        self.out.emit(node.value)

    def visit_import(self, node: ImportNode, children: Children) -> None:
        self.out.declaration(f"@import {node.uri}")

    def visit_directive(self, node: DirectiveNode, children: Children) -> None:
        if not node.has_block:
            self.out.declaration(node.resolved_value or "")
            return
        with self.out.block(node.resolved_value or ""):
            children()

    def visit_media(self, node: MediaNode, children: Children) -> None:
        with self.out.block(f"@media {node.resolved_query}"):
            children()

    def visit_supports(self, node: SupportsNode, children: Children) -> None:
        with self.out.block(f"@supports {node.resolved_condition}"):
            children()
