#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
sassbuf/perform.py
==================

The evaluation pass.

``Perform`` turns a parsed tree into a static one: variables are assigned
and substituted, control directives are unrolled, mixins are expanded,
interpolation is resolved and selectors are joined with their parents.

Buffers
-------
A ``@buffer`` node gets its name resolved, its body evaluated in place,
and is then appended to the buffer store of the environment chain (see
:mod:`sassbuf.environment`).  The node stays in the tree: the layout pass
bubbles it out of its rule, which fills in the selector context, and
drops it from its declaration position.  A body that is empty, or holds
nothing but comments, only declares the name and leaves the tree.

A ``@flush`` node gets its name resolved and takes a snapshot of the
buffer entry *as it is now*: later ``@buffer`` declarations of the same
name do not show up in an earlier flush.  Flushing a name that was never
buffered is not an error; it emits nothing.

Every node is shallow-copied before it is evaluated, so the templates
(mixin and function bodies, loop bodies) are never modified.
"""

from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from sassbuf.environment import Environment
from sassbuf.errors import (
    ArgumentError,
    SassError,
    SassRuntimeError,
    SassSyntaxError,
    SourceSpan,
    UndefinedMixinError,
)
from sassbuf.options import CompilerOptions
from sassbuf.script import (
    NULL,
    Expression,
    Null,
    Number,
    Value,
    interpolate,
    normalize_name,
)
from sassbuf.tree import (
    BufferNode,
    CommentNode,
    DebugNode,
    DirectiveNode,
    EachNode,
    ExtendNode,
    FlushNode,
    ForNode,
    FunctionNode,
    IfNode,
    ImportNode,
    MediaNode,
    MixinDefNode,
    MixinNode,
    Node,
    PropNode,
    ReturnNode,
    RootNode,
    RuleNode,
    SupportsNode,
    VariableNode,
    WarnNode,
    WhileNode,
)
from sassbuf.visitor import Visitor, as_list

__all__ = ["Perform", "perform", "resolve_selectors", "split_selector_list"]

logger = logging.getLogger(__name__)

Children = Callable[[], Any]


def perform(root: RootNode, options: Optional[CompilerOptions] = None) -> RootNode:
    """Evaluate *root* in a fresh global environment; return the new tree."""
    return Perform(Environment(options=options)).visit(root)


# ═══════════════════════════════════════════════════════════════════════════
# SELECTORS
# ═══════════════════════════════════════════════════════════════════════════

def split_selector_list(text: str) -> List[str]:
    """Split ``a, b:not(c, d)`` on top-level commas; whitespace is collapsed."""
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    for char in text:
        if char in "([":
            depth += 1
        elif char in ")]":
            depth = max(depth - 1, 0)
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return [" ".join(p.split()) for p in parts if p.strip()]


def resolve_selectors(text: str, parents: Optional[List[str]]) -> List[str]:
    """Resolve the selector list *text* against the enclosing rule's selectors.

    ``&`` is replaced by each parent selector; selectors without ``&`` are
    joined to each parent as descendants.
    """
    selectors = split_selector_list(text)
    if not selectors:
        raise SassSyntaxError("Invalid CSS: expected selector.")
    if not parents:
        if any("&" in s for s in selectors):
            raise SassRuntimeError(
                "Base-level rules cannot contain the parent-selector-referencing character '&'."
            )
        return selectors
    return [
        sel.replace("&", parent) if "&" in sel else f"{parent} {sel}"
        for parent in parents
        for sel in selectors
    ]


# ═══════════════════════════════════════════════════════════════════════════
# MIXINS AND FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════

class _Return(Exception):
    """Unwinds a function body at ``@return``."""

    def __init__(self, value: Value) -> None:
        super().__init__()
        self.value = value


@dataclass
class Definition:
    """A mixin or function definition closed over its environment."""
    kind: str                              # "Mixin" or "Function"
    name: str
    args: List[Tuple[str, Optional[Expression]]]
    environment: Environment
    children: List[Node] = field(default_factory=list)

    def bind(self, args: List[Value], keywords: Dict[str, Value]) -> Environment:
        """Create the invocation scope with every parameter assigned."""
        scope = Environment(self.environment, buffer_scope=True)
        keywords = {normalize_name(k): v for k, v in keywords.items()}
        params = [normalize_name(name) for name, _ in self.args]

        if len(args) > len(params):
            raise ArgumentError(
                f"{self.kind} {self.name} takes {len(params)} argument(s) "
                f"but {len(args)} were passed."
            )
        unknown = sorted(set(keywords) - set(params))
        if unknown:
            raise ArgumentError(
                f"{self.kind} {self.name} doesn't have an argument named ${unknown[0]}."
            )

        for index, (name, default) in enumerate(self.args):
            key = params[index]
            if index < len(args):
                if key in keywords:
                    raise ArgumentError(
                        f"{self.kind} {self.name} was passed argument ${key} "
                        "both by position and by name."
                    )
                value = args[index]
            elif key in keywords:
                value = keywords[key]
            elif default is not None:
                # Defaults may refer to the parameters bound before them.
                value = default.perform(scope)
            else:
                raise ArgumentError(f"{self.kind} {self.name} is missing argument ${key}.")
            scope.set_local_var(key, value)
        return scope

    def call(self, args: List[Value], keywords: Dict[str, Value]) -> Value:
        """Run a function body and return the value of its ``@return``."""
        visitor = Perform(self.bind(args, keywords))
        try:
            for child in self.children:
                visitor.visit(child)
        except _Return as ret:
            return ret.value
        raise SassRuntimeError(f"Function {self.name} finished without @return.")


# ═══════════════════════════════════════════════════════════════════════════
# PERFORM
# ═══════════════════════════════════════════════════════════════════════════

class Perform(Visitor):
    """Evaluates a tree in an :class:`Environment`."""

    def __init__(self, environment: Environment) -> None:
        super().__init__()
        self.environment = environment

    @contextmanager
    def with_environment(self, env: Environment) -> Iterator[Environment]:
        old, self.environment = self.environment, env
        try:
            yield env
        finally:
            self.environment = old

    def visit(self, node: Node) -> Any:
        try:
            return super().visit(copy.copy(node))
        except SassError as exc:
            exc.with_span(SourceSpan.from_node(node))
            raise

    def visit_children(self, parent: Node) -> Node:
        with self.with_environment(Environment(self.environment)):
            results = super().visit_children(parent)
        parent.children = [n for result in results for n in as_list(result)]
        return parent

    def _body(self, node: Node) -> List[Node]:
        """Evaluate a fresh copy of *node*'s body and return the nodes produced."""
        return self.visit_children(copy.copy(node)).children

    # -- structure ---------------------------------------------------------

    def visit_root(self, node: RootNode, children: Children) -> RootNode:
        children()
        return node

    def visit_rule(self, node: RuleNode, children: Children) -> RuleNode:
        text = interpolate(node.rule, self.environment)
        node.resolved_rules = resolve_selectors(text, self.environment.selector)
        with self.with_environment(Environment(self.environment)):
            self.environment.selector = node.resolved_rules
            children()
        return node

    def visit_prop(self, node: PropNode, children: Children) -> Any:
        node.resolved_name = interpolate(node.name, self.environment).strip()
        value = node.value.perform(self.environment) if node.value is not None else NULL
        node.resolved_value = value.to_css()
        if not node.resolved_value:
            return []
        return node

    def visit_directive(self, node: DirectiveNode, children: Children) -> DirectiveNode:
        node.resolved_value = " ".join(interpolate(node.value, self.environment).split())
        if node.has_block:
            children()
        return node

    def visit_media(self, node: MediaNode, children: Children) -> MediaNode:
        node.resolved_query = " ".join(interpolate(node.query, self.environment).split())
        children()
        return node

    def visit_supports(self, node: SupportsNode, children: Children) -> SupportsNode:
        node.resolved_condition = " ".join(interpolate(node.condition, self.environment).split())
        children()
        return node

    def visit_import(self, node: ImportNode, children: Children) -> ImportNode:
        return node

    def visit_extend(self, node: ExtendNode, children: Children) -> ExtendNode:
        node.resolved_selector = " ".join(interpolate(node.selector, self.environment).split())
        return node

    def visit_comment(self, node: CommentNode, children: Children) -> Any:
        return [] if node.silent else node

    # -- script ------------------------------------------------------------

    def visit_variable(self, node: VariableNode, children: Children) -> List[Node]:
        if node.guarded:
            existing = self.environment.var(node.name)
            if existing is not None and not isinstance(existing, Null):
                return []
        self.environment.set_var(node.name, node.expr.perform(self.environment))
        return []

    def visit_if(self, node: IfNode, children: Children) -> List[Node]:
        if node.expr is None or node.expr.perform(self.environment).truthy():
            return children().children
        if node.else_ is not None:
            return as_list(self.visit(node.else_))
        return []

    def visit_for(self, node: ForNode, children: Children) -> List[Node]:
        first = node.from_.perform(self.environment)
        start = self._integer(first, "from")
        end = self._integer(node.to.perform(self.environment), "to")
        unit = first.unit
        step = 1 if end >= start else -1
        stop = end if node.exclusive else end + step

        results: List[Node] = []
        with self.with_environment(Environment(self.environment)):
            for i in range(start, stop, step):
                self.environment.set_local_var(node.var, Number(i, unit))
                results.extend(self._body(node))
        return results

    def visit_each(self, node: EachNode, children: Children) -> List[Node]:
        values = node.list.perform(self.environment).items()
        results: List[Node] = []
        with self.with_environment(Environment(self.environment)):
            for value in values:
                self.environment.set_local_var(node.var, value)
                results.extend(self._body(node))
        return results

    def visit_while(self, node: WhileNode, children: Children) -> List[Node]:
        results: List[Node] = []
        while node.expr.perform(self.environment).truthy():
            results.extend(self._body(node))
        return results

    def visit_mixindef(self, node: MixinDefNode, children: Children) -> List[Node]:
        self.environment.set_local_mixin(
            node.name,
            Definition("Mixin", node.name, node.args, self.environment, node.children),
        )
        return []

    def visit_mixin(self, node: MixinNode, children: Children) -> List[Node]:
        mixin = self.environment.mixin(node.name)
        if mixin is None:
            raise UndefinedMixinError(node.name)
        args = [a.perform(self.environment) for a in node.args]
        keywords = {k: v.perform(self.environment) for k, v in node.keywords.items()}

        scope = mixin.bind(args, keywords)
        # Rules in the body nest under the selector of the @include site.
        scope.selector = self.environment.selector
        results: List[Node] = []
        with self.with_environment(scope):
            for child in mixin.children:
                results.extend(as_list(self.visit(child)))
        return results

    def visit_function(self, node: FunctionNode, children: Children) -> List[Node]:
        self.environment.set_local_function(
            node.name,
            Definition("Function", node.name, node.args, self.environment, node.children),
        )
        return []

    def visit_return(self, node: ReturnNode, children: Children) -> Any:
        raise _Return(node.expr.perform(self.environment))

    def visit_debug(self, node: DebugNode, children: Children) -> List[Node]:
        value = node.expr.perform(self.environment)
        logger.warning("%s:%d DEBUG: %s", node.filename or "<string>", node.line, value.to_plain())
        return []

    def visit_warn(self, node: WarnNode, children: Children) -> List[Node]:
        value = node.expr.perform(self.environment)
        if not self.environment.options.quiet:
            logger.warning(
                "WARNING: %s\n        on line %d of %s",
                value.to_plain(), node.line, node.filename or "<string>",
            )
        return []

    # -- buffers -----------------------------------------------------------

    def _resolve_target(self, node: Any) -> str:
        node.target = node.target.resolve(self.environment)
        if not node.resolved_name:
            raise SassRuntimeError("Buffer name must not be empty.")
        return node.resolved_name

    def visit_buffer(self, node: BufferNode, children: Children) -> Any:
        name = self._resolve_target(node)
        children()
        env = self.environment
        if env.buffer(name) is None:
            env = env.buffer_env
        # A body of nothing but comments only declares the name.
        if all(isinstance(child, CommentNode) for child in node.children):
            env.declare_buffer(name)
            logger.debug("buffer %r: empty body, nothing appended", name)
            return []
        env.append_buffer(name, node)
        logger.debug("buffer %r: appended %d node(s)", name, len(node.children))
        return node

    def visit_flush(self, node: FlushNode, children: Children) -> FlushNode:
        name = self._resolve_target(node)
        entry = self.environment.buffer(name)
        if entry is None:
            logger.debug(
                "flush %r: nothing buffered under this name (visible: %s)",
                name, ", ".join(self.environment.buffer_names()) or "none",
            )
        node.buffered = list(entry or [])
        return node

    # -- helpers -----------------------------------------------------------

    @staticmethod
    def _integer(value: Value, label: str) -> int:
        if not isinstance(value, Number) or not float(value.value).is_integer():
            raise SassRuntimeError(f"{value.to_css()} is not an integer ({label}).")
        return int(value.value)
