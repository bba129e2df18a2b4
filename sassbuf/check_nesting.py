# sassbuf/check_nesting.py
"""Validates that every node appears somewhere it may appear.

Runs on the parsed tree, before evaluation.  Control directives are
transparent: a property inside ``@if`` inside a rule is checked against
the rule.
"""

from __future__ import annotations

from typing import Any, List

from sassbuf.errors import NestingError, SourceSpan
from sassbuf.tree import CONTROL_KINDS, Node, NodeKind, RootNode
from sassbuf.visitor import Visitor

__all__ = ["CheckNesting", "check_nesting"]

_PROP_PARENTS = frozenset({
    NodeKind.RULE,
    NodeKind.DIRECTIVE,
    NodeKind.MEDIA,
    NodeKind.SUPPORTS,
    NodeKind.BUFFER,
    NodeKind.MIXINDEF,
    NodeKind.PROP,
})

_EXTEND_PARENTS = frozenset({NodeKind.RULE, NodeKind.BUFFER, NodeKind.MIXINDEF})

_FUNCTION_CHILDREN = frozenset({
    NodeKind.VARIABLE,
    NodeKind.RETURN,
    NodeKind.DEBUG,
    NodeKind.WARN,
    NodeKind.COMMENT,
}) | CONTROL_KINDS


def check_nesting(root: RootNode) -> RootNode:
    """Raise :class:`NestingError` on the first misplaced node in *root*."""
    CheckNesting().visit(root)
    return root


class CheckNesting(Visitor):

    def __init__(self) -> None:
        super().__init__()
        # Non-control ancestors of the node being visited, outermost first.
        self._stack: List[Node] = []

    def visit(self, node: Node) -> Any:
        if self._stack:
            self._check(self._stack[-1], node)
        return super().visit(node)

    def visit_children(self, parent: Node) -> Node:
        transparent = parent.kind in CONTROL_KINDS
        if not transparent:
            self._stack.append(parent)
        try:
            super().visit_children(parent)
        finally:
            if not transparent:
                self._stack.pop()
        return parent

    def _inside(self, kind: NodeKind) -> bool:
        return any(n.kind is kind for n in self._stack)

    def _fail(self, message: str, parent: Node, node: Node) -> None:
        raise NestingError(
            message,
            span=SourceSpan.from_node(node),
            parent_kind=parent.kind.value,
            child_kind=node.kind.value,
        )

    def _check(self, parent: Node, node: Node) -> None:
        kind = node.kind

        if parent.kind is NodeKind.FUNCTION and kind not in _FUNCTION_CHILDREN:
            self._fail(
                "Functions can only contain variable declarations and control directives.",
                parent, node,
            )

        if kind is NodeKind.IMPORT:
            if self._inside(NodeKind.BUFFER):
                self._fail("Import directives may not be used within buffers.", parent, node)
            if parent.kind is not NodeKind.ROOT:
                self._fail(
                    "CSS import directives may only be used at the root of a document.",
                    parent, node,
                )
        elif kind is NodeKind.PROP and parent.kind not in _PROP_PARENTS:
            self._fail(
                "Properties are only allowed within rules, directives, buffers, "
                "mixin includes, or other properties.",
                parent, node,
            )
        elif kind is NodeKind.EXTEND and parent.kind not in _EXTEND_PARENTS:
            self._fail("Extend directives may only be used within rules.", parent, node)
        elif kind is NodeKind.MIXINDEF and parent.kind is not NodeKind.ROOT:
            self._fail("Mixins may only be defined at the root of a document.", parent, node)
        elif kind is NodeKind.FUNCTION and parent.kind is not NodeKind.ROOT:
            self._fail("Functions may only be defined at the root of a document.", parent, node)
        elif kind is NodeKind.RETURN and not self._inside(NodeKind.FUNCTION):
            self._fail("@return may only be used within a function.", parent, node)
        elif kind is NodeKind.FLUSH and node.children:
            self._fail("Flush directives may not contain children.", parent, node)

