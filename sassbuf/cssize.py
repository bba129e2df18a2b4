# sassbuf/cssize.py
"""
The layout pass: turns the nested, evaluated tree into the flat shape of
CSS.

* Nested rules are hoisted after their parent rule.  A rule keeps only its
  properties and comments, and disappears when it has none.
* ``@media`` and ``@supports`` bubble out of rules: the enclosing rule is
  duplicated inside them.  Nested media queries are merged with ``and``.
* ``@buffer`` bubbles the same way, so its content carries the selectors
  of the rules around the declaration.  The buffer itself never produces
  output where it is declared.
* ``@flush`` is replaced by fresh copies of the laid-out content of every
  buffer group it captured during evaluation, in the order the groups were
  appended.  Flushing properties at the root of the document is a nesting error.

Buffer groups are laid out in place: the store holds the same node objects
as the tree, so by the time a ``@flush`` is reached every group declared
before it has its final shape.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List

from sassbuf.deep_copy import deep_copy
from sassbuf.errors import NestingError, SourceSpan
from sassbuf.tree import (
    BufferNode,
    CommentNode,
    ExtendNode,
    FlushNode,
    MediaNode,
    Node,
    NodeKind,
    PropNode,
    RootNode,
    RuleNode,
    SupportsNode,
)
from sassbuf.visitor import Visitor, as_list

__all__ = ["Cssize", "cssize"]

logger = logging.getLogger(__name__)

Children = Callable[[], Any]

_RULE_CONTENT = frozenset({NodeKind.PROP, NodeKind.COMMENT})


def cssize(root: RootNode) -> RootNode:
    """Lay out the evaluated tree *root* in place and return it."""
    return Cssize().visit(root)


class Cssize(Visitor):

    def visit_children(self, parent: Node) -> Node:
        results = super().visit_children(parent)
        parent.children = [n for result in results for n in as_list(result)]
        return parent

    def _mark_group_end(self, nodes: List[Node]) -> List[Node]:
        if nodes and not isinstance(self.parent, RuleNode):
            nodes[-1].group_end = True
        return nodes

    def visit_root(self, node: RootNode, children: Children) -> RootNode:
        children()
        return node

    def visit_rule(self, node: RuleNode, children: Children) -> List[Node]:
        children()
        content = [c for c in node.children if c.kind in _RULE_CONTENT]
        hoisted = [c for c in node.children if c.kind not in _RULE_CONTENT]
        node.children = content
        return self._mark_group_end(([node] if content else []) + hoisted)

    def visit_prop(self, node: PropNode, children: Children) -> PropNode:
        return node

    def visit_comment(self, node: CommentNode, children: Children) -> CommentNode:
        return node

    def visit_extend(self, node: ExtendNode, children: Children) -> List[Node]:
        logger.debug("dropping @extend %s (not supported)", node.resolved_selector)
        return []

    def visit_media(self, node: MediaNode, children: Children) -> List[Node]:
        if not self.bubble(node):
            children()
        nested = [c for c in node.children if isinstance(c, MediaNode)]
        node.children = [c for c in node.children if not isinstance(c, MediaNode)]
        for media in nested:
            media.resolved_query = f"{node.resolved_query} and {media.resolved_query}"
        return self._mark_group_end(([node] if node.children else []) + nested)

    def visit_supports(self, node: SupportsNode, children: Children) -> List[Node]:
        if not self.bubble(node):
            children()
        return self._mark_group_end([node] if node.children else [])

    def visit_buffer(self, node: BufferNode, children: Children) -> List[Node]:
        if not self.bubble(node):
            children()
        return []

    def visit_flush(self, node: FlushNode, children: Children) -> List[Node]:
        copies = [deep_copy(child) for group in node.buffered for child in group.children]
        logger.debug(
            "flush %r: %d group(s), %d node(s)",
            node.resolved_name, len(node.buffered), len(copies),
        )
        if isinstance(self.parent, RootNode) and any(isinstance(c, PropNode) for c in copies):
            raise NestingError(
                f"Buffer {node.resolved_name} holds properties and cannot be flushed "
                "at the root of a document.",
                span=SourceSpan.from_node(node),
                parent_kind=NodeKind.ROOT.value,
                child_kind=NodeKind.PROP.value,
            )
        return self._mark_group_end(copies)
