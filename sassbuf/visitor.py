#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
sassbuf/visitor.py
==================

Visitor infrastructure for walking the stylesheet tree.

Visitors subclass :class:`Visitor` and implement ``visit_<kind>`` methods
for the node kinds they care about (``visit_rule`` for :class:`RuleNode`,
``visit_for`` for :class:`ForNode`, …).  A handler receives the node and a
``children`` callable; calling ``children()`` performs the default
behaviour (visit every child in order and return the list of results).
Kinds without a handler get the default behaviour directly.

Handlers are looked up once per visitor class: ``__init_subclass__`` turns
the ``visit_*`` methods into a table indexed by :class:`NodeKind`.

*Note*: because of the unusual shape of :class:`IfNode` (its ``@else``
clause hangs off ``node.else_`` instead of ``children``), the default
traversal never enters the else chain.  ``Visitor.visit_if`` visits it
explicitly; visitors overriding ``visit_if`` must do the same if they need
to see it.  There is no scaffolding for the else clause's return value.

Provides:

- ``Visitor``: base class with dispatch, context stack and bubbling
- ``run``: visit a tree with a visitor instance
"""

from __future__ import annotations

from contextlib import contextmanager
from functools import partial
from typing import Any, Callable, Dict, Iterator, List, Optional

from sassbuf.tree import (
    DIRECTIVE_KINDS,
    NODE_NAMES,
    IfNode,
    Node,
    NodeKind,
    RuleNode,
)

__all__ = ["Visitor", "run", "as_list"]

Handler = Callable[..., Any]


def run(visitor: "Visitor", root: Node) -> Any:
    """Run *visitor* on the tree rooted at *root*; return the root's result."""
    return visitor.visit(root)


def as_list(result: Any) -> List[Any]:
    """Normalize a visit result to a flat list (``None`` → ``[]``)."""
    if result is None:
        return []
    if isinstance(result, list):
        return result
    return [result]


class Visitor:
    """The base class for tree visitors."""

    _handlers: Dict[NodeKind, Optional[Handler]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._handlers = _build_handler_table(cls)

    def __init__(self) -> None:
        # Immediate parent of the node being visited.
        self.parent: Optional[Node] = None
        self._parent_directives: List[Node] = []

    # -- dispatch ----------------------------------------------------------

    def visit(self, node: Node) -> Any:
        """Visit *node* with its handler, or with the default behaviour."""
        handler = self._handlers.get(node.kind)
        if handler is None:
            return self.visit_children(node)
        return handler(self, node, partial(self.visit_children, node))

    def visit_children(self, parent: Node) -> Any:
        """Visit the children of *parent*; return their results in order.

        Subclasses override this when they need to do something with the
        children's return values.
        """
        with self.with_parent(parent):
            return [self.visit(child) for child in parent.children]

    # -- context -----------------------------------------------------------

    @contextmanager
    def with_parent(self, parent: Node) -> Iterator[None]:
        """Make *parent* the current parent for the duration of the block."""
        is_directive = parent.kind in DIRECTIVE_KINDS
        if is_directive:
            self._parent_directives.append(parent)
        old_parent, self.parent = self.parent, parent
        try:
            yield
        finally:
            if is_directive:
                self._parent_directives.pop()
            self.parent = old_parent

    @property
    def enclosing_directive(self) -> Optional[Node]:
        """The innermost directive-like node around the current node."""
        return self._parent_directives[-1] if self._parent_directives else None

    # -- default handlers --------------------------------------------------

    def visit_if(self, node: IfNode, children: Callable[[], Any]) -> Any:
        """Visit the children, then the ``@else`` clause if there is one."""
        children()
        if node.else_ is not None:
            self.visit(node.else_)
        return node

    # -- bubbling ----------------------------------------------------------

    def bubble(self, node: Node, flatten: bool = True) -> bool:
        """Lift the children of *node* out of the rule that directly encloses it.

        The enclosing rule is duplicated around the node's children and the
        duplicate is visited by this same visitor; the result becomes the
        node's new children.  Pass ``flatten=False`` to keep the visit result
        as a single group.

        Returns ``True`` when the node was bubbled, in which case the caller
        must not visit the children again.  Nodes that don't bubble, and
        nodes that aren't directly inside a rule, are left alone.
        """
        if not node.bubbles() or not isinstance(self.parent, RuleNode):
            return False

        from sassbuf.deep_copy import copy_shell

        new_rule = copy_shell(self.parent)
        new_rule.children = node.children
        with self.with_parent(node):
            result = self.visit(new_rule)
        node.children = as_list(result) if flatten else [result]

        # The group boundary moved; the layout pass recomputes group_end.
        if node.children and isinstance(node.children[-1], Node):
            node.children[-1].group_end = False
        return True


def _build_handler_table(cls: type) -> Dict[NodeKind, Optional[Handler]]:
    return {
        node_cls.kind: getattr(cls, f"visit_{name}", None)
        for node_cls, name in NODE_NAMES.items()
    }


Visitor._handlers = _build_handler_table(Visitor)
