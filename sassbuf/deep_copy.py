# sassbuf/deep_copy.py
"""A visitor for copying the full structure of a stylesheet tree.

Buffered content is spliced into every place it is flushed, so each splice
must be an independent clone: no node and no mutable expression may be
shared between the original and the copy.  Literal values (strings,
numbers) are immutable and are shared.
"""

from __future__ import annotations

import copy
from typing import Any, Callable, List, Optional, Tuple

from sassbuf.script import Expression, copy_fragments
from sassbuf.tree import (
    BufferNode,
    DebugNode,
    DirectiveNode,
    EachNode,
    ExtendNode,
    FlushNode,
    ForNode,
    FunctionNode,
    IfNode,
    MediaNode,
    MixinDefNode,
    MixinNode,
    Node,
    PropNode,
    ReturnNode,
    RuleNode,
    SupportsNode,
    VariableNode,
    WarnNode,
    WhileNode,
)
from sassbuf.visitor import Visitor

__all__ = ["DeepCopy", "deep_copy", "copy_shell"]

Children = Callable[[], Any]


def deep_copy(node: Node) -> Node:
    """Return an independent clone of the subtree rooted at *node*."""
    return DeepCopy().visit(node)


def copy_shell(node: Node) -> Node:
    """Deep copy *node* without its children."""
    shell = copy.copy(node)
    shell.children = []
    return deep_copy(shell)


def _copy(expr: Optional[Expression]) -> Optional[Expression]:
    return expr.deep_copy() if expr is not None else None


def _copy_arg_defs(args: List[Tuple[str, Optional[Expression]]]) -> List[Tuple[str, Optional[Expression]]]:
    return [(name, _copy(default)) for name, default in args]


class DeepCopy(Visitor):

    def visit(self, node: Node) -> Node:
        return super().visit(copy.copy(node))

    def visit_children(self, parent: Node) -> Node:
        with self.with_parent(parent):
            parent.children = [self.visit(c) for c in parent.children]
        return parent

    def visit_debug(self, node: DebugNode, children: Children) -> Node:
        node.expr = _copy(node.expr)
        return children()

    def visit_each(self, node: EachNode, children: Children) -> Node:
        node.list = _copy(node.list)
        return children()

    def visit_extend(self, node: ExtendNode, children: Children) -> Node:
        node.selector = copy_fragments(node.selector)
        return children()

    def visit_for(self, node: ForNode, children: Children) -> Node:
        node.from_ = _copy(node.from_)
        node.to = _copy(node.to)
        return children()

    def visit_function(self, node: FunctionNode, children: Children) -> Node:
        node.args = _copy_arg_defs(node.args)
        return children()

    def visit_if(self, node: IfNode, children: Children) -> Node:
        node.expr = _copy(node.expr)
        if node.else_ is not None:
            node.else_ = self.visit(node.else_)
        return children()

    def visit_mixindef(self, node: MixinDefNode, children: Children) -> Node:
        node.args = _copy_arg_defs(node.args)
        return children()

    def visit_mixin(self, node: MixinNode, children: Children) -> Node:
        node.args = [a.deep_copy() for a in node.args]
        node.keywords = {k: v.deep_copy() for k, v in node.keywords.items()}
        return children()

    def visit_prop(self, node: PropNode, children: Children) -> Node:
        node.name = copy_fragments(node.name)
        node.value = _copy(node.value)
        return children()

    def visit_return(self, node: ReturnNode, children: Children) -> Node:
        node.expr = _copy(node.expr)
        return children()

    def visit_rule(self, node: RuleNode, children: Children) -> Node:
        node.rule = copy_fragments(node.rule)
        if node.resolved_rules is not None:
            node.resolved_rules = list(node.resolved_rules)
        return children()

    def visit_variable(self, node: VariableNode, children: Children) -> Node:
        node.expr = _copy(node.expr)
        return children()

    def visit_warn(self, node: WarnNode, children: Children) -> Node:
        node.expr = _copy(node.expr)
        return children()

    def visit_while(self, node: WhileNode, children: Children) -> Node:
        node.expr = _copy(node.expr)
        return children()

    def visit_directive(self, node: DirectiveNode, children: Children) -> Node:
        node.value = copy_fragments(node.value)
        return children()

    def visit_media(self, node: MediaNode, children: Children) -> Node:
        node.query = copy_fragments(node.query)
        return children()

    def visit_supports(self, node: SupportsNode, children: Children) -> Node:
        node.condition = copy_fragments(node.condition)
        return children()

    def visit_buffer(self, node: BufferNode, children: Children) -> Node:
        node.target = node.target.deep_copy()
        return children()

    def visit_flush(self, node: FlushNode, children: Children) -> Node:
        node.target = node.target.deep_copy()
        node.buffered = list(node.buffered)
        return children()
