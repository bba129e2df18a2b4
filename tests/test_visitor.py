# tests/test_visitor.py
"""
Tests for the visitor base class: dispatch, parent tracking and bubbling.
"""

import pytest

from sassbuf.tree import (
    BufferNode,
    BufferTarget,
    IfNode,
    MediaNode,
    NodeKind,
    PropNode,
    RootNode,
    RuleNode,
)
from sassbuf.visitor import Visitor, as_list, run


def _sample_tree():
    prop = PropNode(name=["color"])
    buffer = BufferNode(target=BufferTarget(["late"]), children=[prop])
    rule = RuleNode(rule=["a"], children=[buffer])
    return RootNode(children=[rule]), rule, buffer, prop


class PropRecorder(Visitor):

    def __init__(self):
        super().__init__()
        self.seen = []

    def visit_prop(self, node, children):
        self.seen.append((node, self.parent, self.enclosing_directive))
        return node


class Exploding(Visitor):

    def visit_prop(self, node, children):
        raise RuntimeError("boom")


class TestDispatch:

    def test_handler_table_covers_every_kind(self):
        assert set(PropRecorder._handlers) == set(NodeKind)

    def test_handler_found_by_kind(self):
        assert PropRecorder._handlers[NodeKind.PROP] is PropRecorder.visit_prop
        assert PropRecorder._handlers[NodeKind.RULE] is None

    def test_default_traversal_reaches_nested_nodes(self):
        root, rule, buffer, prop = _sample_tree()
        visitor = PropRecorder()
        run(visitor, root)
        assert [seen[0] for seen in visitor.seen] == [prop]

    def test_default_returns_child_results(self):
        root, rule, buffer, prop = _sample_tree()
        assert PropRecorder().visit(buffer) == [prop]

    def test_subclass_tables_are_independent(self):
        assert Visitor._handlers[NodeKind.PROP] is None


class TestContext:

    def test_parent_is_immediate_parent(self):
        root, rule, buffer, prop = _sample_tree()
        visitor = PropRecorder()
        visitor.visit(root)
        assert visitor.seen[0][1] is buffer

    def test_enclosing_directive_is_the_buffer(self):
        root, rule, buffer, prop = _sample_tree()
        visitor = PropRecorder()
        visitor.visit(root)
        assert visitor.seen[0][2] is buffer

    def test_rules_are_not_directives(self):
        prop = PropNode(name=["color"])
        root = RootNode(children=[RuleNode(rule=["a"], children=[prop])])
        visitor = PropRecorder()
        visitor.visit(root)
        assert visitor.seen[0][2] is None

    def test_context_restored_after_visit(self):
        root, _, _, _ = _sample_tree()
        visitor = PropRecorder()
        visitor.visit(root)
        assert visitor.parent is None
        assert visitor.enclosing_directive is None

    def test_context_restored_after_exception(self):
        root, _, _, _ = _sample_tree()
        visitor = Exploding()
        with pytest.raises(RuntimeError):
            visitor.visit(root)
        assert visitor.parent is None
        assert visitor.enclosing_directive is None


class TestIfElse:

    def test_base_visit_if_enters_else_chain(self):
        first, second = PropNode(name=["a"]), PropNode(name=["b"])
        node = IfNode(children=[first], else_=IfNode(children=[second]))
        visitor = PropRecorder()
        visitor.visit(node)
        assert [seen[0] for seen in visitor.seen] == [first, second]


class TestBubble:

    def test_does_not_bubble_outside_rule(self):
        media = MediaNode(children=[PropNode(name=["a"])])
        visitor = Visitor()
        visitor.parent = RootNode()
        assert not visitor.bubble(media)

    def test_non_bubbling_node_is_left_alone(self):
        visitor = Visitor()
        visitor.parent = RuleNode(rule=["a"])
        assert not visitor.bubble(RuleNode(rule=["b"]))

    def test_wraps_children_in_copy_of_parent(self):
        prop = PropNode(name=["color"])
        buffer = BufferNode(target=BufferTarget(["late"]), children=[prop])
        parent = RuleNode(rule=["a"], resolved_rules=["a"], children=[buffer])

        class Identity(Visitor):
            def visit_rule(self, node, children):
                return node

        visitor = Identity()
        visitor.parent = parent
        assert visitor.bubble(buffer)
        wrapper = buffer.children[0]
        assert isinstance(wrapper, RuleNode)
        assert wrapper is not parent
        assert wrapper.resolved_rules == ["a"]
        assert wrapper.children == [prop]
        assert parent.children == [buffer]

    def test_flatten_false_keeps_one_group(self):
        prop = PropNode(name=["color"])
        extra = PropNode(name=["margin"])
        buffer = BufferNode(target=BufferTarget(["late"]), children=[prop])
        parent = RuleNode(rule=["a"], resolved_rules=["a"], children=[buffer])

        class Pair(Visitor):
            def visit_rule(self, node, children):
                return [node, extra]

        visitor = Pair()
        visitor.parent = parent
        assert visitor.bubble(buffer, flatten=False)
        assert len(buffer.children) == 1
        wrapper, second = buffer.children[0]
        assert wrapper.resolved_rules == ["a"]
        assert wrapper.children == [prop]
        assert second is extra

    def test_flatten_splices_the_result(self):
        extra = PropNode(name=["margin"])
        extra.group_end = True
        buffer = BufferNode(target=BufferTarget(["late"]), children=[PropNode(name=["color"])])
        parent = RuleNode(rule=["a"], resolved_rules=["a"], children=[buffer])

        class Pair(Visitor):
            def visit_rule(self, node, children):
                return [node, extra]

        visitor = Pair()
        visitor.parent = parent
        assert visitor.bubble(buffer)
        assert len(buffer.children) == 2
        assert buffer.children[1] is extra
        assert not extra.group_end


class TestAsList:

    def test_none(self):
        assert as_list(None) == []

    def test_scalar(self):
        node = PropNode()
        assert as_list(node) == [node]

    def test_list_passthrough(self):
        items = [PropNode()]
        assert as_list(items) is items
