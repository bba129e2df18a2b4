# tests/test_cssize.py
"""
Tests for the layout pass: hoisting, bubbling and flush expansion.
"""

import pytest

from sassbuf.errors import NestingError
from sassbuf.tree import BufferNode, FlushNode, MediaNode, PropNode, RuleNode
from tests.conftest import (
    BUFFER_IN_RULE_SCSS,
    NESTED_BUFFER_SCSS,
    TWO_GREETINGS_SCSS,
    find_all,
    layout,
)


class TestHoisting:

    def test_nested_rule_follows_parent(self):
        root = layout("a { b: c; d { e: f; } }")
        assert [r.resolved_rules for r in root.children] == [["a"], ["a d"]]

    def test_rule_without_properties_disappears(self):
        root = layout("a { d { e: f; } }")
        assert [r.resolved_rules for r in root.children] == [["a d"]]

    def test_rules_keep_only_properties(self):
        root = layout("a { b: c; d { e: f; } }")
        assert all(isinstance(c, PropNode) for c in root.children[0].children)

    def test_group_end_marks_last_node_of_group(self):
        root = layout("a { b: c; d { e: f; } }\ng { h: i; }")
        assert [n.group_end for n in root.children] == [False, True, True]


class TestMedia:

    def test_media_bubbles_out_of_rule(self):
        root = layout("p { color: red; @media screen { color: blue; } }")
        rule, media = root.children
        assert isinstance(media, MediaNode)
        inner = media.children[0]
        assert isinstance(inner, RuleNode)
        assert inner.resolved_rules == ["p"]
        assert inner.children[0].resolved_value == "blue"

    def test_nested_media_merged(self):
        root = layout("@media screen { p { @media (min-width: 10px) { a: b; } } }")
        assert len(root.children) == 1
        assert root.children[0].resolved_query == "screen and (min-width: 10px)"


class TestBuffers:

    def test_buffer_produces_nothing_in_place(self):
        root = layout("html {\n  @buffer b {\n    c: d;\n  }\n}\n")
        assert root.children == []

    def test_flush_replaced_by_content(self):
        root = layout(BUFFER_IN_RULE_SCSS)
        assert not find_all(root, BufferNode)
        assert not find_all(root, FlushNode)
        rule = root.children[0]
        assert rule.resolved_rules == ["html"]
        assert rule.children[0].resolved_name == "property"

    def test_bubbled_buffer_carries_full_selector(self):
        root = layout(NESTED_BUFFER_SCSS)
        assert [r.resolved_rules for r in root.children] == [["html body p"]]

    def test_groups_in_order(self):
        root = layout(TWO_GREETINGS_SCSS)
        assert [r.resolved_rules for r in root.children] == [["header"], ["footer"]]

    def test_every_flush_gets_fresh_copies(self):
        root = layout("@buffer x { a { b: c; } }\n@flush x;\n@flush x;")
        first, second = root.children
        assert first == second
        assert first is not second
        assert first.children[0] is not second.children[0]

    def test_flush_inside_rule_is_hoisted(self):
        root = layout("@buffer x { a { b: c; } }\np { color: red; @flush x; }")
        assert [r.resolved_rules for r in root.children] == [["p"], ["a"]]

    def test_flush_properties_land_in_rule(self):
        root = layout("@buffer x { color: red; }\np { @flush x; }")
        assert root.children[0].resolved_rules == ["p"]
        assert root.children[0].children[0].resolved_value == "red"

    def test_flush_properties_at_root(self):
        with pytest.raises(NestingError, match="cannot be flushed") as info:
            layout("@buffer x { color: red; }\n\n@flush x;")
        assert info.value.line == 3
        assert info.value.child_kind == "prop"
