# tests/test_environment.py
"""
Tests for lexical environments and the buffer store.
"""

from sassbuf.environment import Environment
from sassbuf.options import CompilerOptions, OutputStyle
from sassbuf.script import Number, String


class TestVariables:

    def test_lookup_reads_through_parents(self):
        root = Environment()
        root.set_var("color", String("red"))
        child = Environment(root)
        assert child.var("color") == String("red")

    def test_set_var_assigns_to_defining_scope(self):
        root = Environment()
        root.set_var("n", Number(1))
        child = Environment(root)
        child.set_var("n", Number(2))
        assert root.var("n") == Number(2)

    def test_set_local_var_shadows(self):
        root = Environment()
        root.set_var("n", Number(1))
        child = Environment(root)
        child.set_local_var("n", Number(2))
        assert root.var("n") == Number(1)
        assert child.var("n") == Number(2)

    def test_names_are_normalized(self):
        env = Environment()
        env.set_var("main_width", Number(10, "px"))
        assert env.var("main-width") == Number(10, "px")

    def test_missing_is_none(self):
        assert Environment().var("nope") is None


class TestOptions:

    def test_children_inherit_options(self):
        options = CompilerOptions(style=OutputStyle.COMPRESSED)
        child = Environment(Environment(options=options))
        assert child.options is options

    def test_default_options(self):
        assert Environment().options.style is OutputStyle.EXPANDED


class TestSelector:

    def test_selector_inherited(self):
        root = Environment()
        root.selector = ["a"]
        assert Environment(root).selector == ["a"]

    def test_no_selector_at_root(self):
        assert Environment().selector is None


class TestBufferStore:

    def test_root_is_a_scope(self):
        root = Environment()
        assert root.buffer_scope
        assert root.buffer_env is root

    def test_block_env_appends_through_scope(self):
        root = Environment()
        block = Environment(root)
        assert not block.buffer_scope
        assert block.buffer_env is root

    def test_append_creates_entry(self):
        env = Environment()
        env.append_buffer("late", "g0")
        assert env.buffer("late") == ["g0"]

    def test_entries_keep_insertion_order(self):
        env = Environment()
        for group in ("g0", "g1", "g2"):
            env.append_buffer("late", group)
        assert env.buffer("late") == ["g0", "g1", "g2"]

    def test_child_scope_appends_to_existing_entry(self):
        root = Environment()
        root.append_buffer("shared", "g0")
        child = Environment(root, buffer_scope=True)
        child.append_buffer("shared", "g1")
        assert root.buffer("shared") == ["g0", "g1"]

    def test_new_name_in_child_scope_is_private(self):
        root = Environment()
        child = Environment(root, buffer_scope=True)
        child.append_buffer("private", "g0")
        sibling = Environment(root, buffer_scope=True)
        assert child.buffer("private") == ["g0"]
        assert sibling.buffer("private") is None
        assert root.buffer("private") is None

    def test_reading_does_not_consume(self):
        env = Environment()
        env.append_buffer("late", "g0")
        env.buffer("late")
        assert env.buffer("late") == ["g0"]

    def test_buffer_names_nearest_first(self):
        root = Environment()
        root.append_buffer("outer", "g0")
        child = Environment(root, buffer_scope=True)
        child.append_buffer("inner", "g1")
        assert child.buffer_names() == ["inner", "outer"]
