# tests/test_codegen.py
"""
Tests for CSS generation: the emitter and both output styles.
"""

import pytest

from sassbuf import compile_string
from sassbuf.codegen import CssEmitter, to_css
from sassbuf.options import CompilerOptions, OutputStyle
from sassbuf.tree import RootNode


class TestCssEmitter:

    def test_expanded_block(self):
        out = CssEmitter()
        with out.block("a"):
            out.declaration("b: c")
        assert out.getvalue() == "a {\n  b: c;\n}\n"

    def test_custom_indent(self):
        out = CssEmitter(indent_str="    ")
        with out.block("a"):
            out.declaration("b: c")
        assert out.getvalue() == "a {\n    b: c;\n}\n"

    def test_nested_blocks(self):
        out = CssEmitter()
        with out.block("@media print"):
            with out.block("a"):
                out.declaration("b: c")
        assert out.getvalue() == "@media print {\n  a {\n    b: c;\n  }\n}\n"

    def test_compressed_separates_declarations(self):
        out = CssEmitter(compressed=True)
        with out.block("a"):
            out.declaration("b:c")
            out.declaration("d:e")
        assert out.getvalue() == "a{b:c;d:e}"

    def test_compressed_top_level_declarations_terminated(self):
        out = CssEmitter(compressed=True)
        out.declaration("@import x")
        with out.block("a"):
            out.declaration("b:c")
        assert out.getvalue() == "@import x;a{b:c}"

    def test_blank_lines_only_when_expanded(self):
        expanded, compressed = CssEmitter(), CssEmitter(compressed=True)
        expanded.emit_blank()
        compressed.emit_blank()
        assert expanded.getvalue() == "\n"
        assert compressed.getvalue() == ""


class TestExpanded:

    def test_empty_stylesheet(self):
        assert to_css(RootNode()) == ""
        assert compile_string("") == ""

    def test_single_rule(self):
        assert compile_string("a { b: c; }") == "a {\n  b: c;\n}\n"

    def test_selector_list(self):
        assert compile_string("a, b { c: d; }") == "a, b {\n  c: d;\n}\n"

    def test_blank_line_between_groups(self):
        css = compile_string("a { b: c; }\nd { e: f; }")
        assert css == "a {\n  b: c;\n}\n\nd {\n  e: f;\n}\n"

    def test_nested_rules_form_one_group(self):
        css = compile_string("a { b: c; d { e: f; } }")
        assert css == "a {\n  b: c;\n}\na d {\n  e: f;\n}\n"

    def test_media_output(self):
        css = compile_string("p { color: red; @media screen { color: blue; } }")
        assert css == (
            "p {\n  color: red;\n}\n"
            "@media screen {\n  p {\n    color: blue;\n  }\n}\n"
        )

    def test_comments_kept(self):
        css = compile_string("/* hello */\na { b: c; }")
        assert css.startswith("/* hello */\n")

    def test_silent_comments_dropped(self):
        assert compile_string("// hello\na { b: c; }") == "a {\n  b: c;\n}\n"

    def test_import(self):
        assert compile_string('@import "print.css";') == '@import "print.css";\n'

    def test_block_directive(self):
        css = compile_string("@font-face { font-family: x; }")
        assert css == "@font-face {\n  font-family: x;\n}\n"

    def test_statement_directive(self):
        assert compile_string('@charset "UTF-8";') == '@charset "UTF-8";\n'


class TestCompressed:

    @pytest.fixture
    def options(self):
        return {"style": "compressed"}

    def test_rule(self, options):
        assert compile_string("a { b: c; d: e; }", **options) == "a{b:c;d:e}\n"

    def test_selector_list(self, options):
        assert compile_string("a, b { c: d; }", **options) == "a,b{c:d}\n"

    def test_only_loud_comments(self, options):
        css = compile_string("/*! keep */\n/* drop */\na { b: c; }", **options)
        assert css == "/*! keep */a{b:c}\n"

    def test_media(self, options):
        css = compile_string("@media print { a { b: c; } }", **options)
        assert css == "@media print{a{b:c}}\n"

    def test_options_object(self):
        root = RootNode()
        assert to_css(root, CompilerOptions(style=OutputStyle.COMPRESSED)) == ""
