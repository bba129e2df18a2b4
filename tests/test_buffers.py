# tests/test_buffers.py
"""
End-to-end tests for @buffer / @flush: source text → CSS text.
"""

import pytest

from sassbuf import NestingError, SassSyntaxError, compile_string
from tests.conftest import (
    BUFFER_IN_RULE_CSS,
    BUFFER_IN_RULE_SCSS,
    FOR_LOOP_CSS,
    FOR_LOOP_SCSS,
    IMPORT_IN_BUFFER_SCSS,
    MIXIN_BUFFER_SCSS,
    MIXIN_SASS,
    NESTED_BUFFER_CSS,
    NESTED_BUFFER_SASS,
    NESTED_BUFFER_SCSS,
    PRIVATE_MIXIN_BUFFER_SCSS,
    TWO_GREETINGS_CSS,
    TWO_GREETINGS_SCSS,
    squash,
)


class TestBufferAndFlush:

    def test_content_moves_to_flush(self):
        assert compile_string(BUFFER_IN_RULE_SCSS) == BUFFER_IN_RULE_CSS

    def test_groups_emitted_in_declaration_order(self):
        assert compile_string(TWO_GREETINGS_SCSS) == TWO_GREETINGS_CSS

    def test_selector_context_preserved(self):
        assert compile_string(NESTED_BUFFER_SCSS) == NESTED_BUFFER_CSS

    def test_nothing_at_declaration_site(self):
        css = compile_string("html {\n  color: black;\n  @buffer b {\n    p { color: red; }\n  }\n}\n")
        assert css == "html {\n  color: black;\n}\n"

    def test_flush_position_is_respected(self):
        src = "@buffer b { x { y: z; } }\na { b: c; }\n@flush b;\nd { e: f; }"
        assert squash(compile_string(src)) == squash(
            "a { b: c; } x { y: z; } d { e: f; }"
        )

    def test_flush_before_buffer_is_empty(self):
        assert compile_string("@flush x;\n@buffer x { a { b: c; } }") == ""

    def test_flush_sees_only_earlier_groups(self):
        src = "@buffer x { a { b: 1; } }\n@flush x;\n@buffer x { c { d: 2; } }\n@flush x;"
        assert squash(compile_string(src)) == squash(
            "a { b: 1; } a { b: 1; } c { d: 2; }"
        )

    def test_undeclared_flush_is_silent(self):
        assert compile_string("@flush nothing;\na { b: c; }") == "a {\n  b: c;\n}\n"

    def test_declaration_without_body(self):
        src = "@buffer e;\n@buffer e { }\n@flush e;\np { c: d; }"
        assert compile_string(src) == "p {\n  c: d;\n}\n"

    def test_comment_only_body_contributes_nothing(self):
        src = "@buffer b { /* note */ }\n@flush b;\np { c: d; }"
        assert compile_string(src) == "p {\n  c: d;\n}\n"

    def test_comment_only_body_still_declares(self):
        src = "@buffer late { /* shared */ }\n@mixin m { @buffer late { a { b: c; } } }\np { @include m; }\n@flush late;"
        assert compile_string(src) == "p a {\n  b: c;\n}\n"

    def test_names_normalized(self):
        src = "@buffer foo_bar { a { b: c; } }\n@flush foo-bar;"
        assert compile_string(src) == "a {\n  b: c;\n}\n"

    def test_interpolated_name(self):
        src = "$dynamic: foo;\n@buffer #{$dynamic + '-value'}-name { a { b: c; } }\n@flush foo-value-name;"
        assert compile_string(src) == "a {\n  b: c;\n}\n"

    def test_properties_flushed_into_rule(self):
        src = "@buffer late { color: red; }\np { @flush late; }"
        assert compile_string(src) == "p {\n  color: red;\n}\n"

    def test_buffer_inside_media(self):
        src = "@media print { p { @buffer late { color: red; } } }\n@flush late;"
        assert compile_string(src) == "p {\n  color: red;\n}\n"

    def test_media_inside_buffer(self):
        src = "p { @buffer late { @media print { color: red; } } }\n@flush late;"
        assert squash(compile_string(src)) == squash("@media print { p { color: red; } }")

    def test_buffer_in_loop(self):
        src = "@for $i from 1 through 2 {\n  .m-#{$i} {\n    @buffer late { w: $i; }\n  }\n}\n@flush late;"
        assert squash(compile_string(src)) == squash(".m-1 { w: 1; } .m-2 { w: 2; }")

    def test_flush_twice_emits_twice(self):
        css = compile_string(BUFFER_IN_RULE_SCSS + "@flush b;\n")
        assert css.count("property: value;") == 2


class TestMixinScopes:

    def test_mixin_appends_to_declared_buffer(self):
        assert compile_string(MIXIN_BUFFER_SCSS) == "p a {\n  b: c;\n}\n"

    def test_new_name_in_mixin_is_private(self):
        assert compile_string(PRIVATE_MIXIN_BUFFER_SCSS) == ""

    def test_flush_inside_mixin_sees_private_buffer(self):
        src = "@mixin m {\n  @buffer own { a { b: c; } }\n  @flush own;\n}\np { @include m; }"
        assert compile_string(src) == "p a {\n  b: c;\n}\n"


class TestErrors:

    def test_import_in_buffer(self):
        with pytest.raises(NestingError, match="within buffers"):
            compile_string(IMPORT_IN_BUFFER_SCSS)

    def test_flush_with_body(self):
        with pytest.raises(SassSyntaxError, match="may not have a body"):
            compile_string("@flush b { a { b: c; } }")

    def test_buffer_without_name(self):
        with pytest.raises(SassSyntaxError, match="expected a buffer name"):
            compile_string("a { b: c; }\n@buffer;")

    def test_error_location(self):
        with pytest.raises(SassSyntaxError) as info:
            compile_string("a { b: c; }\n\n@flush;", filename="site.scss")
        assert str(info.value).startswith("site.scss:3: error:")


class TestIndentedSyntax:

    def test_nested_buffer(self):
        assert compile_string(NESTED_BUFFER_SASS, syntax="sass") == NESTED_BUFFER_CSS

    def test_mixin_shorthands(self):
        assert compile_string(MIXIN_SASS, syntax="sass") == ".a {\n  width: 5px;\n}\n"


class TestScripting:

    def test_for_loop(self):
        assert compile_string(FOR_LOOP_SCSS) == FOR_LOOP_CSS

    def test_if_else(self):
        src = "$x: 2;\np {\n  @if $x == 1 { a: one; }\n  @else if $x == 2 { a: two; }\n  @else { a: other; }\n}"
        assert compile_string(src) == "p {\n  a: two;\n}\n"

    def test_mixin_and_variables(self):
        src = "$c: red;\n@mixin box($w, $h: 10px) { width: $w; height: $h; }\n.a { @include box(5px); color: $c; }"
        assert compile_string(src) == ".a {\n  width: 5px;\n  height: 10px;\n  color: red;\n}\n"

    def test_each(self):
        src = "@each $c in red, blue { .#{$c} { color: $c; } }"
        assert compile_string(src) == ".red {\n  color: red;\n}\n\n.blue {\n  color: blue;\n}\n"
