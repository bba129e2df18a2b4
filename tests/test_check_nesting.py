# tests/test_check_nesting.py
"""
Tests for nesting validation.
"""

import pytest

from sassbuf.check_nesting import check_nesting
from sassbuf.errors import NestingError, SassSyntaxError
from sassbuf.parser import parse_scss
from tests.conftest import (
    BUFFER_IN_RULE_SCSS,
    IMPORT_IN_BUFFER_SCSS,
    MIXIN_BUFFER_SCSS,
    NESTED_BUFFER_SCSS,
)


def _check(src):
    return check_nesting(parse_scss(src))


class TestAccepted:

    @pytest.mark.parametrize("src", [
        BUFFER_IN_RULE_SCSS,
        NESTED_BUFFER_SCSS,
        MIXIN_BUFFER_SCSS,
        "@buffer late { color: red; }",
        "a { @if true { color: red; } }",
        "@media print { color: red; }",
        '@import "base.css";',
        "a { @extend .b; }",
        "@function f($x) { $y: $x; @if $y { @return 1; } @return 2; }",
    ])
    def test_valid_nesting(self, src):
        root = _check(src)
        assert root is not None

    def test_returns_the_same_tree(self):
        root = parse_scss(BUFFER_IN_RULE_SCSS)
        assert check_nesting(root) is root


class TestRejected:

    def test_import_in_buffer(self):
        with pytest.raises(NestingError) as info:
            _check(IMPORT_IN_BUFFER_SCSS)
        assert info.value.message == "Import directives may not be used within buffers."
        assert info.value.parent_kind == "buffer"
        assert info.value.child_kind == "import"
        assert info.value.line == 3

    def test_import_deep_in_buffer(self):
        with pytest.raises(NestingError, match="within buffers"):
            _check('@buffer b { a { @if true { @import "x.css"; } } }')

    def test_import_in_rule(self):
        with pytest.raises(NestingError, match="root of a document"):
            _check('a { @import "x.css"; }')

    def test_property_at_root(self):
        with pytest.raises(NestingError, match="Properties are only allowed"):
            _check("color: red;")

    def test_property_in_control_at_root(self):
        with pytest.raises(NestingError):
            _check("@if true { color: red; }")

    def test_extend_at_root(self):
        with pytest.raises(NestingError, match="Extend directives"):
            _check("@extend .a;")

    def test_mixin_in_rule(self):
        with pytest.raises(NestingError, match="Mixins may only be defined"):
            _check("a { @mixin m { } }")

    def test_function_in_rule(self):
        with pytest.raises(NestingError, match="Functions may only be defined"):
            _check("a { @function f() { @return 1; } }")

    def test_return_outside_function(self):
        with pytest.raises(NestingError, match="@return"):
            _check("a { @return 1; }")

    def test_rule_in_function(self):
        with pytest.raises(NestingError, match="Functions can only contain"):
            _check("@function f() { a { b: c; } }")

    def test_nesting_error_is_a_syntax_error(self):
        with pytest.raises(SassSyntaxError):
            _check(IMPORT_IN_BUFFER_SCSS)

    def test_gcc_format(self):
        with pytest.raises(NestingError) as info:
            check_nesting(parse_scss(IMPORT_IN_BUFFER_SCSS, "site.scss"))
        assert str(info.value).startswith("site.scss:3: error: Import directives")
