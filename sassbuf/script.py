#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
sassbuf/script.py
=================

SassScript: the small expression language used in property values,
variable assignments, control directives and ``#{...}`` interpolation.

Two families of objects live here:

* **values** (``Null``, ``Bool``, ``Number``, ``String``, ``ListValue``):
  frozen dataclasses, the result of evaluation.  They are immutable, so
  ``deep_copy()`` returns ``self``;
* **expressions** (``Variable``, ``Operation``, ``UnaryOperation``,
  ``Funcall``, ``ListLiteral``, ``Interpolation``): mutable trees owned by
  the node that holds them.  ``deep_copy()`` rebuilds the whole tree.

A *fragment list* is the representation of anything that may contain
interpolation (selectors, property names, buffer names): a list whose items
are either plain ``str`` or expressions.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from sassbuf.errors import ArgumentError, SassRuntimeError, UndefinedVariableError

__all__ = [
    "Expression",
    "Value",
    "Null",
    "Bool",
    "Number",
    "String",
    "ListValue",
    "Variable",
    "Operation",
    "UnaryOperation",
    "Funcall",
    "ListLiteral",
    "Interpolation",
    "Fragment",
    "NULL",
    "TRUE",
    "FALSE",
    "normalize_name",
    "interpolate",
    "copy_fragments",
    "fragments_text",
    "BUILTINS",
]

logger = logging.getLogger(__name__)

_UNDERSCORE_RUN = re.compile(r"_+")


def normalize_name(name: str) -> str:
    """Canonical spelling of an identifier: each run of ``_`` becomes ``-``."""
    return _UNDERSCORE_RUN.sub("-", name)


# ═══════════════════════════════════════════════════════════════════════════
# BASE CLASSES
# ═══════════════════════════════════════════════════════════════════════════

class Expression:
    """Base class of everything that can be evaluated in an environment."""

    def perform(self, env: Any) -> "Value":
        raise NotImplementedError

    def deep_copy(self) -> "Expression":
        raise NotImplementedError


Fragment = Union[str, Expression]


class Value(Expression):
    """An evaluated SassScript value."""

    type_name = "value"

    def perform(self, env: Any) -> "Value":
        return self

    def deep_copy(self) -> "Value":
        return self

    def truthy(self) -> bool:
        return True

    def to_css(self) -> str:
        raise NotImplementedError

    def to_plain(self) -> str:
        """Rendering used inside interpolation (strings lose their quotes)."""
        return self.to_css()

    # Sass treats most operators on non-numbers as string concatenation.

    def plus(self, other: "Value") -> "Value":
        if isinstance(other, String):
            return String(self.to_css() + other.value, other.quoted)
        return String(self.to_css() + other.to_css())

    def minus(self, other: "Value") -> "Value":
        return String(f"{self.to_css()}-{other.to_css()}")

    def div(self, other: "Value") -> "Value":
        return String(f"{self.to_css()}/{other.to_css()}")

    def times(self, other: "Value") -> "Value":
        raise SassRuntimeError(
            f"Undefined operation: \"{self.to_css()} times {other.to_css()}\"."
        )

    def mod(self, other: "Value") -> "Value":
        raise SassRuntimeError(
            f"Undefined operation: \"{self.to_css()} mod {other.to_css()}\"."
        )

    def eq(self, other: "Value") -> "Bool":
        return Bool(self == other)

    def neq(self, other: "Value") -> "Bool":
        return Bool(not self.eq(other).value)

    def _compare(self, other: "Value", op: str) -> "Bool":
        raise SassRuntimeError(f"\"{self.to_css()}\" is not a number for `{op}'.")

    def lt(self, other: "Value") -> "Bool":
        return self._compare(other, "<")

    def gt(self, other: "Value") -> "Bool":
        return self._compare(other, ">")

    def lte(self, other: "Value") -> "Bool":
        return self._compare(other, "<=")

    def gte(self, other: "Value") -> "Bool":
        return self._compare(other, ">=")

    def items(self) -> Tuple["Value", ...]:
        """View any value as a list (a single value is a one-item list)."""
        return (self,)


# ═══════════════════════════════════════════════════════════════════════════
# VALUES
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Null(Value):
    type_name = "null"

    def truthy(self) -> bool:
        return False

    def to_css(self) -> str:
        return ""

    def items(self) -> Tuple[Value, ...]:
        return ()


@dataclass(frozen=True)
class Bool(Value):
    value: bool = False
    type_name = "bool"

    def truthy(self) -> bool:
        return self.value

    def to_css(self) -> str:
        return "true" if self.value else "false"


NULL = Null()
TRUE = Bool(True)
FALSE = Bool(False)


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if float(value).is_integer() and abs(value) < 1e16:
        return str(int(value))
    return f"{value:.5f}".rstrip("0").rstrip(".")


@dataclass(frozen=True)
class Number(Value):
    value: float = 0
    unit: str = ""
    type_name = "number"

    def to_css(self) -> str:
        return _format_number(self.value) + self.unit

    def _coerce_unit(self, other: "Number", op: str) -> str:
        if self.unit and other.unit and self.unit != other.unit:
            raise SassRuntimeError(
                f"Incompatible units: '{other.unit}' and '{self.unit}' ({op})."
            )
        return self.unit or other.unit

    def plus(self, other: Value) -> Value:
        if isinstance(other, Number):
            return Number(self.value + other.value, self._coerce_unit(other, "+"))
        return super().plus(other)

    def minus(self, other: Value) -> Value:
        if isinstance(other, Number):
            return Number(self.value - other.value, self._coerce_unit(other, "-"))
        return super().minus(other)

    def times(self, other: Value) -> Value:
        if not isinstance(other, Number):
            return super().times(other)
        if self.unit and other.unit:
            raise SassRuntimeError(
                f"{self.to_css()}*{other.to_css()} isn't a valid CSS value."
            )
        return Number(self.value * other.value, self.unit or other.unit)

    def div(self, other: Value) -> Value:
        if not isinstance(other, Number):
            return super().div(other)
        if other.value == 0:
            raise SassRuntimeError("Division by zero.")
        if other.unit and other.unit != self.unit:
            raise SassRuntimeError(
                f"{self.to_css()}/{other.to_css()} isn't a valid CSS value."
            )
        unit = "" if other.unit else self.unit
        return Number(self.value / other.value, unit)

    def mod(self, other: Value) -> Value:
        if not isinstance(other, Number):
            return super().mod(other)
        if other.value == 0:
            raise SassRuntimeError("Division by zero.")
        return Number(self.value % other.value, self._coerce_unit(other, "%"))

    def eq(self, other: Value) -> Bool:
        return Bool(
            isinstance(other, Number)
            and self.value == other.value
            and self.unit == other.unit
        )

    def _compare(self, other: Value, op: str) -> Bool:
        if not isinstance(other, Number):
            raise SassRuntimeError(f"\"{other.to_css()}\" is not a number for `{op}'.")
        self._coerce_unit(other, op)
        return Bool({
            "<": self.value < other.value,
            ">": self.value > other.value,
            "<=": self.value <= other.value,
            ">=": self.value >= other.value,
        }[op])


@dataclass(frozen=True)
class String(Value):
    value: str = ""
    quoted: bool = False
    type_name = "string"

    def to_css(self) -> str:
        if not self.quoted:
            return self.value
        return '"' + self.value.replace("\\", "\\\\").replace('"', '\\"') + '"'

    def to_plain(self) -> str:
        return self.value

    def plus(self, other: Value) -> Value:
        return String(self.value + other.to_plain(), self.quoted)

    def eq(self, other: Value) -> Bool:
        return Bool(isinstance(other, String) and self.value == other.value)


@dataclass(frozen=True)
class ListValue(Value):
    values: Tuple[Value, ...] = ()
    separator: str = "space"       # "space" or "comma"
    type_name = "list"

    def to_css(self) -> str:
        joiner = ", " if self.separator == "comma" else " "
        return joiner.join(v.to_css() for v in self.values if not isinstance(v, Null))

    def to_plain(self) -> str:
        joiner = ", " if self.separator == "comma" else " "
        return joiner.join(v.to_plain() for v in self.values if not isinstance(v, Null))

    def items(self) -> Tuple[Value, ...]:
        return self.values

    def eq(self, other: Value) -> Bool:
        if not isinstance(other, ListValue) or len(other.values) != len(self.values):
            return FALSE
        return Bool(all(a.eq(b).value for a, b in zip(self.values, other.values)))


# ═══════════════════════════════════════════════════════════════════════════
# EXPRESSIONS
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class Variable(Expression):
    name: str

    def perform(self, env: Any) -> Value:
        value = env.var(self.name)
        if value is None:
            raise UndefinedVariableError(self.name)
        return value

    def deep_copy(self) -> "Variable":
        return Variable(self.name)


_BINARY_OPERATORS: Dict[str, str] = {
    "+": "plus",
    "-": "minus",
    "*": "times",
    "/": "div",
    "%": "mod",
    "==": "eq",
    "!=": "neq",
    "<": "lt",
    ">": "gt",
    "<=": "lte",
    ">=": "gte",
}


@dataclass
class Operation(Expression):
    left: Expression
    op: str
    right: Expression

    def perform(self, env: Any) -> Value:
        left = self.left.perform(env)
        if self.op == "and":
            return self.right.perform(env) if left.truthy() else left
        if self.op == "or":
            return left if left.truthy() else self.right.perform(env)
        right = self.right.perform(env)
        try:
            method = _BINARY_OPERATORS[self.op]
        except KeyError:
            raise SassRuntimeError(f"Unknown operator '{self.op}'.") from None
        return getattr(left, method)(right)

    def deep_copy(self) -> "Operation":
        return Operation(self.left.deep_copy(), self.op, self.right.deep_copy())


@dataclass
class UnaryOperation(Expression):
    op: str
    operand: Expression

    def perform(self, env: Any) -> Value:
        value = self.operand.perform(env)
        if self.op == "not":
            return Bool(not value.truthy())
        if isinstance(value, Number):
            return Number(-value.value if self.op == "-" else value.value, value.unit)
        return String(self.op + value.to_css())

    def deep_copy(self) -> "UnaryOperation":
        return UnaryOperation(self.op, self.operand.deep_copy())


@dataclass
class Funcall(Expression):
    name: str
    args: List[Expression] = field(default_factory=list)
    keywords: Dict[str, Expression] = field(default_factory=dict)

    def perform(self, env: Any) -> Value:
        args = [a.perform(env) for a in self.args]
        keywords = {k: v.perform(env) for k, v in self.keywords.items()}

        user_function = env.function(self.name)
        if user_function is not None:
            return user_function.call(args, keywords)

        builtin = BUILTINS.get(normalize_name(self.name))
        if builtin is not None:
            if keywords:
                raise ArgumentError(f"Function {self.name} doesn't take keyword arguments.")
            try:
                return builtin(*args)
            except TypeError as exc:
                raise ArgumentError(f"Wrong arguments for {self.name}(): {exc}") from exc

        # Plain CSS function, e.g. url(...) or rgba(...)
        rendered = [a.to_css() for a in args]
        rendered += [f"{k}: {v.to_css()}" for k, v in keywords.items()]
        return String(f"{self.name}({', '.join(rendered)})")

    def deep_copy(self) -> "Funcall":
        return Funcall(
            self.name,
            [a.deep_copy() for a in self.args],
            {k: v.deep_copy() for k, v in self.keywords.items()},
        )


@dataclass
class ListLiteral(Expression):
    items: List[Expression] = field(default_factory=list)
    separator: str = "space"

    def perform(self, env: Any) -> Value:
        return ListValue(tuple(i.perform(env) for i in self.items), self.separator)

    def deep_copy(self) -> "ListLiteral":
        return ListLiteral([i.deep_copy() for i in self.items], self.separator)


@dataclass
class Interpolation(Expression):
    """A string with ``#{...}`` holes, e.g. ``#{$side}-margin`` or ``"a#{$b}"``."""
    fragments: List[Fragment] = field(default_factory=list)
    quoted: bool = False

    def perform(self, env: Any) -> Value:
        return String(interpolate(self.fragments, env), self.quoted)

    def deep_copy(self) -> "Interpolation":
        return Interpolation(copy_fragments(self.fragments), self.quoted)


# ═══════════════════════════════════════════════════════════════════════════
# FRAGMENT HELPERS
# ═══════════════════════════════════════════════════════════════════════════

def interpolate(fragments: Sequence[Fragment], env: Any) -> str:
    """Concatenate *fragments*, evaluating expression fragments in *env*."""
    return "".join(
        f if isinstance(f, str) else f.perform(env).to_plain()
        for f in fragments
    )


def copy_fragments(fragments: Sequence[Fragment]) -> List[Fragment]:
    return [f if isinstance(f, str) else f.deep_copy() for f in fragments]


def fragments_text(fragments: Sequence[Fragment]) -> str:
    """Debug rendering of a fragment list (expressions shown as ``#{...}``)."""
    return "".join(f if isinstance(f, str) else "#{...}" for f in fragments)


# ═══════════════════════════════════════════════════════════════════════════
# BUILTIN FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════

def _number(value: Value, fn: str) -> Number:
    if not isinstance(value, Number):
        raise ArgumentError(f"{value.to_css()} is not a number for `{fn}'.")
    return value


def _string(value: Value, fn: str) -> String:
    if not isinstance(value, String):
        raise ArgumentError(f"{value.to_css()} is not a string for `{fn}'.")
    return value


def _round_with(op: Callable[[float], float], fn: str) -> Callable[[Value], Value]:
    def builtin(value: Value) -> Value:
        number = _number(value, fn)
        return Number(op(number.value), number.unit)
    return builtin


def _nth(values: Value, n: Value) -> Value:
    items = values.items()
    index = int(_number(n, "nth").value)
    if index < 1 or index > len(items):
        raise ArgumentError(f"Index {index} out of bounds for list of length {len(items)}.")
    return items[index - 1]


def _join(first: Value, second: Value, separator: Optional[Value] = None) -> Value:
    sep = "space"
    if separator is not None:
        sep = _string(separator, "join").value
    elif isinstance(first, ListValue):
        sep = first.separator
    return ListValue(first.items() + second.items(), sep)


def _percentage(value: Value) -> Value:
    number = _number(value, "percentage")
    if number.unit:
        raise ArgumentError(f"{number.to_css()} is not a unitless number for `percentage'.")
    return Number(number.value * 100, "%")


BUILTINS: Dict[str, Callable[..., Value]] = {
    "if": lambda cond, a, b: a if cond.truthy() else b,
    "unquote": lambda s: String(_string(s, "unquote").value),
    "quote": lambda s: String(_string(s, "quote").value, True),
    "length": lambda v: Number(len(v.items())),
    "nth": _nth,
    "join": _join,
    "type-of": lambda v: String(v.type_name),
    "unit": lambda v: String(_number(v, "unit").unit, True),
    "unitless": lambda v: Bool(not _number(v, "unitless").unit),
    "percentage": _percentage,
    "round": _round_with(round, "round"),
    "ceil": _round_with(math.ceil, "ceil"),
    "floor": _round_with(math.floor, "floor"),
    "abs": _round_with(abs, "abs"),
}
