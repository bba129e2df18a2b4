"""sassbuf/tree.py – the stylesheet parse tree.

The parser produces a tree of the node classes defined here; every pass of
the compiler (nesting validation, evaluation, layout, CSS generation, deep
copy) walks it through :mod:`sassbuf.visitor`.

Design invariants
-----------------
* Nodes are plain mutable dataclasses.  A node exclusively owns the nodes
  in its ``children`` list and the expression trees held in its other
  fields; nothing is shared between two nodes (see :mod:`sassbuf.deep_copy`).
* Each concrete class declares a ``kind`` (:class:`NodeKind`).  The kind's
  value is the suffix of the visitor handler (``visit_rule`` …).
* Capabilities are data, not behaviour: :data:`BUBBLES` says which kinds
  are lifted out of an enclosing rule, :data:`DIRECTIVE_KINDS` which kinds
  push the visitor's directive stack.
* ``BufferNode`` and ``FlushNode`` share their named shape through a
  :class:`BufferTarget` component rather than through inheritance.

Module layout
-------------
§1  Kinds and capability tables
§2  Base node
§3  Concrete nodes
§4  Node-name table
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Type

from sassbuf.script import (
    Expression,
    Fragment,
    copy_fragments,
    fragments_text,
    interpolate,
    normalize_name,
)

__all__ = [
    "NodeKind",
    "BUBBLES",
    "DIRECTIVE_KINDS",
    "CONTROL_KINDS",
    "Node",
    "RootNode",
    "RuleNode",
    "PropNode",
    "DirectiveNode",
    "MediaNode",
    "SupportsNode",
    "ImportNode",
    "ExtendNode",
    "CommentNode",
    "VariableNode",
    "IfNode",
    "ForNode",
    "EachNode",
    "WhileNode",
    "MixinDefNode",
    "MixinNode",
    "FunctionNode",
    "ReturnNode",
    "DebugNode",
    "WarnNode",
    "BufferTarget",
    "BufferNode",
    "FlushNode",
    "NODE_CLASSES",
    "NODE_NAMES",
]


# ════════════════════════════════════════════════════════════════════════
# §1  Kinds and capability tables
# ════════════════════════════════════════════════════════════════════════

class NodeKind(Enum):
    """Closed set of node kinds; the value is the visitor handler suffix."""

    ROOT = "root"
    RULE = "rule"
    PROP = "prop"
    DIRECTIVE = "directive"
    MEDIA = "media"
    SUPPORTS = "supports"
    IMPORT = "import"
    EXTEND = "extend"
    COMMENT = "comment"
    VARIABLE = "variable"
    IF = "if"
    FOR = "for"
    EACH = "each"
    WHILE = "while"
    MIXINDEF = "mixindef"
    MIXIN = "mixin"
    FUNCTION = "function"
    RETURN = "return"
    DEBUG = "debug"
    WARN = "warn"
    BUFFER = "buffer"
    FLUSH = "flush"


#: Kinds whose content is lifted out of a directly enclosing rule.
BUBBLES: Mapping[NodeKind, bool] = MappingProxyType(
    {kind: kind in (NodeKind.BUFFER, NodeKind.MEDIA, NodeKind.SUPPORTS) for kind in NodeKind}
)

#: Kinds tracked on the visitor's enclosing-directive stack.
DIRECTIVE_KINDS = frozenset({
    NodeKind.DIRECTIVE,
    NodeKind.MEDIA,
    NodeKind.SUPPORTS,
    NodeKind.BUFFER,
})

#: Control directives; transparent for nesting rules.
CONTROL_KINDS = frozenset({
    NodeKind.IF,
    NodeKind.FOR,
    NodeKind.EACH,
    NodeKind.WHILE,
})


# ════════════════════════════════════════════════════════════════════════
# §2  Base node
# ════════════════════════════════════════════════════════════════════════

@dataclass
class Node:
    """Abstract tree element."""

    kind: ClassVar[NodeKind]

    children: List["Node"] = field(default_factory=list)
    # Marks the last node of a top-level group; owned by the layout pass.
    group_end: bool = field(default=False, compare=False)
    line: int = field(default=0, compare=False)
    filename: Optional[str] = field(default=None, compare=False, repr=False)

    def bubbles(self) -> bool:
        return BUBBLES[self.kind]

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def describe(self) -> str:
        """One-line summary used by :meth:`pretty`."""
        return self.kind.value

    def pretty(self, indent: int = 0) -> str:
        """Indented multi-line dump of the subtree (the ``tree`` CLI command)."""
        lines = ["  " * indent + self.describe()]
        for child in self.children:
            lines.append(child.pretty(indent + 1))
        return "\n".join(lines)


# ════════════════════════════════════════════════════════════════════════
# §3  Concrete nodes
# ════════════════════════════════════════════════════════════════════════

@dataclass
class RootNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.ROOT

    template: str = field(default="", compare=False, repr=False)


@dataclass
class RuleNode(Node):
    """``selector { ... }``."""
    kind: ClassVar[NodeKind] = NodeKind.RULE

    rule: List[Fragment] = field(default_factory=list)
    # Set by Perform: the comma-separated selectors, parent references resolved.
    resolved_rules: Optional[List[str]] = None

    def describe(self) -> str:
        if self.resolved_rules is not None:
            return f"rule {', '.join(self.resolved_rules)}"
        return f"rule {fragments_text(self.rule)}"


@dataclass
class PropNode(Node):
    """``name: value;``"""
    kind: ClassVar[NodeKind] = NodeKind.PROP

    name: List[Fragment] = field(default_factory=list)
    value: Optional[Expression] = None
    resolved_name: Optional[str] = None
    resolved_value: Optional[str] = None

    def describe(self) -> str:
        if self.resolved_name is not None:
            return f"prop {self.resolved_name}: {self.resolved_value}"
        return f"prop {fragments_text(self.name)}"


@dataclass
class DirectiveNode(Node):
    """Any at-rule without dedicated support, e.g. ``@font-face { ... }``."""
    kind: ClassVar[NodeKind] = NodeKind.DIRECTIVE

    value: List[Fragment] = field(default_factory=list)
    resolved_value: Optional[str] = None
    has_block: bool = False

    def describe(self) -> str:
        return self.resolved_value or fragments_text(self.value)


@dataclass
class MediaNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.MEDIA

    query: List[Fragment] = field(default_factory=list)
    resolved_query: Optional[str] = None

    def describe(self) -> str:
        return f"@media {self.resolved_query or fragments_text(self.query)}"


@dataclass
class SupportsNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.SUPPORTS

    condition: List[Fragment] = field(default_factory=list)
    resolved_condition: Optional[str] = None

    def describe(self) -> str:
        return f"@supports {self.resolved_condition or fragments_text(self.condition)}"


@dataclass
class ImportNode(Node):
    """A plain CSS ``@import``; the uri is kept verbatim."""
    kind: ClassVar[NodeKind] = NodeKind.IMPORT

    uri: str = ""

    def describe(self) -> str:
        return f"@import {self.uri}"


@dataclass
class ExtendNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.EXTEND

    selector: List[Fragment] = field(default_factory=list)
    resolved_selector: Optional[str] = None


@dataclass
class CommentNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.COMMENT

    value: str = ""
    silent: bool = False

    @property
    def loud(self) -> bool:
        """``/*! ... */`` comments survive compressed output."""
        return self.value.startswith("/*!")


@dataclass
class VariableNode(Node):
    """``$name: expr [!default];``"""
    kind: ClassVar[NodeKind] = NodeKind.VARIABLE

    name: str = ""
    expr: Optional[Expression] = None
    guarded: bool = False

    def describe(self) -> str:
        return f"${self.name}"


@dataclass
class IfNode(Node):
    """``@if expr { ... }``; ``else_`` links the next ``@else [if]`` clause.

    The else clause is not a child: visitors that need it must visit it
    explicitly (the base visitor's ``visit_if`` does).
    """
    kind: ClassVar[NodeKind] = NodeKind.IF

    expr: Optional[Expression] = None      # None for a final @else
    else_: Optional["IfNode"] = None

    def add_else(self, node: "IfNode") -> None:
        """Append *node* at the end of the else chain."""
        last = self
        while last.else_ is not None:
            last = last.else_
        last.else_ = node


@dataclass
class ForNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.FOR

    var: str = ""
    from_: Optional[Expression] = None
    to: Optional[Expression] = None
    exclusive: bool = False

    def describe(self) -> str:
        return f"@for ${self.var}"


@dataclass
class EachNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.EACH

    var: str = ""
    list: Optional[Expression] = None

    def describe(self) -> str:
        return f"@each ${self.var}"


@dataclass
class WhileNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.WHILE

    expr: Optional[Expression] = None


@dataclass
class MixinDefNode(Node):
    """``@mixin name($a, $b: default) { ... }``; args are (name, default) pairs."""
    kind: ClassVar[NodeKind] = NodeKind.MIXINDEF

    name: str = ""
    args: List[Any] = field(default_factory=list)

    def describe(self) -> str:
        return f"@mixin {self.name}"


@dataclass
class MixinNode(Node):
    """``@include name(args...)``."""
    kind: ClassVar[NodeKind] = NodeKind.MIXIN

    name: str = ""
    args: List[Expression] = field(default_factory=list)
    keywords: Dict[str, Expression] = field(default_factory=dict)

    def describe(self) -> str:
        return f"@include {self.name}"


@dataclass
class FunctionNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.FUNCTION

    name: str = ""
    args: List[Any] = field(default_factory=list)

    def describe(self) -> str:
        return f"@function {self.name}"


@dataclass
class ReturnNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.RETURN

    expr: Optional[Expression] = None


@dataclass
class DebugNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.DEBUG

    expr: Optional[Expression] = None


@dataclass
class WarnNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.WARN

    expr: Optional[Expression] = None


@dataclass
class BufferTarget:
    """Name of a buffer as written (fragments) and, once evaluated, resolved.

    A target is resolved exactly once: :meth:`resolve` returns a new target
    and leaves ``self`` untouched, so a template shared by several
    evaluations (a mixin body, a loop body) keeps its unresolved name.
    """

    name: List[Fragment] = field(default_factory=list)
    resolved_name: Optional[str] = None

    def resolve(self, env: Any) -> "BufferTarget":
        """Evaluate the interpolated fragments and normalize the result."""
        resolved = normalize_name(interpolate(self.name, env).strip())
        return BufferTarget(self.name, resolved)

    def deep_copy(self) -> "BufferTarget":
        return BufferTarget(copy_fragments(self.name), self.resolved_name)

    def __str__(self) -> str:
        return self.resolved_name or fragments_text(self.name)


@dataclass
class BufferNode(Node):
    """``@buffer name { ... }``: accumulate the body under ``name``."""
    kind: ClassVar[NodeKind] = NodeKind.BUFFER

    target: BufferTarget = field(default_factory=BufferTarget)

    @property
    def name(self) -> List[Fragment]:
        return self.target.name

    @property
    def resolved_name(self) -> Optional[str]:
        return self.target.resolved_name

    def describe(self) -> str:
        return f"@buffer {self.target}"


@dataclass
class FlushNode(Node):
    """``@flush name;``: emit everything buffered under ``name`` so far."""
    kind: ClassVar[NodeKind] = NodeKind.FLUSH

    target: BufferTarget = field(default_factory=BufferTarget)
    # Buffer groups snapshotted by Perform; references, not owned children.
    buffered: List[BufferNode] = field(default_factory=list, compare=False, repr=False)

    @property
    def name(self) -> List[Fragment]:
        return self.target.name

    @property
    def resolved_name(self) -> Optional[str]:
        return self.target.resolved_name

    def describe(self) -> str:
        return f"@flush {self.target}"


# ════════════════════════════════════════════════════════════════════════
# §4  Node-name table
# ════════════════════════════════════════════════════════════════════════

NODE_CLASSES: List[Type[Node]] = [
    RootNode, RuleNode, PropNode, DirectiveNode, MediaNode, SupportsNode,
    ImportNode, ExtendNode, CommentNode, VariableNode, IfNode, ForNode,
    EachNode, WhileNode, MixinDefNode, MixinNode, FunctionNode, ReturnNode,
    DebugNode, WarnNode, BufferNode, FlushNode,
]

#: Dispatch name of each node class, computed once at import time.
NODE_NAMES: Mapping[Type[Node], str] = MappingProxyType(
    {cls: cls.kind.value for cls in NODE_CLASSES}
)
