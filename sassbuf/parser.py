"""sassbuf/parser.py – SCSS source → :mod:`sassbuf.tree` nodes.

Public API
----------
``parse_scss(text, filename="<string>") -> RootNode``
    Parse a complete brace-syntax stylesheet.

``parse_expression(text) -> Expression``
    Parse a standalone SassScript expression (useful for tests).

The parse tree produced by :data:`sassbuf.grammar.SCSS_GRAMMAR` is
converted by :class:`ScssBuilder`, a parsimonious ``NodeVisitor``.  Every
tree node is stamped with the line of its first character.

Errors
------
Malformed input raises :class:`SassSyntaxError` with the line and column
of the failure.  A handful of constructs are accepted by the grammar only
so that they can be rejected here with a precise message (a ``@buffer``
without a name, a ``@flush`` with a body).
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Tuple

from parsimonious.exceptions import ParseError
from parsimonious.nodes import Node as ParseNode
from parsimonious.nodes import NodeVisitor

from sassbuf.errors import SassError, SassSyntaxError, SourceSpan
from sassbuf.grammar import SCSS_GRAMMAR
from sassbuf.script import (
    FALSE,
    NULL,
    TRUE,
    Expression,
    Fragment,
    Funcall,
    Interpolation,
    ListLiteral,
    Number,
    Operation,
    String,
    UnaryOperation,
    Variable,
)
from sassbuf.tree import (
    BufferNode,
    BufferTarget,
    CommentNode,
    DebugNode,
    DirectiveNode,
    EachNode,
    ExtendNode,
    FlushNode,
    ForNode,
    FunctionNode,
    IfNode,
    ImportNode,
    MediaNode,
    MixinDefNode,
    MixinNode,
    Node,
    PropNode,
    ReturnNode,
    RootNode,
    RuleNode,
    SupportsNode,
    VariableNode,
    WarnNode,
    WhileNode,
)

__all__ = ["ScssBuilder", "parse_scss", "parse_expression"]

logger = logging.getLogger(__name__)

_ESCAPE = re.compile(r"\\(.)", re.S)


def parse_scss(text: str, filename: str = "<string>") -> RootNode:
    """Parse brace-syntax *text* into a :class:`RootNode`."""
    try:
        tree = SCSS_GRAMMAR.parse(text)
    except ParseError as exc:
        raise _syntax_error(exc, filename) from None
    root = ScssBuilder(filename).visit(tree)
    logger.debug("parsed %s: %d top-level node(s)", filename, len(root.children))
    return root


def parse_expression(text: str) -> Expression:
    """Parse a single SassScript expression (a comma or space list)."""
    try:
        tree = SCSS_GRAMMAR["comma_list"].parse(text.strip())
    except ParseError as exc:
        raise _syntax_error(exc, "<expression>") from None
    return ScssBuilder("<expression>").visit(tree)


def _syntax_error(exc: ParseError, filename: str) -> SassSyntaxError:
    text = exc.text
    pos = exc.pos
    snippet = text[pos:pos + 20].split("\n", 1)[0]
    if pos >= len(text):
        message = "Invalid CSS: unexpected end of file."
    else:
        message = f'Invalid CSS after "...": expected a statement, was "{snippet}"'
    return SassSyntaxError(
        message,
        SourceSpan(filename, exc.line(), exc.column()),
    )


def _opt(value: Any) -> Any:
    """Unwrap an optional (``x?``) result: the match, or ``None``."""
    if isinstance(value, list):
        return value[0] if value else None
    return None


def _many(value: Any) -> List[Any]:
    """Unwrap a repetition (``x*``) result: always a list."""
    return value if isinstance(value, list) else []


def _unescape(text: str) -> str:
    return _ESCAPE.sub(r"\1", text)


class ScssBuilder(NodeVisitor):
    """Transforms the parsimonious parse tree into stylesheet nodes."""

    unwrapped_exceptions = (SassError,)

    def __init__(self, filename: str = "<string>") -> None:
        self.filename = filename

    def generic_visit(self, node, visited_children):
        return visited_children or node

    # ─────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────

    def _span(self, node: ParseNode) -> SourceSpan:
        line = node.full_text.count("\n", 0, node.start) + 1
        return SourceSpan(self.filename, line)

    def _stamp(self, tree_node: Node, node: ParseNode) -> Node:
        tree_node.line = self._span(node).line
        tree_node.filename = self.filename
        return tree_node

    @staticmethod
    def _fragments(items: List[Any]) -> List[Fragment]:
        """Collapse ``(interp / raw)+`` results into a fragment list."""
        fragments: List[Fragment] = []
        for item in items:
            value = item[0] if isinstance(item, list) else item
            if isinstance(value, Expression):
                fragments.append(value)
            elif fragments and isinstance(fragments[-1], str):
                fragments[-1] += value.text
            else:
                fragments.append(value.text)
        return fragments

    @staticmethod
    def _statements(items: Any) -> List[Node]:
        return [s for s in _many(items) if s is not None]

    @staticmethod
    def _split_args(items: List[Any]) -> Tuple[List[Expression], Dict[str, Expression]]:
        args: List[Expression] = []
        keywords: Dict[str, Expression] = {}
        for item in items:
            if isinstance(item, tuple):
                keywords[item[0]] = item[1]
            else:
                args.append(item)
        return args, keywords

    @staticmethod
    def _fold(first: Expression, rest: Any, op_index: int, operand_index: int) -> Expression:
        left = first
        for part in _many(rest):
            left = Operation(left, part[op_index], part[operand_index])
        return left

    # ─────────────────────────────────────────────────────────────
    # Statements
    # ─────────────────────────────────────────────────────────────

    def visit_stylesheet(self, node, visited_children):
        _, statements = visited_children
        return RootNode(children=self._statements(statements), template=node.full_text)

    def visit_statement(self, node, visited_children):
        choice, _ = visited_children
        return choice[0]

    def visit_block(self, node, visited_children):
        _, _, statements, _ = visited_children
        return self._statements(statements)

    def visit_end(self, node, visited_children):
        return None

    def visit_empty(self, node, visited_children):
        return None

    def visit_comment(self, node, visited_children):
        return visited_children[0]

    def visit_loud_comment(self, node, visited_children):
        return self._stamp(CommentNode(value=node.text), node)

    def visit_silent_comment(self, node, visited_children):
        return self._stamp(CommentNode(value=node.text, silent=True), node)

    # ─────────────────────────────────────────────────────────────
    # Buffers
    # ─────────────────────────────────────────────────────────────

    def visit_buffer(self, node, visited_children):
        _, _, _, name, _, body = visited_children
        buffer = BufferNode(target=BufferTarget(name), children=body or [])
        return self._stamp(buffer, node)

    def visit_buffer_body(self, node, visited_children):
        return visited_children[0]

    def visit_flush(self, node, visited_children):
        _, _, _, name, _, body = visited_children
        if body is not None:
            raise SassSyntaxError(
                "Flush directives may not have a body.",
                self._span(node),
                hint="write '@flush name;'",
            )
        return self._stamp(FlushNode(target=BufferTarget(name)), node)

    def visit_flush_body(self, node, visited_children):
        return visited_children[0]

    def visit_bad_buffer(self, node, visited_children):
        keyword = node.text.strip()
        raise SassSyntaxError(f"Invalid {keyword} directive: expected a buffer name.", self._span(node))

    def visit_buffer_name(self, node, visited_children):
        return self._fragments(visited_children)

    # ─────────────────────────────────────────────────────────────
    # Variables and control directives
    # ─────────────────────────────────────────────────────────────

    def visit_variable(self, node, visited_children):
        _, name, _, _, _, expr, default, _, _ = visited_children
        variable = VariableNode(name=name, expr=expr, guarded=_opt(default) is not None)
        return self._stamp(variable, node)

    def visit_default_flag(self, node, visited_children):
        return True

    def visit_if_stmt(self, node, visited_children):
        _, _, _, expr, _, body, else_clauses = visited_children
        if_node = self._stamp(IfNode(expr=expr, children=body), node)
        for clause in _many(else_clauses):
            if_node.add_else(clause)
        return if_node

    def visit_else_clause(self, node, visited_children):
        _, _, _, _, cond, body = visited_children
        return self._stamp(IfNode(expr=_opt(cond), children=body), node)

    def visit_else_cond(self, node, visited_children):
        return visited_children[3]

    def visit_for_stmt(self, node, visited_children):
        var, from_, kind, to, body = (
            visited_children[4], visited_children[9], visited_children[11],
            visited_children[14], visited_children[16],
        )
        for_node = ForNode(var=var, from_=from_, to=to, exclusive=kind == "to", children=body)
        return self._stamp(for_node, node)

    def visit_for_kind(self, node, visited_children):
        return node.text

    def visit_each_stmt(self, node, visited_children):
        var, values, body = visited_children[4], visited_children[9], visited_children[11]
        return self._stamp(EachNode(var=var, list=values, children=body), node)

    def visit_while_stmt(self, node, visited_children):
        _, _, _, expr, _, body = visited_children
        return self._stamp(WhileNode(expr=expr, children=body), node)

    # ─────────────────────────────────────────────────────────────
    # At-rules
    # ─────────────────────────────────────────────────────────────

    def visit_media(self, node, visited_children):
        _, _, _, query, body = visited_children
        return self._stamp(MediaNode(query=query, children=body), node)

    def visit_supports(self, node, visited_children):
        _, _, _, condition, body = visited_children
        return self._stamp(SupportsNode(condition=condition, children=body), node)

    def visit_import_stmt(self, node, visited_children):
        uri = visited_children[3].text.strip()
        return self._stamp(ImportNode(uri=uri), node)

    def visit_extend(self, node, visited_children):
        return self._stamp(ExtendNode(selector=visited_children[3]), node)

    def visit_include(self, node, visited_children):
        _, _, _, name, _, call_args, _, _ = visited_children
        args, keywords = _opt(call_args) or ([], {})
        return self._stamp(MixinNode(name=name, args=args, keywords=keywords), node)

    def visit_mixin_def(self, node, visited_children):
        _, _, _, name, _, params, _, body = visited_children
        mixin = MixinDefNode(name=name, args=_opt(params) or [], children=body)
        return self._stamp(mixin, node)

    def visit_function_def(self, node, visited_children):
        _, _, _, name, _, params, _, body = visited_children
        function = FunctionNode(name=name, args=_opt(params) or [], children=body)
        return self._stamp(function, node)

    def visit_return_stmt(self, node, visited_children):
        return self._stamp(ReturnNode(expr=visited_children[3]), node)

    def visit_debug(self, node, visited_children):
        return self._stamp(DebugNode(expr=visited_children[3]), node)

    def visit_warn(self, node, visited_children):
        return self._stamp(WarnNode(expr=visited_children[3]), node)

    def visit_directive(self, node, visited_children):
        _, name, value, body = visited_children
        fragments: List[Fragment] = [f"@{name}"]
        extra = _opt(value) or []
        if extra and isinstance(extra[0], str):
            fragments[0] += extra[0]
            extra = extra[1:]
        fragments.extend(extra)
        has_block = body is not None
        directive = DirectiveNode(value=fragments, has_block=has_block, children=body or [])
        return self._stamp(directive, node)

    def visit_directive_body(self, node, visited_children):
        return visited_children[0]

    def visit_at_value(self, node, visited_children):
        return self._fragments(visited_children)

    def visit_params(self, node, visited_children):
        return _opt(visited_children[2]) or []

    def visit_param_list(self, node, visited_children):
        first, rest = visited_children
        return [first] + [part[3] for part in _many(rest)]

    def visit_param(self, node, visited_children):
        _, name, default = visited_children
        return (name, _opt(default))

    def visit_param_default(self, node, visited_children):
        return visited_children[3]

    def visit_call_args(self, node, visited_children):
        return self._split_args(_opt(visited_children[2]) or [])

    def visit_arg_list(self, node, visited_children):
        first, rest = visited_children
        return [first] + [part[3] for part in _many(rest)]

    def visit_arg(self, node, visited_children):
        return visited_children[0]

    def visit_keyword_arg(self, node, visited_children):
        return (visited_children[1], visited_children[5])

    # ─────────────────────────────────────────────────────────────
    # Rules and declarations
    # ─────────────────────────────────────────────────────────────

    def visit_declaration(self, node, visited_children):
        name, _, _, _, _, value, _, _ = visited_children
        return self._stamp(PropNode(name=name, value=value), node)

    def visit_prop_name(self, node, visited_children):
        return self._fragments(visited_children)

    def visit_rule(self, node, visited_children):
        selector, body = visited_children
        return self._stamp(RuleNode(rule=selector, children=body), node)

    def visit_selector(self, node, visited_children):
        return self._fragments(visited_children)

    # ─────────────────────────────────────────────────────────────
    # SassScript
    # ─────────────────────────────────────────────────────────────

    def visit_comma_list(self, node, visited_children):
        first, rest = visited_children
        items = [first] + [part[3] for part in _many(rest)]
        return first if len(items) == 1 else ListLiteral(items, "comma")

    def visit_space_list(self, node, visited_children):
        first, rest = visited_children
        items = [first] + [part[1] for part in _many(rest)]
        return first if len(items) == 1 else ListLiteral(items, "space")

    def visit_or_expr(self, node, visited_children):
        first, rest = visited_children
        left = first
        for part in _many(rest):
            left = Operation(left, "or", part[4])
        return left

    def visit_and_expr(self, node, visited_children):
        first, rest = visited_children
        left = first
        for part in _many(rest):
            left = Operation(left, "and", part[4])
        return left

    def visit_eq_expr(self, node, visited_children):
        first, rest = visited_children
        return self._fold(first, rest, 1, 3)

    def visit_rel_expr(self, node, visited_children):
        first, rest = visited_children
        return self._fold(first, rest, 1, 3)

    def visit_add_expr(self, node, visited_children):
        first, rest = visited_children
        left = first
        for op, operand in _many(rest):
            left = Operation(left, op, operand)
        return left

    def visit_add_tail(self, node, visited_children):
        parts = visited_children[0]
        if len(parts) == 4:
            return parts[1], parts[3]
        return parts[0], parts[1]

    def visit_mul_expr(self, node, visited_children):
        first, rest = visited_children
        left = first
        for _, op, _, right in _many(rest):
            if op == "/" and isinstance(left, Number) and isinstance(right, Number):
                # Plain CSS shorthand such as ``font: 12px/1.5``.
                left = String(f"{left.to_css()}/{right.to_css()}")
            else:
                left = Operation(left, op, right)
        return left

    def visit_eq_op(self, node, visited_children):
        return node.text

    visit_rel_op = visit_add_op = visit_mul_op = visit_sign = visit_eq_op

    def visit_unary(self, node, visited_children):
        choice = visited_children[0]
        if isinstance(choice, list):
            op, operand = choice
            return UnaryOperation(op, operand)
        return choice

    def visit_not_op(self, node, visited_children):
        return "not"

    def visit_primary(self, node, visited_children):
        return visited_children[0]

    def visit_parens(self, node, visited_children):
        return visited_children[2]

    def visit_raw_fn(self, node, visited_children):
        return String(node.text)

    def visit_funcall(self, node, visited_children):
        name, _, _, arg_list, _, _ = visited_children
        args, keywords = self._split_args(_opt(arg_list) or [])
        return Funcall(name, args, keywords)

    def visit_fn_name(self, node, visited_children):
        return node.text

    def visit_var_ref(self, node, visited_children):
        return Variable(visited_children[1])

    def visit_number(self, node, visited_children):
        match = node.match
        return Number(float(match.group(1)), match.group(2) or "")

    def visit_quoted(self, node, visited_children):
        return visited_children[0]

    def visit_dq_string(self, node, visited_children):
        return self._string(visited_children[1])

    visit_sq_string = visit_dq_string

    def _string(self, chunks: Any) -> Expression:
        fragments: List[Fragment] = []
        for item in _many(chunks):
            value = item[0]
            if isinstance(value, Expression):
                fragments.append(value)
            else:
                fragments.append(_unescape(value.text))
        if all(isinstance(f, str) for f in fragments):
            return String("".join(fragments), quoted=True)
        return Interpolation(fragments, quoted=True)

    def visit_interp_ident(self, node, visited_children):
        head, rest = visited_children
        fragments: List[Fragment] = []
        if _opt(head) is not None:
            fragments.append(_opt(head))
        for expr, chunk in _many(rest):
            fragments.append(expr)
            if _opt(chunk) is not None:
                fragments.append(_opt(chunk))
        return Interpolation(fragments)

    def visit_ident_chunk(self, node, visited_children):
        return node.text

    def visit_color(self, node, visited_children):
        return String(node.text)

    def visit_important(self, node, visited_children):
        return String("!important")

    def visit_ident(self, node, visited_children):
        return {"true": TRUE, "false": FALSE, "null": NULL}.get(node.text, String(node.text))

    def visit_interp(self, node, visited_children):
        return visited_children[2]

    def visit_name(self, node, visited_children):
        return node.text
