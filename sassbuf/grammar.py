"""sassbuf/grammar.py – PEG grammar for the brace-based (SCSS) syntax.

The grammar is written for :mod:`parsimonious`; :mod:`sassbuf.parser`
turns the parse tree into :mod:`sassbuf.tree` nodes.

Conventions
-----------
* Every statement is followed by ``_`` (optional whitespace); comments are
  statements of their own so they survive into the tree.
* Keywords are followed by ``!namechar`` so ``@bufferhello`` is not read as
  ``@buffer hello``.
* Anything that may contain ``#{...}`` (selectors, property names, buffer
  names, at-rule values) is a sequence of raw chunks and ``interp`` nodes.
* A bare ``@buffer`` / ``@flush`` matches ``bad_buffer`` so the builder can
  report it instead of reading it as a generic directive.
"""

from parsimonious.grammar import Grammar

__all__ = ["SCSS_GRAMMAR"]

SCSS_GRAMMAR = Grammar(r'''
    # ─────────────────────────────────────────────────────────────
    # Statements
    # ─────────────────────────────────────────────────────────────

    stylesheet      = _ statement*
    statement       = (empty / comment / buffer / flush / bad_buffer / variable
                       / if_stmt / for_stmt / each_stmt / while_stmt
                       / media / supports / import_stmt / extend / include
                       / mixin_def / function_def / return_stmt / debug / warn
                       / directive / declaration / rule) _
    block           = "{" _ statement* "}"
    end             = ";" / &"}" / eof
    eof             = ~r"\Z"
    empty           = ";"

    comment         = loud_comment / silent_comment
    loud_comment    = ~r"/\*.*?\*/"s
    silent_comment  = ~r"//[^\n]*"

    # ─────────────────────────────────────────────────────────────
    # Buffers
    # ─────────────────────────────────────────────────────────────

    buffer          = "@buffer" !namechar _ buffer_name _ buffer_body
    buffer_body     = block / end
    flush           = "@flush" !namechar _ buffer_name _ flush_body
    flush_body      = block / end
    bad_buffer      = ("@buffer" / "@flush") !namechar
    buffer_name     = (interp / ~r"[a-zA-Z0-9_-]+" / ~r"[ \t]+(?=[a-zA-Z0-9_#-])")+

    # ─────────────────────────────────────────────────────────────
    # Variables and control directives
    # ─────────────────────────────────────────────────────────────

    variable        = "$" name _ ":" _ comma_list default_flag? _ end
    default_flag    = _ "!default"

    if_stmt         = "@if" !namechar _ comma_list _ block else_clause*
    else_clause     = _ "@else" !namechar _ else_cond? block
    else_cond       = "if" !namechar _ comma_list _
    for_stmt        = "@for" !namechar _ "$" name _ "from" !namechar _ or_expr _
                      for_kind !namechar _ or_expr _ block
    for_kind        = "through" / "to"
    each_stmt       = "@each" !namechar _ "$" name _ "in" !namechar _ comma_list _ block
    while_stmt      = "@while" !namechar _ comma_list _ block

    # ─────────────────────────────────────────────────────────────
    # At-rules
    # ─────────────────────────────────────────────────────────────

    media           = "@media" !namechar _ at_value block
    supports        = "@supports" !namechar _ at_value block
    import_stmt     = "@import" !namechar _ ~r"[^;{}]+" end
    extend          = "@extend" !namechar _ at_value end
    include         = "@include" !namechar _ name _ call_args? _ end
    mixin_def       = "@mixin" !namechar _ name _ params? _ block
    function_def    = "@function" !namechar _ name _ params? _ block
    return_stmt     = "@return" !namechar _ comma_list _ end
    debug           = "@debug" !namechar _ comma_list _ end
    warn            = "@warn" !namechar _ comma_list _ end
    directive       = "@" name at_value? directive_body
    directive_body  = block / end
    at_value        = (interp / ~r"[^{};#]+" / ~r"#(?!\{)")+

    params          = "(" _ param_list? _ ")"
    param_list      = param (_ "," _ param)*
    param           = "$" name param_default?
    param_default   = _ ":" _ space_list
    call_args       = "(" _ arg_list? _ ")"
    arg_list        = arg (_ "," _ arg)*
    arg             = keyword_arg / space_list
    keyword_arg     = "$" name _ ":" _ space_list

    # ─────────────────────────────────────────────────────────────
    # Rules and declarations
    # ─────────────────────────────────────────────────────────────

    declaration     = prop_name _ ":" !":" _ comma_list _ end
    prop_name       = (interp / ~r"[a-zA-Z_*-][a-zA-Z0-9_-]*")+
    rule            = selector block
    selector        = (interp / ~r"[^{};#/]+" / ~r"#(?!\{)" / ~r"/(?![/*])")+

    # ─────────────────────────────────────────────────────────────
    # SassScript
    # ─────────────────────────────────────────────────────────────

    comma_list      = space_list (_ "," _ space_list)*
    space_list      = or_expr (ws or_expr)*
    or_expr         = and_expr (_ "or" !namechar _ and_expr)*
    and_expr        = eq_expr (_ "and" !namechar _ eq_expr)*
    eq_expr         = rel_expr (_ eq_op _ rel_expr)*
    eq_op           = "==" / "!="
    rel_expr        = add_expr (_ rel_op _ add_expr)*
    rel_op          = "<=" / ">=" / "<" / ">"
    add_expr        = mul_expr add_tail*
    add_tail        = (ws add_op ws mul_expr) / (add_op mul_expr)
    add_op          = "+" / "-"
    mul_expr        = unary (_ mul_op _ unary)*
    mul_op          = "*" / "/" / "%"
    unary           = (not_op unary) / primary / (sign unary)
    not_op          = "not" !namechar _
    sign            = "-" / "+"

    primary         = parens / raw_fn / funcall / var_ref / number / quoted
                      / interp_ident / color / important / ident
    parens          = "(" _ comma_list _ ")"
    raw_fn          = ~r"(url|calc|-webkit-calc|-moz-calc)\([^()]*\)"
    funcall         = fn_name "(" _ arg_list? _ ")"
    fn_name         = ~r"-?[a-zA-Z_][a-zA-Z0-9_-]*"
    var_ref         = "$" name
    number          = ~r"(\d+(?:\.\d+)?|\.\d+)([a-zA-Z]+|%)?"
    quoted          = dq_string / sq_string
    dq_string       = "\"" (interp / ~r'(?:[^"\\#]|\\.|#(?!\{))+'s)* "\""
    sq_string       = "'" (interp / ~r"(?:[^'\\#]|\\.|#(?!\{))+"s)* "'"
    interp_ident    = ident_chunk? (interp ident_chunk?)+
    ident_chunk     = ~r"[a-zA-Z0-9_-]+"
    color           = ~r"#[0-9a-fA-F]{3,8}(?![a-zA-Z0-9_-])"
    important       = ~r"!\s*important"
    ident           = ~r"-?[a-zA-Z_][a-zA-Z0-9_-]*"
    interp          = "#{" _ comma_list _ "}"

    name            = ~r"[a-zA-Z_][a-zA-Z0-9_-]*"
    namechar        = ~r"[a-zA-Z0-9_-]"
    ws              = ~r"\s+"
    _               = ~r"\s*"
''')
