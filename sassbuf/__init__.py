"""sassbuf: a Sass compiler with named output buffers.

``@buffer name { ... }`` collects compiled content under a name, wherever
it appears in the stylesheet; ``@flush name;`` emits everything collected
so far at its own position.  Buffered content keeps the selectors of the
rules it was declared in.

Submodules
----------
tree, script
    The stylesheet tree and the SassScript expression language.

visitor, deep_copy
    Tree walking (with rule bubbling) and structural cloning.

environment
    Lexical scopes: variables, mixins, functions and the buffer store.

grammar, parser, indented
    Front-ends for the brace and the indented syntax.

check_nesting, perform, cssize, codegen
    The compiler passes, in pipeline order.

engine, main
    ``Engine`` / ``compile_string`` / ``compile_file`` and the CLI.

Usage
-----
Command-line::

    python -m sassbuf compile site.scss
    python -m sassbuf --help

Programmatic::

    from sassbuf import compile_string

    css = compile_string("p { @buffer late { color: red; } } @flush late;")

"""

from __future__ import annotations

__version__: str = "0.1.0"
__all__: list[str] = [
    "__version__",
    "Engine",
    "compile_string",
    "compile_file",
    "CompilerOptions",
    "OutputStyle",
    "Syntax",
    "SassError",
    "SassSyntaxError",
    "NestingError",
    "SassRuntimeError",
]

from sassbuf.engine import Engine, compile_file, compile_string
from sassbuf.errors import NestingError, SassError, SassRuntimeError, SassSyntaxError
from sassbuf.options import CompilerOptions, OutputStyle, Syntax
