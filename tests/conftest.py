# tests/conftest.py
"""
Shared stylesheets and helpers for the sassbuf test-suite.
"""

from typing import List, Type

from sassbuf.check_nesting import check_nesting
from sassbuf.cssize import cssize
from sassbuf.parser import parse_scss
from sassbuf.perform import perform
from sassbuf.tree import Node, RootNode


# ═══════════════════════════════════════════════════════════════════════════
#  Brace-syntax stylesheets
# ═══════════════════════════════════════════════════════════════════════════

BUFFER_IN_RULE_SCSS = """\
html {
  @buffer b {
    property: value;
  }
}
@flush b;
"""

BUFFER_IN_RULE_CSS = """\
html {
  property: value;
}
"""

TWO_GREETINGS_SCSS = """\
header {
  @buffer greeting {
    color: red;
  }
}
footer {
  @buffer greeting {
    color: blue;
  }
}
@flush greeting;
"""

TWO_GREETINGS_CSS = """\
header {
  color: red;
}
footer {
  color: blue;
}
"""

NESTED_BUFFER_SCSS = """\
html {
  body {
    @buffer late {
      p { color: red; }
    }
  }
}
@flush late;
"""

NESTED_BUFFER_CSS = """\
html body p {
  color: red;
}
"""

MIXIN_BUFFER_SCSS = """\
@buffer late;
@mixin deferred {
  @buffer late {
    a { b: c; }
  }
}
p {
  @include deferred;
}
@flush late;
"""

PRIVATE_MIXIN_BUFFER_SCSS = """\
@mixin deferred {
  @buffer private {
    a { b: c; }
  }
}
p {
  @include deferred;
}
@flush private;
"""

IMPORT_IN_BUFFER_SCSS = """\
p {
  @buffer b {
    @import "print.css";
  }
}
"""

FOR_LOOP_SCSS = """\
@for $i from 1 through 3 {
  .m-#{$i} {
    margin: $i * 2px;
  }
}
"""

FOR_LOOP_CSS = """\
.m-1 {
  margin: 2px;
}

.m-2 {
  margin: 4px;
}

.m-3 {
  margin: 6px;
}
"""


# ═══════════════════════════════════════════════════════════════════════════
#  Indented-syntax stylesheets
# ═══════════════════════════════════════════════════════════════════════════

NESTED_BUFFER_SASS = """\
html
  body
    late->
      p
        color: red
<-late
"""

MIXIN_SASS = """\
=box($w)
  width: $w
.a
  +box(5px)
"""


# ═══════════════════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════════════════

def squash(css: str) -> str:
    """Collapse all whitespace runs, for layout-insensitive comparisons."""
    return " ".join(css.split())


def has_node(root: Node, cls: Type[Node]) -> bool:
    """True when any node of the subtree is an instance of *cls*."""
    if isinstance(root, cls):
        return True
    return any(has_node(child, cls) for child in root.children)


def find_all(root: Node, cls: Type[Node]) -> List[Node]:
    """Every instance of *cls* in the subtree, in document order."""
    found = [root] if isinstance(root, cls) else []
    for child in root.children:
        found.extend(find_all(child, cls))
    return found


def evaluate(source: str) -> RootNode:
    """Parse, check and evaluate *source* (no layout)."""
    return perform(check_nesting(parse_scss(source)))


def layout(source: str) -> RootNode:
    """Parse, check, evaluate and lay out *source*."""
    return cssize(evaluate(source))
