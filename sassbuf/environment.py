# sassbuf/environment.py
"""
Lexical environments.

An :class:`Environment` holds the variables, mixins, functions, buffers and
parent selector visible at one point of a stylesheet.  Environments form a
parent-pointing chain; every lookup reads through to the parents.

Buffers
-------
Each buffer entry is an ordered, append-only list of evaluated buffer
groups, keyed by the buffer's resolved name.  ``append_buffer`` appends to
the nearest environment that already holds the name and only creates a
new, local entry when no environment in the chain does.  Entries are never
shortened: flushing reads an entry, it does not consume it.

Environments come in two flavours.  *Scope* environments (the document
root, each mixin or function invocation) own new buffer entries; *block*
environments (rule bodies, control-flow bodies) only hold variables and
the selector.  Evaluation appends through :attr:`Environment.buffer_env`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional

from sassbuf.options import CompilerOptions
from sassbuf.script import Value, normalize_name

__all__ = ["Environment"]

logger = logging.getLogger(__name__)


class Environment:
    """A lexical scope with parent lookup."""

    def __init__(
        self,
        parent: Optional[Environment] = None,
        options: Optional[CompilerOptions] = None,
        buffer_scope: Optional[bool] = None,
    ) -> None:
        self.parent = parent
        self.options = options or (parent.options if parent else CompilerOptions())
        # A parentless environment is always a scope.
        self.buffer_scope = parent is None if buffer_scope is None else buffer_scope
        self._vars: Dict[str, Value] = {}
        self._mixins: Dict[str, Any] = {}
        self._functions: Dict[str, Any] = {}
        self._buffers: Dict[str, List[Any]] = {}
        self._selector: Optional[List[str]] = None

    def _chain(self) -> Iterator[Environment]:
        env: Optional[Environment] = self
        while env is not None:
            yield env
            env = env.parent

    @property
    def global_env(self) -> Environment:
        env = self
        while env.parent is not None:
            env = env.parent
        return env

    # -- variables ---------------------------------------------------------

    def var(self, name: str) -> Optional[Value]:
        """Look up a variable, searching parent environments."""
        key = normalize_name(name)
        for env in self._chain():
            if key in env._vars:
                return env._vars[key]
        return None

    def set_var(self, name: str, value: Value) -> None:
        """Assign to the nearest environment defining *name*, else locally."""
        key = normalize_name(name)
        for env in self._chain():
            if key in env._vars:
                env._vars[key] = value
                return
        self._vars[key] = value

    def set_local_var(self, name: str, value: Value) -> None:
        self._vars[normalize_name(name)] = value

    # -- mixins and functions ----------------------------------------------

    def mixin(self, name: str) -> Optional[Any]:
        key = normalize_name(name)
        for env in self._chain():
            if key in env._mixins:
                return env._mixins[key]
        return None

    def set_local_mixin(self, name: str, mixin: Any) -> None:
        self._mixins[normalize_name(name)] = mixin

    def function(self, name: str) -> Optional[Any]:
        key = normalize_name(name)
        for env in self._chain():
            if key in env._functions:
                return env._functions[key]
        return None

    def set_local_function(self, name: str, function: Any) -> None:
        self._functions[normalize_name(name)] = function

    # -- selector ----------------------------------------------------------

    @property
    def selector(self) -> Optional[List[str]]:
        """The resolved selectors of the innermost enclosing rule, if any."""
        for env in self._chain():
            if env._selector is not None:
                return env._selector
        return None

    @selector.setter
    def selector(self, value: Optional[List[str]]) -> None:
        self._selector = value

    # -- buffers -----------------------------------------------------------

    @property
    def buffer_env(self) -> Environment:
        """The nearest scope environment (where new buffer names are created)."""
        for env in self._chain():
            if env.buffer_scope:
                return env
        return self.global_env

    def buffer(self, name: str) -> Optional[List[Any]]:
        """The live entry for *name*, searching parent environments."""
        for env in self._chain():
            if name in env._buffers:
                return env._buffers[name]
        return None

    def declare_buffer(self, name: str) -> List[Any]:
        """The nearest entry for *name*, created empty here if there is none."""
        entry = self.buffer(name)
        if entry is None:
            logger.debug("creating buffer %r", name)
            entry = self._buffers[name] = []
        return entry

    def append_buffer(self, name: str, node: Any) -> None:
        """Append *node* to the nearest entry for *name*, or create one here."""
        self.declare_buffer(name).append(node)

    def buffer_names(self) -> List[str]:
        """Names visible from this environment, nearest first."""
        seen: List[str] = []
        for env in self._chain():
            seen.extend(n for n in env._buffers if n not in seen)
        return seen
