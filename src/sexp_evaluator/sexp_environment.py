"""
The Trefoil dynamic environment: an immutable, persistent mapping from names
to entries, stored as a chain of frames.
"""

import logging
from typing import Dict, Iterator, Optional, Sequence

from src.system.errors import TrefoilRuntimeError
from src.trefoil_ast.bindings import FunctionBinding
from src.trefoil_ast.expressions import Value, is_value
from .sexp_closure import Entry, FunctionEntry, VariableEntry

logger = logging.getLogger(__name__)


class Environment:
    """
    Represents a lexical environment for Trefoil evaluation.

    Each environment is one frame holding at most one binding plus a link to
    its parent. Extending never touches the receiver: it builds a new frame on
    top, so every environment captured by a closure stays valid and unchanged,
    and unrelated bindings are shared between an environment and its extensions.

    Variables and functions live in the same namespace; a lookup finds the most
    recently added entry for a name.
    """

    __slots__ = ("_name", "_entry", "_parent")

    def __init__(
        self,
        parent: Optional['Environment'] = None,
        name: Optional[str] = None,
        entry: Optional[Entry] = None,
    ):
        """
        Initializes one frame. Use empty(), singleton() and the extend_*
        methods rather than calling this directly.

        Args:
            parent: The environment this frame extends, or None for the empty environment.
            name: The name bound by this frame, None for the empty environment.
            entry: The entry bound to name.
        """
        self._parent = parent
        self._name = name
        self._entry = entry

    # --- Factories ---

    @classmethod
    def empty(cls) -> 'Environment':
        return cls()

    @classmethod
    def singleton(cls, name: str, value: Value) -> 'Environment':
        return cls.empty().extend_variable(name, value)

    # --- Lookup ---

    def lookup(self, name: str) -> Optional[Entry]:
        """Returns the most recent entry for name, or None if it is unbound."""
        env: Optional[Environment] = self
        while env is not None:
            if env._name == name and env._entry is not None:
                return env._entry
            env = env._parent
        return None

    def contains_variable(self, name: str) -> bool:
        return isinstance(self.lookup(name), VariableEntry)

    def contains_function(self, name: str) -> bool:
        return isinstance(self.lookup(name), FunctionEntry)

    def get_variable(self, name: str) -> Value:
        """
        Returns the value bound to a variable.

        Raises:
            TrefoilRuntimeError: If name is unbound, or bound to a function.
        """
        entry = self.lookup(name)
        if not isinstance(entry, VariableEntry):
            logger.debug("'%s' is not a variable in env id=%d (found %r)", name, id(self), entry)
            raise TrefoilRuntimeError(f"Unbound variable: {name}")
        return entry.value

    def get_function(self, name: str) -> FunctionEntry:
        """
        Returns the function entry bound to a name.

        Raises:
            TrefoilRuntimeError: If name is unbound, or bound to a variable.
        """
        entry = self.lookup(name)
        if not isinstance(entry, FunctionEntry):
            logger.debug("'%s' is not a function in env id=%d (found %r)", name, id(self), entry)
            raise TrefoilRuntimeError(f"Unbound function: {name}")
        return entry

    # --- Extension ---

    def extend_variable(self, name: str, value: Value) -> 'Environment':
        """
        Returns a *new* environment with name bound to value. Does not change self.

        Raises:
            TrefoilRuntimeError: If value is not a value node (literal, nil or cons).
        """
        if not is_value(value):
            raise TrefoilRuntimeError(f"Cannot bind '{name}' to an unevaluated expression", str(value))
        logger.debug("Extending env %d with variable '%s' = %s", id(self), name, value)
        return Environment(parent=self, name=name, entry=VariableEntry(value))

    def extend_variables(self, names: Sequence[str], values: Sequence[Value]) -> 'Environment':
        """Returns a *new* environment with each name bound to its value, left to right."""
        if len(names) != len(values):
            raise ValueError(f"Got {len(names)} names but {len(values)} values")
        env = self
        for name, value in zip(names, values):
            env = env.extend_variable(name, value)
        return env

    def extend_function(self, binding: FunctionBinding) -> 'Environment':
        """
        Returns a *new* environment with binding.name bound to a closure whose
        defining environment is that new environment itself, so the function
        can call itself.

        Raises:
            TrefoilRuntimeError: If the function's parameter names are not pairwise distinct.
        """
        seen = set()
        for param in binding.param_names:
            if param in seen:
                raise TrefoilRuntimeError(f"Parameter name {param} duplicated in function {binding.name}", str(binding))
            seen.add(param)

        env = Environment(parent=self, name=binding.name)
        env._entry = FunctionEntry(binding, env)
        logger.debug("Extending env %d with function '%s' -> env %d", id(self), binding.name, id(env))
        return env

    # --- Inspection ---

    def names(self) -> Iterator[str]:
        """Visible names, most recently bound first, each once."""
        seen = set()
        env: Optional[Environment] = self
        while env is not None:
            if env._name is not None and env._name not in seen:
                seen.add(env._name)
                yield env._name
            env = env._parent

    def as_dict(self) -> Dict[str, Entry]:
        """A snapshot of every visible name and the entry it resolves to."""
        return {name: self.lookup(name) for name in self.names()}

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    def __len__(self) -> int:
        return sum(1 for _ in self.names())

    def __eq__(self, other):
        if not isinstance(other, Environment):
            return NotImplemented
        return self is other or self.as_dict() == other.as_dict()

    __hash__ = None

    def __repr__(self) -> str:
        return f"<Environment id={id(self)} names={list(self.names())}>"
