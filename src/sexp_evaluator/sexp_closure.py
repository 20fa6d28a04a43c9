"""
Environment entries: what a name can be bound to.

A name is bound either to a VariableEntry holding a value, or to a
FunctionEntry (a closure) pairing a function definition with the environment
in effect where it was defined.
"""
import logging
from typing import TYPE_CHECKING, Union

from src.trefoil_ast.bindings import FunctionBinding
from src.trefoil_ast.expressions import Expression, Value

if TYPE_CHECKING:
    from .sexp_environment import Environment

logger = logging.getLogger(__name__)


class VariableEntry:
    __slots__ = ("value",)

    def __init__(self, value: Value):
        self.value = value

    def __eq__(self, other):
        return isinstance(other, VariableEntry) and self.value == other.value

    __hash__ = None

    def __repr__(self):
        return f"VariableEntry({self.value})"


class FunctionEntry:
    __slots__ = ("binding", "defining_environment")

    def __init__(self, binding: FunctionBinding, defining_environment: "Environment"):
        """
        Represents a lexically-scoped Trefoil function.

        Args:
            binding: The function's definition (name, parameters, body).
            defining_environment: The environment captured at definition time.
                                  Calls extend this environment, never the caller's.
                                  For functions added by Environment.extend_function
                                  it contains the entry itself, which is what makes
                                  recursion work.
        """
        self.binding = binding
        self.defining_environment = defining_environment
        logger.debug("Closure created: %s%s, def_env_id=%d", binding.name, binding.param_names, id(defining_environment))

    @property
    def param_names(self):
        return self.binding.param_names

    @property
    def body(self) -> Expression:
        return self.binding.body_expr

    def __eq__(self, other):
        # Captured environments can contain this very entry, so they are compared by identity.
        return (
            isinstance(other, FunctionEntry)
            and self.binding == other.binding
            and self.defining_environment is other.defining_environment
        )

    __hash__ = None

    def __repr__(self):
        return f"<FunctionEntry {self.binding.name}({', '.join(self.param_names)}) def_env_id={id(self.defining_environment)}>"


Entry = Union[VariableEntry, FunctionEntry]
