"""
Trefoil top-level bindings: one per program statement.
"""

from typing import ClassVar, Tuple

from pydantic import BaseModel, ConfigDict, StrictStr

from src.trefoil_ast.expressions import Expression


class Binding(BaseModel):
    """Base class of every binding node."""
    model_config = ConfigDict(frozen=True)


class VariableBinding(Binding):
    """(define name init_expr)"""
    name: StrictStr
    init_expr: Expression

    def __str__(self) -> str:
        return f"(define {self.name} {self.init_expr})"


class FunctionBinding(Binding):
    """
    (define (name param...) body_expr)

    Parameter names are not checked for duplicates here; that happens when the
    function is added to an environment.
    """
    name: StrictStr
    param_names: Tuple[StrictStr, ...] = ()
    body_expr: Expression

    def __str__(self) -> str:
        signature = " ".join((self.name,) + self.param_names)
        return f"(define ({signature}) {self.body_expr})"


class TopLevelExpression(Binding):
    expr: Expression

    def __str__(self) -> str:
        return str(self.expr)


class TestBinding(Binding):
    """(test expr): passes only when expr evaluates to exactly `true`."""
    # Keeps pytest from collecting this class as a test case.
    __test__: ClassVar[bool] = False

    expr: Expression

    def __str__(self) -> str:
        return f"(test {self.expr})"


BINDING_TYPES = (VariableBinding, FunctionBinding, TopLevelExpression, TestBinding)
