"""
Processor for Trefoil primitives: integer arithmetic and comparison, list
construction and inspection, and max. Every primitive evaluates all of its
operands eagerly, left to right, in the caller's environment.
"""
import logging
from typing import TYPE_CHECKING

from src.system.errors import TrefoilRuntimeError
from src.trefoil_ast.expressions import (
    INT_BITS, INT_MIN,
    BinaryOperation, BooleanLiteral, Car, Cdr, Cons, Equals, Expression, FindMax,
    IntegerLiteral, IsCons, IsNil, Minus, Nil, Plus, Times, Value,
)
from .sexp_environment import Environment

if TYPE_CHECKING:
    from .sexp_evaluator import TrefoilEvaluator

logger = logging.getLogger(__name__)

_INT_RANGE = 2 ** INT_BITS


def wrap_int(value: int) -> int:
    """Wraps an unbounded Python int into the signed 32-bit range, like native integer overflow."""
    return (value - INT_MIN) % _INT_RANGE + INT_MIN


class PrimitiveProcessor:
    """
    Applies primitives for the TrefoilEvaluator.
    Each method receives the already-built AST node and the current environment,
    evaluates the operands it needs through the evaluator, and returns a value.
    """
    def __init__(self, evaluator_instance: 'TrefoilEvaluator'):
        """
        Args:
            evaluator_instance: The evaluator used for recursive evaluation of operands.
        """
        self.evaluator = evaluator_instance

    # --- Integers ---

    def _integer_operands(self, expr: BinaryOperation, env: Environment, verb: str):
        left = self.evaluator.evaluate(expr.left, env)
        right = self.evaluator.evaluate(expr.right, env)
        if not (isinstance(left, IntegerLiteral) and isinstance(right, IntegerLiteral)):
            raise TrefoilRuntimeError(
                f"Arguments of {verb} are not integers",
                str(expr),
                error_details=f"got {left} and {right}",
            )
        return left.value, right.value

    def apply_plus(self, expr: Plus, env: Environment) -> IntegerLiteral:
        left, right = self._integer_operands(expr, env, "plus")
        return IntegerLiteral(value=wrap_int(left + right))

    def apply_minus(self, expr: Minus, env: Environment) -> IntegerLiteral:
        left, right = self._integer_operands(expr, env, "minus")
        return IntegerLiteral(value=wrap_int(left - right))

    def apply_times(self, expr: Times, env: Environment) -> IntegerLiteral:
        left, right = self._integer_operands(expr, env, "times")
        return IntegerLiteral(value=wrap_int(left * right))

    def apply_equals(self, expr: Equals, env: Environment) -> BooleanLiteral:
        left, right = self._integer_operands(expr, env, "equals")
        return BooleanLiteral(value=left == right)

    def apply_max(self, expr: FindMax, env: Environment) -> IntegerLiteral:
        """(max e1 e2 ...): the largest of one or more integers."""
        best = None
        for i, arg in enumerate(expr.args):
            value = self.evaluator.evaluate(arg, env)
            if not isinstance(value, IntegerLiteral):
                raise TrefoilRuntimeError(
                    f"Argument {i + 1} of max is not an integer",
                    str(expr),
                    error_details=f"got {value}",
                )
            if best is None or value.value > best.value:
                best = value
        logger.debug("apply_max: %s -> %s", expr, best)
        return best

    # --- Lists ---

    def apply_cons(self, expr: Cons, env: Environment) -> Cons:
        head = self.evaluator.evaluate(expr.head, env)
        tail = self.evaluator.evaluate(expr.tail, env)
        return Cons(head=head, tail=tail)

    def apply_is_nil(self, expr: IsNil, env: Environment) -> BooleanLiteral:
        return BooleanLiteral(value=isinstance(self.evaluator.evaluate(expr.expr, env), Nil))

    def apply_is_cons(self, expr: IsCons, env: Environment) -> BooleanLiteral:
        return BooleanLiteral(value=isinstance(self.evaluator.evaluate(expr.expr, env), Cons))

    def _cons_operand(self, expr: Expression, operand: Expression, env: Environment) -> Cons:
        value = self.evaluator.evaluate(operand, env)
        if not isinstance(value, Cons):
            raise TrefoilRuntimeError(
                f"Argument of {expr.operator} is not a cons",
                str(expr),
                error_details=f"got {value}",
            )
        return value

    def apply_car(self, expr: Car, env: Environment) -> Value:
        return self._cons_operand(expr, expr.expr, env).head

    def apply_cdr(self, expr: Cdr, env: Environment) -> Value:
        return self._cons_operand(expr, expr.expr, env).tail
