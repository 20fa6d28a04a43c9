"""
Processor for Trefoil special forms: the expressions that control which
sub-expressions are evaluated, and in which environment.
"""
import logging
from typing import TYPE_CHECKING, List

from src.system.errors import TrefoilRuntimeError
from src.trefoil_ast.expressions import (
    BooleanLiteral, Conditional, FunctionCall, Let, Value, VariableReference,
)
from .sexp_environment import Environment

if TYPE_CHECKING:
    from .sexp_evaluator import TrefoilEvaluator

logger = logging.getLogger(__name__)


class SpecialFormProcessor:
    """
    Processes special forms for the TrefoilEvaluator.
    Each method handles a specific form and is responsible for its evaluation
    semantics, including which operands are evaluated and how the environment
    is extended.
    """
    def __init__(self, evaluator_instance: 'TrefoilEvaluator'):
        """
        Args:
            evaluator_instance: The evaluator used for recursive evaluation of sub-expressions.
        """
        self.evaluator = evaluator_instance

    def handle_variable(self, expr: VariableReference, env: Environment) -> Value:
        try:
            return env.get_variable(expr.name)
        except TrefoilRuntimeError as e:
            logger.debug("handle_variable: lookup of '%s' failed: %s", expr.name, e.message)
            raise TrefoilRuntimeError(e.message, str(expr)) from e

    def handle_if(self, expr: Conditional, env: Environment) -> Value:
        """(if condition then else): only `false` selects the else branch; only the chosen branch is evaluated."""
        condition = self.evaluator.evaluate(expr.condition, env)
        is_false = isinstance(condition, BooleanLiteral) and not condition.value
        chosen = expr.else_branch if is_false else expr.then_branch
        logger.debug("handle_if: condition %s -> %s, taking %s branch", expr.condition, condition, "else" if is_false else "then")
        return self.evaluator.evaluate(chosen, env)

    def handle_let(self, expr: Let, env: Environment) -> Value:
        """(let ((name bound)) body): bound is evaluated in env, body in env extended with name."""
        bound_value = self.evaluator.evaluate(expr.bound_expr, env)
        let_env = env.extend_variable(expr.local_name, bound_value)
        return self.evaluator.evaluate(expr.body_expr, let_env)

    def handle_call(self, expr: FunctionCall, env: Environment) -> Value:
        """
        Calls a user-defined function.

        Arguments are evaluated left to right in the caller's environment; the
        body is evaluated in the function's defining environment extended with
        the parameters. That is what gives Trefoil lexical scoping.
        """
        try:
            function = env.get_function(expr.name)
        except TrefoilRuntimeError as e:
            raise TrefoilRuntimeError(e.message, str(expr)) from e

        params = function.param_names
        if len(params) != len(expr.args):
            raise TrefoilRuntimeError(
                f"Function {expr.name} has incompatible number of parameters",
                str(expr),
                error_details=f"expected {len(params)}, got {len(expr.args)}",
            )

        arg_values: List[Value] = [self.evaluator.evaluate(arg, env) for arg in expr.args]
        call_env = function.defining_environment.extend_variables(params, arg_values)
        logger.debug("handle_call: %s%s in env %d", expr.name, arg_values, id(call_env))
        return self.evaluator.evaluate(function.body, call_env)
