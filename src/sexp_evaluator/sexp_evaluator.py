"""
Trefoil evaluator implementation.
Reduces expressions to values and executes top-level bindings against an
immutable Environment.
"""

import logging
from typing import Callable, Dict, Iterable, Optional

from src.system.errors import InternalInterpreterError, TrefoilRuntimeError
from src.trefoil_ast.bindings import (
    BINDING_TYPES, Binding, FunctionBinding, TestBinding, TopLevelExpression, VariableBinding,
)
from src.trefoil_ast.expressions import (
    EXPRESSION_TYPES,
    BooleanLiteral, Car, Cdr, Conditional, Cons, Equals, Expression, FindMax,
    FunctionCall, IntegerLiteral, IsCons, IsNil, Let, Minus, Nil, Plus, Times,
    VariableReference, Value,
)
from .sexp_environment import Environment
from .sexp_primitives import PrimitiveProcessor
from .sexp_special_forms import SpecialFormProcessor

logger = logging.getLogger(__name__)

# Receives the driver-facing message for each executed binding.
Reporter = Callable[[str], None]


class TrefoilEvaluator:
    """
    Tree-walking interpreter for Trefoil ASTs.

    Dispatch is keyed on the node's concrete type. The tables are checked
    against the full set of AST node types when the evaluator is built, so a
    node type without a handler is caught immediately rather than at the first
    program that happens to use it.
    """

    def __init__(self):
        self.special_form_processor = SpecialFormProcessor(self)
        self.primitive_processor = PrimitiveProcessor(self)

        self.EXPRESSION_HANDLERS: Dict[type, Callable[[Expression, Environment], Value]] = {
            IntegerLiteral: self._self_evaluating,
            BooleanLiteral: self._self_evaluating,
            Nil: self._self_evaluating,
            VariableReference: self.special_form_processor.handle_variable,
            Conditional: self.special_form_processor.handle_if,
            Let: self.special_form_processor.handle_let,
            FunctionCall: self.special_form_processor.handle_call,
            Plus: self.primitive_processor.apply_plus,
            Minus: self.primitive_processor.apply_minus,
            Times: self.primitive_processor.apply_times,
            Equals: self.primitive_processor.apply_equals,
            FindMax: self.primitive_processor.apply_max,
            Cons: self.primitive_processor.apply_cons,
            IsNil: self.primitive_processor.apply_is_nil,
            IsCons: self.primitive_processor.apply_is_cons,
            Car: self.primitive_processor.apply_car,
            Cdr: self.primitive_processor.apply_cdr,
        }
        self.BINDING_HANDLERS: Dict[type, Callable[[Binding, Environment, Optional[Reporter]], Environment]] = {
            VariableBinding: self._execute_variable_binding,
            FunctionBinding: self._execute_function_binding,
            TopLevelExpression: self._execute_top_level_expression,
            TestBinding: self._execute_test_binding,
        }

        missing = [t.__name__ for t in EXPRESSION_TYPES if t not in self.EXPRESSION_HANDLERS]
        missing += [t.__name__ for t in BINDING_TYPES if t not in self.BINDING_HANDLERS]
        if missing:
            raise InternalInterpreterError(f"No evaluator handler for AST node type(s): {', '.join(missing)}")
        logger.debug("TrefoilEvaluator initialized with %d expression and %d binding handlers.",
                      len(self.EXPRESSION_HANDLERS), len(self.BINDING_HANDLERS))

    # --- Expressions ---

    def evaluate(self, expr: Expression, env: Optional[Environment] = None) -> Value:
        """
        Evaluates expr in env (the empty environment by default) and returns the resulting value.

        Raises:
            TrefoilRuntimeError: When the Trefoil program makes a mistake.
            InternalInterpreterError: If expr is not a recognised AST node.
        """
        if env is None:
            env = Environment.empty()
        handler = self.EXPRESSION_HANDLERS.get(type(expr))
        if handler is None:
            raise InternalInterpreterError(f'"impossible" expression AST node {type(expr).__name__}: {expr!r}')
        return handler(expr, env)

    def _self_evaluating(self, expr: Expression, env: Environment) -> Expression:
        return expr

    # --- Bindings ---

    def execute(
        self,
        binding: Binding,
        env: Optional[Environment] = None,
        report: Optional[Reporter] = None,
    ) -> Environment:
        """
        Executes binding in env and returns the resulting environment. env itself is never changed.

        Args:
            binding: The top-level binding to run.
            env: The environment to run it in; the empty environment by default.
            report: Optional callback receiving what a driver would show for this
                    binding: "x = 3", "f is defined", or a top-level expression's value.

        Raises:
            TrefoilRuntimeError: When the Trefoil program makes a mistake.
            InternalInterpreterError: If binding is not a recognised AST node.
        """
        if env is None:
            env = Environment.empty()
        handler = self.BINDING_HANDLERS.get(type(binding))
        if handler is None:
            raise InternalInterpreterError(f'"impossible" binding AST node {type(binding).__name__}: {binding!r}')
        logger.debug("Executing binding: %s", binding)
        return handler(binding, env, report)

    def _execute_variable_binding(self, binding: VariableBinding, env: Environment, report: Optional[Reporter]) -> Environment:
        value = self.evaluate(binding.init_expr, env)
        if report:
            report(f"{binding.name} = {value}")
        return env.extend_variable(binding.name, value)

    def _execute_function_binding(self, binding: FunctionBinding, env: Environment, report: Optional[Reporter]) -> Environment:
        new_env = env.extend_function(binding)
        if report:
            report(f"{binding.name} is defined")
        return new_env

    def _execute_top_level_expression(self, binding: TopLevelExpression, env: Environment, report: Optional[Reporter]) -> Environment:
        value = self.evaluate(binding.expr, env)
        if report:
            report(str(value))
        return env

    def _execute_test_binding(self, binding: TestBinding, env: Environment, report: Optional[Reporter]) -> Environment:
        result = self.evaluate(binding.expr, env)
        # Stricter than `if`: only the literal `true` passes.
        if result != BooleanLiteral(value=True):
            raise TrefoilRuntimeError("Test failed", str(binding), error_details=f"evaluated to {result}")
        return env

    def execute_program(
        self,
        bindings: Iterable[Binding],
        env: Optional[Environment] = None,
        report: Optional[Reporter] = None,
    ) -> Environment:
        """Executes bindings in order, threading the environment through, and returns the final one."""
        if env is None:
            env = Environment.empty()
        for binding in bindings:
            env = self.execute(binding, env, report)
        return env


# --- Module-level entry points ---

_default_evaluator = TrefoilEvaluator()


def evaluate(expr: Expression, env: Optional[Environment] = None) -> Value:
    return _default_evaluator.evaluate(expr, env)


def execute(binding: Binding, env: Optional[Environment] = None, report: Optional[Reporter] = None) -> Environment:
    return _default_evaluator.execute(binding, env, report)


def execute_program(
    bindings: Iterable[Binding],
    env: Optional[Environment] = None,
    report: Optional[Reporter] = None,
) -> Environment:
    return _default_evaluator.execute_program(bindings, env, report)
