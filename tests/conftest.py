import pytest

from src.sexp_evaluator.sexp_environment import Environment
from src.sexp_evaluator.sexp_evaluator import TrefoilEvaluator
from src.sexp_parser.sexp_parser import SexpParser
from src.trefoil_ast.ast_builder import AstBuilder

# --- Core Components ---

@pytest.fixture
def parser():
    """Provides a SexpParser instance."""
    return SexpParser()

@pytest.fixture
def builder():
    """Provides an AstBuilder instance."""
    return AstBuilder()

@pytest.fixture
def evaluator():
    """Provides a fresh TrefoilEvaluator instance."""
    return TrefoilEvaluator()

@pytest.fixture
def empty_env():
    """Provides the empty environment."""
    return Environment.empty()

# --- Source Helpers ---

@pytest.fixture
def expr(parser, builder):
    """Returns a function that reads one expression from source text."""
    def _expr(source: str):
        return builder.build_expression(parser.parse_string(source))
    return _expr

@pytest.fixture
def run(parser, builder, evaluator):
    """
    Returns a function that executes a whole program and returns
    (final_env, reports), where reports lists every reported message in order.

    Pass env= to continue from an earlier environment.
    """
    def _run(source: str, env=None):
        reports = []
        env = env if env is not None else Environment.empty()
        for tree in parser.parse_program(source):
            env = evaluator.execute(builder.build_binding(tree), env, reports.append)
        return env, reports
    return _run

@pytest.fixture
def eval_in(expr, evaluator):
    """Returns a function that evaluates expression source text in an environment (empty by default)."""
    def _eval_in(source: str, env=None):
        return evaluator.evaluate(expr(source), env)
    return _eval_in
