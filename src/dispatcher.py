"""
Dispatcher module: runs Trefoil source text through the reader, the AST
builder and the evaluator, one top-level binding at a time.
"""

import logging
from typing import Callable, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.sexp_evaluator.sexp_environment import Environment
from src.sexp_evaluator.sexp_evaluator import Reporter, TrefoilEvaluator
from src.sexp_parser.sexp_parser import SexpParser
from src.system.errors import TrefoilError, TrefoilRuntimeError
from src.trefoil_ast.ast_builder import AstBuilder

logger = logging.getLogger(__name__)

RECURSION_LIMIT_MESSAGE = "Maximum recursion depth exceeded"


class RunResult(BaseModel):
    """Outcome of running one piece of source text."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: Literal["COMPLETE", "FAILED"]
    environment: Environment
    bindings_run: int = 0
    errors: List[str] = Field(default_factory=list)


def run_source(
    source: str,
    env: Optional[Environment] = None,
    evaluator: Optional[TrefoilEvaluator] = None,
    report: Optional[Reporter] = None,
    on_error: Optional[Callable[[TrefoilError], None]] = None,
    stop_on_error: bool = True,
) -> RunResult:
    """
    Runs every top-level binding in source, threading the environment through.

    A reader error (e.g. unbalanced parentheses) fails the whole source before
    anything runs. Otherwise each binding is built and executed in turn; a
    binding that fails, including one that exhausts the Python recursion limit,
    leaves the environment as it was. With stop_on_error the run ends at the
    first failure, otherwise it continues with the next binding.

    Args:
        source: Trefoil program text.
        env: Starting environment; the empty environment by default.
        evaluator: The evaluator to use; a fresh one by default.
        report: Receives the message of each executed binding.
        on_error: Receives each TrefoilError as it happens.
        stop_on_error: Whether to stop at the first failing binding.

    Returns:
        A RunResult whose environment holds every successful binding.
    """
    env = env if env is not None else Environment.empty()
    evaluator = evaluator or TrefoilEvaluator()
    result = RunResult(status="COMPLETE", environment=env)

    def fail(error: TrefoilError) -> None:
        logger.debug("Run failed at binding %d: %s", result.bindings_run + 1, error)
        result.status = "FAILED"
        result.errors.append(str(error))
        if on_error:
            on_error(error)

    try:
        trees = SexpParser().parse_program(source)
    except TrefoilError as e:
        fail(e)
        return result
    except RecursionError:
        fail(TrefoilRuntimeError(RECURSION_LIMIT_MESSAGE))
        return result

    builder = AstBuilder()
    for tree in trees:
        try:
            binding = builder.build_binding(tree)
            result.environment = evaluator.execute(binding, result.environment, report)
            result.bindings_run += 1
        except TrefoilError as e:
            fail(e)
            if stop_on_error:
                break
        except RecursionError:
            fail(TrefoilRuntimeError(RECURSION_LIMIT_MESSAGE))
            if stop_on_error:
                break

    logger.info("Ran %d of %d binding(s), status %s", result.bindings_run, len(trees), result.status)
    return result
