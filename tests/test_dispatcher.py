import pytest
from unittest.mock import MagicMock

from src.dispatcher import RunResult, run_source
from src.sexp_evaluator.sexp_environment import Environment
from src.sexp_evaluator.sexp_evaluator import TrefoilEvaluator
from src.system.errors import TrefoilRuntimeError, TrefoilSyntaxError
from src.trefoil_ast.expressions import of_int


def test_run_source_success():
    reports = []
    result = run_source("(define x 3)\n(+ x 1)", report=reports.append)
    assert isinstance(result, RunResult)
    assert result.status == "COMPLETE"
    assert result.bindings_run == 2
    assert result.errors == []
    assert result.environment.get_variable("x") == of_int(3)
    assert reports == ["x = 3", "4"]

def test_run_source_empty_program():
    result = run_source("; nothing here\n")
    assert result.status == "COMPLETE"
    assert result.bindings_run == 0
    assert result.environment == Environment.empty()

def test_run_source_continues_from_environment():
    env = Environment.singleton("x", of_int(10))
    result = run_source("(define y (+ x 1))", env)
    assert result.environment.get_variable("y") == of_int(11)
    assert env.lookup("y") is None

def test_reader_error_fails_whole_source():
    on_error = MagicMock()
    reports = []
    result = run_source("(define x 1)\n(define y", report=reports.append, on_error=on_error)
    assert result.status == "FAILED"
    assert result.bindings_run == 0
    assert reports == []
    on_error.assert_called_once()
    assert isinstance(on_error.call_args[0][0], TrefoilSyntaxError)

def test_stop_on_first_error():
    on_error = MagicMock()
    reports = []
    result = run_source(
        "(define x 1)\n(car x)\n(define y 2)",
        report=reports.append,
        on_error=on_error,
    )
    assert result.status == "FAILED"
    assert result.bindings_run == 1
    assert reports == ["x = 1"]
    assert "y" not in result.environment
    assert len(result.errors) == 1
    assert "Argument of car is not a cons" in result.errors[0]
    assert isinstance(on_error.call_args[0][0], TrefoilRuntimeError)

def test_keep_going_after_error():
    reports = []
    result = run_source(
        "(define x 1)\n(test false)\n(+ 1)\n(define y 2)",
        report=reports.append,
        stop_on_error=False,
    )
    assert result.status == "FAILED"
    assert result.bindings_run == 2
    assert reports == ["x = 1", "y = 2"]
    assert len(result.errors) == 2
    assert "Test failed" in result.errors[0]
    assert "Operator + expects 2 arguments" in result.errors[1]
    assert result.environment.get_variable("y") == of_int(2)

def test_uses_given_evaluator(mocker):
    evaluator = TrefoilEvaluator()
    spy = mocker.spy(evaluator, "execute")
    run_source("(define x 1)\n(define y 2)", evaluator=evaluator)
    assert spy.call_count == 2

def test_internal_errors_propagate(mocker):
    evaluator = TrefoilEvaluator()
    mocker.patch.object(evaluator, "execute", side_effect=RuntimeError("boom"))
    with pytest.raises(RuntimeError, match="boom"):
        run_source("(define x 1)", evaluator=evaluator)

def test_runaway_recursion_is_a_failed_binding():
    on_error = MagicMock()
    result = run_source(
        "(define a 1)\n(define (f n) (f n))\n(f 1)\n(define b 2)",
        on_error=on_error,
    )
    assert result.status == "FAILED"
    assert result.bindings_run == 2
    assert "a" in result.environment
    assert "f" in result.environment
    assert "b" not in result.environment
    assert "Maximum recursion depth exceeded" in result.errors[0]
    assert isinstance(on_error.call_args[0][0], TrefoilRuntimeError)

def test_keep_going_after_runaway_recursion():
    reports = []
    result = run_source(
        "(define (f n) (f n))\n(f 1)\n(define b 2)",
        report=reports.append,
        stop_on_error=False,
    )
    assert result.status == "FAILED"
    assert reports == ["f is defined", "b = 2"]
    assert result.environment.get_variable("b") == of_int(2)

def test_recursion_limit_in_reader_fails_whole_source(mocker):
    mocker.patch("src.dispatcher.SexpParser.parse_program", side_effect=RecursionError)
    result = run_source("(define x 1)")
    assert result.status == "FAILED"
    assert result.bindings_run == 0
    assert result.errors == ["Maximum recursion depth exceeded"]
