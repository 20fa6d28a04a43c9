"""
Tests for the Trefoil AST node models.
"""

import pytest
from pydantic import ValidationError

from src.trefoil_ast.bindings import FunctionBinding, TestBinding
from src.trefoil_ast.expressions import (
    INT_MAX, INT_MIN,
    BooleanLiteral, FindMax, IntegerLiteral, Nil, Plus, VariableReference,
    cons, is_value, list_of, nil, of_bool, of_int,
)


def test_integer_literal_range():
    assert IntegerLiteral(value=INT_MAX).value == 2147483647
    assert IntegerLiteral(value=INT_MIN).value == -2147483648
    with pytest.raises(ValidationError):
        IntegerLiteral(value=INT_MAX + 1)
    with pytest.raises(ValidationError):
        IntegerLiteral(value=INT_MIN - 1)

def test_literals_are_strictly_typed():
    with pytest.raises(ValidationError):
        IntegerLiteral(value=True)
    with pytest.raises(ValidationError):
        IntegerLiteral(value="3")
    with pytest.raises(ValidationError):
        BooleanLiteral(value=1)

def test_nodes_are_immutable():
    lit = of_int(3)
    with pytest.raises(ValidationError):
        lit.value = 4

def test_structural_equality():
    assert Plus(left=of_int(1), right=of_int(2)) == Plus(left=of_int(1), right=of_int(2))
    assert Plus(left=of_int(1), right=of_int(2)) != Plus(left=of_int(2), right=of_int(1))
    assert of_int(1) != of_bool(True)
    assert nil() == Nil()

def test_find_max_needs_an_argument():
    with pytest.raises(ValidationError):
        FindMax(args=())

def test_list_of_builds_cons_chain():
    assert list_of(of_int(1), of_int(2)) == cons(of_int(1), cons(of_int(2), Nil()))
    assert list_of() == Nil()

def test_value_rendering():
    assert str(list_of(of_int(1), of_bool(False))) == "(cons 1 (cons false nil))"
    assert str(of_int(-4)) == "-4"

@pytest.mark.parametrize("expr, expected", [
    (of_int(1), True),
    (of_bool(False), True),
    (Nil(), True),
    (list_of(of_int(1), list_of(of_int(2))), True),
    (cons(of_int(1), of_int(2)), True),
    (VariableReference(name="x"), False),
    (Plus(left=of_int(1), right=of_int(2)), False),
])
def test_is_value(expr, expected):
    assert is_value(expr) is expected

def test_function_binding_defaults():
    binding = FunctionBinding(name="f", body_expr=of_int(1))
    assert binding.param_names == ()

def test_test_binding_is_not_collected_by_pytest():
    assert TestBinding.__test__ is False
