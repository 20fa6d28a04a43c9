"""
Unit tests for the SexpParser class.
"""

import pytest

from src.sexp_parser.sexp_parser import SexpParser
from src.sexp_parser.symbol_tree import Leaf, Node, leaf, node
from src.system.errors import TrefoilSyntaxError

# --- Test Valid Input ---

def test_parse_simple_list(parser):
    """Test parsing a simple list of tokens."""
    assert parser.parse_string("(+ 1 2)") == node(leaf("+"), leaf("1"), leaf("2"))

def test_parse_nested_list(parser):
    """Test parsing nested lists."""
    expected = node(leaf("f"), node(leaf("g"), leaf("x")), leaf("3"))
    assert parser.parse_string("(f (g x) 3)") == expected

def test_parse_single_atom(parser):
    assert parser.parse_string("42") == Leaf("42")
    assert parser.parse_string("x") == Leaf("x")

def test_keywords_stay_plain_tokens(parser):
    """nil, true and false are not given meaning by the reader."""
    tree = parser.parse_string("(nil? nil true false cons?)")
    assert tree == node(leaf("nil?"), leaf("nil"), leaf("true"), leaf("false"), leaf("cons?"))

def test_negative_integer_token(parser):
    assert parser.parse_string("-7") == Leaf("-7")

@pytest.mark.parametrize("token", ["1e3", "007", "+5", "1.50", "inf", "1_000", "99999999999"])
def test_number_like_tokens_keep_their_text(parser, token):
    """The reader never converts numbers; the AST builder sees the token as written."""
    assert parser.parse_string(f"(f {token})") == node(leaf("f"), leaf(token))

def test_empty_parentheses_are_an_empty_node(parser):
    assert parser.parse_string("()") == Node(())

def test_comments_and_whitespace_are_skipped(parser):
    source = """
    ; a comment on its own line
    (+ 1   ; trailing comment
       2)
    """
    assert parser.parse_string(source) == node(leaf("+"), leaf("1"), leaf("2"))

def test_parse_program_multiple_forms(parser):
    trees = parser.parse_program("(define x 3)\n(+ x 1)\nx")
    assert trees == [
        node(leaf("define"), leaf("x"), leaf("3")),
        node(leaf("+"), leaf("x"), leaf("1")),
        leaf("x"),
    ]

@pytest.mark.parametrize("source", ["", "   \n\t", "; only a comment"])
def test_parse_program_empty_input(parser, source):
    assert parser.parse_program(source) == []

def test_tree_rendering(parser):
    tree = parser.parse_string("(let ((x 1))\n  (+ x 2))")
    assert str(tree) == "(let ((x 1)) (+ x 2))"

# --- Test Errors ---

def test_parse_string_empty_input_raises(parser):
    with pytest.raises(TrefoilSyntaxError, match="empty"):
        parser.parse_string("   ")

def test_parse_string_multiple_forms_raises(parser):
    with pytest.raises(TrefoilSyntaxError, match="Unexpected content") as excinfo:
        parser.parse_string("(+ 1 2) (+ 3 4)")
    assert "Found 2 top-level forms" in excinfo.value.error_details

@pytest.mark.parametrize("source", ["(+ 1 2", "((", "(define (f x) (+ x 1)"])
def test_unclosed_parenthesis_raises(parser, source):
    with pytest.raises(TrefoilSyntaxError, match="unbalanced parentheses") as excinfo:
        parser.parse_program(source)
    assert excinfo.value.source == source

def test_extra_closing_parenthesis_raises(parser):
    with pytest.raises(TrefoilSyntaxError) as excinfo:
        parser.parse_program("(+ 1 2))")
    assert excinfo.value.source == "(+ 1 2))"

def test_string_literals_rejected(parser):
    with pytest.raises(TrefoilSyntaxError, match="String literals are not supported"):
        parser.parse_string('(f "hello")')

@pytest.mark.parametrize("source", ["'x", "(f '(1 2))"])
def test_quoted_expressions_rejected(parser, source):
    with pytest.raises(TrefoilSyntaxError, match="Unsupported syntax"):
        parser.parse_program(source)

def test_square_brackets_rejected(parser):
    with pytest.raises(TrefoilSyntaxError, match="Unsupported syntax"):
        parser.parse_program("(f [1 2])")

def test_dangling_quote_rejected(parser):
    with pytest.raises(TrefoilSyntaxError, match="Quoted expressions are not supported"):
        parser.parse_program("(f ')")

def test_syntax_error_is_value_error(parser):
    """TrefoilSyntaxError keeps ValueError compatibility."""
    with pytest.raises(ValueError):
        parser.parse_program("(")

def test_non_string_input_raises_type_error(parser):
    with pytest.raises(TypeError, match="Input must be a string"):
        parser.parse_program(None)

def test_parser_is_stateless():
    p = SexpParser()
    assert p.parse_string("(a)") == p.parse_string("(a)")
