"""
Builds typed Trefoil ASTs from symbol trees.

This is the syntax-checking pass: keyword forms are matched by name, their
arity and shape are validated, and anything that cannot be interpreted is
rejected with a TrefoilSyntaxError before evaluation ever starts.
"""

import logging
import re
from typing import Callable, Dict, List, Optional, Sequence

from src.sexp_parser.sexp_parser import SexpParser
from src.sexp_parser.symbol_tree import Leaf, Node, SymbolTree
from src.system.errors import TrefoilSyntaxError
from src.trefoil_ast.bindings import (
    Binding, FunctionBinding, TestBinding, TopLevelExpression, VariableBinding,
)
from src.trefoil_ast.expressions import (
    INT_MAX, INT_MIN,
    BooleanLiteral, Car, Cdr, Conditional, Cons, Equals, Expression, FindMax,
    FunctionCall, IntegerLiteral, IsCons, IsNil, Let, Minus, Nil, Plus, Times,
    VariableReference,
)

logger = logging.getLogger(__name__)

_INTEGER_TOKEN = re.compile(r"[+-]?[0-9]+")


class AstBuilder:
    """
    Converts symbol trees into Expression and Binding nodes.

    Keyword forms are dispatched through KEYWORD_BUILDERS; every builder
    receives the form's argument trees (head excluded) and the whole node for
    error messages.
    """

    def __init__(self) -> None:
        self.KEYWORD_BUILDERS: Dict[str, Callable[[List[SymbolTree], Node], Expression]] = {
            "+": self._binary(Plus),
            "-": self._binary(Minus),
            "*": self._binary(Times),
            "=": self._binary(Equals),
            "if": self._build_if,
            "let": self._build_let,
            "nil?": self._unary(IsNil),
            "cons": self._build_cons,
            "cons?": self._unary(IsCons),
            "car": self._unary(Car),
            "cdr": self._unary(Cdr),
            "max": self._build_max,
        }

    # --- Expressions ---

    def build_expression(self, tree: SymbolTree) -> Expression:
        """
        Converts a symbol tree into an Expression.

        Raises:
            TrefoilSyntaxError: If the tree is not a well-formed expression.
        """
        if isinstance(tree, Leaf):
            return self._build_atom(tree.token)
        if not isinstance(tree, Node):
            raise TrefoilSyntaxError(f"Not a symbol tree: {tree!r}")

        children = list(tree.children)
        if not children:
            raise TrefoilSyntaxError("Unexpected empty parentheses.", str(tree))

        head, args = children[0], children[1:]
        if isinstance(head, Leaf) and head.token in self.KEYWORD_BUILDERS:
            logger.debug(f"Building keyword form '{head.token}' with {len(args)} argument(s)")
            return self.KEYWORD_BUILDERS[head.token](args, tree)

        return self._build_call(head, args, tree)

    def _build_atom(self, token: str) -> Expression:
        integer = _parse_integer(token)
        if integer is not None:
            return IntegerLiteral(value=integer)
        if token == "true":
            return BooleanLiteral(value=True)
        if token == "false":
            return BooleanLiteral(value=False)
        if token == "nil":
            return Nil()
        return VariableReference(name=token)

    def _build_call(self, head: SymbolTree, args: List[SymbolTree], tree: Node) -> FunctionCall:
        if isinstance(head, Node):
            raise TrefoilSyntaxError(f"{head} should be a function but is not.", str(tree))
        callee = self._build_atom(head.token)
        if not isinstance(callee, VariableReference):
            raise TrefoilSyntaxError(f"{head} should be a function but is not.", str(tree))
        return FunctionCall(name=callee.name, args=tuple(self.build_expression(arg) for arg in args))

    def _binary(self, node_type):
        def build(args: List[SymbolTree], tree: Node) -> Expression:
            _expect_arity(tree, args, 2)
            return node_type(left=self.build_expression(args[0]), right=self.build_expression(args[1]))
        return build

    def _unary(self, node_type):
        def build(args: List[SymbolTree], tree: Node) -> Expression:
            _expect_arity(tree, args, 1)
            return node_type(expr=self.build_expression(args[0]))
        return build

    def _build_if(self, args: List[SymbolTree], tree: Node) -> Conditional:
        _expect_arity(tree, args, 3)
        condition, then_branch, else_branch = (self.build_expression(arg) for arg in args)
        return Conditional(condition=condition, then_branch=then_branch, else_branch=else_branch)

    def _build_cons(self, args: List[SymbolTree], tree: Node) -> Cons:
        _expect_arity(tree, args, 2)
        return Cons(head=self.build_expression(args[0]), tail=self.build_expression(args[1]))

    def _build_let(self, args: List[SymbolTree], tree: Node) -> Let:
        """(let ((name expr)) body)"""
        _expect_arity(tree, args, 2)
        bindings_tree, body_tree = args

        if not isinstance(bindings_tree, Node) or len(bindings_tree.children) != 1:
            raise TrefoilSyntaxError("'let' expects exactly one binding: (let ((name expr)) body)", str(tree))
        pair = bindings_tree.children[0]
        if not isinstance(pair, Node) or len(pair.children) != 2:
            raise TrefoilSyntaxError("'let' binding must have the form (name expr)", str(tree))
        name_tree, bound_tree = pair.children
        if not isinstance(name_tree, Leaf):
            raise TrefoilSyntaxError("'let' binding name must be a symbol", str(tree))

        return Let(
            local_name=name_tree.token,
            bound_expr=self.build_expression(bound_tree),
            body_expr=self.build_expression(body_tree),
        )

    def _build_max(self, args: List[SymbolTree], tree: Node) -> FindMax:
        if not args:
            raise TrefoilSyntaxError("Operator max expects at least 1 arguments", str(tree))
        return FindMax(args=tuple(self.build_expression(arg) for arg in args))

    # --- Bindings ---

    def build_binding(self, tree: SymbolTree) -> Binding:
        """
        Converts a symbol tree into a Binding: a define, a test, or a bare expression.

        Raises:
            TrefoilSyntaxError: If the tree is not a well-formed binding.
        """
        if isinstance(tree, Node) and tree.children and isinstance(tree.children[0], Leaf):
            keyword = tree.children[0].token
            args = list(tree.children[1:])
            if keyword == "define":
                return self._build_define(args, tree)
            if keyword == "test":
                _expect_arity(tree, args, 1)
                return TestBinding(expr=self.build_expression(args[0]))
        return TopLevelExpression(expr=self.build_expression(tree))

    def _build_define(self, args: List[SymbolTree], tree: Node) -> Binding:
        _expect_arity(tree, args, 2)
        target, body_tree = args

        if isinstance(target, Leaf):
            return VariableBinding(name=self._definable_name(target, tree), init_expr=self.build_expression(body_tree))

        if not target.children:
            raise TrefoilSyntaxError("Function definition needs a name: (define (name param...) body)", str(tree))
        name, *params = [self._definable_name(part, tree) for part in target.children]
        logger.debug(f"Building function binding '{name}' with params {params}")
        return FunctionBinding(name=name, param_names=tuple(params), body_expr=self.build_expression(body_tree))

    def _definable_name(self, tree: SymbolTree, define_tree: Node) -> str:
        """Names introduced by define must be plain symbols, not literals or keywords."""
        if isinstance(tree, Leaf) and isinstance(self._build_atom(tree.token), VariableReference):
            return tree.token
        raise TrefoilSyntaxError(f"Cannot define {tree}: expected a symbol", str(define_tree))


def _parse_integer(token: str) -> Optional[int]:
    """Returns the 32-bit integer a token spells, or None if it is not one."""
    if not _INTEGER_TOKEN.fullmatch(token):
        return None
    value = int(token)
    if value < INT_MIN or value > INT_MAX:
        return None
    return value


def _expect_arity(tree: Node, args: Sequence[SymbolTree], expected: int) -> None:
    if len(args) != expected:
        operator = tree.children[0]
        raise TrefoilSyntaxError(f"Operator {operator} expects {expected} arguments", str(tree))


# --- Module-level entry points ---

_default_builder = AstBuilder()
_default_parser = SexpParser()


def build_expression(tree: SymbolTree) -> Expression:
    return _default_builder.build_expression(tree)


def build_binding(tree: SymbolTree) -> Binding:
    return _default_builder.build_binding(tree)


def parse_expression_string(source: str) -> Expression:
    """Reads one expression from source text, e.g. parse_expression_string("(+ 1 2)")."""
    return build_expression(_default_parser.parse_string(source))


def parse_binding_string(source: str) -> Binding:
    """Reads one binding from source text."""
    return build_binding(_default_parser.parse_string(source))


def parse_program(source: str) -> List[Binding]:
    """Reads every top-level binding in source text, in order."""
    return [build_binding(tree) for tree in _default_parser.parse_program(source)]
