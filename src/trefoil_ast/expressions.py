"""
Trefoil expression AST.

Every node is an immutable pydantic model, so two trees compare equal exactly
when they have the same shape and the same leaves. Values produced by the
evaluator are expressions too, restricted to IntegerLiteral, BooleanLiteral,
Nil and Cons (whose parts are themselves values).

str() of any node renders it back in Trefoil surface syntax.
"""

from typing import ClassVar, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, conint


# Trefoil integers are signed 32-bit, wrapping on overflow.
INT_BITS = 32
INT_MIN = -(2 ** (INT_BITS - 1))
INT_MAX = 2 ** (INT_BITS - 1) - 1

TrefoilInt = conint(strict=True, ge=INT_MIN, le=INT_MAX)


class Expression(BaseModel):
    """Base class of every expression node. Never instantiated directly."""
    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        raise NotImplementedError(f"{type(self).__name__} does not define a rendering")


# --- Literals ---

class IntegerLiteral(Expression):
    value: TrefoilInt

    def __str__(self) -> str:
        return str(self.value)


class BooleanLiteral(Expression):
    value: StrictBool

    def __str__(self) -> str:
        return "true" if self.value else "false"


class Nil(Expression):
    def __str__(self) -> str:
        return "nil"


class VariableReference(Expression):
    name: StrictStr

    def __str__(self) -> str:
        return self.name


# --- Binary operators ---

class BinaryOperation(Expression):
    """Shared shape of the two-operand built-ins."""
    left: Expression
    right: Expression

    operator: ClassVar[str] = ""

    def __str__(self) -> str:
        return f"({self.operator} {self.left} {self.right})"


class Plus(BinaryOperation):
    operator: ClassVar[str] = "+"


class Minus(BinaryOperation):
    operator: ClassVar[str] = "-"


class Times(BinaryOperation):
    operator: ClassVar[str] = "*"


class Equals(BinaryOperation):
    operator: ClassVar[str] = "="


# --- Control and scoping ---

class Conditional(Expression):
    condition: Expression
    then_branch: Expression
    else_branch: Expression

    def __str__(self) -> str:
        return f"(if {self.condition} {self.then_branch} {self.else_branch})"


class Let(Expression):
    """(let ((local_name bound_expr)) body_expr)"""
    local_name: StrictStr
    bound_expr: Expression
    body_expr: Expression

    def __str__(self) -> str:
        return f"(let (({self.local_name} {self.bound_expr})) {self.body_expr})"


# --- Lists ---

class Cons(Expression):
    head: Expression
    tail: Expression

    def __str__(self) -> str:
        return f"(cons {self.head} {self.tail})"


class UnaryOperation(Expression):
    """Shared shape of the one-operand built-ins."""
    expr: Expression

    operator: ClassVar[str] = ""

    def __str__(self) -> str:
        return f"({self.operator} {self.expr})"


class IsNil(UnaryOperation):
    operator: ClassVar[str] = "nil?"


class IsCons(UnaryOperation):
    operator: ClassVar[str] = "cons?"


class Car(UnaryOperation):
    operator: ClassVar[str] = "car"


class Cdr(UnaryOperation):
    operator: ClassVar[str] = "cdr"


# --- Calls ---

class FunctionCall(Expression):
    name: StrictStr
    args: Tuple[Expression, ...] = ()

    def __str__(self) -> str:
        return "(" + " ".join([self.name] + [str(arg) for arg in self.args]) + ")"


class FindMax(Expression):
    args: Tuple[Expression, ...] = Field(min_length=1)

    def __str__(self) -> str:
        return "(max " + " ".join(str(arg) for arg in self.args) + ")"


# The closed set of concrete expression node types. The evaluator checks at
# construction time that it has a handler for each of these.
EXPRESSION_TYPES = (
    IntegerLiteral, BooleanLiteral, Nil, VariableReference,
    Plus, Minus, Times, Equals,
    Conditional, Let,
    Cons, IsNil, IsCons, Car, Cdr,
    FunctionCall, FindMax,
)

Value = Union[IntegerLiteral, BooleanLiteral, Nil, Cons]

VALUE_TYPES = (IntegerLiteral, BooleanLiteral, Nil, Cons)


def is_value(expr: Expression) -> bool:
    """
    True if expr is a value node: a literal, nil, or a cons.

    Only the outermost node is checked, in constant time. The evaluator builds
    a Cons from operands it has already evaluated, so its parts are values too.
    """
    return isinstance(expr, VALUE_TYPES)


# Convenience factories

def of_int(value: int) -> IntegerLiteral:
    return IntegerLiteral(value=value)


def of_bool(value: bool) -> BooleanLiteral:
    return BooleanLiteral(value=value)


def nil() -> Nil:
    return Nil()


def cons(head: Expression, tail: Expression) -> Cons:
    return Cons(head=head, tail=tail)


def list_of(*items: Expression) -> Expression:
    """Builds the cons list (cons a (cons b ... nil))."""
    result: Expression = Nil()
    for item in reversed(items):
        result = Cons(head=item, tail=result)
    return result
