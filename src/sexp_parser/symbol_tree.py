"""
The generic parenthesized symbol tree consumed by the AST builder.

A tree is either a Leaf holding one token, or a Node holding an ordered
sequence of child trees. Trees carry no meaning of their own; the AST
builder decides what a given shape stands for.
"""

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class Leaf:
    """A single token, e.g. `42`, `x` or `nil?`."""
    token: str

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True)
class Node:
    """A parenthesized list of child trees."""
    children: Tuple["SymbolTree", ...] = ()

    def __str__(self) -> str:
        return "(" + " ".join(str(child) for child in self.children) + ")"


SymbolTree = Union[Leaf, Node]


def leaf(token: str) -> Leaf:
    return Leaf(token)


def node(*children: SymbolTree) -> Node:
    """Builds a Node from positional children, e.g. node(leaf("+"), leaf("1"), leaf("2"))."""
    return Node(tuple(children))
