"""
Reads Trefoil source text into symbol trees using the 'sexpdata' library.
"""

import logging
from typing import Any, List

from sexpdata import Parser, Symbol, ExpectNothing, ExpectClosingBracket, ExpectSExp

from src.sexp_parser.symbol_tree import Leaf, Node, SymbolTree
from src.system.errors import TrefoilSyntaxError

logger = logging.getLogger(__name__)


class _TokenParser(Parser):
    """sexpdata parser that leaves every atom as a Symbol holding its exact token text."""

    def atom(self, token):
        # No int/float conversion: `1e3` or `007` must reach the AST builder unchanged.
        return Symbol(token)


class SexpParser:
    """
    Parses source strings into symbol trees (Leaf / Node).

    Uses the 'sexpdata' library for tokenizing and bracket matching, including
    ';' line comments. The keyword symbols 'nil', 'true' and 'false' are left
    as plain tokens: giving them meaning is the AST builder's job.
    """

    def parse_string(self, source: str) -> SymbolTree:
        """
        Parses exactly one tree from a string.

        Raises:
            TrefoilSyntaxError: If the input is empty, malformed, or holds more
                                than one top-level tree.
        """
        trees = self.parse_program(source)
        if not trees:
            raise TrefoilSyntaxError("Input is empty or contains only whitespace and comments.", source)
        if len(trees) > 1:
            raise TrefoilSyntaxError(
                "Unexpected content after the main expression.",
                source,
                error_details=f"Found {len(trees)} top-level forms",
            )
        return trees[0]

    def parse_program(self, source: str) -> List[SymbolTree]:
        """
        Parses every top-level tree in a string, in order. Empty input yields [].

        Raises:
            TrefoilSyntaxError: On unbalanced parentheses or unsupported atoms.
        """
        if not isinstance(source, str):
            raise TypeError("Input must be a string.")

        logger.debug(f"Attempting to parse Trefoil source: '{source[:100]}'")
        try:
            raw_forms = _TokenParser(source, line_comment=";").parse()
        except ExpectClosingBracket as e:
            logger.debug(f"Unbalanced parentheses: {e}")
            raise TrefoilSyntaxError("Syntax error: unbalanced parentheses.", source, error_details=str(e)) from e
        except ExpectNothing as e:
            logger.debug(f"Unexpected closing parenthesis: {e}")
            raise TrefoilSyntaxError("Syntax error: unexpected closing parenthesis.", source, error_details=str(e)) from e
        except ExpectSExp as e:
            logger.debug(f"Dangling quote: {e}")
            raise TrefoilSyntaxError("Quoted expressions are not supported.", source, error_details=str(e)) from e
        except (ValueError, AssertionError) as e:
            logger.debug(f"Reader failure: {e}")
            raise TrefoilSyntaxError(f"Syntax error: {e}", source, error_details=str(e)) from e

        trees = [self._to_tree(form, source) for form in raw_forms]
        logger.debug(f"Parsed {len(trees)} top-level tree(s)")
        return trees

    def _to_tree(self, raw: Any, source: str) -> SymbolTree:
        """Converts one sexpdata form into a symbol tree."""
        # Symbol subclasses str in sexpdata, so it must be checked first.
        if isinstance(raw, Symbol):
            return Leaf(raw.value())
        if isinstance(raw, list):
            return Node(tuple(self._to_tree(child, source) for child in raw))
        if isinstance(raw, str):
            raise TrefoilSyntaxError("String literals are not supported.", source, error_details=repr(raw))
        raise TrefoilSyntaxError(
            f"Unsupported syntax: {raw!r}",
            source,
            error_details=f"sexpdata produced {type(raw).__name__}",
        )
