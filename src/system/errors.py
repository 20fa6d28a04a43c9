"""
Error types raised by the Trefoil reader, AST builder and evaluator.
"""

class TrefoilError(Exception):
    """Base class for every error a Trefoil programmer can cause."""


class TrefoilSyntaxError(TrefoilError, ValueError):
    """
    Raised when source text or a symbol tree cannot be turned into an AST.
    Inherits from ValueError for general compatibility but provides specific context.
    """
    def __init__(self, message: str, source: str = "", error_details: str = ""):
        """
        Initializes the TrefoilSyntaxError.

        Args:
            message: A high-level error message.
            source: The source text (or rendered symbol tree) that caused the error.
            error_details: Specific details from the underlying reader, if available.
        """
        full_message = message
        if source:
            full_message += f"\nInput: '{source}'"
        if error_details:
            full_message += f"\nDetails: {error_details}"
        super().__init__(full_message)
        self.message = message
        self.source = source
        self.error_details = error_details


class TrefoilRuntimeError(TrefoilError):
    """
    Raised during evaluation when the program does something the language forbids:
    unbound names, operands of the wrong kind, arity mismatches on calls,
    duplicate parameters, failing tests.
    """
    def __init__(self, message: str, expression: str = "", error_details: str = ""):
        """
        Initializes the TrefoilRuntimeError.

        Args:
            message: A high-level error message describing the evaluation failure.
            expression: The rendered expression being evaluated when the error occurred.
            error_details: Specific details about the error.
        """
        full_message = message
        if expression:
            full_message += f"\nExpression: '{expression}'"
        if error_details:
            full_message += f"\nDetails: {error_details}"
        super().__init__(full_message)
        self.message = message
        self.expression = expression
        self.error_details = error_details


class InternalInterpreterError(Exception):
    """
    Raised when the evaluator meets an AST node it has no handler for.
    This is a defect in the interpreter, never a mistake in the Trefoil program.
    """
