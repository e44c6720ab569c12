"""Exceptions raised by the amortization engine.

Both concrete errors also derive from the matching built-in exception so that
callers which only know about ``ValueError`` or ``ArithmeticError`` keep
working.
"""


class AmortizationError(Exception):
    """Base class for all engine errors."""


class InvalidInput(AmortizationError, ValueError):
    """Loan parameters are malformed or out of range."""


class NumericOverflow(AmortizationError, ArithmeticError):
    """Inputs are too large for the decimal context used by the engine."""
