"""
Error types raised by the modeling layer.

All of these are programmer/input errors raised synchronously by the
operation that detected them. They subclass the builtin ValueError/TypeError
so callers catching those keep working.
"""


class ConicDCPError(Exception):
    """Base class for conic_dcp errors."""


class ShapeMismatchError(ConicDCPError, ValueError):
    """Value or operand shape disagrees with the expected shape."""


class ValueNotSetError(ConicDCPError, ValueError):
    """A variable was evaluated or fixed before any value was assigned."""


class InvalidShapeError(ConicDCPError, ValueError):
    """Requested shape is not allowed (e.g. non-square semidefinite)."""


class TypeConversionError(ConicDCPError, TypeError):
    """Value cannot be represented in the variable's element type."""
