"""
Literal constants in the expression DAG.
"""

import numbers
from typing import Optional, Tuple

import numpy as np

from conic_dcp.core.conic import ConicObjective, UniqueConicForms, conic_form_constant
from conic_dcp.core.errors import ShapeMismatchError, TypeConversionError
from conic_dcp.core.expression import AbstractExpr
from conic_dcp.core.vexity import Sign, Vexity, sign_of_value


class Constant(AbstractExpr):
    """
    A fixed numeric value.

    Numbers become (1, 1), 1-D arrays become (n, 1) columns and 2-D arrays
    keep their shape.

    Args:
        value: Number or array-like
        sign: Override the sign inferred from the value
    """

    def __init__(self, value, sign: Optional[Sign] = None):
        super().__init__()
        if isinstance(value, AbstractExpr):
            raise TypeError(f"Constant cannot wrap expression {value!r}")

        arr = np.asarray(value)
        if arr.dtype.kind not in 'biufc':
            raise TypeConversionError(f"Cannot build a constant from {value!r}")
        if arr.ndim == 0:
            arr = arr.reshape(1, 1)
        elif arr.ndim == 1:
            arr = arr.reshape(-1, 1)
        elif arr.ndim > 2:
            raise ShapeMismatchError(f"Constants must be at most 2-dimensional, got {arr.shape}")

        dtype = np.complex128 if np.iscomplexobj(arr) else np.float64
        self._value = np.array(arr, dtype=dtype)
        self._sign = sign if sign is not None else sign_of_value(self._value)

    @property
    def shape(self) -> Tuple[int, int]:
        return self._value.shape

    @property
    def vexity(self) -> Vexity:
        return Vexity.CONSTANT

    @property
    def sign(self) -> Sign:
        return self._sign

    def evaluate(self) -> np.ndarray:
        return self._value

    def conic_form(self, cache: UniqueConicForms) -> ConicObjective:
        return conic_form_constant(self, cache)


def as_expr(x) -> AbstractExpr:
    """Promote numbers and arrays to Constant; pass expressions through."""
    if isinstance(x, AbstractExpr):
        return x
    if isinstance(x, (numbers.Number, np.generic, np.ndarray, list, tuple)):
        return Constant(x)
    raise TypeError(f"Cannot use {type(x).__name__} as an expression")
