"""
Curvature, sign and variable-type model.

These are plain value types. Expression nodes store them; the composition
predicates below tell composite atoms what curvature and sign their result
has, following the disciplined convex programming (DCP) rules.
"""

from enum import Enum
import warnings

import numpy as np


class Vexity(Enum):
    """
    Curvature of an expression.

    NOT_DCP is not a curvature class: it is the verdict returned when a
    composition cannot be certified convex or concave.
    """
    CONSTANT = 'constant'
    AFFINE = 'affine'
    CONVEX = 'convex'
    CONCAVE = 'concave'
    NOT_DCP = 'not_dcp'

    def __repr__(self) -> str:
        return f"Vexity.{self.name}"


class Sign(Enum):
    """Value domain of an expression."""
    POSITIVE = 'positive'
    NEGATIVE = 'negative'
    NO_SIGN = 'no_sign'
    COMPLEX = 'complex'

    def __repr__(self) -> str:
        return f"Sign.{self.name}"


class VarType(Enum):
    """Whether a variable is continuous, integer-valued or binary."""
    CONTINUOUS = 'continuous'
    INTEGER = 'integer'
    BINARY = 'binary'

    def __repr__(self) -> str:
        return f"VarType.{self.name}"


def not_dcp(reason: str) -> Vexity:
    """Emit a DCP warning and return the NOT_DCP verdict."""
    warnings.warn(f"Expression not DCP compliant: {reason}", stacklevel=3)
    return Vexity.NOT_DCP


# =========================================================================
# Curvature composition
# =========================================================================

def negate_vexity(v: Vexity) -> Vexity:
    """Curvature of -x given the curvature of x."""
    if v == Vexity.CONVEX:
        return Vexity.CONCAVE
    if v == Vexity.CONCAVE:
        return Vexity.CONVEX
    return v


def add_vexity(a: Vexity, b: Vexity) -> Vexity:
    """
    Curvature of x + y.

    CONSTANT is the identity; AFFINE defers to the other operand; equal
    curvatures are preserved; CONVEX + CONCAVE cannot be certified.
    """
    if a == Vexity.NOT_DCP or b == Vexity.NOT_DCP:
        return Vexity.NOT_DCP
    if a == Vexity.CONSTANT:
        return b
    if b == Vexity.CONSTANT:
        return a
    if a == Vexity.AFFINE:
        return b
    if b == Vexity.AFFINE:
        return a
    if a == b:
        return a
    return not_dcp(f"sum of {a.value} and {b.value} expressions")


def scale_vexity(v: Vexity, sign: Sign) -> Vexity:
    """Curvature of c * x for a constant c with the given sign."""
    if v in (Vexity.CONSTANT, Vexity.AFFINE, Vexity.NOT_DCP):
        return v
    if sign == Sign.POSITIVE:
        return v
    if sign == Sign.NEGATIVE:
        return negate_vexity(v)
    return not_dcp(f"{v.value} expression scaled by a constant of sign {sign.value}")


# =========================================================================
# Sign composition
# =========================================================================

def multiply_sign(a: Sign, b: Sign) -> Sign:
    """Sign of x * y."""
    if a == Sign.COMPLEX or b == Sign.COMPLEX:
        return Sign.COMPLEX
    if a == Sign.NO_SIGN or b == Sign.NO_SIGN:
        return Sign.NO_SIGN
    if a == b:
        return Sign.POSITIVE
    return Sign.NEGATIVE


def sign_of_value(value) -> Sign:
    """
    Infer the sign of a numeric value.

    Complex dtype gives COMPLEX even when the imaginary part is zero; all
    entries >= 0 gives POSITIVE, all <= 0 gives NEGATIVE.
    """
    arr = np.asarray(value)
    if np.iscomplexobj(arr):
        return Sign.COMPLEX
    if np.all(arr >= 0):
        return Sign.POSITIVE
    if np.all(arr <= 0):
        return Sign.NEGATIVE
    return Sign.NO_SIGN
