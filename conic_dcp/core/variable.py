"""
Decision variables: the leaf case of the expression DAG.

A variable is affine until it is fix()'d to its current value, at which
point the compiler treats it exactly like a constant. free() turns it back
into a decision variable without discarding the stored value.
"""

import logging
import numbers
from typing import Callable, Iterable, List, Optional, Tuple, Union
import warnings

import numpy as np
import scipy.sparse as sp

from conic_dcp.core.conic import (
    CONSTANT_KEY, ConicObjective, UniqueConicForms, conic_form_constant,
)
from conic_dcp.core.context import Context, get_default_context
from conic_dcp.core.errors import (
    InvalidShapeError, ShapeMismatchError, TypeConversionError, ValueNotSetError,
)
from conic_dcp.core.expression import AbstractExpr
from conic_dcp.core.vexity import Sign, VarType, Vexity

logger = logging.getLogger(__name__)

ShapeLike = Union[int, Tuple[int, int], None]
ConstraintBuilder = Callable[['AbstractVariable'], object]

_LEGACY_SETS = ('Bin', 'Int', 'Semidefinite')


def normalize_shape(shape: ShapeLike) -> Tuple[int, int]:
    """
    Turn a constructor shape argument into a (rows, cols) tuple.

    None -> (1, 1); n -> (n, 1); (m, n) -> (m, n).

    Raises:
        InvalidShapeError: For non-positive or non-2D shapes
    """
    if shape is None:
        return (1, 1)
    if isinstance(shape, numbers.Integral):
        shape = (int(shape), 1)
    shape = tuple(int(d) for d in shape)
    if len(shape) != 2:
        raise InvalidShapeError(f"Variables must be 2-dimensional, got shape {shape}")
    if shape[0] <= 0 or shape[1] <= 0:
        raise InvalidShapeError(f"Variable dimensions must be positive, got {shape}")
    return shape


class AbstractVariable(AbstractExpr):
    """
    Base class for decision variables.

    Subclasses store id_hash, _shape, _value, _vexity, _sign, _vartype and
    _constraints, or override the accessors below. When constructed, a
    variable should register itself in its Context.
    """

    @property
    def shape(self) -> Tuple[int, int]:
        return self._shape

    @property
    def vexity(self) -> Vexity:
        """AFFINE, or CONSTANT while the variable is fixed"""
        return self._vexity

    @property
    def sign(self) -> Sign:
        return self._sign

    @sign.setter
    def sign(self, sign: Sign) -> None:
        self._sign = sign

    @property
    def vartype(self) -> VarType:
        return self._vartype

    @vartype.setter
    def vartype(self, vartype: VarType) -> None:
        self._vartype = vartype

    @property
    def constraints(self) -> List:
        return self._constraints

    @constraints.setter
    def constraints(self, constraints: List) -> None:
        self._constraints = list(constraints)

    @property
    def dtype(self):
        """Element type of stored values"""
        return np.complex128 if self.sign == Sign.COMPLEX else np.float64

    def is_fixed(self) -> bool:
        return self._vexity == Vexity.CONSTANT

    # =========================================================================
    # Values
    # =========================================================================

    @property
    def value(self):
        """Stored value, or None if unset"""
        return self._value

    @value.setter
    def value(self, v) -> None:
        self.set_value(v)

    def set_value(self, v) -> None:
        """
        Assign a value, converting it to this variable's element type.

        A number is accepted for a (1, 1) variable; a 1-D sequence is
        accepted for a column vector of the same length.

        Raises:
            ShapeMismatchError: If the value shape disagrees with shape
            TypeConversionError: If the value cannot be represented in dtype
        """
        if isinstance(v, numbers.Number) or np.ndim(v) == 0:
            if self.shape != (1, 1):
                raise ShapeMismatchError(
                    f"Cannot set value of a variable of size {self.shape} to a scalar"
                )
            self._value = self._convert(v)[()]
            return

        arr = np.asarray(v)
        if arr.ndim == 1:
            if self.shape[1] != 1:
                raise ShapeMismatchError(
                    f"Cannot set value of a variable of size {self.shape} to a vector"
                )
            if self.shape[0] != arr.shape[0]:
                raise ShapeMismatchError(
                    f"Variable size {self.shape} and value length {arr.shape[0]} do not match"
                )
            arr = arr.reshape(self.shape)
        elif arr.shape != self.shape:
            raise ShapeMismatchError(
                f"Variable size {self.shape} and value size {arr.shape} do not match"
            )

        self._value = self._convert(arr)

    def _convert(self, v) -> np.ndarray:
        try:
            arr = np.asarray(v)
            if arr.dtype == object or arr.dtype.kind not in 'biufc':
                raise TypeError(f"non-numeric dtype {arr.dtype}")
        except (TypeError, ValueError) as e:
            raise TypeConversionError(f"Cannot convert {v!r} to a numeric value") from e

        if np.iscomplexobj(arr) and self.sign != Sign.COMPLEX:
            if np.any(np.imag(arr) != 0):
                raise TypeConversionError(
                    f"Cannot assign a complex value to a real variable (sign {self.sign.value})"
                )
            arr = np.real(arr)
        return np.array(arr, dtype=self.dtype)

    def evaluate(self):
        """
        Get the stored value.

        Raises:
            ValueNotSetError: If no value has been assigned
        """
        if self._value is None:
            raise ValueNotSetError("Value of the variable is yet to be calculated")
        return self._value

    # =========================================================================
    # Fixing
    # =========================================================================

    _UNSET = object()

    def fix(self, v=_UNSET) -> 'AbstractVariable':
        """
        Hold the variable at a value so it is treated as a constant.

        Args:
            v: Optional value to assign first

        Raises:
            ValueNotSetError: If no value is given and none is stored
        """
        if v is not AbstractVariable._UNSET:
            self.set_value(v)
        if self._value is None:
            raise ValueNotSetError("This variable has no value yet; cannot fix value to nothing!")
        self._vexity = Vexity.CONSTANT
        return self

    def free(self) -> 'AbstractVariable':
        """Turn a fixed variable back into a decision variable"""
        self._vexity = Vexity.AFFINE
        return self

    # =========================================================================
    # Conic form
    # =========================================================================

    def real_conic_form(self) -> sp.csc_matrix:
        return sp.identity(self.length, dtype=np.float64, format='csc')

    def imag_conic_form(self) -> sp.csc_matrix:
        n = self.length
        if self.sign == Sign.COMPLEX:
            return 1j * sp.identity(n, dtype=np.complex128, format='csc')
        return sp.csc_matrix((n, n), dtype=np.float64)

    def conic_form(self, cache: UniqueConicForms) -> ConicObjective:
        if cache.has_conic_form(self):
            return cache.get_conic_form(self)

        if self.vexity == Vexity.CONSTANT:
            return conic_form_constant(self, cache)

        n = self.length
        objective = ConicObjective()
        objective[self.id_hash] = (self.real_conic_form(), self.imag_conic_form())
        objective[CONSTANT_KEY] = (sp.csc_matrix((n, 1)), sp.csc_matrix((n, 1)))
        # Cache before compiling anything that may refer back to this variable
        cache.cache_conic_form(self, objective)

        if self.sign in (Sign.POSITIVE, Sign.NEGATIVE):
            logger.debug("compiling %s sign constraint for variable %s",
                         self.sign.value, self.id_hash)
            sign_constraint(self).conic_form(cache)

        for constraint in self.constraints:
            logger.debug("compiling attached constraint %s of variable %s",
                         constraint.id_hash, self.id_hash)
            constraint.conic_form(cache)

        return cache.get_conic_form(self)


def sign_constraint(x: AbstractVariable):
    """x >= 0 for POSITIVE variables, x <= 0 for NEGATIVE ones."""
    from conic_dcp.constraints.linear import GtConstraint, LtConstraint
    if x.sign == Sign.POSITIVE:
        return GtConstraint(x, 0)
    if x.sign == Sign.NEGATIVE:
        return LtConstraint(x, 0)
    raise ValueError(f"Sign {x.sign.value} does not imply a constraint")


class Variable(AbstractVariable):
    """
    A decision variable.

    Args:
        shape: None for a scalar, n for an n x 1 column, or (m, n)
        sign: Sign of the variable (default NO_SIGN)
        constraints: Builders called with the new variable; each returns a
            constraint attached to it (e.g. ``lambda x: x >> 0``)
        vartype: CONTINUOUS, INTEGER or BINARY
        context: Registry to add the variable to (default context if None)
        sets: Deprecated; iterable of 'Bin', 'Int', 'Semidefinite'

    Example:
        x = Variable(3, Sign.POSITIVE)
        X = Variable((2, 2), constraints=[lambda X: X >> 0])
    """

    def __init__(self,
                 shape: ShapeLike = None,
                 sign: Sign = Sign.NO_SIGN,
                 constraints: Iterable[ConstraintBuilder] = (),
                 vartype: VarType = VarType.CONTINUOUS,
                 context: Optional[Context] = None,
                 sets: Optional[Iterable[str]] = None):
        super().__init__()
        builders = list(constraints)

        if sets is not None:
            warnings.warn(
                "The `sets` argument is deprecated; use `vartype` and constraint builders",
                DeprecationWarning,
                stacklevel=2,
            )
            if vartype != VarType.CONTINUOUS:
                raise ValueError("Pass either `sets` or `vartype`, not both")
            vartype, extra = _parse_legacy_sets(sets)
            builders.extend(extra)

        self._shape = normalize_shape(shape)
        self._value = None
        self._vexity = Vexity.AFFINE
        self._sign = sign
        self._vartype = vartype
        self._constraints: List = []
        self.context = context if context is not None else get_default_context()

        self.context.register(self)

        for builder in builders:
            self._constraints.append(builder(self))


def _parse_legacy_sets(sets: Iterable[str]) -> Tuple[VarType, List[ConstraintBuilder]]:
    sets = list(sets)
    unknown = [s for s in sets if s not in _LEGACY_SETS]
    if unknown:
        raise ValueError(f"Unknown variable sets {unknown}; expected any of {_LEGACY_SETS}")

    if 'Bin' in sets:
        vartype = VarType.BINARY
    elif 'Int' in sets:
        vartype = VarType.INTEGER
    else:
        vartype = VarType.CONTINUOUS

    builders = [_psd_builder] if 'Semidefinite' in sets else []
    return vartype, builders


def _psd_builder(x: AbstractVariable):
    return x >> 0


def ComplexVariable(shape: ShapeLike = None,
                    constraints: Iterable[ConstraintBuilder] = (),
                    **kwargs) -> Variable:
    """Variable with COMPLEX sign; values are stored as complex128."""
    return Variable(shape, Sign.COMPLEX, constraints, **kwargs)


def _square(m: int, n: Optional[int], name: str) -> Tuple[int, int]:
    if n is None:
        n = m
    if m != n:
        raise InvalidShapeError(f"{name} matrices must be square, got ({m}, {n})")
    return (m, m)


def Semidefinite(m: int, n: Optional[int] = None, **kwargs) -> Variable:
    """
    Real m x m variable constrained to be positive semidefinite.

    Raises:
        InvalidShapeError: If n is given and differs from m
    """
    return Variable(_square(m, n, 'Semidefinite'), constraints=[_psd_builder], **kwargs)


def HermitianSemidefinite(m: int, n: Optional[int] = None, **kwargs) -> Variable:
    """
    Complex m x m variable constrained to be Hermitian positive semidefinite.

    Raises:
        InvalidShapeError: If n is given and differs from m
    """
    return ComplexVariable(_square(m, n, 'HermitianSemidefinite'),
                           constraints=[_psd_builder], **kwargs)
