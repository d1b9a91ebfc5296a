"""Disciplined convex modeling layer with a memoized conic-form compiler."""

from conic_dcp.core import (
    AbstractExpr,
    AbstractVariable,
    CONSTANT_KEY,
    ComplexVariable,
    ConicConstraint,
    ConicDCPError,
    ConicObjective,
    Context,
    HermitianSemidefinite,
    InvalidShapeError,
    Semidefinite,
    ShapeMismatchError,
    Sign,
    TypeConversionError,
    UniqueConicForms,
    ValueNotSetError,
    VarType,
    Variable,
    Vexity,
    conic_form,
    get_default_context,
    set_default_context,
)
from conic_dcp.atoms import Constant, Kron, kron
from conic_dcp.constraints import (
    Constraint, EqConstraint, GtConstraint, LtConstraint, SDPConstraint,
)

__version__ = '0.1.0'

__all__ = [
    'AbstractExpr',
    'AbstractVariable',
    'CONSTANT_KEY',
    'ComplexVariable',
    'ConicConstraint',
    'ConicDCPError',
    'ConicObjective',
    'Constant',
    'Constraint',
    'Context',
    'EqConstraint',
    'GtConstraint',
    'HermitianSemidefinite',
    'InvalidShapeError',
    'Kron',
    'LtConstraint',
    'SDPConstraint',
    'Semidefinite',
    'ShapeMismatchError',
    'Sign',
    'TypeConversionError',
    'UniqueConicForms',
    'ValueNotSetError',
    'VarType',
    'Variable',
    'Vexity',
    'conic_form',
    'get_default_context',
    'kron',
    'set_default_context',
]
