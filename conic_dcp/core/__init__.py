"""Core abstractions: expression nodes, variables, registry and conic forms."""

from conic_dcp.core.errors import (
    ConicDCPError,
    InvalidShapeError,
    ShapeMismatchError,
    TypeConversionError,
    ValueNotSetError,
)
from conic_dcp.core.vexity import Sign, VarType, Vexity
from conic_dcp.core.expression import AbstractExpr
from conic_dcp.core.conic import (
    CONSTANT_KEY,
    ConicConstraint,
    ConicObjective,
    UniqueConicForms,
    conic_form,
)
from conic_dcp.core.context import Context, get_default_context, set_default_context
from conic_dcp.core.variable import (
    AbstractVariable,
    ComplexVariable,
    HermitianSemidefinite,
    Semidefinite,
    Variable,
)

__all__ = [
    'ConicDCPError',
    'InvalidShapeError',
    'ShapeMismatchError',
    'TypeConversionError',
    'ValueNotSetError',
    'Sign',
    'VarType',
    'Vexity',
    'AbstractExpr',
    'CONSTANT_KEY',
    'ConicConstraint',
    'ConicObjective',
    'UniqueConicForms',
    'conic_form',
    'Context',
    'get_default_context',
    'set_default_context',
    'AbstractVariable',
    'ComplexVariable',
    'HermitianSemidefinite',
    'Semidefinite',
    'Variable',
]
