"""Atom library: literal constants and affine atoms."""

from conic_dcp.atoms.constant import Constant, as_expr
from conic_dcp.atoms.kronecker import Kron, kron

__all__ = [
    'Constant',
    'Kron',
    'as_expr',
    'kron',
]
