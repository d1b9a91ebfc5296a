"""Constraints between expressions."""

from conic_dcp.constraints.base import Constraint
from conic_dcp.constraints.linear import EqConstraint, GtConstraint, LtConstraint
from conic_dcp.constraints.sdp import SDPConstraint

__all__ = [
    'Constraint',
    'EqConstraint',
    'GtConstraint',
    'LtConstraint',
    'SDPConstraint',
]
