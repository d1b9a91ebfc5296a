"""
Semidefinite ordering constraints: lhs - rhs is positive semidefinite.

Complex operands give a Hermitian semidefinite cone; turning either cone into
solver-native primitives is left to the problem-assembly layer.
"""

from conic_dcp.constraints.base import Constraint
from conic_dcp.core.conic import HERMITIAN_SDP, SDP, ConicConstraint, UniqueConicForms
from conic_dcp.core.errors import InvalidShapeError
from conic_dcp.core.vexity import Sign, Vexity, add_vexity, negate_vexity, not_dcp


class SDPConstraint(Constraint):
    """
    lhs >> rhs in the semidefinite order.

    Raises:
        InvalidShapeError: If the operands are not square
    """

    def __init__(self, lhs, rhs=0):
        super().__init__(lhs, rhs)
        rows, cols = self.shape
        if rows != cols:
            raise InvalidShapeError(
                f"Semidefinite constraints require a square operand, got {self.shape}"
            )

    @property
    def is_complex(self) -> bool:
        return Sign.COMPLEX in (self.lhs.sign, self.rhs.sign)

    @property
    def cone(self) -> str:
        return HERMITIAN_SDP if self.is_complex else SDP

    @property
    def vexity(self) -> Vexity:
        v = add_vexity(self.lhs.vexity, negate_vexity(self.rhs.vexity))
        if v not in (Vexity.AFFINE, Vexity.CONSTANT):
            return not_dcp(f"semidefinite constraint on a {v.value} expression")
        return v

    def lower(self, cache: UniqueConicForms) -> ConicConstraint:
        return ConicConstraint(self.difference(cache), self.cone, self.size)
