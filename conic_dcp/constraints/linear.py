"""
Elementwise inequality and equality constraints.
"""

from conic_dcp.constraints.base import Constraint
from conic_dcp.core.conic import NONNEG, ZERO, ConicConstraint, UniqueConicForms
from conic_dcp.core.vexity import (
    Sign, Vexity, add_vexity, negate_vexity, not_dcp,
)


class _Inequality(Constraint):

    def __init__(self, lhs, rhs):
        super().__init__(lhs, rhs)
        if Sign.COMPLEX in (self.lhs.sign, self.rhs.sign):
            raise TypeError("Cannot create inequality constraint with complex arguments")

    def _gap_vexity(self, small, large) -> Vexity:
        # small <= large is convex when small - large is convex
        v = add_vexity(small.vexity, negate_vexity(large.vexity))
        if v == Vexity.CONCAVE:
            return not_dcp("inequality with a concave left side minus right side")
        return v


class GtConstraint(_Inequality):
    """lhs >= rhs elementwise; lowered to lhs - rhs in the nonnegative cone."""

    @property
    def vexity(self) -> Vexity:
        return self._gap_vexity(self.rhs, self.lhs)

    def lower(self, cache: UniqueConicForms) -> ConicConstraint:
        return ConicConstraint(self.difference(cache), NONNEG, self.size)


class LtConstraint(_Inequality):
    """lhs <= rhs elementwise; lowered to rhs - lhs in the nonnegative cone."""

    @property
    def vexity(self) -> Vexity:
        return self._gap_vexity(self.lhs, self.rhs)

    def lower(self, cache: UniqueConicForms) -> ConicConstraint:
        return ConicConstraint(-self.difference(cache), NONNEG, self.size)


class EqConstraint(Constraint):
    """lhs == rhs elementwise; lowered to lhs - rhs in the zero cone."""

    @property
    def vexity(self) -> Vexity:
        v = add_vexity(self.lhs.vexity, negate_vexity(self.rhs.vexity))
        if v in (Vexity.CONVEX, Vexity.CONCAVE):
            return not_dcp(f"equality between expressions with {v.value} difference")
        return v

    def lower(self, cache: UniqueConicForms) -> ConicConstraint:
        return ConicConstraint(self.difference(cache), ZERO, self.size)
