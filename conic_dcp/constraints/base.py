"""
Base class for constraints between expressions.

A constraint is lowered once per compilation pass into a ConicConstraint
("objective lies in cone") which is appended to the cache's side list.
"""

from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np

from conic_dcp.atoms.constant import Constant, as_expr
from conic_dcp.core.conic import ConicConstraint, ConicObjective, UniqueConicForms
from conic_dcp.core.errors import ShapeMismatchError
from conic_dcp.core.expression import AbstractExpr, new_id
from conic_dcp.core.vexity import Vexity


def broadcast_operands(lhs: AbstractExpr, rhs: AbstractExpr) -> Tuple[AbstractExpr, AbstractExpr]:
    """
    Expand a scalar constant operand to the other operand's shape.

    Raises:
        ShapeMismatchError: If shapes differ and neither side is a scalar constant
    """
    if lhs.shape == rhs.shape:
        return lhs, rhs
    if isinstance(rhs, Constant) and rhs.is_scalar():
        return lhs, Constant(np.full(lhs.shape, rhs.evaluate()[0, 0]), sign=rhs.sign)
    if isinstance(lhs, Constant) and lhs.is_scalar():
        return Constant(np.full(rhs.shape, lhs.evaluate()[0, 0]), sign=lhs.sign), rhs
    raise ShapeMismatchError(
        f"Cannot create constraint between expressions of size {lhs.shape} and {rhs.shape}"
    )


class Constraint(ABC):
    """
    Abstract base class for constraints.

    Subclasses must implement:
        - vexity: DCP verdict of the constraint
        - lower(cache): build the ConicConstraint from compiled operands

    Attributes:
        id_hash: Process-unique identity, used as cache key
        lhs, rhs: Operand expressions, broadcast to a common shape
    """

    def __init__(self, lhs, rhs):
        self.id_hash = new_id()
        self.lhs, self.rhs = broadcast_operands(as_expr(lhs), as_expr(rhs))

    @property
    def shape(self) -> Tuple[int, int]:
        return self.lhs.shape

    @property
    def size(self) -> int:
        return self.lhs.length

    @property
    @abstractmethod
    def vexity(self) -> Vexity:
        pass

    @abstractmethod
    def lower(self, cache: UniqueConicForms) -> ConicConstraint:
        pass

    def difference(self, cache: UniqueConicForms) -> ConicObjective:
        """Objective of lhs - rhs"""
        return self.lhs.conic_form(cache) - self.rhs.conic_form(cache)

    def conic_form(self, cache: UniqueConicForms) -> ConicConstraint:
        """
        Lower this constraint once per cache and record it in the side list.

        Returns:
            The cached ConicConstraint
        """
        if cache.has_constraint(self):
            return cache.get_constraint(self)

        conic_constraint = self.lower(cache)
        # Compiling the operands may already have reached this constraint
        # through a variable's attached constraints.
        if not cache.has_constraint(self):
            cache.add_constraint(self, conic_constraint)
        return cache.get_constraint(self)

    def __bool__(self):
        raise TypeError(
            f"{self.__class__.__name__} cannot be used as a truth value; "
            "compare expression ids with `is` instead"
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id_hash}, shape={self.shape})"
