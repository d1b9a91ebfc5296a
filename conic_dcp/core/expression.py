"""
Base class for nodes of the expression DAG.

Every node, leaf or composite, exposes the same capability set the conic-form
compiler relies on: an integer identity, a shape, a curvature, a sign, the
side constraints it carries, and its numeric value.
"""

from abc import ABC, abstractmethod
import itertools
from typing import List, Tuple

from conic_dcp.core.errors import ValueNotSetError
from conic_dcp.core.vexity import Vexity, Sign

# Shared by expressions and constraints. 0 is reserved for CONSTANT_KEY.
_id_counter = itertools.count(1)


def new_id() -> int:
    """Allocate a process-unique integer identity."""
    return next(_id_counter)


class AbstractExpr(ABC):
    """
    Abstract base class for all expression nodes.

    Subclasses must implement:
        - shape: (rows, cols) tuple
        - vexity: curvature of the node
        - sign: value domain of the node
        - evaluate(): numeric value, or raise ValueNotSetError
        - conic_form(cache): memoized lowering into a ConicObjective

    Attributes:
        id_hash: Process-unique identity, used as cache and registry key
    """

    # Make numpy defer to our reflected comparison operators
    __array_ufunc__ = None

    def __init__(self):
        self.id_hash = new_id()

    @property
    @abstractmethod
    def shape(self) -> Tuple[int, int]:
        pass

    @property
    @abstractmethod
    def vexity(self) -> Vexity:
        pass

    @property
    @abstractmethod
    def sign(self) -> Sign:
        pass

    @abstractmethod
    def evaluate(self):
        """
        Compute the numeric value of this node.

        Raises:
            ValueNotSetError: If a leaf below this node has no value
        """
        pass

    @abstractmethod
    def conic_form(self, cache):
        """
        Lower this node into a ConicObjective, memoized in cache.

        Args:
            cache: UniqueConicForms shared by the whole compilation pass

        Returns:
            The cached ConicObjective for this node
        """
        pass

    @property
    def constraints(self) -> List:
        """Side constraints imposed whenever this node appears in a problem"""
        return []

    @property
    def value(self):
        """Numeric value, or None if it cannot be computed yet"""
        try:
            return self.evaluate()
        except ValueNotSetError:
            return None

    @property
    def length(self) -> int:
        rows, cols = self.shape
        return rows * cols

    def is_scalar(self) -> bool:
        return self.shape == (1, 1)

    # =========================================================================
    # Constraint construction
    # =========================================================================

    def __ge__(self, other):
        from conic_dcp.constraints.linear import GtConstraint
        return GtConstraint(self, other)

    def __le__(self, other):
        from conic_dcp.constraints.linear import LtConstraint
        return LtConstraint(self, other)

    def __eq__(self, other):
        from conic_dcp.constraints.linear import EqConstraint
        return EqConstraint(self, other)

    def __rshift__(self, other):
        """x >> y: x - y is positive semidefinite"""
        from conic_dcp.constraints.sdp import SDPConstraint
        return SDPConstraint(self, other)

    def __lshift__(self, other):
        """x << y: y - x is positive semidefinite"""
        from conic_dcp.constraints.sdp import SDPConstraint
        return SDPConstraint(other, self)

    def __rrshift__(self, other):
        from conic_dcp.constraints.sdp import SDPConstraint
        return SDPConstraint(other, self)

    def __rlshift__(self, other):
        from conic_dcp.constraints.sdp import SDPConstraint
        return SDPConstraint(self, other)

    # __eq__ builds constraints, so keep identity hashing
    __hash__ = object.__hash__

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(id={self.id_hash}, shape={self.shape}, "
                f"vexity={self.vexity.value}, sign={self.sign.value})")
