"""
Conic linear contributions and the per-pass conic-form cache.

A ConicObjective says how an expression's flattened (column-major) value
depends affinely on the decision variables:

    vec(expr) = sum over variables v of (R_v @ re(v) + I_v @ im(v)) + c

Each entry is keyed by a variable's id_hash and holds (R_v, I_v); I_v
already carries the imaginary unit, so it is zero for real variables. The
entry under CONSTANT_KEY holds the offset c as (re(c), im(c)) columns.
"""

from dataclasses import dataclass
import logging
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np
import scipy.sparse as sp

from conic_dcp.core.errors import ShapeMismatchError

logger = logging.getLogger(__name__)

# Expression ids start at 1, so 0 never collides with a variable
CONSTANT_KEY = 0

# Cone names understood by the problem-assembly layer
NONNEG = 'NonNeg'
ZERO = 'Zero'
SDP = 'SDP'
HERMITIAN_SDP = 'HermitianSDP'


def _as_sparse(part) -> sp.csc_matrix:
    if sp.issparse(part):
        return sp.csc_matrix(part)
    arr = np.asarray(part)
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    return sp.csc_matrix(arr)


class ConicObjective:
    """
    Sparse affine map from decision variables to an expression's entries.

    Entries are write-once; arithmetic returns new objectives.

    Example:
        obj = ConicObjective()
        obj[x.id_hash] = (sp.identity(n), sp.csc_matrix((n, n)))
        obj[CONSTANT_KEY] = (np.zeros(n), np.zeros(n))
    """

    def __init__(self, entries: Optional[Dict[int, Tuple]] = None):
        self._entries: Dict[int, Tuple[sp.csc_matrix, sp.csc_matrix]] = {}
        if entries:
            for key, parts in entries.items():
                self[key] = parts

    @property
    def rows(self) -> Optional[int]:
        """Length of the expression this objective describes (None if empty)"""
        for real, _ in self._entries.values():
            return real.shape[0]
        return None

    def __setitem__(self, key: int, parts: Tuple) -> None:
        if key in self._entries:
            raise KeyError(f"ConicObjective already has an entry for id {key}")

        real, imag = (_as_sparse(p) for p in parts)
        if real.shape != imag.shape:
            raise ShapeMismatchError(
                f"Real part {real.shape} and imaginary part {imag.shape} differ in shape"
            )
        rows = self.rows
        if rows is not None and real.shape[0] != rows:
            raise ShapeMismatchError(
                f"Entry for id {key} has {real.shape[0]} rows, expected {rows}"
            )
        self._entries[key] = (real, imag)

    def __getitem__(self, key: int) -> Tuple[sp.csc_matrix, sp.csc_matrix]:
        return self._entries[key]

    def __contains__(self, key: int) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self):
        return self._entries.keys()

    def items(self):
        return self._entries.items()

    def variable_ids(self) -> List[int]:
        """Ids of the variables this objective depends on"""
        return [k for k in self._entries if k != CONSTANT_KEY]

    def constant(self) -> np.ndarray:
        """Dense complex-or-real offset column as a flat array"""
        if CONSTANT_KEY not in self._entries:
            return np.zeros(self.rows or 0)
        real, imag = self._entries[CONSTANT_KEY]
        offset = real.toarray().ravel()
        if imag.nnz:
            offset = offset + 1j * imag.toarray().ravel()
        return offset

    # =========================================================================
    # Arithmetic
    # =========================================================================

    def __add__(self, other: 'ConicObjective') -> 'ConicObjective':
        if not isinstance(other, ConicObjective):
            return NotImplemented
        if self.rows is not None and other.rows is not None and self.rows != other.rows:
            raise ShapeMismatchError(
                f"Cannot add conic objectives with {self.rows} and {other.rows} rows"
            )

        result = ConicObjective()
        for key in list(self._entries) + [k for k in other._entries if k not in self._entries]:
            if key in self._entries and key in other._entries:
                real_a, imag_a = self._entries[key]
                real_b, imag_b = other._entries[key]
                result[key] = (real_a + real_b, imag_a + imag_b)
            elif key in self._entries:
                result[key] = self._entries[key]
            else:
                result[key] = other._entries[key]
        return result

    def __neg__(self) -> 'ConicObjective':
        return ConicObjective({key: (-real, -imag) for key, (real, imag) in self._entries.items()})

    def __sub__(self, other: 'ConicObjective') -> 'ConicObjective':
        if not isinstance(other, ConicObjective):
            return NotImplemented
        return self + (-other)

    def premultiply(self, matrix) -> 'ConicObjective':
        """
        Objective of M @ vec(expr) for a constant matrix M.

        Variable coefficients are multiplied directly. The constant offset is
        recombined as re + 1j*im first so a complex M splits correctly.
        """
        M = _as_sparse(matrix)
        rows = self.rows
        if rows is not None and M.shape[1] != rows:
            raise ShapeMismatchError(
                f"Cannot premultiply objective with {rows} rows by matrix of shape {M.shape}"
            )

        result = ConicObjective()
        for key, (real, imag) in self._entries.items():
            if key == CONSTANT_KEY and np.iscomplexobj(M.data):
                offset = M @ (real + 1j * imag)
                result[key] = (offset.real, offset.imag)
            else:
                result[key] = (M @ real, M @ imag)
        return result

    def __repr__(self) -> str:
        keys = ', '.join('constant' if k == CONSTANT_KEY else str(k) for k in self._entries)
        return f"ConicObjective(rows={self.rows}, keys=[{keys}])"


def constant_objective(value) -> ConicObjective:
    """Objective with a single constant entry holding vec(value)."""
    flat = np.asarray(value).ravel(order='F').reshape(-1, 1)
    return ConicObjective({CONSTANT_KEY: (np.real(flat), np.imag(flat))})


@dataclass
class ConicConstraint:
    """
    Lowered constraint: objective lies in cone.

    Attributes:
        objective: ConicObjective of the constrained expression
        cone: One of NONNEG, ZERO, SDP, HERMITIAN_SDP
        size: Number of rows of the objective
    """
    objective: ConicObjective
    cone: str
    size: int


class UniqueConicForms:
    """
    Memo table for one compilation pass.

    Maps node identity to its ConicObjective and collects the side
    constraints discovered during the walk, in discovery order. A fresh
    instance must be used after any fix()/free() between compilations.
    Not safe for concurrent mutation.
    """

    def __init__(self):
        self.exprs: Dict[int, ConicObjective] = {}
        self.constraints: Dict[int, ConicConstraint] = {}
        self.constraint_list: List[ConicConstraint] = []

    def has_conic_form(self, node) -> bool:
        return node.id_hash in self.exprs

    def get_conic_form(self, node) -> ConicObjective:
        return self.exprs[node.id_hash]

    def cache_conic_form(self, node, objective: ConicObjective) -> None:
        if node.id_hash in self.exprs:
            raise KeyError(f"Conic form for node {node.id_hash} already cached")
        logger.debug("caching conic form for %s", node)
        self.exprs[node.id_hash] = objective

    def has_constraint(self, constraint) -> bool:
        return constraint.id_hash in self.constraints

    def get_constraint(self, constraint) -> ConicConstraint:
        return self.constraints[constraint.id_hash]

    def add_constraint(self, constraint, conic_constraint: ConicConstraint) -> None:
        if constraint.id_hash in self.constraints:
            raise KeyError(f"Constraint {constraint.id_hash} already cached")
        self.constraints[constraint.id_hash] = conic_constraint
        self.constraint_list.append(conic_constraint)

    def __len__(self) -> int:
        return len(self.exprs)


def conic_form(node, cache: Optional[UniqueConicForms] = None) -> ConicObjective:
    """
    Compile an expression into its ConicObjective.

    Args:
        node: Any AbstractExpr
        cache: Pass-scoped cache; a fresh one is used if omitted

    Returns:
        The node's ConicObjective (the cached object on repeat calls)
    """
    if cache is None:
        cache = UniqueConicForms()
    return node.conic_form(cache)


def conic_form_constant(node, cache: UniqueConicForms) -> ConicObjective:
    """Memoized constant branch shared by every node with CONSTANT vexity."""
    if not cache.has_conic_form(node):
        cache.cache_conic_form(node, constant_objective(node.evaluate()))
    return cache.get_conic_form(node)
