"""
Kronecker product of a constant with an expression.

kron(A, B) for a p x q constant A and an m x n expression B is the
(p*m) x (q*n) block matrix whose (i, j) block is A[i, j] * B. It is affine
in B, so its conic form is the child's objective premultiplied by the
sparse matrix K with vec(kron(A, B)) = K @ vec(B).
"""

from typing import Tuple

import numpy as np
import scipy.sparse as sp

from conic_dcp.atoms.constant import as_expr
from conic_dcp.core.conic import ConicObjective, UniqueConicForms, conic_form_constant
from conic_dcp.core.expression import AbstractExpr
from conic_dcp.core.vexity import Sign, Vexity, multiply_sign, not_dcp, scale_vexity


def kron_matrix(a, shape_b: Tuple[int, int]) -> sp.csc_matrix:
    """
    Sparse K such that vec(kron(a, B)) = K @ vec(B), column-major vec.

    Args:
        a: 2-D constant array of shape (p, q)
        shape_b: Shape (m, n) of B
    """
    A = np.atleast_2d(np.asarray(a))
    p, q = A.shape
    m, n = shape_b

    i, j = np.nonzero(A)
    k, l = np.meshgrid(np.arange(m), np.arange(n), indexing='ij')
    k = k.ravel()
    l = l.ravel()

    # Result entry (i*m + k, j*n + l) = A[i, j] * B[k, l]
    out_rows = i[:, None] * m + k[None, :]
    out_cols = j[:, None] * n + l[None, :]
    rows = (out_rows + out_cols * (p * m)).ravel()
    cols = np.broadcast_to(k + l * m, (len(i), m * n)).ravel()
    data = np.repeat(A[i, j], m * n)

    return sp.csc_matrix((data, (rows, cols)), shape=(p * m * q * n, m * n))


class Kron(AbstractExpr):
    """
    kron(a, b) with a constant left operand.

    Attributes:
        children: (a, b) expressions
    """

    def __init__(self, a: AbstractExpr, b: AbstractExpr):
        super().__init__()
        if a.vexity != Vexity.CONSTANT:
            raise TypeError("kron requires a constant left operand")
        self.children = (a, b)

    @property
    def shape(self) -> Tuple[int, int]:
        (p, q), (m, n) = (c.shape for c in self.children)
        return (p * m, q * n)

    @property
    def vexity(self) -> Vexity:
        a, b = self.children
        # a may have been freed since construction
        if a.vexity != Vexity.CONSTANT:
            return not_dcp("kron with a non-constant left operand")
        if b.vexity == Vexity.CONSTANT:
            return Vexity.CONSTANT
        return scale_vexity(b.vexity, a.sign)

    @property
    def sign(self) -> Sign:
        a, b = self.children
        return multiply_sign(a.sign, b.sign)

    def evaluate(self) -> np.ndarray:
        a, b = self.children
        return np.kron(np.atleast_2d(a.evaluate()), np.atleast_2d(b.evaluate()))

    def conic_form(self, cache: UniqueConicForms) -> ConicObjective:
        if cache.has_conic_form(self):
            return cache.get_conic_form(self)
        a, b = self.children
        if a.vexity != Vexity.CONSTANT:
            raise TypeError("kron requires a constant left operand")
        if b.vexity == Vexity.CONSTANT:
            return conic_form_constant(self, cache)

        child = b.conic_form(cache)
        # b's attached constraints may lead back here
        if cache.has_conic_form(self):
            return cache.get_conic_form(self)
        objective = child.premultiply(kron_matrix(a.evaluate(), b.shape))
        cache.cache_conic_form(self, objective)
        return objective


def kron(a, b) -> Kron:
    """
    Kronecker product of a constant (array, number or Constant) and an expression.

    Raises:
        TypeError: If a is not constant
    """
    return Kron(as_expr(a), as_expr(b))
