"""Unit tests for the memoized conic-form compiler."""

import pytest
import numpy as np
import scipy.sparse as sp
from conic_dcp.atoms.constant import Constant
from conic_dcp.core.conic import (
    CONSTANT_KEY, NONNEG, ConicObjective, UniqueConicForms, conic_form,
)
from conic_dcp.core.errors import ShapeMismatchError, ValueNotSetError
from conic_dcp.core.variable import ComplexVariable, Variable
from conic_dcp.core.vexity import Sign, Vexity


def dense(part):
    return part.toarray()


class TestFreeVariable:
    """Conic form of a free (affine) variable"""

    def test_identity_contribution(self):
        x = Variable((2, 3))
        obj = conic_form(x)

        real, imag = obj[x.id_hash]
        np.testing.assert_array_equal(dense(real), np.eye(6))
        np.testing.assert_array_equal(dense(imag), np.zeros((6, 6)))

    def test_zero_constant_offset(self):
        x = Variable(4)
        obj = conic_form(x)

        real, imag = obj[CONSTANT_KEY]
        assert real.shape == (4, 1)
        assert real.nnz == 0
        assert imag.nnz == 0
        assert set(obj.keys()) == {x.id_hash, CONSTANT_KEY}

    def test_complex_imaginary_part(self):
        z = ComplexVariable(3)
        real, imag = conic_form(z)[z.id_hash]

        np.testing.assert_array_equal(dense(real), np.eye(3))
        np.testing.assert_array_equal(dense(imag), 1j * np.eye(3))

    def test_unsigned_variable_adds_no_constraints(self):
        x = Variable(2)
        cache = UniqueConicForms()
        conic_form(x, cache)
        assert cache.constraint_list == []

    @pytest.mark.parametrize('sign', [Sign.POSITIVE, Sign.NEGATIVE])
    def test_sign_constraint(self, sign):
        """Signed variables add a nonnegative-cone side constraint"""
        x = Variable(3, sign)
        cache = UniqueConicForms()
        obj = conic_form(x, cache)

        assert len(cache.constraint_list) == 1
        cc = cache.constraint_list[0]
        assert cc.cone == NONNEG
        assert cc.size == 3

        expected = np.eye(3) if sign == Sign.POSITIVE else -np.eye(3)
        np.testing.assert_array_equal(dense(cc.objective[x.id_hash][0]), expected)
        # side constraints never alter the returned objective
        assert set(obj.keys()) == {x.id_hash, CONSTANT_KEY}

    def test_complex_sign_adds_no_constraint(self):
        z = ComplexVariable(2)
        cache = UniqueConicForms()
        conic_form(z, cache)
        assert cache.constraint_list == []

    def test_attached_constraints_compiled(self):
        x = Variable(2, constraints=[lambda v: v <= 5, lambda v: v == 1])
        cache = UniqueConicForms()
        conic_form(x, cache)

        assert [cc.cone for cc in cache.constraint_list] == ['NonNeg', 'Zero']
        np.testing.assert_allclose(cache.constraint_list[0].objective.constant(), [5.0, 5.0])


class TestConstantBranch:
    """Fixed variables and literal constants"""

    def test_fixed_scalar(self):
        x = Variable(sign=Sign.POSITIVE)
        x.fix(5.0)
        cache = UniqueConicForms()
        obj = conic_form(x, cache)

        assert list(obj.keys()) == [CONSTANT_KEY]
        np.testing.assert_array_equal(dense(obj[CONSTANT_KEY][0]), [[5.0]])
        # constant branch does not impose the sign constraint
        assert cache.constraint_list == []

    def test_fixed_matrix_is_column_major(self):
        X = Variable((2, 2))
        X.fix(np.array([[1.0, 2.0], [3.0, 4.0]]))
        real, imag = conic_form(X)[CONSTANT_KEY]

        np.testing.assert_array_equal(real.toarray().ravel(), [1.0, 3.0, 2.0, 4.0])
        assert imag.nnz == 0

    def test_complex_constant_split(self):
        c = Constant(np.array([1 + 2j, 3 - 1j]))
        real, imag = conic_form(c)[CONSTANT_KEY]

        np.testing.assert_array_equal(real.toarray().ravel(), [1.0, 3.0])
        np.testing.assert_array_equal(imag.toarray().ravel(), [2.0, -1.0])


class TestMemoization:

    def test_same_node_returns_cached_object(self):
        x = Variable(3)
        cache = UniqueConicForms()

        first = conic_form(x, cache)
        second = conic_form(x, cache)
        assert first is second
        assert len(cache) == 1

    def test_distinct_nodes_get_distinct_entries(self):
        x = Variable(3)
        y = Variable(3)
        cache = UniqueConicForms()

        obj_x = conic_form(x, cache)
        obj_y = conic_form(y, cache)
        assert obj_x is not obj_y
        assert len(cache) == 2

    def test_signed_variable_constraint_added_once(self):
        x = Variable(2, Sign.POSITIVE)
        cache = UniqueConicForms()
        conic_form(x, cache)
        conic_form(x, cache)
        assert len(cache.constraint_list) == 1

    def test_self_referential_constraint_terminates(self):
        """An attached constraint that refers back to its variable compiles once"""
        x = Variable(2, constraints=[lambda v: v >= 0, lambda v: v <= 1])
        cache = UniqueConicForms()
        obj = conic_form(x, cache)

        assert cache.get_conic_form(x) is obj
        assert len(cache.constraint_list) == 2

    def test_compiling_attached_constraint_directly(self):
        """Entering through the constraint still records it exactly once"""
        x = Variable(2, constraints=[lambda v: v >= 0])
        cache = UniqueConicForms()

        cc = x.constraints[0].conic_form(cache)
        assert cache.constraint_list == [cc]

    def test_stale_cache_after_fix(self):
        """A cache keeps the objective from before fix(); a fresh cache sees the change"""
        x = Variable()
        cache = UniqueConicForms()
        affine = conic_form(x, cache)

        x.fix(2.0)
        assert conic_form(x, cache) is affine
        assert list(conic_form(x, UniqueConicForms()).keys()) == [CONSTANT_KEY]

        x.free()
        assert x.id_hash in conic_form(x, UniqueConicForms())

    def test_unset_constant_fails(self):
        x = Variable()
        x._vexity = Vexity.CONSTANT
        with pytest.raises(ValueNotSetError):
            conic_form(x)


class TestConicObjective:

    def test_entries_are_write_once(self):
        obj = ConicObjective()
        obj[CONSTANT_KEY] = (np.zeros(2), np.zeros(2))
        with pytest.raises(KeyError, match="already has an entry"):
            obj[CONSTANT_KEY] = (np.ones(2), np.zeros(2))

    def test_row_mismatch(self):
        obj = ConicObjective()
        obj[CONSTANT_KEY] = (np.zeros(2), np.zeros(2))
        with pytest.raises(ShapeMismatchError):
            obj[1] = (sp.identity(3), sp.identity(3))

    def test_add_and_subtract(self):
        x = Variable(2)
        c = Constant([1.0, 2.0])
        cache = UniqueConicForms()

        diff = conic_form(x, cache) - conic_form(c, cache)
        np.testing.assert_array_equal(dense(diff[x.id_hash][0]), np.eye(2))
        np.testing.assert_array_equal(diff.constant(), [-1.0, -2.0])

        total = conic_form(x, cache) + conic_form(x, cache)
        np.testing.assert_array_equal(dense(total[x.id_hash][0]), 2 * np.eye(2))

    def test_premultiply_complex_constant(self):
        c = Constant([1.0, 1j])
        obj = conic_form(c).premultiply(np.array([[1j, 1.0]]))

        np.testing.assert_allclose(obj.constant(), [2j])
