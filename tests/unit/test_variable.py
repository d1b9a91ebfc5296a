"""Unit tests for Variable lifecycle: construction, values, fix/free."""

import pytest
import numpy as np
from conic_dcp.core.context import Context
from conic_dcp.core.errors import (
    InvalidShapeError, ShapeMismatchError, TypeConversionError, ValueNotSetError,
)
from conic_dcp.core.variable import (
    ComplexVariable, HermitianSemidefinite, Semidefinite, Variable,
)
from conic_dcp.core.vexity import Sign, VarType, Vexity
from conic_dcp.constraints.sdp import SDPConstraint


class TestVariableCreation:
    """Test Variable construction"""

    def test_scalar_defaults(self):
        """Default variable is a continuous, unsigned, affine scalar"""
        x = Variable()

        assert x.shape == (1, 1)
        assert x.length == 1
        assert x.value is None
        assert x.vexity == Vexity.AFFINE
        assert x.sign == Sign.NO_SIGN
        assert x.vartype == VarType.CONTINUOUS
        assert x.constraints == []

    def test_int_shape_is_column(self):
        x = Variable(4)
        assert x.shape == (4, 1)

    def test_tuple_shape(self):
        x = Variable((2, 3))
        assert x.shape == (2, 3)
        assert x.length == 6

    def test_invalid_shape(self):
        with pytest.raises(InvalidShapeError, match="must be positive"):
            Variable((0, 3))

        with pytest.raises(InvalidShapeError, match="2-dimensional"):
            Variable((2, 2, 2))

    def test_unique_ids(self):
        """Each variable gets its own identity"""
        ids = {Variable().id_hash for _ in range(50)}
        assert len(ids) == 50

    def test_registered_in_context(self):
        """Construction registers the variable in the given context"""
        ctx = Context('test')
        x = Variable(2, context=ctx)

        assert x.id_hash in ctx
        assert ctx.lookup(x.id_hash) is x
        assert x.context is ctx

    def test_constraint_builders_called_with_variable(self):
        """Builders receive the new variable after its id and shape are set"""
        seen = []

        def builder(var):
            seen.append((var.id_hash, var.shape))
            return var >= 0

        x = Variable(3, constraints=[builder, builder])

        assert seen == [(x.id_hash, (3, 1))] * 2
        assert len(x.constraints) == 2
        assert all(c.lhs is x for c in x.constraints)

    def test_vartype(self):
        assert Variable(vartype=VarType.INTEGER).vartype == VarType.INTEGER
        assert Variable(vartype=VarType.BINARY).vartype == VarType.BINARY

    def test_sign_accessor(self):
        x = Variable(sign=Sign.POSITIVE)
        assert x.sign == Sign.POSITIVE

        x.sign = Sign.NEGATIVE
        assert x.sign == Sign.NEGATIVE

    def test_complex_variable(self):
        z = ComplexVariable((2, 2))
        assert z.sign == Sign.COMPLEX
        assert z.dtype == np.complex128


class TestLegacySets:
    """Test the deprecated `sets` argument"""

    def test_bin_wins_over_int(self):
        with pytest.warns(DeprecationWarning):
            x = Variable(2, sets=['Int', 'Bin'])
        assert x.vartype == VarType.BINARY

    def test_int(self):
        with pytest.warns(DeprecationWarning):
            x = Variable(sets=['Int'])
        assert x.vartype == VarType.INTEGER

    def test_semidefinite_set_attaches_constraint(self):
        with pytest.warns(DeprecationWarning):
            X = Variable((2, 2), sets=['Semidefinite'])
        assert len(X.constraints) == 1
        assert isinstance(X.constraints[0], SDPConstraint)

    def test_unknown_set(self):
        with pytest.warns(DeprecationWarning):
            with pytest.raises(ValueError, match="Unknown variable sets"):
                Variable(sets=['Cone'])

    def test_sets_and_vartype_conflict(self):
        with pytest.warns(DeprecationWarning):
            with pytest.raises(ValueError, match="not both"):
                Variable(sets=['Int'], vartype=VarType.BINARY)


class TestSetValue:
    """Test value assignment and shape checking"""

    def test_scalar_from_number(self):
        x = Variable()
        x.value = 5
        assert x.value == 5.0
        assert isinstance(x.value, np.float64)

    def test_scalar_rejects_wrong_shape(self):
        x = Variable()
        with pytest.raises(ShapeMismatchError):
            x.set_value(np.ones((2, 1)))
        assert x.value is None

    def test_matrix_from_number_fails(self):
        x = Variable((2, 2))
        with pytest.raises(ShapeMismatchError, match="to a scalar"):
            x.set_value(1.0)

    def test_column_from_1d_sequence(self):
        x = Variable(3)
        x.set_value([1, 2, 3])

        assert x.value.shape == (3, 1)
        np.testing.assert_allclose(x.value.ravel(), [1.0, 2.0, 3.0])

    def test_vector_length_mismatch(self):
        x = Variable(3)
        with pytest.raises(ShapeMismatchError, match="do not match"):
            x.set_value([1, 2])

    def test_vector_into_matrix_fails(self):
        x = Variable((3, 2))
        with pytest.raises(ShapeMismatchError, match="to a vector"):
            x.set_value([1, 2, 3])

    def test_matrix_shape(self):
        x = Variable((2, 3))
        x.set_value(np.arange(6).reshape(2, 3))
        assert x.value.dtype == np.float64
        assert x.value.shape == (2, 3)

        with pytest.raises(ShapeMismatchError):
            x.set_value(np.ones((3, 2)))

    def test_value_unchanged_on_failure(self):
        """A failed assignment leaves the previous value in place"""
        x = Variable(2)
        x.set_value([1.0, 2.0])

        with pytest.raises(ShapeMismatchError):
            x.set_value([1.0, 2.0, 3.0])
        with pytest.raises(TypeConversionError):
            x.set_value([1j, 2.0])

        np.testing.assert_allclose(x.value.ravel(), [1.0, 2.0])

    def test_complex_into_real_fails(self):
        x = Variable()
        with pytest.raises(TypeConversionError, match="complex value"):
            x.set_value(1 + 2j)

    def test_complex_with_zero_imag_into_real(self):
        x = Variable()
        x.set_value(3 + 0j)
        assert x.value == 3.0
        assert not np.iscomplexobj(x.value)

    def test_real_into_complex_is_converted(self):
        z = ComplexVariable(2)
        z.set_value([1.0, 2.0])
        assert z.value.dtype == np.complex128

    def test_non_numeric_fails(self):
        x = Variable()
        with pytest.raises(TypeConversionError):
            x.set_value("five")


class TestFixFree:
    """Test fixing and freeing variables"""

    def test_fix_requires_value(self):
        x = Variable()
        with pytest.raises(ValueNotSetError, match="no value yet"):
            x.fix()
        assert x.vexity == Vexity.AFFINE

    def test_fix_sets_constant(self):
        x = Variable()
        x.value = 2.0
        assert x.fix() is x
        assert x.vexity == Vexity.CONSTANT
        assert x.is_fixed()

    def test_fix_with_value(self):
        x = Variable(2)
        x.fix([1.0, -1.0])

        assert x.vexity == Vexity.CONSTANT
        np.testing.assert_allclose(x.value.ravel(), [1.0, -1.0])

    def test_fix_with_bad_value_leaves_affine(self):
        x = Variable(2)
        with pytest.raises(ShapeMismatchError):
            x.fix([1.0])
        assert x.vexity == Vexity.AFFINE

    def test_free_resets_affine_keeps_value(self):
        x = Variable()
        x.fix(4.0)
        x.free()

        assert x.vexity == Vexity.AFFINE
        assert x.value == 4.0

    def test_free_is_idempotent(self):
        x = Variable()
        x.free()
        x.free()
        assert x.vexity == Vexity.AFFINE


class TestEvaluate:

    def test_unset_raises(self):
        x = Variable()
        with pytest.raises(ValueNotSetError):
            x.evaluate()

    def test_returns_stored_value(self):
        x = Variable((2, 2))
        x.value = np.eye(2)
        assert x.evaluate() is x.value


class TestSemidefinite:
    """Test semidefinite constructors"""

    def test_square(self):
        X = Semidefinite(3, 3)

        assert X.shape == (3, 3)
        assert len(X.constraints) == 1
        assert isinstance(X.constraints[0], SDPConstraint)
        assert X.constraints[0].lhs is X

    def test_single_dimension(self):
        assert Semidefinite(2).shape == (2, 2)

    def test_non_square(self):
        with pytest.raises(InvalidShapeError, match="must be square"):
            Semidefinite(2, 3)

    def test_hermitian(self):
        H = HermitianSemidefinite(2)

        assert H.sign == Sign.COMPLEX
        assert H.constraints[0].cone == 'HermitianSDP'

    def test_hermitian_non_square(self):
        with pytest.raises(InvalidShapeError):
            HermitianSemidefinite(3, 2)
