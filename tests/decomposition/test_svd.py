"""
Tests for SingularValueDecomposer.

Validates:
    - Reconstruction and orthonormality for square, tall and wide inputs
    - Singular values descending, non-negative, matching numpy
    - Rank, nullity, range and null spaces, condition numbers
    - Pseudoinverse solve
    - Non-convergence policy (warning by default, error in strict mode)
"""

import math

import numpy as np
import pytest

from pyalgebra.core.exceptions import (
    ConvergenceError,
    DimensionError,
    NotAvailableError,
    ValidationError,
)
from pyalgebra.decomposition import SingularValueDecomposer
from pyalgebra.decomposition.svd import DEFAULT_MAX_ITERATIONS


def _decomposed(matrix, **kwargs):
    decomposer = SingularValueDecomposer(matrix, **kwargs)
    decomposer.decompose()
    return decomposer


# ═══════════════════════════════════════════════════════════════════════
# Factors
# ═══════════════════════════════════════════════════════════════════════


class TestFactors:

    @pytest.mark.parametrize("shape", [(4, 4), (6, 3), (3, 5), (1, 1), (1, 4), (4, 1)])
    def test_reconstruction(self, rng, shape):
        a = rng.standard_normal(shape)
        svd = _decomposed(a)
        k = min(shape)
        assert svd.U.shape == (shape[0], k)
        assert svd.V.shape == (shape[1], k)
        assert svd.W.shape == (k, k)
        np.testing.assert_allclose(svd.U @ svd.W @ svd.V.T, a, atol=1e-10)
        np.testing.assert_allclose(svd.U.T @ svd.U, np.eye(k), atol=1e-10)
        np.testing.assert_allclose(svd.V.T @ svd.V, np.eye(k), atol=1e-10)

    @pytest.mark.parametrize("shape", [(4, 4), (6, 3), (3, 5)])
    def test_singular_values_match_numpy(self, rng, shape):
        a = rng.standard_normal(shape)
        w = _decomposed(a).singular_values
        np.testing.assert_allclose(w, np.linalg.svd(a, compute_uv=False), atol=1e-10)

    def test_descending_non_negative(self, rng):
        w = _decomposed(rng.standard_normal((7, 5))).singular_values
        assert np.all(w >= 0.0)
        assert np.all(np.diff(w) <= 0.0)

    def test_negative_one_by_one(self):
        svd = _decomposed([[-2.0]])
        np.testing.assert_array_equal(svd.singular_values, [2.0])
        np.testing.assert_allclose(svd.U @ svd.W @ svd.V.T, [[-2.0]])

    def test_deterministic(self, square_matrix):
        first = _decomposed(square_matrix)
        second = _decomposed(square_matrix)
        assert np.array_equal(first.U, second.U)
        assert np.array_equal(first.singular_values, second.singular_values)
        assert np.array_equal(first.V, second.V)

    def test_converged(self, square_matrix):
        assert _decomposed(square_matrix).converged

    def test_getters_before_decompose(self, square_matrix):
        svd = SingularValueDecomposer(square_matrix)
        for name in ('U', 'V', 'W', 'singular_values', 'norm2', 'condition_number'):
            with pytest.raises(NotAvailableError):
                getattr(svd, name)
        with pytest.raises(NotAvailableError):
            svd.rank()


# ═══════════════════════════════════════════════════════════════════════
# Queries
# ═══════════════════════════════════════════════════════════════════════


class TestQueries:

    def test_norm2(self, square_matrix):
        assert _decomposed(square_matrix).norm2 == pytest.approx(np.linalg.norm(square_matrix, 2))

    def test_condition_number(self, square_matrix):
        svd = _decomposed(square_matrix)
        assert svd.condition_number == pytest.approx(np.linalg.cond(square_matrix))
        assert svd.reciprocal_condition_number == pytest.approx(1.0 / np.linalg.cond(square_matrix))

    def test_threshold(self, tall_matrix):
        svd = _decomposed(tall_matrix)
        expected = 0.5 * math.sqrt(6 + 3 + 1.0) * svd.norm2 * 1e-12
        assert svd.negligible_singular_value_threshold == pytest.approx(expected)

    def test_full_rank(self, tall_matrix):
        svd = _decomposed(tall_matrix)
        assert svd.rank() == 3
        assert svd.nullity() == 0
        with pytest.raises(NotAvailableError, match="null space"):
            svd.null_space()

    def test_rank_deficient(self, singular_matrix):
        svd = _decomposed(singular_matrix)
        assert svd.rank() == 1
        assert svd.nullity() == 1

        null = svd.null_space()
        assert null.shape == (2, 1)
        np.testing.assert_allclose(singular_matrix @ null, np.zeros((2, 1)), atol=1e-10)

        space = svd.range_space()
        assert space.shape == (2, 1)
        np.testing.assert_allclose(np.abs(space[:, 0]), np.array([1.0, 2.0]) / math.sqrt(5.0))

    def test_rank_plus_nullity(self, rng):
        for shape in [(5, 3), (3, 5), (4, 4)]:
            svd = _decomposed(rng.standard_normal(shape))
            for threshold in (None, 0.0, 0.5, 10.0):
                assert svd.rank(threshold) + svd.nullity(threshold) == min(shape)

    def test_zero_matrix(self):
        svd = _decomposed(np.zeros((3, 2)))
        assert svd.rank() == 0
        assert svd.reciprocal_condition_number == 0.0
        assert svd.condition_number == math.inf
        with pytest.raises(NotAvailableError, match="range space"):
            svd.range_space()

    def test_negative_threshold(self, square_matrix):
        svd = _decomposed(square_matrix)
        with pytest.raises(ValidationError, match="threshold"):
            svd.rank(-1.0)
        with pytest.raises(ValidationError):
            svd.null_space(-1.0)


# ═══════════════════════════════════════════════════════════════════════
# solve()
# ═══════════════════════════════════════════════════════════════════════


class TestSolve:

    def test_square(self, square_matrix, rng):
        b = rng.standard_normal(4)
        x = _decomposed(square_matrix).solve(b)
        np.testing.assert_allclose(square_matrix @ x, b, atol=1e-10)

    def test_least_squares(self, tall_matrix, rng):
        b = rng.standard_normal((6, 2))
        x = _decomposed(tall_matrix).solve(b)
        expected, *_ = np.linalg.lstsq(tall_matrix, b, rcond=None)
        np.testing.assert_allclose(x, expected, atol=1e-10)

    def test_minimum_norm(self, wide_matrix, rng):
        b = rng.standard_normal(3)
        x = _decomposed(wide_matrix).solve(b)
        np.testing.assert_allclose(x, np.linalg.pinv(wide_matrix) @ b, atol=1e-10)

    def test_rank_deficient_pseudoinverse(self, singular_matrix):
        b = np.array([1.0, 2.0])
        x = _decomposed(singular_matrix).solve(b)
        np.testing.assert_allclose(x, np.linalg.pinv(singular_matrix) @ b, atol=1e-10)

    def test_row_mismatch(self, square_matrix):
        with pytest.raises(DimensionError):
            _decomposed(square_matrix).solve(np.ones(5))

    def test_negative_threshold(self, square_matrix):
        with pytest.raises(ValidationError):
            _decomposed(square_matrix).solve(np.ones(4), threshold=-1.0)


# ═══════════════════════════════════════════════════════════════════════
# Iteration bound and convergence
# ═══════════════════════════════════════════════════════════════════════


class TestConvergence:

    def test_default_max_iterations(self):
        assert SingularValueDecomposer().max_iterations == DEFAULT_MAX_ITERATIONS == 30

    def test_setter(self):
        svd = SingularValueDecomposer()
        svd.max_iterations = 5
        assert svd.max_iterations == 5

    @pytest.mark.parametrize("value", [0, -3])
    def test_setter_rejects_small(self, value):
        svd = SingularValueDecomposer()
        with pytest.raises(ValidationError):
            svd.max_iterations = value

    def test_constructor_rejects_small(self):
        with pytest.raises(ValidationError):
            SingularValueDecomposer(max_iterations=0)

    def test_non_convergence_warns(self, square_matrix):
        svd = SingularValueDecomposer(square_matrix, max_iterations=1)
        with pytest.warns(RuntimeWarning, match="did not converge"):
            svd.decompose()
        assert svd.is_decomposition_available
        assert not svd.converged
        assert np.all(svd.singular_values >= 0.0)

    def test_strict_raises(self, square_matrix):
        svd = SingularValueDecomposer(square_matrix, max_iterations=1, strict=True)
        with pytest.raises(ConvergenceError) as excinfo:
            svd.decompose()
        assert excinfo.value.iterations == 1
        assert excinfo.value.reason == 'max_iterations'
        assert not svd.is_decomposition_available
        assert not svd.is_locked
