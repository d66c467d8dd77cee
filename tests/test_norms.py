"""
Tests for matrix and vector norms.
"""

import numpy as np
import pytest

from pyalgebra.core.exceptions import DimensionError, ValidationError
from pyalgebra.norms import (
    NormType,
    frobenius_norm,
    infinity_norm,
    norm,
    norm_with_jacobian,
    one_norm,
)


class TestMatrixNorms:

    def test_agree_with_numpy(self, tall_matrix):
        assert frobenius_norm(tall_matrix) == pytest.approx(np.linalg.norm(tall_matrix, 'fro'))
        assert one_norm(tall_matrix) == pytest.approx(np.linalg.norm(tall_matrix, 1))
        assert infinity_norm(tall_matrix) == pytest.approx(np.linalg.norm(tall_matrix, np.inf))

    def test_known_values(self):
        a = np.array([[1.0, -2.0], [3.0, 4.0]])
        assert frobenius_norm(a) == pytest.approx(np.sqrt(30.0))
        assert one_norm(a) == 6.0
        assert infinity_norm(a) == 7.0


class TestVectorNorms:

    def test_known_values(self):
        v = np.array([3.0, -4.0])
        assert frobenius_norm(v) == 5.0
        assert one_norm(v) == 7.0
        assert infinity_norm(v) == 4.0


class TestDispatch:

    @pytest.mark.parametrize("norm_type, expected", [
        (NormType.FROBENIUS_NORM, 5.0),
        (NormType.ONE_NORM, 7.0),
        (NormType.INFINITY_NORM, 4.0),
    ])
    def test_norm_type(self, norm_type, expected):
        assert norm([3.0, -4.0], norm_type) == expected

    def test_default_is_frobenius(self):
        assert norm([[3.0], [4.0]]) == 5.0

    def test_unknown_norm(self):
        with pytest.raises(ValidationError, match="unknown norm"):
            norm([1.0], 'spectral')

    def test_rejects_3d(self):
        with pytest.raises(DimensionError):
            norm(np.ones((2, 2, 2)))

    def test_rejects_empty(self):
        with pytest.raises(DimensionError):
            norm(np.ones((0, 2)))


class TestJacobian:

    def test_norm_and_jacobian(self):
        value, jacobian = norm_with_jacobian([3.0, 4.0])
        assert value == 5.0
        np.testing.assert_allclose(jacobian, [[0.6, 0.8]])

    def test_jacobian_matches_finite_difference(self, rng):
        v = rng.standard_normal(4)
        _, jacobian = norm_with_jacobian(v)
        step = 1e-7
        numeric = [
            (np.linalg.norm(v + step * e) - np.linalg.norm(v)) / step
            for e in np.eye(4)
        ]
        np.testing.assert_allclose(jacobian[0], numeric, atol=1e-6)

    def test_rejects_matrix(self):
        with pytest.raises(DimensionError):
            norm_with_jacobian(np.eye(2))
