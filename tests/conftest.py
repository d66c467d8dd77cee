"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def square_matrix(rng):
    """Well-conditioned random 4 x 4 matrix."""
    return rng.standard_normal((4, 4)) + 4.0 * np.eye(4)


@pytest.fixture
def tall_matrix(rng):
    """Random 6 x 3 matrix with full column rank."""
    return rng.standard_normal((6, 3))


@pytest.fixture
def wide_matrix(rng):
    """Random 3 x 5 matrix with full row rank."""
    return rng.standard_normal((3, 5))


@pytest.fixture
def spd_matrix(rng):
    """Random 4 x 4 symmetric positive definite matrix."""
    a = rng.standard_normal((4, 4))
    return a @ a.T + 4.0 * np.eye(4)


@pytest.fixture
def singular_matrix():
    """2 x 2 matrix whose second row is twice the first."""
    return np.array([[1.0, 2.0], [2.0, 4.0]])


@pytest.fixture
def cholesky_example():
    """Classic SPD example with an integer Cholesky factor."""
    a = np.array([
        [4.0, 12.0, -16.0],
        [12.0, 37.0, -43.0],
        [-16.0, -43.0, 98.0],
    ])
    lower = np.array([
        [2.0, 0.0, 0.0],
        [6.0, 1.0, 0.0],
        [-8.0, 5.0, 3.0],
    ])
    return a, lower
