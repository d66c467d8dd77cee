"""
Sampling from a multivariate normal distribution.

Samples are mean + L @ z, where L is the lower Cholesky factor of the
covariance and z is drawn from a standard normal distribution.
"""

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.exceptions import DimensionError, InvalidCovarianceMatrixError
from pyalgebra.core.validation import check_1d, check_array, check_min_value, check_non_empty
from pyalgebra.decomposition import CholeskyDecomposer


class MultivariateGaussianRandomizer:
    """
    Random generator of multivariate Gaussian samples.

    Usage:
        randomizer = MultivariateGaussianRandomizer(
            mean, covariance, rng=np.random.default_rng(42)
        )
        sample = randomizer.next()           # shape (dims,)
        samples = randomizer.next(1000)      # shape (1000, dims)

    Without mean and covariance, samples come from a standard univariate
    normal.
    """

    def __init__(
        self,
        mean: ArrayLike | None = None,
        covariance: ArrayLike | None = None,
        *,
        rng: np.random.Generator | None = None,
    ):
        self._rng = rng if rng is not None else np.random.default_rng()
        if mean is None and covariance is None:
            self._mean = np.zeros(1)
            self._covariance = np.eye(1)
            self._l = np.eye(1)
        else:
            self.set_mean_and_covariance(mean, covariance)

    @property
    def mean(self) -> NDArray[np.floating[Any]]:
        return self._mean.copy()

    @property
    def covariance(self) -> NDArray[np.floating[Any]]:
        return self._covariance.copy()

    def set_mean_and_covariance(self, mean: ArrayLike, covariance: ArrayLike) -> None:
        """
        Replace the distribution parameters.

        Args:
            mean: Mean vector of length n
            covariance: n x n symmetric positive definite matrix

        Raises:
            DimensionError: If mean is not a non-empty vector, or the
                covariance is not n x n
            InvalidCovarianceMatrixError: If the covariance is not SPD
        """
        if mean is None or covariance is None:
            raise DimensionError("mean and covariance must be provided together")
        mu = check_array(mean, 'mean')
        check_1d(mu, 'mean')
        check_non_empty(mu, 'mean')
        cov = check_array(covariance, 'covariance')
        n = len(mu)
        if cov.shape != (n, n):
            raise DimensionError(
                f"covariance: expected shape {(n, n)} to match mean, got {cov.shape}"
            )

        decomposer = CholeskyDecomposer(cov)
        decomposer.decompose()
        if not decomposer.is_spd:
            raise InvalidCovarianceMatrixError(
                "covariance: matrix must be symmetric positive definite"
            )

        self._mean = np.array(mu, dtype=np.float64)
        self._covariance = np.array(cov, dtype=np.float64)
        self._l = decomposer.L

    def next(self, size: int | None = None) -> NDArray[np.floating[Any]]:
        """
        Draw samples.

        Args:
            size: Number of samples, or None for a single sample

        Returns:
            Array of shape (dims,) when size is None, else (size, dims)
        """
        n = len(self._mean)
        if size is None:
            z = self._rng.standard_normal(n)
            return self._mean + self._l @ z

        check_min_value(size, 1, 'size')
        z = self._rng.standard_normal((size, n))
        return self._mean + z @ self._l.T
