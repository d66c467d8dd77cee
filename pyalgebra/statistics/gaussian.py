"""
Multivariate normal distribution built on the decomposers.

The covariance is checked with whichever decomposer the caller prefers
(Cholesky by default), its determinant and Mahalanobis distances come from
an LU decomposition, and its principal axes from an SVD.

Since the covariance C is symmetric positive definite, its SVD
C = V @ diag(w) @ V.T is also its eigendecomposition: the columns of V are
independent directions and w the variances along them. cdf() and invcdf()
work along these directions.
"""

import math
from typing import Any, Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats

from pyalgebra.core.exceptions import (
    DimensionError,
    InvalidCovarianceMatrixError,
    NotReadyError,
    SingularMatrixError,
    ValidationError,
)
from pyalgebra.core.protocols import Decomposer
from pyalgebra.core.validation import (
    check_1d,
    check_array,
    check_min_value,
    check_non_empty,
    check_probability,
)
from pyalgebra.decomposition import (
    CholeskyDecomposer,
    DecomposerType,
    LUDecomposer,
    SingularValueDecomposer,
)


# f(x) -> (y, jacobian of y with respect to x)
Evaluator = Callable[[NDArray[np.floating[Any]]], tuple[ArrayLike, ArrayLike]]


def validate_covariance(
    covariance: ArrayLike,
    decomposer: Decomposer | None = None,
) -> NDArray[np.floating[Any]]:
    """
    Check that a matrix can serve as a covariance.

    Args:
        covariance: Square matrix to check
        decomposer: Decomposer used for the check (Cholesky, SVD or LU);
            defaults to a new CholeskyDecomposer. Its input is replaced.

    Returns:
        The covariance as a float64 copy

    Raises:
        InvalidCovarianceMatrixError: If the matrix is not square, not
            symmetric, or not positive definite
        ValidationError: If the decomposer type cannot check a covariance
    """
    cov = np.array(check_array(covariance, 'covariance'), dtype=np.float64)
    if cov.ndim != 2 or cov.shape[0] != cov.shape[1] or cov.size == 0:
        raise InvalidCovarianceMatrixError(
            f"covariance: expected non-empty square matrix, got shape {cov.shape}"
        )

    if decomposer is None:
        decomposer = CholeskyDecomposer()
    kind = decomposer.decomposer_type
    if kind not in (
        DecomposerType.CHOLESKY_DECOMPOSITION,
        DecomposerType.SINGULAR_VALUE_DECOMPOSITION,
        DecomposerType.LU_DECOMPOSITION,
    ):
        raise ValidationError(
            f"decomposer: cannot validate a covariance with {kind.name}"
        )

    decomposer.set_input_matrix(cov)
    decomposer.decompose()

    symmetric = bool(np.array_equal(cov, cov.T))
    if kind is DecomposerType.CHOLESKY_DECOMPOSITION:
        valid = decomposer.is_spd
    elif kind is DecomposerType.SINGULAR_VALUE_DECOMPOSITION:
        valid = symmetric and bool(np.all(decomposer.singular_values > 0.0))
    else:
        valid = symmetric and not decomposer.is_singular()

    if not valid:
        raise InvalidCovarianceMatrixError(
            f"covariance: matrix is not symmetric positive definite "
            f"(checked with {kind.name})"
        )
    return cov


class MultivariateNormalDist:
    """
    Multivariate normal (Gaussian) distribution.

    Usage:
        dist = MultivariateNormalDist(mean, covariance)
        density = dist.pdf(x)
        probability = dist.cdf(x)
        point = dist.invcdf(0.9)

    Without arguments, a standard normal with `dims` dimensions is created
    (zero mean, identity covariance).
    """

    def __init__(
        self,
        mean: ArrayLike | None = None,
        covariance: ArrayLike | None = None,
        *,
        dims: int = 1,
        validate: bool = True,
    ):
        self._mean: NDArray[np.floating[Any]] | None = None
        self._cov: NDArray[np.floating[Any]] | None = None
        self._clear_cache()

        if mean is None and covariance is None:
            check_min_value(dims, 1, 'dims')
            self._mean = np.zeros(dims)
            self._cov = np.eye(dims)
        elif mean is None or covariance is None:
            raise ValidationError("mean and covariance must be provided together")
        else:
            self.set_mean_and_covariance(mean, covariance, validate=validate)

    def _clear_cache(self) -> None:
        self._lu: LUDecomposer | None = None
        self._basis: NDArray[np.floating[Any]] | None = None
        self._variances: NDArray[np.floating[Any]] | None = None

    # ═══════════════════════════════════════════════════════════════════
    # Parameters
    # ═══════════════════════════════════════════════════════════════════

    @property
    def mean(self) -> NDArray[np.floating[Any]] | None:
        return None if self._mean is None else self._mean.copy()

    @mean.setter
    def mean(self, mu: ArrayLike) -> None:
        self._mean = _check_vector(mu, 'mean')

    @property
    def covariance(self) -> NDArray[np.floating[Any]] | None:
        return None if self._cov is None else self._cov.copy()

    @covariance.setter
    def covariance(self, cov: ArrayLike) -> None:
        self.set_covariance(cov)

    def set_covariance(self, cov: ArrayLike, validate: bool = True) -> None:
        """
        Replace the covariance matrix.

        Args:
            cov: Square covariance matrix
            validate: Check that cov is symmetric positive definite

        Raises:
            InvalidCovarianceMatrixError: If cov is not square, or validate
                is True and cov is not SPD
        """
        if validate:
            cov = validate_covariance(cov)
        else:
            cov = np.array(check_array(cov, 'covariance'), dtype=np.float64)
            if cov.ndim != 2 or cov.shape[0] != cov.shape[1] or cov.size == 0:
                raise InvalidCovarianceMatrixError(
                    f"covariance: expected non-empty square matrix, got shape {cov.shape}"
                )
        self._cov = cov
        self._clear_cache()

    def set_mean_and_covariance(
        self,
        mu: ArrayLike,
        cov: ArrayLike,
        validate: bool = True,
    ) -> None:
        """
        Replace both parameters.

        Raises:
            DimensionError: If mean length differs from the covariance size
            InvalidCovarianceMatrixError: If cov is invalid
        """
        mean = _check_vector(mu, 'mean')
        shape = np.shape(cov)
        if len(shape) > 0 and shape[0] != len(mean):
            raise DimensionError(
                f"mean: length {len(mean)} differs from covariance rows {shape[0]}"
            )
        self.set_covariance(cov, validate)
        self._mean = mean

    @staticmethod
    def is_valid_covariance(cov: ArrayLike) -> bool:
        """True if cov is square, symmetric and positive definite."""
        try:
            validate_covariance(cov)
        except InvalidCovarianceMatrixError:
            return False
        return True

    @property
    def is_ready(self) -> bool:
        """True when mean and covariance are set with consistent sizes."""
        return (
            self._mean is not None
            and self._cov is not None
            and len(self._mean) == self._cov.shape[0]
        )

    @property
    def dims(self) -> int:
        return 0 if self._mean is None else len(self._mean)

    # ═══════════════════════════════════════════════════════════════════
    # Evaluation
    # ═══════════════════════════════════════════════════════════════════

    def _require_ready(self) -> None:
        if not self.is_ready:
            raise NotReadyError("mean and covariance not provided or inconsistent")

    def _check_point(self, x: ArrayLike, name: str) -> NDArray[np.floating[Any]]:
        point = _check_vector(x, name)
        if len(point) != len(self._mean):
            raise DimensionError(
                f"{name}: expected length {len(self._mean)}, got {len(point)}"
            )
        return point

    def _lu_decomposer(self) -> LUDecomposer:
        if self._lu is None:
            decomposer = LUDecomposer(self._cov)
            decomposer.decompose()
            self._lu = decomposer
        return self._lu

    def pdf(self, x: ArrayLike) -> float:
        """
        Probability density at x.

        Raises:
            NotReadyError: If the distribution is not ready
            DimensionError: If x has the wrong length
            SingularMatrixError: If the covariance is singular
            InvalidCovarianceMatrixError: If the covariance determinant is
                negative
        """
        self._require_ready()
        point = self._check_point(x, 'x')
        k = len(point)
        decomposer = self._lu_decomposer()
        if decomposer.is_singular():
            raise SingularMatrixError(
                "covariance: matrix is singular, density is undefined",
                matrix_name='covariance',
                expected_rank=k,
            )
        determinant = decomposer.determinant()
        if determinant <= 0.0:
            raise InvalidCovarianceMatrixError(
                f"covariance: determinant {determinant} is not positive"
            )
        factor = 1.0 / math.sqrt((2.0 * math.pi) ** k * determinant)
        return factor * math.exp(-0.5 * self.squared_mahalanobis_distance(point))

    def squared_mahalanobis_distance(self, x: ArrayLike) -> float:
        """
        (x - mean).T @ inv(covariance) @ (x - mean).

        Raises:
            NotReadyError: If the distribution is not ready
            DimensionError: If x has the wrong length
            SingularMatrixError: If the covariance is singular
        """
        self._require_ready()
        diff = self._check_point(x, 'x') - self._mean
        return float(diff @ self._lu_decomposer().solve(diff))

    def mahalanobis_distance(self, x: ArrayLike) -> float:
        """Square root of squared_mahalanobis_distance()."""
        return math.sqrt(self.squared_mahalanobis_distance(x))

    def process_covariance(self) -> None:
        """
        Compute and cache the principal directions and variances.

        Raises:
            NotReadyError: If no covariance is set
        """
        if self._cov is None:
            raise NotReadyError("covariance must be defined")
        if self._basis is None or self._variances is None:
            decomposer = SingularValueDecomposer(self._cov)
            decomposer.decompose()
            self._basis = decomposer.V
            self._variances = decomposer.singular_values

    @property
    def covariance_basis(self) -> NDArray[np.floating[Any]] | None:
        """Principal directions (columns), once process_covariance() ran."""
        return None if self._basis is None else self._basis.copy()

    @property
    def variances(self) -> NDArray[np.floating[Any]] | None:
        """Variances along covariance_basis, once process_covariance() ran."""
        return None if self._variances is None else self._variances.copy()

    def cdf(self, x: ArrayLike) -> float:
        """
        Probability that every principal coordinate is at most x's.

        The product of the univariate normal CDFs of x projected on each
        principal direction.

        Raises:
            NotReadyError: If the distribution is not ready
            DimensionError: If x has the wrong length
        """
        self._require_ready()
        point = self._check_point(x, 'x')
        self.process_covariance()

        coord_x = point @ self._basis
        coord_mu = self._mean @ self._basis
        probabilities = stats.norm.cdf(coord_x, loc=coord_mu, scale=np.sqrt(self._variances))
        return float(np.prod(probabilities))

    @staticmethod
    def joint_probability(p: ArrayLike) -> float:
        """Product of independent probabilities."""
        return float(np.prod(check_array(p, 'p')))

    def invcdf(self, p: ArrayLike | float) -> NDArray[np.floating[Any]]:
        """
        Point whose principal-direction CDFs equal the given probabilities.

        Args:
            p: One probability per dimension, or a single joint probability
                spread evenly as p ** (1 / dims) on every direction

        Returns:
            Point of length dims

        Raises:
            NotReadyError: If the distribution is not ready
            ValidationError: If a scalar p is not in (0, 1)
            DimensionError: If p has the wrong length
        """
        if np.ndim(p) == 0:
            check_probability(float(p), 'p')
            self._require_ready()
            probabilities = np.full(self.dims, float(p) ** (1.0 / self.dims))
        else:
            self._require_ready()
            probabilities = self._check_point(p, 'p')

        self.process_covariance()
        coords = stats.norm.ppf(probabilities) * np.sqrt(self._variances)
        return self._mean + self._basis @ coords

    # ═══════════════════════════════════════════════════════════════════
    # Propagation
    # ═══════════════════════════════════════════════════════════════════

    @staticmethod
    def propagate(
        evaluator: Evaluator,
        mean: ArrayLike,
        covariance: ArrayLike,
    ) -> 'MultivariateNormalDist':
        """
        First-order propagation of a Gaussian through a function.

        For y = f(x) with Jacobian J at the mean, the result has mean f(mean)
        and covariance J @ covariance @ J.T (symmetrised, not validated).

        Args:
            evaluator: Callable returning (y, jacobian) for a point x
            mean: Mean of the input distribution
            covariance: Covariance of the input distribution

        Returns:
            New distribution of y

        Raises:
            DimensionError: If the jacobian shape does not match
        """
        mu = _check_vector(mean, 'mean')
        cov = np.array(check_array(covariance, 'covariance'), dtype=np.float64)
        y, jacobian = evaluator(mu.copy())
        y = _check_vector(y, 'y')
        jacobian = np.array(check_array(jacobian, 'jacobian'), dtype=np.float64)
        if jacobian.shape != (len(y), len(mu)):
            raise DimensionError(
                f"jacobian: expected shape {(len(y), len(mu))}, got {jacobian.shape}"
            )

        propagated = jacobian @ cov @ jacobian.T
        propagated = 0.5 * (propagated + propagated.T)
        return MultivariateNormalDist(y, propagated, validate=False)

    def propagate_this(self, evaluator: Evaluator) -> 'MultivariateNormalDist':
        """propagate() applied to this distribution."""
        self._require_ready()
        return MultivariateNormalDist.propagate(evaluator, self._mean, self._cov)

    def __repr__(self) -> str:
        return f"MultivariateNormalDist(dims={self.dims})"


def _check_vector(x: ArrayLike, name: str) -> NDArray[np.floating[Any]]:
    array = check_array(x, name)
    check_1d(array, name)
    check_non_empty(array, name)
    return np.array(array, dtype=np.float64)
