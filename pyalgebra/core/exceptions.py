"""
Exception hierarchy for PyAlgebra.

All exceptions inherit from PyAlgebraError to allow catching any
library-specific error. The hierarchy mirrors the four error kinds a
caller has to tell apart:

    - ValidationError: an argument or operand is invalid (bad tolerance,
      wrong shape, ...). DimensionError is the shape-specific subtype.
    - LifecycleError: an operation was invoked in the wrong decomposer state
      (no input matrix, not decomposed yet, currently locked).
    - NumericalError: the input is numerically degenerate for the requested
      algorithm (singular, rank deficient, not positive definite).
    - DecomposerError / ConvergenceError: the factorization itself failed.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pyalgebra.decomposition._lifecycle import DecomposerType


class PyAlgebraError(Exception):
    """Base exception for all PyAlgebra errors."""
    pass


class ValidationError(PyAlgebraError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks, e.g. a negative
    tolerance or a non-positive iteration bound.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when a matrix is not square where it must be, or when the rows of
    a right-hand side do not match the rows of the coefficient matrix.
    """
    pass


class LifecycleError(PyAlgebraError):
    """
    Operation invoked in the wrong decomposer state.

    Base class for NotReadyError, NotAvailableError and LockedError.
    """
    pass


class NotReadyError(LifecycleError):
    """No input matrix has been provided to the decomposer."""
    pass


class NotAvailableError(LifecycleError):
    """
    Requested data is not available.

    Raised when factors are queried before decompose() has completed, or when
    a derived quantity is empty (e.g. the null space of a full-rank matrix).
    """
    pass


class LockedError(LifecycleError):
    """The decomposer is in the middle of a decomposition."""
    pass


class DecomposerError(PyAlgebraError):
    """
    Decomposition could not be computed.

    Raised by decompose() when the input violates the algorithm's
    precondition. The original cause (usually a DimensionError) is chained
    as __cause__.

    Attributes:
        decomposer_type: Tag of the decomposer that failed, if known
    """

    def __init__(
        self,
        message: str,
        decomposer_type: DecomposerType | None = None
    ):
        super().__init__(message)
        self.decomposer_type = decomposer_type


class NumericalError(PyAlgebraError):
    """
    Numerical computation failed.

    Base class for errors arising from a numerically degenerate input.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.

    Raised when a solve requires invertibility (LU, Gauss-Jordan) but a pivot
    is at or below the tolerance.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        condition_number: Estimated condition number, if available
        rank: Numerical rank, if computed
        expected_rank: Expected rank (typically min(n, p))
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        condition_number: float | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.condition_number = condition_number
        self.rank = rank
        self.expected_rank = expected_rank


class RankDeficientMatrixError(NumericalError):
    """
    Matrix does not have full column rank.

    Raised by the QR solvers when some diagonal entry of R is at or below the
    tolerance. Callers can fall back to the SVD pseudoinverse solve.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        rank: Number of diagonal entries of R above the tolerance
        expected_rank: Rank required for the solve (number of columns)
        tolerance: Tolerance used for the rank test
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        rank: int | None = None,
        expected_rank: int | None = None,
        tolerance: float | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.rank = rank
        self.expected_rank = expected_rank
        self.tolerance = tolerance


class NotPositiveDefiniteError(NumericalError):
    """
    Matrix is not symmetric positive definite.

    Raised when an operation requires an SPD matrix (e.g. Cholesky solve)
    but the matrix fails this requirement.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        min_eigenvalue: Minimum eigenvalue, if computed
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        min_eigenvalue: float | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.min_eigenvalue = min_eigenvalue


class ConvergenceError(PyAlgebraError):
    """
    Iterative algorithm failed to converge.

    Only raised by the SVD in strict mode; by default the SVD keeps its best
    available values and reports non-convergence through a warning.

    Attributes:
        iterations: Number of iterations completed
        final_change: Magnitude of the last off-diagonal term, if known
        reason: Why convergence failed (e.g., 'max_iterations')
        threshold: The convergence threshold that was not met
    """

    def __init__(
        self,
        message: str,
        iterations: int,
        final_change: float | None = None,
        reason: str | None = None,
        threshold: float | None = None
    ):
        super().__init__(message)
        self.iterations = iterations
        self.final_change = final_change
        self.reason = reason
        self.threshold = threshold


class InvalidCovarianceMatrixError(ValidationError):
    """
    Covariance matrix is not square, symmetric and positive definite.

    Raised by the multivariate Gaussian consumers when a covariance matrix
    cannot be used to define a distribution.
    """
    pass
