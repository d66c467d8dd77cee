"""
LU decomposition with partial (row) pivoting.

For an m x n matrix A with m >= n the decomposition is

    P @ A = pivoted_L @ U

where P is a row permutation, pivoted_L is m x n unit lower trapezoidal and
U is n x n upper triangular. The permuted factor L = P.T @ pivoted_L gives
A = L @ U directly.

The decomposition itself never fails on singular input: columns whose pivot
is exactly zero are skipped. Singularity is a query (is_singular) and only
solve() turns it into an error.
"""

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.linalg import solve_triangular

from pyalgebra.core.exceptions import DimensionError, SingularMatrixError
from pyalgebra.core.validation import check_non_negative, check_rhs, check_square
from pyalgebra.decomposition._lifecycle import BaseDecomposer, DecomposerType, write_out


DEFAULT_ROUND_ERROR: float = 0.0
MIN_ROUND_ERROR: float = 0.0


class LUDecomposer(BaseDecomposer):
    """
    Partial-pivoting LU decomposer.

    Usage:
        decomposer = LUDecomposer(A)
        decomposer.decompose()
        if not decomposer.is_singular():
            x = decomposer.solve(b)
    """

    _TYPE = DecomposerType.LU_DECOMPOSITION

    def _clear(self) -> None:
        self._lu: NDArray[np.floating[Any]] | None = None
        self._pivot: NDArray[np.intp] | None = None
        self._pivot_sign = 1

    def _decompose(self, matrix: NDArray[np.floating[Any]]) -> None:
        rows, columns = matrix.shape
        if rows < columns:
            raise self._precondition_failed(DimensionError(
                f"matrix: LU requires rows >= columns, got {rows}x{columns}"
            ))

        lu = matrix.copy()
        pivot = np.arange(rows)
        pivot_sign = 1

        for k in range(columns):
            # First row holding the largest magnitude in the unreduced column
            p = k + int(np.argmax(np.abs(lu[k:, k])))
            if p != k:
                lu[[p, k], :] = lu[[k, p], :]
                pivot[[p, k]] = pivot[[k, p]]
                pivot_sign = -pivot_sign

            if lu[k, k] != 0.0:
                lu[k + 1:, k] /= lu[k, k]
                lu[k + 1:, k + 1:] -= np.outer(lu[k + 1:, k], lu[k, k + 1:])

        self._lu = lu
        self._pivot = pivot
        self._pivot_sign = pivot_sign

    # ═══════════════════════════════════════════════════════════════════
    # Factors
    # ═══════════════════════════════════════════════════════════════════

    @property
    def pivoted_L(self) -> NDArray[np.floating[Any]]:
        """Unit lower trapezoidal factor (rows x columns) with P @ A = pivoted_L @ U."""
        self._require_decomposition()
        rows, columns = self._lu.shape
        return np.tril(self._lu, -1) + np.eye(rows, columns)

    @property
    def L(self) -> NDArray[np.floating[Any]]:
        """Row-permuted lower factor (rows x columns) with A = L @ U."""
        pivoted = self.pivoted_L
        lower = np.empty_like(pivoted)
        lower[self._pivot] = pivoted
        return lower

    @property
    def U(self) -> NDArray[np.floating[Any]]:
        """Upper triangular factor (columns x columns)."""
        self._require_decomposition()
        columns = self._lu.shape[1]
        return np.triu(self._lu[:columns, :])

    @property
    def P(self) -> NDArray[np.floating[Any]]:
        """Row permutation matrix (rows x rows) with P @ A = pivoted_L @ U."""
        self._require_decomposition()
        return np.eye(len(self._pivot))[self._pivot]

    @property
    def pivot(self) -> NDArray[np.intp]:
        """Permutation vector: row i of P @ A is row pivot[i] of A."""
        self._require_decomposition()
        return self._pivot.copy()

    @property
    def pivot_sign(self) -> int:
        """+1 or -1 depending on the parity of the row swaps."""
        self._require_decomposition()
        return self._pivot_sign

    # ═══════════════════════════════════════════════════════════════════
    # Queries
    # ═══════════════════════════════════════════════════════════════════

    def is_singular(self, tolerance: float = DEFAULT_ROUND_ERROR) -> bool:
        """
        Check whether some diagonal entry of U is negligible.

        The comparison is absolute and is not scaled by a norm of the
        matrix. For badly scaled inputs pass a tolerance already multiplied
        by the scale of interest, e.g. tolerance * one_norm(A).

        Args:
            tolerance: Absolute threshold; |U[j, j]| <= tolerance counts as zero

        Returns:
            True if the input matrix is singular within tolerance

        Raises:
            NotAvailableError: If decompose() has not completed
            ValidationError: If tolerance is negative
            DimensionError: If the input matrix is not square
        """
        self._require_decomposition()
        check_non_negative(tolerance, 'tolerance')
        check_square(self._lu, 'matrix')
        return bool(np.any(np.abs(np.diag(self._lu)) <= tolerance))

    def determinant(self) -> float:
        """
        Determinant of the input matrix.

        Raises:
            NotAvailableError: If decompose() has not completed
            DimensionError: If the input matrix is not square
        """
        self._require_decomposition()
        check_square(self._lu, 'matrix')
        return float(self._pivot_sign * np.prod(np.diag(self._lu)))

    def solve(
        self,
        b: ArrayLike,
        tolerance: float = DEFAULT_ROUND_ERROR,
        out: NDArray[np.floating[Any]] | None = None,
    ) -> NDArray[np.floating[Any]]:
        """
        Solve A @ x = b.

        Args:
            b: Right-hand side, 1D (rows,) or 2D (rows, nrhs)
            tolerance: Singularity threshold passed to is_singular()
            out: Optional destination with the solution's shape

        Returns:
            Solution with the same dimensionality as b

        Raises:
            NotAvailableError: If decompose() has not completed
            DimensionError: If b rows differ from the input rows, or the
                input is not square
            ValidationError: If tolerance is negative
            SingularMatrixError: If the input matrix is singular within tolerance
        """
        self._require_decomposition()
        rows, columns = self._lu.shape
        b = check_rhs(b, rows, 'b')
        check_non_negative(tolerance, 'tolerance')
        check_square(self._lu, 'matrix')

        if self.is_singular(tolerance):
            diagonal = np.abs(np.diag(self._lu))
            raise SingularMatrixError(
                f"matrix is singular: {int(np.sum(diagonal <= tolerance))} "
                f"diagonal entries of U are <= {tolerance}",
                matrix_name='matrix',
                rank=int(np.sum(diagonal > tolerance)),
                expected_rank=columns,
            )

        y = solve_triangular(
            self._lu, b[self._pivot], lower=True, unit_diagonal=True,
            check_finite=False,
        )
        x = solve_triangular(self._lu, y, lower=False, check_finite=False)
        return write_out(x, out)
