"""
QR decomposition by Householder reflections.

Computes A = Q @ R for an m x n matrix with m >= n, where Q is m x m
orthogonal and R is m x n upper triangular. Used for least squares solves
of overdetermined systems and, through householder_qr(), by the RQ
decomposer.
"""

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.linalg import solve_triangular

from pyalgebra.core.compute.precision import sign
from pyalgebra.core.exceptions import DimensionError, RankDeficientMatrixError
from pyalgebra.core.validation import check_non_negative, check_rhs
from pyalgebra.decomposition._lifecycle import BaseDecomposer, DecomposerType, write_out


DEFAULT_ROUND_ERROR: float = 1e-8
MIN_ROUND_ERROR: float = 0.0


def householder_qr(
    a: NDArray[np.floating[Any]],
) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]]]:
    """
    Full Householder QR of a matrix of any shape.

    Args:
        a: Matrix to decompose (m x n); not modified

    Returns:
        Tuple (Q, R) with Q m x m orthogonal, R m x n upper triangular with
        exact zeros below the diagonal, and a == Q @ R up to rounding
    """
    rows, columns = a.shape
    r = np.array(a, dtype=np.float64, copy=True)
    q = np.eye(rows)

    for k in range(min(rows - 1, columns)):
        x = r[k:, k]
        norm_x = np.linalg.norm(x)
        if norm_x == 0.0:
            continue

        # Reflect onto -sign(x0) * |x| e1 to avoid cancellation
        alpha = -sign(norm_x, x[0])
        v = x.copy()
        v[0] -= alpha
        v /= np.linalg.norm(v)

        r[k:, k:] -= 2.0 * np.outer(v, v @ r[k:, k:])
        q[:, k:] -= 2.0 * np.outer(q[:, k:] @ v, v)
        r[k, k] = alpha
        r[k + 1:, k] = 0.0

    return q, r


class QRDecomposer(BaseDecomposer):
    """
    Householder QR decomposer for matrices with rows >= columns.

    Usage:
        decomposer = QRDecomposer(A)
        decomposer.decompose()
        x = decomposer.solve(b)    # least squares when A is tall
    """

    _TYPE = DecomposerType.QR_DECOMPOSITION

    def _clear(self) -> None:
        self._q: NDArray[np.floating[Any]] | None = None
        self._r: NDArray[np.floating[Any]] | None = None

    def _decompose(self, matrix: NDArray[np.floating[Any]]) -> None:
        rows, columns = matrix.shape
        if rows < columns:
            raise self._precondition_failed(DimensionError(
                f"matrix: QR requires rows >= columns, got {rows}x{columns}"
            ))
        self._q, self._r = householder_qr(matrix)

    @property
    def Q(self) -> NDArray[np.floating[Any]]:
        """Orthogonal factor (rows x rows)."""
        self._require_decomposition()
        return self._q.copy()

    @property
    def R(self) -> NDArray[np.floating[Any]]:
        """Upper triangular factor (rows x columns)."""
        self._require_decomposition()
        return self._r.copy()

    def is_full_rank(self, tolerance: float = DEFAULT_ROUND_ERROR) -> bool:
        """
        Check whether every diagonal entry of R exceeds tolerance in magnitude.

        Raises:
            NotAvailableError: If decompose() has not completed
            ValidationError: If tolerance is negative
        """
        self._require_decomposition()
        check_non_negative(tolerance, 'tolerance')
        return bool(np.all(np.abs(np.diag(self._r)) > tolerance))

    def solve(
        self,
        b: ArrayLike,
        tolerance: float = DEFAULT_ROUND_ERROR,
        out: NDArray[np.floating[Any]] | None = None,
    ) -> NDArray[np.floating[Any]]:
        """
        Solve A @ x = b, in the least squares sense when A is tall.

        Args:
            b: Right-hand side, 1D (rows,) or 2D (rows, nrhs)
            tolerance: Rank threshold passed to is_full_rank()
            out: Optional destination with the solution's shape

        Returns:
            Solution of shape (columns,) or (columns, nrhs)

        Raises:
            NotAvailableError: If decompose() has not completed
            DimensionError: If b rows differ from the input rows
            ValidationError: If tolerance is negative
            RankDeficientMatrixError: If A is rank deficient within tolerance
        """
        self._require_decomposition()
        rows, columns = self._r.shape
        b = check_rhs(b, rows, 'b')
        check_non_negative(tolerance, 'tolerance')

        if not self.is_full_rank(tolerance):
            rank = int(np.sum(np.abs(np.diag(self._r)) > tolerance))
            raise RankDeficientMatrixError(
                f"matrix is rank deficient: rank {rank} < {columns} "
                f"(tolerance {tolerance})",
                matrix_name='matrix',
                rank=rank,
                expected_rank=columns,
                tolerance=tolerance,
            )

        y = self._q.T @ b
        x = solve_triangular(
            self._r[:columns, :columns], y[:columns], lower=False,
            check_finite=False,
        )
        return write_out(x, out)
