"""
Economy (thin) QR decomposition.

Stores the Householder vectors in place, in the lower trapezoid of an
m x n work array, and the diagonal of R separately. Q (m x n, orthonormal
columns) is only formed on request; solve() applies the reflectors to the
right-hand side directly.
"""

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.linalg import solve_triangular

from pyalgebra.core.exceptions import DimensionError, RankDeficientMatrixError
from pyalgebra.core.validation import check_non_negative, check_rhs
from pyalgebra.decomposition._lifecycle import BaseDecomposer, DecomposerType, write_out


DEFAULT_ROUND_ERROR: float = 0.0
MIN_ROUND_ERROR: float = 0.0


class EconomyQRDecomposer(BaseDecomposer):
    """Compact Householder QR decomposer for matrices with rows >= columns."""

    _TYPE = DecomposerType.QR_ECONOMY_DECOMPOSITION

    def _clear(self) -> None:
        self._qr: NDArray[np.floating[Any]] | None = None
        self._r_diag: NDArray[np.floating[Any]] | None = None

    def _decompose(self, matrix: NDArray[np.floating[Any]]) -> None:
        rows, columns = matrix.shape
        if rows < columns:
            raise self._precondition_failed(DimensionError(
                f"matrix: economy QR requires rows >= columns, got {rows}x{columns}"
            ))

        qr = matrix.copy()
        r_diag = np.zeros(columns)

        for k in range(columns):
            nrm = float(np.linalg.norm(qr[k:, k]))
            if nrm != 0.0:
                if qr[k, k] < 0.0:
                    nrm = -nrm
                qr[k:, k] /= nrm
                qr[k, k] += 1.0

                if k + 1 < columns:
                    s = -(qr[k:, k] @ qr[k:, k + 1:]) / qr[k, k]
                    qr[k:, k + 1:] += np.outer(qr[k:, k], s)
            r_diag[k] = -nrm

        self._qr = qr
        self._r_diag = r_diag

    @property
    def H(self) -> NDArray[np.floating[Any]]:
        """Householder vectors (rows x columns, lower trapezoidal)."""
        self._require_decomposition()
        return np.tril(self._qr)

    @property
    def R(self) -> NDArray[np.floating[Any]]:
        """Upper triangular factor (columns x columns)."""
        self._require_decomposition()
        columns = self._qr.shape[1]
        return np.triu(self._qr[:columns, :], 1) + np.diag(self._r_diag)

    @property
    def Q(self) -> NDArray[np.floating[Any]]:
        """Factor with orthonormal columns (rows x columns)."""
        self._require_decomposition()
        rows, columns = self._qr.shape
        q = np.zeros((rows, columns))
        for k in range(columns - 1, -1, -1):
            q[k, k] = 1.0
            if self._qr[k, k] != 0.0:
                h = self._qr[k:, k]
                s = -(h @ q[k:, k:]) / self._qr[k, k]
                q[k:, k:] += np.outer(h, s)
        return q

    def is_full_rank(self, tolerance: float = DEFAULT_ROUND_ERROR) -> bool:
        """
        Check whether every diagonal entry of R exceeds tolerance in magnitude.

        Raises:
            NotAvailableError: If decompose() has not completed
            ValidationError: If tolerance is negative
        """
        self._require_decomposition()
        check_non_negative(tolerance, 'tolerance')
        return bool(np.all(np.abs(self._r_diag) > tolerance))

    def solve(
        self,
        b: ArrayLike,
        tolerance: float = DEFAULT_ROUND_ERROR,
        out: NDArray[np.floating[Any]] | None = None,
    ) -> NDArray[np.floating[Any]]:
        """
        Least squares solve of A @ x = b.

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
        rows, columns = self._qr.shape
        b = check_rhs(b, rows, 'b')
        check_non_negative(tolerance, 'tolerance')

        if not self.is_full_rank(tolerance):
            rank = int(np.sum(np.abs(self._r_diag) > tolerance))
            raise RankDeficientMatrixError(
                f"matrix is rank deficient: rank {rank} < {columns} "
                f"(tolerance {tolerance})",
                matrix_name='matrix',
                rank=rank,
                expected_rank=columns,
                tolerance=tolerance,
            )

        # Q.T @ b, one reflector at a time
        y = b.reshape(rows, -1).copy()
        for k in range(columns):
            h = self._qr[k:, k]
            s = -(h @ y[k:, :]) / self._qr[k, k]
            y[k:, :] += np.outer(h, s)

        x = solve_triangular(self.R, y[:columns], lower=False, check_finite=False)
        if b.ndim == 1:
            x = x[:, 0]
        return write_out(x, out)
