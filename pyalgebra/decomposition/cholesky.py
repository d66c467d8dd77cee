"""
Cholesky decomposition.

A symmetric positive definite matrix factors as A = L @ L.T with L lower
triangular (equivalently A = R.T @ R with R = L.T upper triangular).

The factor is computed column by column. Instead of failing, the
decomposition records whether A is symmetric positive definite (is_spd) and
clamps negative diagonal residuals to zero, so a non-SPD input still yields
a (meaningless but finite) factor. solve() refuses non-SPD inputs.
"""

import math
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.linalg import solve_triangular

from pyalgebra.core.exceptions import DimensionError, NotPositiveDefiniteError
from pyalgebra.core.validation import check_rhs
from pyalgebra.decomposition._lifecycle import BaseDecomposer, DecomposerType, write_out


class CholeskyDecomposer(BaseDecomposer):
    """Cholesky decomposer for square matrices."""

    _TYPE = DecomposerType.CHOLESKY_DECOMPOSITION

    def _clear(self) -> None:
        self._r: NDArray[np.floating[Any]] | None = None
        self._spd = False

    def _decompose(self, matrix: NDArray[np.floating[Any]]) -> None:
        rows, columns = matrix.shape
        if rows != columns:
            raise self._precondition_failed(DimensionError(
                f"matrix: Cholesky requires a square matrix, got {rows}x{columns}"
            ))

        n = rows
        r = np.zeros((n, n))
        # Exact comparison; NaN entries make the matrix non-symmetric
        spd = bool(np.array_equal(matrix, matrix.T))

        with np.errstate(divide='ignore', invalid='ignore'):
            for j in range(n):
                d = 0.0
                for k in range(j):
                    s = (matrix[k, j] - r[:k, k] @ r[:k, j]) / r[k, k]
                    r[k, j] = s
                    d += s * s
                d = matrix[j, j] - d
                spd = spd and d > 0.0
                r[j, j] = math.sqrt(max(d, 0.0))

        self._r = r
        self._spd = bool(spd)

    @property
    def is_spd(self) -> bool:
        """True if the input matrix is symmetric positive definite."""
        self._require_decomposition()
        return self._spd

    @property
    def R(self) -> NDArray[np.floating[Any]]:
        """Upper triangular factor with R.T @ R == A."""
        self._require_decomposition()
        return self._r.copy()

    @property
    def L(self) -> NDArray[np.floating[Any]]:
        """Lower triangular factor with L @ L.T == A."""
        self._require_decomposition()
        return self._r.T.copy()

    def solve(
        self,
        b: ArrayLike,
        out: NDArray[np.floating[Any]] | None = None,
    ) -> NDArray[np.floating[Any]]:
        """
        Solve A @ x = b for symmetric positive definite A.

        Args:
            b: Right-hand side, 1D (rows,) or 2D (rows, nrhs)
            out: Optional destination with the solution's shape

        Returns:
            Solution with the same dimensionality as b

        Raises:
            NotAvailableError: If decompose() has not completed
            DimensionError: If b rows differ from the input rows
            NotPositiveDefiniteError: If the input is not SPD
        """
        self._require_decomposition()
        b = check_rhs(b, self._r.shape[0], 'b')
        if not self._spd:
            raise NotPositiveDefiniteError(
                "matrix is not symmetric positive definite",
                matrix_name='matrix',
            )

        y = solve_triangular(self._r, b, trans='T', lower=False, check_finite=False)
        x = solve_triangular(self._r, y, lower=False, check_finite=False)
        return write_out(x, out)
