"""
RQ decomposition.

Computes A = R @ Q for an m x n matrix of any shape, with Q n x n
orthogonal and R m x n upper triangular anchored at the bottom-right corner
(R == triu(R, n - m)). This matches the LAPACK/scipy.linalg.rq convention.

RQ is obtained from the Householder QR of the row-flipped transpose:
flipud(A).T = Q2 @ R2 gives R = J_m @ R2.T @ J_n and Q = J_n @ Q2.T, where
J is the exchange (anti-identity) matrix.
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyalgebra.decomposition._lifecycle import BaseDecomposer, DecomposerType
from pyalgebra.decomposition.qr import householder_qr


class RQDecomposer(BaseDecomposer):
    """RQ decomposer for matrices of any shape."""

    _TYPE = DecomposerType.RQ_DECOMPOSITION

    def _clear(self) -> None:
        self._q: NDArray[np.floating[Any]] | None = None
        self._r: NDArray[np.floating[Any]] | None = None

    def _decompose(self, matrix: NDArray[np.floating[Any]]) -> None:
        q2, r2 = householder_qr(matrix[::-1, :].T)
        self._r = np.ascontiguousarray(r2.T[::-1, ::-1])
        self._q = np.ascontiguousarray(q2.T[::-1, :])

    @property
    def R(self) -> NDArray[np.floating[Any]]:
        """Upper triangular factor (rows x columns), anchored bottom-right."""
        self._require_decomposition()
        return self._r.copy()

    @property
    def Q(self) -> NDArray[np.floating[Any]]:
        """Orthogonal factor (columns x columns)."""
        self._require_decomposition()
        return self._q.copy()
