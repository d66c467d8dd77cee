"""
Singular value decomposition.

Computes the thin SVD A = U @ diag(w) @ V.T of an m x n matrix, with
k = min(m, n), U m x k and V n x k with orthonormal columns, and w the k
singular values sorted in descending order.

Algorithm (Golub-Kahan-Reinsch):
    1. Householder reduction to upper bidiagonal form
    2. Accumulation of the right-hand and left-hand transformations
    3. Implicit-shift QR diagonalisation of the bidiagonal matrix with
       Givens rotations, at most max_iterations sweeps per singular value

Wide matrices are decomposed through their transpose with the roles of U
and V swapped.

Non-convergence: by default the best available values are kept, a
RuntimeWarning is emitted and the `converged` property is False. With
strict=True a ConvergenceError is raised instead and no factors are cached.

The SVD is the most robust decomposer in the package: rank, nullity, range
and null space queries and the pseudoinverse solve all derive from it.
"""

import math
import warnings
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.compute.precision import SVD_EPSILON, pythag, sign
from pyalgebra.core.exceptions import ConvergenceError, NotAvailableError
from pyalgebra.core.validation import check_min_value, check_non_negative, check_rhs
from pyalgebra.decomposition._lifecycle import BaseDecomposer, DecomposerType, write_out


DEFAULT_MAX_ITERATIONS: int = 30
MIN_ITERATIONS: int = 1
EPS: float = SVD_EPSILON


def _golub_kahan(
    u: NDArray[np.floating[Any]],
    max_iterations: int,
    strict: bool,
) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]], bool, int]:
    """
    In-place SVD kernel for a tall matrix.

    Args:
        u: m x n work array with m >= n; overwritten with U
        max_iterations: Sweeps allowed per singular value
        strict: Raise ConvergenceError instead of flagging non-convergence

    Returns:
        Tuple (w, v, converged, failed_index) where w holds the unsorted
        non-negative singular values, v is n x n, and failed_index is the
        last singular value that did not converge (-1 if all did)

    Raises:
        ConvergenceError: In strict mode, if a singular value does not converge
    """
    m, n = u.shape
    w = np.zeros(n)
    v = np.zeros((n, n))
    rv1 = np.zeros(n)
    g = scale = anorm = 0.0
    l = 0

    # Householder reduction to bidiagonal form
    for i in range(n):
        l = i + 2
        rv1[i] = scale * g
        g = s = scale = 0.0
        if i < m:
            scale = np.sum(np.abs(u[i:, i]))
            if scale != 0.0:
                u[i:, i] /= scale
                s = u[i:, i] @ u[i:, i]
                f = u[i, i]
                g = -sign(math.sqrt(s), f)
                h = f * g - s
                u[i, i] = f - g
                if l - 1 < n:
                    s_row = u[i:, i] @ u[i:, l - 1:]
                    u[i:, l - 1:] += np.outer(u[i:, i], s_row / h)
                u[i:, i] *= scale
        w[i] = scale * g

        g = s = scale = 0.0
        if i + 1 <= m and i + 1 != n:
            scale = np.sum(np.abs(u[i, l - 1:]))
            if scale != 0.0:
                u[i, l - 1:] /= scale
                s = u[i, l - 1:] @ u[i, l - 1:]
                f = u[i, l - 1]
                g = -sign(math.sqrt(s), f)
                h = f * g - s
                u[i, l - 1] = f - g
                rv1[l - 1:] = u[i, l - 1:] / h
                if l - 1 < m:
                    s_col = u[l - 1:, l - 1:] @ u[i, l - 1:]
                    u[l - 1:, l - 1:] += np.outer(s_col, rv1[l - 1:])
                u[i, l - 1:] *= scale
        anorm = max(anorm, abs(w[i]) + abs(rv1[i]))

    # Accumulation of right-hand transformations
    for i in range(n - 1, -1, -1):
        if i < n - 1:
            if g != 0.0:
                v[l:, i] = (u[i, l:] / u[i, l]) / g
                s_row = u[i, l:] @ v[l:, l:]
                v[l:, l:] += np.outer(v[l:, i], s_row)
            v[i, l:] = 0.0
            v[l:, i] = 0.0
        v[i, i] = 1.0
        g = rv1[i]
        l = i

    # Accumulation of left-hand transformations
    for i in range(min(m, n) - 1, -1, -1):
        l = i + 1
        g = w[i]
        u[i, l:] = 0.0
        if g != 0.0:
            g = 1.0 / g
            if l < n:
                s_row = u[l:, i] @ u[l:, l:]
                f_row = (s_row / u[i, i]) * g
                u[i:, l:] += np.outer(u[i:, i], f_row)
            u[i:, i] *= g
        else:
            u[i:, i] = 0.0
        u[i, i] += 1.0

    # Diagonalisation of the bidiagonal form
    converged = True
    failed_index = -1
    for k in range(n - 1, -1, -1):
        for its in range(max_iterations):
            flag = True
            nm = 0
            for l in range(k, -1, -1):
                nm = l - 1
                if l == 0 or abs(rv1[l]) <= EPS * anorm:
                    flag = False
                    break
                if abs(w[nm]) <= EPS * anorm:
                    break

            if flag:
                # Cancel rv1[l] when w[l - 1] is negligible
                c = 0.0
                s = 1.0
                for i in range(l, k + 1):
                    f = s * rv1[i]
                    rv1[i] = c * rv1[i]
                    if abs(f) <= EPS * anorm:
                        break
                    g = w[i]
                    h = pythag(f, g)
                    w[i] = h
                    h = 1.0 / h
                    c = g * h
                    s = -f * h
                    y = u[:, nm].copy()
                    z = u[:, i].copy()
                    u[:, nm] = y * c + z * s
                    u[:, i] = z * c - y * s

            z = w[k]
            if l == k:
                if z < 0.0:
                    w[k] = -z
                    v[:, k] = -v[:, k]
                break

            if its == max_iterations - 1:
                if strict:
                    raise ConvergenceError(
                        f"SVD: singular value {k} did not converge in "
                        f"{max_iterations} iterations",
                        iterations=max_iterations,
                        final_change=float(abs(rv1[k])),
                        reason='max_iterations',
                        threshold=float(EPS * anorm),
                    )
                converged = False
                failed_index = max(failed_index, k)
                if w[k] < 0.0:
                    w[k] = -w[k]
                    v[:, k] = -v[:, k]
                break

            # Shift from the bottom 2 x 2 minor
            x = w[l]
            nm = k - 1
            y = w[nm]
            g = rv1[nm]
            h = rv1[k]
            f = ((y - z) * (y + z) + (g - h) * (g + h)) / (2.0 * h * y)
            g = pythag(f, 1.0)
            f = ((x - z) * (x + z) + h * ((y / (f + sign(g, f))) - h)) / x

            # QR sweep
            c = s = 1.0
            for j in range(l, nm + 1):
                i = j + 1
                g = rv1[i]
                y = w[i]
                h = s * g
                g = c * g
                z = pythag(f, h)
                rv1[j] = z
                c = f / z
                s = h / z
                f = x * c + g * s
                g = g * c - x * s
                h = y * s
                y *= c
                xv = v[:, j].copy()
                zv = v[:, i].copy()
                v[:, j] = xv * c + zv * s
                v[:, i] = zv * c - xv * s
                z = pythag(f, h)
                w[j] = z
                if z != 0.0:
                    z = 1.0 / z
                    c = f * z
                    s = h * z
                f = c * g + s * y
                x = c * y - s * g
                yu = u[:, j].copy()
                zu = u[:, i].copy()
                u[:, j] = yu * c + zu * s
                u[:, i] = zu * c - yu * s
            rv1[l] = 0.0
            rv1[k] = f
            w[k] = x

    return w, v, converged, failed_index


class SingularValueDecomposer(BaseDecomposer):
    """
    Thin SVD decomposer for matrices of any shape.

    Usage:
        decomposer = SingularValueDecomposer(A)
        decomposer.decompose()
        rank = decomposer.rank()
        x = decomposer.solve(b)    # minimum-norm least squares
    """

    _TYPE = DecomposerType.SINGULAR_VALUE_DECOMPOSITION

    def __init__(
        self,
        matrix: ArrayLike | None = None,
        *,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        strict: bool = False,
    ):
        check_min_value(max_iterations, MIN_ITERATIONS, 'max_iterations')
        self._max_iterations = int(max_iterations)
        self._strict = strict
        super().__init__(matrix)

    def _clear(self) -> None:
        self._u: NDArray[np.floating[Any]] | None = None
        self._w: NDArray[np.floating[Any]] | None = None
        self._v: NDArray[np.floating[Any]] | None = None
        self._converged = False
        self._threshold = 0.0

    @property
    def max_iterations(self) -> int:
        """Maximum diagonalisation sweeps per singular value."""
        return self._max_iterations

    @max_iterations.setter
    def max_iterations(self, value: int) -> None:
        self._lifecycle.check_not_locked()
        check_min_value(value, MIN_ITERATIONS, 'max_iterations')
        self._max_iterations = int(value)

    @property
    def strict(self) -> bool:
        """Whether non-convergence raises ConvergenceError."""
        return self._strict

    def _decompose(self, matrix: NDArray[np.floating[Any]]) -> None:
        rows, columns = matrix.shape
        transposed = rows < columns
        work = matrix.T.copy() if transposed else matrix.copy()

        with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
            w, v, converged, failed_index = _golub_kahan(
                work, self._max_iterations, self._strict
            )
        u = work

        order = np.argsort(-w, kind='stable')
        w = w[order]
        u = u[:, order]
        v = v[:, order]

        # Flip column pairs whose entries are mostly negative
        negatives = np.sum(u < 0.0, axis=0) + np.sum(v < 0.0, axis=0)
        flip = negatives > (rows + columns) // 2
        u[:, flip] = -u[:, flip]
        v[:, flip] = -v[:, flip]

        if transposed:
            u, v = v, u

        self._u = u
        self._w = w
        self._v = v
        self._converged = converged
        self._threshold = 0.5 * math.sqrt(rows + columns + 1.0) * w[0] * EPS

        if not converged:
            warnings.warn(
                f"SVD: singular value {failed_index} did not converge in "
                f"{self._max_iterations} iterations; keeping best available values",
                RuntimeWarning,
                stacklevel=3,
            )

    # ═══════════════════════════════════════════════════════════════════
    # Factors
    # ═══════════════════════════════════════════════════════════════════

    @property
    def U(self) -> NDArray[np.floating[Any]]:
        """Left singular vectors (rows x k)."""
        self._require_decomposition()
        return self._u.copy()

    @property
    def V(self) -> NDArray[np.floating[Any]]:
        """Right singular vectors (columns x k)."""
        self._require_decomposition()
        return self._v.copy()

    @property
    def W(self) -> NDArray[np.floating[Any]]:
        """Diagonal matrix of singular values (k x k)."""
        self._require_decomposition()
        return np.diag(self._w)

    @property
    def singular_values(self) -> NDArray[np.floating[Any]]:
        """Singular values in descending order (length k)."""
        self._require_decomposition()
        return self._w.copy()

    @property
    def converged(self) -> bool:
        """False if some singular value hit max_iterations."""
        self._require_decomposition()
        return self._converged

    # ═══════════════════════════════════════════════════════════════════
    # Queries
    # ═══════════════════════════════════════════════════════════════════

    @property
    def norm2(self) -> float:
        """Spectral norm: the largest singular value."""
        self._require_decomposition()
        return float(self._w[0])

    @property
    def negligible_singular_value_threshold(self) -> float:
        """Default threshold below which singular values count as zero."""
        self._require_decomposition()
        return float(self._threshold)

    @property
    def reciprocal_condition_number(self) -> float:
        """Smallest over largest singular value (0 for degenerate inputs)."""
        self._require_decomposition()
        largest = self._w[0]
        smallest = self._w[-1]
        if largest <= 0.0 or smallest <= 0.0:
            return 0.0
        return float(smallest / largest)

    @property
    def condition_number(self) -> float:
        """Largest over smallest singular value (inf for degenerate inputs)."""
        rcond = self.reciprocal_condition_number
        if rcond == 0.0:
            return math.inf
        return 1.0 / rcond

    def _resolve_threshold(self, threshold: float | None) -> float:
        if threshold is None:
            return self._threshold
        check_non_negative(threshold, 'threshold')
        return threshold

    def _significant(self, threshold: float | None) -> NDArray[np.bool_]:
        self._require_decomposition()
        return self._w > self._resolve_threshold(threshold)

    def rank(self, threshold: float | None = None) -> int:
        """
        Number of singular values above threshold.

        Args:
            threshold: Non-negative cutoff; defaults to
                negligible_singular_value_threshold

        Raises:
            NotAvailableError: If decompose() has not completed
            ValidationError: If threshold is negative
        """
        return int(np.count_nonzero(self._significant(threshold)))

    def nullity(self, threshold: float | None = None) -> int:
        """Number of singular values at or below threshold (k - rank)."""
        return int(np.count_nonzero(~self._significant(threshold)))

    def range_space(self, threshold: float | None = None) -> NDArray[np.floating[Any]]:
        """
        Orthonormal basis of the range: columns of U above threshold.

        Raises:
            NotAvailableError: If not decomposed or the rank is zero
            ValidationError: If threshold is negative
        """
        mask = self._significant(threshold)
        if not mask.any():
            raise NotAvailableError("range space is empty: rank is 0")
        return self._u[:, mask].copy()

    def null_space(self, threshold: float | None = None) -> NDArray[np.floating[Any]]:
        """
        Orthonormal basis of the null space: columns of V at or below threshold.

        Raises:
            NotAvailableError: If not decomposed or the nullity is zero
            ValidationError: If threshold is negative
        """
        mask = ~self._significant(threshold)
        if not mask.any():
            raise NotAvailableError("null space is empty: nullity is 0")
        return self._v[:, mask].copy()

    def solve(
        self,
        b: ArrayLike,
        threshold: float | None = None,
        out: NDArray[np.floating[Any]] | None = None,
    ) -> NDArray[np.floating[Any]]:
        """
        Pseudoinverse solve of A @ x = b.

        Singular values at or below threshold are treated as zero, so the
        result is the minimum-norm least squares solution.

        Args:
            b: Right-hand side, 1D (rows,) or 2D (rows, nrhs)
            threshold: Non-negative cutoff; defaults to
                negligible_singular_value_threshold
            out: Optional destination with the solution's shape

        Returns:
            Solution of shape (columns,) or (columns, nrhs)

        Raises:
            NotAvailableError: If decompose() has not completed
            DimensionError: If b rows differ from the input rows
            ValidationError: If threshold is negative
        """
        self._require_decomposition()
        b = check_rhs(b, self._u.shape[0], 'b')
        mask = self._significant(threshold)

        inverse_w = np.zeros_like(self._w)
        inverse_w[mask] = 1.0 / self._w[mask]

        projected = self._u.T @ b
        if projected.ndim == 1:
            projected = projected * inverse_w
        else:
            projected = projected * inverse_w[:, np.newaxis]
        return write_out(self._v @ projected, out)
