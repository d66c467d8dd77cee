"""
Gauss-Jordan elimination with full pivoting.

Operates in place: on return the coefficient matrix holds its inverse and the
right-hand side (if any) holds the solution. There is no lifecycle; these are
plain functions on caller-owned arrays.

NaN entries are not rejected. They are never preferred as pivots and spread
through the elimination arithmetic, so a matrix containing NaN yields NaN in
its inverse and solution rather than an error.
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyalgebra.core.exceptions import DimensionError, SingularMatrixError, ValidationError
from pyalgebra.core.validation import (
    check_2d,
    check_consistent_rows,
    check_non_empty,
    check_non_negative,
    check_square,
)


DEFAULT_ROUND_ERROR: float = 0.0


def _check_writable_float(array: Any, name: str) -> None:
    if not isinstance(array, np.ndarray):
        raise ValidationError(
            f"{name}: expected numpy.ndarray for in-place elimination, got {type(array).__name__}"
        )
    if not np.issubdtype(array.dtype, np.floating):
        raise ValidationError(f"{name}: expected floating dtype, got {array.dtype}")
    if not array.flags.writeable:
        raise ValidationError(f"{name}: array is read-only")


def gauss_jordan(
    a: NDArray[np.floating[Any]],
    b: NDArray[np.floating[Any]] | None = None,
    tolerance: float = DEFAULT_ROUND_ERROR,
) -> None:
    """
    Invert a and solve a @ x = b in place.

    Args:
        a: Square float matrix (n x n); overwritten with its inverse
        b: Optional float right-hand side, 1D (n,) or 2D (n, nrhs);
            overwritten with the solution
        tolerance: Pivots with magnitude <= tolerance are treated as zero

    Raises:
        ValidationError: If a or b is not a writable float ndarray, or
            tolerance is negative
        DimensionError: If a is not square or b rows do not match
        SingularMatrixError: If a is singular within tolerance; a and b are
            left partially reduced
    """
    _check_writable_float(a, 'a')
    check_2d(a, 'a')
    check_non_empty(a, 'a')
    check_square(a, 'a')
    n = a.shape[0]

    rhs = None
    if b is not None:
        _check_writable_float(b, 'b')
        if b.ndim not in (1, 2):
            raise DimensionError(
                f"b: expected 1D or 2D array, got {b.ndim}D with shape {b.shape}"
            )
        check_consistent_rows(n, b, 'b')
        rhs = b[:, np.newaxis] if b.ndim == 1 else b
    check_non_negative(tolerance, 'tolerance')

    ipiv = np.zeros(n, dtype=np.intp)
    indxr = np.zeros(n, dtype=np.intp)
    indxc = np.zeros(n, dtype=np.intp)

    for i in range(n):
        # Largest remaining element, last one in row-major order on ties.
        # NaN never wins a comparison; when only NaN remains it becomes the
        # pivot and propagates into the results.
        candidate_rows = np.flatnonzero(ipiv != 1)
        candidate_cols = np.flatnonzero(ipiv == 0)
        block = np.abs(a[np.ix_(candidate_rows, candidate_cols)])
        block = np.where(np.isnan(block), -1.0, block).ravel()
        position = block.size - 1 - int(np.argmax(block[::-1]))
        irow = int(candidate_rows[position // len(candidate_cols)])
        icol = int(candidate_cols[position % len(candidate_cols)])

        ipiv[icol] += 1
        if irow != icol:
            a[[irow, icol], :] = a[[icol, irow], :]
            if rhs is not None:
                rhs[[irow, icol], :] = rhs[[icol, irow], :]
        indxr[i] = irow
        indxc[i] = icol

        pivot = a[icol, icol]
        if abs(pivot) <= tolerance:
            raise SingularMatrixError(
                f"a: matrix is singular (pivot {abs(pivot)} <= tolerance {tolerance})",
                matrix_name='a',
                rank=i,
                expected_rank=n,
            )

        pivinv = 1.0 / pivot
        a[icol, icol] = 1.0
        a[icol, :] *= pivinv
        if rhs is not None:
            rhs[icol, :] *= pivinv

        others = np.arange(n) != icol
        factors = a[others, icol].copy()
        a[others, icol] = 0.0
        a[others, :] -= np.outer(factors, a[icol, :])
        if rhs is not None:
            rhs[others, :] -= np.outer(factors, rhs[icol, :])

    # Undo the column interchanges in reverse order
    for k in range(n - 1, -1, -1):
        if indxr[k] != indxc[k]:
            a[:, [indxr[k], indxc[k]]] = a[:, [indxc[k], indxr[k]]]


def inverse(
    a: NDArray[np.floating[Any]],
    tolerance: float = DEFAULT_ROUND_ERROR,
) -> None:
    """
    Invert a square float matrix in place.

    Raises:
        ValidationError: If a is not a writable float ndarray
        DimensionError: If a is not square
        SingularMatrixError: If a is singular within tolerance
    """
    gauss_jordan(a, None, tolerance)
