"""
Linear system solver dispatch.

This module provides the solve() function (public API) and decomposer
selection.
"""

from dataclasses import dataclass
from typing import Any, Literal

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.compute.timing import Timer
from pyalgebra.core.exceptions import ValidationError
from pyalgebra.core.result import Result
from pyalgebra.core.validation import check_matrix, check_rhs, check_non_negative, check_square
from pyalgebra.decomposition import (
    CholeskyDecomposer,
    EconomyQRDecomposer,
    LUDecomposer,
    QRDecomposer,
    SingularValueDecomposer,
    gauss_jordan,
)
from pyalgebra.decomposition._lifecycle import BaseDecomposer
from pyalgebra.norms import frobenius_norm


MethodChoice = Literal['auto', 'lu', 'qr', 'economy_qr', 'cholesky', 'svd', 'gauss_jordan']

_DECOMPOSERS: dict[str, type[BaseDecomposer]] = {
    'lu': LUDecomposer,
    'qr': QRDecomposer,
    'economy_qr': EconomyQRDecomposer,
    'cholesky': CholeskyDecomposer,
    'svd': SingularValueDecomposer,
}


@dataclass(frozen=True)
class SolveParams:
    """
    Parameter payload of a linear solve.

    Attributes:
        solution: x with A @ x ~= B, shape (columns,) or (columns, nrhs)
        residual_norm: Frobenius norm of A @ x - B
    """
    solution: NDArray[np.floating[Any]]
    residual_norm: float


def solve(
    A: ArrayLike,
    B: ArrayLike,
    *,
    method: MethodChoice = 'auto',
    tolerance: float | None = None,
) -> Result[SolveParams]:
    """
    Solve the linear system A @ x = B.

    This is the primary public API for one-shot solves. Validation,
    decomposer selection and result wrapping happen here.

    Args:
        A: Coefficient matrix (m x n). Can be any array-like.
        B: Right-hand side, (m,) or (m, nrhs). Can be any array-like.
        method: Algorithm to use:
            - 'auto': LU for square, QR for tall, SVD for wide matrices
            - 'lu': Partial-pivoting LU (square only)
            - 'qr': Householder QR least squares (m >= n)
            - 'economy_qr': Compact Householder QR least squares (m >= n)
            - 'cholesky': Cholesky (symmetric positive definite only)
            - 'svd': Pseudoinverse, minimum-norm least squares
            - 'gauss_jordan': Full-pivoting elimination (square only)
        tolerance: Singularity/rank tolerance (LU, QR, Gauss-Jordan) or
            singular value threshold (SVD). None uses each method's default.
            Cholesky has no tolerance and accepts only None.

    Returns:
        Result[SolveParams] with the solution and its residual norm

    Raises:
        ValidationError: If inputs are invalid, method is unknown, or a
            tolerance is given for Cholesky
        DimensionError: If A and B have inconsistent dimensions
        DecomposerError: If A violates the chosen method's shape requirement
        SingularMatrixError: If A is singular (LU, Gauss-Jordan)
        RankDeficientMatrixError: If A is rank deficient (QR methods)
        NotPositiveDefiniteError: If A is not SPD (Cholesky)

    Example:
        >>> import numpy as np
        >>> from pyalgebra import solve
        >>>
        >>> A = np.array([[4.0, 1.0], [1.0, 3.0]])
        >>> result = solve(A, [1.0, 2.0])
        >>> print(result.params.solution)
    """
    # === Input Validation ===
    # This is the boundary - validate here, trust everywhere else
    A_arr = check_matrix(A, 'A')
    B_arr = check_rhs(B, A_arr.shape[0], 'B')
    if tolerance is not None:
        check_non_negative(tolerance, 'tolerance')

    chosen = _select_method(method, A_arr.shape)
    if chosen == 'cholesky' and tolerance is not None:
        raise ValidationError("tolerance: not supported by the cholesky method")
    warnings_list: list[str] = []
    info: dict[str, Any] = {
        'method': chosen,
        'shape': A_arr.shape,
    }

    timer = Timer()
    timer.start()

    # === Solve ===
    if chosen == 'gauss_jordan':
        check_square(A_arr, 'A')
        solution = np.array(B_arr, dtype=np.float64, copy=True)
        work = A_arr.copy()
        with timer.section('solve'):
            if tolerance is None:
                gauss_jordan(work, solution)
            else:
                gauss_jordan(work, solution, tolerance)
        info['decomposer_type'] = None
    else:
        decomposer = _DECOMPOSERS[chosen](A_arr)
        with timer.section('decompose'):
            decomposer.decompose()
        with timer.section('solve'):
            if tolerance is None:
                solution = decomposer.solve(B_arr)
            else:
                solution = decomposer.solve(B_arr, tolerance)
        info['decomposer_type'] = decomposer.decomposer_type

        if isinstance(decomposer, SingularValueDecomposer):
            info['rank'] = decomposer.rank(tolerance)
            info['converged'] = decomposer.converged
            if not decomposer.converged:
                warnings_list.append(
                    f"SVD did not converge within {decomposer.max_iterations} iterations"
                )

    timer.stop()

    residual = frobenius_norm(A_arr @ solution - B_arr)

    # === Wrap and Return ===
    return Result(
        params=SolveParams(solution=solution, residual_norm=residual),
        info=info,
        timing=timer.result(),
        backend_name=f'cpu_{chosen}',
        warnings=tuple(warnings_list),
    )


def _select_method(choice: MethodChoice, shape: tuple[int, int]) -> str:
    """
    Resolve the method choice to a concrete algorithm.

    Args:
        choice: User's method preference
        shape: Shape of the coefficient matrix

    Returns:
        One of the explicit method names

    Raises:
        ValidationError: If unknown method specified
    """
    if choice == 'auto':
        rows, columns = shape
        if rows == columns:
            return 'lu'
        if rows > columns:
            return 'qr'
        return 'svd'

    if choice in _DECOMPOSERS or choice == 'gauss_jordan':
        return choice

    raise ValidationError(f"method: unknown method {choice!r}")
