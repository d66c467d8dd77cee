"""
Matrix and vector norms.

Norms are plain functions on array-likes; NormType selects one by name for
callers that carry the choice around as data.
"""

from enum import Enum
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.exceptions import DimensionError, ValidationError
from pyalgebra.core.validation import check_array, check_non_empty


class NormType(Enum):
    FROBENIUS_NORM = 'frobenius'
    ONE_NORM = 'one'
    INFINITY_NORM = 'infinity'


def _check_operand(x: ArrayLike) -> NDArray[np.floating[Any]]:
    array = check_array(x, 'x')
    if array.ndim not in (1, 2):
        raise DimensionError(
            f"x: expected vector or matrix, got {array.ndim}D with shape {array.shape}"
        )
    check_non_empty(array, 'x')
    return array


def frobenius_norm(x: ArrayLike) -> float:
    """Square root of the sum of squared entries (Euclidean norm for vectors)."""
    array = _check_operand(x)
    return float(np.linalg.norm(array.ravel()))


def one_norm(x: ArrayLike) -> float:
    """Maximum absolute column sum for matrices, sum of magnitudes for vectors."""
    array = _check_operand(x)
    if array.ndim == 1:
        return float(np.sum(np.abs(array)))
    return float(np.max(np.sum(np.abs(array), axis=0)))


def infinity_norm(x: ArrayLike) -> float:
    """Maximum absolute row sum for matrices, largest magnitude for vectors."""
    array = _check_operand(x)
    if array.ndim == 1:
        return float(np.max(np.abs(array)))
    return float(np.max(np.sum(np.abs(array), axis=1)))


_NORMS = {
    NormType.FROBENIUS_NORM: frobenius_norm,
    NormType.ONE_NORM: one_norm,
    NormType.INFINITY_NORM: infinity_norm,
}


def norm(x: ArrayLike, norm_type: NormType = NormType.FROBENIUS_NORM) -> float:
    """
    Compute the norm of a vector or matrix.

    Args:
        x: 1D or 2D array-like
        norm_type: Which norm to compute

    Returns:
        The norm as a Python float

    Raises:
        ValidationError: If x is not numeric or norm_type is unknown
        DimensionError: If x is not 1D/2D or is empty
    """
    try:
        compute = _NORMS[NormType(norm_type)]
    except ValueError as e:
        raise ValidationError(f"norm_type: unknown norm {norm_type!r}") from e
    return compute(x)


def norm_with_jacobian(
    v: ArrayLike,
) -> tuple[float, NDArray[np.floating[Any]]]:
    """
    Euclidean norm of a vector together with its derivative.

    Args:
        v: 1D array-like of length N

    Returns:
        Tuple (norm, jacobian) where jacobian is the 1 x N row v / norm

    Raises:
        DimensionError: If v is not a non-empty 1D array
    """
    array = _check_operand(v)
    if array.ndim != 1:
        raise DimensionError(f"v: expected 1D vector, got shape {array.shape}")
    value = float(np.linalg.norm(array))
    with np.errstate(divide='ignore', invalid='ignore'):
        jacobian = (array / value)[np.newaxis, :]
    return value, jacobian
