"""
Input validation utilities for PyAlgebra.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - No default handling of edge cases
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages

NaN and Inf are deliberately NOT rejected by the matrix validators:
decomposers propagate them per IEEE 754. Callers that need finite data
opt in with check_finite().
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any

from pyalgebra.core.exceptions import ValidationError, DimensionError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to numpy array.

    Accepts any array-like and converts to numpy array. Rejects inputs
    that result in object dtype (indicating mixed types or non-numeric data).

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with floating dtype

    Raises:
        ValidationError: If input cannot be converted to numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )

    # Reject non-numeric dtypes (strings, bytes, datetime, etc.)
    if not np.issubdtype(result.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    if np.issubdtype(result.dtype, np.complexfloating):
        raise ValidationError(
            f"{name}: complex dtype {result.dtype}, expected real data"
        )

    if not np.issubdtype(result.dtype, np.floating):
        result = result.astype(np.float64)

    return result


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array contains no NaN or Inf values.

    Args:
        array: Array to check
        name: Parameter name for error messages

    Raises:
        ValidationError: If array contains non-finite values
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_ndim(array: NDArray[np.floating[Any]], ndim: int, name: str) -> None:
    """
    Verify array has exactly the specified number of dimensions.

    Args:
        array: Array to check
        ndim: Required number of dimensions
        name: Parameter name for error messages

    Raises:
        DimensionError: If array has wrong number of dimensions
    """
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_1d(array: NDArray[np.floating[Any]], name: str) -> None:
    """Verify array is 1-dimensional."""
    check_ndim(array, 1, name)


def check_2d(array: NDArray[np.floating[Any]], name: str) -> None:
    """Verify array is 2-dimensional."""
    check_ndim(array, 2, name)


def check_non_empty(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify every dimension of the array has at least one element.

    Args:
        array: Array to check
        name: Parameter name for error messages

    Raises:
        DimensionError: If any dimension has length zero
    """
    if any(length < 1 for length in array.shape):
        raise DimensionError(
            f"{name}: every dimension must have at least 1 element, got shape {array.shape}"
        )


def check_square(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify a 2D array is square.

    Args:
        array: 2D array to check
        name: Parameter name for error messages

    Raises:
        DimensionError: If rows != columns
    """
    rows, columns = array.shape
    if rows != columns:
        raise DimensionError(
            f"{name}: expected square matrix, got {rows}x{columns}"
        )


def check_consistent_rows(
    expected_rows: int,
    array: NDArray[np.floating[Any]],
    name: str,
) -> None:
    """
    Verify a right-hand side has the same number of rows as its system.

    Args:
        expected_rows: Rows of the coefficient matrix
        array: Right-hand side (1D or 2D)
        name: Parameter name for error messages

    Raises:
        DimensionError: If the row counts differ
    """
    if array.shape[0] != expected_rows:
        raise DimensionError(
            f"{name}: expected {expected_rows} rows, got {array.shape[0]}"
        )


def check_non_negative(value: float, name: str) -> None:
    """
    Verify a scalar parameter (tolerance, threshold) is not negative.

    Args:
        value: Scalar to check
        name: Parameter name for error messages

    Raises:
        ValidationError: If value < 0
    """
    if value < 0.0:
        raise ValidationError(f"{name}: must be non-negative, got {value}")


def check_min_value(value: int, min_value: int, name: str) -> None:
    """
    Verify an integer parameter is at least min_value.

    Args:
        value: Integer to check
        min_value: Smallest accepted value
        name: Parameter name for error messages

    Raises:
        ValidationError: If value < min_value
    """
    if value < min_value:
        raise ValidationError(
            f"{name}: must be at least {min_value}, got {value}"
        )


def check_probability(value: float, name: str) -> None:
    """
    Verify a probability lies strictly between 0 and 1.

    Args:
        value: Probability to check
        name: Parameter name for error messages

    Raises:
        ValidationError: If value is not in (0, 1)
    """
    if not 0.0 < value < 1.0:
        raise ValidationError(
            f"{name}: probability must be strictly between 0.0 and 1.0, got {value}"
        )


def check_matrix(matrix: ArrayLike, name: str) -> NDArray[np.floating[Any]]:
    """
    Validate a matrix operand and return a private float64 copy.

    Args:
        matrix: Array-like to validate
        name: Parameter name for error messages

    Returns:
        2D float64 array owned by the caller of this function

    Raises:
        ValidationError: If input is not numeric
        DimensionError: If input is not 2D or has an empty dimension
    """
    result = check_array(matrix, name)
    check_2d(result, name)
    check_non_empty(result, name)
    return np.array(result, dtype=np.float64, copy=True)


def check_rhs(
    b: ArrayLike,
    expected_rows: int,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate a right-hand side of a linear system.

    Args:
        b: 1D (single column) or 2D right-hand side
        expected_rows: Rows of the coefficient matrix
        name: Parameter name for error messages

    Returns:
        float64 array with the same dimensionality as b

    Raises:
        ValidationError: If input is not numeric
        DimensionError: If b is not 1D/2D or its rows do not match
    """
    result = check_array(b, name)
    if result.ndim not in (1, 2):
        raise DimensionError(
            f"{name}: expected 1D or 2D array, got {result.ndim}D with shape {result.shape}"
        )
    check_non_empty(result, name)
    check_consistent_rows(expected_rows, result, name)
    return np.asarray(result, dtype=np.float64)
