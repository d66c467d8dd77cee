"""
Shared decomposer lifecycle.

Every decomposer follows the same state machine:

    NOT_READY --set_input_matrix--> READY_NOT_DECOMPOSED
    READY_NOT_DECOMPOSED --decompose (transiently LOCKED)--> DECOMPOSED
    DECOMPOSED --set_input_matrix--> READY_NOT_DECOMPOSED

The state lives in a small holder object (DecomposerLifecycle) that each
decomposer owns. BaseDecomposer only supplies the default forwarding bodies
so concrete algorithms implement _decompose() and _clear() and nothing else
of the lifecycle.

The LOCKED state is a cooperative guard against re-entrant use, not a mutex.
Decomposers are not thread-safe.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum
from typing import Any, ClassVar, Iterator

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.exceptions import (
    DecomposerError,
    DimensionError,
    LockedError,
    NotAvailableError,
    NotReadyError,
    ValidationError,
)
from pyalgebra.core.validation import check_matrix


class DecomposerType(Enum):
    """Stable tag identifying each decomposition algorithm."""
    LU_DECOMPOSITION = 'lu'
    QR_DECOMPOSITION = 'qr'
    QR_ECONOMY_DECOMPOSITION = 'economy_qr'
    RQ_DECOMPOSITION = 'rq'
    CHOLESKY_DECOMPOSITION = 'cholesky'
    SINGULAR_VALUE_DECOMPOSITION = 'svd'


class DecomposerState(Enum):
    """Externally observable lifecycle state of a decomposer."""
    NOT_READY = 'not_ready'
    READY_NOT_DECOMPOSED = 'ready_not_decomposed'
    DECOMPOSED = 'decomposed'
    LOCKED = 'locked'


class DecomposerLifecycle:
    """
    State holder for the ready/locked/decomposed lifecycle.

    Invariants:
        - is_ready iff an input matrix is set
        - setting a new input matrix always clears is_available
        - is_locked is True only inside decomposing()
    """

    def __init__(self) -> None:
        self._input: NDArray[np.floating[Any]] | None = None
        self._locked = False
        self._available = False

    @property
    def input_matrix(self) -> NDArray[np.floating[Any]] | None:
        return self._input

    @property
    def is_ready(self) -> bool:
        return self._input is not None

    @property
    def is_locked(self) -> bool:
        return self._locked

    @property
    def is_available(self) -> bool:
        return self._available

    @property
    def state(self) -> DecomposerState:
        if self._locked:
            return DecomposerState.LOCKED
        if self._input is None:
            return DecomposerState.NOT_READY
        if self._available:
            return DecomposerState.DECOMPOSED
        return DecomposerState.READY_NOT_DECOMPOSED

    def check_not_locked(self) -> None:
        """
        Raises:
            LockedError: If a decomposition is running
        """
        if self._locked:
            raise LockedError("decomposer is locked while decompose() is running")

    def set_input(self, matrix: NDArray[np.floating[Any]]) -> None:
        """
        Store a new input matrix and invalidate the previous decomposition.

        Raises:
            LockedError: If a decomposition is running
        """
        self.check_not_locked()
        self._input = matrix
        self._available = False

    def require_available(self) -> None:
        """
        Raises:
            NotAvailableError: If no decomposition has completed since the
                last input change
        """
        if not self._available:
            raise NotAvailableError(
                "decomposition not available; call decompose() first"
            )

    @contextmanager
    def decomposing(self) -> Iterator[NDArray[np.floating[Any]]]:
        """
        Guard a decomposition run.

        Yields the input matrix while LOCKED. The decomposition becomes
        available only when the block exits without an exception; the lock is
        released either way.

        Raises:
            NotReadyError: If no input matrix is set
            LockedError: If a decomposition is already running
        """
        if self._input is None:
            raise NotReadyError("no input matrix provided; call set_input_matrix() first")
        self.check_not_locked()

        self._locked = True
        self._available = False
        try:
            yield self._input
        finally:
            self._locked = False
        self._available = True


class BaseDecomposer(ABC):
    """
    Default bodies of the Decomposer protocol on top of DecomposerLifecycle.

    Subclasses set _TYPE and implement _decompose() and _clear().
    """

    _TYPE: ClassVar[DecomposerType]

    def __init__(self, matrix: ArrayLike | None = None):
        self._lifecycle = DecomposerLifecycle()
        self._clear()
        if matrix is not None:
            self.set_input_matrix(matrix)

    @property
    def decomposer_type(self) -> DecomposerType:
        return self._TYPE

    @property
    def input_matrix(self) -> NDArray[np.floating[Any]] | None:
        return self._lifecycle.input_matrix

    def set_input_matrix(self, matrix: ArrayLike) -> None:
        """
        Provide a new matrix to decompose.

        A private float64 copy is stored; the caller's array is never
        modified. Any previous decomposition is discarded.

        Args:
            matrix: 2D array-like with at least one row and one column

        Raises:
            LockedError: If called while decompose() is running
            ValidationError: If matrix is not numeric
            DimensionError: If matrix is not 2D or is empty
        """
        self._lifecycle.check_not_locked()
        self._lifecycle.set_input(check_matrix(matrix, 'matrix'))
        self._clear()

    @property
    def is_ready(self) -> bool:
        return self._lifecycle.is_ready

    @property
    def is_locked(self) -> bool:
        return self._lifecycle.is_locked

    @property
    def is_decomposition_available(self) -> bool:
        return self._lifecycle.is_available

    @property
    def state(self) -> DecomposerState:
        return self._lifecycle.state

    def decompose(self) -> None:
        """
        Compute and cache the decomposition of the input matrix.

        Raises:
            NotReadyError: If no input matrix has been provided
            LockedError: If a decomposition is already running
            DecomposerError: If the input violates the algorithm's precondition
        """
        with self._lifecycle.decomposing() as matrix:
            self._clear()
            try:
                self._decompose(matrix)
            except BaseException:
                self._clear()
                raise

    @abstractmethod
    def _decompose(self, matrix: NDArray[np.floating[Any]]) -> None:
        """Run the algorithm on the input matrix and cache the factors."""

    @abstractmethod
    def _clear(self) -> None:
        """Drop cached factors."""

    def _require_decomposition(self) -> None:
        self._lifecycle.require_available()

    def _precondition_failed(self, cause: DimensionError) -> DecomposerError:
        """Wrap a shape violation detected by decompose()."""
        error = DecomposerError(
            f"{self._TYPE.name}: {cause}",
            decomposer_type=self._TYPE,
        )
        error.__cause__ = cause
        return error

    @property
    def _shape(self) -> tuple[int, int]:
        rows, columns = self._lifecycle.input_matrix.shape
        return rows, columns

    def __repr__(self) -> str:
        return f"{type(self).__name__}(state={self.state.name})"


def write_out(
    result: NDArray[np.floating[Any]],
    out: NDArray[np.floating[Any]] | None,
    name: str = 'out',
) -> NDArray[np.floating[Any]]:
    """
    Copy a solution into a caller-supplied array when one is given.

    Args:
        result: Freshly computed solution
        out: Destination array with exactly result's shape, or None
        name: Parameter name for error messages

    Returns:
        out when provided, otherwise result

    Raises:
        DimensionError: If out does not have result's shape
        ValidationError: If out is not a writable floating array
    """
    if out is None:
        return result
    if not isinstance(out, np.ndarray) or out.shape != result.shape:
        shape = getattr(out, 'shape', None)
        raise DimensionError(f"{name}: expected shape {result.shape}, got {shape}")
    if not np.issubdtype(out.dtype, np.floating):
        raise ValidationError(f"{name}: expected floating dtype, got {out.dtype}")
    if not out.flags.writeable:
        raise ValidationError(f"{name}: array is read-only")
    out[...] = result
    return out
