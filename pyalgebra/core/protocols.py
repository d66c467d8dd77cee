"""
Core protocols for PyAlgebra.

These define structural interfaces that decomposers must satisfy.
We use Protocol (structural typing) rather than ABC (nominal typing) so that
calling code can accept any decomposer without depending on a base class.

Design Principles:
    - Minimal contracts: only the shared lifecycle is prescribed
    - Dispatch through decomposer_type, never through isinstance()
    - Each algorithm adds its own factor getters and solvers on top
"""

from __future__ import annotations

from typing import Protocol, Any, runtime_checkable, TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

if TYPE_CHECKING:
    from pyalgebra.decomposition._lifecycle import DecomposerState, DecomposerType


@runtime_checkable
class Decomposer(Protocol):
    """
    Minimal protocol shared by every matrix decomposer.

    State machine:
        NOT_READY --set_input_matrix--> READY_NOT_DECOMPOSED
        READY_NOT_DECOMPOSED --decompose (transiently LOCKED)--> DECOMPOSED
        DECOMPOSED --set_input_matrix--> READY_NOT_DECOMPOSED

    Instances are not thread-safe. The LOCKED state is a cooperative guard
    against re-entrant use, not a mutex; confine each instance to one owner.
    """

    @property
    def decomposer_type(self) -> DecomposerType:
        """Stable tag identifying the algorithm."""
        ...

    @property
    def input_matrix(self) -> NDArray[np.floating[Any]] | None:
        """Matrix to be decomposed, or None."""
        ...

    def set_input_matrix(self, matrix: ArrayLike) -> None:
        """
        Provide a new matrix, invalidating any previous decomposition.

        Raises:
            LockedError: If called while decompose() is running
        """
        ...

    @property
    def is_ready(self) -> bool:
        """True when an input matrix has been provided."""
        ...

    @property
    def is_locked(self) -> bool:
        """True only while decompose() is running."""
        ...

    @property
    def is_decomposition_available(self) -> bool:
        """True when decompose() completed since the last input change."""
        ...

    @property
    def state(self) -> DecomposerState:
        """Current lifecycle state."""
        ...

    def decompose(self) -> None:
        """
        Compute and cache the decomposition of the input matrix.

        Raises:
            NotReadyError: If no input matrix has been provided
            LockedError: If a decomposition is already running
            DecomposerError: If the input violates the algorithm's precondition
        """
        ...
