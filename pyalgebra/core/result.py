"""
Generic result container for PyAlgebra entry points.

The Result class provides a standardized envelope for one-shot computations
such as pyalgebra.solvers.solve(). Decomposer objects keep their own state;
Result is what the functional API hands back.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (method, rank, convergence)
    - timing is optional (don't burden unit tests)
    - provenance records library versions for reproducibility
    - Immutable (frozen=True) for reproducibility
"""

import platform
from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

import numpy as np

P = TypeVar('P')  # Parameter payload type


def _default_provenance() -> dict[str, str]:
    """Versions of the libraries that produced a result."""
    from pyalgebra import __version__

    return {
        'pyalgebra_version': __version__,
        'numpy_version': np.__version__,
        'python_version': platform.python_version(),
    }


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for linear-algebra computations.

    Type Parameters:
        P: The computation-specific parameter payload type

    Attributes:
        params: Computation-specific payload (solution, residual, ...)
        info: Structured metadata (method, decomposer type, rank, ...)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the algorithm that produced this result
        warnings: Non-fatal issues encountered during computation
        provenance: Library versions used for the computation

    Examples:
        >>> Result(
        ...     params=SolveParams(solution=x, residual_norm=1e-15),
        ...     info={'method': 'lu', 'shape': (3, 3)},
        ...     timing={'total_seconds': 0.001, 'decompose': 0.0007},
        ...     backend_name='cpu_lu'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    provenance: dict[str, str] = field(default_factory=_default_provenance)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
