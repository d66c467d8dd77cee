"""
Shared compute infrastructure for PyAlgebra.

Submodules:
    precision: Numerical precision constants and scalar helpers
    timing: Execution timing utilities
"""

from pyalgebra.core.compute.precision import (
    EPSILON_64,
    SVD_EPSILON,
    machine_epsilon,
    pythag,
    sign,
)
from pyalgebra.core.compute.timing import Timer, timed

__all__ = [
    # Precision
    "EPSILON_64",
    "SVD_EPSILON",
    "machine_epsilon",
    "pythag",
    "sign",
    # Timing
    "Timer",
    "timed",
]
