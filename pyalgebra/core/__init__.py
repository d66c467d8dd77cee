"""
Core infrastructure for PyAlgebra.

This module provides shared abstractions and utilities used by the
decomposition, solver and statistics modules.

Key components:
    protocols: Decomposer protocol
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Precision constants and timing
"""

from pyalgebra.core.protocols import Decomposer
from pyalgebra.core.result import Result
from pyalgebra.core.exceptions import (
    PyAlgebraError,
    ValidationError,
    DimensionError,
    LifecycleError,
    NotReadyError,
    NotAvailableError,
    LockedError,
    DecomposerError,
    NumericalError,
    SingularMatrixError,
    RankDeficientMatrixError,
    NotPositiveDefiniteError,
    ConvergenceError,
    InvalidCovarianceMatrixError,
)

__all__ = [
    # Protocols
    "Decomposer",
    # Result
    "Result",
    # Exceptions
    "PyAlgebraError",
    "ValidationError",
    "DimensionError",
    "LifecycleError",
    "NotReadyError",
    "NotAvailableError",
    "LockedError",
    "DecomposerError",
    "NumericalError",
    "SingularMatrixError",
    "RankDeficientMatrixError",
    "NotPositiveDefiniteError",
    "ConvergenceError",
    "InvalidCovarianceMatrixError",
]
