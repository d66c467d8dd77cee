"""
Numerical precision constants and scalar helpers.

Provides machine epsilon and the overflow-safe scalar primitives shared by
the decomposition kernels.
"""

import math

import numpy as np


# Machine epsilon for float64
EPSILON_64: float = float(np.finfo(np.float64).eps)  # ~2.22e-16

# Relative epsilon used by the SVD for splitting and convergence tests and
# for its negligible singular value threshold.
SVD_EPSILON: float = 1e-12


def machine_epsilon(dtype: np.dtype | type = np.float64) -> float:
    """
    Get machine epsilon for a given dtype.

    Args:
        dtype: NumPy dtype or type

    Returns:
        Machine epsilon for the dtype
    """
    return float(np.finfo(dtype).eps)


def pythag(a: float, b: float) -> float:
    """
    Compute sqrt(a**2 + b**2) without destructive underflow or overflow.

    Args:
        a: First leg
        b: Second leg

    Returns:
        Length of the hypotenuse
    """
    absa = abs(a)
    absb = abs(b)
    if absa > absb:
        return absa * math.sqrt(1.0 + (absb / absa) ** 2)
    if absb == 0.0:
        return 0.0
    return absb * math.sqrt(1.0 + (absa / absb) ** 2)


def sign(a: float, b: float) -> float:
    """Magnitude of a with the sign of b (b == 0 counts as positive)."""
    return abs(a) if b >= 0.0 else -abs(a)
