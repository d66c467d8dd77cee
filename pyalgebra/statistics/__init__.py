"""
Gaussian statistics built on the decompositions.

    MultivariateNormalDist: pdf, cdf, inverse cdf and Jacobian propagation
    MultivariateGaussianRandomizer: Cholesky-based sampling
"""

from pyalgebra.statistics.gaussian import MultivariateNormalDist, validate_covariance
from pyalgebra.statistics.randomizer import MultivariateGaussianRandomizer

__all__ = [
    "MultivariateNormalDist",
    "MultivariateGaussianRandomizer",
    "validate_covariance",
]
