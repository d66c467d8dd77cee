"""
PyAlgebra: dense linear-algebra decompositions for Python.

Decomposers share a single lifecycle (set input, decompose, query) and
cover LU, Cholesky, QR, economy QR, RQ and SVD, plus in-place Gauss-Jordan
elimination. solve() wraps them in a one-shot API returning a Result.

Submodules:
    decomposition: Decomposers and elimination kernels
    norms: Frobenius, one and infinity norms
    solvers: One-shot linear system solve
    statistics: Multivariate Gaussian built on the decompositions
"""

__version__ = "0.1.0"

from pyalgebra import decomposition
from pyalgebra import statistics
from pyalgebra.decomposition import (
    CholeskyDecomposer,
    DecomposerState,
    DecomposerType,
    EconomyQRDecomposer,
    LUDecomposer,
    QRDecomposer,
    RQDecomposer,
    SingularValueDecomposer,
    gauss_jordan,
    inverse,
)
from pyalgebra.norms import NormType, norm
from pyalgebra.solvers import SolveParams, solve

__all__ = [
    "__version__",
    "decomposition",
    "statistics",
    "DecomposerState",
    "DecomposerType",
    "LUDecomposer",
    "CholeskyDecomposer",
    "QRDecomposer",
    "EconomyQRDecomposer",
    "RQDecomposer",
    "SingularValueDecomposer",
    "gauss_jordan",
    "inverse",
    "NormType",
    "norm",
    "SolveParams",
    "solve",
]
