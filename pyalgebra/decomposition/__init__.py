"""
Dense matrix decompositions.

Every decomposer shares one lifecycle: provide an input matrix, call
decompose(), then query factors or solve linear systems.

    LUDecomposer: partial-pivoting LU (rows >= columns)
    CholeskyDecomposer: A = L @ L.T for symmetric positive definite A
    QRDecomposer: full Householder QR (rows >= columns)
    EconomyQRDecomposer: compact Householder QR (rows >= columns)
    RQDecomposer: A = R @ Q for any shape
    SingularValueDecomposer: thin SVD for any shape

gauss_jordan() and inverse() are stateless in-place eliminations.
"""

from pyalgebra.decomposition._lifecycle import (
    BaseDecomposer,
    DecomposerLifecycle,
    DecomposerState,
    DecomposerType,
)
from pyalgebra.decomposition.cholesky import CholeskyDecomposer
from pyalgebra.decomposition.economy_qr import EconomyQRDecomposer
from pyalgebra.decomposition.gauss_jordan import gauss_jordan, inverse
from pyalgebra.decomposition.lu import LUDecomposer
from pyalgebra.decomposition.qr import QRDecomposer, householder_qr
from pyalgebra.decomposition.rq import RQDecomposer
from pyalgebra.decomposition.svd import SingularValueDecomposer

__all__ = [
    # Lifecycle
    "BaseDecomposer",
    "DecomposerLifecycle",
    "DecomposerState",
    "DecomposerType",
    # Decomposers
    "LUDecomposer",
    "CholeskyDecomposer",
    "QRDecomposer",
    "EconomyQRDecomposer",
    "RQDecomposer",
    "SingularValueDecomposer",
    # Kernels
    "householder_qr",
    "gauss_jordan",
    "inverse",
]
