"""
Tests for the shared decomposer lifecycle.

Validates, for every decomposer:
    - NOT_READY -> READY_NOT_DECOMPOSED -> DECOMPOSED transitions
    - New input invalidates the previous decomposition
    - Lifecycle errors (not ready, not available, locked)
    - Protocol conformance and input copying
"""

import numpy as np
import pytest

from pyalgebra.core.exceptions import (
    DecomposerError,
    DimensionError,
    LockedError,
    NotAvailableError,
    NotReadyError,
    ValidationError,
)
from pyalgebra.core.protocols import Decomposer
from pyalgebra.decomposition import (
    CholeskyDecomposer,
    DecomposerLifecycle,
    DecomposerState,
    DecomposerType,
    EconomyQRDecomposer,
    LUDecomposer,
    QRDecomposer,
    RQDecomposer,
    SingularValueDecomposer,
)


DECOMPOSERS = [
    (LUDecomposer, DecomposerType.LU_DECOMPOSITION),
    (CholeskyDecomposer, DecomposerType.CHOLESKY_DECOMPOSITION),
    (QRDecomposer, DecomposerType.QR_DECOMPOSITION),
    (EconomyQRDecomposer, DecomposerType.QR_ECONOMY_DECOMPOSITION),
    (RQDecomposer, DecomposerType.RQ_DECOMPOSITION),
    (SingularValueDecomposer, DecomposerType.SINGULAR_VALUE_DECOMPOSITION),
]

IDS = [cls.__name__ for cls, _ in DECOMPOSERS]


# ═══════════════════════════════════════════════════════════════════════
# State machine
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize("cls, kind", DECOMPOSERS, ids=IDS)
class TestStateMachine:

    def test_initial_state(self, cls, kind):
        decomposer = cls()
        assert decomposer.state is DecomposerState.NOT_READY
        assert not decomposer.is_ready
        assert not decomposer.is_locked
        assert not decomposer.is_decomposition_available
        assert decomposer.input_matrix is None
        assert decomposer.decomposer_type is kind

    def test_constructor_with_matrix(self, cls, kind, spd_matrix):
        decomposer = cls(spd_matrix)
        assert decomposer.state is DecomposerState.READY_NOT_DECOMPOSED
        assert decomposer.is_ready

    def test_decompose_transitions(self, cls, kind, spd_matrix):
        decomposer = cls()
        decomposer.set_input_matrix(spd_matrix)
        decomposer.decompose()
        assert decomposer.state is DecomposerState.DECOMPOSED
        assert decomposer.is_decomposition_available
        assert not decomposer.is_locked

    def test_new_input_invalidates(self, cls, kind, spd_matrix):
        decomposer = cls(spd_matrix)
        decomposer.decompose()
        decomposer.set_input_matrix(2.0 * spd_matrix)
        assert decomposer.state is DecomposerState.READY_NOT_DECOMPOSED
        assert not decomposer.is_decomposition_available

    def test_decompose_without_input(self, cls, kind):
        with pytest.raises(NotReadyError):
            cls().decompose()

    def test_input_is_copied(self, cls, kind, spd_matrix):
        original = spd_matrix.copy()
        decomposer = cls(spd_matrix)
        spd_matrix[0, 0] = 1e6
        np.testing.assert_array_equal(decomposer.input_matrix, original)

    def test_rejects_vector_input(self, cls, kind):
        with pytest.raises(DimensionError):
            cls(np.ones(3))

    def test_rejects_non_numeric_input(self, cls, kind):
        with pytest.raises(ValidationError):
            cls([["a", "b"], ["c", "d"]])

    def test_satisfies_protocol(self, cls, kind):
        assert isinstance(cls(), Decomposer)

    def test_repr_shows_state(self, cls, kind):
        assert "NOT_READY" in repr(cls())


# ═══════════════════════════════════════════════════════════════════════
# Locking
# ═══════════════════════════════════════════════════════════════════════


class TestLocking:

    def test_locked_during_decompose(self, monkeypatch, spd_matrix):
        decomposer = LUDecomposer(spd_matrix)
        seen = {}

        def probe(matrix):
            seen['state'] = decomposer.state
            seen['locked'] = decomposer.is_locked
            with pytest.raises(LockedError):
                decomposer.set_input_matrix(matrix)
            with pytest.raises(LockedError):
                decomposer.decompose()

        monkeypatch.setattr(decomposer, '_decompose', probe)
        decomposer.decompose()

        assert seen == {'state': DecomposerState.LOCKED, 'locked': True}
        assert not decomposer.is_locked

    def test_svd_max_iterations_locked(self, monkeypatch, spd_matrix):
        decomposer = SingularValueDecomposer(spd_matrix)

        def probe(matrix):
            with pytest.raises(LockedError):
                decomposer.max_iterations = 10

        monkeypatch.setattr(decomposer, '_decompose', probe)
        decomposer.decompose()

    def test_failure_releases_lock(self):
        decomposer = LUDecomposer(np.ones((2, 3)))
        with pytest.raises(DecomposerError):
            decomposer.decompose()
        assert not decomposer.is_locked
        assert decomposer.state is DecomposerState.READY_NOT_DECOMPOSED
        with pytest.raises(NotAvailableError):
            decomposer.U


class TestDecomposerLifecycle:
    """The state holder on its own."""

    def test_decomposing_success(self):
        lifecycle = DecomposerLifecycle()
        lifecycle.set_input(np.eye(2))
        with lifecycle.decomposing() as matrix:
            assert lifecycle.state is DecomposerState.LOCKED
            np.testing.assert_array_equal(matrix, np.eye(2))
        assert lifecycle.is_available

    def test_decomposing_failure(self):
        lifecycle = DecomposerLifecycle()
        lifecycle.set_input(np.eye(2))
        with pytest.raises(ZeroDivisionError):
            with lifecycle.decomposing():
                1 / 0
        assert not lifecycle.is_locked
        assert not lifecycle.is_available

    def test_require_available(self):
        lifecycle = DecomposerLifecycle()
        with pytest.raises(NotAvailableError, match="decompose"):
            lifecycle.require_available()


# ═══════════════════════════════════════════════════════════════════════
# Precondition failures
# ═══════════════════════════════════════════════════════════════════════


class TestPreconditions:

    @pytest.mark.parametrize("cls", [LUDecomposer, QRDecomposer, EconomyQRDecomposer])
    def test_wide_input_rejected(self, cls, wide_matrix):
        decomposer = cls(wide_matrix)
        with pytest.raises(DecomposerError) as excinfo:
            decomposer.decompose()
        assert isinstance(excinfo.value.__cause__, DimensionError)
        assert excinfo.value.decomposer_type is decomposer.decomposer_type

    def test_cholesky_non_square_rejected(self, tall_matrix):
        with pytest.raises(DecomposerError, match="square"):
            CholeskyDecomposer(tall_matrix).decompose()

    @pytest.mark.parametrize("cls", [RQDecomposer, SingularValueDecomposer])
    def test_any_shape_accepted(self, cls, wide_matrix, tall_matrix):
        for matrix in (wide_matrix, tall_matrix):
            decomposer = cls(matrix)
            decomposer.decompose()
            assert decomposer.is_decomposition_available
