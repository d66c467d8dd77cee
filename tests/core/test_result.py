"""
Tests for the Result[P] envelope.

Validates:
    - Generic type parameter works with arbitrary payload types
    - Frozen immutability
    - Default factories (warnings, provenance)
    - has_warning() method
    - Provenance metadata contains expected version keys
"""

from dataclasses import FrozenInstanceError, dataclass

import numpy as np
import pytest

import pyalgebra
from pyalgebra.core.result import Result, _default_provenance


@dataclass(frozen=True)
class FakeParams:
    """Minimal payload for testing."""
    value: float


def _result(**overrides):
    fields = dict(
        params=FakeParams(value=1.0),
        info={},
        timing=None,
        backend_name="cpu_lu",
    )
    fields.update(overrides)
    return Result(**fields)


# ═══════════════════════════════════════════════════════════════════════
# Construction and field access
# ═══════════════════════════════════════════════════════════════════════


class TestResultConstruction:

    def test_basic_creation(self):
        result = _result(
            params=FakeParams(value=42.0),
            info={"method": "lu", "shape": (3, 3)},
            timing={"total_seconds": 0.01, "decompose": 0.008},
        )
        assert result.params.value == 42.0
        assert result.info["shape"] == (3, 3)
        assert result.timing["decompose"] == 0.008
        assert result.backend_name == "cpu_lu"

    def test_array_payload(self):
        result = _result(params=np.array([1.0, 2.0]))
        np.testing.assert_array_equal(result.params, [1.0, 2.0])

    def test_timing_none(self):
        assert _result().timing is None


# ═══════════════════════════════════════════════════════════════════════
# Default factories
# ═══════════════════════════════════════════════════════════════════════


class TestDefaults:

    def test_warnings_default_empty(self):
        result = _result()
        assert result.warnings == ()
        assert isinstance(result.warnings, tuple)

    def test_provenance_auto_generated(self):
        provenance = _result().provenance
        assert provenance["pyalgebra_version"] == pyalgebra.__version__
        assert provenance["numpy_version"] == np.__version__
        assert "python_version" in provenance

    def test_provenance_explicit_override(self):
        result = _result(provenance={"custom": "metadata"})
        assert result.provenance == {"custom": "metadata"}


# ═══════════════════════════════════════════════════════════════════════
# Immutability
# ═══════════════════════════════════════════════════════════════════════


class TestImmutability:
    """Result is frozen: no attribute mutation allowed."""

    def test_cannot_set_params(self):
        with pytest.raises(FrozenInstanceError):
            _result().params = FakeParams(value=2.0)

    def test_cannot_set_backend_name(self):
        with pytest.raises(FrozenInstanceError):
            _result().backend_name = "cpu_svd"

    def test_cannot_set_warnings(self):
        with pytest.raises(FrozenInstanceError):
            _result().warnings = ("new warning",)


# ═══════════════════════════════════════════════════════════════════════
# has_warning()
# ═══════════════════════════════════════════════════════════════════════


class TestHasWarning:

    def test_no_warnings_returns_false(self):
        assert _result().has_warning("anything") is False

    def test_substring_match(self):
        result = _result(warnings=("SVD did not converge within 30 iterations",))
        assert result.has_warning("did not converge") is True
        assert result.has_warning("30 iterations") is True
        assert result.has_warning("singular") is False


class TestDefaultProvenance:

    def test_independent_copies(self):
        first = _default_provenance()
        second = _default_provenance()
        assert first is not second
        assert first == second
