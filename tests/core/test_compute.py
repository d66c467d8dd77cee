"""
Tests for precision helpers and timing utilities.
"""

import math

import numpy as np
import pytest

from pyalgebra.core.compute import EPSILON_64, Timer, machine_epsilon, pythag, sign, timed


class TestPrecision:

    def test_epsilon_64(self):
        assert EPSILON_64 == np.finfo(np.float64).eps

    def test_machine_epsilon_float32(self):
        assert machine_epsilon(np.float32) == pytest.approx(np.finfo(np.float32).eps)

    @pytest.mark.parametrize("a, b", [(3.0, 4.0), (4.0, 3.0), (-5.0, 12.0), (0.0, 2.0)])
    def test_pythag(self, a, b):
        assert pythag(a, b) == pytest.approx(math.hypot(a, b))

    def test_pythag_zero(self):
        assert pythag(0.0, 0.0) == 0.0

    def test_pythag_no_overflow(self):
        assert pythag(1e200, 1e200) == pytest.approx(math.sqrt(2.0) * 1e200)

    def test_sign(self):
        assert sign(3.0, -1.0) == -3.0
        assert sign(-3.0, 2.0) == 3.0
        assert sign(-3.0, 0.0) == 3.0


class TestTimer:

    def test_sections_accumulate(self):
        timer = Timer()
        timer.start()
        with timer.section('solve'):
            pass
        with timer.section('solve'):
            pass
        timer.stop()
        result = timer.result()
        assert set(result) == {'total_seconds', 'solve'}
        assert result['solve'] <= result['total_seconds']

    def test_result_before_stop(self):
        timer = Timer()
        timer.start()
        with pytest.raises(RuntimeError, match="before stop"):
            timer.result()

    def test_stop_before_start(self):
        with pytest.raises(RuntimeError, match="before start"):
            Timer().stop()

    def test_timed(self):
        with timed() as timer:
            pass
        assert timer.result()['total_seconds'] >= 0.0
